from shopflow.core.inspection_items import apply_item_update, apply_session_update
from shopflow.server.schemas.inspection import InspectionItem, InspectionSection


def test_photos_dropped_when_status_not_actionable():
    item = InspectionItem(item="LF Brake Pad", status="fail", photo_urls=["a.jpg"])
    assert item.photo_urls == ["a.jpg"]
    updated = apply_item_update(item, status="ok")
    assert updated.photo_urls == []
    # original untouched
    assert item.photo_urls == ["a.jpg"]


def test_photos_kept_for_recommend():
    item = InspectionItem(item="Wiper", status="fail", photo_urls=["a.jpg"])
    assert apply_item_update(item, status="recommend").photo_urls == ["a.jpg"]


def test_photos_on_unmarked_item_are_ignored():
    assert InspectionItem(item="x", photoUrls=["a.jpg"]).photo_urls == []


def test_notes_unset_vs_cleared():
    item = InspectionItem(item="x", status="fail", notes="worn")
    assert apply_item_update(item, value=2).notes == "worn"
    assert apply_item_update(item, notes=None).notes is None


def test_status_normalized():
    assert InspectionItem(item="x", status=" FAIL ").status == "fail"
    assert InspectionItem(item="x", status=None).status == "unmarked"
    assert InspectionItem(item="x", status="").status == "unmarked"


def test_session_update_clamps_indices():
    sections = [
        InspectionSection(title="A", items=[InspectionItem(item="a1"), InspectionItem(item="a2")]),
        {"title": "B", "items": [{"item": "b1"}]},
    ]
    out = apply_session_update(sections, 99, 99, status="fail", notes="broken")
    assert out[1].items[0].status == "fail"
    assert out[1].items[0].notes == "broken"

    out = apply_session_update(sections, -3, 1, status="recommend")
    assert out[0].items[1].status == "recommend"
    assert sections[0].items[1].status == "unmarked"


def test_session_update_on_empty_inputs():
    assert apply_session_update([], 0, 0, status="fail") == []
    empty = [InspectionSection(title="A", items=[])]
    assert apply_session_update(empty, 0, 0, status="fail")[0].items == []
