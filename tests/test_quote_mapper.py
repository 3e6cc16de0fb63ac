from shopflow.core.quote_mapper import DEFAULT_LABOR_HOURS, map_inspection_to_quote
from shopflow.server.schemas.inspection import InspectionItem, InspectionSection


def _sections():
    return [
        InspectionSection(title="Brakes", items=[
            InspectionItem(item="LF Brake Pad", status="fail", notes="pads worn"),
            InspectionItem(item="RF Brake Pad", status="ok"),
        ]),
        InspectionSection(title="Other", items=[
            InspectionItem(name="Wiper blades", status="recommend"),
            InspectionItem(item="Horn", status="na"),
            InspectionItem(item="Lights", status="unmarked"),
        ]),
    ]


def test_only_fail_and_recommend_become_lines():
    lines = map_inspection_to_quote(_sections())
    assert [l.status for l in lines] == ["fail", "recommend"]


def test_line_fields():
    fail, rec = map_inspection_to_quote(_sections())
    assert fail.description == "pads worn"
    assert fail.inspection_item == "LF Brake Pad"
    assert rec.description == "Wiper blades"
    for line in (fail, rec):
        assert line.labor_hours == DEFAULT_LABOR_HOURS
        assert line.price == 0
        assert line.part.name == "" and line.part.price == 0
        assert line.source == "inspection"


def test_four_item_inspection():
    items = [
        InspectionItem(item="Horn", status="ok"),
        InspectionItem(item="LF Brake Pad", status="fail", notes="pads worn"),
        InspectionItem(item="Spare tire", status="na"),
        InspectionItem(item="Wiper blades", status="recommend"),
    ]
    lines = map_inspection_to_quote(items)
    assert len(lines) == 2
    assert lines[0].description == "pads worn"
    assert lines[0].status == "fail"
    assert (lines[1].description, lines[1].status) == ("Wiper blades", "recommend")


def test_same_inspection_same_content():
    a = map_inspection_to_quote(_sections())
    b = map_inspection_to_quote(_sections())
    assert [l.model_dump(exclude={"id"}) for l in a] == [l.model_dump(exclude={"id"}) for l in b]


def test_ids_are_fresh_each_time():
    a = map_inspection_to_quote(_sections())
    b = map_inspection_to_quote(_sections())
    ids = [l.id for l in a + b]
    assert len(set(ids)) == len(ids)


def test_empty_and_all_ok():
    assert map_inspection_to_quote([]) == []
    assert map_inspection_to_quote([InspectionItem(item="Horn", status="ok")]) == []


def test_flat_items_and_raw_dicts():
    raw = [{"item": "Battery", "status": "FAIL", "note": "weak"}, {"title": "s", "items": [{"name": "Belt", "status": "recommend"}]}]
    lines = map_inspection_to_quote(raw)
    assert [l.description for l in lines] == ["weak", "Belt"]


def test_labor_hours_number_and_callable():
    assert {l.labor_hours for l in map_inspection_to_quote(_sections(), labor_hours=1.25)} == {1.25}

    def per_item(item):
        return 2.0 if item.status == "fail" else None

    fail, rec = map_inspection_to_quote(_sections(), labor_hours=per_item)
    assert fail.labor_hours == 2.0
    assert rec.labor_hours == DEFAULT_LABOR_HOURS
