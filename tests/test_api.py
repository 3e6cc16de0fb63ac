from fastapi.testclient import TestClient

from shopflow.server.main import app
from shopflow.server.settings.config import settings

INSPECTION = {
    "vehicle_type": "truck",
    "sections": [
        {"title": "Corner Grid (Air)", "items": [
            {"item": "Steer 1 Left Lining/Shoe", "status": "fail", "value": 3, "unit": "mm", "photoUrls": ["p.jpg"]},
            {"item": "Drive 1 Left Lining/Shoe", "status": "ok", "photoUrls": ["q.jpg"]},
            {"item": "Drive 2 Left Lining/Shoe", "status": "recommend", "notes": "glazed"},
        ]},
    ],
}


def test_health_is_open():
    r = TestClient(app).get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_api_key_required():
    r = TestClient(app).post("/jobs/sort", json={"jobs": []})
    assert r.status_code == 401


def test_debug_routes_lists_endpoints(client):
    paths = {r["path"] for r in client.get("/__debug/routes").json()}
    assert "/work-orders/{work_order_id}/lines" in paths
    assert "/inspections/{inspection_id}/import-jobs" in paths


def test_sort_jobs(client):
    r = client.post("/jobs/sort", json={"jobs": [
        {"complaint": "wipers", "jobType": "repair"},
        {"complaint": "odd", "job_type": "detailing"},
        {"complaint": "cel", "job_type": "diagnosis"},
    ]})
    assert r.status_code == 200
    assert [j["complaint"] for j in r.json()["jobs"]] == ["cel", "wipers", "odd"]
    assert r.json()["jobs"][0]["job_type"] == "diagnosis"


def test_default_labor(client):
    r = client.post("/labor/default", json=INSPECTION)
    assert r.json() == {"hours": 3.0, "source": "default"}


def test_estimate_labor_uses_ai(client, fake_ai):
    fake_ai.hours = 4.0
    r = client.post("/labor/estimate", json={"complaint": "no start", "job_type": "diagnosis", "vehicle_type": "car"})
    assert r.json() == {"hours": 4.0, "source": "ai"}


def test_estimate_labor_falls_back(client, fake_ai):
    fake_ai.hours = None
    r = client.post("/labor/estimate", json={"complaint": "no start", "vehicle_type": "car"})
    assert r.json() == {"hours": 1.5, "source": "default"}


def test_quote_from_inspection(client):
    r = client.post("/quotes/from-inspection", json={**INSPECTION, "labor_rate": 100, "tax_rate": 0.1})
    assert r.status_code == 200
    body = r.json()
    assert [l["status"] for l in body["lines"]] == ["fail", "recommend"]
    assert body["lines"][1]["description"] == "glazed"
    assert body["lines"][0]["price"] == 50.0
    assert body["totals"]["total"] == 110.0
    assert body["visit_labor_hours"] == 3.0
    assert body["summary"].startswith("Inspection found 1 failed and 1 recommended")


def test_quote_without_rate_uses_default_labor_rate(client):
    r = client.post("/quotes/from-inspection", json={"items": [{"name": "Battery", "status": "fail"}]})
    body = r.json()
    assert len(body["lines"]) == 1
    assert body["lines"][0]["labor_hours"] == 0.5
    assert body["totals"]["labor_total"] == round(0.5 * settings.default_labor_rate, 2)
    assert body["lines"][0]["price"] == round(0.5 * settings.default_labor_rate, 2)


def test_write_lines_and_status(client):
    r = client.post("/work-orders/WO-9/lines", json={"vehicle_id": "V-9", "jobs": [
        {"complaint": "wipers", "job_type": "repair"},
        {"complaint": "misfire", "job_type": "diagnosis"},
    ]})
    assert r.status_code == 201
    lines = r.json()
    assert [l["job_type"] for l in lines] == ["diagnosis", "repair"]
    assert all(l["status"] == "awaiting" for l in lines)

    r = client.patch(f"/work-orders/lines/{lines[0]['id']}/status", json={"status": "in_progress"})
    assert r.status_code == 200
    assert r.json()["punched_in_at"] is not None

    assert len(client.get("/work-orders/WO-9/lines").json()) == 2


def test_write_lines_idempotency_header(client):
    body = {"vehicle_id": "V-9", "jobs": [{"complaint": "wipers", "job_type": "repair"}]}
    first = client.post("/work-orders/WO-9/lines", json=body, headers={"Idempotency-Key": "abc"}).json()
    again = client.post("/work-orders/WO-9/lines", json=body, headers={"Idempotency-Key": "abc"}).json()
    assert [l["id"] for l in again] == [l["id"] for l in first]
    assert len(client.get("/work-orders/WO-9/lines").json()) == 1


def test_error_mapping(client):
    r = client.post("/work-orders/WO-9/lines", json={"vehicle_id": "V-9", "jobs": [{"complaint": "", "job_type": "repair"}]})
    assert r.status_code == 400
    assert r.json()["error"] == "validation"

    r = client.patch("/work-orders/lines/nope/status", json={"status": "in_progress"})
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_inspection_upsert_and_import(client):
    r = client.put("/inspections/insp-7", json=INSPECTION)
    assert r.status_code == 200
    items = r.json()["sections"][0]["items"]
    assert items[0]["photo_urls"] == ["p.jpg"]
    assert items[1]["photo_urls"] == []

    r = client.post(
        "/inspections/insp-7/import-jobs",
        json={"work_order_id": "WO-7", "vehicle_id": "V-7"},
        headers={"X-User-Id": "tech-1"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["inserted_count"] == 2
    assert [l["job_type"] for l in body["lines"]] == ["inspection-fail", "repair"]
    assert [l["labor_time"] for l in body["lines"]] == [3.0, 3.0]
    assert body["parts_requests_count"] == 0


def test_import_unknown_inspection(client):
    r = client.post("/inspections/missing/import-jobs", json={"work_order_id": "WO-7", "vehicle_id": "V-7"})
    assert r.status_code == 404


def test_inspection_session_edits(client, session_cache):
    client.put("/inspections/insp-8", json=INSPECTION)

    r = client.patch("/inspections/insp-8/session", json={"section_index": 0, "item_index": 0, "status": "ok"})
    assert r.status_code == 200
    item = r.json()["sections"][0]["items"][0]
    assert item["status"] == "ok"
    assert item["photo_urls"] == []
    assert session_cache.get("insp-8") is not None

    # stored inspection is unchanged until the next PUT
    stored = client.get("/inspections/insp-8").json()
    assert stored["sections"][0]["items"][0]["status"] == "fail"
    assert client.get("/inspections/insp-8/session").json()["sections"][0]["items"][0]["status"] == "ok"

    client.put("/inspections/insp-8", json=INSPECTION)
    assert session_cache.get("insp-8") is None


def test_inspection_template(client):
    r = client.post("/inspections/template", json={"vehicle_type": "bus", "selections": {"Oil Change": ["Replace oil filter"]}})
    assert r.status_code == 200
    titles = [s["title"] for s in r.json()]
    assert titles == ["Corner Grid (Air)", "Tire Grid", "Oil Change"]


def test_generate_inspection(client, fake_ai):
    fake_ai.sections = [{"title": "Lights", "items": [{"item": "Headlamps"}]}]
    r = client.post("/inspections/generate", json={"prompt": "city bus"})
    assert r.json()[0]["title"] == "Lights"
    assert fake_ai.prompts == ["city bus"]
