import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from shopflow.core.errors import NotFoundError, PersistenceError, ValidationError
from shopflow.server.models import WorkOrderLine
from shopflow.server.schemas.jobs import JobInput
from shopflow.services.work_order_lines import (
    list_work_order_lines,
    update_line_status,
    write_work_order_lines,
)


def _jobs():
    return [
        JobInput(complaint="Check engine light", job_type="diagnosis"),
        JobInput(complaint="Front brake pads (2mm)", job_type="inspection-fail", labor_hours=1.5),
        JobInput(complaint="Wiper blades", job_type="repair", cause="torn"),
    ]


def _count(session):
    return len(session.exec(select(WorkOrderLine)).all())


def test_writes_one_line_per_job_in_order(session):
    lines = write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs())
    assert [l.complaint for l in lines] == ["Check engine light", "Front brake pads (2mm)", "Wiper blades"]
    assert len({l.id for l in lines}) == 3
    for line in lines:
        assert line.work_order_id == "WO-1" and line.vehicle_id == "V-1"
        assert line.status == "awaiting"
        assert line.punched_in_at is None and line.punched_out_at is None
        assert line.hold_reason is None and line.assigned_tech_id is None
    assert lines[1].labor_time == 1.5
    assert lines[2].cause == "torn"
    assert [l.id for l in list_work_order_lines(session, "WO-1")] == [l.id for l in lines]


def test_empty_batch_writes_nothing(session):
    assert write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=[]) == []
    assert _count(session) == 0


@pytest.mark.parametrize("job", [
    JobInput(complaint="   ", job_type="repair"),
    JobInput(complaint="Noise", job_type=None),
    JobInput(complaint="Noise", job_type="detailing"),
])
def test_bad_job_rejects_whole_batch(session, job):
    with pytest.raises(ValidationError) as exc:
        write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs() + [job])
    assert exc.value.details["problems"][0]["index"] == 3
    assert _count(session) == 0


def test_missing_ids_rejected(session):
    with pytest.raises(ValidationError):
        write_work_order_lines(session=session, work_order_id="", vehicle_id="V-1", jobs=_jobs())
    with pytest.raises(ValidationError):
        write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id=" ", jobs=_jobs())


def test_idempotent_replay(session):
    first = write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs(), idempotency_key="k1")
    again = write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs(), idempotency_key="k1")
    assert [l.id for l in again] == [l.id for l in first]
    assert _count(session) == 3

    write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs(), idempotency_key="k2")
    assert _count(session) == 6


def test_store_failure_raises_persistence_error(session, monkeypatch):
    def boom():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(session, "commit", boom)
    with pytest.raises(PersistenceError) as exc:
        write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs())
    assert exc.value.kind.value == "dependency"
    assert exc.value.details == {"work_order_id": "WO-1", "batch_size": 3}


def test_status_flow(session):
    line = write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs()[:1])[0]

    line = update_line_status(session=session, line_id=line.id, status="in_progress")
    first_punch = line.punched_in_at
    assert first_punch is not None

    line = update_line_status(session=session, line_id=line.id, status="on_hold", hold_reason="waiting on parts")
    assert line.hold_reason == "waiting on parts"

    line = update_line_status(session=session, line_id=line.id, status="in_progress")
    assert line.hold_reason is None
    assert line.punched_in_at == first_punch

    line = update_line_status(session=session, line_id=line.id, status="completed")
    assert line.punched_out_at is not None


def test_invalid_transitions(session):
    line = write_work_order_lines(session=session, work_order_id="WO-1", vehicle_id="V-1", jobs=_jobs()[:1])[0]
    with pytest.raises(ValidationError):
        update_line_status(session=session, line_id=line.id, status="completed")
    with pytest.raises(ValidationError):
        update_line_status(session=session, line_id=line.id, status="exploded")
    # same status is a no-op
    assert update_line_status(session=session, line_id=line.id, status="awaiting").status == "awaiting"


def test_unknown_line(session):
    with pytest.raises(NotFoundError):
        update_line_status(session=session, line_id="nope", status="in_progress")
