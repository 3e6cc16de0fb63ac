# shopflow/cli/__main__.py
import sys, json
import logging
from pathlib import Path

from shopflow.core.job_priority import sort_jobs
from shopflow.core.labor import compute_default_labor_hours
from shopflow.server.schemas.inspection import InspectionSection
from shopflow.server.schemas.jobs import JobInput
from shopflow.server.settings.config import settings
from shopflow.services.quote_service import generate_quote_from_inspection

USAGE = """Usage:
  python -m shopflow.cli sort <jobs.json>
  python -m shopflow.cli labor <inspection.json> [--vehicle=truck]
  python -m shopflow.cli quote <inspection.json> [--rate=<default_labor_rate>] [--tax=0.25] [--vehicle=car]

<jobs.json>        list of jobs, or {"jobs": [...]}
<inspection.json>  list of sections, or {"sections": [...], "vehicle_type": ...}

Examples:
  python -m shopflow.cli sort jobs.json
  python -m shopflow.cli quote inspection.json --rate=95 --tax=0.25
"""

def _load_json(p: str):
    try:
        return json.loads(Path(p).read_text(encoding="utf-8"))
    except Exception as e:
        print(f"Error reading JSON '{p}': {e}", file=sys.stderr)
        sys.exit(2)

def _float_opt(raw: str, name: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        value = float("nan")
    # rates and tax are never negative
    if value != value or value < 0:
        print(f"Invalid value for --{name}: {raw}", file=sys.stderr)
        sys.exit(2)
    return value

def _sections(data):
    raw = data.get("sections", []) if isinstance(data, dict) else data
    return [InspectionSection.model_validate(s) for s in raw or []]

def _dump(obj) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))

def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    if len(argv) < 2:
        print(USAGE, file=sys.stderr); sys.exit(1)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    cmd = argv[0].lower()
    data = _load_json(argv[1])

    # parse optional args (order-agnostic)
    vehicle = data.get("vehicle_type") if isinstance(data, dict) else None
    rate = settings.default_labor_rate
    tax = 0.0
    for arg in argv[2:]:
        if arg.startswith("--vehicle="):
            vehicle = arg.split("=", 1)[1]
        elif arg.startswith("--rate="):
            rate = _float_opt(arg.split("=", 1)[1], "rate")
        elif arg.startswith("--tax="):
            tax = _float_opt(arg.split("=", 1)[1], "tax")

    if cmd == "sort":
        raw = data.get("jobs", []) if isinstance(data, dict) else data
        jobs = sort_jobs([JobInput.model_validate(j) for j in raw or []])
        _dump([j.model_dump(exclude_none=True) for j in jobs])
        return

    if cmd == "labor":
        hours = compute_default_labor_hours(vehicle, _sections(data))
        _dump({"vehicle_type": vehicle, "hours": hours})
        return

    if cmd == "quote":
        result = generate_quote_from_inspection(
            sections=_sections(data),
            vehicle_type=vehicle,
            labor_rate=rate,
            tax_rate=tax,
        )
        result["lines"] = [l.model_dump() for l in result["lines"]]
        _dump(result)
        return

    print(USAGE, file=sys.stderr); sys.exit(1)

if __name__ == "__main__":
    main()
