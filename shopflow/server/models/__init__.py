from .work_order import WorkOrderLine, PartsRequest
from .inspection import Inspection

__all_models = [WorkOrderLine, PartsRequest, Inspection]
