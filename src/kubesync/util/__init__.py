from .ids import new_plan_id, new_uuid
from .time import now_utc, to_rfc3339

__all__ = [
    "new_uuid",
    "new_plan_id",
    "now_utc",
    "to_rfc3339",
]
