from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from halltider.errors import TimeParseError
from halltider.models import ArrivalRecord


# The deployment host keeps its clock two hours behind Stockholm local time,
# which is what ResRobot reports scheduled times in.
DEPLOYMENT_CLOCK_OFFSET = timedelta(hours=2)

SCHEDULE_FORMATS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M")


def parse_scheduled(record: ArrivalRecord) -> datetime:
    stamp = f"{record.date}T{record.time}"
    for fmt in SCHEDULE_FORMATS:
        try:
            return datetime.strptime(stamp, fmt)
        except ValueError:
            continue
    raise TimeParseError(
        f"Cannot parse scheduled time {stamp!r} for line {record.transport_number or '?'}."
    )


def adjusted_now(now: Optional[datetime] = None) -> datetime:
    current = now if now is not None else datetime.now()
    return current + DEPLOYMENT_CLOCK_OFFSET


def minutes_until(scheduled: datetime, reference: datetime) -> int:
    """Whole minutes from ``reference`` to ``scheduled``, rounded up."""

    remaining = (scheduled - reference).total_seconds() / 60
    return math.ceil(remaining)
