from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from halltider.countdown import adjusted_now, minutes_until, parse_scheduled
from halltider.directions import route_for_origin
from halltider.errors import TimeParseError
from halltider.models import ArrivalRecord, ClassifiedResult


IN_TO_CITY_HEADER = "Bussar in mot stan:"
OUT_OF_CITY_HEADER = "Bussar ut från stan:"

COLUMNS = ("Linje:", "Destination:", "Ankomst:", "Om:")
COLUMN_WIDTHS = (8, 20, 10)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardRow:
    line: str
    destination: str
    scheduled: str
    minutes_left: int


def schedule_rows(
    records: Iterable[ArrivalRecord],
    reference: datetime,
    strict: bool = True,
) -> List[BoardRow]:
    """Turn classified records into display rows.

    With ``strict`` a record whose date or time cannot be parsed raises
    ``TimeParseError``; otherwise it is logged and left off the board.
    """

    rows: List[BoardRow] = []
    for record in records:
        route = route_for_origin(record.origin)
        if route is None:
            logger.debug("No destination label for origin %r; skipping.", record.origin)
            continue
        try:
            scheduled = parse_scheduled(record)
        except TimeParseError as exc:
            if strict:
                raise
            logger.error("Skipping arrival: %s", exc)
            continue
        rows.append(
            BoardRow(
                line=record.transport_number,
                destination=route.destination_label,
                scheduled=record.time,
                minutes_left=minutes_until(scheduled, reference),
            )
        )
    return rows


def _format_columns(values: Sequence[str]) -> str:
    padded = [value.ljust(width) for value, width in zip(values, COLUMN_WIDTHS)]
    return "".join(padded) + values[-1]


def _render_section(header: str, rows: Sequence[BoardRow]) -> List[str]:
    lines = [header, "", _format_columns(COLUMNS)]
    for row in rows:
        lines.append(
            _format_columns(
                (row.line, row.destination, row.scheduled, f"{row.minutes_left}m")
            )
        )
    return lines


def render_board(
    result: ClassifiedResult,
    now: Optional[datetime] = None,
    strict: bool = True,
) -> str:
    reference = adjusted_now(now)
    output_lines = _render_section(
        IN_TO_CITY_HEADER,
        schedule_rows(result.arrivals_in_to_city, reference, strict=strict),
    )
    output_lines.append("")
    output_lines.extend(
        _render_section(
            OUT_OF_CITY_HEADER,
            schedule_rows(result.arrivals_out_of_city, reference, strict=strict),
        )
    )
    return "\n".join(output_lines)
