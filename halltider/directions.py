from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from halltider.models import ArrivalRecord, ClassifiedResult


logger = logging.getLogger(__name__)


class Direction(Enum):
    IN_TO_CITY = "in_to_city"
    OUT_OF_CITY = "out_of_city"


@dataclass(frozen=True)
class OriginRoute:
    direction: Direction
    destination_label: str


# Keyed on the exact origin name ResRobot reports for buses arriving at the
# board's stop. Read by both the classifier and the console board.
ORIGIN_ROUTES: Mapping[str, OriginRoute] = MappingProxyType(
    {
        "Spånga station (Stockholm kn)": OriginRoute(Direction.IN_TO_CITY, "Alvik"),
        "Blackebergs gård (Stockholm kn)": OriginRoute(Direction.IN_TO_CITY, "Solna centrum"),
        "Alvik T-bana (Stockholm kn)": OriginRoute(Direction.OUT_OF_CITY, "Spånga station"),
        "Solna centrum T-bana": OriginRoute(Direction.OUT_OF_CITY, "Blackebergs gård"),
        "Tritonvägen (Sundbyberg kn)": OriginRoute(Direction.OUT_OF_CITY, "Blackebergs gård"),
    }
)


def route_for_origin(origin: str) -> Optional[OriginRoute]:
    return ORIGIN_ROUTES.get(origin)


def classify(records: Iterable[ArrivalRecord]) -> ClassifiedResult:
    in_to_city: List[ArrivalRecord] = []
    out_of_city: List[ArrivalRecord] = []

    for record in records:
        logger.debug("%s %s", record.product, record.origin)
        route = route_for_origin(record.origin)
        if route is None:
            continue
        if route.direction is Direction.IN_TO_CITY:
            in_to_city.append(record)
        else:
            out_of_city.append(record)

    return ClassifiedResult(
        arrivals_in_to_city=tuple(in_to_city),
        arrivals_out_of_city=tuple(out_of_city),
    )
