from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Tuple, TypedDict

from halltider.errors import MalformedResponse


class ProductPayload(TypedDict):
    name: str
    num: str
    catCode: str
    catOutS: str
    catOutL: str
    operatorCode: str
    operator: str
    operatorUrl: str


class StopPayload(TypedDict):
    name: str
    id: str
    extId: str
    routeIdx: int
    lon: float
    lat: float
    depTime: str
    depDate: str


class StopsPayload(TypedDict):
    Stop: List[StopPayload]


class ArrivalPayload(TypedDict):
    Product: ProductPayload
    Stops: StopsPayload
    name: str
    stop: str
    stopid: str
    stopExtId: str
    time: str
    date: str
    origin: str
    transportNumber: str
    transportCategory: str


class ClassifiedPayload(TypedDict):
    arrivalsInToCity: List[ArrivalPayload]
    arrivalsOutOfCity: List[ArrivalPayload]


@dataclass(frozen=True)
class Product:
    name: str = ""
    num: str = ""
    cat_code: str = ""
    cat_out_s: str = ""
    cat_out_l: str = ""
    operator_code: str = ""
    operator: str = ""
    operator_url: str = ""


@dataclass(frozen=True)
class Stop:
    """An intermediate stop on the journey towards the board's stop."""

    name: str = ""
    id: str = ""
    ext_id: str = ""
    route_idx: int = 0
    lon: float = 0.0
    lat: float = 0.0
    dep_time: str = ""
    dep_date: str = ""


@dataclass(frozen=True)
class ArrivalRecord:
    product: Product = field(default_factory=Product)
    stops: Tuple[Stop, ...] = ()
    name: str = ""
    stop: str = ""
    stop_id: str = ""
    stop_ext_id: str = ""
    time: str = ""
    date: str = ""
    origin: str = ""
    transport_number: str = ""
    transport_category: str = ""


@dataclass(frozen=True)
class ClassifiedResult:
    arrivals_in_to_city: Tuple[ArrivalRecord, ...] = ()
    arrivals_out_of_city: Tuple[ArrivalRecord, ...] = ()


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedResponse(f"Field '{key}' must be a string, got {type(value).__name__}.")
    return value


def _integer(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise MalformedResponse(f"Field '{key}' must be an integer, got {value!r}.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedResponse(f"Field '{key}' must be an integer, got {value!r}.") from exc


def _number(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise MalformedResponse(f"Field '{key}' must be a number, got {value!r}.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedResponse(f"Field '{key}' must be a number, got {value!r}.") from exc


def _mapping(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedResponse(f"Field '{key}' must be an object.")
    return value


def _entries(payload: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponse(f"Field '{key}' must be a list.")
    for item in value:
        if not isinstance(item, dict):
            raise MalformedResponse(f"Malformed entry in '{key}'.")
    return value


# Missing keys become zero values; unknown keys are ignored.
def parse_product(payload: Mapping[str, Any]) -> Product:
    return Product(
        name=_text(payload, "name"),
        num=_text(payload, "num"),
        cat_code=_text(payload, "catCode"),
        cat_out_s=_text(payload, "catOutS"),
        cat_out_l=_text(payload, "catOutL"),
        operator_code=_text(payload, "operatorCode"),
        operator=_text(payload, "operator"),
        operator_url=_text(payload, "operatorUrl"),
    )


def parse_stop(payload: Mapping[str, Any]) -> Stop:
    return Stop(
        name=_text(payload, "name"),
        id=_text(payload, "id"),
        ext_id=_text(payload, "extId"),
        route_idx=_integer(payload, "routeIdx"),
        lon=_number(payload, "lon"),
        lat=_number(payload, "lat"),
        dep_time=_text(payload, "depTime"),
        dep_date=_text(payload, "depDate"),
    )


def parse_arrival(payload: Mapping[str, Any]) -> ArrivalRecord:
    stops = _entries(_mapping(payload, "Stops"), "Stop")
    return ArrivalRecord(
        product=parse_product(_mapping(payload, "Product")),
        stops=tuple(parse_stop(item) for item in stops),
        name=_text(payload, "name"),
        stop=_text(payload, "stop"),
        stop_id=_text(payload, "stopid"),
        stop_ext_id=_text(payload, "stopExtId"),
        time=_text(payload, "time"),
        date=_text(payload, "date"),
        origin=_text(payload, "origin"),
        transport_number=_text(payload, "transportNumber"),
        transport_category=_text(payload, "transportCategory"),
    )


def parse_classified(payload: Mapping[str, Any]) -> ClassifiedResult:
    return ClassifiedResult(
        arrivals_in_to_city=tuple(
            parse_arrival(item) for item in _entries(payload, "arrivalsInToCity")
        ),
        arrivals_out_of_city=tuple(
            parse_arrival(item) for item in _entries(payload, "arrivalsOutOfCity")
        ),
    )


def arrival_payload(record: ArrivalRecord) -> ArrivalPayload:
    product = record.product
    return {
        "Product": {
            "name": product.name,
            "num": product.num,
            "catCode": product.cat_code,
            "catOutS": product.cat_out_s,
            "catOutL": product.cat_out_l,
            "operatorCode": product.operator_code,
            "operator": product.operator,
            "operatorUrl": product.operator_url,
        },
        "Stops": {
            "Stop": [
                {
                    "name": stop.name,
                    "id": stop.id,
                    "extId": stop.ext_id,
                    "routeIdx": stop.route_idx,
                    "lon": stop.lon,
                    "lat": stop.lat,
                    "depTime": stop.dep_time,
                    "depDate": stop.dep_date,
                }
                for stop in record.stops
            ]
        },
        "name": record.name,
        "stop": record.stop,
        "stopid": record.stop_id,
        "stopExtId": record.stop_ext_id,
        "time": record.time,
        "date": record.date,
        "origin": record.origin,
        "transportNumber": record.transport_number,
        "transportCategory": record.transport_category,
    }


def classified_payload(result: ClassifiedResult) -> ClassifiedPayload:
    return {
        "arrivalsInToCity": [arrival_payload(record) for record in result.arrivals_in_to_city],
        "arrivalsOutOfCity": [arrival_payload(record) for record in result.arrivals_out_of_city],
    }
