from __future__ import annotations

import json
from typing import Any, Callable, Dict

import pytest

from halltider.config import Settings


def _arrival(
    origin: str,
    time: str = "14:32:00",
    date: str = "2024-01-01",
    number: str = "117",
) -> Dict[str, Any]:
    return {
        "Product": {
            "name": f"Buss {number}",
            "num": number,
            "catCode": "7",
            "catOutS": "BLT",
            "catOutL": "Buss",
            "operatorCode": "SL",
            "operator": "Storstockholms Lokaltrafik",
            "operatorUrl": "http://www.sl.se",
        },
        "Stops": {
            "Stop": [
                {
                    "name": origin,
                    "id": "740000773",
                    "extId": "740000773",
                    "routeIdx": 0,
                    "lon": 17.898,
                    "lat": 59.383,
                    "depTime": "14:20:00",
                    "depDate": date,
                }
            ]
        },
        "name": f"Buss {number}",
        "stop": "Brommaplan",
        "stopid": "740049185",
        "stopExtId": "740049185",
        "time": time,
        "date": date,
        "origin": origin,
        "transportNumber": number,
        "transportCategory": "BLT",
    }


@pytest.fixture
def make_arrival() -> Callable[..., Dict[str, Any]]:
    return _arrival


@pytest.fixture
def board_payload() -> Dict[str, Any]:
    return {
        "Arrival": [
            _arrival("Spånga station (Stockholm kn)", "14:32:00", number="117"),
            _arrival("Alvik T-bana (Stockholm kn)", "14:35:00", number="117"),
            _arrival("Unknown Stop", "14:36:00", number="999"),
            _arrival("Blackebergs gård (Stockholm kn)", "14:40:00", number="113"),
            _arrival("Tritonvägen (Sundbyberg kn)", "14:44:00", number="152"),
        ],
        "serverVersion": "1.3",
        "dialectVersion": "1.23",
    }


@pytest.fixture
def board_body(board_payload: Dict[str, Any]) -> bytes:
    return json.dumps(board_payload).encode("utf-8")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(api_key="test-key", static_dir=tmp_path)
