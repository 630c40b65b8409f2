from __future__ import annotations

import json
import logging
from pathlib import Path
from time import monotonic
from typing import Any, List, Optional

import requests

from halltider.errors import MalformedResponse, ResponseDumpError, TransportError, UpstreamTimeout
from halltider.models import ArrivalRecord, parse_arrival


ARRIVAL_BOARD_URL = "https://api.resrobot.se/v2/arrivalBoard.json"

REQUEST_TIMEOUT_SECONDS = 20

logger = logging.getLogger(__name__)


def fetch_arrivals(
    api_key: str,
    site_id: str,
    max_journeys: int,
    dump_path: Optional[Path] = None,
) -> bytes:
    params = {"key": api_key, "id": site_id, "maxJourneys": max_journeys}
    headers = {"Accept-Encoding": "gzip, deflate"}

    logger.debug(
        "==> Calling: %s?key=***&id=%s&maxJourneys=%s",
        ARRIVAL_BOARD_URL,
        site_id,
        max_journeys,
    )

    # requests applies the timeout to the connect and to each socket read;
    # the deadline also bounds reading the whole body.
    deadline = monotonic() + REQUEST_TIMEOUT_SECONDS
    chunks: List[bytes] = []
    try:
        with requests.get(
            ARRIVAL_BOARD_URL,
            params=params,
            headers=headers,
            timeout=REQUEST_TIMEOUT_SECONDS,
            stream=True,
        ) as response:
            if not response.ok:
                logger.warning(
                    "Arrival board returned HTTP %s; parsing the body anyway.",
                    response.status_code,
                )
            for chunk in response.iter_content(chunk_size=8192):
                if monotonic() > deadline:
                    raise UpstreamTimeout(
                        f"Arrival board response not complete after {REQUEST_TIMEOUT_SECONDS}s."
                    )
                chunks.append(chunk)
    except requests.Timeout as exc:
        raise UpstreamTimeout(
            f"Arrival board request timed out after {REQUEST_TIMEOUT_SECONDS}s: {exc}"
        ) from exc
    except requests.RequestException as exc:
        raise TransportError(f"Failed to fetch arrival board: {exc}") from exc

    body = b"".join(chunks)

    if dump_path is not None:
        try:
            dump_path.write_bytes(body)
        except OSError as exc:
            raise ResponseDumpError(f"Failed to write raw response to {dump_path}: {exc}") from exc
        logger.debug("Wrote %s bytes of raw response to %s", len(body), dump_path)

    return body


def _describe_upstream_error(payload: dict) -> str:
    code = payload.get("errorCode")
    text = payload.get("errorText")
    if code or text:
        return f" Upstream error {code or '?'}: {text or 'no details'}."
    return ""


def parse_arrivals(raw: bytes) -> List[ArrivalRecord]:
    try:
        payload: Any = json.loads(raw)
    except ValueError as exc:
        raise MalformedResponse("Arrival board response was not valid JSON.") from exc

    if not isinstance(payload, dict):
        raise MalformedResponse("Arrival board response must be a JSON object.")

    arrivals = payload.get("Arrival")
    if not isinstance(arrivals, list):
        raise MalformedResponse(
            "Arrival board response missing Arrival list." + _describe_upstream_error(payload)
        )

    records: List[ArrivalRecord] = []
    for arrival in arrivals:
        if not isinstance(arrival, dict):
            raise MalformedResponse("Malformed arrival entry.")
        records.append(parse_arrival(arrival))

    logger.debug("Parsed %s arrivals", len(records))
    return records
