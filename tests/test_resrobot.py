import json

import pytest
import requests
import responses
from responses import matchers

from halltider.errors import MalformedResponse, ResponseDumpError, TransportError, UpstreamTimeout
from halltider.fetchers.resrobot import ARRIVAL_BOARD_URL, fetch_arrivals, parse_arrivals


@responses.activate
def test_fetch_sends_key_site_and_limit(board_body):
    responses.add(
        responses.GET,
        ARRIVAL_BOARD_URL,
        body=board_body,
        status=200,
        match=[
            matchers.query_param_matcher(
                {"key": "secret", "id": "740049185", "maxJourneys": "20"}
            )
        ],
    )

    body = fetch_arrivals("secret", "740049185", 20)

    assert body == board_body
    assert "gzip" in responses.calls[0].request.headers["Accept-Encoding"]


@responses.activate
def test_fetch_timeout_raises_upstream_timeout():
    responses.add(
        responses.GET,
        ARRIVAL_BOARD_URL,
        body=requests.exceptions.ReadTimeout("read timed out"),
    )

    with pytest.raises(UpstreamTimeout) as excinfo:
        fetch_arrivals("secret", "740049185", 20)

    assert isinstance(excinfo.value, TransportError)
    assert isinstance(excinfo.value.__cause__, requests.Timeout)


@responses.activate
def test_fetch_connection_error_raises_transport_error():
    responses.add(
        responses.GET,
        ARRIVAL_BOARD_URL,
        body=requests.exceptions.ConnectionError("connection refused"),
    )

    with pytest.raises(TransportError):
        fetch_arrivals("secret", "740049185", 20)


@responses.activate
def test_fetch_returns_error_body_without_checking_status():
    error_body = json.dumps({"errorCode": "API_AUTH", "errorText": "Invalid key"}).encode()
    responses.add(responses.GET, ARRIVAL_BOARD_URL, body=error_body, status=401)

    body = fetch_arrivals("wrong", "740049185", 20)

    assert body == error_body
    with pytest.raises(MalformedResponse, match="Invalid key"):
        parse_arrivals(body)


@responses.activate
def test_fetch_dumps_raw_body_when_asked(tmp_path, board_body):
    responses.add(responses.GET, ARRIVAL_BOARD_URL, body=board_body, status=200)
    dump_path = tmp_path / "result.json"
    dump_path.write_text("stale contents")

    fetch_arrivals("secret", "740049185", 20, dump_path=dump_path)

    assert dump_path.read_bytes() == board_body


@responses.activate
def test_fetch_dump_failure_propagates(tmp_path, board_body):
    responses.add(responses.GET, ARRIVAL_BOARD_URL, body=board_body, status=200)

    with pytest.raises(ResponseDumpError):
        fetch_arrivals("secret", "740049185", 20, dump_path=tmp_path / "missing" / "result.json")


def test_parse_keeps_upstream_order(board_body):
    records = parse_arrivals(board_body)

    assert [record.origin for record in records] == [
        "Spånga station (Stockholm kn)",
        "Alvik T-bana (Stockholm kn)",
        "Unknown Stop",
        "Blackebergs gård (Stockholm kn)",
        "Tritonvägen (Sundbyberg kn)",
    ]


def test_parse_empty_arrival_list():
    assert parse_arrivals(b'{"Arrival": []}') == []


@pytest.mark.parametrize(
    "raw",
    [
        b"<html>Bad gateway</html>",
        b"",
        b"[]",
        b'{"serverVersion": "1.3"}',
        b'{"Arrival": {"origin": "Alvik"}}',
        b'{"Arrival": ["Alvik"]}',
    ],
)
def test_parse_rejects_malformed_payloads(raw):
    with pytest.raises(MalformedResponse):
        parse_arrivals(raw)


@responses.activate
def test_fetch_deadline_covers_slow_body(monkeypatch, board_body):
    responses.add(responses.GET, ARRIVAL_BOARD_URL, body=board_body, status=200)
    clock = iter([0.0, 25.0, 25.0, 25.0])
    monkeypatch.setattr(
        "halltider.fetchers.resrobot.monotonic", lambda: next(clock, 25.0)
    )

    with pytest.raises(UpstreamTimeout):
        fetch_arrivals("secret", "740049185", 20)
