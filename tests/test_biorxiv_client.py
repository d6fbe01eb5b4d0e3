from datetime import date
from unittest.mock import MagicMock, call, patch

import pytest
import requests

from biorxiv_client import BiorxivClient, parse_collection
from errors import ApiError, ApplicationUpstreamError, TransientUpstreamError
from models import DateRange, EndpointPlan

_OK_BODY = {
    "messages": [{"status": "ok", "total": 1, "cursor": 0}],
    "collection": [
        {
            "doi": "10.1101/2020.01.30.927871",
            "title": "A CRISPR screen",
            "authors": "Doe, J.; Roe, R.",
            "abstract": "We screened.",
            "date": "2020-01-31",
            "category": "genomics",
            "version": "1",
            "published": "NA",
            "server": "bioRxiv",
        }
    ],
}


def _resp(status: int = 200, body: dict | None = None) -> MagicMock:
    mock = MagicMock()
    mock.status_code = status
    mock.json.return_value = body if body is not None else _OK_BODY
    if status >= 400:
        mock.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return mock


def _client(session: MagicMock, **kwargs) -> BiorxivClient:
    kwargs.setdefault("base_url", "https://api.test")
    kwargs.setdefault("initial_delay", 1.0)
    kwargs.setdefault("max_attempts", 3)
    kwargs.setdefault("persistent_backoff", False)
    return BiorxivClient(session=session, **kwargs)


def test_execute_returns_body_on_success() -> None:
    session = MagicMock()
    session.get.return_value = _resp()

    body = _client(session).execute("https://api.test/x", {"category": "genomics"})

    assert body == _OK_BODY
    session.get.assert_called_once()


def test_retries_stop_at_max_attempts_with_doubling_delay() -> None:
    session = MagicMock()
    session.get.return_value = _resp(429)

    with patch("biorxiv_client.time.sleep") as sleep:
        with pytest.raises(TransientUpstreamError) as excinfo:
            _client(session).execute("https://api.test/x")

    assert session.get.call_count == 3
    assert sleep.call_args_list == [call(1.0), call(2.0)]
    assert excinfo.value.status_code == 429


def test_server_error_then_success_is_retried() -> None:
    session = MagicMock()
    session.get.side_effect = [_resp(503), _resp(502), _resp()]

    with patch("biorxiv_client.time.sleep") as sleep:
        body = _client(session, max_attempts=5, initial_delay=0.5).execute("https://api.test/x")

    assert body == _OK_BODY
    assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]


def test_client_error_is_not_retried() -> None:
    session = MagicMock()
    session.get.return_value = _resp(404)

    with patch("biorxiv_client.time.sleep") as sleep:
        with pytest.raises(ApiError) as excinfo:
            _client(session).execute("https://api.test/x")

    assert not isinstance(excinfo.value, TransientUpstreamError)
    assert excinfo.value.status_code == 404
    assert session.get.call_count == 1
    sleep.assert_not_called()


def test_network_failure_is_not_retried() -> None:
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("connection refused")

    with patch("biorxiv_client.time.sleep") as sleep:
        with pytest.raises(ApiError, match="connection refused"):
            _client(session).execute("https://api.test/x")

    assert session.get.call_count == 1
    sleep.assert_not_called()


def test_envelope_error_raises_without_retry() -> None:
    session = MagicMock()
    session.get.return_value = _resp(200, {"messages": [{"status": "error", "text": "bad category"}]})

    with patch("biorxiv_client.time.sleep") as sleep:
        with pytest.raises(ApplicationUpstreamError, match="bad category"):
            _client(session).execute("https://api.test/x")

    assert session.get.call_count == 1
    sleep.assert_not_called()


def test_envelope_error_without_text_uses_default_message() -> None:
    session = MagicMock()
    session.get.return_value = _resp(200, {"messages": [{"status": "error"}]})

    with pytest.raises(ApplicationUpstreamError, match="API returned an error"):
        _client(session).execute("https://api.test/x")


def test_delay_resets_between_calls_by_default() -> None:
    session = MagicMock()
    session.get.side_effect = [_resp(429), _resp(), _resp(429), _resp()]
    client = _client(session)

    with patch("biorxiv_client.time.sleep") as sleep:
        client.execute("https://api.test/a")
        client.execute("https://api.test/b")

    assert sleep.call_args_list == [call(1.0), call(1.0)]


def test_persistent_backoff_ratchets_across_calls() -> None:
    session = MagicMock()
    session.get.side_effect = [_resp(429), _resp(), _resp(429), _resp()]
    client = _client(session, persistent_backoff=True)

    with patch("biorxiv_client.time.sleep") as sleep:
        client.execute("https://api.test/a")
        client.execute("https://api.test/b")

    assert sleep.call_args_list == [call(1.0), call(2.0)]
    assert client.retry_delay == 4.0


def test_list_details_builds_listing_url_and_params() -> None:
    session = MagicMock()
    session.get.return_value = _resp()
    plan = EndpointPlan("medrxiv", "cardiovascular_medicine", DateRange(date(2020, 1, 1), date(2025, 1, 1)))

    preprints = _client(session).list_details(plan, cursor="100", limit=25)

    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs["params"]
    assert url == "https://api.test/details/medrxiv/2020-01-01/2025-01-01/0"
    assert params == {"category": "cardiovascular_medicine", "cursor": "100", "limit": 25}
    assert len(preprints) == 1
    assert preprints[0].title == "A CRISPR screen"


def test_get_details_encodes_doi() -> None:
    session = MagicMock()
    session.get.return_value = _resp()

    _client(session).get_details("10.1101/2020.01.30.927871")

    url = session.get.call_args.args[0]
    assert url == "https://api.test/details/biorxiv/10.1101%2F2020.01.30.927871/na/json"


def test_parse_collection_skips_non_objects_and_fills_missing_fields() -> None:
    preprints = parse_collection({"collection": [{"doi": "10.1101/x", "title": "T"}, "junk", None]})

    assert len(preprints) == 1
    assert preprints[0].abstract == ""
    assert preprints[0].category == ""


def test_parse_collection_without_collection_is_empty() -> None:
    assert parse_collection({"messages": [{"status": "no posts found"}]}) == []


def test_parse_collection_rejects_non_object_payload() -> None:
    with pytest.raises(ApiError):
        parse_collection(["not", "an", "envelope"])
