from unittest.mock import call

import pytest
import requests

from stop_search.errors import UpstreamUnavailable
from tests.conftest import make_response


def test_post_sends_form_body_with_timeout(client, session):
    session.request.return_value = make_response([])

    assert client.stops_force("leicestershire", "2021-08") == []
    session.request.assert_called_once_with(
        "POST",
        "https://api.test/stops-force",
        params=None,
        data={"force": "leicestershire", "date": "2021-08"},
        timeout=30.0,
    )


def test_retries_transient_errors_with_backoff(client, session, sleeps):
    session.request.side_effect = [
        requests.exceptions.ConnectionError("reset"),
        make_response(status=503),
        make_response([{"type": "Person search"}]),
    ]

    assert client.stops_street("52.1,-1.9:52.2,-1.8:52.3,-1.7", "2021-08") == [{"type": "Person search"}]
    assert session.request.call_count == 3
    assert sleeps == [1.0, 2.0]


def test_gives_up_after_max_retries(client, session, sleeps):
    session.request.return_value = make_response(status=429)

    with pytest.raises(UpstreamUnavailable) as excinfo:
        client.forces()
    assert session.request.call_count == 3
    assert "HTTP 429" in str(excinfo.value)
    assert sleeps == [1.0, 2.0]


def test_client_error_is_not_retried(client, session):
    session.request.return_value = make_response(status=404)

    with pytest.raises(UpstreamUnavailable):
        client.stops_force("atlantis", "2021-08")
    assert session.request.call_count == 1


def test_invalid_json(client, session):
    session.request.return_value = make_response(ValueError("Expecting value"))

    with pytest.raises(UpstreamUnavailable) as excinfo:
        client.street_dates()
    assert "invalid JSON" in str(excinfo.value)


def test_throttles_after_each_request(session):
    from stop_search.client import PoliceApiClient
    from stop_search.config import Settings

    sleeps = []
    client = PoliceApiClient(Settings(throttle_delay=0.1), session=session, sleep=sleeps.append)
    session.request.return_value = make_response([])

    client.street_dates()
    client.forces()
    assert sleeps == [0.1, 0.1]
    assert session.request.call_args_list[0] == call(
        "GET", "https://data.police.uk/api/crimes-street-dates", params=None, data=None, timeout=30.0
    )
