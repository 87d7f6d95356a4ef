from unittest.mock import MagicMock

import pytest

from stop_search.client import PoliceApiClient
from stop_search.config import Settings


def make_response(payload=None, status=200):
    response = MagicMock()
    response.status_code = status
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(session, sleeps):
    settings = Settings(api_base="https://api.test", max_retries=3, backoff=1.0, throttle_delay=0)
    return PoliceApiClient(settings, session=session, sleep=sleeps.append)


@pytest.fixture
def stop():
    """A typical stop & search record."""
    return {
        "age_range": "18-24",
        "outcome": "A no further action disposal",
        "involved_person": True,
        "datetime": "2021-08-02T14:30:00+00:00",
        "outcome_object": {"id": "bu-no-further-action", "name": "A no further action disposal"},
        "location": {
            "latitude": "52.629729",
            "street": {"id": 883407, "name": "On or near Shopping Area"},
            "longitude": "-1.133272",
        },
        "operation": None,
        "type": "Person search",
    }
