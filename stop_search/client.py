"""Thin wrapper around the data.police.uk API.

Every request has a timeout, is retried with exponential backoff on
connection errors and 429/5xx responses, and is followed by a short pause so
that sequential month-by-month fetching stays within the API's rate limits.
"""
import time
import logging

import requests

from stop_search.config import Settings
from stop_search.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


class PoliceApiClient:
    def __init__(self, settings=None, session=None, sleep=time.sleep):
        self.settings = settings or Settings()
        self.base_url = self.settings.api_base.rstrip("/")
        self.session = session or requests.Session()
        self.sleep = sleep

    def _throttle(self):
        if self.settings.throttle_delay > 0:
            self.sleep(self.settings.throttle_delay)

    def request(self, method, endpoint, params=None, data=None, period=None):
        """Send one request and return the decoded JSON body."""
        url = f"{self.base_url}/{endpoint}"
        max_retries = self.settings.max_retries
        error = None

        for attempt in range(1, max_retries + 1):
            try:
                response = self.session.request(
                    method, url, params=params, data=data, timeout=self.settings.timeout
                )
            except requests.exceptions.RequestException as e:
                error = str(e)
            else:
                status = response.status_code
                if status in RETRY_STATUSES:
                    error = f"HTTP {status}"
                elif status != 200:
                    self._throttle()
                    raise UpstreamUnavailable(
                        f"{method} {url} returned HTTP {status}", period=period
                    )
                else:
                    self._throttle()
                    try:
                        return response.json()
                    except ValueError as e:
                        raise UpstreamUnavailable(
                            f"{method} {url} returned invalid JSON: {e}", period=period
                        )

            self._throttle()
            if attempt < max_retries:
                wait = self.settings.backoff * (2 ** (attempt - 1))
                logger.warning(
                    f"Request to {endpoint} failed (attempt {attempt}/{max_retries}): "
                    f"{error}. Retrying in {wait:.1f} seconds..."
                )
                self.sleep(wait)

        raise UpstreamUnavailable(
            f"{method} {url} failed after {max_retries} attempts: {error}", period=period
        )

    def street_dates(self):
        return self.request("GET", "crimes-street-dates")

    def forces(self):
        return self.request("GET", "forces")

    def stops_street(self, poly, date, period=None):
        return self.request("POST", "stops-street", data={"poly": poly, "date": date}, period=period)

    def stops_force(self, force, date, period=None):
        return self.request("POST", "stops-force", data={"force": force, "date": date}, period=period)
