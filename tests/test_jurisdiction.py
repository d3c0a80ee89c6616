from __future__ import annotations

from typing import Any

import pytest
import requests

from trafficwatch.config import GeocodeConfig
from trafficwatch.jurisdiction import GeocodeError, ReverseGeocoder, email_for, resolve_jurisdiction


class _Resp:
    def __init__(self, payload: Any, status: int = 200) -> None:
        self.payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class _Session:
    def __init__(self, resp: _Resp | Exception) -> None:
        self.resp = resp
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> _Resp:
        self.calls.append({"url": url, **kwargs})
        if isinstance(self.resp, Exception):
            raise self.resp
        return self.resp


@pytest.mark.parametrize(
    "state,city,email",
    [
        ("District of Columbia", "Washington", "dpw@dc.gov"),
        ("New York", "New York", "311@nyc.gov"),
        ("California", "San Francisco", "311@sfgov.org"),
        ("California", "Oakland", "traffic-safety@dot.ca.gov"),
        ("Pennsylvania", "Pittsburgh", "penndot@pa.gov"),
        ("Vermont", "Burlington", "violations@usa.gov"),
        ("", "", "violations@usa.gov"),
    ],
)
def test_email_for(state: str, city: str, email: str) -> None:
    assert email_for(state, city) == email


def test_reverse_sends_user_agent_and_coordinates() -> None:
    session = _Session(_Resp({"address": {"town": "Pittsburgh", "state": "Pennsylvania"}}))
    geocoder = ReverseGeocoder(url="https://geo.example/reverse", user_agent="tw-test/1", timeout=3, session=session)
    j = resolve_jurisdiction(40.44611, -79.94861, geocoder)

    assert (j.state, j.city, j.email) == ("Pennsylvania", "Pittsburgh", "penndot@pa.gov")
    call = session.calls[0]
    assert call["url"] == "https://geo.example/reverse"
    assert call["headers"] == {"User-Agent": "tw-test/1"}
    assert call["params"]["lat"] == 40.44611
    assert call["params"]["format"] == "json"
    assert call["timeout"] == 3


@pytest.mark.parametrize(
    "resp",
    [
        requests.ConnectionError("offline"),
        _Resp({}, status=503),
        _Resp(ValueError("not json")),
        _Resp(["unexpected"]),
    ],
)
def test_reverse_failures_raise_geocode_error(resp) -> None:
    geocoder = ReverseGeocoder(session=_Session(resp))
    with pytest.raises(GeocodeError):
        geocoder.reverse(1.0, 2.0)


def test_resolve_falls_back_to_default_email(caplog) -> None:
    geocoder = ReverseGeocoder(session=_Session(requests.Timeout("slow")))
    j = resolve_jurisdiction(1.0, 2.0, geocoder, default_email="reports@city.example")
    assert (j.state, j.city, j.email) == ("", "", "reports@city.example")
    assert "could not determine jurisdiction" in caplog.text


def test_from_config() -> None:
    g = ReverseGeocoder.from_config(GeocodeConfig(url="https://x.example/r", user_agent="ua", timeout=2.5))
    assert (g.url, g.user_agent, g.timeout) == ("https://x.example/r", "ua", 2.5)
