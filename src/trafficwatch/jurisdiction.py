from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

import requests

from trafficwatch.config import DEFAULT_GEOCODE_URL, DEFAULT_RECIPIENT, DEFAULT_USER_AGENT, GeocodeConfig

log = logging.getLogger(__name__)

STATE_EMAILS = {
    "District of Columbia": "dpw@dc.gov",
    "Washington": "dpw@dc.gov",
    "California": "traffic-safety@dot.ca.gov",
    "New York": "311@nyc.gov",
    "Texas": "contact@txdot.gov",
    "Florida": "communications@dot.state.fl.us",
    "Illinois": "dot.feedback@illinois.gov",
    "Pennsylvania": "penndot@pa.gov",
    "Ohio": "info@dot.ohio.gov",
    "Georgia": "contact@dot.ga.gov",
    "North Carolina": "contact@ncdot.gov",
    "Michigan": "contact@michigan.gov",
}


class GeocodeError(RuntimeError):
    pass


@dataclass(slots=True)
class Jurisdiction:
    state: str = ""
    city: str = ""
    email: str = DEFAULT_RECIPIENT


def email_for(state: str, city: str, default_email: str = DEFAULT_RECIPIENT) -> str:
    if city == "Washington" and state == "District of Columbia":
        return "dpw@dc.gov"
    if city == "New York":
        return "311@nyc.gov"
    if city == "San Francisco":
        return "311@sfgov.org"
    if state and state in STATE_EMAILS:
        return STATE_EMAILS[state]
    return default_email


class ReverseGeocoder:
    """Nominatim reverse lookup returning the raw ``address`` block."""

    def __init__(
        self,
        url: str = DEFAULT_GEOCODE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: GeocodeConfig) -> ReverseGeocoder:
        return cls(url=cfg.url, user_agent=cfg.user_agent, timeout=cfg.timeout)

    def reverse(self, lat: float, lon: float) -> dict[str, Any]:
        params = {"format": "json", "lat": lat, "lon": lon}
        try:
            resp = self.session.get(
                self.url,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise GeocodeError(f"reverse geocode failed: {exc}") from exc
        except ValueError as exc:
            raise GeocodeError("reverse geocode returned invalid json") from exc
        if not isinstance(data, dict):
            raise GeocodeError("reverse geocode returned unexpected payload")
        address = data.get("address") or {}
        return address if isinstance(address, dict) else {}


def resolve_jurisdiction(
    lat: float,
    lon: float,
    geocoder: ReverseGeocoder,
    default_email: str = DEFAULT_RECIPIENT,
) -> Jurisdiction:
    try:
        address = geocoder.reverse(lat, lon)
    except GeocodeError as exc:
        log.warning("could not determine jurisdiction: %s", exc)
        return Jurisdiction(email=default_email)

    city = str(address.get("city") or address.get("town") or address.get("village") or "")
    state = str(address.get("state") or "")
    return Jurisdiction(state=state, city=city, email=email_for(state, city, default_email))
