"""HTTP client for per-leg driving directions from an OSRM service."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Protocol

import httpx

from ...config import settings
from ...models.domain import Coordinate

logger = logging.getLogger(__name__)


class DirectionsError(ConnectionError):
    """A leg could not be materialized into driving directions."""

    def __init__(self, message: str, leg_index: int | None = None) -> None:
        super().__init__(message)
        self.leg_index = leg_index


@dataclass(slots=True)
class LegDirections:
    distance_km: float
    duration_min: float
    instructions: list[str]


class DirectionsProvider(Protocol):
    def directions(self, origin: Coordinate, destination: Coordinate) -> LegDirections:
        ...


def describe_step(step: dict) -> str:
    """Render one OSRM route step as a short human instruction."""
    maneuver = step.get("maneuver") or {}
    kind = maneuver.get("type", "")
    modifier = maneuver.get("modifier")
    road = step.get("name") or ""

    if kind == "depart":
        return f"Head {modifier or 'out'} on {road}".strip() if road else "Depart"
    if kind == "arrive":
        return "Arrive at destination"
    action = " ".join(part for part in (kind.replace("_", " ").capitalize(), modifier) if part)
    if road:
        return f"{action} onto {road}" if action else f"Continue onto {road}"
    return action


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.directions_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)))

    def route(self, origin: Coordinate, destination: Coordinate) -> dict:
        """Fetch the raw OSRM route response for a single leg, with step-by-step instructions."""
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in (origin, destination))
        params = {
            "overview": "false",
            "steps": "true",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if data.get("code") != "Ok" or not data.get("routes"):
                        error_msg = data.get("message", "No route found.")
                        raise ValueError(f"OSRM route request failed: {error_msg}")
                    return data
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request timed out after {self.max_retries} attempts: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(f"Failed to connect to OSRM service at {self.base_url}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
        finally:
            client.close()

    def directions(self, origin: Coordinate, destination: Coordinate) -> LegDirections:
        data = self.route(origin, destination)
        best = data["routes"][0]
        instructions = [
            describe_step(step)
            for leg in best.get("legs", [])
            for step in leg.get("steps", [])
        ]
        return LegDirections(
            distance_km=float(best.get("distance", 0.0)) / 1000.0,
            duration_min=float(best.get("duration", 0.0)) / 60.0,
            instructions=[text for text in instructions if text],
        )


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health with a minimal two-point route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        test_coords = "-73.985100,40.758900;-73.968300,40.785100"
        url = f"{base}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
