#!/usr/bin/env python3
# ==============================================================================
# schedule_provider.py
# ------------------------------------------------------------------------------
# Fetches today's football schedule (teams, kickoff, broadcasters) from the
# schedule API and turns it into `Event` records.
#
# Payload (JSON):
#   [{"times": ["Home", "Away"], "hora": "16:00", "canais": ["ESPN", …]}, …]
# or the same list wrapped as {"jogos": [...]}.
#
# Any transport or payload failure raises ProviderFetchError; what the run
# does about it is decided by the caller.
# ==============================================================================

from __future__ import annotations

import time
from typing import Any, Final, List, Optional

import requests

from kickoffsync.sync.types import Event
from kickoffsync.utils.config import DEFAULT_HTTP_TIMEOUT
from kickoffsync.utils.errors import ProviderFetchError
from kickoffsync.utils.logging_utils import setup_logger

LOGGER = setup_logger("schedule_provider")

MAX_ATTEMPTS: Final[int] = 3
RETRY_PAUSE: Final[int] = 5  # seconds


# ------------------------------------------------------------------------------
# Payload parsing
# ------------------------------------------------------------------------------


def _parse_event(item: Any) -> Optional[Event]:
    """Convert one schedule item, or None if it cannot be used."""
    if not isinstance(item, dict):
        return None

    teams = item.get("times")
    if not isinstance(teams, list) or len(teams) < 2:
        return None

    channels = item.get("canais") or []
    if not isinstance(channels, list):
        channels = []

    return Event(
        team_home=str(teams[0]).strip(),
        team_away=str(teams[1]).strip(),
        kickoff=str(item.get("hora") or "").strip(),
        broadcasters=tuple(str(c).strip() for c in channels if c),
    )


def parse_schedule(payload: Any) -> List[Event]:
    """Turn the decoded payload into events, skipping unusable items."""
    if isinstance(payload, dict):
        payload = payload.get("jogos")
    if not isinstance(payload, list):
        raise ProviderFetchError("Schedule payload is not a list of games")

    events = []
    for idx, item in enumerate(payload):
        event = _parse_event(item)
        if event is None:
            LOGGER.warning("Skipping schedule item #%d – no teams", idx)
            continue
        events.append(event)
    return events


# ------------------------------------------------------------------------------
# Provider
# ------------------------------------------------------------------------------


class ScheduleProvider:
    """HTTP client for the daily schedule."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.http = http or requests.Session()
        self.http.headers.update({"Accept": "application/json"})

    def fetch_events(self) -> List[Event]:
        """Return today's events or raise ProviderFetchError."""
        resp = self._get()
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderFetchError("Schedule response is not JSON") from exc

        events = parse_schedule(payload)
        LOGGER.info("Fetched %d event(s) from schedule", len(events))
        return events

    def _get(self) -> requests.Response:
        """GET the schedule with up to MAX_ATTEMPTS tries."""
        last_error = "no attempt made"
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                resp = self.http.get(self.url, timeout=self.timeout)
            except requests.RequestException as exc:
                last_error = str(exc)
            else:
                if resp.ok:
                    return resp
                last_error = f"HTTP {resp.status_code}"

            LOGGER.warning(
                "Schedule fetch failed (%s) (%s/%s)", last_error, attempt, MAX_ATTEMPTS
            )
            if attempt < MAX_ATTEMPTS:
                time.sleep(RETRY_PAUSE)

        raise ProviderFetchError(
            f"Could not fetch schedule after {MAX_ATTEMPTS} attempts: {last_error}"
        )
