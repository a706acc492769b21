# services/pirep-service/src/apps/core/services/notification_service.py
"""
Notification Service

Discord-compatible webhook notifications for new PIREPs and rank promotions.
"""

import re
import time
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional

import httpx
from django.utils import timezone

from ..conf import pirep_settings
from .exceptions import NotificationError
from .flight_time import format_hours_minutes

logger = logging.getLogger(__name__)

PIREP_EMBED_TITLE = '✈️ New PIREP Submitted'
PIREP_EMBED_COLOR = 0xF39C12
RANKUP_EMBED_TITLE = '🎖️ Rank Promotion!'
RANKUP_EMBED_COLOR = 0x27AE60

_NON_ALNUM = re.compile(r'[^A-Za-z0-9]')


def format_full_callsign(airline_callsign: str, pilot_callsign: Any) -> str:
    """
    Airline prefix plus pilot callsign, e.g. ('va', 123) -> 'VA123'.

    Raises:
        ValueError: If either part is empty after stripping non-alphanumerics
    """
    if not airline_callsign or not isinstance(airline_callsign, str):
        raise ValueError("Invalid airline code")
    if pilot_callsign is None:
        raise ValueError("Invalid user identifier")

    airline = _NON_ALNUM.sub('', airline_callsign).upper()
    pilot = _NON_ALNUM.sub('', str(pilot_callsign))
    if not airline or not pilot:
        raise ValueError("Invalid callsign components after sanitization")
    return f"{airline}{pilot}"


def _pilot_line(name: str, callsign: Optional[str], airline_callsign: str) -> str:
    if not callsign:
        return name
    try:
        return f"{name} (`{format_full_callsign(airline_callsign, callsign)}`)"
    except ValueError:
        return name


@dataclass
class PirepCreatedPayload:
    """Data carried by a new-PIREP notification."""

    pirep_id: str
    pilot_name: str
    flight_number: str
    departure_icao: str
    arrival_icao: str
    aircraft: str
    flight_time: int
    fuel_burned: int
    cargo: int
    pilot_callsign: Optional[str] = None
    remarks: Optional[str] = None
    submitted_at: datetime = field(default_factory=timezone.now)


@dataclass
class RankupPayload:
    """Data carried by a rank promotion notification."""

    pilot_id: str
    pilot_name: str
    new_rank: str
    total_flight_time: int
    previous_rank: Optional[str] = None
    pilot_callsign: Optional[str] = None
    achieved_at: datetime = field(default_factory=timezone.now)


class WebhookClient:
    """
    Synchronous webhook sender.

    Retries network errors and 5xx responses with exponential backoff;
    4xx responses fail immediately.
    """

    def __init__(
        self,
        timeout: float = None,
        retry_count: int = None,
        backoff_seconds: float = None,
    ):
        config = pirep_settings()
        self.timeout = httpx.Timeout(timeout if timeout is not None else config['WEBHOOK_TIMEOUT'])
        self.retry_count = retry_count if retry_count is not None else config['WEBHOOK_RETRY_COUNT']
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else config['WEBHOOK_BACKOFF_SECONDS']
        )

    def send(self, url: str, payload: Dict[str, Any]) -> None:
        """
        POST a JSON payload.

        Raises:
            NotificationError: On a 4xx response or once retries are exhausted
        """
        last_error: Optional[Exception] = None
        last_status: Optional[int] = None

        for attempt in range(self.retry_count):
            try:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(url, json=payload)
                response.raise_for_status()
                return
            except httpx.HTTPStatusError as e:
                last_error = e
                last_status = e.response.status_code
                logger.warning(
                    f"Webhook responded with {last_status} (attempt {attempt + 1})",
                    extra={'status_code': last_status}
                )
                if 400 <= last_status < 500:
                    raise NotificationError(
                        message=f"Webhook failed with status {last_status}",
                        status_code=last_status
                    ) from e
            except httpx.RequestError as e:
                last_error = e
                logger.warning(f"Webhook request error (attempt {attempt + 1}): {e}")

            if attempt < self.retry_count - 1:
                time.sleep(self.backoff_seconds * (2 ** attempt))

        raise NotificationError(
            message=f"Failed to send webhook after {self.retry_count} attempts: {last_error}",
            status_code=last_status
        )


def build_embed(title: str, lines: List[str], color: int, timestamp: datetime) -> Dict[str, Any]:
    return {
        'title': title,
        'description': '\n\n'.join(lines),
        'color': color,
        'footer': {'text': pirep_settings()['AIRLINE_NAME']},
        'timestamp': timestamp.isoformat(),
    }


class PirepNotifier:
    """Posts new PIREPs to the configured PIREP webhook."""

    def __init__(self, client: WebhookClient = None):
        self.client = client or WebhookClient()

    def build_payload(self, payload: PirepCreatedPayload) -> Dict[str, Any]:
        config = pirep_settings()
        ts = int(payload.submitted_at.timestamp())
        lines = [
            f"🛫 **Flight:** {payload.flight_number}",
            f"🛣️ **Route:** {payload.departure_icao} → {payload.arrival_icao}",
            f"👨‍✈️ **Pilot:** {_pilot_line(payload.pilot_name, payload.pilot_callsign, config['AIRLINE_CALLSIGN'])}",
            f"✈️ **Aircraft:** {payload.aircraft}",
            f"⏱️ **Flight Time:** {format_hours_minutes(payload.flight_time)}",
            f"⛽ **Fuel Used:** {payload.fuel_burned:,} kg",
            f"📦 **Cargo:** {payload.cargo:,} kg",
        ]
        if payload.remarks:
            lines.append(f"💬 **Remarks:** {payload.remarks}")
        lines.append(f"📅 **Submitted:** <t:{ts}:R>")

        return {
            'embeds': [
                build_embed(PIREP_EMBED_TITLE, lines, PIREP_EMBED_COLOR, payload.submitted_at)
            ]
        }

    def notify_pirep_created(self, payload: PirepCreatedPayload) -> bool:
        """
        Send the new-PIREP embed.

        Returns:
            False when no webhook is configured, True once delivered

        Raises:
            NotificationError: If delivery fails
        """
        url = pirep_settings()['PIREPS_WEBHOOK_URL']
        if not url:
            return False

        try:
            self.client.send(url, self.build_payload(payload))
        except NotificationError as e:
            logger.error(f"PIREP webhook failed for {payload.pirep_id}: {e.message}")
            raise NotificationError(
                message=f"Failed to send PIREP webhook for {payload.pirep_id}: {e.message}",
                status_code=e.status_code
            ) from e

        logger.info(f"PIREP webhook sent for {payload.pirep_id}")
        return True


class RankupNotifier:
    """Posts rank promotions. Failures are logged, never raised."""

    def __init__(self, client: WebhookClient = None):
        self.client = client or WebhookClient()

    def build_payload(self, payload: RankupPayload) -> Dict[str, Any]:
        config = pirep_settings()
        ts = int(payload.achieved_at.timestamp())
        pilot = _pilot_line(
            f"**{payload.pilot_name}**", payload.pilot_callsign, config['AIRLINE_CALLSIGN']
        )
        lines = [f"🎉 {pilot} has achieved the rank of **{payload.new_rank}**!"]
        if payload.previous_rank:
            lines.append(f"Previously held: {payload.previous_rank}")
        lines.append(f"Total Flight Time: {format_hours_minutes(payload.total_flight_time)}")
        lines.append(f"Congratulations on this achievement! <t:{ts}:R>")

        return {
            'embeds': [
                build_embed(RANKUP_EMBED_TITLE, lines, RANKUP_EMBED_COLOR, payload.achieved_at)
            ]
        }

    def notify_rankup(self, payload: RankupPayload) -> bool:
        url = pirep_settings()['RANKUP_WEBHOOK_URL']
        if not url:
            return False

        try:
            self.client.send(url, self.build_payload(payload))
        except NotificationError as e:
            logger.error(
                f"Rank-up webhook failed for pilot {payload.pilot_id}: {e.message}",
                exc_info=True
            )
            return False

        logger.info(f"Rank-up webhook sent for pilot {payload.pilot_id}")
        return True
