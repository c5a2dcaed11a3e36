from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional
from zoneinfo import ZoneInfo

from ..common.concurrency import Deadline, KeyedLock
from ..common.datetime_utils import business_timezone, date_key_for, now_utc, to_utc
from ..common.geo import Coordinates, distance_meters
from ..common.validators import normalize_site_name
from ..core.constants import DEFAULT_SCAN_TIMEOUT_SECONDS
from ..core.enums import Provenance, ScanKind, ScanStatus
from ..core.exceptions import GeofenceViolation, LocationUnavailable, ValidationError
from ..sites.model import Site
from ..sites.repository import SiteRepository
from ..users.model import Employee
from .location import LocationProvider
from .model import ScanEvent, ScanOutcome
from .repository import ScanLogRepository

if TYPE_CHECKING:
    from ..sessions.service import SessionAggregatorService

logger = logging.getLogger(__name__)

REASON_INVALID_TOKEN = "Invalid QR code"
REASON_SITE_NOT_FOUND = "Site not found"
REASON_OUTSIDE_RADIUS = "Outside allowed radius"


def next_scan_kind(last: Optional[ScanEvent]) -> ScanKind:
    """Alternate check-in/check-out from the most recent success of the day."""
    if last is None or last.effective_kind == ScanKind.CHECK_OUT:
        return ScanKind.CHECK_IN
    return ScanKind.CHECK_OUT


class ScanVerifier:
    """Turns one scan attempt into exactly one stored ScanEvent.

    Every attempt is logged, success or not. The first failing step ends the
    attempt; nothing is retried. A successful scan triggers a session rebuild
    for (user, day), whose failure is only logged.
    """

    def __init__(
        self,
        logs: ScanLogRepository,
        sites: SiteRepository,
        aggregator: Optional["SessionAggregatorService"] = None,
        *,
        tz: Optional[ZoneInfo] = None,
        timeout_seconds: float = DEFAULT_SCAN_TIMEOUT_SECONDS,
        locks: Optional[KeyedLock] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._logs = logs
        self._sites = sites
        self._aggregator = aggregator
        self._tz = tz or business_timezone()
        self._timeout = float(timeout_seconds)
        self._locks = locks or KeyedLock()
        self._clock = clock

    def verify(
        self,
        *,
        token: Optional[str],
        user: Employee,
        location: LocationProvider,
        now: Optional[datetime] = None,
    ) -> ScanOutcome:
        deadline = Deadline(self._timeout, clock=self._clock)
        scan_time = to_utc(now, self._tz) if now else now_utc()
        date_key = date_key_for(scan_time, self._tz)

        normalized = normalize_site_name(token)
        if not normalized:
            self._record_failure(user, scan_time, date_key, REASON_INVALID_TOKEN)
            raise ValidationError("Invalid QR code.")

        deadline.check()
        site = self._sites.get_by_normalized_name(normalized)
        if site is None:
            self._record_failure(user, scan_time, date_key, REASON_SITE_NOT_FOUND)
            raise ValidationError("Site not found.")

        deadline.check()
        try:
            coords = location.locate(timeout=deadline.remaining())
        except LocationUnavailable as e:
            self._record_failure(user, scan_time, date_key, str(e).rstrip("."), site=site)
            raise

        deadline.check()
        distance = distance_meters(coords, site.coordinates)
        if distance > site.allowed_radius_meters:
            self._record_failure(
                user,
                scan_time,
                date_key,
                REASON_OUTSIDE_RADIUS,
                site=site,
                distance=distance,
                coords=coords,
            )
            raise GeofenceViolation(
                "You are outside the allowed radius.",
                distance_meters=distance,
                allowed_radius_meters=site.allowed_radius_meters,
            )

        with self._locks.hold((user.user_id, site.site_id, date_key)):
            deadline.check()
            last = self._logs.latest_success(user_id=user.user_id, site_id=site.site_id, date_key=date_key)
            kind = next_scan_kind(last)
            event = self._logs.append(
                ScanEvent(
                    user_id=user.user_id,
                    user_email=user.email,
                    user_name=user.name,
                    site_id=site.site_id,
                    site_name=site.name,
                    scan_time=scan_time,
                    date_key=date_key,
                    status=ScanStatus.SUCCESS,
                    scan_kind=kind,
                    distance_meters=distance,
                    allowed_radius_meters=site.allowed_radius_meters,
                    user_lat=coords.lat,
                    user_lng=coords.lng,
                    created_by=Provenance.SCANNER,
                )
            )
        logger.info(
            "Scan accepted user=%s site=%s day=%s kind=%s distance=%.1fm",
            user.user_id,
            site.site_id,
            date_key,
            kind.value,
            distance,
        )

        session = None
        if self._aggregator is not None:
            try:
                session = self._aggregator.rebuild_day(user.user_id, date_key)
            except Exception:
                logger.warning("Session rebuild failed user=%s day=%s", user.user_id, date_key, exc_info=True)

        # Writes above stay committed; the caller is told the attempt ran out of time.
        deadline.check()

        message = "Check-in recorded." if kind == ScanKind.CHECK_IN else "Check-out recorded."
        return ScanOutcome(event=event, message=message, session=session)

    def _record_failure(
        self,
        user: Employee,
        scan_time: datetime,
        date_key: str,
        reason: str,
        *,
        site: Optional[Site] = None,
        distance: Optional[float] = None,
        coords: Optional[Coordinates] = None,
    ) -> ScanEvent:
        event = self._logs.append(
            ScanEvent(
                user_id=user.user_id,
                user_email=user.email,
                user_name=user.name,
                site_id=site.site_id if site else None,
                site_name=site.name if site else "Unknown",
                scan_time=scan_time,
                date_key=date_key,
                status=ScanStatus.FAIL,
                distance_meters=distance,
                allowed_radius_meters=site.allowed_radius_meters if site else None,
                user_lat=coords.lat if coords else None,
                user_lng=coords.lng if coords else None,
                fail_reason=reason,
                created_by=Provenance.SCANNER,
            )
        )
        logger.info("Scan rejected user=%s day=%s reason=%s", user.user_id, date_key, reason)
        return event
