from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.clock import Clock
from ..core.exceptions import PersistenceError
from ..gyms.repository import GymRepository
from .model import AutoCheckoutResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AutoCheckoutService:
    """Close sessions members forgot to scan out of.

    Sessions still open from before the end of yesterday are closed *at* that
    cutoff, with ``auto_checkout`` set. Already-closed rows never match again, so
    running the sweep repeatedly is safe. Scheduling is left to the caller
    (cron, an operator button, ...).
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        gyms: Optional[GymRepository] = None,
        *,
        clock: Optional[Clock] = None,
    ):
        self._attendance = attendance
        self._gyms = gyms
        self._clock = clock or Clock()

    def run_for_gym(self, gym_id: str, *, now: Optional[datetime] = None) -> AutoCheckoutResult:
        cutoff = self._clock.end_of_previous_day(now)

        try:
            pending = self._attendance.find_open_sessions_before(gym_id, cutoff)
            if not pending:
                logger.info("auto-checkout gym %s: no pending checkouts before %s", gym_id, cutoff.isoformat())
                return AutoCheckoutResult(
                    success=True, count=0, message="No pending checkouts found", gym_id=gym_id, cutoff=cutoff
                )

            closed = self._attendance.bulk_close_sessions([s.session_id for s in pending], cutoff)
        except PersistenceError as e:
            logger.exception("auto-checkout failed for gym %s", gym_id)
            return AutoCheckoutResult(
                success=False, count=0, message=f"Error running auto-checkout: {e}", gym_id=gym_id, cutoff=cutoff
            )

        logger.info(
            "auto-checkout gym %s: closed %d of %d sessions at %s",
            gym_id,
            closed,
            len(pending),
            cutoff.isoformat(),
        )
        for s in pending:
            logger.info("auto-checkout audit gym=%s member=%s check_in=%s", gym_id, s.member_id, s.check_in_time.isoformat())

        return AutoCheckoutResult(
            success=True,
            count=closed,
            message=f"Auto-checkout completed for {closed} members",
            gym_id=gym_id,
            cutoff=cutoff,
        )

    def run_for_all_gyms(self, *, now: Optional[datetime] = None) -> list[AutoCheckoutResult]:
        if self._gyms is None:
            raise RuntimeError("AutoCheckoutService was built without a gym repository")

        now = now or self._clock.now()
        return [self.run_for_gym(gym.gym_id, now=now) for gym in self._gyms.list_all()]
