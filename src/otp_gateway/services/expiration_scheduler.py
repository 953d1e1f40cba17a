"""APScheduler job that periodically expires stale OTP codes."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from otp_gateway.services.otp_service import OtpService
from otp_gateway.services.token_registry import TokenRegistry

logger = logging.getLogger(__name__)

JOB_ID = "otp_expiration"


class OtpExpirationScheduler:
    """Runs ``OtpService.mark_expired_otps`` every *interval_minutes*.

    When a token registry is supplied the same sweep drops expired
    session tokens from it.
    """

    def __init__(
        self,
        otp_service: OtpService,
        interval_minutes: int,
        token_registry: TokenRegistry | None = None,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self._otp_service = otp_service
        self._interval_minutes = interval_minutes
        self._tokens = token_registry
        self._scheduler = scheduler or AsyncIOScheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Register the sweep job and start the scheduler (needs a running loop)."""
        self._scheduler.add_job(
            self.run_once,
            IntervalTrigger(minutes=self._interval_minutes),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(
            "OTP expiration scheduler started: every %s min", self._interval_minutes
        )

    async def run_once(self) -> None:
        """One sweep; failures are logged so the schedule keeps going."""
        try:
            await self._otp_service.mark_expired_otps()
        except Exception:
            logger.exception("Error in OTP expiration task")

        if self._tokens is not None:
            purged = self._tokens.purge_expired()
            if purged:
                logger.info("Purged %s expired session tokens", purged)

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("OTP expiration scheduler stopped")
