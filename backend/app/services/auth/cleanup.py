"""Scheduler for the periodic idle-session sweep."""
import asyncio
import logging

from app.core.config import settings
from app.services.auth.sessions import SessionRegistry

logger = logging.getLogger(__name__)


class SessionCleanupScheduler:
    """Runs ``cleanup_expired_sessions`` on a fixed interval."""

    def __init__(self, registry: SessionRegistry, interval_minutes: int | None = None):
        self.registry = registry
        self.running = False
        self.interval_minutes = interval_minutes or settings.session_cleanup_interval_minutes

    async def start(self) -> None:
        """Start the scheduler loop."""
        self.running = True
        logger.info(f"Session cleanup scheduler started (interval: {self.interval_minutes} minutes)")

        while self.running:
            try:
                self.run_once()
            except Exception as e:
                logger.exception(f"Error in session cleanup loop: {e}")

            # Sleep in 1-second intervals for responsive shutdown
            sleep_seconds = self.interval_minutes * 60
            for _ in range(sleep_seconds):
                if not self.running:
                    break
                await asyncio.sleep(1)

    def run_once(self) -> list[int]:
        expired = self.registry.cleanup_expired_sessions()
        logger.info(f"Session sweep removed {len(expired)} sessions, {self.registry.count()} remain")
        return expired

    def stop(self) -> None:
        """Stop the scheduler loop."""
        self.running = False
        logger.info("Session cleanup scheduler stopped")
