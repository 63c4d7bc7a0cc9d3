"""Background task scheduler using APScheduler."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from artifactory_roles.config import get_settings

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None


async def repair_pending_roles_job() -> None:
    """Background job to repair roles left pending by failed reconciliations."""
    from artifactory_roles.database import async_session_maker
    from artifactory_roles.services.role_service import RoleService

    async with async_session_maker() as session:
        try:
            service = RoleService(session)
            results = await service.repair_pending_roles()
            if results:
                logger.info(f"Pending role repair completed: {results}")
            else:
                logger.debug("No pending roles to repair")
        except Exception as e:
            logger.error(f"Pending role repair failed: {e}")
            await session.rollback()


async def start_scheduler() -> None:
    """Start the background task scheduler."""
    global _scheduler

    settings = get_settings()
    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        repair_pending_roles_job,
        trigger=IntervalTrigger(minutes=settings.repair_interval_minutes),
        id="repair_pending_roles",
        name="Repair pending roles",
        replace_existing=True,
    )

    _scheduler.start()
    logger.info("Background scheduler started")


async def stop_scheduler() -> None:
    """Stop the background task scheduler."""
    global _scheduler

    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Background scheduler stopped")
