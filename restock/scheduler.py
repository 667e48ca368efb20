"""Scheduled order checks ahead of each truck."""

from __future__ import annotations

import logging

from .errors import StoreError
from .models import TIER_URGENT

logger = logging.getLogger(__name__)


class ReorderScheduler:
    """Runs the order check on a cron schedule and logs the result.

    Uses APScheduler for cron-based scheduling.
    """

    def __init__(self, config) -> None:
        """Initialize scheduler with a RestockConfig.

        Args:
            config: RestockConfig instance.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install 'restock[scheduler]'"
            )

        self._config = config
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._running = False

    def setup_jobs(self) -> None:
        """Register scheduled jobs based on config."""
        expr = self._config.scheduler.order_check_schedule
        self._scheduler.add_job(
            self._job_order_check,
            trigger=self._parse_cron(expr),
            id="order_check",
            name="Order check before truck",
            replace_existing=True,
        )
        logger.info("Registered order check job: %s", expr)

    def start(self) -> None:
        """Start the scheduler. Must be called with an event loop running."""
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled jobs."""
        jobs = []
        for job in self._scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    def _parse_cron(self, expr: str):
        """Parse a cron expression into a CronTrigger."""
        parts = expr.split()
        if len(parts) == 5:
            return self._CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"invalid cron expression: {expr}")

    async def _job_order_check(self) -> None:
        """Compute the order list from the store and log it."""
        logger.info("Running order check...")

        try:
            from .service import order_list_for
            from .store import open_store

            store = open_store(self._config)
            try:
                orders = order_list_for(store, self._config)
            finally:
                store.close()
            self._log_orders(orders)
        except StoreError:
            logger.exception("Order check could not read the store")
        except Exception:
            logger.exception("Order check failed")

    def _log_orders(self, orders) -> None:
        urgent = sum(1 for line in orders.lines if line.tier == TIER_URGENT)
        logger.info(
            "Next truck %s in %d day(s): %d item(s) to order (%d urgent), est. $%.2f",
            orders.window.day_name,
            orders.window.days_until,
            len(orders.lines),
            urgent,
            orders.total_cost,
        )
        for line in orders.lines:
            logger.info(
                "  %-6s %s: order %g %s",
                line.tier,
                line.item.name,
                line.order_amount,
                line.item.unit,
            )
        for warning in orders.warnings:
            logger.warning("  skipped: %s", warning)
