"""Background job runner for the storefront settlement engine.

Schedules:
- Maturation sweep: promotes locked wallet credits past their holding period
  (crontab from STOREFRONT_MATURATION_CRON, daily at midnight by default)
- Payment expiry: cancels orders whose payment stayed Pending too long
  (every STOREFRONT_PAYMENT_EXPIRY_INTERVAL_MINUTES)

Jobs run on scheduler threads, so each run pushes its own domain context.

Usage:
    python src/server.py                      # Run the scheduler
    python src/server.py --job maturation     # Run one sweep now and exit
    python src/server.py --job payment-expiry # Run one expiry pass now and exit
"""

import argparse
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from structlog.contextvars import bound_contextvars

from ordering.order.expiry import expire_stale_payments
from shared.config import get_settings
from shared.domain import init_domain
from shared.logging import get_logger
from wallet.account.maturation import mature_locked_credits

logger = get_logger(__name__)


def run_maturation_sweep():
    """Scheduled entry point; the cutoff is taken from the clock at each run."""
    with bound_contextvars(job="maturation_sweep"), init_domain().domain_context():
        try:
            return mature_locked_credits()
        except Exception:
            logger.exception("Maturation sweep failed")
            return None


def run_payment_expiry():
    with bound_contextvars(job="payment_expiry"), init_domain().domain_context():
        try:
            return expire_stale_payments()
        except Exception:
            logger.exception("Payment expiry failed")
            return None


def build_scheduler() -> BackgroundScheduler:
    settings = get_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_maturation_sweep,
        CronTrigger.from_crontab(settings.maturation_cron, timezone="UTC"),
        id="maturation_sweep",
        name="Wallet Credit Maturation",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        run_payment_expiry,
        IntervalTrigger(minutes=settings.payment_expiry_interval_minutes),
        id="payment_expiry",
        name="Stale Payment Expiry",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main():
    parser = argparse.ArgumentParser(description="Storefront background job runner")
    parser.add_argument(
        "--job",
        choices=["maturation", "payment-expiry"],
        help="Run a single job once and exit (default: run the scheduler)",
    )
    args = parser.parse_args()

    init_domain()

    if args.job == "maturation":
        run_maturation_sweep()
        return
    if args.job == "payment-expiry":
        run_payment_expiry()
        return

    scheduler = build_scheduler()
    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    scheduler.start()
    logger.info("Scheduler started", jobs=[job.id for job in scheduler.get_jobs()])
    stop.wait()
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")


if __name__ == "__main__":
    main()
