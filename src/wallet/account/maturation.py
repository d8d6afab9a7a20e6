"""Maturation sweep: promotes locked credits past their holding period.

The cutoff (``as_of - holding_period_days``) is computed each time the sweep
runs. The due credits of every account are captured from a snapshot, then
each account is promoted by its own ``MatureAccountCredits`` command, which
matches credits by id and ``credited_at``. A credit added or matured
concurrently is never touched twice, and a write that races with a reward or
commission credit is retried on the account's version. Running the sweep
again immediately finds nothing to do.

A failure on one account is logged and the sweep moves on to the next.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, List, String
from protean.utils.globals import current_domain

from shared.config import get_settings
from shared.domain import storefront
from wallet.account.account import CustomerAccount

logger = structlog.get_logger(__name__)


@storefront.command(part_of="CustomerAccount")
class MatureAccountCredits:
    """Promote the listed credits of one account, if they are still locked."""

    customer_id = Identifier(required=True)
    credit_ids = List(content_type=String)
    cutoff = DateTime(required=True)


@dataclass
class MaturationReport:
    cutoff: datetime
    accounts_scanned: int = 0
    accounts_updated: int = 0
    amount_matured: int = 0
    failed_accounts: list[str] = field(default_factory=list)


def maturation_cutoff(as_of=None):
    """Credits credited at or before this instant are mature."""
    return (as_of or datetime.now(UTC)) - timedelta(days=get_settings().holding_period_days)


@storefront.command_handler(part_of=CustomerAccount)
class MaturationHandler:
    @handle(MatureAccountCredits)
    def mature_account_credits(self, command):
        repo = current_domain.repository_for(CustomerAccount)
        account = repo.get(command.customer_id)

        wanted = set(command.credit_ids)
        due = [pair for pair in account.due_credits(command.cutoff) if pair[0] in wanted]
        amount = account.mature_credits(due)
        if amount:
            repo.add(account)
        return amount


def mature_locked_credits(as_of=None):
    """Run one sweep over every account and report what matured."""
    cutoff = maturation_cutoff(as_of)
    snapshots = current_domain.repository_for(CustomerAccount).all_accounts()
    report = MaturationReport(cutoff=cutoff, accounts_scanned=len(snapshots))

    for snapshot in snapshots:
        due = snapshot.due_credits(cutoff)
        if not due:
            continue
        try:
            amount = current_domain.process(
                MatureAccountCredits(
                    customer_id=snapshot.id,
                    credit_ids=[credit_id for credit_id, _ in due],
                    cutoff=cutoff,
                ),
                asynchronous=False,
            )
        except Exception:
            logger.exception("Maturation failed for account", customer_id=snapshot.id)
            report.failed_accounts.append(snapshot.id)
            continue

        if amount:
            report.accounts_updated += 1
            report.amount_matured += amount
            logger.debug("Credits matured", customer_id=snapshot.id, amount=amount)

    logger.info(
        "Maturation sweep complete",
        cutoff=cutoff.isoformat(),
        accounts_scanned=report.accounts_scanned,
        accounts_updated=report.accounts_updated,
        amount_matured=report.amount_matured,
        failed=len(report.failed_accounts),
    )
    return report
