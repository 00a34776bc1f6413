import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from config import settings
from models import QuotaOperation, QuotaUsage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaStatus:
    remaining: int
    total: int

    @property
    def is_limited(self) -> bool:
        return self.remaining <= 0


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def daily_limit(operation: QuotaOperation) -> int:
    if operation == QuotaOperation.GENERATE:
        return settings.generations_per_day
    return settings.domain_checks_per_day


class QuotaService:
    """Fixed daily usage counters keyed by client and operation.

    Counters reset implicitly at the start of every UTC day because each day
    gets its own row.
    """

    def __init__(self, db: Session, today: Optional[Callable[[], date]] = None):
        self.db = db
        self._today = today or _utc_today

    def _usage(self, client_key: str, operation: QuotaOperation) -> Optional[QuotaUsage]:
        return (
            self.db.query(QuotaUsage)
            .filter(
                QuotaUsage.client_key == client_key,
                QuotaUsage.operation == operation,
                QuotaUsage.day == self._today(),
            )
            .first()
        )

    def check(self, client_key: str, operation: QuotaOperation) -> QuotaStatus:
        total = daily_limit(operation)
        usage = self._usage(client_key, operation)
        used = usage.count if usage else 0
        return QuotaStatus(remaining=max(0, total - used), total=total)

    def increment(self, client_key: str, operation: QuotaOperation) -> QuotaStatus:
        usage = self._usage(client_key, operation)
        if usage is None:
            usage = QuotaUsage(client_key=client_key, operation=operation, day=self._today(), count=0)
            self.db.add(usage)
        usage.count += 1
        self.db.commit()

        status = self.check(client_key, operation)
        logger.debug(
            f"Quota {operation.value} for {client_key}: {status.remaining}/{status.total} left"
        )
        return status
