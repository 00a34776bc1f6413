import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class QuotaOperation(str, enum.Enum):
    GENERATE = "generate"
    DOMAIN_CHECK = "domain-check"


class QuotaUsage(Base):
    """Per-client, per-operation usage counter for one UTC calendar day."""

    __tablename__ = "quota_usage"
    __table_args__ = (
        UniqueConstraint("client_key", "operation", "day", name="uq_quota_usage_client_operation_day"),
        {'extend_existing': True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    operation: Mapped[QuotaOperation] = mapped_column(
        Enum(QuotaOperation, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
