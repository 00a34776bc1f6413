from models.database import Base, get_db, init_db
from models.domain import QuotaOperation, QuotaUsage

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "QuotaOperation",
    "QuotaUsage",
]
