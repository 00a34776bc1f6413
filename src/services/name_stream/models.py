"""
Data models for streamed business name suggestions.

Records are built transiently from a grammar block and handed to the consumer
as soon as they are accepted.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List

DOMAIN_SUFFIXES = (".com", ".io", ".co")


@dataclass(frozen=True)
class SocialHandles:
    """Handles for the three fixed social channels."""
    twitter: str
    instagram: str
    facebook: str


@dataclass(frozen=True)
class BusinessName:
    """A single generated name suggestion."""
    name: str
    pronunciation: str
    description: str
    social_handles: SocialHandles
    domains: List[str] = field(default_factory=list)

    @property
    def domain(self) -> str:
        return self.domains[0] if self.domains else ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["domain"] = self.domain
        return data


class StreamStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class StreamResult:
    records: List[BusinessName]
    status: StreamStatus = StreamStatus.COMPLETED

    @property
    def completed(self) -> bool:
        return self.status == StreamStatus.COMPLETED
