import logging
from typing import Callable, Iterable, List, Optional

from services.name_stream.models import BusinessName

logger = logging.getLogger(__name__)

RecordCallback = Callable[[BusinessName], None]


class EmissionLedger:
    """Seen names and emitted records for one streaming call.

    The extractor and reconciler both go through ``offer`` so a name is
    emitted at most once per session. Names passed in ``existing_names``
    count as seen from the start.
    """

    def __init__(
        self,
        on_record: Optional[RecordCallback] = None,
        existing_names: Iterable[str] = (),
        max_count: Optional[int] = None,
    ):
        self._on_record = on_record
        self.seen: set[str] = set(existing_names)
        self.records: List[BusinessName] = []
        self.max_count = max_count

    @property
    def full(self) -> bool:
        return self.max_count is not None and len(self.records) >= self.max_count

    def offer(self, record: BusinessName) -> bool:
        """Emit ``record`` unless its name was already seen or the quota is met."""
        if record.name in self.seen:
            logger.debug(f"Skipping duplicate name: {record.name}")
            return False
        if self.full:
            return False

        self.seen.add(record.name)
        self.records.append(record)
        if self._on_record is not None:
            self._on_record(record)
        return True
