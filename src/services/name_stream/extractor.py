import logging
from typing import List

from services.name_stream.grammar import DEFAULT_GRAMMAR, RecordGrammar, iter_blocks, parse_block
from services.name_stream.ledger import EmissionLedger
from services.name_stream.models import BusinessName

logger = logging.getLogger(__name__)


class IncrementalExtractor:
    """Emits records from the growing buffer as soon as their blocks close.

    ``_cursor`` marks the start of the first unresolved block; everything
    before it has been accepted or rejected and is never parsed again.
    """

    def __init__(self, ledger: EmissionLedger, grammar: RecordGrammar = DEFAULT_GRAMMAR):
        self.ledger = ledger
        self.grammar = grammar
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    def scan(self, text: str) -> List[BusinessName]:
        emitted = []
        found_block = False

        for block in iter_blocks(text, self.grammar, pos=self._cursor):
            found_block = True
            if not block.closed:
                break
            self._cursor = block.end

            try:
                record = parse_block(block.body, self.grammar)
            except Exception as e:
                logger.warning(f"Skipping unparsable block at offset {block.start}: {e}")
                continue

            if record is not None and self.ledger.offer(record):
                logger.debug(f"Streamed new name: {record.name}")
                emitted.append(record)

        if not found_block:
            # Only a complete line can never turn into a header later.
            last_newline = text.rfind("\n", self._cursor)
            if last_newline >= 0:
                self._cursor = last_newline + 1

        return emitted
