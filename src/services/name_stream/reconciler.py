import logging
from typing import List

from services.name_stream.grammar import DEFAULT_GRAMMAR, RecordGrammar, iter_blocks, parse_block
from services.name_stream.ledger import EmissionLedger
from services.name_stream.models import BusinessName

logger = logging.getLogger(__name__)


class TerminalReconciler:
    """Final full-text pass that picks up records the incremental scan missed."""

    def __init__(self, ledger: EmissionLedger, grammar: RecordGrammar = DEFAULT_GRAMMAR):
        self.ledger = ledger
        self.grammar = grammar

    def reconcile(self, text: str) -> List[BusinessName]:
        try:
            blocks = list(iter_blocks(text, self.grammar, final=True))
        except Exception as e:
            logger.error(
                f"Final parse failed, keeping {len(self.ledger.records)} streamed names: {e}"
            )
            return []

        recovered = []
        for block in blocks:
            if self.ledger.full:
                break
            try:
                record = parse_block(block.body, self.grammar)
            except Exception as e:
                logger.warning(f"Skipping unparsable block at offset {block.start}: {e}")
                continue
            if record is not None and self.ledger.offer(record):
                recovered.append(record)

        if recovered:
            logger.info(f"Recovered {len(recovered)} names in final pass")
        return recovered
