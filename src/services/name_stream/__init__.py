"""
Incremental parsing of streamed business name suggestions.

Text deltas from a completion stream are buffered by ``StreamReader``, scanned
for complete ``Name:`` blocks by ``IncrementalExtractor`` and, once the stream
ends, re-parsed in full by ``TerminalReconciler``. ``NameStreamSession`` wires
the three together around one ``EmissionLedger`` so every name is emitted once.
"""

from services.name_stream.errors import NameStreamError, ProviderError, TransportFailure
from services.name_stream.extractor import IncrementalExtractor
from services.name_stream.grammar import (
    DEFAULT_GRAMMAR,
    RecordGrammar,
    clean_name,
    iter_blocks,
    parse_block,
    parse_business_names,
)
from services.name_stream.ledger import EmissionLedger
from services.name_stream.models import BusinessName, SocialHandles, StreamResult, StreamStatus
from services.name_stream.reader import StreamReader
from services.name_stream.reconciler import TerminalReconciler
from services.name_stream.session import NameStreamSession

__all__ = [
    "BusinessName",
    "DEFAULT_GRAMMAR",
    "EmissionLedger",
    "IncrementalExtractor",
    "NameStreamError",
    "NameStreamSession",
    "ProviderError",
    "RecordGrammar",
    "SocialHandles",
    "StreamReader",
    "StreamResult",
    "StreamStatus",
    "TerminalReconciler",
    "TransportFailure",
    "clean_name",
    "iter_blocks",
    "parse_block",
    "parse_business_names",
]
