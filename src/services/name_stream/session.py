import logging
from typing import AsyncIterable, Iterable, List, Optional

from services.base_llm import LLMConfigurationError
from services.name_stream.errors import ProviderError, TransportFailure
from services.name_stream.extractor import IncrementalExtractor
from services.name_stream.grammar import DEFAULT_GRAMMAR, RecordGrammar
from services.name_stream.ledger import EmissionLedger, RecordCallback
from services.name_stream.models import BusinessName
from services.name_stream.reader import Chunk, StreamReader
from services.name_stream.reconciler import TerminalReconciler

logger = logging.getLogger(__name__)


class NameStreamSession:
    """Turns one completion stream into an ordered, deduplicated list of names.

    Each generation request owns its own session: the text buffer and the
    seen-names set are never shared between requests.

    Args:
        on_record: Called synchronously with each record as it is accepted.
        existing_names: Names to treat as already seen ("load more").
        max_count: Stop emitting once this many records were accepted.
        grammar: Which fields a block needs before it can be emitted.
        incremental: Disable to rely on the end-of-stream pass alone.
    """

    def __init__(
        self,
        on_record: Optional[RecordCallback] = None,
        existing_names: Iterable[str] = (),
        max_count: Optional[int] = None,
        grammar: RecordGrammar = DEFAULT_GRAMMAR,
        incremental: bool = True,
    ):
        self.reader = StreamReader()
        self.ledger = EmissionLedger(on_record, existing_names, max_count)
        self.extractor = IncrementalExtractor(self.ledger, grammar)
        self.reconciler = TerminalReconciler(self.ledger, grammar)
        self.incremental = incremental
        self.finished = False

    @property
    def records(self) -> List[BusinessName]:
        return list(self.ledger.records)

    @property
    def text(self) -> str:
        return self.reader.text

    def feed(self, chunk: Chunk) -> List[BusinessName]:
        decoded = self.reader.feed(chunk)
        if not decoded or not self.incremental or self.ledger.full:
            return []
        return self.extractor.scan(self.reader.text)

    def finish(self) -> List[BusinessName]:
        self.reader.finish()
        self.finished = True
        return self.reconciler.reconcile(self.reader.text)

    async def run(self, chunks: AsyncIterable[Chunk]) -> List[BusinessName]:
        """Consume ``chunks`` to the end and return every accepted record.

        Raises:
            ProviderError: The provider rejected the request.
            LLMConfigurationError: The provider has no usable API key.
            TransportFailure: The stream broke off; ``records`` on the
                exception holds what was already emitted.
        """
        iterator = chunks.__aiter__()
        try:
            while True:
                try:
                    chunk = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                except (ProviderError, LLMConfigurationError):
                    raise
                except Exception as e:
                    logger.error(
                        f"Name stream failed after {self.reader.chunk_count} chunks "
                        f"and {len(self.ledger.records)} names: {e}"
                    )
                    raise TransportFailure(str(e), self.records) from e
                self.feed(chunk)
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

        self.finish()
        logger.info(
            f"Name stream completed: {len(self.ledger.records)} names "
            f"from {self.reader.chunk_count} chunks"
        )
        return self.records
