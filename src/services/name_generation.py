import asyncio
import logging
import time
from typing import Iterable, List, Optional

from config import settings
from prompts import load_prompt
from services.base_llm import BaseLLMService
from services.name_stream import (
    BusinessName,
    NameStreamSession,
    StreamResult,
    StreamStatus,
    parse_business_names,
)
from services.name_stream.ledger import RecordCallback

logger = logging.getLogger(__name__)

ENHANCE_MAX_TOKENS = 300
ENHANCE_TEMPERATURE = 0.7


def build_name_prompts(idea: str, count: int, avoid_names: Iterable[str] = ()) -> tuple[str, str]:
    system_prompt = load_prompt("brand_name_system", max_names=max(count, 40))
    user_prompt = load_prompt(
        "brand_name_user",
        idea=idea,
        count=count,
        avoid_names=list(avoid_names),
    )
    return system_prompt, user_prompt


async def generate_names(
    provider: BaseLLMService,
    idea: str,
    count: Optional[int] = None,
    existing_names: Iterable[str] = (),
) -> List[BusinessName]:
    """Ask for ``count`` names in one request and parse the full answer.

    Names in ``existing_names`` are filtered out. When fewer than half of the
    requested names survive, one more request is made and its unique names
    are appended.
    """
    count = count or settings.name_count
    existing = list(existing_names)
    system_prompt, user_prompt = build_name_prompts(idea, count, existing)

    start_time = time.time()
    answer = await provider.complete(system_prompt, user_prompt)
    names = _unique_names(parse_business_names(answer, count), set(existing))

    if existing and len(names) < count / 2:
        logger.info(
            f"Only {len(names)} of {count} names are new, generating additional names"
        )
        answer = await provider.complete(system_prompt, user_prompt)
        seen = set(existing) | {n.name for n in names}
        extra = _unique_names(parse_business_names(answer, count), seen)
        logger.info(f"Added {len(extra)} additional unique names")
        names.extend(extra)

    logger.info(f"Generated {len(names)} names in {time.time() - start_time:.2f}s")
    return names[:count]


def _unique_names(candidates: List[BusinessName], seen: set[str]) -> List[BusinessName]:
    unique = []
    for candidate in candidates:
        if candidate.name in seen:
            continue
        seen.add(candidate.name)
        unique.append(candidate)
    return unique


async def generate_names_streaming(
    provider: BaseLLMService,
    idea: str,
    on_record: RecordCallback,
    count: Optional[int] = None,
    existing_names: Iterable[str] = (),
    timeout: Optional[float] = None,
) -> StreamResult:
    """Stream names from the provider, calling ``on_record`` for each new one.

    If ``timeout`` expires before the provider finishes, the names emitted so
    far are returned with ``StreamStatus.CANCELLED``.

    Raises:
        ProviderError: The provider rejected the request.
        LLMConfigurationError: The provider has no usable API key.
        TransportFailure: The stream broke off mid-way.
    """
    count = count or settings.name_count
    existing = list(existing_names)
    system_prompt, user_prompt = build_name_prompts(idea, count, existing)

    session = NameStreamSession(on_record=on_record, existing_names=existing, max_count=count)
    chunks = provider.stream(system_prompt, user_prompt)

    start_time = time.time()
    try:
        records = await asyncio.wait_for(session.run(chunks), timeout)
    except asyncio.TimeoutError:
        logger.warning(
            f"Name stream timed out after {time.time() - start_time:.1f}s "
            f"with {len(session.records)} names"
        )
        return StreamResult(records=session.records, status=StreamStatus.CANCELLED)

    return StreamResult(records=records, status=StreamStatus.COMPLETED)


async def enhance_prompt(provider: BaseLLMService, idea: str) -> str:
    """Rewrite a vague idea into a short description; falls back to ``idea`` on failure."""
    try:
        enhanced = await provider.complete(
            load_prompt("enhance_system"),
            idea,
            temperature=ENHANCE_TEMPERATURE,
            max_tokens=ENHANCE_MAX_TOKENS,
        )
    except Exception as e:
        logger.error(f"Error enhancing prompt: {e}")
        return idea
    return enhanced.strip() or idea
