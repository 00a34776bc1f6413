"""API router for business name generation."""

import asyncio
import json
import logging
import time
from typing import AsyncIterator, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from api.dependencies import (
    get_client_key,
    get_llm_service,
    get_quota_service,
    quota_exceeded_response,
)
from config import settings
from models import QuotaOperation
from models.schemas import (
    BusinessNameResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationTiming,
    QuotaExceededResponse,
)
from services.base_llm import BaseLLMService, LLMConfigurationError
from services.name_generation import generate_names, generate_names_streaming
from services.name_stream import BusinessName, ProviderError
from services.quota import QuotaService, QuotaStatus

logger = logging.getLogger(__name__)

router = APIRouter()

_STREAM_DONE = object()


def format_sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def to_response(record: BusinessName) -> BusinessNameResponse:
    return BusinessNameResponse(**record.to_dict())


async def stream_name_events(
    provider: BaseLLMService,
    prompt: str,
    existing_names: List[str],
    quota: QuotaStatus,
) -> AsyncIterator[str]:
    """Server-sent events for one streaming generation.

    Emits ``start`` and ``ratelimit`` first, one ``chunk`` per accepted name,
    then either ``complete`` or ``error``.
    """
    yield format_sse("start", {"status": "started"})
    yield format_sse("ratelimit", {"remaining": quota.remaining, "total": quota.total})

    queue: asyncio.Queue = asyncio.Queue()
    task = asyncio.create_task(
        generate_names_streaming(
            provider,
            prompt,
            on_record=queue.put_nowait,
            count=settings.name_count,
            existing_names=existing_names,
            timeout=settings.stream_timeout,
        )
    )
    task.add_done_callback(lambda _: queue.put_nowait(_STREAM_DONE))

    try:
        while True:
            item = await queue.get()
            if item is _STREAM_DONE:
                break
            yield format_sse("chunk", to_response(item).model_dump())

        result = task.result()
        yield format_sse(
            "complete",
            {
                "status": "complete",
                "completed": result.completed,
                "count": len(result.records),
            },
        )
    except Exception as e:
        logger.error(f"Streaming error: {e}")
        yield format_sse("error", {"error": str(e) or "Unknown error"})
    finally:
        if not task.done():
            task.cancel()


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={429: {"model": QuotaExceededResponse}},
)
async def generate(
    body: GenerateRequest,
    request: Request,
    provider: BaseLLMService = Depends(get_llm_service),
    quota: QuotaService = Depends(get_quota_service),
):
    """
    Generate business name suggestions for an idea.

    With ``stream`` set, names are sent as server-sent events as soon as the
    model finishes each one; otherwise the full list is returned as JSON.
    ``existing_names`` are never suggested again ("load more").
    """
    request_start = time.time()
    client_key = get_client_key(request)
    status = quota.check(client_key, QuotaOperation.GENERATE)
    if status.is_limited:
        return quota_exceeded_response(QuotaOperation.GENERATE, status)

    prompt = body.prompt.strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    if body.existing_names:
        logger.info(f"Load more request with {len(body.existing_names)} existing names")

    status = quota.increment(client_key, QuotaOperation.GENERATE)

    if body.stream:
        return StreamingResponse(
            stream_name_events(provider, prompt, body.existing_names, status),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    provider_start = time.time()
    try:
        names = await generate_names(provider, prompt, settings.name_count, body.existing_names)
    except LLMConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except ProviderError as e:
        logger.error(f"Error generating business names: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to generate business names: {e}")
    except Exception as e:
        logger.error(f"Unexpected error generating business names: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate business names")

    provider_ms = int((time.time() - provider_start) * 1000)
    total_ms = int((time.time() - request_start) * 1000)
    return GenerateResponse(
        names=[to_response(n) for n in names],
        timing=GenerationTiming(total_ms=total_ms, provider_ms=provider_ms),
        rate_limit_remaining=status.remaining,
        rate_limit_total=status.total,
    )
