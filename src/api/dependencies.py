"""Shared FastAPI dependencies."""

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from models import QuotaOperation, get_db
from models.schemas import QuotaExceededResponse
from services.base_llm import BaseLLMService
from services.namecheap import NamecheapClient
from services.openai_client import OpenAIService
from services.quota import QuotaService, QuotaStatus

QUOTA_MESSAGES = {
    QuotaOperation.GENERATE: "Daily generation limit reached ({total}/day). Please try again tomorrow.",
    QuotaOperation.DOMAIN_CHECK: "Daily domain check limit reached ({total}/day). Please try again tomorrow.",
}


def get_llm_service() -> BaseLLMService:
    return OpenAIService()


def get_namecheap_client() -> NamecheapClient:
    return NamecheapClient()


def get_quota_service(db: Session = Depends(get_db)) -> QuotaService:
    return QuotaService(db)


def get_client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "127.0.0.1"


def quota_exceeded_response(operation: QuotaOperation, status: QuotaStatus) -> JSONResponse:
    body = QuotaExceededResponse(
        error=QUOTA_MESSAGES[operation].format(total=status.total),
        rate_limit_total=status.total,
    )
    return JSONResponse(status_code=429, content=body.model_dump())
