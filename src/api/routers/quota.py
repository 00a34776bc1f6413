"""API router for remaining daily quota."""

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_client_key, get_quota_service
from models import QuotaOperation
from models.schemas import QuotaEntry, QuotaResponse
from services.quota import QuotaService

router = APIRouter()


@router.get("/quota", response_model=QuotaResponse)
async def get_quota(
    request: Request,
    quota: QuotaService = Depends(get_quota_service),
) -> QuotaResponse:
    client_key = get_client_key(request)
    generate = quota.check(client_key, QuotaOperation.GENERATE)
    domain_check = quota.check(client_key, QuotaOperation.DOMAIN_CHECK)
    return QuotaResponse(
        generate=QuotaEntry(remaining=generate.remaining, total=generate.total),
        domain_check=QuotaEntry(remaining=domain_check.remaining, total=domain_check.total),
    )
