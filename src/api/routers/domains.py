"""API router for domain availability checks and registration prices."""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request

from api.dependencies import (
    get_client_key,
    get_namecheap_client,
    get_quota_service,
    quota_exceeded_response,
)
from models import QuotaOperation
from models.schemas import (
    DomainCheckRequest,
    DomainCheckResponse,
    DomainPriceRequest,
    DomainPriceResponse,
    QuotaExceededResponse,
)
from services.namecheap import NamecheapClient, NamecheapConfigurationError, extract_tld, is_valid_domain
from services.quota import QuotaService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/check-domain",
    response_model=DomainCheckResponse,
    responses={429: {"model": QuotaExceededResponse}},
)
async def check_domain(
    body: DomainCheckRequest,
    request: Request,
    client: NamecheapClient = Depends(get_namecheap_client),
    quota: QuotaService = Depends(get_quota_service),
):
    """
    Check whether a domain can be registered.

    Raises:
        HTTPException: 400 for a missing or malformed domain or a provider
            error, 500 when Namecheap is not configured, 502 when the
            provider cannot be reached
    """
    client_key = get_client_key(request)
    status = quota.check(client_key, QuotaOperation.DOMAIN_CHECK)
    if status.is_limited:
        return quota_exceeded_response(QuotaOperation.DOMAIN_CHECK, status)

    domain = body.domain.strip().lower()
    if not domain:
        raise HTTPException(status_code=400, detail="Domain name is required")
    if not is_valid_domain(domain):
        raise HTTPException(status_code=400, detail=f"Invalid domain format: {domain}")

    try:
        result = await client.check_domain(domain)
    except NamecheapConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail=str(e))
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"Error connecting to domain provider API: {e}")

    if result.error:
        raise HTTPException(status_code=400, detail=result.error)

    status = quota.increment(client_key, QuotaOperation.DOMAIN_CHECK)
    return DomainCheckResponse(
        domain=result.domain,
        available=result.available,
        is_premium=result.is_premium,
        price=result.price,
        currency=result.currency,
        rate_limit_remaining=status.remaining,
        rate_limit_total=status.total,
    )


@router.post("/get-domain-price", response_model=DomainPriceResponse)
async def get_domain_price(
    body: DomainPriceRequest,
    client: NamecheapClient = Depends(get_namecheap_client),
):
    """
    Look up the registration price of a domain's TLD.

    Raises:
        HTTPException: 400 for a missing domain, a domain without TLD or a
            provider error, 408 on provider timeout, 500 when Namecheap is
            not configured, 502 when the provider cannot be reached
    """
    domain = body.domain.strip().lower()
    if not domain:
        raise HTTPException(status_code=400, detail="Domain parameter is required")
    if extract_tld(domain) is None:
        raise HTTPException(status_code=400, detail="Invalid domain format")

    try:
        result = await client.get_tld_price(domain, body.user_location)
    except NamecheapConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail=str(e))
    except httpx.TimeoutException:
        raise HTTPException(status_code=408, detail="Domain price request timed out")
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"Error connecting to domain provider API: {e}")

    if result.error:
        raise HTTPException(status_code=400, detail=result.error)

    return DomainPriceResponse(
        domain=result.domain,
        tld=result.tld,
        price=result.price,
        currency=result.currency,
    )
