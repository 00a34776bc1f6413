from typing import List, Optional

from pydantic import BaseModel, Field


class SocialHandlesResponse(BaseModel):
    twitter: str
    instagram: str
    facebook: str


class BusinessNameResponse(BaseModel):
    name: str
    pronunciation: str
    description: str
    social_handles: SocialHandlesResponse
    domains: List[str]
    domain: str

    model_config = {"from_attributes": True}


class GenerateRequest(BaseModel):
    prompt: str = Field(default="", max_length=4000)
    stream: bool = False
    existing_names: List[str] = Field(
        default_factory=list,
        description="Names already shown to the user that must not be suggested again",
    )


class GenerationTiming(BaseModel):
    total_ms: int
    provider_ms: int


class GenerateResponse(BaseModel):
    names: List[BusinessNameResponse]
    timing: GenerationTiming
    rate_limit_remaining: int
    rate_limit_total: int


class EnhanceRequest(BaseModel):
    prompt: str = Field(default="", max_length=4000)


class EnhanceResponse(BaseModel):
    enhanced_prompt: str


class DomainCheckRequest(BaseModel):
    domain: str = ""


class DomainCheckResponse(BaseModel):
    domain: str
    available: bool
    is_premium: bool
    price: Optional[float] = None
    currency: Optional[str] = None
    rate_limit_remaining: int
    rate_limit_total: int


class DomainPriceRequest(BaseModel):
    domain: str = ""
    user_location: Optional[str] = None


class DomainPriceResponse(BaseModel):
    domain: str
    tld: str
    price: float
    currency: str


class QuotaEntry(BaseModel):
    remaining: int
    total: int


class QuotaResponse(BaseModel):
    generate: QuotaEntry
    domain_check: QuotaEntry


class QuotaExceededResponse(BaseModel):
    error: str
    rate_limit_remaining: int = 0
    rate_limit_total: int
    quota_exceeded: bool = True
