"""API router for prompt enhancement."""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_llm_service
from models.schemas import EnhanceRequest, EnhanceResponse
from services.base_llm import BaseLLMService
from services.name_generation import enhance_prompt

router = APIRouter()


@router.post("/enhance", response_model=EnhanceResponse)
async def enhance(
    body: EnhanceRequest,
    provider: BaseLLMService = Depends(get_llm_service),
) -> EnhanceResponse:
    """Rewrite a short business idea into a richer description for naming."""
    prompt = body.prompt.strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    return EnhanceResponse(enhanced_prompt=await enhance_prompt(provider, prompt))
