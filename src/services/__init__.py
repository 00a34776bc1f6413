from .name_generation import enhance_prompt, generate_names, generate_names_streaming
from .namecheap import NamecheapClient
from .openai_client import OpenAIService
from .quota import QuotaService

__all__ = [
    "enhance_prompt",
    "generate_names",
    "generate_names_streaming",
    "NamecheapClient",
    "OpenAIService",
    "QuotaService",
]
