"""API routers."""

from api.routers import domains, enhance, generate, quota

__all__ = ["domains", "enhance", "generate", "quota"]
