import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import domains, enhance, generate, quota
from config import settings
from models import init_db

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    init_db()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; name generation requests will fail")
    logger.info(f"Using model {settings.openai_model} for name generation")
    yield

app = FastAPI(
    title=settings.app_name,
    description="Generate brandable business names and check their domains",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generate.router, prefix="/api", tags=["generate"])
app.include_router(enhance.router, prefix="/api", tags=["enhance"])
app.include_router(domains.router, prefix="/api", tags=["domains"])
app.include_router(quota.router, prefix="/api", tags=["quota"])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": VERSION,
        "status": "running",
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}
