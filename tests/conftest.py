"""Test fixtures for API tests."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable, List, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool
import sys
from pathlib import Path
import os


def ensure_src_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.append(str(src_path))


ensure_src_on_path()

os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("NAMECHEAP_API_KEY", "test-key")
os.environ.setdefault("NAMECHEAP_USERNAME", "tester")
os.environ.setdefault("NAMECHEAP_CLIENT_IP", "127.0.0.1")

from api.dependencies import get_llm_service, get_namecheap_client
from api.routers import domains, enhance, generate, quota
from models import Base, get_db
from services.base_llm import BaseLLMService
from services.namecheap import DomainCheckResult, DomainPriceResult, extract_tld


def make_block(name: str, index: Optional[int] = None, handles: bool = False) -> str:
    header = f"{index}. Name: {name}" if index is not None else f"Name: {name}"
    lines = [
        header,
        f"Pronounced: {name.lower()}",
        f"Why: {name} sounds bright and memorable.",
    ]
    if handles:
        handle = name.lower()
        lines.append(f"@{handle}hq (X), @{handle}_co (Instagram), @{handle}app (Facebook)")
    return "\n".join(lines) + "\n\n"


def make_answer(names: Iterable[str]) -> str:
    return "Here are your names:\n\n" + "".join(make_block(n) for n in names)


class FakeLLMService(BaseLLMService):
    """Scripted provider: ``answers`` feed ``complete``, ``chunks`` feed ``stream``."""

    default_model = "fake-model"
    api_base = "http://fake"

    def __init__(
        self,
        answers: Optional[List[str]] = None,
        chunks: Optional[List[str]] = None,
        error: Optional[Exception] = None,
    ):
        super().__init__("sk-fake")
        self.answers = list(answers or [])
        self.chunks = list(chunks or [])
        self.error = error
        self.calls: List[dict] = []

    async def complete(self, system_prompt, user_prompt, model_name=None, **kwargs):
        self.calls.append({"system": system_prompt, "user": user_prompt, **kwargs})
        if self.error is not None:
            raise self.error
        return self.answers.pop(0) if self.answers else ""

    async def stream(self, system_prompt, user_prompt, model_name=None, **kwargs):
        self.calls.append({"system": system_prompt, "user": user_prompt, **kwargs})
        if self.error is not None:
            raise self.error
        for chunk in self.chunks:
            yield chunk


class FakeNamecheapClient:
    def __init__(self, result: Optional[DomainCheckResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.checked: List[str] = []
        self.price: Optional[DomainPriceResult] = None
        self.priced: List[tuple] = []

    async def check_domain(self, domain: str) -> DomainCheckResult:
        self.checked.append(domain)
        if self.error is not None:
            raise self.error
        return self.result or DomainCheckResult(domain=domain, available=True)

    async def get_tld_price(self, domain: str, user_location: Optional[str] = None) -> DomainPriceResult:
        self.priced.append((domain, user_location))
        if self.error is not None:
            raise self.error
        return self.price or DomainPriceResult(
            domain=domain, tld=extract_tld(domain), price=9.98, currency="USD"
        )


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    connection = db_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def fake_llm():
    return FakeLLMService(answers=[make_answer(["Lumora", "Quillo", "Zentrix"])])


@pytest.fixture(scope="function")
def fake_namecheap():
    return FakeNamecheapClient()


@pytest.fixture(scope="function")
def test_app():
    @asynccontextmanager
    async def test_lifespan(app: FastAPI) -> AsyncGenerator:
        yield

    app = FastAPI(
        title="NameSpark Test",
        description="Generate brandable business names and check their domains",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    app.include_router(generate.router, prefix="/api", tags=["generate"])
    app.include_router(enhance.router, prefix="/api", tags=["enhance"])
    app.include_router(domains.router, prefix="/api", tags=["domains"])
    app.include_router(quota.router, prefix="/api", tags=["quota"])

    @app.get("/")
    async def root():
        return {
            "name": "NameSpark",
            "version": "0.1.0",
            "status": "running",
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


@pytest.fixture(scope="function")
def client(db_session: Session, test_app: FastAPI, fake_llm, fake_namecheap):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[get_llm_service] = lambda: fake_llm
    test_app.dependency_overrides[get_namecheap_client] = lambda: fake_namecheap
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()
