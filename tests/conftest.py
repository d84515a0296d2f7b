"""
Pytest fixtures: banco sqlite em memória, cliente HTTP da aplicação e usuários.
"""
import os

# Ambiente de teste (antes de importar aion_view)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["USE_MOCK"] = "false"
os.environ["WARMUP_ENABLED"] = "false"
os.environ.pop("OPENAI_API_KEY", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import aion_view.models  # noqa: F401
from aion_view.core import settings
from aion_view.database import Base, get_db
from aion_view.services import accounts


@pytest.fixture
async def engine():
    """Engine sqlite em memória compartilhado entre as sessões do teste."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Cliente HTTP da aplicação usando o banco de teste."""
    from aion_view.api import limiter
    from aion_view.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def mock_mode(monkeypatch, tmp_path):
    """Liga USE_MOCK apontando MOCK_DIR para um diretório temporário."""
    monkeypatch.setattr(settings, "USE_MOCK", True)
    monkeypatch.setattr(settings, "MOCK_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
async def admin_user(db):
    user, _ = await accounts.create_or_update_admin(db, "admin@aion.com", "admin123", "Admin Teste")
    return user


@pytest.fixture
async def common_user(db):
    return await accounts.create_user(
        db, email="joao@aion.com", name="João Silva", role="comum", password="senha123"
    )


@pytest.fixture
async def admin_headers(client, admin_user):
    response = await client.post(
        "/api/auth/login", json={"email": "admin@aion.com", "password": "admin123"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
