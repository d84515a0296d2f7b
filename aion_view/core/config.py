"""
Aion View - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Carrega .env com override para sobrescrever variáveis do sistema
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Aion View"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Database (sqlite local, postgresql+asyncpg em produção)
    DATABASE_URL: str = "sqlite+aiosqlite:///./aion_view.db"

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # Bloqueio de conta
    MAX_LOGIN_ATTEMPTS: int = 5
    LOCKOUT_MINUTES: int = 15

    # Rate limiting (sintaxe slowapi)
    LOGIN_RATE_LIMIT: str = "5/15minutes"
    API_RATE_LIMIT: str = "100/minute"

    # CORS
    CORS_ORIGINS: list = ["*"]

    # Modo mock (arquivos JSON em ./mocks em vez do banco)
    USE_MOCK: bool = False
    MOCK_DIR: str = "mocks"
    MOCK_SEED: int = 12345

    # Cache HTTP persistido no banco
    CACHE_TTL_MINUTES: int = 30

    # Warm-up periódico das rotas cacheadas
    WARMUP_ENABLED: bool = True
    WARMUP_INTERVAL_MINUTES: int = 60
    WARMUP_INITIAL_DELAY_SECONDS: int = 5
    WARMUP_TIMEOUT_SECONDS: float = 30.0
    WARMUP_BASE_URL: Optional[str] = None

    @property
    def warmup_base_url(self) -> str:
        """Returns WARMUP_BASE_URL if set, otherwise the local server"""
        return self.WARMUP_BASE_URL or f"http://localhost:{self.PORT}"

    # Resumo por IA (OpenAI compatível)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4-turbo-preview"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TIMEOUT_SECONDS: float = 60.0

    # Indicadores
    MAINTENANCE_COST_TARGET_PERCENT: float = 4.0
    HOURS_PER_MONTH: float = 730.0

    # Usuários padrão
    DEFAULT_ADMIN_EMAIL: str = "admin@aion.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_ADMIN_NAME: str = "Administrador"
    DEFAULT_USER_PASSWORD: str = "senha123"

    class Config:
        extra = "ignore"
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
