"""
Aion View - Main Application
Backend do painel de ciclo de vida de equipamentos médicos
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.middleware.base import BaseHTTPMiddleware

from aion_view.core import settings
from aion_view.core.errors import AionError
from aion_view.core.warmup_scheduler import start_warmup_service, stop_warmup_service
from aion_view.database import init_db
from aion_view.api import (
    auth_router,
    users_router,
    lifecycle_router,
    critical_router,
    indicators_router,
    rounds_router,
    work_orders_router,
    purchase_requests_router,
    investments_router,
    contracts_router,
    warmup_router,
    limiter
)

# Rate limiting
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle do aplicativo"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT} (mock={settings.USE_MOCK})")

    # Inicializa banco de dados
    await init_db()
    logger.info("Database initialized")

    start_warmup_service()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await stop_warmup_service()


# Middleware de headers de seguranca
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adiciona headers de seguranca em todas as respostas"""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Cache control para endpoints de autenticacao
        if "/auth" in request.url.path:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
        return response


# Cria aplicação
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ciclo de vida, criticidade e custos de equipamentos médicos",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)

# Configura rate limiter na aplicacao
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(AionError)
async def aion_error_handler(request: Request, exc: AionError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"{request.method} {request.url.path}: violação de integridade ({exc.orig})")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": True, "message": "Registro duplicado", "code": "DUPLICATE_ENTRY"}
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path}: erro não tratado", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "message": str(exc) if settings.DEBUG else "Erro interno do servidor",
            "code": "INTERNAL_ERROR"
        }
    )


# Headers de seguranca (adicionar ANTES do CORS)
app.add_middleware(SecurityHeadersMiddleware)

# CORS (deve vir DEPOIS dos headers de seguranca)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(lifecycle_router, prefix="/api")
app.include_router(critical_router, prefix="/api")
app.include_router(indicators_router, prefix="/api")
app.include_router(rounds_router, prefix="/api")
app.include_router(work_orders_router, prefix="/api")
app.include_router(purchase_requests_router, prefix="/api")
app.include_router(investments_router, prefix="/api")
app.include_router(contracts_router, prefix="/api")
app.include_router(warmup_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy", "mock": settings.USE_MOCK}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "aion_view.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
