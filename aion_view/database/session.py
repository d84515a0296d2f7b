"""
Aion View - Database Session
"""
import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import select

from aion_view.core.config import settings

logger = logging.getLogger(__name__)

# Engine assíncrono
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

# Base para models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """Dependency para injetar sessão do banco"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def ensure_default_admin(session: AsyncSession):
    """
    Garante que exista ao menos um administrador ativo.

    Se o hash do admin padrão estiver corrompido (não começa com $2b$/$2a$),
    restaura a senha padrão para não perder o acesso ao sistema.
    """
    from aion_view.core.security import get_password_hash
    from aion_view.models import User, UserRole

    result = await session.execute(
        select(User).where(User.role == UserRole.ADMIN.value).limit(1)
    )
    admin = result.scalar_one_or_none()

    if not admin:
        admin = User(
            email=settings.DEFAULT_ADMIN_EMAIL.lower(),
            name=settings.DEFAULT_ADMIN_NAME,
            password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
            active=True,
            can_impersonate=True,
        )
        session.add(admin)
        await session.commit()
        logger.warning(f"[DB] Admin padrão criado: {admin.email} - altere a senha após o primeiro login")
        return

    if not admin.password or not admin.password.startswith(('$2b$', '$2a$')):
        logger.error(f"[DB] ALERTA: Hash do admin {admin.email} está CORROMPIDO!")
        admin.password = get_password_hash(settings.DEFAULT_ADMIN_PASSWORD)
        await session.commit()
        logger.info(f"[DB] Hash do admin {admin.email} foi RESTAURADO")
    else:
        logger.info(f"[DB] Admin {admin.email} - hash válido (bcrypt)")


async def init_db():
    """Inicializa banco de dados (cria tabelas) e verifica o admin padrão"""
    import aion_view.models  # noqa: F401 (registra os models no metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        try:
            await ensure_default_admin(session)
        except Exception as e:
            logger.error(f"[DB] Erro ao verificar admin padrão: {e}")
            await session.rollback()
