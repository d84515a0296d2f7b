"""
Aion View - Cache Service
Cache de respostas HTTP persistido na tabela http_cache

Falhas de cache nunca derrubam a requisição: são logadas e tratadas como
cache ausente.
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core import settings
from aion_view.models import HttpCache

logger = logging.getLogger(__name__)


def generate_cache_key(prefix: str, params: Optional[dict] = None) -> str:
    """prefix:{json dos parâmetros com chaves ordenadas}"""
    return f"{prefix}:{json.dumps(params or {}, sort_keys=True, default=str)}"


def _ttl(ttl_minutes: Optional[int]) -> timedelta:
    return timedelta(minutes=settings.CACHE_TTL_MINUTES if ttl_minutes is None else ttl_minutes)


async def get_cache(db: AsyncSession, key: str, ttl_minutes: Optional[int] = None) -> Optional[Any]:
    """Retorna o payload se ainda válido; expirado é removido"""
    try:
        result = await db.execute(select(HttpCache).where(HttpCache.key == key))
        entry = result.scalar_one_or_none()
        if not entry:
            return None

        if datetime.utcnow() - entry.created_at > _ttl(ttl_minutes):
            await db.delete(entry)
            await db.commit()
            logger.debug(f"[CACHE] Expirado: {key}")
            return None

        return json.loads(entry.payload)
    except Exception as e:
        logger.error(f"[CACHE] Erro ao ler cache {key}: {e}")
        await db.rollback()
        return None


async def set_cache(db: AsyncSession, key: str, value: Any):
    """Grava (ou substitui) o payload da chave"""
    try:
        payload = json.dumps(value, default=str, ensure_ascii=False)
        entry = await db.get(HttpCache, key)
        if entry:
            entry.payload = payload
            entry.created_at = datetime.utcnow()
        else:
            db.add(HttpCache(key=key, payload=payload, created_at=datetime.utcnow()))
        await db.commit()
    except Exception as e:
        logger.error(f"[CACHE] Erro ao gravar cache {key}: {e}")
        await db.rollback()


async def delete_cache(db: AsyncSession, key: str):
    try:
        await db.execute(delete(HttpCache).where(HttpCache.key == key))
        await db.commit()
    except Exception as e:
        logger.error(f"[CACHE] Erro ao remover cache {key}: {e}")
        await db.rollback()


async def clear_cache(db: AsyncSession, prefix: Optional[str] = None) -> int:
    """Remove todo o cache, ou apenas as chaves com o prefixo informado"""
    try:
        query = delete(HttpCache)
        if prefix:
            query = query.where(HttpCache.key.startswith(f"{prefix}:"))
        result = await db.execute(query)
        await db.commit()
        logger.info(f"[CACHE] {result.rowcount} entradas removidas" + (f" ({prefix})" if prefix else ""))
        return result.rowcount
    except Exception as e:
        logger.error(f"[CACHE] Erro ao limpar cache: {e}")
        await db.rollback()
        return 0


async def clean_expired_cache(db: AsyncSession, ttl_minutes: Optional[int] = None) -> int:
    """Remove entradas expiradas; retorna quantas foram removidas"""
    try:
        cutoff = datetime.utcnow() - _ttl(ttl_minutes)
        result = await db.execute(delete(HttpCache).where(HttpCache.created_at < cutoff))
        await db.commit()
        if result.rowcount:
            logger.info(f"[CACHE] {result.rowcount} entradas expiradas removidas")
        return result.rowcount
    except Exception as e:
        logger.error(f"[CACHE] Erro ao limpar cache expirado: {e}")
        await db.rollback()
        return 0


async def cached(
    db: AsyncSession,
    key: str,
    producer: Callable[[], Awaitable[Any]],
    ttl_minutes: Optional[int] = None
) -> Any:
    """
    Devolve o valor em cache ou chama producer() e grava o resultado.
    Em modo mock o cache é ignorado.
    """
    if settings.USE_MOCK:
        return await producer()

    hit = await get_cache(db, key, ttl_minutes)
    if hit is not None:
        logger.debug(f"[CACHE] Hit: {key}")
        return hit

    value = await producer()
    await set_cache(db, key, value)
    return value
