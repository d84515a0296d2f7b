"""
Aion View - Warm-up Scheduler
Serviço de warm-up periódico das rotas cacheadas

Este modulo roda em background e:
1. Aguarda o servidor subir (WARMUP_INITIAL_DELAY_SECONDS)
2. Dispara GETs em paralelo para as rotas que usam cache
3. Repete a cada WARMUP_INTERVAL_MINUTES

Uma rota com erro nunca impede as outras de completarem.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import httpx

from aion_view.core.config import settings

logger = logging.getLogger(__name__)

_warmup_task: Optional[asyncio.Task] = None


@dataclass
class WarmupTask:
    name: str
    path: str
    enabled: bool = True


@dataclass
class WarmupReport:
    ok: int = 0
    failed: int = 0
    skipped: bool = False
    duration_seconds: float = 0.0
    failures: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "failed": self.failed,
            "skipped": self.skipped,
            "duration_seconds": round(self.duration_seconds, 3),
            "failures": self.failures,
        }


def build_warmup_tasks(today: Optional[date] = None) -> List[WarmupTask]:
    """Rotas principais que usam cache"""
    year = (today or date.today()).year
    return [
        WarmupTask("Setores de Investimentos", "/api/ecm/investments/sectors/list"),
        WarmupTask("Investimentos", "/api/ecm/investments"),
        WarmupTask("Rondas", "/api/ecm/rounds"),
        WarmupTask("OS Disponíveis (Abertas)", "/api/ecm/rounds/os/available?situacao=Aberta"),
        WarmupTask("OS Disponíveis (Fechadas)", "/api/ecm/rounds/os/available?situacao=Fechada"),
        WarmupTask("OS Disponíveis (Todas)", "/api/ecm/rounds/os/available"),
        WarmupTask("Inventário", "/api/ecm/lifecycle/inventario?page=1&page_size=100"),
        WarmupTask(
            "Cronograma",
            f"/api/ecm/lifecycle/cronograma?data_inicio={year}-01-01&data_fim={year}-12-31",
        ),
        WarmupTask("Equipamentos Críticos", "/api/ecm/critical/equipamentos"),
        WarmupTask("Contratos", "/api/ecm/contracts"),
    ]


async def warmup_route(client: httpx.AsyncClient, task: WarmupTask) -> bool:
    """
    GET em uma rota para popular o cache.
    Nunca levanta exceção: retorna True se a rota respondeu 2xx.
    """
    start = time.monotonic()
    try:
        response = await client.get(task.path, timeout=settings.WARMUP_TIMEOUT_SECONDS)
        duration = time.monotonic() - start

        if response.is_success:
            logger.info(f"[WARMUP] {task.name} OK ({duration:.2f}s)")
            return True

        logger.warning(
            f"[WARMUP] {task.name} retornou {response.status_code} ({duration:.2f}s): "
            f"{response.text[:100]}"
        )
        return False

    except httpx.TimeoutException:
        logger.warning(f"[WARMUP] {task.name} timeout após {settings.WARMUP_TIMEOUT_SECONDS}s")
        return False
    except Exception as e:
        logger.error(f"[WARMUP] Erro em {task.name}: {e}")
        return False


async def perform_warmup(
    base_url: Optional[str] = None,
    tasks: Optional[List[WarmupTask]] = None,
    client: Optional[httpx.AsyncClient] = None
) -> WarmupReport:
    """Executa todas as tarefas habilitadas em paralelo (all-settled)"""
    if settings.USE_MOCK:
        logger.debug("[WARMUP] Modo mock ativo, warm-up ignorado")
        return WarmupReport(skipped=True)

    enabled = [t for t in (tasks if tasks is not None else build_warmup_tasks()) if t.enabled]
    start = time.monotonic()
    logger.info(f"[WARMUP] Iniciando warm-up de {len(enabled)} rotas...")

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(
            base_url=base_url or settings.warmup_base_url,
            headers={"Content-Type": "application/json"},
        )

    try:
        results = await asyncio.gather(
            *(warmup_route(client, task) for task in enabled),
            return_exceptions=True
        )
    finally:
        if own_client:
            await client.aclose()

    report = WarmupReport(duration_seconds=time.monotonic() - start)
    for task, result in zip(enabled, results):
        if result is True:
            report.ok += 1
        else:
            report.failed += 1
            report.failures.append(task.name)

    logger.info(
        f"[WARMUP] Concluído em {report.duration_seconds:.2f}s: "
        f"{report.ok} OK, {report.failed} com falha"
    )
    return report


async def run_warmup_loop():
    """
    Loop principal do warm-up.
    Espera o delay inicial e depois executa a cada WARMUP_INTERVAL_MINUTES.
    """
    logger.info("[WARMUP] ========================================")
    logger.info("[WARMUP] Serviço de warm-up INICIADO")
    logger.info(f"[WARMUP] Intervalo: {settings.WARMUP_INTERVAL_MINUTES} minutos")
    logger.info("[WARMUP] ========================================")

    await asyncio.sleep(settings.WARMUP_INITIAL_DELAY_SECONDS)

    while True:
        try:
            await perform_warmup()
        except Exception as e:
            logger.error(f"[WARMUP] Erro no loop de warm-up: {e}", exc_info=True)

        await asyncio.sleep(settings.WARMUP_INTERVAL_MINUTES * 60)


def start_warmup_service() -> Optional[asyncio.Task]:
    """Cria a task de background (chamado no lifespan da aplicação)"""
    global _warmup_task

    if settings.USE_MOCK:
        logger.info("[WARMUP] Modo mock ativo, serviço de warm-up desabilitado")
        return None
    if not settings.WARMUP_ENABLED:
        logger.info("[WARMUP] WARMUP_ENABLED=false, serviço de warm-up desabilitado")
        return None
    if _warmup_task and not _warmup_task.done():
        return _warmup_task

    _warmup_task = asyncio.create_task(run_warmup_loop())
    return _warmup_task


async def stop_warmup_service():
    global _warmup_task

    if _warmup_task is None:
        return
    _warmup_task.cancel()
    try:
        await _warmup_task
    except asyncio.CancelledError:
        pass
    _warmup_task = None
    logger.info("[WARMUP] Serviço de warm-up parado")


async def force_warmup() -> WarmupReport:
    """Warm-up imediato (POST /api/warmup)"""
    logger.info("[WARMUP] Warm-up forçado manualmente")
    return await perform_warmup()


# Para executar standalone (debug)
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    print("Executando warm-up em modo standalone...")
    print(asyncio.run(perform_warmup()).to_dict())
