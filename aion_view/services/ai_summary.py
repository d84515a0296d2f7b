"""
Aion View - AI Summary Service
Resumo executivo de rondas usando IA (API compatível com OpenAI)

Sem OPENAI_API_KEY, ou em qualquer falha da chamada, devolve um resumo
montado por regras (mock) para que a tela de rondas nunca fique sem resumo.
"""
import json
import logging
import re
from typing import List, Optional, Sequence

import httpx

from aion_view.core import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Você é um analista especializado em gestão de equipamentos médicos hospitalares. "
    "Sempre retorne respostas em formato JSON válido, sem markdown ou código adicional. "
    "Seja objetivo e acionável."
)


def _format_date(value) -> str:
    return value.strftime("%d/%m/%Y") if value else "N/A"


def _format_brl(value) -> str:
    return f"R$ {float(value):.2f}"


def build_round_prompt(
    round_,
    work_orders: Sequence = (),
    purchase_requests: Sequence = (),
    investments: Sequence = ()
) -> str:
    """Monta o prompt estruturado com os dados da ronda"""
    os_lines = []
    for os_ in work_orders:
        line = f"- {os_.number} - {os_.equipment_name} ({os_.status or 'N/A'})"
        if os_.priority:
            line += f" - Prioridade: {os_.priority}"
        os_lines.append(line)

    pr_lines = []
    for pr in purchase_requests:
        line = f"- {pr.description} (Status: {pr.status})"
        if pr.request_number:
            line += f" - Nº: {pr.request_number}"
        pr_lines.append(line)

    inv_lines = []
    for inv in investments:
        line = f"- {inv.title}"
        if inv.category:
            line += f" ({inv.category})"
        if inv.estimated_value:
            line += f" - {_format_brl(inv.estimated_value)}"
        if inv.priority:
            line += f" - Prioridade: {inv.priority}"
        inv_lines.append(line)

    if os_lines:
        os_block = f"OS VINCULADAS ({len(os_lines)}):\n" + "\n".join(os_lines) + "\n"
    else:
        os_block = "OS VINCULADAS: Nenhuma\n"

    if pr_lines:
        pr_block = f"SOLICITAÇÕES DE COMPRA ({len(pr_lines)}):\n" + "\n".join(pr_lines) + "\n"
    else:
        pr_block = "SOLICITAÇÕES DE COMPRA: Nenhuma\n"

    if inv_lines:
        inv_block = f"INVESTIMENTOS IDENTIFICADOS ({len(inv_lines)}):\n" + "\n".join(inv_lines) + "\n"
    else:
        inv_block = "INVESTIMENTOS IDENTIFICADOS: Nenhum\n"

    if round_.notes:
        notes_block = f"OBSERVAÇÕES DO RESPONSÁVEL:\n{round_.notes}\n"
    else:
        notes_block = "OBSERVAÇÕES: Nenhuma\n"

    return f"""Você é um analista especializado em gestão de equipamentos médicos hospitalares.

Analise os seguintes dados de uma ronda executada:

SETOR: {round_.sector_name}
SEMANA: {_format_date(round_.week_start)}
RESPONSÁVEL: {round_.responsible_name or 'Não informado'}

ESTATÍSTICAS:
- OS Abertas: {round_.open_os_count or 0}
- OS Fechadas: {round_.closed_os_count or 0}

{os_block}
{pr_block}
{inv_block}
{notes_block}
Gere um resumo executivo em português brasileiro estruturado em JSON com as seguintes seções:

{{
  "summary": "Situação geral do setor em 2-3 parágrafos",
  "highlights": ["Destaque 1", "Destaque 2", "Destaque 3"],
  "concerns": ["Preocupação 1", "Preocupação 2"],
  "recommendations": ["Recomendação 1", "Recomendação 2", "Recomendação 3"],
  "insights": ["Insight 1", "Insight 2"]
}}

Seja conciso, objetivo e acionável. Use linguagem técnica mas acessível. Foque em insights práticos para a gestão."""


def parse_summary_content(content: Optional[str]) -> dict:
    """
    Extrai o JSON do resumo da resposta do modelo.
    Levanta ValueError se a resposta não tiver a estrutura esperada.
    """
    if not content:
        raise ValueError("Resposta vazia da IA")

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        match = re.search(r"\{[\s\S]*\}", content)
        if not match:
            raise ValueError("Não foi possível extrair JSON da resposta")
        parsed = json.loads(match.group(0))

    if not isinstance(parsed, dict) or not parsed.get("summary") or not isinstance(parsed.get("highlights"), list):
        raise ValueError("Estrutura de resposta inválida")

    return parsed


async def _request_completion(prompt: str, client: Optional[httpx.AsyncClient] = None) -> str:
    payload = {
        "model": settings.OPENAI_MODEL,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "temperature": 0.7,
        "max_tokens": 2000,
        "response_format": {"type": "json_object"},
    }
    headers = {"Authorization": f"Bearer {settings.OPENAI_API_KEY}"}
    url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"

    if client is None:
        async with httpx.AsyncClient(timeout=settings.OPENAI_TIMEOUT_SECONDS) as own_client:
            response = await own_client.post(url, json=payload, headers=headers)
    else:
        response = await client.post(url, json=payload, headers=headers)

    response.raise_for_status()
    return response.json()["choices"][0]["message"]["content"]


async def generate_round_summary(
    round_,
    work_orders: Sequence = (),
    purchase_requests: Sequence = (),
    investments: Sequence = (),
    client: Optional[httpx.AsyncClient] = None
) -> dict:
    """Gera o resumo via IA se configurada, senão (ou em erro) o resumo mock"""
    if not settings.OPENAI_API_KEY:
        logger.info("[AI-SUMMARY] OPENAI_API_KEY não configurada, gerando resumo mock")
        return generate_mock_summary(round_, work_orders, purchase_requests, investments)

    try:
        prompt = build_round_prompt(round_, work_orders, purchase_requests, investments)
        logger.info(f"[AI-SUMMARY] Enviando requisição para {settings.OPENAI_MODEL}...")
        content = await _request_completion(prompt, client)
        parsed = parse_summary_content(content)
        logger.info("[AI-SUMMARY] Resumo gerado com sucesso")
        return parsed
    except Exception as e:
        logger.error(f"[AI-SUMMARY] Erro ao gerar resumo com IA: {e}")
        logger.info("[AI-SUMMARY] Usando resumo mock como fallback")
        return generate_mock_summary(round_, work_orders, purchase_requests, investments)


def generate_mock_summary(
    round_,
    work_orders: Sequence = (),
    purchase_requests: Sequence = (),
    investments: Sequence = ()
) -> dict:
    """Resumo determinístico baseado em regras simples"""
    open_count = round_.open_os_count or 0
    closed_count = round_.closed_os_count or 0
    total = open_count + closed_count
    closure_rate = (closed_count / total) * 100 if total > 0 else 0

    lines = [
        f"O setor {round_.sector_name} apresentou {open_count} ordens de serviço abertas "
        f"e {closed_count} fechadas durante a semana de {_format_date(round_.week_start)}."
    ]
    if work_orders:
        lines.append(f"Foram vinculadas {len(work_orders)} OS específicas nesta ronda.")
    if purchase_requests:
        lines.append(f"Foram identificadas {len(purchase_requests)} solicitações de compra.")
    if investments:
        lines.append(f"Foram identificados {len(investments)} investimentos prioritários.")
    if round_.notes:
        lines.append(f"Observações do responsável: {round_.notes}")

    highlights: List[str] = []
    if closed_count > 0:
        highlights.append(f"{closed_count} OS foram fechadas durante o período")
    if investments:
        highlights.append(f"{len(investments)} investimentos identificados para priorização")
    if purchase_requests:
        highlights.append(f"{len(purchase_requests)} solicitações de compra criadas")
    if not highlights:
        highlights.append("Ronda executada conforme planejado")

    concerns: List[str] = []
    if open_count > 10:
        concerns.append(f"Alto número de OS abertas ({open_count}) - requer atenção")
    if closure_rate < 50 and total > 0:
        concerns.append("Taxa de fechamento de OS abaixo de 50%")
    if open_count > 0 and not work_orders:
        concerns.append("Há OS abertas mas nenhuma foi vinculada à ronda")

    recommendations: List[str] = []
    if open_count > 5:
        recommendations.append("Priorizar fechamento de OS críticas")
    if investments:
        recommendations.append("Revisar investimentos identificados para alocação de recursos")
    if purchase_requests:
        recommendations.append("Acompanhar status das solicitações de compra")
    recommendations.append("Manter monitoramento contínuo do setor")

    linked = len(work_orders) + len(purchase_requests) + len(investments)

    return {
        "summary": "\n".join(lines),
        "highlights": highlights,
        "concerns": concerns or ["Nenhuma preocupação crítica identificada"],
        "recommendations": recommendations,
        "insights": [
            f"Taxa de fechamento de OS: {closure_rate:.1f}%",
            f"Total de itens identificados: {linked}",
        ],
    }


def generate_weekly_summary(rounds: Sequence) -> str:
    """Relatório texto agregando as rondas de uma semana"""
    if not rounds:
        return "Nenhuma ronda encontrada para o período."

    total_open = sum(r.open_os_count or 0 for r in rounds)
    total_closed = sum(r.closed_os_count or 0 for r in rounds)
    total = total_open + total_closed
    sectors = {r.sector_name for r in rounds}
    rate = f"{(total_closed / total) * 100:.1f}" if total > 0 else "0"

    top = sorted(rounds, key=lambda r: r.open_os_count or 0, reverse=True)[:5]
    top_lines = "\n".join(f"- {r.sector_name}: {r.open_os_count or 0} OS abertas" for r in top)

    return f"""RESUMO SEMANAL DE RONDAS

Período: {_format_date(rounds[0].week_start)}

Total de Rondas: {len(rounds)}
Setores Visitados: {len(sectors)}
Total de OS Abertas: {total_open}
Total de OS Fechadas: {total_closed}
Taxa de Fechamento: {rate}%

Setores com mais OS abertas:
{top_lines}
"""
