"""
Tests for round AI summaries (mock rules, OpenAI-compatible call and fallback).
"""
import json
from datetime import datetime
from types import SimpleNamespace

import httpx
import pytest

from aion_view.core import settings
from aion_view.services import ai_summary


@pytest.fixture
def round_():
    return SimpleNamespace(
        sector_name="UTI 1",
        week_start=datetime(2024, 3, 4),
        responsible_name="Maria",
        notes=None,
        open_os_count=12,
        closed_os_count=3,
    )


@pytest.fixture
def work_orders():
    return [SimpleNamespace(number="OS-1", equipment_name="Ventilador", status="Aberta", priority="Alta")]


@pytest.fixture
def investments():
    return [SimpleNamespace(title="Novo monitor", category="Aquisição", estimated_value=25000, priority="Alta")]


def completion_transport(content, status_code=200):
    captured = {}

    def handler(request: httpx.Request):
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["body"] = json.loads(request.content)
        return httpx.Response(status_code, json={"choices": [{"message": {"content": content}}]})

    return httpx.MockTransport(handler), captured


class TestMockSummary:
    """Tests for the rule-based summary."""

    def test_concerns_and_recommendations(self, round_):
        summary = ai_summary.generate_mock_summary(round_)

        assert "UTI 1" in summary["summary"]
        assert "04/03/2024" in summary["summary"]
        assert "Alto número de OS abertas (12) - requer atenção" in summary["concerns"]
        assert "Taxa de fechamento de OS abaixo de 50%" in summary["concerns"]
        assert "Há OS abertas mas nenhuma foi vinculada à ronda" in summary["concerns"]
        assert summary["recommendations"][0] == "Priorizar fechamento de OS críticas"
        assert summary["recommendations"][-1] == "Manter monitoramento contínuo do setor"
        assert summary["insights"][0] == "Taxa de fechamento de OS: 20.0%"

    def test_quiet_round(self):
        quiet = SimpleNamespace(
            sector_name="Pediatria", week_start=None, responsible_name=None,
            notes=None, open_os_count=0, closed_os_count=0,
        )
        summary = ai_summary.generate_mock_summary(quiet)

        assert summary["highlights"] == ["Ronda executada conforme planejado"]
        assert summary["concerns"] == ["Nenhuma preocupação crítica identificada"]
        assert summary["recommendations"] == ["Manter monitoramento contínuo do setor"]

    def test_linked_items(self, round_, work_orders, investments):
        summary = ai_summary.generate_mock_summary(round_, work_orders, (), investments)

        assert "1 investimentos identificados para priorização" in summary["highlights"]
        assert "Total de itens identificados: 2" in summary["insights"]
        assert "Há OS abertas mas nenhuma foi vinculada à ronda" not in summary["concerns"]


class TestPrompt:
    def test_prompt_lists_linked_items(self, round_, work_orders, investments):
        prompt = ai_summary.build_round_prompt(round_, work_orders, (), investments)

        assert "SETOR: UTI 1" in prompt
        assert "OS VINCULADAS (1):" in prompt
        assert "- OS-1 - Ventilador (Aberta) - Prioridade: Alta" in prompt
        assert "SOLICITAÇÕES DE COMPRA: Nenhuma" in prompt
        assert "R$ 25000.00" in prompt


class TestParseSummaryContent:
    def test_plain_json(self):
        parsed = ai_summary.parse_summary_content('{"summary": "ok", "highlights": ["a"]}')
        assert parsed["summary"] == "ok"

    def test_json_inside_text(self):
        parsed = ai_summary.parse_summary_content('Resposta:\n{"summary": "ok", "highlights": []}\nFim')
        assert parsed["highlights"] == []

    @pytest.mark.parametrize("content", [None, "", "sem json", '{"highlights": []}', '{"summary": "x"}'])
    def test_invalid(self, content):
        with pytest.raises(ValueError):
            ai_summary.parse_summary_content(content)


class TestGenerateRoundSummary:
    """Tests for the OpenAI-compatible call."""

    async def test_without_api_key_uses_mock(self, monkeypatch, round_):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
        summary = await ai_summary.generate_round_summary(round_)
        assert summary == ai_summary.generate_mock_summary(round_)

    async def test_uses_model_response(self, monkeypatch, round_):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
        content = json.dumps({
            "summary": "Setor estável",
            "highlights": ["h1"],
            "concerns": [],
            "recommendations": ["r1"],
            "insights": ["i1"],
        })
        transport, captured = completion_transport(content)

        async with httpx.AsyncClient(transport=transport) as client:
            summary = await ai_summary.generate_round_summary(round_, client=client)

        assert summary["summary"] == "Setor estável"
        assert captured["url"].endswith("/chat/completions")
        assert captured["headers"]["authorization"] == "Bearer sk-test"
        assert captured["body"]["model"] == settings.OPENAI_MODEL
        assert captured["body"]["temperature"] == 0.7
        assert captured["body"]["max_tokens"] == 2000
        assert captured["body"]["response_format"] == {"type": "json_object"}

    async def test_http_error_falls_back_to_mock(self, monkeypatch, round_):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
        transport, _ = completion_transport("{}", status_code=500)

        async with httpx.AsyncClient(transport=transport) as client:
            summary = await ai_summary.generate_round_summary(round_, client=client)

        assert summary == ai_summary.generate_mock_summary(round_)

    async def test_invalid_structure_falls_back_to_mock(self, monkeypatch, round_):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
        transport, _ = completion_transport('{"text": "sem resumo"}')

        async with httpx.AsyncClient(transport=transport) as client:
            summary = await ai_summary.generate_round_summary(round_, client=client)

        assert summary == ai_summary.generate_mock_summary(round_)


class TestWeeklySummary:
    def test_empty(self):
        assert ai_summary.generate_weekly_summary([]) == "Nenhuma ronda encontrada para o período."

    def test_totals(self, round_):
        other = SimpleNamespace(
            sector_name="UTI 2", week_start=round_.week_start,
            open_os_count=1, closed_os_count=4,
        )
        report = ai_summary.generate_weekly_summary([other, round_])

        assert "Total de Rondas: 2" in report
        assert "Total de OS Abertas: 13" in report
        assert "Taxa de Fechamento: 35.0%" in report
        assert report.index("- UTI 1: 12 OS abertas") < report.index("- UTI 2: 1 OS abertas")
