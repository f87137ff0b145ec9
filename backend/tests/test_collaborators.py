"""Responder and competitor source tests with faked OpenAI / Gemini."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from geo_visibility.schemas.entity_schema import EntitySnapshot
from geo_visibility.services import competitor_sources, responder
from geo_visibility.services.competitor_sources import (
    fetch_competitive_landscape,
    fetch_market_intelligence,
    parse_market_intelligence,
    website_candidates,
)
from geo_visibility.services.errors import FatalProviderError, TransientProviderError
from geo_visibility.services.responder import run_responder

SNAPSHOT = EntitySnapshot(
    business_name="Acme CRM",
    industry="CRM software",
    region="Stockholm, Sweden",
    description_specs=["Pipeline management", "Email sync"],
)


def _openai_client_returning(text):
    completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion)
    return client


class TestResponder:
    @pytest.fixture(autouse=True)
    def fresh_openai_client(self):
        responder._openai_client = None
        yield
        responder._openai_client = None

    def test_openai_provider(self):
        client = _openai_client_returning("HubSpot and Acme CRM are popular.")
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}), \
                patch.object(responder, "AsyncOpenAI", return_value=client):
            answer = asyncio.run(run_responder("best crm in sweden", "openai"))
        assert answer == "HubSpot and Acme CRM are popular."
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"] == [{"role": "user", "content": "best crm in sweden"}]

    def test_gemini_provider(self):
        def handler(request):
            assert request.url.params["key"] == "g-key"
            assert "gemini-test:generateContent" in request.url.path
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": "Acme CRM "}, {"text": "is listed."}]}}],
            })

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        with patch.dict(os.environ, {"GEMINI_API_KEY": "g-key", "GEMINI_MODEL": "gemini-test"}), \
                patch.object(responder, "get_client", new=AsyncMock(return_value=client)):
            answer = asyncio.run(run_responder("best crm", "gemini"))
        assert answer == "Acme CRM is listed."

    @pytest.mark.parametrize("status, expected", [(429, TransientProviderError), (403, FatalProviderError)])
    def test_gemini_http_errors(self, status, expected):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(status, text="x")))
        with patch.dict(os.environ, {"GEMINI_API_KEY": "g-key"}), \
                patch.object(responder, "get_client", new=AsyncMock(return_value=client)):
            with pytest.raises(expected):
                asyncio.run(run_responder("best crm", "gemini"))

    def test_unknown_provider_is_fatal(self):
        with pytest.raises(FatalProviderError):
            asyncio.run(run_responder("best crm", "perplexity"))

    def test_sdk_errors_are_classified(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("Rate limit exceeded"))
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}), \
                patch.object(responder, "AsyncOpenAI", return_value=client):
            with pytest.raises(TransientProviderError):
                asyncio.run(run_responder("best crm", "openai"))

    def test_missing_key_is_fatal(self):
        with patch.dict(os.environ, {"OPENAI_API_KEY": ""}):
            with pytest.raises(FatalProviderError):
                asyncio.run(run_responder("best crm", "openai"))

    def test_openai_client_shared_across_calls(self):
        client = _openai_client_returning("Acme CRM")
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}), \
                patch.object(responder, "AsyncOpenAI", return_value=client) as factory:
            asyncio.run(run_responder("best crm", "openai"))
            asyncio.run(run_responder("crm for startups", "openai"))
        factory.assert_called_once()
        assert client.chat.completions.create.await_count == 2

    def test_close_openai_client(self):
        client = _openai_client_returning("Acme CRM")
        client.close = AsyncMock()
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}), \
                patch.object(responder, "AsyncOpenAI", return_value=client):
            assert responder.get_openai_client() is client
        asyncio.run(responder.close_openai_client())
        client.close.assert_awaited_once()
        assert responder._openai_client is None


class TestCompetitorSources:
    def test_website_candidates(self):
        raw = website_candidates(["HubSpot", "  ", "", " Pipedrive "])
        assert [r.name for r in raw] == ["HubSpot", "Pipedrive"]
        assert {r.source for r in raw} == {"website"}

    def test_parse_market_intelligence_cleans_values(self):
        raw = parse_market_intelligence({"competitors": [
            {"name": "Lime Technologies", "type": "direct", "confidence": "HIGH",
             "geographicMatch": "national", "serviceMatch": "high", "countryMatch": True},
            {"name": "Upsales", "type": "weird", "confidence": "certain",
             "geographicMatch": "galactic", "countryMatch": "false"},
            {"name": ""},
            "not an object",
        ]})
        assert [r.name for r in raw] == ["Lime Technologies", "Upsales"]
        lime, upsales = raw
        assert lime.confidence_tier == "high"
        assert lime.country_match is True
        assert upsales.type == "direct"
        assert upsales.confidence_tier is None
        assert upsales.geographic_match is None
        assert upsales.country_match is False

    def test_fetch_market_intelligence(self):
        response = {"competitors": [{"name": "HubSpot", "type": "indirect", "confidence": "medium"}]}
        mock = AsyncMock(return_value=response)
        with patch.object(competitor_sources, "call_openai_chat_async", new=mock):
            raw = asyncio.run(fetch_market_intelligence(SNAPSHOT))
        assert raw[0].name == "HubSpot"
        assert raw[0].source == "market_intelligence"
        assert raw[0].type == "indirect"
        system = mock.call_args.kwargs["messages"][0]["content"]
        assert "Acme CRM" in system and "Stockholm, Sweden" in system

    def test_fetch_landscape(self):
        response = {
            "marketLeaders": [{"name": "Salesforce", "reason": "largest CRM"}],
            "emergingPlayers": [{"name": "Attio"}],
        }
        with patch.object(competitor_sources, "call_openai_chat_async", new=AsyncMock(return_value=response)):
            raw = asyncio.run(fetch_competitive_landscape(SNAPSHOT))
        assert [(r.name, r.type, r.confidence_tier) for r in raw] == [
            ("Salesforce", "market_leader", "market_leader"),
            ("Attio", "emerging", "emerging"),
        ]

    def test_failed_sources_return_empty(self):
        with patch.object(competitor_sources, "call_openai_chat_async", new=AsyncMock(return_value=None)):
            assert asyncio.run(fetch_market_intelligence(SNAPSHOT)) == []
            assert asyncio.run(fetch_competitive_landscape(SNAPSHOT)) == []

    @pytest.mark.parametrize("response", [
        {"competitors": 5},
        {"competitors": "HubSpot, Pipedrive"},
        {"competitors": {"name": "HubSpot"}},
    ])
    def test_wrong_shape_market_intelligence_is_empty(self, response):
        with patch.object(competitor_sources, "call_openai_chat_async", new=AsyncMock(return_value=response)):
            assert asyncio.run(fetch_market_intelligence(SNAPSHOT)) == []

    def test_wrong_shape_landscape_keeps_usable_list(self):
        response = {"marketLeaders": 3, "emergingPlayers": [{"name": "Attio"}]}
        with patch.object(competitor_sources, "call_openai_chat_async", new=AsyncMock(return_value=response)):
            raw = asyncio.run(fetch_competitive_landscape(SNAPSHOT))
        assert [r.name for r in raw] == ["Attio"]

    def test_parse_failure_is_logged_and_empty(self):
        broken = MagicMock(side_effect=RuntimeError("bad row"))
        with patch.object(competitor_sources, "call_openai_chat_async", new=AsyncMock(return_value={"competitors": []})), \
                patch.object(competitor_sources, "parse_market_intelligence", new=broken):
            assert asyncio.run(fetch_market_intelligence(SNAPSHOT)) == []

    def test_prompt_is_valid_format_string(self):
        captured = {}

        async def fake(**kwargs):
            captured.update(kwargs)
            return {"competitors": []}

        with patch.object(competitor_sources, "call_openai_chat_async", new=fake):
            asyncio.run(fetch_market_intelligence(SNAPSHOT))
        system = captured["messages"][0]["content"]
        assert '"geographicMatch": "local" | "regional" | "national" | "global"' in system
        assert json.dumps("Pipeline management")[1:-1] in system
