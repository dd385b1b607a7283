"""Tests for the AI review request builder and HTTP collaborator."""

import json
import logging

import httpx
import pytest

from trade_journal.core.config import AnalysisConfig
from trade_journal.core.enums import TradeDirection, TradeStatus
from trade_journal.journal.record import TradeFormData
from trade_journal.llm.analysis import (
    ANALYSIS_FALLBACK,
    NO_ANALYSIS_TEXT,
    TradeAnalyzer,
    build_analysis_request,
    build_trade_context,
    extract_text,
    split_data_url,
)

CONTEXT = "Date: 2024-03-05T14:30\nModel: deepzone dc"


def _ok_body(*texts: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


def _analyzer(handler) -> TradeAnalyzer:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TradeAnalyzer(AnalysisConfig(), api_key="test-key", client=client)


class TestBuilder:
    def test_context_from_form(self):
        form = TradeFormData(
            date="2024-03-05T14:30", price_source="5m", timeframe="1h", model="deepzone dc",
            direction=TradeDirection.SHORT, status=TradeStatus.LOSS, notes="chased",
        )
        context = build_trade_context(form)
        assert "Direction: Short" in context
        assert "Result: LOSS" in context
        assert "Notes: chased" in context

    def test_prompt_embeds_context(self):
        request = build_analysis_request(CONTEXT)
        assert CONTEXT in request.prompt
        assert "senior trading mentor" in request.prompt
        assert request.image_base64 is None

    def test_text_only_payload(self):
        payload = build_analysis_request(CONTEXT).to_payload()
        assert payload == {"contents": [{"parts": [{"text": build_analysis_request(CONTEXT).prompt}]}]}

    def test_data_url_header_stripped(self):
        request = build_analysis_request(CONTEXT, "data:image/png;base64,iVBORw0KGgo=")
        parts = request.to_payload()["contents"][0]["parts"]
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "iVBORw0KGgo="}}

    def test_bare_base64_defaults_to_jpeg(self):
        assert split_data_url("/9j/4AAQ") == ("image/jpeg", "/9j/4AAQ")


class TestExtractText:
    def test_joins_parts(self):
        assert extract_text(_ok_body("1. Structure ", "bullish")) == "1. Structure bullish"

    def test_no_candidates(self):
        assert extract_text({"candidates": []}) == ""

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            extract_text(["nope"])


class TestTradeAnalyzer:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-goog-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_ok_body("- Good patience"))

        text = await _analyzer(handler).analyze("data:image/jpeg;base64,AAAA", CONTEXT)
        assert text == "- Good patience"
        assert seen["url"].endswith("/models/gemini-2.5-flash:generateContent")
        assert seen["key"] == "test-key"
        parts = seen["body"]["contents"][0]["parts"]
        assert parts[1]["inline_data"]["data"] == "AAAA"

    @pytest.mark.asyncio
    async def test_http_error_returns_fallback(self, caplog):
        def handler(request):
            return httpx.Response(429, json={"error": {"message": "quota"}})

        with caplog.at_level(logging.ERROR):
            assert await _analyzer(handler).analyze(None, CONTEXT) == ANALYSIS_FALLBACK
        assert "Trade analysis call failed" in caplog.text

    @pytest.mark.asyncio
    async def test_network_error_returns_fallback(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        assert await _analyzer(handler).analyze(None, CONTEXT) == ANALYSIS_FALLBACK

    @pytest.mark.asyncio
    async def test_malformed_body_returns_fallback(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>gateway</html>")

        assert await _analyzer(handler).analyze(None, CONTEXT) == ANALYSIS_FALLBACK

    @pytest.mark.asyncio
    async def test_empty_response(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        assert await _analyzer(handler).analyze(None, CONTEXT) == NO_ANALYSIS_TEXT

    @pytest.mark.asyncio
    async def test_missing_key_skips_call(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=_ok_body("x"))

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        analyzer = TradeAnalyzer(AnalysisConfig(), client=client)
        assert await analyzer.analyze(None, CONTEXT) == ANALYSIS_FALLBACK
        assert calls == []

    def test_key_read_from_env(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "from-env")
        assert TradeAnalyzer(AnalysisConfig(api_key_env="MY_KEY")).api_key == "from-env"
