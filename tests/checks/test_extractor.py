"""Tests for LLM-backed version extraction."""

import json
from unittest.mock import MagicMock

import pytest

from checks.errors import ConfigError, ExtractionError
from checks.extractor import VersionExtractor, parse_extraction, strip_code_fences
from cli.config_models import LLMConfig, RetryConfig
from llm import LLMError, LLMRateLimitError

PAYLOAD = {
    "currentVersion": "19.1",
    "releaseDate": "2024-11-12",
    "confidence": 90,
    "productNameFound": True,
    "versions": [{"version": "19.1", "releaseDate": "2024-11-12", "notes": "## Fixes"}],
}

FAST_RETRY = RetryConfig(max_attempts=2, min_wait=0, max_wait=0, llm_max_wait=0)


def _provider(*responses):
    provider = MagicMock()
    provider.generate.side_effect = list(responses)
    return provider


class TestParseExtraction:
    def test_plain_json(self):
        result = parse_extraction(json.dumps(PAYLOAD))
        assert result.current_version == "19.1"
        assert result.versions[0].notes_markdown == "## Fixes"

    def test_fenced_json(self):
        raw = "```json\n" + json.dumps(PAYLOAD) + "\n```"
        assert parse_extraction(raw).ai_confidence == 90

    def test_strip_code_fences(self):
        assert strip_code_fences("```\n{}\n```") == "{}"

    @pytest.mark.parametrize("raw", [None, "", "   ", "not json", "[1, 2]", '{"versions": []}'])
    def test_bad_payloads(self, raw):
        with pytest.raises(ExtractionError):
            parse_extraction(raw)


class TestVersionExtractor:
    @pytest.mark.asyncio
    async def test_extract(self):
        provider = _provider(json.dumps(PAYLOAD))
        extractor = VersionExtractor(provider=provider, retry_config=FAST_RETRY)

        result = await extractor.extract("DaVinci Resolve", "page text")

        assert result.current_version == "19.1"
        args, kwargs = provider.generate.call_args
        assert "DaVinci Resolve" in args[0][0]["content"]
        assert "page text" in args[0][0]["content"]
        assert kwargs["json_mode"] is True

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self):
        provider = _provider(LLMRateLimitError("slow down"), json.dumps(PAYLOAD))
        extractor = VersionExtractor(provider=provider, retry_config=FAST_RETRY)

        result = await extractor.extract("DaVinci Resolve", "page")

        assert result.ai_confidence == 90
        assert provider.generate.call_count == 2

    @pytest.mark.asyncio
    async def test_llm_error_becomes_extraction_error(self):
        extractor = VersionExtractor(provider=_provider(LLMError("500")), retry_config=FAST_RETRY)
        with pytest.raises(ExtractionError, match="LLM call failed"):
            await extractor.extract("DaVinci Resolve", "page")

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        extractor = VersionExtractor(provider=_provider("sorry, no"), retry_config=FAST_RETRY)
        with pytest.raises(ExtractionError):
            await extractor.extract("DaVinci Resolve", "page")

    def test_missing_key_is_config_error(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        extractor = VersionExtractor(llm_config=LLMConfig(provider="auto"))
        with pytest.raises(ConfigError):
            extractor.ensure_configured()
