"""LLM-backed extraction of structured version data from page text."""

import asyncio
import json
import re
from typing import Optional

import structlog
from pydantic import ValidationError

from cli.config_models import LLMConfig, RetryConfig
from cli.retry import retry_from_config
from llm import LLMError, LLMProvider, create_llm_provider

from .errors import ConfigError, ExtractionError
from .models import ExtractionResult

logger = structlog.get_logger().bind(source="version_extractor")

SYSTEM_PROMPT = (
    "You are a release notes parser. You read the text of a software vendor's "
    "release-notes page and report every version it describes. "
    "Respond with a single JSON object and nothing else."
)

EXTRACTION_PROMPT = """Extract ALL versions of {product} from this release-notes page.

Content:
{content}

For every version mentioned, extract:
1. "version": the version number exactly as written (e.g. "1.5.0", "v2.3", "r32.1")
2. "releaseDate": release date as YYYY-MM-DD, or null if not stated
3. "notes": the changelog for that version as Markdown
4. "type": "major" for X.0.0, "minor" for X.Y.0, "patch" otherwise

Also report:
- "currentVersion": the newest stable version of {product} on the page, or null
- "releaseDate": the release date of currentVersion as YYYY-MM-DD, or null
- "confidence": 0-100, how sure you are these versions belong to {product}
- "productNameFound": true if the page text actually names {product}

If the page describes a different product, set productNameFound to false and
confidence low. Return an empty "versions" array if no versions are found.

Respond with ONLY this JSON object:
{{
  "currentVersion": "1.5.0",
  "releaseDate": "2024-11-29",
  "confidence": 90,
  "productNameFound": true,
  "versions": [
    {{"version": "1.5.0", "releaseDate": "2024-11-29",
      "notes": "## New Features\\n- Feature 1", "type": "minor"}}
  ]
}}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip()).strip()


def parse_extraction(raw: Optional[str]) -> ExtractionResult:
    """Decode and validate one model response.

    Raises:
        ExtractionError: empty response, invalid JSON, or a payload missing
            required fields.
    """
    if not raw or not raw.strip():
        raise ExtractionError("Empty response from extraction model")

    text = strip_code_fences(raw)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Extraction response is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ExtractionError(f"Expected a JSON object, got {type(payload).__name__}")

    try:
        return ExtractionResult.model_validate(payload)
    except ValidationError as e:
        raise ExtractionError(f"Malformed extraction payload: {e}") from e


class VersionExtractor:
    """Runs the extraction prompt through an LLM provider."""

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        llm_config: Optional[LLMConfig] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        self._provider = provider
        self.llm_config = llm_config or LLMConfig()
        self._retry = retry_from_config(retry_config or RetryConfig(), "llm")

    def ensure_configured(self) -> LLMProvider:
        """Build the provider if needed.

        Raises:
            ConfigError: no usable API key or provider.
        """
        if self._provider is None:
            try:
                self._provider = create_llm_provider(
                    provider=self.llm_config.provider,
                    api_key=self.llm_config.api_key,
                    model=self.llm_config.model,
                )
            except LLMError as e:
                raise ConfigError(str(e)) from e
        return self._provider

    def _generate(self, product_name: str, content: str) -> str:
        provider = self.ensure_configured()
        prompt = EXTRACTION_PROMPT.format(product=product_name, content=content)
        call = self._retry(provider.generate)
        return call(
            [{"role": "user", "content": prompt}],
            system=SYSTEM_PROMPT,
            max_tokens=self.llm_config.max_tokens,
            json_mode=True,
        )

    async def extract(self, product_name: str, content: str) -> ExtractionResult:
        """Extract versions of ``product_name`` from page ``content``.

        The blocking SDK call runs in a worker thread.
        """
        try:
            raw = await asyncio.to_thread(self._generate, product_name, content)
        except LLMError as e:
            raise ExtractionError(f"LLM call failed: {e}") from e

        result = parse_extraction(raw)
        logger.debug(
            "extraction_parsed",
            product=product_name,
            versions=len(result.versions),
            current_version=result.current_version,
            confidence=result.ai_confidence,
        )
        return result
