"""
llm provider - abstraction for LLM backends.

supports:
- gemini (google generative language REST API, default)
- ollama (local)

usage:
    async with GeminiProvider(api_key=key) as provider:
        data = await provider.generate_json("List three keywords...", response_schema=schema)
"""

import re
import json
import time
import logging
import httpx
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass

from ..core.config import LLMConfig, ProviderKind
from ..core.errors import ProviderError

logger = logging.getLogger("scholartree.llm.provider")


_FENCED_JSON = re.compile(r"```json([\s\S]*)```|({[\s\S]*})")


@dataclass
class LLMResponse:
    """response from LLM."""
    text: str
    model: str
    tokens_used: int = 0
    duration_ms: float = 0.0
    finish_reason: Optional[str] = None
    raw: Optional[Dict[str, Any]] = None


def extract_json(text: str) -> Any:
    """
    parse the JSON object in a model answer.

    accepts a ```json fenced block or the outermost {...} in free text.
    raises ValueError when there is no object and json.JSONDecodeError
    when it does not parse.
    """
    match = _FENCED_JSON.search(text)
    if not match:
        raise ValueError("no JSON object found")
    payload = match.group(1) or match.group(2)
    return json.loads(payload.strip())


class LLMProvider(ABC):
    """abstract base for async LLM providers."""

    def __init__(self, timeout: float = 120.0):
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """lazy client initialization."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @property
    @abstractmethod
    def name(self) -> str:
        """provider name."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 8192,
        response_schema: Optional[Dict[str, Any]] = None,
        use_search: bool = False,
        model: Optional[str] = None
    ) -> LLMResponse:
        """
        generate text from prompt.

        response_schema switches the backend to JSON output.
        use_search lets the backend ground the answer with web search
        where it supports it.
        raises ProviderError on any transport or HTTP failure.
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """check if provider is reachable."""
        pass

    async def generate_json(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        response_schema: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None
    ) -> Any:
        """generate and parse a JSON response."""
        response = await self.generate(
            prompt=prompt,
            system=system,
            temperature=temperature,
            max_tokens=max_tokens,
            response_schema=response_schema,
            model=model
        )

        try:
            return extract_json(response.text)
        except ValueError as e:
            # JSONDecodeError is a ValueError too
            logger.warning(f"failed to parse JSON: {e}")
            logger.debug(f"raw response: {response.text[:500]}")
            raise ProviderError(f"{self.name} returned invalid JSON") from e

    async def close(self):
        """close the client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()


class GeminiProvider(LLMProvider):
    """
    google gemini over the generative language REST API.

    usage:
        provider = GeminiProvider(api_key="...", model="gemini-2.5-flash")
        response = await provider.generate("Summarize this topic...")
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0
    ):
        super().__init__(timeout=timeout)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return f"gemini:{self.model}"

    async def is_available(self) -> bool:
        if not self.api_key:
            return False
        try:
            resp = await self.client.get(
                f"{self.base_url}/models/{self.model}",
                params={"key": self.api_key}
            )
            return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"gemini not available: {e}")
            return False

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 8192,
        response_schema: Optional[Dict[str, Any]] = None,
        use_search: bool = False,
        model: Optional[str] = None
    ) -> LLMResponse:
        """generate text using gemini generateContent."""
        if not self.api_key:
            raise ProviderError("GEMINI_API_KEY is not set")

        model = model or self.model
        start = time.time()

        # build request
        generation_config: Dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens
        }
        if response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = response_schema

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        if use_search:
            payload["tools"] = [{"google_search": {}}]

        try:
            resp = await self.client.post(
                f"{self.base_url}/models/{model}:generateContent",
                params={"key": self.api_key},
                json=payload
            )
        except httpx.HTTPError as e:
            logger.error(f"gemini request failed: {e}")
            raise ProviderError(f"gemini request failed: {e}") from e

        if resp.status_code != 200:
            logger.error(f"gemini error: {resp.status_code} - {resp.text[:200]}")
            raise ProviderError(f"gemini returned HTTP {resp.status_code}", status_code=resp.status_code)

        data = resp.json()
        duration = (time.time() - start) * 1000

        candidates = data.get("candidates") or []
        first = candidates[0] if candidates else {}
        parts = (first.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        finish_reason = first.get("finishReason")

        if not text:
            logger.error(f"gemini returned no text (finish reason: {finish_reason})")
            logger.debug(f"safety ratings: {json.dumps(first.get('safetyRatings'), indent=2)}")
            raise ProviderError("The model returned an empty response.")

        usage = data.get("usageMetadata") or {}
        return LLMResponse(
            text=text,
            model=model,
            tokens_used=usage.get("totalTokenCount", 0),
            duration_ms=duration,
            finish_reason=finish_reason,
            raw=data
        )


class OllamaProvider(LLMProvider):
    """
    ollama local LLM provider.

    usage:
        provider = OllamaProvider(model="qwen3:32b")
        response = await provider.generate("Summarize this topic...")
    """

    def __init__(
        self,
        model: str = "qwen3:32b",
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0
    ):
        super().__init__(timeout=timeout)
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return f"ollama:{self.model}"

    async def is_available(self) -> bool:
        """check if ollama is running and model is available."""
        try:
            resp = await self.client.get(f"{self.base_url}/api/tags")
            if resp.status_code == 200:
                data = resp.json()
                models = [m["name"] for m in data.get("models", [])]
                return self.model in models
            return False
        except httpx.HTTPError as e:
            logger.warning(f"ollama not available: {e}")
            return False

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 8192,
        response_schema: Optional[Dict[str, Any]] = None,
        use_search: bool = False,
        model: Optional[str] = None
    ) -> LLMResponse:
        """generate text using ollama; search grounding is not available locally."""
        start = time.time()

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens
            }
        }
        if system:
            payload["system"] = system
        if response_schema is not None:
            payload["format"] = to_json_schema(response_schema)

        try:
            resp = await self.client.post(f"{self.base_url}/api/generate", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"ollama generate failed: {e}")
            raise ProviderError(f"ollama request failed: {e}") from e

        if resp.status_code != 200:
            logger.error(f"ollama error: {resp.status_code} - {resp.text[:200]}")
            raise ProviderError(f"ollama returned HTTP {resp.status_code}", status_code=resp.status_code)

        data = resp.json()
        text = data.get("response", "")
        if not text:
            raise ProviderError("The model returned an empty response.")

        return LLMResponse(
            text=text,
            model=payload["model"],
            tokens_used=data.get("eval_count", 0),
            duration_ms=(time.time() - start) * 1000,
            finish_reason=data.get("done_reason"),
            raw=data
        )


def to_json_schema(schema: Any) -> Any:
    """gemini-style schema (upper-case types) to plain JSON schema."""
    if isinstance(schema, dict):
        return {
            key: (value.lower() if key == "type" and isinstance(value, str) else to_json_schema(value))
            for key, value in schema.items()
        }
    if isinstance(schema, list):
        return [to_json_schema(item) for item in schema]
    return schema


def build_provider(config: LLMConfig) -> LLMProvider:
    """provider instance for the configured backend."""
    if config.provider == ProviderKind.OLLAMA:
        return OllamaProvider(
            model=config.ollama_model,
            base_url=config.ollama_base_url,
            timeout=config.timeout
        )
    return GeminiProvider(
        api_key=config.api_key,
        model=config.model,
        base_url=config.gemini_base_url,
        timeout=config.timeout
    )
