"""
Completion client for an OpenAI-compatible chat completions endpoint.

The only unit in the pipeline that touches the network. One client is
constructed at startup and injected; its connection pool is shared by
the concurrently running stages. No retries are performed here.
"""

import json
import logging
import re
import time
from typing import Any, Optional

import httpx

from contract_analysis.config.settings import CompletionConfig
from contract_analysis.exceptions import (
    CompletionError,
    ConfigurationError,
    MalformedResponseError,
)
from contract_analysis.models.schemas import CompletionResult

logger = logging.getLogger(__name__)


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_json_payload(content: str) -> Any:
    """
    Parse a JSON completion, tolerating surrounding markdown fences.

    Raises:
        MalformedResponseError: If the content is not valid JSON
    """
    cleaned = _FENCE_RE.sub("", (content or "").strip()).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Completion is not valid JSON: {e}", raw=content or ""
        ) from e


# =============================================================================
# Completion Client
# =============================================================================

class CompletionClient:
    """
    Async client for a chat completions API.

    Example:
        >>> async with create_client(config.completion) as client:
        ...     result = await client.complete(system, prompt, expect_json=True)
        ...     result.json_data
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        timeout: float = 120.0,
        max_tokens: int = 4096,
        max_connections: int = 8,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the completion client.

        Args:
            api_key: Bearer token for the API
            base_url: API base URL (the /chat/completions path is appended)
            model: Default model identifier
            timeout: Request timeout in seconds
            max_tokens: Default generation limit
            max_connections: Connection pool size
            transport: Optional transport override (tests)

        Raises:
            ConfigurationError: If no API key is provided
        """
        if not api_key:
            raise ConfigurationError(
                "Completion API key is not set. Export OPENAI_API_KEY "
                "or pass api_key explicitly."
            )

        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens

        # HTTP client with connection pooling
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_connections=max_connections),
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Close the HTTP client and release pooled connections."""
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Health Methods
    # -------------------------------------------------------------------------

    async def is_available(self) -> bool:
        """
        Check if the API answers an authenticated model listing.

        Returns:
            True if the endpoint responded with 200, False otherwise
        """
        try:
            response = await self._client.get("/models")
            return response.status_code == 200
        except httpx.RequestError:
            return False

    # -------------------------------------------------------------------------
    # Generation Methods
    # -------------------------------------------------------------------------

    async def complete(
        self,
        system_instruction: str,
        user_prompt: str,
        expect_json: bool = False,
        temperature: float = 0.3,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None
    ) -> CompletionResult:
        """
        Run one chat completion.

        Args:
            system_instruction: System message
            user_prompt: User message
            expect_json: Request a JSON object and parse the reply
            temperature: Generation temperature
            model: Model to use (uses default if not specified)
            max_tokens: Generation limit (uses default if not specified)

        Returns:
            CompletionResult carrying text or parsed JSON

        Raises:
            CompletionError: On transport failure or error status
            MalformedResponseError: If the reply is not usable
        """
        model = model or self.model
        start_time = time.monotonic()

        payload: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }

        if expect_json:
            payload["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise CompletionError(f"Completion request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise CompletionError(
                f"HTTP error {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise CompletionError(f"Connection error: {e}") from e

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                f"Unexpected completion envelope: {e}", raw=response.text
            ) from e

        if content is None:
            raise MalformedResponseError("Completion returned no content")

        generation_time = time.monotonic() - start_time
        tokens_used = (data.get("usage") or {}).get("total_tokens", 0)
        logger.debug(
            "Completion from %s in %.2fs (%s tokens, json=%s)",
            model, generation_time, tokens_used, expect_json
        )

        if expect_json:
            parsed = parse_json_payload(content)
            if parsed is None:
                raise MalformedResponseError("Completion JSON is null", raw=content)
            return CompletionResult(
                json_data=parsed,
                model=data.get("model", model),
                tokens_used=tokens_used,
                generation_time=generation_time,
            )

        return CompletionResult(
            text=content,
            model=data.get("model", model),
            tokens_used=tokens_used,
            generation_time=generation_time,
        )


# =============================================================================
# Helper Functions
# =============================================================================

def create_client(
    config: Optional[CompletionConfig] = None,
    **kwargs
) -> CompletionClient:
    """
    Build a client from configuration, failing fast on missing credentials.

    Args:
        config: Completion settings (defaults used if omitted)
        **kwargs: Overrides passed straight to CompletionClient

    Returns:
        Configured CompletionClient instance

    Raises:
        ConfigurationError: If no API key is configured
    """
    config = config or CompletionConfig()
    options = {
        "api_key": config.api_key,
        "base_url": config.base_url,
        "model": config.model,
        "timeout": config.timeout,
        "max_tokens": config.max_tokens,
        "max_connections": config.max_connections,
    }
    options.update(kwargs)
    return CompletionClient(**options)
