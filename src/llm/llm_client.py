"""
LLM client using the OpenAI-compatible API.

Talks to any backend that implements the OpenAI /v1/chat/completions
protocol (Ollama, vLLM, OpenAI, Mistral's compatible endpoint, etc.).
Failures never propagate out of ``generate``: they are logged and reported
as ``None`` so callers can fall back to local analysis.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from openai import OpenAI

load_dotenv()

logger = logging.getLogger(__name__)


def _resolve_base_url() -> str:
    """
    Resolve the LLM base URL from environment variables.

    Falls back through: LLM_BASE_URL -> OLLAMA_HOST + "/v1" -> default.

    Returns:
        Base URL string ending with /v1
    """
    explicit = os.getenv('LLM_BASE_URL')
    if explicit:
        return explicit.rstrip('/')

    ollama_host = os.getenv('OLLAMA_HOST', 'http://localhost:11434').rstrip('/')
    return f"{ollama_host}/v1"


def _resolve_model() -> str:
    """Resolve the model name (LLM_MODEL -> OLLAMA_MODEL -> llama3.2)."""
    return os.getenv('LLM_MODEL') or os.getenv('OLLAMA_MODEL', 'llama3.2')


def _resolve_timeout() -> float:
    """Resolve the default request timeout in seconds."""
    return float(os.getenv('LLM_TIMEOUT', '120'))


def _resolve_api_key() -> str:
    """
    Resolve the API key from environment variables.

    Ollama ignores the key but the OpenAI SDK requires a non-empty value.
    """
    return os.getenv('LLM_API_KEY', 'ollama')


@dataclass
class LLMResponse:
    """
    Structured response from an LLM generation call.

    Attributes:
        text: Generated text content
        prompt_tokens: Number of tokens in the prompt
        completion_tokens: Number of tokens in the completion
        total_tokens: Total tokens used (prompt + completion)
        model: Model name that generated the response
        elapsed_seconds: Wall-clock time of the call
    """

    text: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    model: str = ""
    elapsed_seconds: float = 0.0


class LLMClient:
    """
    LLM client for chat completions.

    Attributes:
        base_url: API base URL (e.g. http://localhost:11434/v1)
        model: Default model name
        timeout: Default request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        api_key: Optional[str] = None,
    ):
        """
        Initialize LLM client.

        Args:
            base_url: API base URL (falls back to LLM_BASE_URL / OLLAMA_HOST env vars)
            model: Model name (falls back to LLM_MODEL / OLLAMA_MODEL env vars)
            timeout: Default request timeout in seconds (falls back to LLM_TIMEOUT)
            api_key: API key (falls back to LLM_API_KEY env var, default 'ollama')
        """
        self.base_url = base_url or _resolve_base_url()
        self.model = model or _resolve_model()
        self.timeout = timeout or _resolve_timeout()
        self._api_key = api_key or _resolve_api_key()

        self._client: Optional[OpenAI] = None

        logger.info(
            f"LLMClient initialized: base_url={self.base_url}, "
            f"model={self.model}, timeout={self.timeout}s"
        )

    def _get_client(self) -> OpenAI:
        """Get or create the OpenAI client (lazy init)."""
        if self._client is None:
            self._client = OpenAI(
                base_url=self.base_url,
                api_key=self._api_key,
                timeout=float(self.timeout),
                max_retries=0,
            )
        return self._client

    def _build_messages(
        self,
        prompt: str,
        system: Optional[str] = None,
    ) -> List[Dict[str, str]]:
        """
        Build chat messages list from prompt and optional system message.

        Args:
            prompt: User prompt text
            system: Optional system prompt text

        Returns:
            List of message dicts for the chat completions API
        """
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        timeout: Optional[float] = None,
    ) -> Optional[LLMResponse]:
        """
        Generate text synchronously. Makes exactly one request, no retries.

        Args:
            prompt: User prompt
            system: System prompt (optional)
            temperature: Sampling temperature (0.0-1.0)
            max_tokens: Maximum tokens to generate
            json_mode: Ask the backend for a JSON object response
            timeout: Per-call timeout in seconds (defaults to self.timeout)

        Returns:
            LLMResponse with generated text and metrics, or None on failure
        """
        try:
            client = self._get_client()
            call_timeout = float(timeout if timeout is not None else self.timeout)

            kwargs: Dict[str, Any] = {
                "model": self.model,
                "messages": self._build_messages(prompt, system),
                "temperature": temperature,
                "stream": False,
            }
            if max_tokens is not None:
                kwargs["max_tokens"] = max_tokens
            if json_mode:
                kwargs["response_format"] = {"type": "json_object"}

            logger.info(
                f"LLM generate: model={self.model}, temp={temperature}, "
                f"timeout={call_timeout}s"
            )

            start_time = time.monotonic()
            response = client.with_options(
                timeout=call_timeout, max_retries=0
            ).chat.completions.create(**kwargs)
            elapsed = time.monotonic() - start_time

            text = response.choices[0].message.content or ""
            usage = response.usage
            prompt_tokens = usage.prompt_tokens if usage else 0
            completion_tokens = usage.completion_tokens if usage else 0

            logger.info(f"LLM generated {len(text)} chars in {elapsed:.1f}s")

            return LLMResponse(
                text=text,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
                model=response.model or self.model,
                elapsed_seconds=round(elapsed, 3),
            )

        except Exception as e:
            logger.error(f"LLM generate failed: {e}")
            return None

    def check_available(self) -> bool:
        """
        Check if the LLM backend is accessible.

        Returns:
            True if backend responds to a model list request
        """
        try:
            self._get_client().models.list()
            return True
        except Exception as e:
            logger.debug(f"LLM backend not available: {e}")
            return False

    def close(self) -> None:
        """Close the underlying client and release resources."""
        if self._client is not None:
            self._client.close()
            self._client = None
