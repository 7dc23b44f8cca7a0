"""Ollama LLM client wrapper with retry logic and structured output support."""

import asyncio
import json
import logging
from typing import Type, TypeVar

import ollama
from pydantic import BaseModel

from src.ed4e.config.settings import Settings
from src.ed4e.llm.exceptions import JSONExtractionError, ValidationFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class OllamaClient:
    """Client wrapper for Ollama LLM interactions.

    Example:
        >>> client = OllamaClient.from_settings(settings)
        >>> class Answer(BaseModel):
        ...     action: str
        >>> answer = client.generate("Pick one: attack, flee", response_format=Answer)
        >>> print(answer.action)
    """

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_BASE_URL = "http://localhost:11434"
    DEFAULT_TIMEOUT = 30.0
    MAX_RETRIES = 3

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self.model_name = model_name or self.DEFAULT_MODEL
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.timeout = timeout or self.DEFAULT_TIMEOUT

        self._client = ollama.Client(host=self.base_url, timeout=self.timeout)

        logger.debug(
            "Initialized OllamaClient with model=%s, base_url=%s, timeout=%s",
            self.model_name,
            self.base_url,
            self.timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OllamaClient":
        return cls(
            model_name=settings.oracle_model,
            base_url=settings.ollama_host,
            timeout=settings.oracle_timeout,
        )

    def health_check(self) -> bool:
        """Check if the Ollama server is reachable and the model is pulled."""
        try:
            models = self._client.list()
            model_names = [m.model for m in models["models"]]
        except Exception as e:
            logger.error("Health check failed: %s", e)
            return False

        model_base = self.model_name.split(":")[0]
        is_available = any(
            self.model_name == name or name.startswith(model_base)
            for name in model_names
        )
        if not is_available:
            logger.warning("Model %s not found. Available models: %s", self.model_name, model_names)
        return is_available

    def generate(
        self,
        prompt: str,
        system: str | None = None,
        response_format: Type[T] | None = None,
    ) -> str | T:
        """Generate a response from the LLM.

        Args:
            prompt: The user prompt to send.
            system: Optional system prompt for context.
            response_format: Optional Pydantic model for structured output.

        Returns:
            The text response, or an instance of ``response_format``.

        Raises:
            ollama.ResponseError: If the request fails after all retries.
            OracleAnswerError: If the structured response cannot be parsed.
        """
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        format_spec = response_format.model_json_schema() if response_format is not None else None

        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                logger.debug("Generation attempt %d/%d", attempt, self.MAX_RETRIES)
                response = self._client.chat(
                    model=self.model_name,
                    messages=messages,
                    format=format_spec,
                )
                break
            except ollama.ResponseError as e:
                logger.warning("Attempt %d failed with ResponseError: %s", attempt, e)
                if attempt == self.MAX_RETRIES:
                    raise

        content = response['message']['content']
        logger.debug("Response received - length=%d", len(content))
        if response_format is not None:
            return self._parse_structured_response(content, response_format)
        return content

    async def agenerate(
        self,
        prompt: str,
        system: str | None = None,
        response_format: Type[T] | None = None,
    ) -> str | T:
        """``generate`` in a worker thread, so a workflow's event loop keeps running."""
        return await asyncio.to_thread(self.generate, prompt, system, response_format)

    def _parse_structured_response(self, content: str, response_format: Type[T]) -> T:
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("JSON parsing failed: %s", e)
            raise JSONExtractionError(f"Invalid JSON in response: {content[:200]}") from e
        try:
            return response_format.model_validate(parsed)
        except ValueError as e:
            logger.error("Validation failed for %s: %s", response_format.__name__, e)
            raise ValidationFailedError(f"Failed to validate as {response_format.__name__}: {e}") from e
