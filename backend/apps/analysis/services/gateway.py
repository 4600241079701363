from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import jsonschema
from django.conf import settings
from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Base class for failures of the generation backend."""


class TransportError(GenerationError):
    pass


class EmptyResponseError(GenerationError):
    pass


class ResponseParseError(GenerationError):
    pass


class GenerationGateway:
    """
    Structured-output adapter over the OpenAI chat completions API.

    ``generate`` sends one prompt together with a strict JSON schema and
    returns the parsed object, or raises a ``GenerationError`` subclass.
    Nothing is retried here and no state survives between calls.
    """

    def __init__(
        self,
        client: Any = None,
        *,
        model: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ) -> None:
        self.model = (model or settings.OPENAI_MODEL).strip()
        self.temperature = (
            float(temperature) if temperature is not None else float(settings.EDITORIAL_GATEWAY_TEMPERATURE)
        )
        self.timeout = float(timeout) if timeout is not None else float(settings.EDITORIAL_GATEWAY_TIMEOUT_S)
        self.max_retries = (
            int(max_retries) if max_retries is not None else int(settings.EDITORIAL_GATEWAY_MAX_RETRIES)
        )
        self._client = client
        if self._client is None and getattr(settings, "OPENAI_API_KEY", ""):
            try:
                self._client = OpenAI(
                    api_key=settings.OPENAI_API_KEY,
                    base_url=getattr(settings, "OPENAI_BASE_URL", "") or None,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                )
            except OpenAIError:
                logger.warning("Failed to initialise OpenAI client", exc_info=True)

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    def generate(
        self,
        prompt: str,
        schema: Dict[str, Any],
        *,
        schema_name: str = "result",
        system_prompt: str | None = None,
    ) -> Dict[str, Any]:
        if self._client is None:
            raise TransportError("Generation backend is not configured (missing OPENAI_API_KEY)")

        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=messages,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema, "strict": True},
                },
            )
        except OpenAIError as exc:
            raise TransportError(f"Generation request failed: {exc.__class__.__name__}") from exc

        content = _message_content(response)
        if not content:
            raise EmptyResponseError("Generation backend returned an empty response")

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ResponseParseError(f"Generation output is not valid JSON: {exc.msg}") from exc
        if not isinstance(payload, dict):
            raise ResponseParseError("Generation output is not a JSON object")

        try:
            jsonschema.validate(instance=payload, schema=schema)
        except jsonschema.ValidationError as exc:
            raise ResponseParseError(f"Generation output does not match schema: {exc.message}") from exc
        return payload


def _message_content(response: Any) -> str:
    choices: Optional[List[Any]] = getattr(response, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    if message is None:
        return ""
    if getattr(message, "refusal", None):
        logger.warning("Generation backend refused the request: %s", message.refusal)
        return ""
    return str(getattr(message, "content", "") or "").strip()
