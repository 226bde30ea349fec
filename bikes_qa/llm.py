"""
LLM gateway over an OpenAI-compatible endpoint (llama.cpp, Kronk, Ollama, ...).

Both dialects expose the same call:

    text = llm.complete([{"role": "system", "content": ...},
                         {"role": "user", "content": ...}])

- PromptLLM folds the messages into one user prompt (single-prompt completion).
- ChatLLM forwards the role-tagged messages as they are.

Either one may stream; streamed chunks are joined and returned only once the
stream ends. Every failure surfaces as LLMError. Nothing is retried.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

import openai
from openai import OpenAI

from .config import Settings

log = logging.getLogger(__name__)

Message = Dict[str, str]


class LLMError(RuntimeError):
    """Transport, HTTP status or decode failure talking to the LLM."""


def user_message(content: str) -> Message:
    return {"role": "user", "content": content}


def system_message(content: str) -> Message:
    return {"role": "system", "content": content}


class _OpenAIGateway:
    dialect = ""

    def __init__(self, client: Any, model: str, stream: bool = False):
        self._client = client
        self.model = model
        self.stream = stream

    def complete(self, messages: List[Message]) -> str:
        payload = self._payload(messages)
        started = time.monotonic()
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=payload,
                stream=self.stream,
            )
            text = _join_stream(resp) if self.stream else _first_choice(resp)
        except openai.OpenAIError as e:
            raise LLMError(str(e)) from e
        log.debug("llm %s call took %.2fs (%d chars)", self.dialect, time.monotonic() - started, len(text))
        return text

    def _payload(self, messages: List[Message]) -> List[Message]:
        raise NotImplementedError


class PromptLLM(_OpenAIGateway):
    """Single-prompt dialect: all message contents become one user prompt."""

    dialect = "prompt"

    def _payload(self, messages: List[Message]) -> List[Message]:
        prompt = "\n\n".join(m["content"] for m in messages)
        return [user_message(prompt)]


class ChatLLM(_OpenAIGateway):
    """Chat dialect: role-tagged messages are forwarded natively."""

    dialect = "chat"

    def __init__(self, client: Any, model: str, stream: bool = True):
        super().__init__(client, model, stream=stream)

    def _payload(self, messages: List[Message]) -> List[Message]:
        return [{"role": m["role"], "content": m["content"]} for m in messages]


def _first_choice(resp: Any) -> str:
    if not resp.choices:
        raise LLMError("empty response: no choices returned")
    return resp.choices[0].message.content or ""


def _join_stream(chunks: Iterable[Any]) -> str:
    parts: List[str] = []
    for chunk in chunks:
        if not chunk.choices:
            continue
        delta = chunk.choices[0].delta
        if delta is not None and delta.content:
            parts.append(delta.content)
    return "".join(parts)


def connect(settings: Settings, client: Optional[Any] = None) -> _OpenAIGateway:
    """Build the gateway for the configured dialect."""
    if client is None:
        kwargs: Dict[str, Any] = {"base_url": settings.base_url, "api_key": settings.api_key, "max_retries": 0}
        if settings.turn_timeout is not None:
            kwargs["timeout"] = settings.turn_timeout
        try:
            client = OpenAI(**kwargs)
        except openai.OpenAIError as e:
            raise LLMError(str(e)) from e
    log.debug("llm endpoint %s model %s dialect %s", settings.base_url, settings.model, settings.dialect)
    if settings.chat:
        return ChatLLM(client, settings.model)
    return PromptLLM(client, settings.model)
