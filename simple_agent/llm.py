from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional

import httpx

from .errors import APIStatusError, EmptyReplyError, InferenceError, ProviderError
from .logger import null_logger
from .messages import Message, Transcript, ROLE_ASSISTANT


class InferenceClient:
    """Synchronous client for an OpenAI-style chat completions endpoint (Zhipu GLM)."""

    def __init__(self, api_key: str, api_url: str, model: str,
                 timeout: float = 120.0,
                 http_client: Optional[httpx.Client] = None,
                 logger: Optional[logging.Logger] = None):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.logger = logger or null_logger()
        self._http = http_client or httpx.Client(timeout=timeout)
        self._owns_http = http_client is None

    @classmethod
    def from_config(cls, config, logger: Optional[logging.Logger] = None) -> "InferenceClient":
        return cls(api_key=config.api_key, api_url=config.api_url, model=config.model,
                   timeout=config.request_timeout, logger=logger)

    def build_payload(self, transcript: Transcript) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": transcript.to_payload(),
            "thinking": {"type": "enabled"},
            "stream": False,
        }

    def complete(self, transcript: Transcript) -> Message:
        payload = self.build_payload(transcript)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        self.logger.info("sending chat request: model=%s messages=%d", self.model, len(transcript))
        try:
            r = self._http.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            self.logger.error("request to %s failed: %s", self.api_url, e)
            raise InferenceError(f"request failed: {e}") from e

        self.logger.info("response status: %d", r.status_code)
        body = r.text
        if r.status_code != 200:
            self.logger.error("API returned status %d: %s", r.status_code, body)
            raise APIStatusError(r.status_code, body)

        try:
            data = r.json()
        except json.JSONDecodeError as e:
            raise InferenceError(f"could not parse API response: {e}; raw response: {body}") from e
        if not isinstance(data, dict):
            raise InferenceError(f"unexpected API response: {body}")

        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            self.logger.error("API error: %s", err)
            raise ProviderError(str(err.get("message")), str(err.get("type") or ""),
                                str(err.get("code") or ""))

        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise InferenceError(f"unexpected API response: {body}")
        if not choices:
            self.logger.error("API returned no choices")
            raise EmptyReplyError()

        first = choices[0] if isinstance(choices[0], dict) else {}
        msg = first.get("message")
        if not isinstance(msg, dict):
            raise InferenceError(f"unexpected API response: {body}")
        content = msg.get("content") or ""
        if not isinstance(content, str):
            raise InferenceError(f"unexpected API response: {body}")
        role = msg.get("role")
        if role and role != ROLE_ASSISTANT:
            self.logger.warning("reply role %r treated as %s", role, ROLE_ASSISTANT)
        # the reply always becomes the assistant turn
        return Message(role=ROLE_ASSISTANT, content=content)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()
