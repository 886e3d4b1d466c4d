"""
Thin wrapper around the hosted Gemini model plus the reply-to-JSON helpers
shared by the /api/ai routes.
"""
from __future__ import annotations
import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Any
import google.generativeai as genai
import structlog

from evolvefit.config import settings

log = structlog.get_logger()


class MissingCredential(Exception):
    pass


class ReplyFormatError(Exception):
    pass


@dataclass(frozen=True)
class InlineMedia:
    data: bytes
    mime_type: str

    @classmethod
    def from_base64(cls, encoded: str, mime_type: str) -> "InlineMedia":
        # tolerate data URLs ("data:image/jpeg;base64,....")
        if encoded.startswith("data:") and "," in encoded:
            encoded = encoded.split(",", 1)[1]
        try:
            return cls(data=base64.b64decode(encoded), mime_type=mime_type)
        except (binascii.Error, ValueError) as e:
            raise ReplyFormatError(f"invalid base64 media: {e}") from e


def mime_for(media_type: str | None) -> str:
    return "image/jpeg" if media_type == "image" else "video/mp4"


class ModelClient:
    def __init__(self, api_key: str | None = None, model_name: str | None = None, timeout: float | None = None):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model_name = model_name or settings.gemini_model
        self.timeout = settings.gemini_timeout_seconds if timeout is None else timeout
        self._model = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self):
        if not self.configured:
            raise MissingCredential("GEMINI_API_KEY is not set")
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def _request_options(self) -> dict[str, Any]:
        return {"timeout": self.timeout} if self.timeout else {}

    async def generate(self, prompt: str, media: InlineMedia | None = None) -> str:
        model = self._get_model()
        parts: list[Any] = [prompt]
        if media is not None:
            parts.append({"mime_type": media.mime_type, "data": media.data})
        log.info("gemini_request", model=self.model_name, media=media.mime_type if media else None)
        response = await model.generate_content_async(parts, request_options=self._request_options())
        text = response.text
        log.info("gemini_response", model=self.model_name, length=len(text))
        return text

    async def chat(self, history: list[dict[str, Any]], message: str) -> str:
        model = self._get_model()
        session = model.start_chat(history=history)
        log.info("gemini_chat", model=self.model_name, turns=len(history))
        response = await session.send_message_async(message, request_options=self._request_options())
        return response.text

# ---------- reply parsing ----------

# greedy: first "{" through the last "}" in the reply
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_FENCED_JSON_RE = re.compile(r"```json\n?([\s\S]*?)\n?```")
_FENCED_ANY_RE = re.compile(r"```\n?([\s\S]*?)\n?```")


def find_json_object(text: str) -> str | None:
    m = _OBJECT_RE.search(text or "")
    return m.group(0) if m else None


def extract_json_object(text: str) -> Any:
    raw = find_json_object(text)
    if raw is None:
        raise ReplyFormatError("no JSON object in model reply")
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ReplyFormatError(f"unparsable JSON in model reply: {e}") from e


def extract_json_block(text: str) -> Any:
    """Fenced ```json block, then any fenced block, then a bare object; first one that parses wins."""
    for pattern in (_FENCED_JSON_RE, _FENCED_ANY_RE, _OBJECT_RE):
        m = pattern.search(text or "")
        if not m:
            continue
        candidate = m.group(1) if m.groups() else m.group(0)
        try:
            return json.loads(candidate)
        except ValueError:
            log.debug("json_pattern_failed", pattern=pattern.pattern)
            continue
    raise ReplyFormatError("no parsable JSON block in model reply")
