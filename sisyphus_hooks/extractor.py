"""
Prompt Extractor - pull the user-authored text out of a hook payload.

UserPromptSubmit payloads come in a few shapes depending on the host version:

    {"prompt": "..."}
    {"message": {"content": "..."}}
    {"parts": [{"type": "text", "text": "..."}, ...]}

match_payload() maps a parsed document onto one of those shapes (first
non-empty one wins). Unparseable input falls back to a scan for a quoted
"prompt"/"content"/"text" value. Extraction is total: anything unexpected
yields "".
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

# Quoted value after a known key; one line, escapes left as-is.
FALLBACK_RE = re.compile(r'"(?:prompt|content|text)"[ \t]*:[ \t]*"([^"\n]+)"')


@dataclass(frozen=True)
class DirectPrompt:
    text: str


@dataclass(frozen=True)
class MessageContent:
    text: str


@dataclass(frozen=True)
class TextParts:
    texts: tuple[str, ...]

    @property
    def text(self) -> str:
        return " ".join(self.texts)


@dataclass(frozen=True)
class RawFallback:
    text: str


@dataclass(frozen=True)
class Unrecognized:
    text: str = ""


PayloadShape = Union[DirectPrompt, MessageContent, TextParts, RawFallback, Unrecognized]


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def match_payload(data: Any) -> PayloadShape:
    """Classify a parsed payload into the first known shape carrying text."""
    if not isinstance(data, dict):
        return Unrecognized()

    prompt = _string(data.get("prompt"))
    if prompt:
        return DirectPrompt(prompt)

    message = data.get("message")
    if isinstance(message, dict):
        content = _string(message.get("content"))
        if content:
            return MessageContent(content)

    parts = data.get("parts")
    if isinstance(parts, list):
        shape = TextParts(tuple(
            _string(part.get("text"))
            for part in parts
            if isinstance(part, dict) and part.get("type") == "text"
        ))
        if shape.text:
            return shape

    return Unrecognized()


def scan_fallback(text: str) -> PayloadShape:
    """Best-effort scan of malformed or truncated input."""
    m = FALLBACK_RE.search(text)
    if m:
        return RawFallback(m.group(1))
    return Unrecognized()


def parse_payload(raw: Union[bytes, str]) -> PayloadShape:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, ValueError, RecursionError):
        logger.debug("Payload is not valid JSON, scanning for a quoted prompt")
        return scan_fallback(raw)
    return match_payload(data)


def extract_prompt(raw: Union[bytes, str]) -> str:
    """Return the prompt text carried by a raw payload, or "" if none."""
    try:
        return parse_payload(raw).text
    except Exception:
        logger.exception("Prompt extraction failed")
        return ""
