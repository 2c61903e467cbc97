"""Parse provider completions that may be JSON, fenced JSON, or prose."""

import json
import logging
import re

from council.models import ParsedCompletion, RawCompletion

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")

# Keys checked, in order, for chat text inside a structured completion
_TEXT_KEYS = ("response", "message", "text", "content")


def _extract_text(structured: object) -> str:
    if isinstance(structured, dict):
        for key in _TEXT_KEYS:
            value = structured.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return ""


def _fenced_json(content: str) -> tuple[object, str] | None:
    """Decode the first fenced block; returns (value, prose outside the fence) or None."""
    for pattern in (_FENCED_JSON, _FENCED_ANY):
        match = pattern.search(content)
        if match is None:
            continue
        try:
            value = json.loads(match.group(1))
        except json.JSONDecodeError:
            logger.debug("Fenced block is not valid JSON")
            continue
        outside = (content[: match.start()] + content[match.end():]).strip()
        return value, outside
    return None


def parse_completion(raw: RawCompletion | str) -> ParsedCompletion:
    """Decode a completion in three tiers.

    1. The whole content as JSON.
    2. The interior of a fenced code block (```json or bare ```) as JSON.
    3. The whole content as plain text.

    ``structured`` keeps the decoded value either way. ``text`` comes from a
    text key of a decoded object; failing that, a bare scalar reply or prose
    written around a fenced block is kept whole. A JSON object or array with
    no text key has no usable text.
    """
    content = raw.content if isinstance(raw, RawCompletion) else raw
    content = (content or "").strip()

    try:
        structured = json.loads(content)
    except json.JSONDecodeError:
        pass
    else:
        text = _extract_text(structured)
        if not text and not isinstance(structured, (dict, list)):
            text = content
        return ParsedCompletion(structured=structured, text=text, is_text=False)

    fenced = _fenced_json(content)
    if fenced is not None:
        structured, outside = fenced
        text = _extract_text(structured) or (content if outside else "")
        return ParsedCompletion(structured=structured, text=text, is_text=False)

    return ParsedCompletion(structured=None, text=content, is_text=True)
