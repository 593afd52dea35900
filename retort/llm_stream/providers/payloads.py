"""
Provider Payload Helpers

Shape normalization for chat-completion JSON: streamed deltas, full
messages and error bodies. Every helper accepts arbitrary decoded JSON and
returns a plain string; unexpected shapes yield the empty string (or the
default error message) rather than raising.
"""

from typing import Any

from retort.core.config.constants import MSG_MODEL_REQUEST_FAILED


def extract_message_content(raw: Any) -> str:
    """
    Text of a ``content`` field.

    Supports a plain string, a list of content parts (strings or objects
    with a ``text`` field, joined by newlines) and a single part object.
    """
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        parts = []
        for item in raw:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
            else:
                parts.append("")
        return "\n".join(parts)
    if isinstance(raw, dict) and isinstance(raw.get("text"), str):
        return raw["text"]
    return ""


def _first_choice(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0]
    return choice if isinstance(choice, dict) else None


def extract_delta_text(payload: Any) -> str:
    """
    Incremental text of one streamed chunk.

    ``choices[0].delta.content`` when the delta carries content, otherwise
    ``choices[0].message.content`` (providers that answer without streaming
    send one chunk holding the whole message).
    """
    choice = _first_choice(payload)
    if choice is None:
        return ""

    delta = choice.get("delta")
    if isinstance(delta, dict) and "content" in delta:
        return extract_message_content(delta["content"])

    message = choice.get("message")
    if isinstance(message, dict):
        return extract_message_content(message.get("content"))
    return ""


def extract_error_message(payload: Any, default: str = MSG_MODEL_REQUEST_FAILED) -> str:
    """
    Human-readable message from a provider error body.

    Priority: ``error`` as a string, ``error.message``, top-level
    ``message``, then ``default``.
    """
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error.strip():
            return error.strip()
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            message = error["message"].strip()
            if message:
                return message
        fallback = payload.get("message")
        if isinstance(fallback, str) and fallback.strip():
            return fallback.strip()
    return default
