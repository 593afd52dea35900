"""
Reply Extractor

Recovers up to three clean reply strings from raw model output. Models are
asked for a strict JSON array but routinely wrap it in prose, emit reasoning
blocks, or fall back to numbered lines, so extraction is a chain of
progressively looser strategies:

    sanitize -> strict JSON array -> embedded JSON array -> heuristic lines

Every strategy is a pure ``str -> tuple[str, ...]`` function; the first
non-empty result wins. Nothing in this module raises on bad input.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

import orjson

from retort.core.config.constants import MAX_REPLIES

Strategy = Callable[[str], tuple[str, ...]]

_THINK_BLOCK = re.compile(r"<think\b[^>]*>[\s\S]*?</think>", re.IGNORECASE)
# Reasoning cut off mid-stream: drop from the opening tag to the end
_UNTERMINATED_THINK = re.compile(r"<think\b[^>]*>[\s\S]*\Z", re.IGNORECASE)
_LINE_BREAKS = re.compile(r"\n+")
_LEADING_MARKERS = re.compile(r"^[\s\d\-•、.]+")


@dataclass(frozen=True)
class HeuristicConfig:
    """
    Tunables of the line-based fallback.

    These were tuned against one model family's output style; retune them
    before pointing the service at a different provider.
    """

    forbidden_patterns: tuple[re.Pattern, ...] = field(
        default_factory=lambda: (
            re.compile(r"^<think\b[^>]*>", re.IGNORECASE),
            re.compile(r"^</think>", re.IGNORECASE),
            re.compile(r"^场景[:：]"),
            re.compile(r"^我的角色[:：]"),
            re.compile(r"^请[^\n]*JSON"),
            re.compile(r"^用户[^\n]*要求"),
            re.compile(r"^思考[:：]"),
            re.compile(r"^角色设定[:：]"),
        )
    )
    forbidden_keywords: tuple[str, ...] = (
        "场景：",
        "输出必须",
        "高情商反击",
        "关键点",
        "不要输出",
        "请确保",
        "JSON",
    )
    disallowed_starts: tuple[str, ...] = ("场景", "角色", "输出", "说明", "提示")
    sentence_punctuation: re.Pattern = field(
        default_factory=lambda: re.compile(r"[。？！?!…～~]")
    )
    ideograph: re.Pattern = field(default_factory=lambda: re.compile(r"[一-龥]"))
    min_length: int = 6
    min_length_without_punctuation: int = 8


DEFAULT_HEURISTICS = HeuristicConfig()


def sanitize(raw: str | None) -> str:
    """Remove <think> reasoning blocks (closed or unterminated) and trim."""
    if not raw:
        return ""
    text = _THINK_BLOCK.sub("", raw)
    text = _UNTERMINATED_THINK.sub("", text)
    return text.strip()


def parse_json_array(text: str) -> tuple[str, ...]:
    """Strict strategy: the whole text is a JSON array of strings."""
    if not text:
        return ()
    try:
        parsed = orjson.loads(text)
    except orjson.JSONDecodeError:
        return ()
    if not isinstance(parsed, list):
        return ()
    items = (item.strip() for item in parsed if isinstance(item, str))
    return tuple(item for item in items if item)[:MAX_REPLIES]


def parse_embedded_json_array(text: str) -> tuple[str, ...]:
    """A JSON array surrounded by prose: first '[' through last ']'."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return ()
    return parse_json_array(text[start:end + 1])


def is_likely_reply(line: str, config: HeuristicConfig = DEFAULT_HEURISTICS) -> bool:
    if len(line) < config.min_length:
        return False
    if line.startswith(config.disallowed_starts):
        return False
    if config.sentence_punctuation.search(line):
        return True
    # Short punchlines without punctuation still need a Chinese character
    return bool(config.ideograph.search(line)) and len(line) >= config.min_length_without_punctuation


def split_heuristic_lines(
    text: str, config: HeuristicConfig = DEFAULT_HEURISTICS
) -> tuple[str, ...]:
    """
    Freeform fallback: one reply per line.

    Bullets and numbering are stripped, then meta-commentary and instruction
    echoes are dropped and only lines that read like a reply are kept.
    """
    if not text:
        return ()
    replies = []
    for raw_line in _LINE_BREAKS.split(text):
        line = _LEADING_MARKERS.sub("", raw_line).strip()
        if not line:
            continue
        if any(pattern.search(line) for pattern in config.forbidden_patterns):
            continue
        if any(keyword in line for keyword in config.forbidden_keywords):
            continue
        if not is_likely_reply(line, config):
            continue
        replies.append(line)
        if len(replies) == MAX_REPLIES:
            break
    return tuple(replies)


def build_strategies(config: HeuristicConfig = DEFAULT_HEURISTICS) -> tuple[Strategy, ...]:
    """Ordered strategy chain, loosest last."""
    return (
        parse_json_array,
        parse_embedded_json_array,
        partial(split_heuristic_lines, config=config),
    )


DEFAULT_STRATEGIES = build_strategies()


def collect_replies(
    raw: str | None, strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES
) -> tuple[str, ...]:
    """
    Extract at most three replies from accumulated model text.

    Args:
        raw: Accumulated text (may be partial mid-stream)
        strategies: Strategy chain, tried in order

    Returns:
        Replies from the first strategy that yields any, else an empty tuple
    """
    text = sanitize(raw)
    for strategy in strategies:
        replies = strategy(text)
        if replies:
            return replies
    return ()
