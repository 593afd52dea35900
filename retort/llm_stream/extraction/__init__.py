"""
Reply Extraction

Pure text-to-replies transform used on every streamed delta and once more
at end of stream.
"""

from .reply_extractor import (
    DEFAULT_HEURISTICS,
    DEFAULT_STRATEGIES,
    HeuristicConfig,
    Strategy,
    build_strategies,
    collect_replies,
    is_likely_reply,
    parse_embedded_json_array,
    parse_json_array,
    sanitize,
    split_heuristic_lines,
)

__all__ = [
    "DEFAULT_HEURISTICS",
    "DEFAULT_STRATEGIES",
    "HeuristicConfig",
    "Strategy",
    "build_strategies",
    "collect_replies",
    "is_likely_reply",
    "parse_embedded_json_array",
    "parse_json_array",
    "sanitize",
    "split_heuristic_lines",
]
