"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the retort streaming service.

User-facing messages are Chinese and returned verbatim in error bodies and
frames; tests compare against these constants rather than literals.
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Request processing stages used as the ``stage`` field of log entries.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    """

    INITIALIZATION = "0.0_INITIALIZATION"
    REQUEST_VALIDATION = "1.0_REQUEST_VALIDATION"
    MODEL_ATTEMPT = "2.0_MODEL_ATTEMPT"
    PROVIDER_REQUEST = "3.0_PROVIDER_REQUEST"
    STREAM_DECODE = "4.0_STREAM_DECODE"
    REPLY_EXTRACTION = "5.0_REPLY_EXTRACTION"
    COMPLETION = "6.0_COMPLETION"

    # Cross-cutting
    FALLBACK = "F_MODEL_FALLBACK"
    LOGGING = "L_LOGGING_OPERATIONS"


# ============================================================================
# Intensity and Sampling
# ============================================================================

MIN_INTENSITY = 1
MAX_INTENSITY = 10
DEFAULT_INTENSITY = 6

TEMPERATURE_BASE = 0.35
TEMPERATURE_SPAN = 0.65
PRESENCE_PENALTY_BASE = 0.1
PRESENCE_PENALTY_SPAN = 0.8
TOP_P = 0.9
MAX_TOKENS = 512

# At most this many replies are surfaced to the caller
MAX_REPLIES = 3

# ============================================================================
# Provider Failure Policy
# ============================================================================

# Statuses at or above this value move on to the next candidate model
RETRYABLE_STATUS_FLOOR = 500

# Lowercased fragments of provider error messages that are transient
RETRYABLE_ERROR_PHRASES = (
    "provider returned error",
    "no endpoints found",
    "upstream error",
    "temporarily unavailable",
)

# Status used for failures that never produced an HTTP error status
UPSTREAM_FAILURE_STATUS = 502

# Separator between per-model messages in the aggregated error
FAILURE_SEPARATOR = " ｜ "

# ============================================================================
# SSE Wire Format (upstream)
# ============================================================================

SSE_EVENT_DELIMITER = "\n\n"
SSE_DATA_PREFIX = "data:"
SSE_DONE_SENTINEL = "[DONE]"

# ============================================================================
# HTTP
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
HEADER_REFERER = "HTTP-Referer"
HEADER_TITLE = "X-Title"

NDJSON_MEDIA_TYPE = "application/x-ndjson"

# ============================================================================
# User-Facing Messages
# ============================================================================

MSG_OPPONENT_LINE_NOT_STRING = "请提供对方的话（字符串）。"
MSG_OPPONENT_LINE_EMPTY = "请先输入对方说了什么。"
MSG_OPPONENT_LINE_TOO_LONG = "对方的话太长了，请精简到 {limit} 字以内。"
MSG_BODY_NOT_JSON = "请求体必须是 JSON 对象。"
MSG_API_KEY_MISSING = "服务器未正确配置 OpenRouter API Key。"
MSG_MODEL_REQUEST_FAILED = "模型接口请求失败，请稍后再试。"
MSG_EMPTY_RESPONSE = "模型返回空响应，请稍后再试。"
MSG_NO_USABLE_ANSWER = "模型暂时给不出答案，请换个描述再试试。"
MSG_SERVICE_UNAVAILABLE = "服务暂时不可用，请稍后重试。"
MSG_GENERATION_FAILED = "生成失败，请稍后再试。"

# Client-side messages
MSG_CLIENT_EMPTY_LINE = "先告诉我对方说了什么，才能帮你回击。"
MSG_CLIENT_NO_CONTENT = "模型没有返回内容，请再试一次。"
MSG_DATA_POLICY_BLOCKED = (
    "当前密钥未允许使用免费模型（需要开启数据分享）。"
    "请前往 OpenRouter 设置：https://openrouter.ai/settings/privacy 启用数据发布或更换其他模型。"
)
MSG_PROVIDER_UNSTABLE = (
    "模型提供方暂时异常，已尝试自动切换。"
    "如仍失败，请稍后再试或在 .env 中设置 OPENROUTER_MODEL/OPENROUTER_MODELS 更换模型。"
)
DATA_POLICY_PHRASE = "No endpoints found matching your data policy"
PROVIDER_ERROR_PHRASE = "provider returned error"
