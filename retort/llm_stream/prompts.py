"""
Prompt Construction

Builds the two-message chat prompt and the intensity-derived sampling
parameters sent with every candidate model request.
"""

from typing import Any

from retort.core.config.constants import (
    MAX_INTENSITY,
    MAX_TOKENS,
    MIN_INTENSITY,
    PRESENCE_PENALTY_BASE,
    PRESENCE_PENALTY_SPAN,
    TEMPERATURE_BASE,
    TEMPERATURE_SPAN,
    TOP_P,
)
from retort.llm_stream.models import GenerationRequest

SYSTEM_INSTRUCTIONS = (
    "你是一名中文犀利斗嘴高手，擅长高情商反击。",
    "始终遵守：输出干净利落，不涉及人身攻击，不触碰法律或伦理底线，也不包含脏话。",
    "禁止输出 <think>、思考过程或任何除最终答案外的文本；不要使用 Markdown 代码块。",
    "所有回答必须严格以 JSON 数组返回，数组包含 3 个纯文本字符串。",
)

TONE_POLITE = "保持礼貌、机智、含蓄，但措辞要有感染力。"
TONE_SHARP = "直接犀利、针锋相对，同时保持逻辑性和幽默感。"
TONE_FORCEFUL = "言辞犀利、霸气、毫不退让，但仍然避免低俗或明显人身攻击。"


def describe_tone(intensity: int) -> str:
    """Natural-language tone descriptor: <=3 polite, 4-7 sharp, >=8 forceful."""
    if intensity <= 3:
        return TONE_POLITE
    if intensity <= 7:
        return TONE_SHARP
    return TONE_FORCEFUL


def _normalized(intensity: int) -> float:
    return (intensity - MIN_INTENSITY) / (MAX_INTENSITY - MIN_INTENSITY)


def map_intensity_to_temperature(intensity: int) -> float:
    """0.35 at intensity 1 rising linearly to 1.00 at 10."""
    return round(TEMPERATURE_BASE + _normalized(intensity) * TEMPERATURE_SPAN, 2)


def map_intensity_to_presence_penalty(intensity: int) -> float:
    """0.1 at intensity 1 rising linearly to 0.9 at 10."""
    return round(PRESENCE_PENALTY_BASE + _normalized(intensity) * PRESENCE_PENALTY_SPAN, 2)


def build_messages(opponent_line: str, intensity: int) -> list[dict[str, str]]:
    tone = describe_tone(intensity)
    return [
        {"role": "system", "content": " ".join(SYSTEM_INSTRUCTIONS)},
        {
            "role": "user",
            "content": "\n".join(
                [
                    "场景：我在社交平台和人吵架，需要你给出 3 条不同的中文回击。",
                    f"对方的话：{opponent_line}",
                    f"语气强度：{intensity}/10，描述：{tone}",
                    "请输出一个 JSON 数组，数组包含 3 个字符串，每条字符串就是一条回击内容，不要包含任何额外文字。",
                ]
            ),
        },
    ]


def build_completion_payload(model: str, request: GenerationRequest) -> dict[str, Any]:
    """
    Chat-completion request body for one candidate model.

    Args:
        model: Candidate model identifier
        request: Validated generation request

    Returns:
        JSON-serializable body with ``stream: true`` and sampling parameters
    """
    return {
        "model": model,
        "stream": True,
        "messages": build_messages(request.opponent_line, request.intensity),
        "temperature": map_intensity_to_temperature(request.intensity),
        "top_p": TOP_P,
        "max_tokens": MAX_TOKENS,
        "presence_penalty": map_intensity_to_presence_penalty(request.intensity),
    }
