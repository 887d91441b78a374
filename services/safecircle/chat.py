"""Rule-based companion replies keyed on distress words and the current risk level."""

from typing import Optional

from services.safecircle.models import ChatReply
from services.safecircle.types import ChatIntent, RiskLevel

DISTRESS_KEYWORDS = ("scared", "unsafe", "help", "follow", "someone", "panic")

REPLIES = {
    ChatIntent.ASK_FOR_CONTEXT: "Tell me what’s happening and I’ll guide you step by step.",
    ChatIntent.CALM_AND_DIRECT: (
        "I’m here with you. Move to a well-lit, public place now. Call a trusted contact and "
        "share your live location. If you feel in immediate danger, call emergency services."
    ),
    ChatIntent.CALM_AND_GUIDED: (
        "Okay. Stay aware and avoid isolated routes. Share your location with someone you trust "
        "and keep your phone ready. If the situation escalates, move to a public place."
    ),
    ChatIntent.REASSURE: (
        "Thanks for checking in. Keep a normal pace, stay in visible areas, and share your "
        "location if you want extra safety."
    ),
    ChatIntent.HIGH_RISK_GUIDANCE: (
        "Given the risk level, choose a safer route: well-lit streets, populated areas, and keep "
        "a trusted person on call. You can generate an emergency message anytime."
    ),
    ChatIntent.GENERAL_GUIDANCE: (
        "I can help you plan safer steps. If you share your situation (alone, time, lighting), "
        "I’ll suggest what to do next."
    ),
}


def has_distress(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in DISTRESS_KEYWORDS)


def pick_intent(message: Optional[str], risk_level: Optional[str] = None) -> ChatIntent:
    text = (message or "").strip()
    if not text:
        return ChatIntent.ASK_FOR_CONTEXT

    level = RiskLevel.normalize(risk_level or RiskLevel.MEDIUM.value, default=RiskLevel.LOW)

    if has_distress(text):
        if level == RiskLevel.HIGH:
            return ChatIntent.CALM_AND_DIRECT
        if level == RiskLevel.MEDIUM:
            return ChatIntent.CALM_AND_GUIDED
        return ChatIntent.REASSURE

    if level == RiskLevel.HIGH:
        return ChatIntent.HIGH_RISK_GUIDANCE
    return ChatIntent.GENERAL_GUIDANCE


def build_chat_reply(message: Optional[str], risk_level: Optional[str] = None) -> ChatReply:
    intent = pick_intent(message, risk_level)
    return ChatReply(reply=REPLIES[intent], intent=intent.value)
