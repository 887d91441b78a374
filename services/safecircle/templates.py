from typing import Dict, List

from services.safecircle.types import ContactBucket, RiskLevel

# In-code templates; fields are filled with str.format.
# Script key format: "script.{bucket}.{variant}"
# Guardian message key format: "guardian.{method}.{variant}"
TEMPLATES: Dict[str, str] = {
    "script.security.high": (
        "Hi, I need help{where}. I feel unsafe{context}. "
        "Please advise immediate steps and, if possible, send assistance."
    ),
    "script.security.default": (
        "Hi, I'm requesting safety support{where}{context}. "
        "Can you advise the safest route / next steps?"
    ),
    "script.family.high": (
        "Hey, I feel unsafe{where}{context}. Can you stay on call with me? "
        "If I don't reply in 5 minutes, please check on me."
    ),
    "script.family.default": (
        "Hey, I'm heading somewhere{where}{context}. "
        "Can you stay available for a quick check-in?"
    ),
    "script.friend.high": (
        "Hey, I feel unsafe{where}{context}. Can you stay on call with me for 10 minutes? "
        "If I stop replying, please check on me."
    ),
    "script.friend.medium": (
        "Hey, I'm a bit uncomfortable{where}{context}. "
        "Can you stay on standby and check in with me in a few minutes?"
    ),
    "script.friend.low": "Hey! Quick check-in: I'm walking{where}{context}. I'll message when I arrive.",
    "guardian.sms.high": "I feel unsafe. Please call me now. {location_line}{note_suffix}",
    "guardian.sms.default": "Quick safety check-in. {location_line}{note_suffix}",
    "guardian.email.high": (
        "Hi {name},\n\nI feel unsafe right now.\n{location_line}\n{note_line}\n\n"
        "Please call me. If I don’t respond, please check on me.\n"
    ),
    "guardian.email.default": (
        "Hi {name},\n\nQuick check-in.\n{location_line}\n{note_line}\n\nThank you.\n"
    ),
}

SCRIPT_TITLES: Dict[ContactBucket, str] = {
    ContactBucket.SECURITY: "Security message",
    ContactBucket.FAMILY: "Family message",
    ContactBucket.FRIEND: "Quick message",
}

BASE_CHECKLIST: List[str] = [
    "Share your live location",
    "Move to a well-lit / populated area",
    "Stay on call with someone you trust",
]

FIRST_CHECKLIST_ITEM: Dict[ContactBucket, str] = {
    ContactBucket.SECURITY: "Share location with security",
    ContactBucket.FAMILY: "Send location to family",
    ContactBucket.FRIEND: "Send to a trusted friend",
}

SUGGESTED_FOLLOWUPS: Dict[ContactBucket, List[str]] = {
    ContactBucket.SECURITY: [
        "I can share my exact location now.",
        "I'm moving to a well-lit area.",
        "Please stay on the line with me.",
    ],
    ContactBucket.FAMILY: [
        "I'm sharing my live location now.",
        "Can you call me for a few minutes?",
        "If I stop responding, please check on me.",
    ],
    ContactBucket.FRIEND: [
        "I'm sharing my live location now.",
        "Can you stay on call with me?",
        "I'll text you when I arrive safely.",
    ],
}

RECOMMENDED_ACTIONS: Dict[RiskLevel, List[str]] = {
    RiskLevel.HIGH: [
        "Move to a well-lit area",
        "Stay on call with someone you trust",
        "Share your live location",
        "Seek help nearby",
    ],
    RiskLevel.MEDIUM: [
        "Stay in populated areas",
        "Share your location",
        "Avoid isolated routes",
    ],
    RiskLevel.LOW: [
        "Keep awareness",
        "Check in with a trusted person if needed",
    ],
}


def get_template(kind: str, group: str, variant: str) -> str:
    key = f"{kind}.{group}.{variant}"
    return TEMPLATES.get(key, "")


def script_variant(bucket: ContactBucket, level: RiskLevel) -> str:
    """Security and family scripts only split HIGH from the rest."""
    if level == RiskLevel.HIGH:
        return "high"
    if bucket == ContactBucket.FRIEND:
        return level.value.lower()
    return "default"
