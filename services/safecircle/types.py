"""
Type definitions for the SafeCircle service.

This module contains all enum types used across the service.
"""

from enum import Enum


class RiskLevel(str, Enum):
    """Risk classification derived from a scenario's additive score."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def normalize(cls, value, default: "RiskLevel") -> "RiskLevel":
        """Uppercase a raw value, falling back to ``default`` when unrecognized."""
        raw = str(value or "").strip().upper()
        try:
            return cls(raw)
        except ValueError:
            return default


class TimeOfDay(str, Enum):
    DAY = "day"
    NIGHT = "night"


class RouteLighting(str, Enum):
    GOOD = "good"
    MIXED = "mixed"
    POOR = "poor"


class NeighborhoodType(str, Enum):
    """Neighborhood categories that carry a score; any other string scores 0."""

    INDUSTRIAL = "industrial"
    DOWNTOWN = "downtown"


class ContactMethod(str, Enum):
    """How a guardian is reached."""

    SMS = "sms"
    EMAIL = "email"


class ContactBucket(str, Enum):
    """Template bucket selected from a free-form contact type."""

    SECURITY = "security"
    FAMILY = "family"
    FRIEND = "friend"


class ChatIntent(str, Enum):
    ASK_FOR_CONTEXT = "ask_for_context"
    CALM_AND_DIRECT = "calm_and_direct"
    CALM_AND_GUIDED = "calm_and_guided"
    REASSURE = "reassure"
    HIGH_RISK_GUIDANCE = "high_risk_guidance"
    GENERAL_GUIDANCE = "general_guidance"
