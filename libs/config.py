"""
Configuration module for loading environment variables
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

PLACEHOLDER_MARKERS = ("your", "placeholder", "change", "replace", "xxxx", "example")


def is_placeholder(value: Optional[str]) -> bool:
    """True when a secret is unset or still holds a template value."""
    if not value:
        return True
    lowered = str(value).lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


class Config:
    """Application configuration"""

    # Storage
    DATA_DIR: str = os.getenv("SAFECIRCLE_DATA_DIR", os.path.join(os.getcwd(), "data"))

    # HTTP
    ALLOWED_ORIGIN: Optional[str] = os.getenv("ALLOWED_ORIGIN")
    PORT: int = int(os.getenv("PORT", "8080"))
    MAX_BODY_BYTES: int = int(os.getenv("MAX_BODY_BYTES", str(1024 * 1024)))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Rate limiting
    RATE_LIMIT_MAX: int = int(os.getenv("RATE_LIMIT_MAX", "40"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # ElevenLabs Configuration
    ELEVENLABS_API_KEY: Optional[str] = os.getenv("ELEVENLABS_API_KEY")
    ELEVENLABS_VOICE_ID: Optional[str] = os.getenv("ELEVENLABS_VOICE_ID")
    ELEVENLABS_TIMEOUT_SECONDS: float = float(os.getenv("ELEVENLABS_TIMEOUT_SECONDS", "15"))

    @classmethod
    def validate_elevenlabs_config(cls) -> bool:
        """Check if ElevenLabs configuration is complete"""
        return not (is_placeholder(cls.ELEVENLABS_API_KEY) or is_placeholder(cls.ELEVENLABS_VOICE_ID))

    @classmethod
    def allowed_origins(cls) -> List[str]:
        return [cls.ALLOWED_ORIGIN] if cls.ALLOWED_ORIGIN else ["*"]


config = Config()
