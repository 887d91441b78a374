"""
ElevenLabs text-to-speech client.
Turns short safety messages into MP3 audio; callers fall back to browser TTS
whenever this returns None.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx
from httpx import AsyncClient, Timeout

from common.constants import ELEVENLABS_BASE_URL, ELEVENLABS_MODEL_ID
from libs.config import config, is_placeholder

logger = logging.getLogger(__name__)

VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.75}


class ElevenLabsClient:
    """Client for the ElevenLabs text-to-speech API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        voice_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize ElevenLabs client.

        Args:
            api_key: ElevenLabs API key. If None, reads ELEVENLABS_API_KEY from config.
            voice_id: Voice to synthesize with. If None, reads ELEVENLABS_VOICE_ID.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key if api_key is not None else config.ELEVENLABS_API_KEY
        self.voice_id = voice_id if voice_id is not None else config.ELEVENLABS_VOICE_ID
        self.timeout = timeout if timeout is not None else config.ELEVENLABS_TIMEOUT_SECONDS

        if not self.is_enabled():
            logger.warning(
                "ElevenLabs key or voice id missing. Text-to-speech will use the browser fallback."
            )

    def is_enabled(self) -> bool:
        """Check if ElevenLabs is usable (real key and voice id)."""
        return not (is_placeholder(self.api_key) or is_placeholder(self.voice_id))

    async def synthesize(self, text: str) -> Optional[bytes]:
        """
        Convert text to speech.

        Args:
            text: Text to speak

        Returns:
            MP3 audio bytes, or None if disabled or the request failed
        """
        if not self.is_enabled():
            return None

        url = f"/v1/text-to-speech/{quote(self.voice_id, safe='')}"
        body = {
            "text": text,
            "model_id": ELEVENLABS_MODEL_ID,
            "voice_settings": VOICE_SETTINGS,
        }
        headers = {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

        try:
            async with AsyncClient(base_url=ELEVENLABS_BASE_URL, timeout=Timeout(self.timeout)) as client:
                response = await client.post(url, json=body, headers=headers)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as e:
            logger.error(
                f"ElevenLabs API error: {e.response.status_code} - {e.response.text[:200]}"
            )
            return None
        except httpx.RequestError as e:
            logger.error(f"ElevenLabs request error: {e}")
            return None


# Singleton instance
_elevenlabs_client: Optional[ElevenLabsClient] = None


def get_elevenlabs_client() -> ElevenLabsClient:
    """Get or create the ElevenLabs client singleton"""
    global _elevenlabs_client
    if _elevenlabs_client is None:
        _elevenlabs_client = ElevenLabsClient()
    return _elevenlabs_client
