"""
Application-wide constants for the SafeCircle backend.

This module contains all shared constants used across the application.
"""

# ========= Service Configuration =========
# Service configuration: service_name -> (module_path, port)
SERVICES = {
    "safecircle": ("services.safecircle.main", 8080),
}

SERVICE_NAME = "safecircle"

# ========= Storage Configuration =========
# One JSON snapshot per logical store, all under the configured data dir
GUARDIANS_FILE = "guardians.json"
LOCATION_FILE = "last_location.json"
MEMORY_FILE = "memory.json"

# ========= Emergency Messaging =========
# Characters of a generated script kept in the memory preview
MESSAGE_PREVIEW_LENGTH = 140
MAPS_BASE_URL = "https://maps.google.com/"

# ========= Text-to-speech =========
MAX_TTS_TEXT_LENGTH = 700
ELEVENLABS_BASE_URL = "https://api.elevenlabs.io"
ELEVENLABS_MODEL_ID = "eleven_monolingual_v1"
