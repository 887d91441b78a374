# Run:
# uvicorn services.safecircle.main:app --host 0.0.0.0 --port 8080 --reload
# Docs: http://127.0.0.1:8080/docs

import logging
from typing import List

from fastapi import Depends, HTTPException, Response, status

from common.constants import MAX_TTS_TEXT_LENGTH, SERVICE_NAME
from libs.config import config
from libs.elevenlabs_client import ElevenLabsClient, get_elevenlabs_client
from libs.fastapi_service import CORSMiddlewareConfig, FastAPIServiceFactory, ServiceAppConfig
from libs.rate_limiter import rate_limit
from services.safecircle.chat import build_chat_reply
from services.safecircle.errors import (
    EmergencyPreconditionError,
    GuardianValidationError,
    InvalidCoordinatesError,
)
from services.safecircle.manager import build_emergency_script, contact_bucket
from services.safecircle.models import (
    ChatRequest,
    ChatResponse,
    EmergencyPrepareRequest,
    EmergencyPrepareResponse,
    EmergencyScriptRequest,
    EmergencyScriptResponse,
    Guardian,
    GuardianCreateRequest,
    GuardianCreateResponse,
    GuardianDeleteResponse,
    LocationResponse,
    LocationSavedResponse,
    LocationUpdateRequest,
    MemoryState,
    PhraseSuggestRequest,
    PhraseSuggestResponse,
    PresetScenario,
    RiskAssessResponse,
    ScenarioInput,
    TTSFallbackResponse,
    TTSRequest,
)
from services.safecircle.phrases import suggest
from services.safecircle.risk_engine import PRESET_SCENARIOS, assess_risk
from services.safecircle.state import SafeCircleState, get_state
from services.safecircle.types import RiskLevel

# Setup logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

service_config = ServiceAppConfig(
    title="SafeCircle Service",
    description=(
        "Offline risk scoring, guardian contacts, last known location, "
        "emergency message generation, phrase suggestions and chat replies."
    ),
    service_name=SERVICE_NAME,
    cors_config=CORSMiddlewareConfig(
        allow_origins=config.allowed_origins(),
        allow_methods=["GET", "POST", "DELETE"],
    ),
    max_body_bytes=config.MAX_BODY_BYTES,
)

factory = FastAPIServiceFactory(service_config)
app = factory.create_app()

# ========= Metrics =========

RISK_ASSESSMENTS_TOTAL = factory.add_business_metric(
    "risk_assessments_total",
    "Total offline risk assessments by resulting level",
    ["risk_level"],
)
GUARDIANS_ADDED_TOTAL = factory.add_business_metric(
    "guardians_added_total",
    "Total guardians registered",
)
GUARDIANS_REMOVED_TOTAL = factory.add_business_metric(
    "guardians_removed_total",
    "Total guardians removed",
)
EMERGENCY_SCRIPTS_TOTAL = factory.add_business_metric(
    "emergency_scripts_total",
    "Total one-click emergency scripts generated",
    ["contact_bucket"],
)
EMERGENCY_PACKAGES_TOTAL = factory.add_business_metric(
    "emergency_packages_total",
    "Emergency package requests by outcome",
    ["outcome"],
)
TTS_REQUESTS_TOTAL = factory.add_business_metric(
    "tts_requests_total",
    "Text-to-speech requests by outcome",
    ["outcome"],
)

REQUIRED_SCENARIO_FIELDS = (
    "scenario_id",
    "time_of_day",
    "user_alone",
    "neighborhood_type",
    "route_lighting",
)

ENDPOINTS = [
    {"method": "GET", "path": "/health", "description": "Liveness check"},
    {"method": "GET", "path": "/v1/scenarios", "description": "List preset scenarios"},
    {"method": "GET", "path": "/v1/guardians", "description": "List guardians"},
    {
        "method": "POST",
        "path": "/v1/guardians",
        "description": "Add guardian",
        "body": {"name": "string", "method": "sms|email", "value": "string", "relationship": "friend|family|campus"},
    },
    {"method": "DELETE", "path": "/v1/guardians/{guardian_id}", "description": "Delete guardian by id"},
    {
        "method": "POST",
        "path": "/v1/location",
        "description": "Save last known location",
        "body": {"lat": "number", "lng": "number", "accuracy": "number?", "ts": "number?"},
    },
    {"method": "GET", "path": "/v1/location", "description": "Get last known location"},
    {
        "method": "POST",
        "path": "/v1/risk/assess",
        "description": "Assess risk using the offline engine",
        "body": {
            "scenario_id": "string",
            "time_of_day": "day|night",
            "user_alone": "boolean",
            "neighborhood_type": "string",
            "route_lighting": "good|mixed|poor",
        },
    },
    {
        "method": "POST",
        "path": "/v1/emergency/script",
        "description": "Generate a one-click message and checklist",
        "body": {
            "risk_level": "HIGH|MEDIUM|LOW",
            "contact_type": "friend|family|security",
            "location_text": "string?",
            "extra": "string?",
        },
    },
    {
        "method": "POST",
        "path": "/v1/emergency/prepare",
        "description": "Generate per-guardian messages from stored guardians and last location",
        "body": {"risk_level": "HIGH|MEDIUM|LOW", "note": "string?"},
    },
    {
        "method": "POST",
        "path": "/v1/phrases/suggest",
        "description": "Safety phrase suggestions",
        "body": {"prefix": "string"},
    },
    {
        "method": "POST",
        "path": "/v1/chat",
        "description": "Rule-based assistant reply",
        "body": {"message": "string", "context": {"risk_level": "HIGH|MEDIUM|LOW"}},
    },
    {"method": "GET", "path": "/v1/memory", "description": "Return last saved memory"},
    {"method": "GET", "path": "/v1/tts", "description": "Text-to-speech usage info"},
    {"method": "POST", "path": "/v1/tts", "description": "Generate speech audio (mp3) or fallback JSON"},
]


def _bad_request(error: str, **extra) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": error, **extra},
    )


# ========= Service info =========


@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "status": "running",
        "links": {
            "health": "/health",
            "docs": "/docs",
            "endpoints": "/v1/endpoints",
            "scenarios": "/v1/scenarios",
            "guardians": "/v1/guardians",
            "location": "/v1/location",
            "risk": "/v1/risk/assess",
            "emergency_script": "/v1/emergency/script",
            "emergency_prepare": "/v1/emergency/prepare",
            "phrases": "/v1/phrases/suggest",
            "chat": "/v1/chat",
            "memory": "/v1/memory",
            "tts": "/v1/tts",
        },
    }


@app.get("/v1/endpoints")
async def endpoints():
    return {"endpoints": ENDPOINTS}


@app.get("/v1/scenarios", response_model=List[PresetScenario])
async def list_scenarios():
    return PRESET_SCENARIOS


@app.get("/v1/memory", response_model=MemoryState)
def memory_echo(state: SafeCircleState = Depends(get_state)):
    return state.memory.snapshot()


# ========= Guardians =========


@app.get("/v1/guardians", response_model=List[Guardian], tags=["Guardians"])
def list_guardians(state: SafeCircleState = Depends(get_state)):
    return state.guardians.list()


@app.post(
    "/v1/guardians",
    response_model=GuardianCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit)],
    tags=["Guardians"],
)
def add_guardian(body: GuardianCreateRequest, state: SafeCircleState = Depends(get_state)):
    try:
        guardian = state.guardians.add(
            name=body.name,
            method=body.method,
            value=body.value,
            relationship=body.relationship,
        )
    except GuardianValidationError as e:
        raise _bad_request("invalid_guardian", details=e.errors)

    GUARDIANS_ADDED_TOTAL.inc()
    return GuardianCreateResponse(guardian=guardian)


@app.delete(
    "/v1/guardians/{guardian_id}",
    response_model=GuardianDeleteResponse,
    dependencies=[Depends(rate_limit)],
    tags=["Guardians"],
)
def remove_guardian(guardian_id: str, state: SafeCircleState = Depends(get_state)):
    guardian_id = guardian_id.strip()
    if not guardian_id:
        raise _bad_request("missing_id")

    deleted = state.guardians.remove(guardian_id)
    if deleted:
        GUARDIANS_REMOVED_TOTAL.inc(deleted)
    return GuardianDeleteResponse(deleted=deleted)


# ========= Location =========


@app.get("/v1/location", response_model=LocationResponse, tags=["Location"])
def get_location(state: SafeCircleState = Depends(get_state)):
    return LocationResponse(location=state.location.get())


@app.post(
    "/v1/location",
    response_model=LocationSavedResponse,
    dependencies=[Depends(rate_limit)],
    tags=["Location"],
)
def set_location(body: LocationUpdateRequest, state: SafeCircleState = Depends(get_state)):
    try:
        saved = state.location.set(lat=body.lat, lng=body.lng, accuracy=body.accuracy, ts=body.ts)
    except InvalidCoordinatesError as e:
        raise _bad_request(e.code)

    state.memory.record_location(saved.ts)
    return LocationSavedResponse(saved=saved)


# ========= Risk =========


@app.post(
    "/v1/risk/assess",
    response_model=RiskAssessResponse,
    dependencies=[Depends(rate_limit)],
    tags=["Risk"],
)
def risk_assess(body: ScenarioInput, state: SafeCircleState = Depends(get_state)):
    for field in REQUIRED_SCENARIO_FIELDS:
        if field not in body.model_fields_set:
            raise _bad_request(f"missing_{field}")

    result = assess_risk(body)
    RISK_ASSESSMENTS_TOTAL.labels(risk_level=result.risk_level.value).inc()

    if result.risk_level == RiskLevel.LOW:
        state.memory.record_low_risk(body.scenario_id, result.safer_action)

    return RiskAssessResponse(**result.model_dump(), scenario_id=body.scenario_id)


# ========= Emergency messaging =========


@app.post(
    "/v1/emergency/script",
    response_model=EmergencyScriptResponse,
    dependencies=[Depends(rate_limit)],
    tags=["Emergency"],
)
def emergency_script(body: EmergencyScriptRequest, state: SafeCircleState = Depends(get_state)):
    if not body.risk_level:
        raise _bad_request("missing_risk_level")
    if not body.contact_type:
        raise _bad_request("missing_contact_type")

    script = build_emergency_script(
        risk_level=body.risk_level,
        contact_type=body.contact_type,
        location_text=body.location_text,
        extra_context=body.extra,
    )
    EMERGENCY_SCRIPTS_TOTAL.labels(contact_bucket=contact_bucket(body.contact_type).value).inc()

    state.memory.record_generated_message(body.risk_level, body.contact_type, script.text)
    return EmergencyScriptResponse(**script.model_dump())


@app.post(
    "/v1/emergency/prepare",
    response_model=EmergencyPrepareResponse,
    dependencies=[Depends(rate_limit)],
    tags=["Emergency"],
)
def emergency_prepare(body: EmergencyPrepareRequest, state: SafeCircleState = Depends(get_state)):
    if not body.risk_level:
        raise _bad_request("missing_risk_level")

    try:
        package = state.emergency.prepare_package(body.risk_level, body.note)
    except EmergencyPreconditionError as e:
        EMERGENCY_PACKAGES_TOTAL.labels(outcome=e.code).inc()
        raise _bad_request(e.code)

    EMERGENCY_PACKAGES_TOTAL.labels(outcome="prepared").inc()
    return EmergencyPrepareResponse(
        risk_level=body.risk_level.upper(),
        **package.model_dump(),
    )


# ========= Phrases & chat =========


@app.post(
    "/v1/phrases/suggest",
    response_model=PhraseSuggestResponse,
    dependencies=[Depends(rate_limit)],
    tags=["Assistant"],
)
async def phrases_suggest(body: PhraseSuggestRequest):
    if body.prefix is None:
        raise _bad_request("missing_prefix")
    return PhraseSuggestResponse(suggestions=suggest(body.prefix))


@app.post(
    "/v1/chat",
    response_model=ChatResponse,
    dependencies=[Depends(rate_limit)],
    tags=["Assistant"],
)
async def chat(body: ChatRequest):
    risk_level = body.context.risk_level if body.context else None
    reply = build_chat_reply(body.message, risk_level)
    return ChatResponse(**reply.model_dump())


# ========= Text-to-speech =========


@app.get("/v1/tts", tags=["Assistant"])
async def tts_info():
    return {
        "ok": True,
        "note": "POST /v1/tts with body {\"text\": \"...\"} returns audio/mpeg, or fallback JSON for browser speech.",
        "max_text_length": MAX_TTS_TEXT_LENGTH,
        "provider_configured": config.validate_elevenlabs_config(),
    }


@app.post("/v1/tts", dependencies=[Depends(rate_limit)], tags=["Assistant"])
async def tts(body: TTSRequest, client: ElevenLabsClient = Depends(get_elevenlabs_client)):
    if body.text is None:
        raise _bad_request("missing_text")
    if len(body.text) > MAX_TTS_TEXT_LENGTH:
        raise _bad_request("text_too_long")

    audio = await client.synthesize(body.text)
    if audio is None:
        TTS_REQUESTS_TOTAL.labels(outcome="fallback").inc()
        return TTSFallbackResponse(text=body.text)

    TTS_REQUESTS_TOTAL.labels(outcome="audio").inc()
    return Response(content=audio, media_type="audio/mpeg")
