from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel

from services.safecircle.types import ContactMethod, RiskLevel


# ========= Risk =========


class ScenarioInput(BaseModel):
    # Fields are optional so the route can report which one is missing;
    # the engine scores absent values as 0.
    scenario_id: Optional[str] = None
    time_of_day: Optional[str] = None
    user_alone: Optional[bool] = None
    neighborhood_type: Optional[str] = None
    route_lighting: Optional[str] = None


class PresetScenario(BaseModel):
    scenario_id: str
    display_name: str
    time_of_day: str
    user_alone: bool
    neighborhood_type: str
    route_lighting: str


class RiskAssessment(BaseModel):
    risk_score: int
    risk_level: RiskLevel
    reasoning: str
    guardian_message: str
    safer_action: str


class RiskAssessResponse(RiskAssessment):
    scenario_id: Optional[str] = None
    model: Literal["local-engine"] = "local-engine"


# ========= Guardians =========


class Guardian(BaseModel):
    id: str
    name: str
    method: ContactMethod
    value: str
    relationship: str
    created_at: datetime


class GuardianCreateRequest(BaseModel):
    name: Optional[str] = None
    method: Optional[str] = None
    value: Optional[str] = None
    relationship: Optional[str] = None


class GuardianCreateResponse(BaseModel):
    ok: bool = True
    guardian: Guardian


class GuardianDeleteResponse(BaseModel):
    ok: bool = True
    deleted: int


# ========= Location =========


class LastLocation(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None
    accuracy: Optional[float] = None
    ts: Optional[Union[int, float]] = None


class LocationUpdateRequest(BaseModel):
    # Raw values; LocationTracker.set validates them
    lat: Optional[Any] = None
    lng: Optional[Any] = None
    accuracy: Optional[Any] = None
    ts: Optional[Any] = None


class LocationResponse(BaseModel):
    ok: bool = True
    location: LastLocation


class LocationSavedResponse(BaseModel):
    ok: bool = True
    saved: LastLocation


# ========= Memory =========


class GeneratedMessagePreview(BaseModel):
    ts: datetime
    risk_level: str
    contact_type: str
    preview: str


class MemoryState(BaseModel):
    has_memory: bool = False
    last_low_scenario_id: Optional[str] = None
    last_safer_action: Optional[str] = None
    last_generated_message: Optional[GeneratedMessagePreview] = None
    last_location_ts: Optional[Union[int, float]] = None


# ========= Emergency messaging =========


class EmergencyScriptRequest(BaseModel):
    risk_level: Optional[str] = None
    contact_type: Optional[str] = None
    location_text: Optional[str] = None
    extra: Optional[str] = None


class EmergencyScript(BaseModel):
    title: str
    text: str
    checklist: List[str]
    suggested_followups: List[str]


class EmergencyScriptResponse(EmergencyScript):
    ok: bool = True


class EmergencyPrepareRequest(BaseModel):
    risk_level: Optional[str] = None
    note: Optional[str] = None


class GuardianMessage(BaseModel):
    guardian_id: str
    method: ContactMethod
    to: str
    text: str
    share_link: str


class EmergencyPackage(BaseModel):
    share_link: str
    messages: List[GuardianMessage]
    recommended_actions: List[str]


class EmergencyPrepareResponse(EmergencyPackage):
    ok: bool = True
    risk_level: str
    hint: str = "Show copy buttons plus sms:/mailto: links; nothing is sent by the server."


# ========= Phrases & chat =========


class PhraseSuggestRequest(BaseModel):
    prefix: Optional[str] = None


class PhraseSuggestResponse(BaseModel):
    ok: bool = True
    provider: Literal["presage-style"] = "presage-style"
    suggestions: List[str]


class ChatContext(BaseModel):
    risk_level: Optional[str] = None


class ChatRequest(BaseModel):
    message: Optional[str] = None
    context: Optional[ChatContext] = None


class ChatReply(BaseModel):
    reply: str
    intent: str


class ChatResponse(ChatReply):
    ok: bool = True


# ========= Text-to-speech =========


class TTSRequest(BaseModel):
    text: Optional[str] = None


class TTSFallbackResponse(BaseModel):
    ok: bool = False
    fallback: bool = True
    provider: Literal["browser_tts"] = "browser_tts"
    text: str
    reason: Literal["elevenlabs_unavailable"] = "elevenlabs_unavailable"
