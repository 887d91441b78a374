import logging
import math
from typing import List, Optional
from urllib.parse import quote

from common.constants import MAPS_BASE_URL
from services.safecircle.errors import EmergencyPreconditionError
from services.safecircle.guardian_registry import GuardianRegistry
from services.safecircle.location_tracker import LocationTracker
from services.safecircle.models import (
    EmergencyPackage,
    EmergencyScript,
    Guardian,
    GuardianMessage,
    LastLocation,
)
from services.safecircle.templates import (
    BASE_CHECKLIST,
    FIRST_CHECKLIST_ITEM,
    RECOMMENDED_ACTIONS,
    SCRIPT_TITLES,
    SUGGESTED_FOLLOWUPS,
    get_template,
    script_variant,
)
from services.safecircle.types import ContactBucket, ContactMethod, RiskLevel

logger = logging.getLogger(__name__)

SECURITY_CONTACT_TYPES = {"campus", "security"}


def contact_bucket(contact_type: Optional[str]) -> ContactBucket:
    """Map a free-form contact type onto a template bucket (friend by default)."""
    contact = (contact_type or "").strip().lower() or ContactBucket.FRIEND.value
    if contact in SECURITY_CONTACT_TYPES:
        return ContactBucket.SECURITY
    if contact == ContactBucket.FAMILY.value:
        return ContactBucket.FAMILY
    return ContactBucket.FRIEND


def _format_coordinate(value: float) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else repr(number)


def make_maps_link(lat: float, lng: float) -> str:
    return (
        f"{MAPS_BASE_URL}?q="
        f"{quote(_format_coordinate(lat), safe='')},{quote(_format_coordinate(lng), safe='')}"
    )


def build_emergency_script(
    risk_level: Optional[str],
    contact_type: Optional[str],
    location_text: Optional[str] = None,
    extra_context: Optional[str] = None,
) -> EmergencyScript:
    """
    Build a ready-to-send message plus checklist for one contact.

    Args:
        risk_level: HIGH / MEDIUM / LOW in any case; unknown values read as MEDIUM
        contact_type: campus / security / family / anything else (friend)
        location_text: Optional place, rendered as " near <text>"
        extra_context: Optional detail, rendered as " (<text>)"

    Returns:
        EmergencyScript with title, text, checklist and suggested follow-ups
    """
    level = RiskLevel.normalize(risk_level, default=RiskLevel.MEDIUM)
    bucket = contact_bucket(contact_type)

    where = (location_text or "").strip()
    context = (extra_context or "").strip()

    template = get_template("script", bucket.value, script_variant(bucket, level))
    text = template.format(
        where=f" near {where}" if where else "",
        context=f" ({context})" if context else "",
    )

    return EmergencyScript(
        title=SCRIPT_TITLES[bucket],
        text=text,
        checklist=[FIRST_CHECKLIST_ITEM[bucket], *BASE_CHECKLIST],
        suggested_followups=list(SUGGESTED_FOLLOWUPS[bucket]),
    )


def _render_guardian_message(
    guardian: Guardian,
    level: RiskLevel,
    location_line: str,
    note: str,
) -> str:
    variant = "high" if level == RiskLevel.HIGH else "default"
    note_line = f"Note: {note}" if note else ""

    if guardian.method == ContactMethod.SMS:
        text = get_template("guardian", "sms", variant).format(
            location_line=location_line,
            note_suffix=f" {note_line}" if note_line else "",
        )
    else:
        text = get_template("guardian", "email", variant).format(
            name=guardian.name,
            location_line=location_line,
            note_line=note_line,
        )
    return text.strip()


def build_emergency_messages(
    risk_level: Optional[str],
    note: Optional[str],
    guardians: List[Guardian],
    location: LastLocation,
) -> EmergencyPackage:
    """
    Build one message per guardian plus a shared map link.

    The caller guarantees at least one guardian and a location with finite
    coordinates.
    """
    if risk_level is None:
        level = RiskLevel.HIGH
    else:
        level = RiskLevel.normalize(risk_level, default=RiskLevel.LOW)
    share_link = make_maps_link(location.lat, location.lng)
    location_line = f"My live location: {share_link}"
    note_text = (note or "").strip()

    messages = [
        GuardianMessage(
            guardian_id=g.id,
            method=g.method,
            to=g.value,
            text=_render_guardian_message(g, level, location_line, note_text),
            share_link=share_link,
        )
        for g in guardians
    ]

    return EmergencyPackage(
        share_link=share_link,
        messages=messages,
        recommended_actions=list(RECOMMENDED_ACTIONS[level]),
    )


def _has_coordinates(location: LastLocation) -> bool:
    return all(
        v is not None and math.isfinite(v) for v in (location.lat, location.lng)
    )


class EmergencyManager:
    """Assembles emergency packages from the current guardian and location state."""

    def __init__(self, registry: GuardianRegistry, tracker: LocationTracker) -> None:
        self._registry = registry
        self._tracker = tracker

    def prepare_package(self, risk_level: str, note: Optional[str] = None) -> EmergencyPackage:
        """
        Raises:
            EmergencyPreconditionError: no_guardians is checked before no_location
        """
        guardians = self._registry.list()
        if not guardians:
            raise EmergencyPreconditionError(EmergencyPreconditionError.NO_GUARDIANS)

        location = self._tracker.get()
        if not _has_coordinates(location):
            raise EmergencyPreconditionError(EmergencyPreconditionError.NO_LOCATION)

        package = build_emergency_messages(risk_level, note, guardians, location)
        logger.info(
            "Prepared emergency package for %d guardian(s) at level %s",
            len(package.messages),
            str(risk_level).upper(),
        )
        return package
