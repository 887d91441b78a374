# pytest services/safecircle/tests/test_emergency_templates.py -q

from datetime import datetime, timezone

import pytest

from services.safecircle.errors import EmergencyPreconditionError
from services.safecircle.manager import (
    build_emergency_messages,
    build_emergency_script,
    contact_bucket,
    make_maps_link,
)
from services.safecircle.models import Guardian, LastLocation
from services.safecircle.templates import BASE_CHECKLIST, RECOMMENDED_ACTIONS, get_template
from services.safecircle.types import ContactBucket, ContactMethod, RiskLevel

pytestmark = pytest.mark.unit

LINK = "https://maps.google.com/?q=53.3438,-6.2546"


def _guardian(method="sms", value="+15550100000", name="Mom"):
    return Guardian(
        id="g_1_abcdef",
        name=name,
        method=ContactMethod(method),
        value=value,
        relationship="family",
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


LOCATION = LastLocation(lat=53.3438, lng=-6.2546, accuracy=10.0, ts=1)


@pytest.mark.parametrize(
    "contact_type,bucket",
    [
        ("campus", ContactBucket.SECURITY),
        ("Security", ContactBucket.SECURITY),
        ("family", ContactBucket.FAMILY),
        ("friend", ContactBucket.FRIEND),
        ("coworker", ContactBucket.FRIEND),
        (None, ContactBucket.FRIEND),
    ],
)
def test_contact_bucket(contact_type, bucket):
    assert contact_bucket(contact_type) == bucket


def test_maps_link():
    assert make_maps_link(53.3438, -6.2546) == LINK
    assert make_maps_link(53.0, 6.0) == "https://maps.google.com/?q=53,6"


def test_friend_high_script_with_location_and_context():
    script = build_emergency_script("high", "friend", location_text=" Main St ", extra_context="dark street")

    assert script.title == "Quick message"
    assert script.text == (
        "Hey, I feel unsafe near Main St (dark street). Can you stay on call with me "
        "for 10 minutes? If I stop replying, please check on me."
    )
    assert script.checklist == ["Send to a trusted friend", *BASE_CHECKLIST]
    assert len(script.suggested_followups) == 3


def test_friend_scripts_split_by_level():
    low = build_emergency_script("LOW", "friend")
    medium = build_emergency_script("MEDIUM", "friend")

    assert low.text == "Hey! Quick check-in: I'm walking. I'll message when I arrive."
    assert medium.text.startswith("Hey, I'm a bit uncomfortable.")


def test_security_non_high_uses_default_variant():
    script = build_emergency_script("LOW", "campus", location_text="Library")

    assert script.title == "Security message"
    assert script.text == (
        "Hi, I'm requesting safety support near Library. "
        "Can you advise the safest route / next steps?"
    )
    assert script.checklist[0] == "Share location with security"


def test_family_high_script():
    script = build_emergency_script("HIGH", "family")

    assert script.title == "Family message"
    assert "If I don't reply in 5 minutes" in script.text


def test_unknown_level_reads_as_medium():
    assert build_emergency_script("SEVERE", "friend") == build_emergency_script("MEDIUM", "friend")


def test_every_script_has_checklist_and_followups():
    for contact in ("campus", "family", "friend"):
        for level in ("HIGH", "MEDIUM", "LOW"):
            script = build_emergency_script(level, contact)
            assert script.text
            assert len(script.checklist) == 4
            assert len(script.suggested_followups) == 3


def test_sms_high_message_with_note():
    package = build_emergency_messages("HIGH", "  near the library ", [_guardian()], LOCATION)

    assert package.share_link == LINK
    assert package.recommended_actions == RECOMMENDED_ACTIONS[RiskLevel.HIGH]
    message = package.messages[0]
    assert message.guardian_id == "g_1_abcdef"
    assert message.to == "+15550100000"
    assert message.share_link == LINK
    assert message.text == (
        f"I feel unsafe. Please call me now. My live location: {LINK} Note: near the library"
    )


def test_email_default_message_without_note():
    guardian = _guardian(method="email", value="sam@example.com", name="Sam")
    package = build_emergency_messages("MEDIUM", None, [guardian], LOCATION)

    assert package.messages[0].text == (
        f"Hi Sam,\n\nQuick check-in.\nMy live location: {LINK}\n\n\nThank you."
    )
    assert package.recommended_actions == RECOMMENDED_ACTIONS[RiskLevel.MEDIUM]


def test_email_high_message_uses_template():
    guardian = _guardian(method="email", value="sam@example.com", name="Sam")
    package = build_emergency_messages("HIGH", "red jacket", [guardian], LOCATION)

    text = package.messages[0].text
    assert text.startswith("Hi Sam,\n\nI feel unsafe right now.")
    assert "Note: red jacket" in text
    assert get_template("guardian", "email", "high").strip().endswith("please check on me.")


def test_unknown_level_gets_low_actions():
    package = build_emergency_messages("whatever", None, [_guardian()], LOCATION)

    assert package.recommended_actions == RECOMMENDED_ACTIONS[RiskLevel.LOW]
    assert package.messages[0].text.startswith("Quick safety check-in.")


def test_absent_level_reads_as_high():
    package = build_emergency_messages(None, None, [_guardian()], LOCATION)

    assert package.recommended_actions == RECOMMENDED_ACTIONS[RiskLevel.HIGH]
    assert package.messages[0].text.startswith("I feel unsafe. Please call me now.")


def test_one_message_per_guardian_in_order():
    guardians = [_guardian(), _guardian(method="email", value="sam@example.com", name="Sam")]
    guardians[1] = guardians[1].model_copy(update={"id": "g_2_abcdef"})

    package = build_emergency_messages("LOW", None, guardians, LOCATION)

    assert [m.guardian_id for m in package.messages] == ["g_1_abcdef", "g_2_abcdef"]
    assert {m.share_link for m in package.messages} == {package.share_link}


def test_prepare_requires_guardians_before_location(state):
    with pytest.raises(EmergencyPreconditionError) as exc_info:
        state.emergency.prepare_package("HIGH")
    assert exc_info.value.code == "no_guardians"


def test_prepare_requires_location(state):
    state.guardians.add(name="Mom", method="sms", value="+15550100000")

    with pytest.raises(EmergencyPreconditionError) as exc_info:
        state.emergency.prepare_package("HIGH")
    assert exc_info.value.code == "no_location"


def test_prepare_builds_package_from_state(state):
    state.guardians.add(name="Mom", method="sms", value="+15550100000")
    state.location.set(lat=53.3438, lng=-6.2546)

    package = state.emergency.prepare_package("LOW", "home soon")

    assert package.share_link == LINK
    assert package.messages[0].text == f"Quick safety check-in. My live location: {LINK} Note: home soon"
