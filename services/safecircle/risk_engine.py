"""
Offline risk engine.

Additive point scoring over a walking scenario. Weights are fixed; the sum is
clamped to [0, 100] and classified as LOW / MEDIUM / HIGH. Guidance text is a
verbatim lookup per level, never generated.
"""

from typing import Dict, List

from services.safecircle.models import PresetScenario, RiskAssessment, ScenarioInput
from services.safecircle.types import NeighborhoodType, RiskLevel, RouteLighting, TimeOfDay

NIGHT_POINTS = 25
ALONE_POINTS = 25
NEIGHBORHOOD_POINTS: Dict[str, int] = {
    NeighborhoodType.INDUSTRIAL.value: 20,
    NeighborhoodType.DOWNTOWN.value: 10,
}
LIGHTING_POINTS: Dict[str, int] = {
    RouteLighting.POOR.value: 20,
    RouteLighting.MIXED.value: 10,
}

MIN_SCORE = 0
MAX_SCORE = 100
HIGH_THRESHOLD = 70
MEDIUM_THRESHOLD = 40

GUARDIAN_MESSAGES: Dict[RiskLevel, str] = {
    RiskLevel.HIGH: "High risk detected. Stay alert and consider contacting someone you trust.",
    RiskLevel.MEDIUM: "Moderate risk detected. Stay aware of your surroundings.",
    RiskLevel.LOW: "Low risk detected. Exercise normal caution.",
}

SAFER_ACTIONS: Dict[RiskLevel, str] = {
    RiskLevel.HIGH: "Avoid the route if possible, choose a well-lit path, or ask someone to accompany you.",
    RiskLevel.MEDIUM: "Prefer well-lit routes and stay in populated areas.",
    RiskLevel.LOW: "Proceed but remain aware of surroundings.",
}

PRESET_SCENARIOS: List[PresetScenario] = [
    PresetScenario(
        scenario_id="s1",
        display_name="Morning commute",
        time_of_day="day",
        user_alone=False,
        neighborhood_type="downtown",
        route_lighting="good",
    ),
    PresetScenario(
        scenario_id="s2",
        display_name="Late night walk",
        time_of_day="night",
        user_alone=True,
        neighborhood_type="residential",
        route_lighting="poor",
    ),
    PresetScenario(
        scenario_id="s3",
        display_name="Evening shift exit",
        time_of_day="night",
        user_alone=False,
        neighborhood_type="industrial",
        route_lighting="mixed",
    ),
    PresetScenario(
        scenario_id="s4",
        display_name="Afternoon stroll",
        time_of_day="day",
        user_alone=True,
        neighborhood_type="residential",
        route_lighting="good",
    ),
    PresetScenario(
        scenario_id="s5",
        display_name="Late evening errand",
        time_of_day="night",
        user_alone=True,
        neighborhood_type="downtown",
        route_lighting="mixed",
    ),
]


def score_scenario(scenario: ScenarioInput) -> int:
    """Sum the fixed weights for a scenario, clamped to [0, 100]."""
    score = 0
    if scenario.time_of_day == TimeOfDay.NIGHT.value:
        score += NIGHT_POINTS
    if scenario.user_alone is True:
        score += ALONE_POINTS
    score += NEIGHBORHOOD_POINTS.get(scenario.neighborhood_type or "", 0)
    score += LIGHTING_POINTS.get(scenario.route_lighting or "", 0)
    return max(MIN_SCORE, min(MAX_SCORE, score))


def classify(score: int) -> RiskLevel:
    if score >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _render(value) -> str:
    # Mirror the wire format so the reasoning reads the same as the request
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_reasoning(scenario: ScenarioInput) -> str:
    return (
        "Offline score computed from inputs: "
        f"timeOfDay={_render(scenario.time_of_day)}, "
        f"userAlone={_render(scenario.user_alone)}, "
        f"neighborhoodType={_render(scenario.neighborhood_type)}, "
        f"routeLighting={_render(scenario.route_lighting)}"
    )


def assess_risk(scenario: ScenarioInput) -> RiskAssessment:
    """
    Score and classify a scenario.

    Args:
        scenario: Scenario whose required fields the caller has checked

    Returns:
        RiskAssessment with score, level, reasoning and guidance text
    """
    score = score_scenario(scenario)
    level = classify(score)
    return RiskAssessment(
        risk_score=score,
        risk_level=level,
        reasoning=build_reasoning(scenario),
        guardian_message=GUARDIAN_MESSAGES[level],
        safer_action=SAFER_ACTIONS[level],
    )
