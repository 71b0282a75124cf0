"""
Risk scoring and recommendations for the health intake questionnaire.

Every function here is pure: it reads attributes off whatever object it is
given (a ``HealthQuestionnaire`` row or any object exposing the same field
names) and never raises on out-of-domain data. Absent flags count as "no"
and absent measurements yield an "unknown" band.
"""

YES = "yes"
NO = "no"

MAX_RISK_SCORE = 10

# Points added for each medical flag answered "yes".
RISK_WEIGHTS = (
    ("heart_problems", 3),
    ("chest_pain_during_exercise", 3),
    ("chest_pain_last_month", 2),
    ("dizziness_or_fainting", 2),
    ("blood_pressure_or_heart_medication", 2),
    ("type1_diabetes", 1),
    ("joint_problems", 1),
    ("other_exercise_restrictions", 1),
)

MEDICAL_FLAGS = tuple(name for name, _ in RISK_WEIGHTS) + ("has_allergies",)

REQUIRED_FIELDS = (
    "blood_pressure_systolic",
    "blood_pressure_diastolic",
    "resting_heart_rate",
    "body_weight",
) + MEDICAL_FLAGS

RISK_LOW = "low"
RISK_MODERATE = "moderate"
RISK_HIGH = "high"
RISK_LEVELS = (RISK_LOW, RISK_MODERATE, RISK_HIGH)

HIGH_RISK_RECOMMENDATIONS = (
    "Medical consultation recommended before starting an exercise program",
    "Avoid high-intensity exercise",
    "Exercise under medical supervision",
)
MODERATE_RISK_RECOMMENDATIONS = (
    "Medical consultation suggested",
    "Start with low-intensity exercise",
    "Monitor vital signs regularly",
)
LOW_RISK_RECOMMENDATIONS = (
    "Standard exercise program recommended",
    "Increase intensity gradually",
)
JOINT_RECOMMENDATIONS = (
    "Avoid high-impact exercise",
    "Prefer pool-based or low-impact exercise",
)
ALLERGY_RECOMMENDATIONS = (
    "Inform the medical team about your allergies",
    "Keep an emergency plan for allergic reactions",
)


def is_yes(value):
    return value == YES


def calculate_risk_score(questionnaire):
    """Sum the weights of every flag answered "yes", capped at 10."""
    score = 0
    for flag, points in RISK_WEIGHTS:
        if is_yes(getattr(questionnaire, flag, None)):
            score += points
    return min(score, MAX_RISK_SCORE)


def risk_level_for(score):
    if score >= 6:
        return RISK_HIGH
    if score >= 3:
        return RISK_MODERATE
    return RISK_LOW


def _is_blank(value):
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def is_questionnaire_complete(questionnaire):
    """
    True when every required measurement and flag is present and, if the
    user reports allergies, the allergy details are filled in.
    """
    for field in REQUIRED_FIELDS:
        if _is_blank(getattr(questionnaire, field, None)):
            return False

    if is_yes(getattr(questionnaire, "has_allergies", None)):
        if _is_blank(getattr(questionnaire, "allergies_details", None)):
            return False

    return True


def blood_pressure_status(systolic, diastolic):
    if systolic is None or diastolic is None:
        return "unknown"
    if systolic < 120 and diastolic < 80:
        return "normal"
    if systolic < 130 and diastolic < 80:
        return "elevated"
    return "high"


def heart_rate_status(resting_heart_rate):
    if resting_heart_rate is None:
        return "unknown"
    if resting_heart_rate < 60:
        return "bradycardia"
    if resting_heart_rate <= 100:
        return "normal"
    return "tachycardia"


def build_recommendations(risk_level, joint_problems=None, has_allergies=None):
    if risk_level == RISK_HIGH:
        recommendations = list(HIGH_RISK_RECOMMENDATIONS)
    elif risk_level == RISK_MODERATE:
        recommendations = list(MODERATE_RISK_RECOMMENDATIONS)
    else:
        recommendations = list(LOW_RISK_RECOMMENDATIONS)

    if is_yes(joint_problems):
        recommendations.extend(JOINT_RECOMMENDATIONS)
    if is_yes(has_allergies):
        recommendations.extend(ALLERGY_RECOMMENDATIONS)

    return recommendations
