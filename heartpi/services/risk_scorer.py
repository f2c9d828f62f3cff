"""
Survey risk scoring.

The score is the sum of seven independent contributions. Inputs are already
validated by SurveyAnswers, so every function here is total and pure.
"""

from heartpi.domain.models import DietType, FamilyCondition, Gender, RiskTier, SurveyAnswers

MODERATE_THRESHOLD = 10
HIGH_THRESHOLD = 18

FAMILY_HISTORY_WEIGHTS: dict[FamilyCondition, int] = {
    FamilyCondition.HEART_DISEASE: 2,
    FamilyCondition.DIABETES: 1,
    FamilyCondition.HIGH_CHOLESTEROL: 2,
    FamilyCondition.HIGH_BLOOD_PRESSURE: 2,
}

DIET_WEIGHTS: dict[DietType, int] = {
    DietType.HIGH_PROTEIN: 1,
    DietType.LOW_CARB: 1,
    DietType.VEGETARIAN: 1,
    DietType.WESTERN: 3,
    DietType.VEGAN: 2,
    DietType.BALANCED: 1,
}


def _age_points(age_group: int) -> int:
    if age_group <= 2:
        return 1
    if age_group <= 4:
        return 2
    return 3


def _gender_age_points(gender: Gender, age_group: int) -> int:
    if age_group > 3:
        return 3
    return 1 if gender is Gender.FEMALE else 2


def _sleep_points(bucket: int) -> int:
    # Too little and too much sleep score the same
    if bucket in (1, 5):
        return 3
    if bucket == 2:
        return 2
    return 1


def _exercise_points(bucket: int) -> int:
    if bucket == 1:
        return 3
    if bucket == 2:
        return 2
    return 1


def score_breakdown(answers: SurveyAnswers) -> dict[str, int]:
    """Named contribution of every survey question to the risk score."""
    return {
        "age": _age_points(answers.age_group),
        "gender_age": _gender_age_points(answers.gender_at_birth, answers.age_group),
        "sleep": _sleep_points(answers.sleep_hours_bucket),
        "exercise": _exercise_points(answers.exercise_frequency_bucket),
        "family_history": sum(FAMILY_HISTORY_WEIGHTS[c] for c in answers.family_history),
        "diet": DIET_WEIGHTS[answers.diet_type],
        "smoking": 3 if answers.is_smoker else 1,
    }


def score(answers: SurveyAnswers) -> int:
    """Integer risk score, between 6 and 25 for any valid survey."""
    return sum(score_breakdown(answers).values())


def tier(risk_score: int) -> RiskTier:
    """Map a score to its tier: Low below 10, Moderate below 18, High otherwise."""
    if risk_score >= HIGH_THRESHOLD:
        return RiskTier.HIGH
    if risk_score >= MODERATE_THRESHOLD:
        return RiskTier.MODERATE
    return RiskTier.LOW


def assess_risk(answers: SurveyAnswers) -> tuple[int, RiskTier]:
    risk_score = score(answers)
    return risk_score, tier(risk_score)
