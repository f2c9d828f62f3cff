"""Lifestyle tips shown after an assessment, grouped by category."""

from dataclasses import dataclass

from heartpi.domain.models import RiskTier


@dataclass(frozen=True)
class Tip:
    category: str
    title: str
    description: str = ""
    urgent: bool = False


_TIPS: dict[RiskTier, tuple[Tip, ...]] = {
    RiskTier.HIGH: (
        Tip(
            "Urgent",
            "High Risk Detected: Please consult your doctor immediately.",
            "Your heart may be under strain. Seeking medical advice is a crucial step.",
            urgent=True,
        ),
        Tip(
            "Activity",
            "Engage in at least 30 minutes of physical activity daily.",
            "This boosts circulation and strengthens your heart muscle.",
        ),
        Tip(
            "Nutrition",
            "Eat more vegetables, lean meats, and low-sodium meals.",
            "A nutrient-rich diet helps reduce cholesterol and blood pressure.",
        ),
        Tip(
            "Nutrition",
            "Avoid tobacco and smoking completely.",
            "Smoking drastically increases the risk of heart attacks and strokes.",
        ),
        Tip(
            "Monitoring",
            "Track blood pressure, weight, and cholesterol regularly.",
            "Monitoring helps catch issues early and stay on top of your health.",
        ),
        Tip(
            "Sleep & Stress",
            "Get at least 7 hours of quality sleep.",
            "Sleep helps your body recover and maintain healthy heart rhythms.",
        ),
        Tip(
            "Sleep & Stress",
            "Manage stress through deep breathing, prayer, or journaling.",
            "Stress increases heart rate and blood pressure, so managing it is key.",
        ),
    ),
    RiskTier.MODERATE: (
        Tip(
            "Activity",
            "150 mins/week of moderate activity or walking.",
            "Keeping your body moving prevents many heart-related conditions.",
        ),
        Tip(
            "Nutrition",
            "Cut back on sugar, salt, and saturated fats.",
            "Small reductions in salt or fat can lower blood pressure significantly.",
        ),
        Tip(
            "Sleep & Stress",
            "Stick to a regular sleep schedule.",
            "Consistency in sleep promotes heart recovery and reduces stress.",
        ),
        Tip(
            "Sleep & Stress",
            "Incorporate light mindfulness and relaxation into your day.",
            "Simple habits like breathing or meditation can reduce your risk.",
        ),
        Tip(
            "Monitoring",
            "Go for routine checkups on blood pressure and cholesterol.",
            "You can't manage what you don't measure. Stay informed!",
        ),
    ),
    RiskTier.LOW: (
        Tip(
            "Nutrition",
            "You're doing well! Keep eating balanced meals daily.",
            "A variety of whole foods keeps your heart nourished and happy.",
        ),
        Tip(
            "Nutrition",
            "Stick to fruits, vegetables, and whole grains.",
            "These foods are high in fiber and keep your arteries clean.",
        ),
        Tip(
            "Activity",
            "Stay active 30+ mins daily with light to moderate workouts.",
            "Regular movement helps reduce the risk of future complications.",
        ),
        Tip(
            "Sleep & Stress",
            "Keep your sleep consistent and drink enough water.",
            "Hydration and sleep support overall wellness and mental clarity.",
        ),
        Tip(
            "Monitoring",
            "Get occasional health screenings even if you feel well.",
            "Preventive care helps catch issues before they become serious.",
        ),
    ),
}


def tips_for(risk_tier: RiskTier) -> list[Tip]:
    return list(_TIPS[risk_tier])
