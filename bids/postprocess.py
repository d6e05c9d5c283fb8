# bids/postprocess.py
"""Cleanup and heuristic scoring applied to raw model output."""
import re

QUOTE_CHARS = re.compile("[\"'`“”‘’]")

BASE_CONFIDENCE = 0.70
MAX_CONFIDENCE = 0.95
SKILL_BONUS = 0.03
MAX_SKILL_BONUS = 0.10
MAX_SUGGESTIONS = 3


def strip_quotes(text):
    """Removes straight/curly quotes and backticks, then trims. Bids and replies only."""
    return QUOTE_CHARS.sub("", text or "").strip()


def _matched_skills(answer_lower, skills):
    return [s for s in skills if s.lower() in answer_lower]


def score_confidence(answer, profile):
    """
    Heuristic quality score for a screening answer, in [0.70, 0.95].
    Longer answers and answers naming the freelancer's skills score higher.
    """
    confidence = BASE_CONFIDENCE
    if len(answer) > 200:
        confidence += 0.10
    if len(answer) > 500:
        confidence += 0.05

    matched = _matched_skills(answer.lower(), profile.skills)
    confidence += min(len(matched) * SKILL_BONUS, MAX_SKILL_BONUS)

    return round(min(confidence, MAX_CONFIDENCE), 2)


def suggest_improvements(answer, profile):
    suggestions = []
    answer_lower = answer.lower()

    unmentioned = [s for s in profile.skills if s.lower() not in answer_lower]
    if 0 < len(unmentioned) <= 3:
        suggestions.append(f"Mention {', '.join(unmentioned[:2])}")

    if len(answer) < 150:
        suggestions.append("Add more detail")
    if len(answer) > 800:
        suggestions.append("Consider shortening")

    if "experience" not in answer_lower and profile.experience:
        suggestions.append("Reference your experience")

    if "portfolio" not in answer_lower and profile.portfolio:
        suggestions.append("Mention portfolio examples")

    return suggestions[:MAX_SUGGESTIONS]
