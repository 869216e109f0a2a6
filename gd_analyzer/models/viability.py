"""Viability scoring for GD Analyzer results.

Turns NPV, IRR and payback into a 0-100 score and a qualitative label used
by the CLI and the executive report.
"""

from dataclasses import dataclass

from gd_analyzer.models.project import CalculationResults


@dataclass(frozen=True)
class ViabilityAssessment:
    """Qualitative reading of a projection.

    Attributes:
        score: 0-100 points.
        label: "Excellent", "Good", "Fair" or "Risky".
        is_viable: NPV and IRR both positive.
    """

    score: int
    label: str
    is_viable: bool


def _irr_points(irr: float) -> int:
    if irr > 15:
        return 40
    if irr > 10:
        return 30
    if irr > 5:
        return 20
    return 0


def _payback_points(payback_year: int) -> int:
    if payback_year < 5:
        return 30
    if payback_year < 8:
        return 20
    if payback_year < 12:
        return 10
    return 0


def _label(score: int) -> str:
    if score >= 70:
        return "Excellent"
    if score >= 50:
        return "Good"
    if score >= 30:
        return "Fair"
    return "Risky"


def assess_viability(results: CalculationResults) -> ViabilityAssessment:
    """Score a projection.

    Points:
        NPV > 0: 30
        IRR > 15% / 10% / 5%: 40 / 30 / 20
        Payback < 5 / 8 / 12 years: 30 / 20 / 10

    The payback year is scored as reported, so a payback that defaults to
    the project duration is scored by that duration.

    Args:
        results: Output of the calculation engine.

    Returns:
        ViabilityAssessment with the score clamped to 0-100.
    """
    score = (30 if results.npv > 0 else 0)
    score += _irr_points(results.irr)
    score += _payback_points(results.payback_year)
    score = min(100, max(0, score))
    return ViabilityAssessment(
        score=score,
        label=_label(score),
        is_viable=results.npv > 0 and results.irr > 0,
    )
