"""
Final scoring and response generation.

Combines the ten check outcomes into the presentation-ready response.
All logic is deterministic with documented rules.
"""

from typing import Dict, List

from checkers.base import CheckOutcome
from models.enums import CHECK_WEIGHTS, CheckName, CheckStatus, RECOMMENDATION_TEMPLATES
from models.schemas import (
    CheckResponse,
    CheckResultSchema,
    CheckSummary,
    RecommendationSchema,
)
from utils.rounding import classify_status, compute_grade, compute_weighted_score

Outcomes = Dict[CheckName, CheckOutcome]


def compute_overall_score(outcomes: Outcomes) -> int:
    """
    Compute the weighted overall score.

    Formula:
        OverallScore = round_half_up(Σ score_i × weight_i / 100)

    Weights sum to 100, so the result is an integer 0-100. A check with
    no outcome contributes 0.

    Args:
        outcomes: Outcome per check

    Returns:
        Overall score as integer (0-100)
    """
    scores = {name.value: outcome.score for name, outcome in outcomes.items()}
    weights = [(name.value, weight) for name, weight in CHECK_WEIGHTS.items()]
    return compute_weighted_score(scores, weights)


def compute_summary(outcomes: Outcomes) -> CheckSummary:
    """Count checks per status (passed >= 70, warning 50-69, failed < 50)."""
    counts = {status: 0 for status in CheckStatus}
    for outcome in outcomes.values():
        counts[classify_status(outcome.score)] += 1

    return CheckSummary(
        passed=counts[CheckStatus.PASSED],
        warning=counts[CheckStatus.WARNING],
        failed=counts[CheckStatus.FAILED],
        total=len(outcomes),
    )


def _recommend(key: str) -> RecommendationSchema:
    return RecommendationSchema(**RECOMMENDATION_TEMPLATES[key])


def generate_recommendations(outcomes: Outcomes) -> List[RecommendationSchema]:
    """
    Map weak checks to recommendation templates.

    Rules (deterministic, in this order):
    - schema missing or < 80 → critical
    - llms.txt missing or < 60 → high
    - robots.txt missing → critical; else GPTBot warning → high
    - sitemap missing → high
    - Open Graph missing or < 80 → medium
    - semantic HTML missing → medium
    - headings < 70 → medium
    - FAQ missing → low
    - page speed < 60 → high
    - author signals missing → low

    Args:
        outcomes: Outcome per check (all ten expected)

    Returns:
        List of recommendations
    """
    def missing_or_below(name: CheckName, minimum: int) -> bool:
        outcome = outcomes[name]
        return not outcome.found or outcome.score < minimum

    recommendations = []

    if missing_or_below(CheckName.SCHEMA, 80):
        recommendations.append(_recommend("schema_missing"))

    if missing_or_below(CheckName.LLMS_TXT, 60):
        key = "llms_weak" if outcomes[CheckName.LLMS_TXT].found else "llms_missing"
        recommendations.append(_recommend(key))

    robots = outcomes[CheckName.ROBOTS_TXT]
    if not robots.found:
        recommendations.append(_recommend("robots_missing"))
    elif any("GPTBot" in warning for warning in robots.warnings or []):
        recommendations.append(_recommend("robots_blocks_ai"))

    if not outcomes[CheckName.SITEMAP].found:
        recommendations.append(_recommend("sitemap_missing"))

    if missing_or_below(CheckName.OPEN_GRAPH, 80):
        recommendations.append(_recommend("open_graph_incomplete"))

    if not outcomes[CheckName.SEMANTIC_HTML].found:
        recommendations.append(_recommend("semantic_missing"))

    if outcomes[CheckName.HEADING_HIERARCHY].score < 70:
        recommendations.append(_recommend("headings_issues"))

    if not outcomes[CheckName.FAQ_BLOCKS].found:
        recommendations.append(_recommend("faq_missing"))

    if outcomes[CheckName.PAGE_SPEED].score < 60:
        recommendations.append(_recommend("page_speed_slow"))

    if not outcomes[CheckName.AUTHOR_AUTHORITY].found:
        recommendations.append(_recommend("author_missing"))

    return recommendations


def to_result_schema(outcome: CheckOutcome) -> CheckResultSchema:
    return CheckResultSchema(
        found=outcome.found,
        score=outcome.score,
        details=outcome.details,
        data=outcome.data,
        warnings=outcome.warnings,
    )


def generate_check_response(url: str, outcomes: Outcomes) -> CheckResponse:
    """
    Generate the complete presentation-ready response.

    Args:
        url: Normalized URL that was analyzed
        outcomes: Outcome per check, all ten present

    Returns:
        CheckResponse ready for JSON serialization
    """
    overall_score = compute_overall_score(outcomes)

    # Response keeps the fixed check order regardless of completion order
    checks = {
        name.value: to_result_schema(outcomes[name])
        for name in CheckName
    }

    return CheckResponse(
        url=url,
        overall_score=overall_score,
        grade=compute_grade(overall_score),
        checks=checks,
        recommendations=generate_recommendations(outcomes),
        summary=compute_summary(outcomes),
    )
