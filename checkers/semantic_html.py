"""
Semantic HTML checker.

Rewards HTML5 landmark elements, penalizes "div soup", and gives partial
credit for ARIA landmark roles standing in for missing elements.
"""

from checkers.base import CheckOutcome, clamp_score, failure, parse_html, partial, success

SEMANTIC_ELEMENTS = [
    ("header", 15),
    ("nav", 15),
    ("main", 20),
    ("article", 15),
    ("section", 10),
    ("aside", 10),
    ("footer", 15),
]

# ARIA role that may stand in for a missing element
ARIA_FALLBACKS = {
    "header": "banner",
    "nav": "navigation",
    "main": "main",
    "footer": "contentinfo",
}
ARIA_FALLBACK_POINTS = 10


def check_semantic_html(html: str) -> CheckOutcome:
    """
    Score semantic structure.

    Div ratio = divs / (sections + articles), or the raw div count when
    neither is present. Ratio > 10 costs 20 points, > 5 costs 10.
    """
    soup = parse_html(html)

    found = []
    missing = []
    weighted_score = 0

    for tag, weight in SEMANTIC_ELEMENTS:
        if soup.find(tag) is not None:
            found.append(tag)
            weighted_score += weight
        else:
            missing.append(tag)

    div_count = len(soup.find_all('div'))
    section_count = len(soup.find_all('section'))
    article_count = len(soup.find_all('article'))

    structural = section_count + article_count
    div_ratio = div_count / structural if structural else float(div_count)

    if div_ratio > 10:
        weighted_score -= 20
    elif div_ratio > 5:
        weighted_score -= 10

    aria_landmarks = {}
    for tag, role in ARIA_FALLBACKS.items():
        has_role = soup.find(attrs={'role': role}) is not None
        aria_landmarks[role] = has_role
        if has_role and tag in missing:
            weighted_score += ARIA_FALLBACK_POINTS

    final_score = clamp_score(weighted_score)

    data = {
        "elementsFound": found,
        "elementsMissing": missing,
        "divCount": div_count,
        "sectionCount": section_count,
        "articleCount": article_count,
        "divRatio": round(div_ratio, 1),
        "ariaLandmarks": aria_landmarks,
    }

    if final_score >= 70:
        return success(
            f"{len(found)}/{len(SEMANTIC_ELEMENTS)} semantic elements found",
            final_score,
            data,
        )

    if final_score >= 40:
        return partial(
            f"Limited semantic HTML: {len(found)}/{len(SEMANTIC_ELEMENTS)} elements",
            final_score,
            data,
        )

    return failure("Semantic HTML5 elements not found (div soup detected)", data)
