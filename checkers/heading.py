"""
Heading hierarchy checker.
"""

import re
from typing import List, Tuple

from checkers.base import CheckOutcome, failure, parse_html, partial, success
from utils.sanitize import sanitize_content

_HEADING_TAG = re.compile(r"^h[1-6]$")

MISSING_H1_PENALTY = 30
MULTIPLE_H1_PENALTY = 20
SKIP_PENALTY = 10
MISSING_H2_PENALTY = 15


def extract_headings(html: str) -> List[Tuple[int, str]]:
    """Headings with text, in document order, as (level, text)."""
    soup = parse_html(html)
    headings = []
    for tag in soup.find_all(_HEADING_TAG):
        text = tag.get_text(strip=True)
        if text:
            headings.append((int(tag.name[1]), text))
    return headings


def count_skips(levels: List[int]) -> int:
    """
    Count level skips, e.g. h1 followed by h3.

    The document starts at level 0, so a page opening with h2 counts one skip.
    """
    skips = 0
    previous = 0
    for level in levels:
        if level > previous + 1:
            skips += 1
        previous = level
    return skips


def check_heading_hierarchy(html: str) -> CheckOutcome:
    """
    Score the H1-H6 outline.

    Deductions: -30 no H1, -20 more than one H1, -10 per skip, -15 no H2.
    """
    headings = extract_headings(html)

    if not headings:
        return failure("No headings found (H1-H6)", {"headings": []})

    levels = [level for level, _ in headings]
    h1_count = levels.count(1)
    h2_count = levels.count(2)
    h3_count = levels.count(3)
    violations = count_skips(levels)

    warnings = []
    if h1_count == 0:
        warnings.append("Missing H1 tag (critical for SEO)")
    elif h1_count > 1:
        warnings.append(f"Multiple H1 tags found ({h1_count}), should have only 1")

    if violations:
        warnings.append(f"Heading hierarchy violations found ({violations} skips)")

    score = 100
    if h1_count == 0:
        score -= MISSING_H1_PENALTY
    if h1_count > 1:
        score -= MULTIPLE_H1_PENALTY
    score -= violations * SKIP_PENALTY
    if h2_count == 0:
        score -= MISSING_H2_PENALTY
    score = max(0, score)

    data = {
        "h1Count": h1_count,
        "h2Count": h2_count,
        "h3Count": h3_count,
        "totalHeadings": len(headings),
        "violations": violations,
        "headings": [
            {"level": level, "text": sanitize_content(text, 200)} for level, text in headings[:10]
        ],
    }

    if score >= 80:
        return success(
            f"Heading hierarchy correct ({len(headings)} headings)",
            score,
            data,
            warnings,
        )

    if score >= 50:
        return partial("Heading hierarchy needs improvement", score, data, warnings)

    # Keeps the computed score, unlike failure()
    return CheckOutcome(
        found=False,
        score=score,
        details="Heading hierarchy has significant issues",
        data=data,
        warnings=warnings or None,
    )
