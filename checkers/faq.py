"""
FAQ / Q&A block checker.
"""

import re

from checkers.base import CheckOutcome, failure, parse_html, partial, success

FAQ_SCHEMA = "FAQPage Schema"

# (name, pattern over raw HTML, weight)
FAQ_PATTERNS = [
    (FAQ_SCHEMA, re.compile(r'"@type":\s*"FAQPage"', re.IGNORECASE), 40),
    ("details/summary", re.compile(r"<details\s*>", re.IGNORECASE), 20),
    ("FAQ class", re.compile(r"""class=["'][^"']*faq""", re.IGNORECASE), 15),
    ("Accordion class", re.compile(r"""class=["'][^"']*accordion""", re.IGNORECASE), 15),
    ("Question class", re.compile(r"""class=["'][^"']*question""", re.IGNORECASE), 10),
]

QUESTION_HEADING = "Question heading"
QUESTION_HEADING_WEIGHT = 10
# English and Thai ("question", "frequently asked") headline keywords
_QUESTION_WORDS = re.compile(r"คำถาม|FAQ|ถามบ่อย|Q&A|Questions", re.IGNORECASE)


def has_question_heading(html: str) -> bool:
    soup = parse_html(html)
    return any(
        _QUESTION_WORDS.search(tag.get_text())
        for tag in soup.find_all(['h2', 'h3', 'h4'])
    )


def check_faq_blocks(html: str) -> CheckOutcome:
    """Score FAQ markup; capped at 100."""
    patterns_found = []
    weighted_score = 0

    for name, pattern, weight in FAQ_PATTERNS:
        if pattern.search(html):
            patterns_found.append(name)
            weighted_score += weight

    if has_question_heading(html):
        patterns_found.append(QUESTION_HEADING)
        weighted_score += QUESTION_HEADING_WEIGHT

    has_faq_schema = FAQ_SCHEMA in patterns_found
    final_score = min(100, weighted_score)

    data = {
        "hasFAQSchema": has_faq_schema,
        "patternsFound": patterns_found,
        "patternCount": len(patterns_found),
    }

    if final_score >= 80:
        details = "FAQPage Schema found" if has_faq_schema else f"FAQ patterns found ({len(patterns_found)})"
        return success(details, final_score, data)

    if final_score >= 40:
        return partial(f"FAQ patterns found ({len(patterns_found)})", final_score, data)

    return failure("No FAQ/QA blocks found", data)
