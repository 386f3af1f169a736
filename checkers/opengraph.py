"""
Open Graph checker.

Scores the og:* meta tags that link previews and AI answer cards use.
"""

from typing import Dict, Optional

from bs4 import BeautifulSoup

from checkers.base import CheckOutcome, failure, parse_html, partial, success
from utils.sanitize import sanitize_content

# (property, weight, required)
OG_PROPERTIES = [
    ("og:title", 25, True),
    ("og:description", 25, True),
    ("og:image", 25, True),
    ("og:type", 15, True),
    ("og:url", 10, False),
]

RELATIVE_IMAGE_PENALTY = 5
MAX_TITLE_LENGTH = 60
MAX_DESCRIPTION_LENGTH = 200


def find_og_tag(soup: BeautifulSoup, prop: str):
    """Find an og:* meta tag declared with property= or, as some sites do, name=."""
    return soup.find('meta', attrs={'property': prop}) or soup.find('meta', attrs={'name': prop})


def check_open_graph(html: str) -> CheckOutcome:
    """
    Score Open Graph coverage.

    Args:
        html: Page HTML

    Returns:
        CheckOutcome with sanitized extracted values under data["extracted"]
    """
    soup = parse_html(html)

    found = []
    missing = []
    warnings = []
    raw_values: Dict[str, str] = {}
    weighted_score = 0

    for prop, weight, required in OG_PROPERTIES:
        tag = find_og_tag(soup, prop)
        if tag is None:
            missing.append(prop)
            if required:
                warnings.append(f"Missing {prop}")
            continue

        found.append(prop)
        weighted_score += weight
        content: Optional[str] = tag.get('content')
        if content:
            raw_values[prop] = content

    # Length checks use raw values so entities from escaping are not counted
    extracted = {prop: sanitize_content(value, 500) for prop, value in raw_values.items()}

    image = raw_values.get("og:image")
    if image and not image.startswith("http"):
        warnings.append("og:image URL should be absolute")
        weighted_score -= RELATIVE_IMAGE_PENALTY

    if len(raw_values.get("og:title", "")) > MAX_TITLE_LENGTH:
        warnings.append(f"og:title is too long (>{MAX_TITLE_LENGTH} chars)")

    if len(raw_values.get("og:description", "")) > MAX_DESCRIPTION_LENGTH:
        warnings.append(f"og:description is too long (>{MAX_DESCRIPTION_LENGTH} chars)")

    final_score = max(0, weighted_score)
    data = {
        "found": found,
        "missing": missing,
        "extracted": extracted,
    }

    if final_score >= 80:
        return success(
            f"{len(found)}/{len(OG_PROPERTIES)} Open Graph tags found",
            final_score,
            data,
            warnings,
        )

    if final_score >= 40:
        return partial(
            f"Partial Open Graph: {len(found)}/{len(OG_PROPERTIES)} tags",
            final_score,
            data,
            warnings,
        )

    return failure("Open Graph meta tags not found or incomplete", data)
