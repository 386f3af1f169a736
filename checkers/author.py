"""
Author authority (E-E-A-T) checker.
"""

import re

from checkers.base import CheckOutcome, failure, parse_html, partial, success

AUTHOR = "author"
PUBLISHER = "publisher"
ORGANIZATION = "organization"
BYLINE = "byline"
AUTHOR_BIO = "authorBio"

WEIGHTS = {
    AUTHOR: 25,
    PUBLISHER: 25,
    ORGANIZATION: 25,
    BYLINE: 15,
    AUTHOR_BIO: 10,
}

_ORGANIZATION_SCHEMA = re.compile(r'"@type":\s*"Organization"', re.IGNORECASE)
_BYLINE_CLASS = re.compile(r"""class=["'][^"']*byline|class=["'][^"']*author["']""", re.IGNORECASE)
# "ประวัติ" is Thai for biography
_AUTHOR_BIO = re.compile(r"ประวัติ|bio|about.*author", re.IGNORECASE)


def check_author_authority(html: str) -> CheckOutcome:
    """
    Score author and publisher signals.

    Args:
        html: Page HTML

    Returns:
        CheckOutcome; >= 60 success, >= 30 partial
    """
    soup = parse_html(html)

    signals = {
        AUTHOR: soup.find('meta', attrs={'name': 'author'}) is not None,
        PUBLISHER: soup.find('meta', attrs={'name': 'publisher'}) is not None,
        ORGANIZATION: bool(_ORGANIZATION_SCHEMA.search(html)),
        BYLINE: bool(_BYLINE_CLASS.search(html)),
        AUTHOR_BIO: bool(_AUTHOR_BIO.search(html)),
    }

    found = [name for name, present in signals.items() if present]
    missing = [name for name, present in signals.items() if not present]
    final_score = min(100, sum(WEIGHTS[name] for name in found))

    warnings = []
    if not signals[AUTHOR]:
        warnings.append("Add author name")
    if not signals[PUBLISHER] and not signals[ORGANIZATION]:
        warnings.append("Add Publisher/Organization")

    data = {
        "checks": {
            "hasAuthor": signals[AUTHOR],
            "hasPublisher": signals[PUBLISHER] or signals[ORGANIZATION],
            "hasByline": signals[BYLINE],
            "hasAuthorBio": signals[AUTHOR_BIO],
        },
        "found": found,
        "missing": missing,
    }

    if final_score >= 60:
        return success(
            f"{len(found)}/{len(WEIGHTS)} authority signals found",
            final_score,
            data,
            warnings,
        )

    if final_score >= 30:
        return partial("Limited author authority signals", final_score, data, warnings)

    return failure("No author/publisher information found", data)
