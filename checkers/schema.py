"""
Schema.org checker.

Looks for JSON-LD structured data and scores the types AI systems rely on
most for understanding who publishes a site.
"""

import json
import re
from typing import List

from checkers.base import CheckOutcome, failure, parse_html, partial, success

# (label, weight, @type values)
SCHEMA_TYPES = [
    ("Organization", 30, ["Organization"]),
    ("WebSite", 25, ["WebSite"]),
    ("WebPage", 20, ["WebPage"]),
    ("BreadcrumbList", 15, ["BreadcrumbList"]),
    ("Article/BlogPosting", 10, ["Article", "BlogPosting"]),
]

SUCCESS_MIN = 80
PARTIAL_MIN = 40


def _type_pattern(type_name: str) -> re.Pattern:
    return re.compile(rf'"@type"\s*:\s*"{type_name}"', re.IGNORECASE)


_TYPE_PATTERNS = {
    label: [_type_pattern(name) for name in names]
    for label, _, names in SCHEMA_TYPES
}


def extract_json_ld(html: str) -> List[str]:
    """Return the raw text of every non-empty JSON-LD script block."""
    soup = parse_html(html)
    blocks = []
    for script in soup.find_all('script', attrs={'type': 'application/ld+json'}):
        text = script.string or script.get_text()
        if text and text.strip():
            blocks.append(text)
    return blocks


def check_schema(url: str, html: str) -> CheckOutcome:
    """
    Score JSON-LD coverage.

    Args:
        url: Page URL (unused, kept for a uniform checker signature)
        html: Page HTML

    Returns:
        CheckOutcome; invalid JSON halves the score
    """
    scripts = extract_json_ld(html)
    all_labels = [label for label, _, _ in SCHEMA_TYPES]

    if not scripts:
        return failure("No Schema.org JSON-LD found", {
            "totalSchemas": 0,
            "typesFound": [],
            "missingTypes": all_labels,
        })

    types_found = []
    missing_types = []
    weighted_score = 0

    for label, weight, _ in SCHEMA_TYPES:
        if any(pattern.search(script) for pattern in _TYPE_PATTERNS[label] for script in scripts):
            types_found.append(label)
            weighted_score += weight
        else:
            missing_types.append(label)

    valid_count = 0
    invalid_count = 0
    for script in scripts:
        try:
            json.loads(script)
            valid_count += 1
        except (ValueError, RecursionError):
            # malformed or too deeply nested to decode
            invalid_count += 1

    warnings = []
    if invalid_count:
        warnings.append(f"{invalid_count} invalid JSON-LD script(s) found")
    if "Organization" not in types_found:
        warnings.append("Missing Organization schema (critical for AI understanding)")
    if "WebSite" not in types_found:
        warnings.append("Missing WebSite schema")

    final_score = weighted_score // 2 if invalid_count else weighted_score

    if final_score >= SUCCESS_MIN:
        return success(
            f"{len(types_found)} schema types found ({', '.join(types_found)})",
            final_score,
            {
                "totalSchemas": len(scripts),
                "validSchemas": valid_count,
                "typesFound": types_found,
                "missingTypes": missing_types,
            },
            warnings,
        )

    if final_score >= PARTIAL_MIN:
        return partial(
            f"Partial Schema: {len(types_found)}/{len(SCHEMA_TYPES)} types found",
            final_score,
            {
                "totalSchemas": len(scripts),
                "typesFound": types_found,
                "missingTypes": missing_types,
            },
            warnings,
        )

    return failure("Schema.org JSON-LD found but missing important types", {
        "totalSchemas": len(scripts),
        "typesFound": types_found,
        "missingTypes": all_labels,
    })
