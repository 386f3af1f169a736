"""
llms.txt checker (Answer.AI proposal).
"""

import re

from checkers.base import CheckOutcome, failure, success
from utils.safe_fetch import SafeFetcher
from utils.sanitize import sanitize_content
from utils.url_validator import origin_url

_TITLE = re.compile(r"^#\s+", re.MULTILINE)
_SECTION = re.compile(r"##\s+")
_SECTION_LINE = re.compile(r"^##\s+(.+)$", re.MULTILINE)
_MARKDOWN_LINK = re.compile(r"\[.+\]\(.+\)")
_OVERVIEW_HEADING = re.compile(r"^#\s+Overview", re.IGNORECASE | re.MULTILINE)
_HTML_START = re.compile(r"^\s*<(!doctype\s+html|html)", re.IGNORECASE)

MIN_CONTENT_LENGTH = 100


def looks_like_html(content_type: str, body: str) -> bool:
    """SPA hosts often answer every path with index.html and a 200."""
    return "text/html" in content_type.lower() or bool(_HTML_START.match(body))


async def check_llms_txt(url: str, fetcher: SafeFetcher, max_bytes: int) -> CheckOutcome:
    """
    Fetch and score /llms.txt.

    Deductions: -20 no title, -20 no sections, -10 no markdown links,
    -20 under 100 characters. A present file always counts as found.
    """
    llms_url = origin_url(url, "/llms.txt")
    response = await fetcher.fetch(llms_url, accept="text/plain", max_bytes=max_bytes)

    if not response.ok:
        if response.status == 404:
            return failure("llms.txt not found (HTTP 404)", {
                "url": llms_url,
                "status": response.status,
            })
        return failure(f"llms.txt returned HTTP {response.status}", {
            "url": llms_url,
            "status": response.status,
        })

    content = response.body_text
    if looks_like_html(response.headers.get("content-type", ""), content):
        return failure("llms.txt not found (HTML page returned)", {
            "url": llms_url,
            "status": response.status,
        })

    has_title = bool(_TITLE.search(content))
    has_sections = bool(_SECTION.search(content))
    has_markdown_links = bool(_MARKDOWN_LINK.search(content))

    data = {
        "url": llms_url,
        "contentLength": len(content),
        "hasTitle": has_title,
        "hasSections": has_sections,
        "hasMarkdownLinks": has_markdown_links,
        "sections": {
            "overview": bool(_OVERVIEW_HEADING.search(content)) or "overview" in content.lower(),
            "sections": len(_SECTION_LINE.findall(content)),
        },
        "preview": sanitize_content(content, 500),
    }

    score = 100
    if not has_title:
        score -= 20
    if not has_sections:
        score -= 20
    if not has_markdown_links:
        score -= 10
    if len(content) < MIN_CONTENT_LENGTH:
        score -= 20
    score = max(0, score)

    if score >= 80:
        return success("llms.txt found and properly formatted", score, data)

    return success("llms.txt found but could be improved", score, data)
