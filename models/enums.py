"""
Enumerations and constants for the AI Search Readiness Checker.

This module defines all the fixed values used in the deterministic scoring model.
"""

from enum import Enum
from typing import Dict


class CheckName(str, Enum):
    """
    Names of the ten readiness checks.

    Values are the keys used in the API response `checks` map.
    """
    SCHEMA = "schema"
    ROBOTS_TXT = "robotsTxt"
    LLMS_TXT = "llmsTxt"
    SITEMAP = "sitemap"
    OPEN_GRAPH = "openGraph"
    SEMANTIC_HTML = "semanticHTML"
    HEADING_HIERARCHY = "headingHierarchy"
    FAQ_BLOCKS = "faqBlocks"
    PAGE_SPEED = "pageSpeed"
    AUTHOR_AUTHORITY = "authorAuthority"


class Grade(str, Enum):
    """
    Overall grade based on total score.

    Mapping (deterministic):
    - 90-100: excellent
    - 70-89: good
    - 50-69: fair
    - 0-49: poor
    """
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class CheckStatus(str, Enum):
    """Per-check status used for the summary counts."""
    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


class Priority(str, Enum):
    """Recommendation priority levels."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Check weights (total = 100)
CHECK_WEIGHTS: Dict[CheckName, int] = {
    CheckName.SCHEMA: 20,
    CheckName.ROBOTS_TXT: 15,
    CheckName.LLMS_TXT: 15,
    CheckName.SITEMAP: 10,
    CheckName.OPEN_GRAPH: 15,
    CheckName.SEMANTIC_HTML: 5,
    CheckName.HEADING_HIERARCHY: 5,
    CheckName.FAQ_BLOCKS: 5,
    CheckName.PAGE_SPEED: 5,
    CheckName.AUTHOR_AUTHORITY: 5,
}

# Grade thresholds (score >= threshold)
GRADE_THRESHOLDS = [
    (90, Grade.EXCELLENT),
    (70, Grade.GOOD),
    (50, Grade.FAIR),
    (0, Grade.POOR),
]

# Summary status thresholds
STATUS_THRESHOLDS = {
    "pass_min": 70,   # score >= 70 → passed
    "warn_min": 50,   # 50 <= score < 70 → warning
    # score < 50 → failed
}

# Recommendation templates (deterministic)
RECOMMENDATION_TEMPLATES = {
    "schema_missing": {
        "priority": Priority.CRITICAL,
        "category": "Schema.org",
        "message": "Schema.org JSON-LD not found or incomplete",
        "action": "Install Schema.org JSON-LD (Organization, WebSite)",
    },
    "llms_missing": {
        "priority": Priority.HIGH,
        "category": "llms.txt",
        "message": "llms.txt file not found",
        "action": "Create llms.txt following Answer.AI standard",
    },
    "llms_weak": {
        "priority": Priority.HIGH,
        "category": "llms.txt",
        "message": "llms.txt needs improvement",
        "action": "Create llms.txt following Answer.AI standard",
    },
    "robots_missing": {
        "priority": Priority.CRITICAL,
        "category": "robots.txt",
        "message": "robots.txt not found",
        "action": "Create robots.txt and specify Sitemap",
    },
    "robots_blocks_ai": {
        "priority": Priority.HIGH,
        "category": "robots.txt",
        "message": "May block AI crawlers",
        "action": "Ensure GPTBot, ChatGPT-User are not blocked",
    },
    "sitemap_missing": {
        "priority": Priority.HIGH,
        "category": "Sitemap",
        "message": "Sitemap.xml not found",
        "action": "Create Sitemap.xml and reference it in robots.txt",
    },
    "open_graph_incomplete": {
        "priority": Priority.MEDIUM,
        "category": "Open Graph",
        "message": "Open Graph is incomplete",
        "action": "Add og:title, og:description, og:image, og:type",
    },
    "semantic_missing": {
        "priority": Priority.MEDIUM,
        "category": "Semantic HTML",
        "message": "Too many <div> elements",
        "action": "Use semantic elements: <header>, <main>, <article>, <section>",
    },
    "headings_issues": {
        "priority": Priority.MEDIUM,
        "category": "Headings",
        "message": "Heading Hierarchy issues",
        "action": "Have 1 H1, followed by H2, H3 in order",
    },
    "faq_missing": {
        "priority": Priority.LOW,
        "category": "FAQ",
        "message": "No FAQ/QA blocks found",
        "action": "Add FAQ Schema and Q&A format",
    },
    "page_speed_slow": {
        "priority": Priority.HIGH,
        "category": "Performance",
        "message": "Website loads slowly",
        "action": "Improve Core Web Vitals, optimize images",
    },
    "author_missing": {
        "priority": Priority.LOW,
        "category": "EEAT",
        "message": "No author information found",
        "action": "Add Author meta, Publisher info per EEAT guidelines",
    },
}
