"""Readiness checkers for the AI Search Readiness Checker."""

from .base import CheckOutcome, degraded
from .schema import check_schema
from .robots import check_robots_txt
from .llms import check_llms_txt
from .sitemap import check_sitemap
from .opengraph import check_open_graph
from .semantic_html import check_semantic_html
from .heading import check_heading_hierarchy
from .faq import check_faq_blocks
from .pagespeed import check_page_speed
from .author import check_author_authority

__all__ = [
    "CheckOutcome",
    "degraded",
    "check_schema",
    "check_robots_txt",
    "check_llms_txt",
    "check_sitemap",
    "check_open_graph",
    "check_semantic_html",
    "check_heading_hierarchy",
    "check_faq_blocks",
    "check_page_speed",
    "check_author_authority",
]
