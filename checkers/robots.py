"""
robots.txt checker.

Fetches /robots.txt and verifies that the crawlers behind the major AI
assistants are not shut out. Runs before every other check because the
sitemap check reuses the Sitemap: lines found here.
"""

import re
from dataclasses import dataclass, field
from typing import List

from checkers.base import CheckOutcome, clamp_score, failure, partial, success
from utils.safe_fetch import SafeFetcher
from utils.url_validator import origin_url

# (user agent, critical)
AI_BOTS = [
    ("GPTBot", True),
    ("ChatGPT-User", True),
    ("Claude-Web", False),
    ("CCBot", False),
    ("PerplexityBot", False),
    ("Google-Extended", False),
]

CRITICAL_BOT_PENALTY = 20
OTHER_BOT_PENALTY = 5
MISSING_SITEMAP_PENALTY = 10
SUCCESS_MIN = 80

# Characters of robots.txt kept in the outcome (the sitemap check reads them)
CONTENT_PREVIEW_CHARS = 1000

_USER_AGENT = re.compile(r"User-agent:", re.IGNORECASE)
_ALLOW = re.compile(r"Allow:", re.IGNORECASE)
_DISALLOW = re.compile(r"Disallow:", re.IGNORECASE)
_SITEMAP = re.compile(r"Sitemap:", re.IGNORECASE)


@dataclass
class RobotsGroup:
    """One User-agent group: the agents it names and its Disallow values."""
    agents: List[str] = field(default_factory=list)
    disallows: List[str] = field(default_factory=list)


def parse_groups(content: str) -> List[RobotsGroup]:
    """
    Split robots.txt into User-agent groups.

    Consecutive User-agent lines share one group; a User-agent line that
    follows a rule starts a new group. Comments are ignored.
    """
    groups: List[RobotsGroup] = []
    current = None
    has_rules = False

    for raw_line in content.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower()
        value = value.strip()

        if key == "user-agent":
            if current is None or has_rules:
                current = RobotsGroup()
                groups.append(current)
                has_rules = False
            current.agents.append(value.lower())
        elif key in ("allow", "disallow") and current is not None:
            has_rules = True
            if key == "disallow":
                current.disallows.append(value)

    return groups


def is_blocked(groups: List[RobotsGroup], agent: str) -> bool:
    """True if a group naming `agent` disallows the whole site."""
    agent = agent.lower()
    return any(agent in group.agents and "/" in group.disallows for group in groups)


async def check_robots_txt(url: str, fetcher: SafeFetcher, max_bytes: int) -> CheckOutcome:
    """
    Fetch and score /robots.txt.

    Fetch failures propagate to the caller.

    Args:
        url: Page URL; robots.txt is read from its origin
        fetcher: Safe fetch wrapper
        max_bytes: Body cap for robots.txt

    Returns:
        CheckOutcome with the first 1000 characters under data["content"]
    """
    robots_url = origin_url(url, "/robots.txt")
    response = await fetcher.fetch(robots_url, accept="text/plain", max_bytes=max_bytes)

    if not response.ok:
        if response.status == 404:
            return failure("robots.txt not found (HTTP 404)", {
                "status": response.status,
                "url": robots_url,
            })
        return failure(f"robots.txt returned HTTP {response.status}", {
            "status": response.status,
            "url": robots_url,
        })

    content = response.body_text
    has_user_agent = bool(_USER_AGENT.search(content))

    if not has_user_agent:
        return failure("robots.txt exists but missing User-agent", {
            "content": content[:500],
        })

    groups = parse_groups(content)
    blocked_globally = is_blocked(groups, "*")

    blocked_bots = []
    allowed_bots = []
    warnings = []
    score = 100

    for bot, critical in AI_BOTS:
        if blocked_globally or is_blocked(groups, bot):
            blocked_bots.append(bot)
            if critical:
                warnings.append(f"{bot} may be blocked from crawling")
                score -= CRITICAL_BOT_PENALTY
            else:
                score -= OTHER_BOT_PENALTY
        else:
            allowed_bots.append(bot)

    has_sitemap = bool(_SITEMAP.search(content))
    if not has_sitemap:
        warnings.append("Sitemap not referenced in robots.txt")
        score -= MISSING_SITEMAP_PENALTY

    score = clamp_score(score)

    data = {
        "hasUserAgent": has_user_agent,
        "hasAllow": bool(_ALLOW.search(content)),
        "hasDisallow": bool(_DISALLOW.search(content)),
        "hasSitemap": has_sitemap,
        "blockedBots": blocked_bots,
        "allowedBots": allowed_bots,
        "content": content[:CONTENT_PREVIEW_CHARS],
    }

    if score >= SUCCESS_MIN:
        return success(
            f"robots.txt configured correctly ({len(blocked_bots)} bots blocked)",
            score,
            data,
            warnings,
        )

    return partial(
        f"robots.txt exists but {len(blocked_bots)} AI bots may be blocked",
        score,
        data,
        warnings,
    )
