"""Hashtag extraction for chat-created tasks.

Maps `#word` tokens (English and Portuguese surface forms) onto the fixed tag
taxonomy and strips every hashtag from the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

from accountabot.models.task import TagCategory, TaskTag


HASHTAG_MAP: Dict[str, TagCategory] = {
    # Management (EN)
    "management": TagCategory.MANAGEMENT,
    "mgmt": TagCategory.MANAGEMENT,
    "work": TagCategory.MANAGEMENT,
    "meeting": TagCategory.MANAGEMENT,
    "admin": TagCategory.MANAGEMENT,
    # Management (PT)
    "gestao": TagCategory.MANAGEMENT,
    "trabalho": TagCategory.MANAGEMENT,
    "reuniao": TagCategory.MANAGEMENT,
    # Design (EN)
    "design": TagCategory.DESIGN,
    "ui": TagCategory.DESIGN,
    "ux": TagCategory.DESIGN,
    "figma": TagCategory.DESIGN,
    # Development (EN)
    "development": TagCategory.DEVELOPMENT,
    "dev": TagCategory.DEVELOPMENT,
    "code": TagCategory.DEVELOPMENT,
    "coding": TagCategory.DEVELOPMENT,
    "bug": TagCategory.DEVELOPMENT,
    "feature": TagCategory.DEVELOPMENT,
    # Development (PT)
    "codigo": TagCategory.DEVELOPMENT,
    "programacao": TagCategory.DEVELOPMENT,
    # Research (EN)
    "research": TagCategory.RESEARCH,
    "learn": TagCategory.RESEARCH,
    "study": TagCategory.RESEARCH,
    "read": TagCategory.RESEARCH,
    # Research (PT)
    "pesquisa": TagCategory.RESEARCH,
    "estudo": TagCategory.RESEARCH,
    "aprender": TagCategory.RESEARCH,
    "ler": TagCategory.RESEARCH,
    # Marketing (EN)
    "marketing": TagCategory.MARKETING,
    "mktg": TagCategory.MARKETING,
    "social": TagCategory.MARKETING,
    "content": TagCategory.MARKETING,
    # Marketing (PT)
    "conteudo": TagCategory.MARKETING,
    "redes": TagCategory.MARKETING,
}

_HASHTAG_RE = re.compile(r"#(\w+)")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class TagExtraction:
    tags: List[TaskTag] = field(default_factory=list)
    clean_text: str = ""
    unknown_tags: List[str] = field(default_factory=list)


def extract_tags(text: str) -> TagExtraction:
    """Extract hashtags from text and map them to task tags.

    Only the first hashtag per category is kept; later ones for the same
    category are dropped silently. Unmapped hashtags are reported in
    first-seen order, lower-cased.
    """
    text = text or ""
    tags: List[TaskTag] = []
    unknown: List[str] = []
    seen_categories = set()

    for match in _HASHTAG_RE.finditer(text):
        hashtag = match.group(1).lower()
        category = HASHTAG_MAP.get(hashtag)
        if category is None:
            if hashtag not in unknown:
                unknown.append(hashtag)
            continue
        if category in seen_categories:
            continue
        seen_categories.add(category)
        tags.append(TaskTag.for_category(category))

    clean_text = _WHITESPACE_RE.sub(" ", _HASHTAG_RE.sub("", text)).strip()
    return TagExtraction(tags=tags, clean_text=clean_text, unknown_tags=unknown)
