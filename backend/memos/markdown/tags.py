"""
Hashtag extraction from memo content.

A tag is `#` followed by a run of characters that are neither whitespace
nor `#`. Runs shorter than two characters and purely numeric runs (`#1`,
`#2024`) are not tags. The result keeps first-seen order without repeats.
"""

import re
from typing import List

TAG_RE = re.compile(r"#([^\s#]+)")

MIN_TAG_LENGTH = 2


def is_valid_tag(name: str) -> bool:
    return len(name) >= MIN_TAG_LENGTH and not name.isdigit()


def extract_tags(content: str) -> List[str]:
    tags: List[str] = []
    seen = set()
    for match in TAG_RE.finditer(content or ""):
        name = match.group(1)
        if name in seen or not is_valid_tag(name):
            continue
        seen.add(name)
        tags.append(name)
    return tags
