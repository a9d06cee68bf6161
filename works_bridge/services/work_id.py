"""
Work identifier extraction.

Work items are referenced in commit messages and PR text as a bracketed
token, e.g. ``[cmj2r7f3e0029f7m0cgak7ccr]`` or
``[WORK-cmj2r7f3e0029f7m0cgak7ccr]``.
"""

import re
from typing import Iterable, Optional


WORK_ID_PATTERN = re.compile(r"\[(?:WORK-)?([a-z0-9]{20,30})\]", re.IGNORECASE)


def extract_work_id(text: Optional[str]) -> Optional[str]:
    """
    Return the first work identifier embedded in ``text``.

    Args:
        text: Arbitrary text such as a commit message or PR title

    Returns:
        The identifier without brackets or ``WORK-`` prefix, or None
    """
    if not text:
        return None
    match = WORK_ID_PATTERN.search(text)
    return match.group(1) if match else None


def find_work_id(texts: Iterable[Optional[str]]) -> Optional[str]:
    """Return the first identifier found across ``texts``, in order."""
    for text in texts:
        work_id = extract_work_id(text)
        if work_id:
            return work_id
    return None
