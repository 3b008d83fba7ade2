import re
from typing import Optional

MAX_FENCE_UNWRAPS = 3

_OUTER_FENCE = re.compile(r"^```(?:markdown|md)\n(.*?)\n```$", re.DOTALL)


def format_markdown(text: Optional[str]) -> str:
    """
    Strip the ```markdown fences models sometimes wrap a whole page in.

    Only a fence enclosing the entire response is removed, at most
    MAX_FENCE_UNWRAPS levels deep. Code blocks inside the page are kept.
    """
    formatted = (text or "").strip()

    for _ in range(MAX_FENCE_UNWRAPS):
        match = _OUTER_FENCE.match(formatted)
        if not match:
            break
        formatted = match.group(1).strip()

    return formatted
