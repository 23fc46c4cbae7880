"""
Fenced code block detection shared by the parser, grouper and substitutor.
"""

import re
from typing import List, NamedTuple, Optional


FENCE_OPEN_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


class Fence(NamedTuple):
    """An opening code fence."""

    char: str
    length: int
    info: str

    @property
    def language(self) -> str:
        """First word of the info string, or an empty string."""
        parts = self.info.split()
        return parts[0] if parts else ""


def match_fence_open(line: str) -> Optional[Fence]:
    """
    Match an opening code fence.

    Backtick fences may not carry a backtick in their info string.

    Args:
        line: Single line without trailing newline

    Returns:
        Fence if the line opens a code block, None otherwise
    """
    match = FENCE_OPEN_RE.match(line)
    if not match:
        return None
    fence = match.group("fence")
    info = match.group("info").strip()
    if fence[0] == "`" and "`" in info:
        return None
    return Fence(char=fence[0], length=len(fence), info=info)


def is_fence_close(line: str, fence: Fence) -> bool:
    """Check whether a line closes the given fence."""
    stripped = line.strip()
    if len(line) - len(line.lstrip(" ")) > 3 or not stripped:
        return False
    return set(stripped) == {fence.char} and len(stripped) >= fence.length


def code_line_mask(lines: List[str]) -> List[bool]:
    """
    Mark which lines belong to fenced code, fences included.

    An unclosed fence runs to the end of the text.

    Example:
        >>> code_line_mask(["a", "```", "b", "```", "c"])
        [False, True, True, True, False]
    """
    mask = [False] * len(lines)
    open_fence: Optional[Fence] = None
    for index, line in enumerate(lines):
        if open_fence is None:
            fence = match_fence_open(line)
            if fence is not None:
                open_fence = fence
                mask[index] = True
        else:
            mask[index] = True
            if is_fence_close(line, open_fence):
                open_fence = None
    return mask
