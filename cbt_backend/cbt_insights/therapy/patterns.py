"""Regex helpers shared by the free-text cue tables."""
from __future__ import annotations

import re

# a gap between two cue words: same sentence, at most 60 characters
GAP = r"[^.!?\n]{0,60}?"
# a number is only read from the start of its digit run
NUMBER = r"(?<!\d)\d+"


def cue(pattern: str, flags: int = re.I) -> re.Pattern:
    """Compile a cue pattern written with `.*` gaps and `\\d+` numbers.

    Every `.*` (or `.*?`) becomes `GAP` and every `\\d+` becomes `NUMBER`, so
    each start position does a bounded amount of backtracking and a search
    stays linear in the text length even when the cue words repeat.
    """
    pattern = pattern.replace(".*?", ".*").replace(".*", GAP)
    return re.compile(pattern.replace(r"\d+", NUMBER), flags)
