"""Shared helpers for the derived engine operations.

These are pure functions so the matching, sampling and snapshot rules can
be tested without a driver.
"""

import json
import random
import re
from functools import lru_cache
from typing import Any, Mapping, Optional, Sequence


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern:
    """Compile a glob pattern into an anchored regular expression.
    
    ``*`` matches any run of characters (including none) and ``?`` matches
    exactly one character. Every other character is matched literally.
    
    Args:
        pattern: Glob pattern such as ``"user:*"`` or ``"log-??"``
        
    Returns:
        Compiled pattern; use ``fullmatch`` against keys.
    """
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def sample_keys(
    keys: Sequence[str],
    count: int,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """Pick up to ``count`` distinct keys by repeated uniform draws.
    
    Duplicate draws are rejected and redrawn, so every key has the same
    chance of selection. When fewer than ``count`` keys exist, all of them
    are returned (in draw order).
    """
    rng = rng or random
    target = min(int(count), len(keys))
    chosen: dict[str, None] = {}
    while len(chosen) < target:
        chosen.setdefault(keys[rng.randrange(len(keys))], None)
    return list(chosen)


def dumps_snapshot(entries: Mapping[str, Any]) -> str:
    """Serialize a key/value mapping to the default snapshot format (JSON)."""
    return json.dumps(dict(entries), ensure_ascii=False)


def loads_snapshot(blob: str | bytes) -> dict[str, Any]:
    """Parse a snapshot produced by :func:`dumps_snapshot`.
    
    Raises:
        ValueError: If the blob is not a JSON object.
    """
    data = json.loads(blob)
    if not isinstance(data, dict):
        raise ValueError(
            f"Snapshot must decode to an object, got {type(data).__name__}"
        )
    return data


_SCALARS = (str, bytes, int, float, type(None))


def strict_equals(a: Any, b: Any) -> bool:
    """Identity-style equality used by ``Engine.includes``.
    
    Scalars are equal when they have the same value and kind (``1`` does
    not equal ``True`` or ``"1"``, but ``1`` equals ``1.0``). Anything else
    (dicts, lists, objects) is equal only to itself.
    """
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, _SCALARS) and type(a) is type(b):
        return a == b
    return False
