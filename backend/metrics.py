"""Lightweight in-memory metrics counter used by the API endpoints.

Counters are process-local. Conversions increment named counters and the
/api/metrics endpoint reports them.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict

_c = Counter()


def inc(name: str, n: int = 1) -> None:
    _c[name] += n


def get(name: str) -> int:
    return _c[name]


def get_all() -> Dict[str, int]:
    return dict(_c)


def reset_all() -> None:
    _c.clear()
