"""Simple in-memory rate limiting for per-user climate checks."""

from __future__ import annotations

import time
from collections import defaultdict

from flask import current_app

window_counts = defaultdict(list)


def allow(user_id: str) -> bool:
    now = time.time()
    window = 1.0
    window_counts[user_id] = [t for t in window_counts[user_id] if now - t < window]
    if len(window_counts[user_id]) >= current_app.config["RATE_LIMIT_CHECKS_PER_SEC"]:
        return False
    window_counts[user_id].append(now)
    return True


def reset() -> None:
    window_counts.clear()
