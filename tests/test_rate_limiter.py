from __future__ import annotations

import time

import pytest
from fastapi import HTTPException

from katafree.core.rate_limiter import _RateLimiter


def test_limit_is_enforced_per_key():
    limiter = _RateLimiter()
    limiter.check("api:1.1.1.1", 1, 60)
    with pytest.raises(HTTPException) as exc:
        limiter.check("api:1.1.1.1", 1, 60)
    assert exc.value.status_code == 429
    limiter.check("api:2.2.2.2", 1, 60)


def test_expired_windows_are_evicted():
    limiter = _RateLimiter()
    past = time.time() - 1
    for n in range(50):
        limiter._hits[f"api:10.0.0.{n}"] = (3, past)
    limiter._hits["api:live"] = (1, time.time() + 60)

    limiter.check("api:fresh", 5, 60)

    assert limiter.tracked_keys() == 2
    assert set(limiter._hits) == {"api:live", "api:fresh"}


def test_expired_window_starts_a_new_count():
    limiter = _RateLimiter()
    limiter._hits["api:1.1.1.1"] = (99, time.time() - 1)
    limiter.check("api:1.1.1.1", 1, 60)
    assert limiter._hits["api:1.1.1.1"][0] == 1
