"""Retry with exponential backoff for calls to Jira, the AI backends and GitLab."""

from __future__ import annotations

import time
from typing import Any, Callable, TypeVar

from .errors import ExternalCallError

MAX_RETRIES = 3
BASE_DELAY = 2.0  # seconds

T = TypeVar("T")

# Only failures of the remote side are worth another attempt. Parse, validation
# and configuration errors would fail identically on every try.
TRANSIENT_ERRORS = (ExternalCallError,)


def with_retry(
    func: Callable[..., T],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    transient_errors: tuple = TRANSIENT_ERRORS,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """Call ``func`` and retry it on transient errors.

    Args:
        func: Callable to invoke.
        *args: Positional arguments.
        max_retries: Maximum number of attempts (at least one is always made).
        base_delay: Base delay in seconds (doubled each retry).
        transient_errors: Exception types that trigger a retry.
        sleep: Delay function, swapped out in tests.
        **kwargs: Keyword arguments.

    Returns:
        The function's return value.

    Raises:
        The last exception if all attempts fail, or any non-transient
        exception immediately.
    """
    attempts = max(max_retries, 1)
    name = getattr(func, "__name__", repr(func))

    for attempt in range(attempts):
        try:
            return func(*args, **kwargs)
        except transient_errors as e:
            if not getattr(e, "retryable", True):
                raise
            if attempt == attempts - 1:
                if attempts > 1:
                    print(f"   ❌ All {attempts} attempts exhausted for {name}: {e}")
                raise
            delay = base_delay * (2 ** attempt)
            print(f"   ⚠️  Retry {attempt + 1}/{attempts - 1} for {name} in {delay:.1f}s: {e}")
            sleep(delay)

    raise AssertionError("unreachable")
