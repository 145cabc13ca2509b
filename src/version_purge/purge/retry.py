"""Exponential backoff wrapper for remote SharePoint calls."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from version_purge.sharepoint.client import SharePointApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 5

# HTTP statuses SharePoint uses to signal throttling
TRANSIENT_STATUS_CODES = frozenset({429, 503})
_TRANSIENT_MARKERS = ("429", "503", "throttl")


def is_transient_error(exc: BaseException) -> bool:
    """Return True if the error indicates rate limiting and is worth retrying."""
    if isinstance(exc, SharePointApiError):
        # Status carries 429/503; the message is matched on wording only
        return exc.status_code in TRANSIENT_STATUS_CODES or "throttl" in exc.message.lower()
    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


class RetryExecutor:
    """Runs zero-argument operations, retrying transient failures with backoff.

    The delay before retry ``n`` is ``2 ** n`` seconds. Permanent failures are
    re-raised on the first occurrence.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        is_transient: Callable[[BaseException], bool] = is_transient_error,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialise the executor.

        Args:
            max_retries: Retries allowed after the first attempt for transient failures.
            is_transient: Predicate classifying an exception as transient.
            sleep: Function used to wait between attempts.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._max_retries = max_retries
        self._is_transient = is_transient
        self._sleep = sleep

    def execute(self, operation: Callable[[], T], description: str = "") -> T:
        """Run ``operation`` and return its result.

        Args:
            operation: Zero-argument callable performing one remote call.
            description: Short label for log lines (e.g. "list files /Docs").

        Raises:
            Exception: The last error raised by ``operation``.
        """
        label = description or getattr(operation, "__name__", "operation")
        attempt = 0
        while True:
            try:
                return operation()
            except Exception as exc:
                if not self._is_transient(exc):
                    logger.error("[execute] permanent failure; operation:%s;error:%s", label, exc)
                    raise
                attempt += 1
                if attempt > self._max_retries:
                    logger.error(
                        "[execute] retries exhausted; operation:%s;attempts:%d;error:%s",
                        label,
                        attempt,
                        exc,
                    )
                    raise
                delay = 2**attempt
                logger.warning(
                    "[execute] throttled, retrying; operation:%s;attempt:%d/%d;delay_seconds:%d",
                    label,
                    attempt,
                    self._max_retries,
                    delay,
                )
                self._sleep(delay)
