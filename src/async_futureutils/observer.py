"""
Fire-and-forget failure observation for asynchronous results.

Dropping the handle of an asynchronous operation whose value you do not need
also drops any exception it raised. ``observe_failure`` is the sanctioned way
to discard a result while still handling its failure.
"""

import asyncio
import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .completion import add_completion_callback

logger = logging.getLogger(__name__)

FailureAction = Callable[[BaseException], Any]

_CANCELLED_ERRORS = (asyncio.CancelledError, concurrent.futures.CancelledError)


@dataclass
class ObserverConfig:
    """Configuration for failure observation."""

    ignore_cancelled: bool = False  # Skip cancellation instead of passing a CancelledError
    logger: Optional[logging.Logger] = None  # Defaults to this module's logger


def observe_failure(
    result: Any, action: FailureAction, config: Optional[ObserverConfig] = None
) -> None:
    """
    Run ``action`` with the error if ``result`` fails, ignoring success.

    The call returns as soon as the continuation is registered; it never waits
    for ``result``. The action runs at most once, on whichever thread resolves
    ``result`` (or on the calling thread if it is already resolved), so it
    must be safe to run anywhere.

    If the action itself raises, a single warning is logged with the original
    error attached and nothing propagates to the resolving thread. Only
    ``KeyboardInterrupt`` and ``SystemExit`` are re-raised.

    A cancelled result counts as a failure: the action receives a
    ``CancelledError`` unless ``config.ignore_cancelled`` is set.

    Args:
        result: An asynchronous result handle, see
            :func:`~async_futureutils.completion.add_completion_callback`.
        action: Callable receiving the error the result failed with.
        config: Optional observation settings.

    Raises:
        UnsupportedResultError: If ``result`` does not support completion
            registration.

    Example:
        observe_failure(
            executor.submit(send_audit_event, event),
            lambda error: audit_failures.inc(),
        )
    """
    config = config or ObserverConfig()
    log = config.logger or logger

    def _on_complete(error: Optional[BaseException]) -> None:
        if error is None:
            return
        if isinstance(error, _CANCELLED_ERRORS) and config.ignore_cancelled:
            return

        try:
            action(error)
        except (KeyboardInterrupt, SystemExit):
            raise
        except BaseException:
            log.warning(f"Failed to process error: {error!r}", exc_info=error)

    add_completion_callback(result, _on_complete)
