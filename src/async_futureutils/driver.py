"""
Fire-and-forget query execution for the Cassandra Python driver.
"""

import logging
from typing import Any, Optional

from cassandra.cluster import ResponseFuture, Session
from cassandra.query import BatchStatement, BoundStatement, PreparedStatement, SimpleStatement

from .observer import FailureAction, ObserverConfig, observe_failure

logger = logging.getLogger(__name__)


def _describe_query(query: Any) -> str:
    if isinstance(query, BatchStatement):
        return "batch statement"
    if isinstance(query, BoundStatement):
        return query.prepared_statement.query_string
    if isinstance(query, (PreparedStatement, SimpleStatement)):
        return query.query_string
    return str(query)


def execute_and_forget(
    session: Session,
    query: Any,
    parameters: Any = None,
    on_error: Optional[FailureAction] = None,
    config: Optional[ObserverConfig] = None,
    **kwargs: Any,
) -> ResponseFuture:
    """
    Execute a query without waiting for its result, observing only failures.

    Use this for writes whose outcome the caller does not need, such as event
    or audit inserts. The returned future may be dropped.

    Args:
        session: The underlying Cassandra session.
        query: The query to execute.
        parameters: Query parameters.
        on_error: Failure action; defaults to logging the failed query.
        config: Optional observation settings.
        **kwargs: Passed through to ``Session.execute_async``.

    Returns:
        The driver's ResponseFuture for the query.

    Raises:
        Any exception raised synchronously by ``Session.execute_async``.

    Example:
        execute_and_forget(
            session,
            "INSERT INTO events (id, data) VALUES (%s, %s)",
            [event_id, payload],
            on_error=metrics,
        )
    """
    response_future = session.execute_async(query, parameters, **kwargs)

    if on_error is None:
        description = _describe_query(query)

        def on_error(error: BaseException) -> None:
            logger.warning(f"Fire-and-forget query failed ({description}): {error}")

    observe_failure(response_future, on_error, config)
    return response_future
