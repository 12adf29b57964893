"""Best-effort execution of push, email and webhook deliveries."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import anyio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of a single delivery attempt."""

    channel: str
    delivered: bool
    error: str | None = None


async def best_effort(
    channel: str,
    call: Callable[[], Awaitable[Any]],
    *,
    timeout: float | None = None,
    **context: Any,
) -> DeliveryOutcome:
    """Await ``call`` and report its outcome without ever raising.

    ``timeout`` bounds the call in seconds when positive. A ``False`` result is
    a delivery the coordinator declined to make (preference, no address), not
    an error.
    """

    extra = {"channel": channel, **context}
    try:
        if timeout and timeout > 0:
            with anyio.fail_after(timeout):
                result = await call()
        else:
            result = await call()
    except TimeoutError:
        logger.error(
            "%s delivery timed out after %ss (%s)",
            channel,
            timeout,
            _describe(context),
            extra=extra,
        )
        return DeliveryOutcome(channel, False, "timeout")
    except Exception as exc:
        logger.error(
            "%s delivery failed (%s): %s",
            channel,
            _describe(context),
            exc,
            exc_info=True,
            extra=extra,
        )
        return DeliveryOutcome(channel, False, str(exc) or type(exc).__name__)

    if result is False:
        logger.debug(
            "%s delivery skipped (%s)",
            channel,
            _describe(context),
            extra=extra,
        )
        return DeliveryOutcome(channel, False)
    return DeliveryOutcome(channel, True)


def _describe(context: dict[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in context.items() if value is not None)


__all__ = ["DeliveryOutcome", "best_effort"]
