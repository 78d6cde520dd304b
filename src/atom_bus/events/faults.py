"""
Listener fault reporting.

Faults raised by listener callbacks are logged and, optionally, handed to the
asyncio loop's exception handler. They never travel back to the emitter.
"""
import asyncio
from typing import Any, Optional
from loguru import logger


def report_fault(
    exc: BaseException,
    message: str,
    loop: Optional[asyncio.AbstractEventLoop] = None,
    forward: bool = True,
    **context: Any,
) -> None:
    """
    Report a listener fault.

    Args:
        exc: The exception raised by the callback
        message: Human readable description
        loop: Loop whose exception handler receives the fault (running loop if omitted)
        forward: Also pass the fault to loop.call_exception_handler()
        **context: Extra keys for the exception handler context
    """
    logger.opt(exception=exc).error(f"{message}: {exc}")

    if not forward:
        return

    if loop is None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

    if loop.is_closed():
        return

    loop.call_exception_handler({"message": message, "exception": exc, **context})
