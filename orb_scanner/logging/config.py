"""
structlog setup for the scanner.

Snapshots are written to stdout, so every log line goes to stderr. Two
bound loggers carry an audit trail: gate decisions (breakout buffer,
confidence threshold, market hours) and opening range state transitions.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_caller: bool = False
) -> None:
    """
    Route structlog through the stdlib root logger on stderr.

    Args:
        level: Level name, case-insensitive
        format_json: One JSON object per line instead of the console renderer
        include_caller: Add file name and line number to each event
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_gating_logger(name: str) -> FilteringBoundLogger:
    """Logger for pass/fail gates between a price tick and a published breakout."""
    return structlog.get_logger(name).bind(subsystem="gating", audit_trail=True)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """Logger for Forming -> Valid | Invalid range transitions."""
    return structlog.get_logger(name).bind(subsystem="range_state", audit_trail=True)


def log_gate_decision(
    logger: FilteringBoundLogger,
    gate_name: str,
    passed: bool,
    symbol: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Record one gate evaluation.

    Passed gates log at info, failed ones at debug.

    Args:
        logger: Logger from ``get_gating_logger``
        gate_name: Gate identifier, e.g. ``breakout_buffer``
        passed: Gate outcome
        symbol: Symbol evaluated, ``*`` for scanner-wide gates
        reason: Human readable comparison behind the outcome
        context: Extra fields such as the timeframe
    """
    event = logger.bind(
        gate_name=gate_name,
        gate_result="PASS" if passed else "FAIL",
        symbol=symbol,
        reason=reason,
    )
    if context:
        event = event.bind(context=context)

    if passed:
        event.info("Gate passed")
    else:
        event.debug("Gate failed")


def log_state_transition(
    logger: FilteringBoundLogger,
    range_key: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """Record an opening range leaving the forming state."""
    event = logger.bind(
        range_key=range_key,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )
    if context:
        event = event.bind(context=context)
    event.info("Range state transition")
