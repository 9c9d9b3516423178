"""
Centralized logging using Loguru with context-aware verbosity.

LOG() respects the verbosity of the ProgramState bound to the current
context, so library modules (scanner, tables, expander) can log without
having state passed to them. Outside a connected context LOG() is silent,
which keeps library use quiet.

Usage:
    from shortdown.lib.log import LOG, state_connectToLogger

    state_connectToLogger(state)

    LOG("Expanding 12 articles", level=1)
    LOG("Loading table data from data/sales.csv", level=2)
    LOG("Directive 'table' at offset 1337", level=3)

Worker threads do not inherit context variables; run their work inside
contextvars.copy_context().run(...) to keep the connected state.
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """Verbosity of the connected state, or 0 when none is connected"""
    state = _program_state.get()
    return getattr(state, 'verbosity', 0) if state is not None else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v)
        3 = Debug (-vv or higher)
    """
    if verbosity_get() >= level:
        logger.opt(depth=1).debug(message, **kwargs)
