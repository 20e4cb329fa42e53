"""
Common functions of the kernel rebuild tools.
"""

import logging
import os
import sys

from typing import Callable, Literal, TypeVar, overload


class ImplementationError(Exception):
    """Raised if a assumption is not met."""


def init_logging(level: str = "INFO") -> None:
    """
    Initialize the logging for the kernel rebuild tools.

    Args:
        level:
            Log level to use. If a log level is provided using environment
            variable LOG_LEVEL, it will overwrite this parameter.
    """
    log_format = "[{asctime}] {levelname:<6s} {filename:s}:{lineno:d} - {message:s}"
    log_date_format = "%m/%d/%Y %I:%M:%S %p"
    used_level = level

    env_level = os.getenv("LOG_LEVEL", None)
    if env_level:
        used_level = env_level

    logging.basicConfig(level=used_level, format=log_format, style="{", datefmt=log_date_format)

    logging.info("Setting log level to %s. (default: %s, env: %s)", used_level, level, env_level)


RT = TypeVar("RT")


@overload
def log_exception(
    call_exit: Literal[True] = True, code: int = 1
) -> Callable[[Callable[..., RT]], Callable[..., RT]]: ...  # pragma: no cover


@overload
def log_exception(
    call_exit: Literal[False] = False, code: int = 1
) -> Callable[[Callable[..., RT]], Callable[..., RT | None]]: ...  # pragma: no cover


def log_exception(call_exit: bool = False, code: int = 1) -> Callable[[Callable[..., RT]], Callable[..., RT | None]]:
    """
    Catch and log exceptions. This is function intended as an annotation.

    Args:
        call_exit:
            Call exit with the given exit code if an exception happens.
        code:
            Exit code in case of an exception.

    Returns:
        Callable.
    """

    def _log_exception(func: Callable[..., RT]) -> Callable[..., RT | None]:
        def inner_function(*args, **kwargs) -> RT | None:
            result = None

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logging.critical(e, exc_info=True)
                if call_exit:
                    sys.exit(code)

            return result

        return inner_function

    return _log_exception
