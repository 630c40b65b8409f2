from __future__ import annotations

from enum import Enum


class RunMode(Enum):
    CONSOLE = "console"
    SERVER = "server"


class Severity(Enum):
    FATAL = "fatal"
    RECOVERABLE = "recoverable"


class HalltiderError(RuntimeError):
    pass


class ConfigError(HalltiderError):
    pass


class TransportError(HalltiderError):
    pass


class UpstreamTimeout(TransportError):
    pass


class ResponseDumpError(TransportError):
    pass


class MalformedResponse(HalltiderError):
    pass


class TimeParseError(HalltiderError):
    pass


def classify_error(exc: BaseException, mode: RunMode) -> Severity:
    """Decide whether ``exc`` should end the process in the given run mode.

    Configuration problems are always fatal. Everything else is fatal when a
    human is watching the console and recoverable per request in the server.
    """

    if isinstance(exc, ConfigError):
        return Severity.FATAL
    if mode is RunMode.SERVER:
        return Severity.RECOVERABLE
    return Severity.FATAL
