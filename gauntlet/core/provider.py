import datetime
import inspect
import logging.config
import typing as t

TimestampProvider = t.Callable[..., datetime.datetime]

TRACE: t.Final = 5


class TraceLogLevelLogger(logging.Logger):
    """Logger with a `trace` level below DEBUG, for per-event chatter such as
    proctoring evidence."""

    def trace(self, message: str, *args: t.Any, **kwargs: t.Any) -> None:
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)


class LoggingProvider(object):
    """Applies the `logging` settings and hands out module loggers."""

    def __init__(self, config: dict[str, t.Any], debug: bool):
        LoggingProvider.register_trace_level()
        logging.config.dictConfig(config)
        if debug:
            self.capture_warnings(True)

    @staticmethod
    def register_trace_level() -> None:
        logging.setLoggerClass(TraceLogLevelLogger)
        logging.addLevelName(TRACE, "TRACE")

    @staticmethod
    def get_logger(name: str | None = None, n_frames: int = 1) -> TraceLogLevelLogger:
        """The logger named `name`, or else the one named after the calling module."""
        if name is None:
            name = inspect.stack()[n_frames].frame.f_globals["__name__"]
        return t.cast(TraceLogLevelLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool):
        logging.captureWarnings(capture)


def get_logger(name: str | None = None) -> TraceLogLevelLogger:
    """Module-scoped logger for code that is not handed a LoggingProvider.

    Loggers are created at import time, before the container has configured
    logging, so the logger class is registered here too.
    """
    LoggingProvider.register_trace_level()
    return LoggingProvider.get_logger(name=name, n_frames=2)
