import datetime
import inspect
import logging.config
import typing as t

from .logging import TRACE, TraceLogLevelLogger

TimestampProvider = t.Callable[..., datetime.datetime]


class LoggingProvider(object):
    """Configures :mod:`logging` from the ``logging`` settings and hands out loggers.

    Services receive this through injection rather than creating module-level
    loggers, so that logging is only configured once the container has booted.
    """

    def __init__(self, config: dict[str, t.Any], debug: bool):
        logging.setLoggerClass(TraceLogLevelLogger)
        logging.addLevelName(TRACE, "TRACE")
        logging.config.dictConfig(config)
        logging.captureWarnings(debug)

    @staticmethod
    def get_logger(name: str | None = None, *, n_frames: int = 1) -> TraceLogLevelLogger:
        """Return the logger ``name``, by default the one named after the calling module."""
        if name is None:
            frame = inspect.stack()[n_frames].frame
            name = t.cast(str, frame.f_globals["__name__"])
        return t.cast(TraceLogLevelLogger, logging.getLogger(name))
