import logging
import typing as t

# below DEBUG; per-request detail such as attempts checked against their deadline
TRACE: t.Final[int] = 5


class TraceLogLevelLogger(logging.Logger):
    def trace(self, msg: object, *args: t.Any, **kwargs: t.Any) -> None:
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)
