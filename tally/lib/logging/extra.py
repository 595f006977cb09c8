import logging
import sys
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

import tally.lib.json as json

from .style import LogStyle

# attributes every LogRecord carries; anything else on a record came from ``extra``
_RecordAttributes: t.Final[frozenset[str]] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "log_color", "color_message", "taskName"}


def record_extra(record: logging.LogRecord) -> dict[str, t.Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RecordAttributes}


class ExtraEncoder(json.JSONEncoder):
    """Falls back to ``repr`` for values the JSON encoder does not know."""

    def default(self, o: t.Any) -> json.JSONValue:
        try:
            return super().default(o)
        except TypeError:
            return repr(o)


class ExtraFormatter(logging.Formatter):
    """Formats with a wrapped ``base`` formatter, then appends the record's ``extra`` as JSON.

    Continuation lines of multi-line messages are indented under the first.
    ``colorize`` highlights the JSON; by default only when stderr is a terminal.
    """

    def __init__(
        self,
        base: type[logging.Formatter],
        format: str | None,
        datefmt: str | None = None,
        indent: bool = True,
        colorize: bool | None = None,
        pyg_style: type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        super().__init__(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults)
        self.base = base(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.indent = indent
        if colorize is None:
            colorize = sys.stderr.isatty() and not getattr(self.base, "no_color", False)
        self.formatter = Terminal256Formatter(style=pyg_style) if colorize else None

    def _hang(self, record: logging.LogRecord) -> None:
        message = record.getMessage()
        if "\n" not in message:
            return
        head, _, tail = message.partition("\n")
        prefix = self.base.format(record).split(head, 1)[0]
        record.msg = head + "\n" + textwrap.indent(tail, " " * len(prefix))
        record.args = None

    def format(self, record: logging.LogRecord) -> str:
        # uvicorn duplicates its message with ANSI codes
        if "color_message" in record.__dict__:
            record.msg = record.__dict__.pop("color_message")

        self._hang(record)
        message = self.base.format(record)
        extra = record_extra(record)
        if not extra:
            return message

        blob = json.dumps(extra, cls=ExtraEncoder, sort_keys=True, indent=4 if self.indent else None)
        if self.formatter is not None:
            blob = pygments.highlight(blob, JsonLexer(), self.formatter).strip()  # pyright: ignore
        return f"{message} {blob}"
