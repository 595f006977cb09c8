"""Run the REST backend under uvicorn."""

from __future__ import annotations

import os
import typing as t
from pathlib import Path

import uvicorn
from sqlalchemy.orm import Session

import tally
import tally.lib.cli as click
from tally.core import BootConfiguration, di
from tally.core.config import LoggingSettings, WebSettings
from tally.grading import attempt as attempt_service

_PackageDir = Path(tally.__file__).resolve().parent


class ServeConfig(t.TypedDict):
    host: str
    port: int


def _get_app_config(app_name: str, web_cf: WebSettings) -> tuple[str, ServeConfig]:
    """App factory spec and bind address of ``app_name``, configured under ``web.{app_name}``."""
    cf = getattr(web_cf, app_name, None)
    if cf is None:
        raise click.ClickException(f"unknown app '{app_name}' - not configured in web.yaml")

    spec = f"tally.web.{app_name}:create_app"
    uvi_cf: ServeConfig = {"host": str(cf.backend.host), "port": cf.backend.port}
    return spec, uvi_cf


@click.group()
def web(): ...


@web.command(name="serve")
@click.argument("app_name", default="tally")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@di.inject
def serve(
    app_name: str,
    workers: int,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the grading API."""
    spec, uvi_cf = _get_app_config(app_name, web_cf)

    os.environ["__Tally_BOOT"] = boot_cf.model_dump_json()
    uvicorn.run(spec, factory=True, workers=workers, log_config=logging_cf.model_dump(), **uvi_cf)


@web.command(name="develop")
@click.argument("app_name", default="tally")
@click.option(
    "--expire/--no-expire",
    default=True,
    help="auto-submit attempts whose time ran out while the server was stopped",
)
@di.inject
def develop(
    app_name: str,
    expire: bool,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
    session: Session = di.Provide["storage.persistent.session"],
):
    """Start the grading API, reloading when the tally package changes.

    Quiz timers keep running while the server is stopped, so attempts left
    in progress are settled first unless --no-expire is given.
    """
    spec, uvi_cf = _get_app_config(app_name, web_cf)

    if expire:
        with session.begin():
            expired = attempt_service.expire_overdue(session=session)
        click.echo(f"auto-submitted {len(expired)} overdue attempt(s)")

    os.environ["__Tally_BOOT"] = boot_cf.model_dump_json()
    uvicorn.run(
        spec,
        factory=True,
        reload=True,
        reload_dirs=[str(_PackageDir)],
        log_config=logging_cf.model_dump(),
        **uvi_cf,
    )
