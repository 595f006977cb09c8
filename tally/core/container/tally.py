from __future__ import annotations

import datetime
import os
import types
from pathlib import Path

import pydantic as p
import xdg_base_dirs as xdg
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import tally
from tally.lib import NotReady
from tally.model import BaseModel, DeploymentEnvironment

from ..config import Secrets, Settings
from ..provider import LoggingProvider, TimestampProvider
from .storage import StorageContainer


def provide_xdg_state() -> Path:
    stp = xdg.xdg_state_home() / "tally"
    stp.mkdir(parents=True, exist_ok=True)
    return stp


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    secrets_path: p.AnyUrl | None = None
    override: tuple[str, ...]


class TallyContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())
    state_path: Provider[Path] = Resource(provide_xdg_state)

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, logging=logging, state_path=state_path, root=root
    )

    utcnow: Provider[TimestampProvider] = Object(lambda: datetime.datetime.now(datetime.UTC))

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: TallyContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.AnyUrl,
        secrets_path: p.AnyUrl | None = None,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        ps = Settings(env=env, root=config_root, override=override or ())
        ct.config.from_pydantic(ps)

        # wiring the package imports every module in it, so anything imported
        # later is already bound to this container
        ct.wire(packages=["tally"])
        if wiring:
            ct.wire(modules=wiring)

        logger = ct.logging().get_logger()

        for ov in ps.override:
            k, v = ov.split("=", 1)
            logger.info(
                "overriding configuration parameter",
                extra={
                    "key": k,
                    "value": v,
                },
            )

        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(os.path.dirname(tally.__file__)).parent)

        secrets_root = secrets_path or config_root
        if secrets_root.scheme != "file":
            raise ValueError(f"unsupported scheme for secrets root: {secrets_root.scheme}")
        ct.secrets.from_pydantic(Secrets(env=env, root=secrets_root))

        logger.debug(
            "configuration finished",
            extra={
                "config": str(config_root),
            },
        )
        ct._boot_config.override(
            BootConfiguration(
                debug=debug, env=env, config_root=config_root, secrets_path=secrets_path, override=override or ()
            )
        )

