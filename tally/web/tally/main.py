"""Main entry point for the Tally web application."""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import tally
from tally.core import BootConfiguration, di, TallyContainer
from tally.core.config.web import TallyWebSettings
from tally.model import DeploymentEnvironment

from .route import router


@di.inject
def _create_app(
    config: TallyWebSettings = di.Provide["config.web.tally", di.as_(TallyWebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
) -> FastAPI:
    app = FastAPI(
        title="Tally",
        description="Quiz attempts and grading",
        version=tally.__version__,
    )

    if env is DeploymentEnvironment.Local and config.frontend is not None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                f"http://{config.frontend.host}:{config.frontend.port}",
                f"http://localhost:{config.frontend.port}",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv("__Tally_BOOT")
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = TallyContainer()
        TallyContainer.boot(ct, **dict(boot_cf))
        return _create_app(
            config=TallyWebSettings(**ct.config.web.tally()),
            env=boot_cf.env,
        )
    return _create_app()
