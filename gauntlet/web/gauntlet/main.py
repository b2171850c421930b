"""Main entry point for the gauntlet web application."""

import os
import typing as t
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import gauntlet
from gauntlet.core import BootConfiguration, di, GauntletContainer
from gauntlet.core.config import GauntletWebSettings
from gauntlet.model import DeploymentEnvironment

from .errors import register_error_handlers
from .route import router


@di.inject
def _create_app(
    config: GauntletWebSettings = di.Provide["config.web.gauntlet", di.as_(GauntletWebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
    root_path: Path = di.Provide["root"],
) -> FastAPI:
    app = FastAPI(
        title="Gauntlet",
        description="Multi-phase candidate assessment",
        version=gauntlet.__version__,
    )

    if env in (DeploymentEnvironment.Local, DeploymentEnvironment.Development) and config.frontend is not None:
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

    register_error_handlers(app)
    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv("__Gauntlet_BOOT")
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = GauntletContainer()
        GauntletContainer.boot(ct, **dict(boot_cf))
        ct.wire(modules=["gauntlet.web.gauntlet.main", "gauntlet.auth.middleware"])
        return _create_app(
            config=GauntletWebSettings(**ct.config.web.gauntlet()),
            env=boot_cf.env,
            root_path=t.cast(Path, ct.root()),
        )
    return _create_app()
