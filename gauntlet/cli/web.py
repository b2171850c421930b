import os
import typing as t

import uvicorn

import gauntlet.lib.cli as click
from gauntlet.core import BootConfiguration, di, get_logger
from gauntlet.core.config import GauntletWebSettings, LoggingSettings

AppFactory: t.Final = "gauntlet.web.gauntlet:create_app"

logger = get_logger()


def _run(boot_cf: BootConfiguration, logging_cf: LoggingSettings, app_cf: GauntletWebSettings, **kwargs: t.Any):
    # the app factory re-boots the container from this in each worker process
    os.environ["__Gauntlet_BOOT"] = boot_cf.model_dump_json()
    uvicorn.run(
        AppFactory,
        factory=True,
        host=str(app_cf.backend.host),
        port=app_cf.backend.port,
        log_config=logging_cf.model_dump(),
        **kwargs,
    )


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@di.inject
def serve(
    workers: int,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    app_cf: GauntletWebSettings = di.Provide["config.web.gauntlet", di.as_(GauntletWebSettings)],  # noqa: B008
):
    """Serve the gauntlet API.

    Live candidate sessions are held in process memory, so with more than one
    worker a candidate must keep talking to the same worker.
    """
    if workers > 1:
        logger.warning(
            "serving with several workers; candidate sessions need sticky routing", extra={"workers": workers}
        )
    _run(boot_cf, logging_cf, app_cf, workers=workers)


@web.command(name="develop")
@di.inject
def develop(
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    app_cf: GauntletWebSettings = di.Provide["config.web.gauntlet", di.as_(GauntletWebSettings)],  # noqa: B008
):
    """Serve the gauntlet API with live-reload."""
    _run(boot_cf, logging_cf, app_cf, reload=True)
