from __future__ import annotations

import datetime
import os
import sys
import types
import typing as t
from pathlib import Path

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import gauntlet
from gauntlet.lib import NotReady
from gauntlet.model import BaseModel, DeploymentEnvironment

from ..config import GauntletSettings, Secrets, Settings
from ..di import register_loader_containers
from ..provider import LoggingProvider, TimestampProvider
from .assessment import AssessmentContainer
from .auth import AuthContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    secrets_path: p.AnyUrl | None = None
    override: tuple[str, ...]


class GauntletContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, logging=logging, root=root
    )
    template: Provider[TemplateContainer] = Container(TemplateContainer, config=config.template, root=root)
    llm: Provider[LLMContainer] = Container(LLMContainer, config=config.llm, secrets=secrets.llm)

    # config comes from web.gauntlet.auth, the shared codes from secrets.auth
    auth: Provider[AuthContainer] = Container(
        AuthContainer,
        config=config.web.gauntlet.auth,
        secrets=secrets.auth,
    )

    utcnow: Provider[TimestampProvider] = Object(lambda: datetime.datetime.now(datetime.UTC))

    assessment: Provider[AssessmentContainer] = Container(
        AssessmentContainer,
        settings=config.gauntlet.as_(GauntletSettings),
        judge_model=llm.judge_model,
        collaborator_model=llm.collaborator_model,
        templates=template.llm,
        utcnow=utcnow,
    )

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: GauntletContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        secrets_path: p.AnyUrl | None = None,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        ps = Settings(env=env, root=config_root, override=override or ())
        ct.config.from_pydantic(ps)
        ct.root.override(Path(os.path.dirname(gauntlet.__file__)).parent)
        ct.wire(packages=["gauntlet.storage", "gauntlet.auth"])
        if wiring:
            ct.wire(modules=wiring)
        if imported := [mod for name, mod in sys.modules.items() if name.startswith("gauntlet.")]:
            ct.wire(modules=imported)
        register_loader_containers(ct, packages=["gauntlet"])

        ct.debug.override(debug)
        ct.env.override(env)
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

        if secrets_path is not None and secrets_path.scheme != "file":
            raise ValueError(f"unsupported scheme for secrets: {secrets_path.scheme}")
        secrets = Secrets(env=env, root=secrets_path or config_root)
        ct.secrets.from_pydantic(secrets)

        logger.debug(
            "configuration finished",
            extra={
                "config": str(config_root),
                "env": env.value,
            },
        )
        ct._boot_config.override(
            BootConfiguration(
                debug=debug, env=env, config_root=config_root, secrets_path=secrets_path, override=override or ()
            )
        )
