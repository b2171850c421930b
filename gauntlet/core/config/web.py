from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings


class WebSettings(BaseSettings):
    gauntlet: GauntletWebSettings


class ServeSettings(BaseSettings):
    host: p.IPvAnyAddress
    port: t.Annotated[int, ant.Gt(0), ant.Le(65535)]


class AuthSettings(BaseSettings):
    """Authentication settings for JWT tokens."""

    jwt_algorithm: t.Literal["HS256"] = "HS256"
    access_token_expire_minutes: t.Annotated[int, ant.Gt(1)] = 240


class GauntletWebSettings(BaseSettings):
    """Settings for the gauntlet web application."""

    backend: ServeSettings
    frontend: ServeSettings | None = None
    auth: AuthSettings = AuthSettings()
