from __future__ import annotations

import alembic.command
import alembic.config

import gauntlet.lib.cli as click
from gauntlet.core import di


@click.group("schema")
def schema(): ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def current(verbose: bool, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    """Show the revision the database is at."""
    alembic.command.current(alembic_conf, verbose=verbose)


@schema.command()
@click.argument("message")
@click.option("--autogenerate/--no-autogenerate", default=True)
@di.inject
def generate(
    message: str,
    autogenerate: bool,
    alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"],
):
    """Write a new migration, by default diffed against the candidates table."""
    alembic.command.revision(alembic_conf, message, autogenerate=autogenerate)


@schema.command()
@click.argument("revision", default="head")
@di.inject
def up(revision: str, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    """Migrate the database forward, to the latest revision unless one is named."""
    alembic.command.upgrade(alembic_conf, revision)


@schema.command()
@click.argument("revision", default="-1")
@di.inject
def down(revision: str, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    """Migrate the database back, one revision unless one is named."""
    alembic.command.downgrade(alembic_conf, revision)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def history(verbose: bool, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.history(alembic_conf, verbose=verbose, indicate_current=True)


@schema.command()
@click.argument("revision")
@di.inject
def stamp(revision: str, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.stamp(alembic_conf, revision)
