from __future__ import annotations

import importlib
import sys
import threading
import traceback
import types
import typing as t
from pathlib import Path

import pydantic as p

import gauntlet
import gauntlet.lib.cli as click
from gauntlet.core import di, GauntletContainer
from gauntlet.model import DeploymentEnvironment

_configured = False
_GauntletRoot = Path(gauntlet.__file__).resolve().parents[1]

_wiring: list[types.ModuleType] = []


Commands: t.Final = ("candidate", "schema", "web")


class GauntletMultiCommand(click.Group):
    """Imports each command module on demand; loaded modules are wired at boot."""

    def list_commands(self, ctx: click.Context) -> t.List[str]:
        return list(Commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Group | None:
        if cmd_name not in Commands:
            return None
        mod = importlib.import_module(f"gauntlet.cli.{cmd_name}")
        _wiring.append(mod)
        return getattr(mod, cmd_name)


@click.group(cls=GauntletMultiCommand)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=_GauntletRoot / "config", type=click.URIParamType(dir_ok=True))
@click.option("-s", "--secrets-path", default=None, type=click.URIParamType(dir_ok=True))
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="configuration path parameter-value pairs to override config with, e.g., -o gauntlet.window_days=10",
)
@click.option("-D", "--debug", is_flag=True, default=False)
@click.pass_obj
@di.inject
def main(
    ct: GauntletContainer,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    secrets_path: p.AnyUrl | None,
    override: tuple[str, ...],
    debug: bool,
):
    global _configured
    GauntletContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        secrets_path=secrets_path,
        override=override,
        wiring=tuple(_wiring),
    )
    _configured = True


def execute_command(*_args: str) -> None:
    threading.current_thread().name = "gauntlet-0"
    args = list(_args or sys.argv)

    # Strip away full path to fix program name in help message
    args[0] = Path(args[0]).name
    container = GauntletContainer()

    try:
        with main.make_context(args[0], args=args[1:]) as ctx:
            ctx.obj = container
            rs = t.cast(int, main.invoke(ctx))
            sys.exit(rs)
    except (EOFError, KeyboardInterrupt, click.Abort):
        click.echo("Aborted!", file=sys.stderr)
        sys.exit(1)
    except click.exceptions.Exit:
        sys.exit(0)
    except Exception as ex:
        click.echo(click.style("ERROR ", fg="red"), nl=False, file=sys.stderr)
        click.echo(str(ex), file=sys.stderr)

        if container.debug() or (not _configured and "-D" in sys.argv[1:]):
            traceback.print_exc()
        if isinstance(ex, click.ClickException):
            sys.exit(ex.exit_code)
        sys.exit(-1)
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    execute_command(*sys.argv)
