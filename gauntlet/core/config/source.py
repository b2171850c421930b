import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

import gauntlet.lib.util as util
from gauntlet.model import DeploymentEnvironment

SkipKeys = frozenset({"env", "root", "override"})


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]


class SettingsCurrentState(CurrentState, total=False):
    override: t.Required[tuple[str, ...]]


def _env_paths(root: p.AnyUrl, env: DeploymentEnvironment) -> list[Path]:
    assert root.scheme == "file" and root.path is not None, "root is not a legible location of YAML files"
    paths = [Path(root.path)]
    if env is not DeploymentEnvironment.Local:
        # we don't have a special directory for local/ that's just root
        paths.append(Path(root.path) / "env.d" / env.value)
    return paths


class SettingsSource(PydanticBaseSettingsSource):
    def __call__(self) -> dict[str, t.Any]:
        # we expect init kwargs to have config root and env in them
        data: dict[str, t.Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            try:
                field_value, field_key, value_is_complex = self.get_field_value(field, field_name)
                field_value = self.prepare_field_value(field_name, field, field_value, value_is_complex)
            except KeyError:
                continue
            except ValueError as e:
                raise SettingsError(f"error parsing value for field {field_name!r} from source {self!r}") from e
            except Exception as e:
                raise SettingsError(f"error getting value for field {field_name!r} from source {self!r}") from e

            data[field_key] = field_value
        return data

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value


class OverrideSettingsSource(SettingsSource):
    """Apply `-o dotted.path=value` overrides; must precede the YAML source."""

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        od: dict[str, t.Any] = {}
        for o in current_state["override"]:
            k, v = [s.strip() for s in o.split("=", 1)]

            target = od
            path = k.split(".")
            for key in path[:-1]:
                target = target.setdefault(key, {})
            target[path[-1]] = yaml.safe_load(v)
        return od

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in SkipKeys or field_name not in self.parsed_options:
            raise KeyError(field_name)
        # partial values are fine: pydantic-settings deep-merges them over later sources
        val = self.parsed_options[field_name]
        return val, field_name, isinstance(val, dict)


class YAMLCascadingSettingsSource(SettingsSource):
    """Read `<field>.yaml` from the config root, deep-merged with `env.d/<env>/<field>.yaml`."""

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        return _env_paths(current_state["root"], current_state["env"])

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        yamls: list[str] = []
        for path in self.load_paths:
            fn = path / f"{field_name}.yaml"
            if fn.exists():
                yamls.append(fn.read_text(encoding="utf8"))
        if not yamls:
            raise KeyError(field_name)
        return yamls, field_name, True

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        if not value_is_complex:
            return super().prepare_field_value(field_name, field, value, value_is_complex)

        # for complex values, we expect to be given a list[str] representing
        # the yamls encountered along the load_paths
        if not isinstance(value, list):
            raise ValueError(field_name)
        merged: t.Any = None
        for doc in t.cast(list[str], value):
            loaded = yaml.safe_load(doc)
            if isinstance(merged, dict) and isinstance(loaded, dict):
                merged = util.deep_update(t.cast(dict[t.Any, t.Any], merged), t.cast(dict[t.Any, t.Any], loaded))
            else:
                merged = loaded
        return merged


class YAMLSecretsSource(SettingsSource):
    """Read `secrets.yaml` from the secrets root, deep-merged with its env.d/<env> counterpart."""

    @functools.cached_property
    def secrets(self) -> dict[str, t.Any]:
        current_state = t.cast(CurrentState, self.current_state)
        merged: dict[str, t.Any] = {}
        for path in _env_paths(current_state["root"], current_state["env"]):
            fn = path / "secrets.yaml"
            if fn.exists():
                loaded = yaml.safe_load(fn.read_text(encoding="utf8")) or {}
                merged = util.deep_update(merged, loaded)
        return merged

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        # skip keys are checked first since self.secrets needs current_state["root"]
        if field_name in SkipKeys or field_name not in self.secrets:
            raise KeyError(field_name)
        val = self.secrets[field_name]
        return val, field_name, isinstance(val, dict)
