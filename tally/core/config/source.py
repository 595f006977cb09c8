import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

import tally.lib.util as util
from tally.model import DeploymentEnvironment

SkipKeys = frozenset({"env", "root", "override"})


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]


class SettingsCurrentState(CurrentState, total=False):
    override: t.Required[tuple[str, ...]]


class SettingsSource(PydanticBaseSettingsSource):
    def __call__(self) -> dict[str, t.Any]:
        # init kwargs are expected to carry the config root and env
        data: dict[str, t.Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            if field_name in SkipKeys:
                continue
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

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        """The config root, followed by the environment's ``env.d`` directory."""
        current_state = t.cast(CurrentState, self.current_state)
        root = current_state["root"]
        assert root.scheme == "file" and root.path is not None, "root is not a legible location of YAML files"
        env = current_state["env"]
        paths = [Path(root.path)]
        if env is not DeploymentEnvironment.Local:
            # local/ has no directory of its own, it's just the root
            paths.append(Path(root.path) / "env.d" / env.value)
        return paths

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value


class OverrideSettingsSource(SettingsSource):
    """Values given on the command line as ``-o section.key=value``, parsed as YAML scalars."""

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        od: dict[str, t.Any] = {}
        for path, v in util.parse_override(current_state.get("override", ())):
            target = od
            for key in path[:-1]:
                target = target.setdefault(key, {})
            target[path[-1]] = yaml.safe_load(v)
        return od

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name not in self.parsed_options:
            raise KeyError(field_name)
        value = self.parsed_options[field_name]
        return value, field_name, isinstance(value, dict)


class YAMLCascadingSettingsSource(SettingsSource):
    """Reads ``<field>.yaml`` from each load path; the most specific file wins."""

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

        # complex values arrive as the list of YAML documents found along
        # load_paths
        if not isinstance(value, list):
            raise ValueError(field_name)
        yamls = t.cast(list[str], value)
        return yaml.safe_load(yamls[-1])


class YAMLSecretsSource(SettingsSource):
    """Reads sections of ``secrets.yaml`` under the secrets root, merged along the load paths."""

    @functools.cached_property
    def secrets(self) -> dict[str, t.Any]:
        merged: dict[str, t.Any] = {}
        for path in self.load_paths:
            fn = path / "secrets.yaml"
            if fn.exists():
                with fn.open(encoding="utf8") as f:
                    merged = util.deep_update(merged, yaml.safe_load(f) or {})
        return merged

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name not in self.secrets:
            raise KeyError(field_name)
        value = self.secrets[field_name]
        return value, field_name, isinstance(value, dict)
