from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import cli_ui as ui
import schema
import tomlkit
from tomlkit.exceptions import ParseError

from lockstamp.error import Error

DEFAULT_LOCKFILE = "Cargo.lock"
DEFAULT_PACKAGE = "ram-machine"
STRATEGIES = ("regex", "toml")


@dataclass
class Config:
    lockfile: Path
    package: str = DEFAULT_PACKAGE
    output: Optional[Path] = None
    strategy: str = "regex"
    strict: bool = False
    stage: bool = False

    @property
    def target(self) -> Path:
        return self.output or self.lockfile


class ConfigFile:
    """A lockstamp.toml file, or the [tool.lockstamp] table of
    a pyproject.toml file
    """

    def __init__(self, project_path: Path, path: Path, parsed: dict):
        self.project_path = project_path
        self.path = path
        self.parsed = parsed

    def get_config(self) -> Config:
        """Return a validated Config instance"""
        return from_parsed_config(self.project_path, self.parsed)


def validate_strategy(value: str) -> str:
    if value not in STRATEGIES:
        message = "lockfile.strategy should be one of %s, got '%s'" % (
            ", ".join(STRATEGIES),
            value,
        )
        raise schema.SchemaError(message)
    return value


def validate_package(value: str) -> str:
    if not value.strip():
        raise schema.SchemaError("lockfile.package should not be empty")
    return value


def validate_basic_schema(parsed: dict) -> None:
    lockfile_schema = schema.Schema(
        {
            schema.Optional("path"): str,
            schema.Optional("package"): schema.And(str, validate_package),
            schema.Optional("output"): str,
            schema.Optional("strategy"): schema.And(str, validate_strategy),
            schema.Optional("strict"): bool,
        }
    )
    git_schema = schema.Schema({schema.Optional("stage"): bool})
    lockstamp_schema = schema.Schema(
        {
            schema.Optional("lockfile"): lockfile_schema,
            schema.Optional("git"): git_schema,
        }
    )
    lockstamp_schema.validate(parsed)


def from_parsed_config(project_path: Path, parsed: dict) -> Config:
    validate_basic_schema(parsed)
    lockfile_section = parsed.get("lockfile", {})
    git_section = parsed.get("git", {})

    output = lockfile_section.get("output")
    return Config(
        lockfile=project_path / lockfile_section.get("path", DEFAULT_LOCKFILE),
        package=lockfile_section.get("package", DEFAULT_PACKAGE),
        output=project_path / output if output else None,
        strategy=lockfile_section.get("strategy", "regex"),
        strict=lockfile_section.get("strict", False),
        stage=git_section.get("stage", False),
    )


def unwrap_data(data: Any) -> Any:
    if hasattr(data, "unwrap") and callable(data.unwrap):
        return data.unwrap()
    else:
        return data


def get_config_file(
    project_path: Path, *, specified_config_path: Optional[Path] = None
) -> Optional[ConfigFile]:
    """Return the config file for the project, or None when there is
    none, in which case defaults apply.

    Raise InvalidConfig if the file can not be read or does not
    match the expected schema.
    """
    try:
        found = _find_config(project_path, specified_config_path)
        if found is None:
            return None
        config_path, parsed = found
        res = ConfigFile(project_path, config_path, parsed)
        # Make sure config is correct before returning it
        res.get_config()
        return res
    except IOError as io_error:
        raise InvalidConfig(io_error=io_error)
    except (schema.SchemaError, ParseError) as parse_error:
        raise InvalidConfig(parse_error=parse_error)


def _find_config(
    project_path: Path, specified_config_path: Optional[Path] = None
) -> Optional[Tuple[Path, dict]]:
    if specified_config_path:
        doc = tomlkit.loads(specified_config_path.read_text())
        return specified_config_path, unwrap_data(doc)

    toml_path = project_path / "lockstamp.toml"
    if toml_path.exists():
        doc = tomlkit.loads(toml_path.read_text())
        return toml_path, unwrap_data(doc)

    pyproject_path = project_path / "pyproject.toml"
    if pyproject_path.exists():
        doc = tomlkit.loads(pyproject_path.read_text())
        tool_section = doc.get("tool", {}).get("lockstamp")
        if tool_section is not None:
            return pyproject_path, unwrap_data(tool_section)

    return None


def get_config(
    project_path: Path, *, specified_config_path: Optional[Path] = None
) -> Config:
    config_file = get_config_file(
        project_path, specified_config_path=specified_config_path
    )
    if config_file is None:
        ui.debug("No lockstamp config found in", project_path, "using defaults")
        return Config(lockfile=project_path / DEFAULT_LOCKFILE)
    ui.debug("Using config from", config_file.path)
    return config_file.get_config()


class InvalidConfig(Error):
    def __init__(
        self,
        io_error: Optional[IOError] = None,
        parse_error: Optional[Exception] = None,
    ):
        super().__init__()
        self.io_error = io_error
        self.parse_error = parse_error

    def print_error(self) -> None:
        if self.io_error:
            ui.error("Could not read config file:", self.io_error)
        if self.parse_error:
            ui.error("Invalid config:", self.parse_error)
