"""Entry points meant to be called by a commit hook runner.

A hook receives a mapping of properties. The only one lockstamp
looks at is `tag`, the version to stamp into the lockfile.
"""
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import cli_ui as ui
import schema

from lockstamp.config import get_config
from lockstamp.error import Error
from lockstamp.patcher import VersionPatcher

# Where the patched lockfile goes when it must not be overwritten
MODIFIED_DEPENDENCIES = "modified_dependencies.toml"

PROPS_SCHEMA = schema.Schema({"tag": str}, ignore_extra_keys=True)


class InvalidProps(Error):
    def __init__(self, *, props: Mapping[str, Any], parse_error: Exception):
        super().__init__()
        self.props = props
        self.parse_error = parse_error

    def print_error(self) -> None:
        ui.error("Invalid hook properties:", self.parse_error)


def validate_props(props: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        return PROPS_SCHEMA.validate(dict(props))
    except schema.SchemaError as e:
        raise InvalidProps(props=props, parse_error=e)


def pre_commit(
    props: Mapping[str, Any],
    *,
    working_path: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> None:
    """Stamp `props["tag"]` into the lockfile of the project
    in `working_path` (current directory by default).

    Errors reading or writing files are not caught.
    """
    valid_props = validate_props(props)
    working_path = working_path or Path(".")
    config = get_config(working_path, specified_config_path=config_path)
    patcher = VersionPatcher(
        config.lockfile,
        config.package,
        output_path=config.output,
        strategy=config.strategy,
        strict=config.strict,
    )
    patcher.patch(valid_props)


HOOKS: Dict[str, Callable[..., None]] = {
    "pre_commit": pre_commit,
}
