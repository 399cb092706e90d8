import textwrap
from pathlib import Path
from typing import Optional

import cli_ui as ui

from lockstamp.config import DEFAULT_LOCKFILE, DEFAULT_PACKAGE
from lockstamp.error import Error


class ConfigAlreadyExists(Error):
    def __init__(self, cfg_path: Path):
        super().__init__()
        self.cfg_path = cfg_path

    def print_error(self) -> None:
        ui.error(self.cfg_path, "already exists")


def init(
    working_path: Path,
    *,
    use_pyproject: bool = False,
    specified_config_path: Optional[Path] = None,
) -> Path:
    """Create a new lockstamp.toml, or append a [tool.lockstamp]
    section to pyproject.toml

    Return the path of the file written.
    """
    if use_pyproject:
        text = "\n[tool.lockstamp]\n"
        key_prefix = "tool.lockstamp."
        cfg_path = working_path / "pyproject.toml"
    else:
        text = ""
        key_prefix = ""
        if specified_config_path:
            cfg_path = specified_config_path
        else:
            cfg_path = working_path / "lockstamp.toml"
        if cfg_path.exists():
            raise ConfigAlreadyExists(cfg_path)
    ui.info_1("Generating lockstamp config file")
    text += textwrap.dedent(
        """\
        [@key_prefix@lockfile]
        # Path of the lockfile, relative to the working directory
        path = "@lockfile@"

        # Name of the package whose version gets stamped
        package = "@package@"

        # Uncomment to leave the lockfile alone and write
        # the patched copy somewhere else:
        # output = "modified_dependencies.toml"

        # "regex" only touches the `version = ` line following the
        # package name; "toml" parses and re-serializes the lockfile
        strategy = "regex"

        # Fail instead of writing the lockfile back unchanged when
        # the package can not be found
        strict = false

        [@key_prefix@git]
        # Run `git add` on the patched file
        stage = false
    """
    )

    text = text.replace("@key_prefix@", key_prefix)
    text = text.replace("@lockfile@", DEFAULT_LOCKFILE)
    text = text.replace("@package@", DEFAULT_PACKAGE)
    with cfg_path.open("a") as f:
        f.write(text)
    ui.info_2(ui.check, "Generated", cfg_path)
    return cfg_path
