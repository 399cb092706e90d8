import sys
import textwrap
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union, cast

import cli_ui as ui
import docopt

from lockstamp.config import Config, get_config
from lockstamp.error import Error
from lockstamp.executor import Executor, StageFile
from lockstamp.init import init
from lockstamp.patcher import LockfileNotFound, PackageNotFound, VersionPatcher

LOCKSTAMP_VERSION = "1.0.0"

USAGE = textwrap.dedent(
    """
Usage:
  lockstamp [options] [--] <tag>
  lockstamp [options] current-version
  lockstamp [options] init [--pyproject]
  lockstamp --help
  lockstamp --version

Options:
   -h --help              Show this screen.
   -v --version           Show version.
   -C --cwd=<path>        Set working directory to <path>.
   -c --config=<path>     Use specified toml config file. When not set, `lockstamp.toml` is assumed.
   -l --lockfile=<path>   Path of the lockfile to patch.
   -p --package=<name>    Name of the package whose version is stamped.
   -o --output=<path>     Write the patched lockfile to <path> instead of overwriting it.
   --strict               Fail if the package can not be found in the lockfile.
   --stage                Run `git add` on the patched file.
   --dry-run              Only display the changes that would be made.

To stamp a tag spelled like a command (`init`, `current-version`),
put it after `--`.
"""
)


class Command(Enum):
    stamp = "stamp"
    init = "init"
    current_version = "current_version"
    version = "version"


@dataclass
class GivenCliArguments:
    """
    Values of the CLI arguments that were given.

    Bool values indicate that that argument was given, NOT the intended behavior of the program.
    """

    command: Command
    tag: Optional[str]
    init_pyproject: bool
    working_path: Optional[Path]
    config_path: Optional[Path]
    lockfile: Optional[Path]
    package: Optional[str]
    output: Optional[Path]
    strict: bool
    stage: bool
    dry_run: bool

    @classmethod
    def from_opts(
        cls, opt_dict: Dict[str, Union[bool, Optional[str]]]
    ) -> "GivenCliArguments":
        def _get_path(key: str) -> Optional[Path]:
            value = opt_dict[key]
            if value is None:
                return None
            return Path(cast(str, value))

        def _get_str(key: str) -> Optional[str]:
            return cast(Optional[str], opt_dict[key])

        def _get_bool(key: str) -> bool:
            return cast(bool, opt_dict[key])

        # docopt can't tell the sub-commands apart from a tag, since
        # they all use the same positional slot. A tag given after `--`
        # is always a tag.
        command = Command.stamp
        tag = opt_dict["<tag>"]
        if opt_dict["--"]:
            command = Command.stamp
        elif tag == "init" or opt_dict["init"]:
            command = Command.init
        elif tag == "current-version" or opt_dict["current-version"]:
            command = Command.current_version
        elif opt_dict["--version"]:
            command = Command.version

        return cls(
            command=command,
            tag=_get_str("<tag>"),
            init_pyproject=_get_bool("--pyproject"),
            working_path=_get_path("--cwd"),
            config_path=_get_path("--config"),
            lockfile=_get_path("--lockfile"),
            package=_get_str("--package"),
            output=_get_path("--output"),
            strict=_get_bool("--strict"),
            stage=_get_bool("--stage"),
            dry_run=_get_bool("--dry-run"),
        )


def get_effective_config(arguments: GivenCliArguments, working_path: Path) -> Config:
    """Config from the project, overridden by command-line options"""
    config = get_config(working_path, specified_config_path=arguments.config_path)
    if arguments.lockfile:
        config.lockfile = working_path / arguments.lockfile
    if arguments.package:
        config.package = arguments.package
    if arguments.output:
        config.output = working_path / arguments.output
    if arguments.strict:
        config.strict = True
    if arguments.stage:
        config.stage = True
    return config


def get_patcher(config: Config) -> VersionPatcher:
    if not config.lockfile.exists():
        raise LockfileNotFound(src=config.lockfile)
    return VersionPatcher(
        config.lockfile,
        config.package,
        output_path=config.output,
        strategy=config.strategy,
        strict=config.strict,
    )


def run(cmd: List[str]) -> None:
    opt_dict = docopt.docopt(USAGE, argv=cmd)
    arguments = GivenCliArguments.from_opts(opt_dict)

    if arguments.command == Command.version:
        print("lockstamp", LOCKSTAMP_VERSION)
        return

    # if a path wasn't given, use current working directory
    working_path = arguments.working_path or Path.cwd()

    if arguments.command == Command.init:
        init(
            working_path,
            use_pyproject=arguments.init_pyproject,
            specified_config_path=arguments.config_path,
        )
        return

    config = get_effective_config(arguments, working_path)

    if arguments.command == Command.current_version:
        run_current_version(config)
        return

    stamp(config, working_path, cast(str, arguments.tag), dry_run=arguments.dry_run)


def run_current_version(config: Config) -> None:
    patcher = get_patcher(config)
    current_version = patcher.current_version()
    if current_version is None:
        raise PackageNotFound(src=config.lockfile, package=config.package)
    print(current_version)


def stamp(config: Config, working_path: Path, tag: str, *, dry_run: bool) -> None:
    patcher = get_patcher(config)

    # fmt: off
    ui.info_1(
        "Stamping", ui.bold, config.package, ui.reset,
        "with", ui.bold, tag,
    )
    # fmt: on

    executor = Executor()
    executor.add_patch(patcher.get_patch(tag))
    if config.stage:
        executor.add_stage(StageFile(working_path, patcher.target_path))

    if dry_run:
        executor.print_self(dry_run=True)
        return

    executor.run()


def main(args: Optional[List[str]] = None) -> None:
    # Suppress backtrace if exception derives from Error
    if not args:
        args = sys.argv[1:]
    try:
        run(args)
    except Error as error:
        error.print_error()
        sys.exit(1)
