import re
from pathlib import Path
from typing import Any, Mapping, Optional, Pattern, Tuple

import cli_ui as ui
import tomlkit
from tomlkit.exceptions import ParseError
from tomlkit.items import AoT

from lockstamp.config import DEFAULT_PACKAGE, STRATEGIES
from lockstamp.error import Error
from lockstamp.executor import Action

ENCODING = "utf-8"
# Bytes that are not valid UTF-8 round-trip unchanged
ERRORS = "surrogateescape"


def get_block_regex(package: str) -> Pattern[str]:
    """Match the `name = "<package>"` line of a lockfile block, followed
    by its `version = ` key on the next line.

    Group 1 is everything up to the opening quote of the version value,
    group 2 is the version itself.
    """
    return re.compile(
        r'(name = "%s"\r?\nversion = )"([^"]*)"' % re.escape(package),
    )


def substitute_version(text: str, package: str, tag: str) -> Tuple[str, bool]:
    """Replace the version of `package` in the lockfile `text` by `tag`.

    Only the first matching block is changed. Return the new text, and
    whether a block was found at all; when it was not, the text is
    returned unchanged.
    """
    regex = get_block_regex(package)
    new_text, count = regex.subn(
        lambda match: '%s"%s"' % (match.group(1), tag), text, count=1
    )
    return new_text, count == 1


def find_version(text: str, package: str) -> Optional[str]:
    match = get_block_regex(package).search(text)
    if match is None:
        return None
    return match.group(2)


def _find_package_table(doc: tomlkit.TOMLDocument, package: str) -> Any:
    packages = doc.get("package")
    if not isinstance(packages, AoT):
        return None
    for table in packages:
        if table.get("name") == package:
            return table
    return None


def substitute_version_toml(text: str, package: str, tag: str) -> Tuple[str, bool]:
    """Same as substitute_version(), but go through tomlkit instead
    of a regex. Formatting of untouched keys is preserved.
    """
    doc = tomlkit.parse(text)
    table = _find_package_table(doc, package)
    if table is None:
        return text, False
    table["version"] = tag
    return tomlkit.dumps(doc), True


def find_version_toml(text: str, package: str) -> Optional[str]:
    table = _find_package_table(tomlkit.parse(text), package)
    if table is None or "version" not in table:
        return None
    return str(table["version"])


SUBSTITUTIONS = {
    "regex": (substitute_version, find_version),
    "toml": (substitute_version_toml, find_version_toml),
}


class PackageNotFound(Error):
    def __init__(self, *, src: Path, package: str):
        super().__init__()
        self.src = src
        self.package = package

    def print_error(self) -> None:
        ui.error("No version found for", ui.bold, self.package, ui.reset, "in", self.src)


class InvalidLockfile(Error):
    def __init__(self, *, src: Path, parse_error: Exception):
        super().__init__()
        self.src = src
        self.parse_error = parse_error

    def print_error(self) -> None:
        ui.error("Could not parse", self.src, ":", self.parse_error)


class LockfileNotFound(Error):
    def __init__(self, *, src: Path):
        super().__init__()
        self.src = src

    def print_error(self) -> None:
        ui.error(self.src, "does not exist")


class LockfilePatch(Action):
    def __init__(
        self,
        src: Path,
        dest: Path,
        old_text: str,
        new_text: str,
        *,
        matched: bool,
    ):
        super().__init__()
        self.src = src
        self.dest = dest
        self.old_text = old_text
        self.new_text = new_text
        self.matched = matched

    @property
    def in_place(self) -> bool:
        return self.src == self.dest

    def print_self(self) -> None:
        if not self.in_place:
            ui.info(ui.darkgray, self.src, "->", self.dest)
        old_lines = self.old_text.splitlines()
        new_lines = self.new_text.splitlines()
        for lineno, (old_line, new_line) in enumerate(zip(old_lines, new_lines)):
            if old_line != new_line:
                print_diff(self.dest.name, lineno + 1, old_line, new_line)

    def do(self) -> None:
        self.apply()

    def apply(self) -> None:
        ui.debug("Writing", len(self.new_text), "characters to", self.dest)
        self.dest.write_bytes(self.new_text.encode(ENCODING, ERRORS))


def print_diff(filename: str, lineno: int, old: str, new: str) -> None:
    # fmt: off
    ui.info(
        ui.red, "- ", ui.reset,
        ui.bold, filename, ":", lineno, ui.reset,
        " ", ui.red, old,
        sep="",
    )
    ui.info(
        ui.green, "+ ", ui.reset,
        ui.bold, filename, ":", lineno, ui.reset,
        " ", ui.green, new,
        sep="",
    )
    # fmt: on


class VersionPatcher:
    """Stamp a version into the block of one package inside a lockfile.

    By default the lockfile is overwritten in place. When `output_path`
    is given, the patched text goes there instead, and the lockfile
    itself is left untouched.

    A lockfile that does not contain the package is not an error,
    unless `strict` is set: the text is then written back unchanged.
    """

    def __init__(
        self,
        lockfile_path: Path,
        package: str = DEFAULT_PACKAGE,
        *,
        output_path: Optional[Path] = None,
        strategy: str = "regex",
        strict: bool = False,
    ):
        if strategy not in STRATEGIES:
            raise ValueError("unknown strategy: %s" % strategy)
        self.lockfile_path = lockfile_path
        self.package = package
        self.output_path = output_path
        self.strategy = strategy
        self.strict = strict

    @property
    def target_path(self) -> Path:
        return self.output_path or self.lockfile_path

    def read(self) -> str:
        ui.debug("Reading", self.lockfile_path)
        return self.lockfile_path.read_bytes().decode(ENCODING, ERRORS)

    def current_version(self) -> Optional[str]:
        _, find = SUBSTITUTIONS[self.strategy]
        text = self.read()
        try:
            return find(text, self.package)
        except ParseError as e:
            raise InvalidLockfile(src=self.lockfile_path, parse_error=e)

    def get_patch(self, tag: str) -> LockfilePatch:
        old_text = self.read()
        substitute, _ = SUBSTITUTIONS[self.strategy]
        try:
            new_text, matched = substitute(old_text, self.package, tag)
        except ParseError as e:
            raise InvalidLockfile(src=self.lockfile_path, parse_error=e)
        if not matched:
            if self.strict:
                raise PackageNotFound(src=self.lockfile_path, package=self.package)
            # fmt: off
            ui.warning(
                "No version found for", ui.bold, self.package, ui.reset,
                "in", self.lockfile_path, "- writing it back unchanged",
            )
            # fmt: on
        return LockfilePatch(
            self.lockfile_path, self.target_path, old_text, new_text, matched=matched
        )

    def patch(self, props: Mapping[str, Any]) -> None:
        patch = self.get_patch(props["tag"])
        patch.apply()
