from pathlib import Path
from typing import Any

import pytest

from lockstamp.patcher import (
    InvalidLockfile,
    PackageNotFound,
    VersionPatcher,
    find_version,
    find_version_toml,
    substitute_version,
    substitute_version_toml,
)


def test_substitute_version() -> None:
    text = 'name = "ram-machine"\nversion = "0.1.0"\n'
    actual, matched = substitute_version(text, "ram-machine", "0.2.0")
    assert matched
    assert actual == 'name = "ram-machine"\nversion = "0.2.0"\n'


def test_substitute_only_touches_the_package(test_project: Path) -> None:
    text = (test_project / "Cargo.lock").read_text()
    actual, matched = substitute_version(text, "ram-machine", "0.2.0")
    assert matched
    expected = text.replace(
        'name = "ram-machine"\nversion = "0.1.0"',
        'name = "ram-machine"\nversion = "0.2.0"',
    )
    assert actual == expected
    assert 'name = "ram-machine-macros"\nversion = "0.1.0"' in actual


def test_substitute_does_not_match_longer_names() -> None:
    text = (
        'name = "ram-machine-macros"\nversion = "0.1.0"\n\n'
        'name = "ram-machine"\nversion = "0.1.0"\n'
    )
    actual, _ = substitute_version(text, "ram-machine", "0.2.0")
    assert actual == (
        'name = "ram-machine-macros"\nversion = "0.1.0"\n\n'
        'name = "ram-machine"\nversion = "0.2.0"\n'
    )


def test_substitute_is_idempotent(test_project: Path) -> None:
    text = (test_project / "Cargo.lock").read_text()
    once, _ = substitute_version(text, "ram-machine", "1.0.0-rc.1")
    twice, _ = substitute_version(once, "ram-machine", "1.0.0-rc.1")
    assert once == twice


def test_substitute_inserts_tag_verbatim() -> None:
    text = 'name = "ram-machine"\nversion = "0.1.0"\n'
    actual, _ = substitute_version(text, "ram-machine", r"\1 \g<0> & $1")
    assert actual == 'name = "ram-machine"\nversion = "\\1 \\g<0> & $1"\n'


def test_substitute_no_match_returns_text_unchanged() -> None:
    text = 'name = "other"\nversion = "0.1.0"\n'
    actual, matched = substitute_version(text, "ram-machine", "0.2.0")
    assert not matched
    assert actual == text


def test_substitute_keeps_crlf_line_endings() -> None:
    text = 'name = "ram-machine"\r\nversion = "0.1.0"\r\nsource = "x"\r\n'
    actual, matched = substitute_version(text, "ram-machine", "0.2.0")
    assert matched
    assert actual == 'name = "ram-machine"\r\nversion = "0.2.0"\r\nsource = "x"\r\n'


def test_toml_strategy_agrees_with_regex(test_project: Path) -> None:
    text = (test_project / "Cargo.lock").read_text()
    with_regex, _ = substitute_version(text, "ram-machine", "0.2.0")
    with_toml, matched = substitute_version_toml(text, "ram-machine", "0.2.0")
    assert matched
    assert with_toml == with_regex


def test_toml_strategy_no_match(test_project: Path) -> None:
    text = (test_project / "Cargo.lock").read_text()
    actual, matched = substitute_version_toml(text, "no-such-crate", "0.2.0")
    assert not matched
    assert actual == text


def test_find_version(test_project: Path) -> None:
    text = (test_project / "Cargo.lock").read_text()
    assert find_version(text, "ram-machine") == "0.1.0"
    assert find_version(text, "clap") == "4.3.19"
    assert find_version(text, "no-such-crate") is None
    assert find_version_toml(text, "clap") == "4.3.19"
    assert find_version_toml(text, "no-such-crate") is None


def test_patch_in_place(test_copy: Path) -> None:
    cargo_lock = test_copy / "Cargo.lock"
    old_text = cargo_lock.read_text()
    patcher = VersionPatcher(cargo_lock)
    assert patcher.target_path == cargo_lock

    patcher.patch({"tag": "0.2.0"})

    new_text = cargo_lock.read_text()
    assert 'name = "ram-machine"\nversion = "0.2.0"' in new_text
    assert len(new_text.splitlines()) == len(old_text.splitlines())


def test_patch_to_other_file_leaves_lockfile_alone(test_copy: Path) -> None:
    cargo_lock = test_copy / "Cargo.lock"
    output = test_copy / "modified_dependencies.toml"
    old_contents = cargo_lock.read_bytes()
    patcher = VersionPatcher(cargo_lock, output_path=output)

    patcher.patch({"tag": "0.2.0"})

    assert cargo_lock.read_bytes() == old_contents
    assert 'name = "ram-machine"\nversion = "0.2.0"' in output.read_text()


def test_patch_overwrites_existing_output(test_copy: Path) -> None:
    output = test_copy / "modified_dependencies.toml"
    output.write_text("stale contents")
    patcher = VersionPatcher(test_copy / "Cargo.lock", output_path=output)

    patcher.patch({"tag": "0.2.0"})

    assert "stale contents" not in output.read_text()


def test_patch_preserves_crlf(tmp_path: Path) -> None:
    cargo_lock = tmp_path / "Cargo.lock"
    old_contents = b'[[package]]\r\nname = "ram-machine"\r\nversion = "0.1.0"\r\n'
    cargo_lock.write_bytes(old_contents)

    VersionPatcher(cargo_lock).patch({"tag": "0.2.0"})

    assert cargo_lock.read_bytes() == old_contents.replace(b"0.1.0", b"0.2.0")


def test_patch_no_match_writes_unchanged_copy(test_copy: Path) -> None:
    cargo_lock = test_copy / "Cargo.lock"
    output = test_copy / "modified_dependencies.toml"
    patcher = VersionPatcher(cargo_lock, "no-such-crate", output_path=output)

    patcher.patch({"tag": "0.2.0"})

    assert output.read_bytes() == cargo_lock.read_bytes()


def test_patch_strict_no_match(test_copy: Path) -> None:
    cargo_lock = test_copy / "Cargo.lock"
    output = test_copy / "modified_dependencies.toml"
    patcher = VersionPatcher(
        cargo_lock, "no-such-crate", output_path=output, strict=True
    )

    with pytest.raises(PackageNotFound) as e:
        patcher.patch({"tag": "0.2.0"})
    assert e.value.package == "no-such-crate"
    assert not output.exists()


def test_patch_missing_lockfile(tmp_path: Path) -> None:
    output = tmp_path / "modified_dependencies.toml"
    patcher = VersionPatcher(tmp_path / "Cargo.lock", output_path=output)

    with pytest.raises(FileNotFoundError):
        patcher.patch({"tag": "0.2.0"})
    assert not output.exists()


def test_patch_unwritable_output(test_copy: Path) -> None:
    output = test_copy / "no" / "such" / "dir" / "out.toml"
    patcher = VersionPatcher(test_copy / "Cargo.lock", output_path=output)

    with pytest.raises(OSError):
        patcher.patch({"tag": "0.2.0"})


def test_patch_with_toml_strategy(test_copy: Path) -> None:
    cargo_lock = test_copy / "Cargo.lock"
    patcher = VersionPatcher(cargo_lock, "clap", strategy="toml")

    patcher.patch({"tag": "4.4.0"})

    assert patcher.current_version() == "4.4.0"
    assert 'name = "clap"\nversion = "4.4.0"' in cargo_lock.read_text()


def test_current_version(test_project: Path) -> None:
    patcher = VersionPatcher(test_project / "Cargo.lock")
    assert patcher.current_version() == "0.1.0"


def test_unknown_strategy(test_project: Path) -> None:
    with pytest.raises(ValueError):
        VersionPatcher(test_project / "Cargo.lock", strategy="json")


def test_get_patch_does_not_write(test_copy: Path) -> None:
    cargo_lock = test_copy / "Cargo.lock"
    old_contents = cargo_lock.read_bytes()
    patch = VersionPatcher(cargo_lock).get_patch("0.2.0")

    assert patch.matched
    assert patch.in_place
    assert cargo_lock.read_bytes() == old_contents
    patch.print_self()


def test_warns_when_package_is_missing(test_copy: Path, mocker: Any) -> None:
    warning = mocker.patch("cli_ui.warning")
    VersionPatcher(test_copy / "Cargo.lock", "no-such-crate").get_patch("0.2.0")
    assert warning.called


def test_no_warning_when_package_is_found(test_copy: Path, mocker: Any) -> None:
    warning = mocker.patch("cli_ui.warning")
    VersionPatcher(test_copy / "Cargo.lock").get_patch("0.2.0")
    assert not warning.called


def test_toml_strategy_invalid_lockfile(tmp_path: Path) -> None:
    cargo_lock = tmp_path / "Cargo.lock"
    cargo_lock.write_text('[[package]\nname = "ram-machine"\nversion = "0.1.0"\n')
    patcher = VersionPatcher(cargo_lock, strategy="toml")

    with pytest.raises(InvalidLockfile) as e:
        patcher.patch({"tag": "0.2.0"})
    assert e.value.src == cargo_lock
    assert "0.1.0" in cargo_lock.read_text()


def test_patch_keeps_bytes_that_are_not_utf8(tmp_path: Path) -> None:
    cargo_lock = tmp_path / "Cargo.lock"
    old_contents = b'# caf\xe9\n[[package]]\nname = "ram-machine"\nversion = "0.1.0"\n'
    cargo_lock.write_bytes(old_contents)

    VersionPatcher(cargo_lock).patch({"tag": "0.2.0"})

    assert cargo_lock.read_bytes() == old_contents.replace(b"0.1.0", b"0.2.0")


def test_trailing_comment_after_version() -> None:
    text = 'name = "ram-machine"\nversion = "0.1.0" # "pinned"\n'
    assert find_version(text, "ram-machine") == "0.1.0"

    with_regex, _ = substitute_version(text, "ram-machine", "0.2.0")
    assert with_regex == 'name = "ram-machine"\nversion = "0.2.0" # "pinned"\n'
