import os
import shutil
from pathlib import Path
from typing import Iterator

import pytest

from lockstamp.git import run_git


@pytest.fixture
def test_project() -> Path:
    this_dir = Path(__file__).absolute().parent
    return this_dir / "project"


@pytest.fixture
def test_copy(tmp_path: Path, test_project: Path) -> Path:
    """A copy of the test project that tests are free to modify"""
    src_path = tmp_path / "src"
    shutil.copytree(test_project, src_path)
    return src_path


@pytest.fixture(autouse=True, scope="session")
def restore_cwd() -> Iterator[None]:
    old_cwd = os.getcwd()
    yield
    os.chdir(old_cwd)


def file_contains(path: Path, text: str) -> bool:
    return text in path.read_text()


@pytest.fixture
def test_repo(test_copy: Path) -> Path:
    run_git(test_copy, "init", "--initial-branch", "master")
    run_git(test_copy, "config", "user.email", "test@example.com")
    run_git(test_copy, "config", "user.name", "Test")
    run_git(test_copy, "add", ".")
    run_git(test_copy, "commit", "--message", "initial commit")
    return test_copy
