import abc
from pathlib import Path
from typing import List, Sequence

import cli_ui as ui

from lockstamp.git import run_git


class Action(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def print_self(self) -> None:
        pass

    @abc.abstractmethod
    def do(self) -> None:
        pass


class StageFile(Action):
    """Add a patched file to the index of the commit being prepared"""

    def __init__(self, working_path: Path, path: Path):
        self.working_path = working_path
        self.path = path

    @property
    def relative_path(self) -> str:
        try:
            return str(self.path.resolve().relative_to(self.working_path.resolve()))
        except ValueError:
            return str(self.path)

    def print_self(self) -> None:
        ui.info(ui.darkgray, "$", ui.reset, "git", "add", self.relative_path)

    def do(self) -> None:
        run_git(self.working_path, "add", self.relative_path)


class ActionGroup:
    def __init__(self, dry_run_desc: str, desc: str, actions: Sequence[Action]):
        self.desc = desc
        self.dry_run_desc = dry_run_desc
        self.actions = actions

    def print_group(self, dry_run: bool = False) -> None:
        if not self.actions:
            return
        if dry_run:
            ui.info_2(self.dry_run_desc)
        else:
            ui.info_2(self.desc)
        for action in self.actions:
            action.print_self()

    def execute(self) -> None:
        for action in self.actions:
            action.do()


class Executor:
    def __init__(self) -> None:
        self.work: List[ActionGroup] = []

    def add_patch(self, patch: Action) -> None:
        self.work.append(ActionGroup("Would patch", "Patching", [patch]))

    def add_stage(self, stage: StageFile) -> None:
        self.work.append(
            ActionGroup("Would run these git commands", "Staging changes", [stage])
        )

    def print_self(self, *, dry_run: bool = False) -> None:
        for action_group in self.work:
            action_group.print_group(dry_run=dry_run)

    def run(self) -> None:
        for action_group in self.work:
            action_group.print_group(dry_run=False)
            action_group.execute()
