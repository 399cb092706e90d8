import subprocess
from pathlib import Path
from typing import List, Optional

import cli_ui as ui

from lockstamp.error import Error


class GitCommandError(Error):
    def __init__(
        self, cmd: List[str], working_path: Path, output: Optional[str] = None
    ):
        super().__init__()
        self.cmd = cmd
        self.output = output
        self.working_path = working_path

    def print_error(self) -> None:
        cmd_str = " ".join(self.cmd)
        ui.error("Command", "`%s`" % cmd_str, "failed in", self.working_path)
        if self.output:
            ui.info(self.output)


def run_git(working_path: Path, *cmd: str, verbose: bool = False) -> str:
    """Run git `cmd` in given `working_path` and return its output

    Displays the command ran if `verbose` is True

    Raise GitCommandError if return code is non-zero.
    """
    git_cmd = ["git", *cmd]
    if verbose:
        ui.info(ui.darkgray, "$", ui.reset, *git_cmd)
    else:
        ui.debug(ui.lightgray, working_path, "$", ui.reset, *git_cmd)

    process = subprocess.run(
        git_cmd,
        cwd=working_path,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )
    output = process.stdout.decode("utf-8").strip("\n")
    ui.debug(ui.lightgray, "[%i]" % process.returncode, ui.reset, output)
    if process.returncode != 0:
        raise GitCommandError(cmd=git_cmd, working_path=working_path, output=output)
    return output
