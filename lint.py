import subprocess
import sys
from typing import Dict, List, Optional

import cli_ui as ui


class Check:
    def __init__(self, name: str, cmd: List[str], env: Optional[Dict[str, str]] = None):
        self.name = name
        self.cmd = cmd
        self.ok = False
        self.env = env

    def run(self) -> None:
        ui.info_2(self.name)
        rc = subprocess.call([sys.executable, "-m"] + self.cmd, env=self.env)
        self.ok = rc == 0


def init_checks() -> List[Check]:
    return [
        Check("black", ["black", "--check", "--diff", "."]),
        Check("flake8", ["flake8", "lockstamp", "lint.py", "setup.py"]),
        Check("mypy", ["mypy", "--ignore-missing-imports", "lockstamp"]),
    ]


def main() -> None:
    ui.info_1("Starting lintings")
    check_list = sys.argv[1:]
    checks = init_checks()
    if check_list:
        checks = [c for c in checks if c.name in check_list]
    for check in checks:
        check.run()
    failed_checks = [check for check in checks if not check.ok]
    if not failed_checks:
        ui.info(ui.check, "All lints passed")
        return
    for check in failed_checks:
        ui.error(check.name, "failed")
    sys.exit(1)


if __name__ == "__main__":
    main()
