"""
Shared CLI runner helper.

Runs a command in the current environment and propagates its exit code.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence


def run(cmd: Sequence[str]) -> None:
    """
    Run a command and exit with its return code.

    Args:
        cmd: Command and arguments to execute

    Example:
        >>> run([sys.executable, "-m", "pytest", "-q"])
    """
    result = subprocess.run(list(cmd), check=False)
    raise SystemExit(result.returncode)
