"""Thin wrappers around the external Proxmox command-line tools.

Everything that mutates a VM goes through ``qm``.  Output is streamed line by
line so the caller can show it live while the command is still running.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)

OutputFn = Callable[[str], None]

# Executables the deployer needs on the node, with an install hint each
REQUIRED_TOOLS = {
    "qm": "This tool must be run on a Proxmox PVE node.",
    "pvesh": "This tool must be run on a Proxmox PVE node.",
}

# Options whose value must never reach a log
_SECRET_OPTIONS = ("--cipassword",)


@dataclass
class CommandResult:
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def check_dependencies(tools: Optional[dict[str, str]] = None) -> list[str]:
    """Return the names of required executables missing from PATH."""
    tools = REQUIRED_TOOLS if tools is None else tools
    return [name for name in tools if shutil.which(name) is None]


def format_command(argv: Sequence[str]) -> str:
    """Render *argv* for logging with secret option values masked."""
    parts: list[str] = []
    mask_next = False
    for arg in argv:
        if mask_next:
            parts.append("********")
            mask_next = False
            continue
        parts.append(arg)
        if arg in _SECRET_OPTIONS:
            mask_next = True
    return " ".join(parts)


def run_command(argv: Sequence[str], on_output: Optional[OutputFn] = None) -> CommandResult:
    """Run *argv*, streaming merged stdout/stderr lines to *on_output*.

    A missing executable is reported as exit code 127 rather than raised.
    """
    logger.info("Running: %s", format_command(argv))
    try:
        proc = subprocess.Popen(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
    except FileNotFoundError:
        msg = f"{argv[0]}: command not found"
        logger.error(msg)
        if on_output:
            on_output(msg)
        return CommandResult(returncode=127, output=msg)

    captured: list[str] = []
    try:
        for line in proc.stdout:
            line = line.rstrip("\n")
            captured.append(line)
            if on_output:
                on_output(line)
        proc.wait()
    except BaseException:
        proc.kill()
        proc.wait()
        raise
    finally:
        proc.stdout.close()

    if proc.returncode != 0:
        logger.error("%s exited with %d", argv[0], proc.returncode)
    return CommandResult(returncode=proc.returncode, output="\n".join(captured))


class QmRunner:
    """Runs ``qm <operation> <vmid> [args...]`` on the local node."""

    def __init__(self, executable: str = "qm"):
        self.executable = executable

    def run(
        self,
        operation: str,
        vmid: int,
        args: Sequence[str] = (),
        on_output: Optional[OutputFn] = None,
    ) -> CommandResult:
        argv = [self.executable, operation, str(vmid), *args]
        return run_command(argv, on_output=on_output)
