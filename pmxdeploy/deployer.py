"""Clone-and-configure deployment sequence.

Runs the fixed chain of ``qm`` commands that turns a Cloud-Init template into
a running VM:

    Clone -> AwaitLockRelease -> ConfigureHardware -> ResizeDisk
          -> ConfigureNetwork -> ConfigureCloudInitUser
          -> InjectSSHKey (only with a key) -> Start -> Complete

Every ``qm`` call is checked.  The first non-zero exit writes a diagnostic to
the deployment log and raises DeploymentError.  Nothing already applied is
undone: a failure after the clone leaves the new VM in place.

Usage:
    log = DeploymentLog()
    log.subscribe(print_line)
    Deployer(QmRunner(), config, log).deploy(request, ssh_key_path)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from pmxdeploy.command_runner import CommandResult, OutputFn
from pmxdeploy.config import Config
from pmxdeploy.models import DeploymentRequest

logger = logging.getLogger(__name__)

RULE = "-" * 46


class DeploymentError(Exception):
    """A checked deployment step failed."""

    def __init__(self, step: str, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.step = step
        self.returncode = returncode


class LockTimeoutError(DeploymentError):
    """The cloned VM stayed locked longer than the configured timeout."""
    pass


class CommandRunner(Protocol):
    def run(
        self,
        operation: str,
        vmid: int,
        args: Sequence[str] = (),
        on_output: Optional[OutputFn] = None,
    ) -> CommandResult: ...


# ---------------------------------------------------------------------------
# Log channel
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogLine:
    text: str
    style: str = ""   # Rich style name, empty for command output


class DeploymentLog:
    """Append-only line channel between the deployer and its viewers."""

    def __init__(self):
        self._lines: list[LogLine] = []
        self._subscribers: list[Callable[[LogLine], None]] = []

    def subscribe(self, fn: Callable[[LogLine], None]) -> None:
        """Register *fn*; it is called for every line written from now on."""
        self._subscribers.append(fn)

    def write(self, text: str = "", style: str = "") -> None:
        for part in text.split("\n"):
            line = LogLine(part, style)
            self._lines.append(line)
            for fn in self._subscribers:
                fn(line)

    def command_output(self, text: str) -> None:
        self.write(text, style="dim")

    @property
    def lines(self) -> list[str]:
        return [line.text for line in self._lines]


# ---------------------------------------------------------------------------
# Deployer
# ---------------------------------------------------------------------------

class Deployer:
    """Drives one deployment run against a ``qm`` command runner."""

    def __init__(
        self,
        runner: CommandRunner,
        config: Config,
        log: DeploymentLog,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.runner = runner
        self.config = config
        self.log = log
        self._sleep = sleep
        self._clock = clock

    def deploy(self, request: DeploymentRequest, ssh_key_path: Optional[str] = None) -> None:
        """Run the full sequence.  Raises DeploymentError on the first failure."""
        r = request
        self.log.write(f"Starting deployment of VM {r.vmid}: {r.name}...", style="bold")
        self.log.write(RULE)

        self._clone(r)
        self._await_lock_release(r)
        self._configure_hardware(r)
        self._resize_disk(r)
        self._configure_network(r)
        self._configure_user(r)
        self._inject_ssh_key(r, ssh_key_path)
        self._start(r)

        self.log.write(RULE)
        self.log.write("DEPLOYMENT COMPLETE!", style="bold green")
        self.log.write()
        self.log.write(f"VM {r.vmid} ({r.name}) is starting.")
        self.log.write(f"You can connect via: {r.connection_hint}", style="bold")
        logger.info("VM %s (%s) deployed", r.vmid, r.name)

    # -- helpers -----------------------------------------------------------

    def _qm(self, step: str, failure: str, operation: str, vmid: int, *args: str) -> None:
        result = self.runner.run(
            operation, vmid, list(args), on_output=self.log.command_output,
        )
        if not result.ok:
            logger.error("%s failed (qm %s exited with %s)", step, operation, result.returncode)
            self.log.write(failure, style="bold red")
            raise DeploymentError(step, failure, result.returncode)

    def _qm_set(self, step: str, failure: str, vmid: int, option: str, value: str) -> None:
        self._qm(step, failure, "set", vmid, f"--{option}", value)

    # -- steps -------------------------------------------------------------

    def _clone(self, r: DeploymentRequest) -> None:
        self.log.write(f"Step 1: Cloning template {r.template_id} to {r.vmid}...", style="bold")
        self._qm(
            "Clone", "CLONE FAILED!",
            "clone", r.template_id, str(r.vmid),
            "--name", r.name, "--full", "--storage", r.storage,
        )
        self.log.write("Clone complete.", style="green")
        self.log.write()

    def _await_lock_release(self, r: DeploymentRequest) -> None:
        """Poll ``qm config`` until it succeeds, i.e. the clone lock is gone."""
        self.log.write("Waiting for VM lock to be released...")
        interval = self.config.lock_poll_interval
        deadline = self._clock() + self.config.lock_timeout
        polls = 0
        while not self.runner.run("config", r.vmid).ok:
            polls += 1
            if self._clock() >= deadline:
                msg = (
                    f"VM LOCK NOT RELEASED after {self.config.lock_timeout:g}s! "
                    f"(VM {r.vmid} may still be cloning)"
                )
                logger.error(msg)
                self.log.write(msg, style="bold red")
                raise LockTimeoutError("AwaitLockRelease", msg)
            if polls % 10 == 0:
                self.log.write(f"  still locked after {polls} checks...", style="dim")
            self._sleep(interval)
        self.log.write("VM lock released.", style="green")
        self.log.write()

    def _configure_hardware(self, r: DeploymentRequest) -> None:
        self.log.write("Step 2: Configuring Hardware...", style="bold")
        failure = "HARDWARE CONFIGURATION FAILED!"
        self._qm_set("ConfigureHardware", failure, r.vmid, "cores", str(r.cpu_cores))
        self._qm_set("ConfigureHardware", failure, r.vmid, "memory", str(r.memory_mib))
        self.log.write("Hardware configured.", style="green")
        self.log.write()

    def _resize_disk(self, r: DeploymentRequest) -> None:
        self.log.write("Step 3: Resizing disk...", style="bold")
        disk = self.config.disk
        self._qm(
            "ResizeDisk", f"DISK RESIZE FAILED! (Is '{disk}' correct?)",
            "resize", r.vmid, disk, f"+{r.disk_gib}G",
        )
        self.log.write("Disk resized.", style="green")
        self.log.write()

    def _configure_network(self, r: DeploymentRequest) -> None:
        self.log.write("Step 4: Configuring Network...", style="bold")
        failure = "NETWORK CONFIGURATION FAILED!"
        settings = [
            ("net0", f"{self.config.net_model},bridge={r.bridge}"),
            ("ipconfig0", r.ipconfig),
            ("nameserver", r.dns_server),
            ("searchdomain", r.search_domain),
        ]
        for option, value in settings:
            self._qm_set("ConfigureNetwork", failure, r.vmid, option, value)
        self.log.write("Network configured.", style="green")
        self.log.write()

    def _configure_user(self, r: DeploymentRequest) -> None:
        self.log.write("Step 5: Configuring Cloud-Init User...", style="bold")
        failure = "CLOUD-INIT USER CONFIGURATION FAILED!"
        self._qm_set("ConfigureCloudInitUser", failure, r.vmid, "ciuser", r.username)
        self._qm_set("ConfigureCloudInitUser", failure, r.vmid, "cipassword", r.password)
        self.log.write(f"User '{r.username}' configured.", style="green")
        self.log.write()

    def _inject_ssh_key(self, r: DeploymentRequest, ssh_key_path: Optional[str]) -> None:
        if not ssh_key_path:
            self.log.write("Step 6: Skipping SSH Key (not provided).", style="bold")
            self.log.write()
            return
        self.log.write(f"Step 6: Adding SSH Public Key from {ssh_key_path}...", style="bold")
        self._qm_set(
            "InjectSSHKey", "ADDING SSH KEY FAILED! (Check key format)",
            r.vmid, "sshkeys", ssh_key_path,
        )
        self.log.write("SSH key added.", style="green")
        self.log.write()

    def _start(self, r: DeploymentRequest) -> None:
        self.log.write(f"Step 7: Starting VM {r.vmid}...", style="bold")
        self._qm("Start", "VM START FAILED!", "start", r.vmid)
