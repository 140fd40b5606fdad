"""Live deployment log screen."""

from __future__ import annotations

import logging

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Footer, Header, RichLog, Static

from pmxdeploy.config import Config
from pmxdeploy.deployer import Deployer, DeploymentError, DeploymentLog, LogLine
from pmxdeploy.models import DeploymentRequest, RunOutcome
from pmxdeploy.ssh_keys import resolve_ssh_key, ssh_key_file

logger = logging.getLogger(__name__)


class DeployLogScreen(Screen[RunOutcome]):
    """Runs the deployment in a worker thread and streams its log."""

    DEFAULT_CSS = """
    #deploy-container {
        padding: 0 1;
    }
    #deploy-title {
        text-style: bold;
        color: $accent;
    }
    #deploy-log {
        height: 1fr;
        border: round $accent;
    }
    #deploy-hint {
        height: auto;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=True),
        Binding("enter", "close", "Close", show=False),
    ]

    def __init__(self, request: DeploymentRequest, config: Config, runner):
        super().__init__()
        self.request = request
        self.config = config
        self.runner = runner
        self.log_channel = DeploymentLog()
        # Set until the worker reports an outcome
        self._deploying = True
        self._outcome: RunOutcome | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="deploy-container"):
            yield Static(
                f"Deployment Log: VM {self.request.vmid} ({self.request.name})",
                id="deploy-title", markup=False,
            )
            yield RichLog(id="deploy-log", wrap=True)
            yield Static("Deployment in progress...", id="deploy-hint", markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self.log_channel.subscribe(self._on_log_line)
        self._deploy()

    def _on_log_line(self, line: LogLine) -> None:
        self.app.call_from_thread(self._write_line, line)

    def _write_line(self, line: LogLine) -> None:
        self.query_one("#deploy-log", RichLog).write(Text(line.text, style=line.style))

    @work(thread=True)
    def _deploy(self) -> None:
        r = self.request
        deployer = Deployer(self.runner, self.config, self.log_channel)
        try:
            with ssh_key_file(resolve_ssh_key(r.ssh_key)) as key_path:
                deployer.deploy(r, key_path)
            outcome = RunOutcome(
                exit_code=0,
                message=f"VM {r.vmid} ({r.name}) deployment process finished.",
            )
        except DeploymentError as e:
            outcome = RunOutcome(
                exit_code=1,
                message=f"VM {r.vmid} ({r.name}) deployment failed at {e.step}: {e}",
            )
        except Exception as e:
            logger.exception("Deployment of VM %s aborted", r.vmid)
            self.log_channel.write(f"Deployment error: {e}", style="bold red")
            outcome = RunOutcome(
                exit_code=1,
                message=f"VM {r.vmid} ({r.name}) deployment failed: {e}",
            )
        outcome.transcript = self.log_channel.lines
        self.app.call_from_thread(self._show_done, outcome)

    def _show_done(self, outcome: RunOutcome) -> None:
        self._deploying = False
        self._outcome = outcome
        if outcome.exit_code == 0:
            text = "[bold green]Done![/bold green]  Press [b]Enter[/b] to exit"
        else:
            text = "[bold red]Deployment failed.[/bold red]  Press [b]Enter[/b] to exit"
        self.query_one("#deploy-hint", Static).update(text)

    @property
    def deploying(self) -> bool:
        return self._deploying

    @property
    def outcome(self) -> RunOutcome | None:
        return self._outcome

    def action_close(self) -> None:
        if self._deploying or self._outcome is None:
            self.notify("Deployment in progress...", severity="warning")
            return
        self.dismiss(self._outcome)
