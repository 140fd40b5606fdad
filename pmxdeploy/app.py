"""Main pmxdeploy Textual application.

Walks the user through template selection, VNet selection, the parameter
form and a confirmation, then hands over to the live deployment log.  The
app exits with a RunOutcome as its return value.
"""

from __future__ import annotations

from typing import Optional

from textual import work
from textual.app import App, ComposeResult
from textual.containers import Center, Container, Middle
from textual.widgets import Footer, Header, LoadingIndicator, Static

from pmxdeploy.cluster import ClusterClient, ClusterQueryError
from pmxdeploy.command_runner import QmRunner
from pmxdeploy.config import Config
from pmxdeploy.models import Choice, FormValues, RunOutcome, ValidationError, validate_form
from pmxdeploy.screens.choice import ChoiceScreen
from pmxdeploy.screens.deploy_log import DeployLogScreen
from pmxdeploy.screens.modals import ConfirmScreen, MessageScreen
from pmxdeploy.screens.vm_form import VMFormScreen


class PmxDeployApp(App[RunOutcome]):
    """pmxdeploy - Cloud-Init VM deployer for Proxmox VE."""

    TITLE = "pmxdeploy"
    SUB_TITLE = "Proxmox VM Deployer"

    CSS = """
    #loading-box {
        width: 50;
        height: auto;
        border: round $accent;
        padding: 1 2;
    }
    """

    def __init__(
        self,
        config: Config,
        cluster: Optional[ClusterClient] = None,
        runner=None,
    ):
        super().__init__()
        self.config = config
        self.cluster = cluster or ClusterClient()
        self.runner = runner or QmRunner()
        self._template: Optional[Choice] = None
        self._vnet: Optional[Choice] = None
        self.deployment_started = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Center():
            with Middle():
                with Container(id="loading-box"):
                    yield Static("Querying cluster...", id="loading-msg")
                    yield LoadingIndicator()
        yield Footer()

    def on_mount(self) -> None:
        self._load_templates()

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    async def action_quit(self) -> None:
        """Quit, except while qm commands are still running."""
        screen = self.screen
        if isinstance(screen, DeployLogScreen):
            if screen.deploying:
                self.notify("Deployment in progress...", severity="warning")
                return
            self.exit(screen.outcome)
            return
        await super().action_quit()

    def _cancel(self) -> None:
        self.exit(RunOutcome.cancelled())

    def _fail(self, message: str, title: str = "Error") -> None:
        """Show a blocking error and exit non-zero once it is closed."""
        def _on_closed(_result) -> None:
            self.exit(RunOutcome(exit_code=1, message=message))

        self.push_screen(MessageScreen(message, title=title), callback=_on_closed)

    # ------------------------------------------------------------------
    # Step 1: template
    # ------------------------------------------------------------------

    @work(thread=True)
    def _load_templates(self) -> None:
        try:
            templates = self.cluster.get_templates()
        except ClusterQueryError as e:
            self.call_from_thread(self._fail, str(e))
            return
        self.call_from_thread(self._choose_template, templates)

    def _choose_template(self, templates: list[Choice]) -> None:
        self.push_screen(
            ChoiceScreen(
                "Select Template",
                "Choose the Template VM to clone from:",
                templates,
            ),
            callback=self._on_template,
        )

    def _on_template(self, choice: Optional[Choice]) -> None:
        if choice is None:
            self._cancel()
            return
        self._template = choice
        self._load_vnets()

    # ------------------------------------------------------------------
    # Step 2: network
    # ------------------------------------------------------------------

    @work(thread=True)
    def _load_vnets(self) -> None:
        try:
            vnets = self.cluster.get_vnets()
        except ClusterQueryError as e:
            self.call_from_thread(self._fail, str(e))
            return
        self.call_from_thread(self._choose_vnet, vnets)

    def _choose_vnet(self, vnets: list[Choice]) -> None:
        self.push_screen(
            ChoiceScreen(
                "Select Network",
                "Choose the SDN VNet for this VM:",
                vnets,
            ),
            callback=self._on_vnet,
        )

    def _on_vnet(self, choice: Optional[Choice]) -> None:
        if choice is None:
            self._cancel()
            return
        self._vnet = choice
        self.push_screen(
            VMFormScreen(self._template, self._vnet, self.config.defaults),
            callback=self._on_form,
        )

    # ------------------------------------------------------------------
    # Step 3: form, validation, confirmation
    # ------------------------------------------------------------------

    def _on_form(self, values: Optional[FormValues]) -> None:
        if values is None:
            self._cancel()
            return
        try:
            request = validate_form(
                values,
                template_id=int(self._template.key),
                bridge=self._vnet.key,
                config=self.config,
            )
        except ValidationError as e:
            self._fail(str(e), title="Invalid Input")
            return

        def _on_confirm(confirmed: bool) -> None:
            if not confirmed:
                self._cancel()
                return
            self.deployment_started = True
            self.push_screen(
                DeployLogScreen(request, self.config, self.runner),
                callback=self.exit,
            )

        self.push_screen(
            ConfirmScreen("\n".join(request.summary_lines()), title="Confirm Deployment"),
            callback=_on_confirm,
        )
