"""New VM parameter form."""

from __future__ import annotations

from typing import Optional

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label, Static

from pmxdeploy.config import FormDefaults
from pmxdeploy.models import Choice, FormValues


# (FormValues attribute, label, placeholder) in display order
FORM_FIELDS = [
    ("vmid", "New VM ID", "e.g. 150"),
    ("name", "VM Name (Hostname)", "web1"),
    ("cpu_cores", "vCPU Cores", ""),
    ("memory_gib", "Memory (GB)", ""),
    ("disk_gib", "Disk Size (GB)", "added to the template disk"),
    ("username", "Admin Username", ""),
    ("password", "Admin Password", ""),
    ("ssh_key", "SSH PubKey (paste key OR path)", "ssh-ed25519 AAAA... or ~/.ssh/id_ed25519.pub"),
    ("ipv4", "IPv4 Address/CIDR", "192.168.1.100/24"),
    ("ipv4_gateway", "IPv4 Gateway", "192.168.1.1"),
    ("ipv6", "IPv6 Address/CIDR", "optional"),
    ("ipv6_gateway", "IPv6 Gateway", "optional"),
    ("dns_server", "DNS Server", "8.8.8.8"),
]


class VMFormScreen(Screen[Optional[FormValues]]):
    """Collects the raw VM parameters.  Dismisses with FormValues or None."""

    DEFAULT_CSS = """
    #form-container {
        padding: 0 2;
    }
    #form-title {
        text-style: bold;
        color: $accent;
        margin: 1 0 0 0;
    }
    #form-hint {
        color: $text-muted;
    }
    .field-row {
        height: auto;
    }
    .field-label {
        width: 34;
        padding: 1 1 0 0;
    }
    .field-row Input {
        width: 1fr;
    }
    .reveal-btn {
        width: 12;
        min-width: 12;
        margin: 0 0 0 1;
    }
    #form-actions {
        height: auto;
        margin: 1 0;
        align: center middle;
    }
    #form-actions Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
        Binding("ctrl+s", "submit", "Deploy", show=True),
    ]

    def __init__(self, template: Choice, vnet: Choice, defaults: FormDefaults):
        super().__init__()
        self._template = template
        self._vnet = vnet
        self._defaults = defaults

    def _initial_values(self) -> FormValues:
        d = self._defaults
        return FormValues(
            cpu_cores=str(d.cpu_cores),
            memory_gib=str(d.memory_gib),
            disk_gib=str(d.disk_gib),
            username=d.username,
            ipv4=d.ipv4,
            ipv4_gateway=d.ipv4_gateway,
            dns_server=d.dns_server,
        )

    def compose(self) -> ComposeResult:
        initial = self._initial_values()
        yield Header()
        with VerticalScroll(id="form-container"):
            yield Static("Create New Cloud-Init VM", id="form-title")
            yield Static(
                f"Template: {self._template.key} ({self._template.label})   "
                f"VNet: {self._vnet.key}",
                id="form-hint", markup=False,
            )
            for attr, label, placeholder in FORM_FIELDS:
                with Horizontal(classes="field-row"):
                    yield Label(f"{label}:", classes="field-label")
                    yield Input(
                        value=getattr(initial, attr),
                        placeholder=placeholder,
                        password=(attr == "password"),
                        id=f"f-{attr}",
                    )
                    if attr == "password":
                        yield Button("Reveal", id="reveal-f-password", classes="reveal-btn")
            with Horizontal(id="form-actions"):
                yield Button("Deploy", variant="primary", id="btn-submit")
                yield Button("Cancel", variant="error", id="btn-cancel")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#f-vmid", Input).focus()

    # ------------------------------------------------------------------
    # Arrow-key navigation between inputs
    # ------------------------------------------------------------------

    def _inputs(self) -> list[Input]:
        return list(self.query(Input))

    def on_key(self, event) -> None:
        if event.key not in ("down", "up"):
            return
        event.prevent_default()
        event.stop()
        self._move_field(1 if event.key == "down" else -1)

    def _move_field(self, direction: int) -> None:
        fields = self._inputs()
        current = self.app.focused
        if current in fields:
            idx = fields.index(current)
            fields[(idx + direction) % len(fields)].focus()
        elif fields:
            fields[0].focus()

    @on(Input.Submitted)
    def _on_input_submitted(self, event: Input.Submitted) -> None:
        fields = self._inputs()
        if event.input is fields[-1]:
            self.action_submit()
        else:
            self._move_field(1)

    # ------------------------------------------------------------------
    # Buttons & actions
    # ------------------------------------------------------------------

    @on(Button.Pressed, "#reveal-f-password")
    def _on_reveal(self, event: Button.Pressed) -> None:
        inp = self.query_one("#f-password", Input)
        inp.password = not inp.password
        event.button.label = "Hide" if not inp.password else "Reveal"

    @on(Button.Pressed, "#btn-submit")
    def _on_submit(self, event: Button.Pressed) -> None:
        self.action_submit()

    @on(Button.Pressed, "#btn-cancel")
    def _on_cancel(self, event: Button.Pressed) -> None:
        self.action_cancel()

    def collect(self) -> FormValues:
        """Read the current raw input values."""
        return FormValues(**{
            attr: self.query_one(f"#f-{attr}", Input).value
            for attr, _, _ in FORM_FIELDS
        })

    def action_submit(self) -> None:
        self.dismiss(self.collect())

    def action_cancel(self) -> None:
        self.dismiss(None)
