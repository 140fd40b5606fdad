"""Confirmation and message modals."""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static


_MODAL_CSS = """
.modal-container {
    align: center middle;
    width: 100%;
    height: 100%;
}
.modal-box {
    width: 64;
    height: auto;
    max-height: 90%;
    border: round $accent;
    background: $surface;
    padding: 1 2;
}
.modal-title {
    text-style: bold;
    color: $accent;
    margin: 0 0 1 0;
}
.modal-buttons {
    height: auto;
    margin: 1 0 0 0;
    align: center middle;
}
.modal-buttons Button {
    margin: 0 1;
}
"""


class ConfirmScreen(ModalScreen[bool]):
    """Simple yes/no confirmation modal."""

    DEFAULT_CSS = _MODAL_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
        Binding("y", "confirm", "Yes", show=True),
        Binding("n", "cancel", "No", show=True),
    ]

    def __init__(self, message: str, title: str = "Confirm") -> None:
        super().__init__()
        self._message = message
        self._title = title

    def compose(self) -> ComposeResult:
        with Container(classes="modal-container"):
            with Vertical(classes="modal-box"):
                yield Static(self._title, classes="modal-title")
                yield Static(self._message, markup=True)
                with Horizontal(classes="modal-buttons"):
                    yield Button("Yes", variant="success", id="confirm-yes-btn")
                    yield Button("No", variant="default", id="confirm-no-btn")

    def on_mount(self) -> None:
        self.query_one("#confirm-no-btn", Button).focus()

    @on(Button.Pressed, "#confirm-yes-btn")
    def _on_yes(self, event: Button.Pressed) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#confirm-no-btn")
    def _on_no(self, event: Button.Pressed) -> None:
        self.dismiss(False)

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class MessageScreen(ModalScreen[None]):
    """Blocking message box closed with Enter, Escape or OK."""

    DEFAULT_CSS = _MODAL_CSS

    BINDINGS = [
        Binding("escape", "close", "Close", show=True),
        Binding("enter", "close", "OK", show=False),
    ]

    def __init__(self, message: str, title: str = "Error") -> None:
        super().__init__()
        self._message = message
        self._title = title

    def compose(self) -> ComposeResult:
        with Container(classes="modal-container"):
            with Vertical(classes="modal-box"):
                yield Static(f"[red]{self._title}[/red]", classes="modal-title", markup=True)
                yield Static(self._message, markup=False)
                with Horizontal(classes="modal-buttons"):
                    yield Button("OK", variant="primary", id="message-ok-btn")

    def on_mount(self) -> None:
        self.query_one("#message-ok-btn", Button).focus()

    @on(Button.Pressed, "#message-ok-btn")
    def _on_ok(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)
