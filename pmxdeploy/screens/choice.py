"""Single-choice selection screen used for templates and VNets."""

from __future__ import annotations

from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, ListItem, ListView, Static

from pmxdeploy.models import Choice


class ChoiceScreen(Screen[Optional[Choice]]):
    """Pick one entry from a list.  Dismisses with the Choice, or None."""

    DEFAULT_CSS = """
    #choice-container {
        padding: 1 2;
    }
    #choice-title {
        text-style: bold;
        color: $accent;
    }
    #choice-hint {
        color: $text-muted;
        margin: 0 0 1 0;
    }
    #choice-list {
        height: auto;
        max-height: 80%;
        border: round $accent;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
    ]

    def __init__(self, title: str, prompt: str, choices: list[Choice]):
        super().__init__()
        self._title = title
        self._prompt = prompt
        self._choices = choices

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="choice-container"):
            yield Static(self._title, id="choice-title")
            yield Static(self._prompt, id="choice-hint")
            yield ListView(
                *[
                    ListItem(Label(f"  {c.key:<8} {c.label}", markup=False))
                    for c in self._choices
                ],
                id="choice-list",
            )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#choice-list", ListView).focus()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is not None and 0 <= index < len(self._choices):
            self.dismiss(self._choices[index])

    def action_cancel(self) -> None:
        self.dismiss(None)
