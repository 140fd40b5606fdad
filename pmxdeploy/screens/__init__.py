"""pmxdeploy TUI screens."""

from pmxdeploy.screens.choice import ChoiceScreen
from pmxdeploy.screens.vm_form import VMFormScreen
from pmxdeploy.screens.modals import ConfirmScreen, MessageScreen
from pmxdeploy.screens.deploy_log import DeployLogScreen

__all__ = [
    "ChoiceScreen",
    "VMFormScreen",
    "ConfirmScreen",
    "MessageScreen",
    "DeployLogScreen",
]
