from types import SimpleNamespace

import pytest

from pmxdeploy.command_runner import CommandResult
from pmxdeploy.config import Config
from pmxdeploy.models import DeploymentRequest


class FakeQmRunner:
    """Scripted stand-in for QmRunner.

    ``fail`` maps an operation ("clone", "resize", "start") or a set option
    ("set:--cores") to the exit code it should return.  ``locked_polls`` is how
    many ``qm config`` calls fail before the clone lock counts as released.
    """

    def __init__(self, fail=None, locked_polls=0):
        self.calls = []
        self.fail = fail or {}
        self.locked_polls = locked_polls

    def run(self, operation, vmid, args=(), on_output=None):
        args = list(args)
        self.calls.append((operation, vmid, args))
        if operation == "config":
            if self.locked_polls > 0:
                self.locked_polls -= 1
                return CommandResult(returncode=2, output="VM is locked (clone)")
            return CommandResult(returncode=0)
        key = f"set:{args[0]}" if operation == "set" else operation
        rc = self.fail.get(key, 0)
        if on_output:
            on_output(f"qm {operation} {vmid} -> {rc}")
        return CommandResult(returncode=rc)

    @property
    def mutations(self):
        return [c for c in self.calls if c[0] != "config"]


class _Endpoint:
    def __init__(self, result):
        self._result = result
        self.params = None

    def get(self, **params):
        self.params = params
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeProxmoxAPI:
    """Mimics the proxmoxer attribute chain used by ClusterClient."""

    def __init__(self, resources=None, vnets=None):
        self.cluster = SimpleNamespace(
            resources=_Endpoint(resources if resources is not None else []),
            sdn=SimpleNamespace(vnets=_Endpoint(vnets if vnets is not None else [])),
        )


@pytest.fixture
def runner():
    return FakeQmRunner()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def request_150(config):
    return DeploymentRequest(
        template_id=9000,
        vmid=150,
        name="web1",
        cpu_cores=2,
        memory_gib=4,
        disk_gib=20,
        username="admin",
        password="secret",
        ipv4="10.0.0.50/24",
        ipv4_gateway="10.0.0.1",
        dns_server="1.1.1.1",
        bridge="vnet1",
        storage=config.storage,
        search_domain=config.search_domain,
    )
