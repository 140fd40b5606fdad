"""Data models for pmxdeploy."""

from dataclasses import dataclass, field
from typing import Optional

from rich.markup import escape

from pmxdeploy.config import Config


class ValidationError(Exception):
    """Form submission is missing required fields or has bad numbers."""

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = fields or []


@dataclass(frozen=True)
class Choice:
    """One entry of a single-choice list."""
    key: str
    label: str


@dataclass
class FormValues:
    """Raw strings collected by the new VM form, in form order."""
    vmid: str = ""
    name: str = ""
    cpu_cores: str = ""
    memory_gib: str = ""
    disk_gib: str = ""
    username: str = ""
    password: str = ""
    ssh_key: str = ""
    ipv4: str = ""
    ipv4_gateway: str = ""
    ipv6: str = ""
    ipv6_gateway: str = ""
    dns_server: str = ""


# (attribute, label) of the fields a submission cannot leave empty
REQUIRED_FIELDS = [
    ("vmid", "New VM ID"),
    ("name", "VM Name"),
    ("username", "Admin Username"),
    ("password", "Admin Password"),
    ("ipv4", "IPv4 Address/CIDR"),
    ("ipv4_gateway", "IPv4 Gateway"),
]

# (attribute, label) of the fields converted to positive integers
NUMERIC_FIELDS = [
    ("vmid", "New VM ID"),
    ("cpu_cores", "vCPU Cores"),
    ("memory_gib", "Memory (GB)"),
    ("disk_gib", "Disk Size (GB)"),
]


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything one deployment run needs, validated and immutable."""
    template_id: int
    vmid: int
    name: str
    cpu_cores: int
    memory_gib: int
    disk_gib: int
    username: str
    password: str
    ipv4: str
    ipv4_gateway: str
    bridge: str
    storage: str
    search_domain: str
    dns_server: str = ""
    ipv6: str = ""
    ipv6_gateway: str = ""
    ssh_key: str = ""

    @property
    def memory_mib(self) -> int:
        return self.memory_gib * 1024

    @property
    def has_ipv6(self) -> bool:
        return bool(self.ipv6 and self.ipv6_gateway)

    @property
    def ipconfig(self) -> str:
        """Cloud-Init ipconfig0 value; IPv6 only when both parts are set."""
        value = f"ip={self.ipv4},gw={self.ipv4_gateway}"
        if self.has_ipv6:
            value += f",ip6={self.ipv6},gw6={self.ipv6_gateway}"
        return value

    @property
    def host_address(self) -> str:
        return self.ipv4.split("/", 1)[0]

    @property
    def connection_hint(self) -> str:
        return f"ssh {self.username}@{self.host_address}"

    def summary_lines(self) -> list[str]:
        """Rich-markup lines shown in the confirmation dialog."""
        lines = [
            f"Ready to create VM [b]{self.vmid}[/b] ([b]{escape(self.name)}[/b]) with:",
            "",
            f"- Template: {self.template_id}",
            f"- Network:  {escape(self.bridge)}",
            f"- vCPUs:    {self.cpu_cores}",
            f"- Memory:   {self.memory_gib} GB ({self.memory_mib} MB)",
            f"- Disk:     {self.disk_gib} GB on {escape(self.storage)}",
            f"- User:     {escape(self.username)}",
            f"- IPv4:     {escape(self.ipv4)}",
        ]
        if self.has_ipv6:
            lines.append(f"- IPv6:     {escape(self.ipv6)}")
        lines.append(f"- SSH key:  {'Yes' if self.ssh_key else 'No'}")
        lines += [
            "",
            "[yellow]WARNING: The password will be set via the command line.[/yellow]",
            "",
            "Proceed with creation?",
        ]
        return lines


def _positive_int(raw: str) -> Optional[int]:
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def validate_form(
    values: FormValues,
    template_id: int,
    bridge: str,
    config: Config,
) -> DeploymentRequest:
    """Turn raw form values into a DeploymentRequest.

    Raises ValidationError when a required field is empty or the VM id or
    a sizing field is not a positive whole number.  Empty sizing fields
    take the configured defaults.
    """
    raw = {k: (getattr(values, k) or "").strip() for k in values.__dataclass_fields__}

    missing = [label for attr, label in REQUIRED_FIELDS if not raw[attr]]
    if missing:
        raise ValidationError(
            "Missing required fields: " + ", ".join(missing)
            + ". Please fill out all fields (except optional SSH key and IPv6).",
            fields=missing,
        )

    # Sizing left empty falls back to the form defaults
    for attr in ("cpu_cores", "memory_gib", "disk_gib"):
        if not raw[attr]:
            raw[attr] = str(getattr(config.defaults, attr))

    numbers: dict[str, int] = {}
    bad: list[str] = []
    for attr, label in NUMERIC_FIELDS:
        number = _positive_int(raw[attr])
        if number is None:
            bad.append(label)
        else:
            numbers[attr] = number
    if bad:
        raise ValidationError(
            "These fields must be positive whole numbers: " + ", ".join(bad),
            fields=bad,
        )

    return DeploymentRequest(
        template_id=template_id,
        vmid=numbers["vmid"],
        name=raw["name"],
        cpu_cores=numbers["cpu_cores"],
        memory_gib=numbers["memory_gib"],
        disk_gib=numbers["disk_gib"],
        username=raw["username"],
        # Passwords are taken verbatim
        password=values.password,
        ipv4=raw["ipv4"],
        ipv4_gateway=raw["ipv4_gateway"],
        ipv6=raw["ipv6"],
        ipv6_gateway=raw["ipv6_gateway"],
        dns_server=raw["dns_server"] or config.defaults.dns_server,
        ssh_key=raw["ssh_key"],
        bridge=bridge,
        storage=config.storage,
        search_domain=config.search_domain,
    )


@dataclass
class RunOutcome:
    """Result handed back by the TUI once it exits."""
    exit_code: int = 0
    message: str = ""
    transcript: list[str] = field(default_factory=list)

    @classmethod
    def cancelled(cls) -> "RunOutcome":
        return cls(exit_code=0, message="VM creation cancelled.")
