"""Configuration management for pmxdeploy."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging
import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass
class FormDefaults:
    """Values pre-filled in the new VM form."""
    cpu_cores: int = 2
    memory_gib: int = 4
    disk_gib: int = 20
    username: str = "admin"
    ipv4: str = "192.168.1.100/24"
    ipv4_gateway: str = "192.168.1.1"
    dns_server: str = "8.8.8.8"


@dataclass
class Config:
    storage: str = "PMX-SSD"        # datastore the full clone lands on
    search_domain: str = "local"
    disk: str = "scsi0"             # template disk grown by `qm resize`
    net_model: str = "virtio"
    lock_poll_interval: float = 1.0
    lock_timeout: float = 300.0
    log_file: str = ""
    defaults: FormDefaults = field(default_factory=FormDefaults)

    CONFIG_PATHS = [
        Path.home() / ".config" / "pmxdeploy" / "config.yaml",
        Path.home() / ".config" / "pmxdeploy" / "config.yml",
        Path("config") / "config.yaml",
        Path("config") / "config.yml",
    ]

    @classmethod
    def find_config_file(cls) -> Optional[Path]:
        """Find the first existing config file."""
        for path in cls.CONFIG_PATHS:
            if path.exists():
                return path
        return None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load configuration from YAML, falling back to built-in defaults."""
        if path is None:
            path = cls.find_config_file()

        if path is None:
            logger.debug("No configuration file found; using defaults")
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            raise ConfigError(f"Failed to read config file {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        try:
            return cls._from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in config file {path}: {e}")

    @classmethod
    def _from_dict(cls, data: dict) -> "Config":
        config = cls(
            storage=str(data.get("storage", "PMX-SSD")),
            search_domain=str(data.get("search_domain", "local")),
            disk=str(data.get("disk", "scsi0")),
            net_model=str(data.get("net_model", "virtio")),
            lock_poll_interval=float(data.get("lock_poll_interval", 1.0)),
            lock_timeout=float(data.get("lock_timeout", 300.0)),
            log_file=str(data.get("log_file", "") or ""),
        )

        # Parse defaults section
        if isinstance(data.get("defaults"), dict):
            defs = data["defaults"]
            config.defaults = FormDefaults(
                cpu_cores=int(defs.get("cpu_cores", 2)),
                memory_gib=int(defs.get("memory_gib", 4)),
                disk_gib=int(defs.get("disk_gib", 20)),
                username=str(defs.get("username", "admin")),
                ipv4=str(defs.get("ipv4", "192.168.1.100/24")),
                ipv4_gateway=str(defs.get("ipv4_gateway", "192.168.1.1")),
                dns_server=str(defs.get("dns_server", "8.8.8.8")),
            )

        if not config.storage:
            raise ConfigError("Storage pool is required in configuration")
        if config.lock_poll_interval <= 0:
            raise ConfigError("lock_poll_interval must be positive")

        return config
