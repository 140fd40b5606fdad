"""Read-only cluster discovery for pmxdeploy."""

from __future__ import annotations

import logging

from pmxdeploy.models import Choice

logger = logging.getLogger(__name__)


class ClusterQueryError(Exception):
    """A cluster query failed or returned nothing usable."""
    pass


class ClusterClient:
    """Queries cluster resources through ``pvesh`` on the local node."""

    def __init__(self, api=None):
        self._api = api

    def connect(self):
        """Create the proxmoxer API handle using the local pvesh backend."""
        try:
            from proxmoxer import ProxmoxAPI

            self._api = ProxmoxAPI(backend="local", service="PVE")
        except Exception as e:
            raise ClusterQueryError(f"Failed to open local Proxmox API: {e}")

    @property
    def api(self):
        if self._api is None:
            self.connect()
        return self._api

    def get_templates(self) -> list[Choice]:
        """List VM templates as (vmid, name) choices, sorted by vmid."""
        try:
            resources = self.api.cluster.resources.get(type="vm")
        except Exception as e:
            logger.error("Template query failed: %s", e)
            raise ClusterQueryError(f"Failed to query cluster resources: {e}")

        templates = [
            r for r in resources or []
            if r.get("template") and r.get("vmid") is not None
        ]
        templates.sort(key=lambda r: int(r["vmid"]))
        if not templates:
            raise ClusterQueryError("No VM templates found in the cluster.")
        return [
            Choice(key=str(r["vmid"]), label=str(r.get("name") or f"VM {r['vmid']}"))
            for r in templates
        ]

    def get_vnets(self) -> list[Choice]:
        """List SDN VNets as choices."""
        try:
            vnets = self.api.cluster.sdn.vnets.get()
        except Exception as e:
            logger.error("VNet query failed: %s", e)
            raise ClusterQueryError(
                "No SDN VNets found or SDN is not configured."
                f"\n\n{e}"
            )

        names = [str(v["vnet"]) for v in vnets or [] if v.get("vnet")]
        if not names:
            raise ClusterQueryError("No SDN VNets found or SDN is not configured.")
        return [Choice(key=name, label=name) for name in names]
