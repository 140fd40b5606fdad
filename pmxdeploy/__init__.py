"""pmxdeploy - deploy Cloud-Init VMs on Proxmox VE from a terminal UI."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
