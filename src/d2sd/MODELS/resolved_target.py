"""
Models for the outcome of resolving one container into a scrape target.
"""
from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict


class PortSelection(str, Enum):
    """
    How the scrape port of a container was chosen.
    """
    NO_PORTS = "no_ports"
    SYNTHETIC_EXPLICIT = "synthetic_explicit"  # no live ports, explicit port label used
    SELECTED_LOWEST = "selected_lowest"
    SELECTED_EXPLICIT_MATCH = "selected_explicit_match"


class ResolvedTarget(BaseModel):
    """
    The decision record for one container, whether it is exported or not.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    address: str = ""
    labels: Dict[str, str] = {}

    # Diagnostics
    has_job: bool = False
    is_in_target_network: bool = False
    has_tcp_ports: bool = False  # at least 1 TCP port
    has_explicit_port: bool = False  # explicit or single port
    scrape_external: bool = False
    port_selection: Optional[PortSelection] = None

    @property
    def is_exported(self) -> bool:
        """Whether the container ends up in the service discovery output."""
        return self.has_job and self.is_in_target_network and self.has_tcp_ports
