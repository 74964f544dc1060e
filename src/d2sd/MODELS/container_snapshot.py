"""
Models for the per-poll view of a container, as reported by the Docker API.
"""
from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict


class NetworkInterface(BaseModel):
    """
    A container's endpoint on one network.
    """
    model_config = ConfigDict(frozen=True)

    ip_address: str = ""
    network_id: str = ""


class ExposedPort(BaseModel):
    """
    A single port entry. The same private port may appear once per host binding.
    """
    model_config = ConfigDict(frozen=True)

    type: str = "tcp"
    private_port: int
    public_port: Optional[int] = None
    ip: Optional[str] = None


class ContainerSnapshot(BaseModel):
    """
    Immutable attributes of one container for a single poll cycle.
    Equivalent to one entry of the Docker 'containers/json' listing.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    names: List[str] = []
    labels: Dict[str, str] = {}
    state: str = ""
    network_mode: str = ""

    # Networking
    networks: Dict[str, NetworkInterface] = {}  # {network name: interface}
    ports: List[ExposedPort] = []

    @property
    def name(self) -> Optional[str]:
        """The canonical (first) name, or None if the container has none."""
        return self.names[0] if self.names else None
