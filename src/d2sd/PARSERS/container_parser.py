# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Parsers for the Docker Engine 'containers/json' listing.
"""
from typing import Dict, Any, List, Optional
from ..MODELS.container_snapshot import ContainerSnapshot, ExposedPort, NetworkInterface


class ContainerParser:
    """
    Parser for raw container entries as returned by the Docker API.
    """
    def parse_all(self, entries: Optional[List[Dict[str, Any]]]) -> List[ContainerSnapshot]:
        """
        Parses a full container listing.

        :param entries: The decoded JSON list.
        :return: One snapshot per entry.
        """
        return [self.parse(entry) for entry in entries or []]

    def parse(self, entry: Dict[str, Any]) -> ContainerSnapshot:
        """
        Parses a single container entry.
        Missing or null fields become empty values.

        :param entry: One element of the listing.
        :return: A ContainerSnapshot instance.
        """
        host_config = entry.get('HostConfig') or {}
        settings = entry.get('NetworkSettings') or {}

        networks = {}
        for name, endpoint in (settings.get('Networks') or {}).items():
            endpoint = endpoint or {}
            networks[name] = NetworkInterface(
                ip_address=endpoint.get('IPAddress') or '',
                network_id=endpoint.get('NetworkID') or '',
            )

        return ContainerSnapshot(
            id=entry.get('Id', ''),
            names=list(entry.get('Names') or []),
            labels={k: str(v) for k, v in (entry.get('Labels') or {}).items()},
            state=entry.get('State') or '',
            network_mode=host_config.get('NetworkMode') or '',
            networks=networks,
            ports=[self._parse_port(p) for p in entry.get('Ports') or []],
        )

    def _parse_port(self, port: Dict[str, Any]) -> ExposedPort:
        """
        Parses one port entry, e.g. {'IP': '0.0.0.0', 'PrivatePort': 80, 'PublicPort': 8080, 'Type': 'tcp'}.

        :param port: The port dictionary.
        :return: An ExposedPort instance.
        """
        return ExposedPort(
            type=port.get('Type') or 'tcp',
            private_port=int(port.get('PrivatePort') or 0),
            public_port=port.get('PublicPort') or None,
            ip=port.get('IP') or None,
        )
