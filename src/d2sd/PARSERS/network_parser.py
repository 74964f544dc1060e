"""
Parsers for the Docker Engine 'networks' listing, producing derived labels per network ID.
"""
from typing import Dict, Any, List, Optional
from ..RESOLVERS.label_resolver import NETWORK_LABEL_PREFIX
from ..UTILS.label_sanitizer import sanitize_label_name

NETWORK_ID_LABEL = NETWORK_LABEL_PREFIX + "id"
NETWORK_NAME_LABEL = NETWORK_LABEL_PREFIX + "name"
NETWORK_SCOPE_LABEL = NETWORK_LABEL_PREFIX + "scope"
NETWORK_INTERNAL_LABEL = NETWORK_LABEL_PREFIX + "internal"
NETWORK_INGRESS_LABEL = NETWORK_LABEL_PREFIX + "ingress"
NETWORK_USER_LABEL_PREFIX = NETWORK_LABEL_PREFIX + "label_"


class NetworkParser:
    """
    Parser for raw network entries as returned by the Docker API.
    """
    @staticmethod
    def parse_all(entries: Optional[List[Dict[str, Any]]]) -> Dict[str, Dict[str, str]]:
        """
        Builds the network label map.

        Args:
            entries: The decoded JSON list of networks.

        Returns:
            Dict[str, Dict[str, str]]: Labels keyed by network ID.
        """
        result = {}
        for entry in entries or []:
            labels = NetworkParser.parse(entry)
            result[labels[NETWORK_ID_LABEL]] = labels
        return result

    @staticmethod
    def parse(entry: Dict[str, Any]) -> Dict[str, str]:
        """
        Derives the labels of a single network.
        Booleans are rendered as 'true'/'false'.
        """
        labels = {
            NETWORK_ID_LABEL: entry.get('Id', ''),
            NETWORK_NAME_LABEL: entry.get('Name', ''),
            NETWORK_SCOPE_LABEL: entry.get('Scope', ''),
            NETWORK_INTERNAL_LABEL: str(bool(entry.get('Internal'))).lower(),
            NETWORK_INGRESS_LABEL: str(bool(entry.get('Ingress'))).lower(),
        }
        for k, v in (entry.get('Labels') or {}).items():
            labels[NETWORK_USER_LABEL_PREFIX + sanitize_label_name(k)] = str(v)
        return labels
