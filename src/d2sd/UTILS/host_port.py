"""
Helpers for composing and splitting 'host:port' strings.
"""
from typing import Tuple


def join_host_port(host: str, port: str) -> str:
    """
    Combines host and port into 'host:port'.
    IPv6 literals (anything containing ':') are wrapped in brackets.

    :param host: Hostname or IP address.
    :param port: Port as a string.
    :return: The joined address.
    """
    if ':' in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def split_host_port(address: str) -> Tuple[str, int]:
    """
    Splits a listen address such as ':9200', '0.0.0.0:9200' or '[::]:9200'.
    An empty host means all interfaces.

    :param address: The address to split.
    :return: Tuple of (host, port).
    :raises ValueError: If the address has no port or the port is not numeric.
    """
    host, sep, port = address.rpartition(':')
    if not sep:
        raise ValueError(f"Missing port in address: {address}")
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    if not host:
        host = '0.0.0.0'
    return host, int(port)
