"""
Utilities for turning arbitrary container label keys into Prometheus label names.
"""
import re

_INVALID_LABEL_CHARS = re.compile(r'[^a-zA-Z0-9_]')


def sanitize_label_name(name: str) -> str:
    """
    Replaces every character that is not valid in a Prometheus label name with '_'.

    :param name: Raw label key, e.g. 'com.docker.compose.service'.
    :return: Sanitized key, e.g. 'com_docker_compose_service'.
    """
    return _INVALID_LABEL_CHARS.sub('_', name)
