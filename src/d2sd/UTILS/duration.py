"""
Parsing of Go-style duration strings such as '5s', '1m30s' or '500ms'.
"""
import math
import re

_UNITS = {
    'ms': 0.001,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}

_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|s|m|h)')


def parse_duration(value: str) -> float:
    """
    Parses a duration into seconds.
    A bare number is taken as seconds.

    :param value: Duration string, e.g. '60s', '1h30m', '250ms' or '15'.
    :return: The duration in seconds.
    :raises ValueError: If the string is not a valid, positive duration.
    """
    text = value.strip()
    if not text:
        raise ValueError("Empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        for match in _PART.finditer(text):
            if match.start() != pos:
                break
            seconds += float(match.group(1)) * _UNITS[match.group(2)]
            pos = match.end()
        if pos != len(text):
            raise ValueError(f"Invalid duration: {value}")

    if not math.isfinite(seconds):
        raise ValueError(f"Duration must be finite: {value}")
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value}")
    return seconds
