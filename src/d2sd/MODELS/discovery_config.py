"""
Models for the discovery runtime configuration.
"""
import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..errors import ConfigurationError
from ..UTILS.duration import parse_duration
from ..UTILS.host_port import split_host_port

ENV_PREFIX = "PROMETHEUS_DOCKER_SD"
SUPPORTED_OUTPUT_EXTENSIONS = (".json", ".yml", ".yaml")


class DiscoveryConfig(BaseModel):
    """
    Complete configuration for a discovery process.
    External host and external URL default from the instance prefix.
    """
    model_config = ConfigDict(frozen=True)

    docker_host: str = "unix:///var/run/docker.sock"
    target_network: str = "metrics-net"
    instance_prefix: str
    external_host: str = ""
    refresh_interval: float = Field(default=60.0, gt=0, allow_inf_nan=False)  # seconds

    # Output
    output_file: str = "docker_sd.yml"
    http_address: str = ":9200"
    external_url: str = ""

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("target_network", "instance_prefix")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("output_file")
    @classmethod
    def _supported_extension(cls, value: str) -> str:
        _, ext = os.path.splitext(value.lower())
        if ext not in SUPPORTED_OUTPUT_EXTENSIONS:
            raise ValueError(f"unsupported file extension in output file: {value}")
        return value

    @field_validator("http_address")
    @classmethod
    def _valid_address(cls, value: str) -> str:
        split_host_port(value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data):
        if isinstance(data, dict) and data.get("instance_prefix"):
            data = dict(data)
            prefix = data["instance_prefix"]
            if not data.get("external_host"):
                data["external_host"] = prefix
            if not data.get("external_url"):
                data["external_url"] = f"http://{prefix}:9200"
        return data

    @classmethod
    def build(cls, refresh_interval: Optional[str] = None, **values) -> "DiscoveryConfig":
        """
        Builds a config from raw option values, converting validation failures.

        :param refresh_interval: Go-style duration string, e.g. '60s'.
        :param values: Remaining fields.
        :return: The validated configuration.
        :raises ConfigurationError: If any value is invalid.
        """
        try:
            if refresh_interval is not None:
                values["refresh_interval"] = parse_duration(refresh_interval)
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
