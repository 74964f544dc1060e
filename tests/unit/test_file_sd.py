"""
Unit tests for writing the file_sd_config output.
"""
import json

import pytest
import yaml
from d2sd.CONVERTERS.to_file_sd import FileSDConverter
from d2sd.MODELS.resolved_target import ResolvedTarget


def exported(name, address):
    return ResolvedTarget(
        name=name,
        address=address,
        labels={"job": "job1", "instance": f"host1{name}:2000"},
        has_job=True,
        is_in_target_network=True,
        has_tcp_ports=True,
    )


TARGETS = [
    ResolvedTarget(name="/ignored", labels={"__meta_docker_container_name": "/ignored"}),
    exported("/app1", "ip1:2000"),
    exported("/app2", "ip2:2000"),
]


def test_convert_keeps_exported_only():
    entries = FileSDConverter().convert(TARGETS)
    assert [e.targets for e in entries] == [["ip1:2000"], ["ip2:2000"]]
    assert entries[0].labels["job"] == "job1"


@pytest.mark.parametrize("filename", ["docker_sd.yml", "docker_sd.yaml"])
def test_write_yaml(tmp_path, filename):
    output = tmp_path / filename
    written = FileSDConverter().write(TARGETS, str(output))

    assert written == 2
    data = yaml.safe_load(output.read_text())
    assert data[0]["targets"] == ["ip1:2000"]
    assert data[1]["labels"]["instance"] == "host1/app2:2000"


def test_write_json(tmp_path):
    output = tmp_path / "docker_sd.json"
    FileSDConverter().write(TARGETS, str(output))

    data = json.loads(output.read_text())
    assert len(data) == 2
    assert data[0] == {"targets": ["ip1:2000"], "labels": {"job": "job1", "instance": "host1/app1:2000"}}


def test_write_replaces_existing_file(tmp_path):
    output = tmp_path / "docker_sd.json"
    output.write_text("stale")
    FileSDConverter().write([], str(output))

    assert json.loads(output.read_text()) == []
    assert [p.name for p in tmp_path.iterdir()] == ["docker_sd.json"]


def test_unsupported_extension(tmp_path):
    output = tmp_path / "docker_sd.txt"
    with pytest.raises(ValueError):
        FileSDConverter().write(TARGETS, str(output))
    assert not output.exists()


def test_missing_directory(tmp_path):
    with pytest.raises(OSError):
        FileSDConverter().write(TARGETS, str(tmp_path / "missing" / "docker_sd.yml"))
