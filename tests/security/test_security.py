import os
import pytest
from d2sd.CONVERTERS.to_file_sd import FileSDConverter
from d2sd.CONVERTERS.to_status_view import StatusViewConverter
from d2sd.MODELS.container_snapshot import ContainerSnapshot, ExposedPort, NetworkInterface
from d2sd.RESOLVERS.label_resolver import resolve


def hostile_container():
    return ContainerSnapshot(
        id="evil",
        names=["/<script>alert(1)</script>"],
        labels={
            "prometheus_job": "job",
            "prometheus_x\"}; drop": "<img src=x onerror=alert(1)>",
            "prometheus___address__": "attacker:1",
        },
        networks={"metrics-net": NetworkInterface(ip_address="10.0.0.5", network_id="n")},
        ports=[ExposedPort(private_port=9100)],
    )


def test_status_page_escapes_container_data():
    """
    Container names and label values are user controlled and must not be
    rendered as markup.
    """
    converter = StatusViewConverter()
    page = converter.render(converter.convert([resolve(hostile_container(), "metrics-net", "ext", "host")]))

    assert "<script>" not in page
    assert "<img" not in page


def test_labels_cannot_override_address():
    """
    A container label must not redirect the scrape to another host.
    """
    target = resolve(hostile_container(), "metrics-net", "ext", "host")
    assert target.address == "10.0.0.5:9100"
    assert target.labels["__address__"] == "10.0.0.5:9100"


def test_output_file_not_world_writable(tmp_path):
    output = tmp_path / "docker_sd.yml"
    FileSDConverter().write([], str(output))

    if os.name == 'nt':
        pytest.skip("permission bits not enforced on Windows")
    assert not os.stat(output).st_mode & 0o002
