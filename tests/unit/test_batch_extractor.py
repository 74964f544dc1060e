"""
Unit tests for resolving a full container snapshot.
"""
from d2sd.MODELS.container_snapshot import ContainerSnapshot, ExposedPort, NetworkInterface
from d2sd.MODELS.resolved_target import ResolvedTarget
from d2sd.RESOLVERS.batch_extractor import count_diagnostics, extract_all, order_targets

TARGET_NETWORK = "metrics-net"


def container(name, job=True, in_network=True, ports=(2000,), explicit_port=None):
    labels = {}
    if job:
        labels["prometheus_job"] = "job1"
    if explicit_port:
        labels["prometheus_scrape_port"] = explicit_port
    networks = {TARGET_NETWORK: NetworkInterface(ip_address=f"ip-{name}", network_id="net1")} if in_network else {}
    return ContainerSnapshot(
        id=f"id-{name}",
        names=[name] if name else [],
        labels=labels,
        ports=[ExposedPort(private_port=p) for p in ports],
        networks=networks,
    )


def extract(containers):
    return extract_all(containers, TARGET_NETWORK, "external", "host1", {})


def test_ordering_not_exported_first():
    result = extract([container("b"), container("a", job=False), container("c")])
    assert [t.name for t in result.targets] == ["a", "b", "c"]
    assert [t.is_exported for t in result.targets] == [False, True, True]


def test_ordering_groups_before_names():
    result = extract([container("a"), container("z", in_network=False), container("m", ports=())])
    assert [t.name for t in result.targets] == ["m", "z", "a"]


def test_order_targets_by_flags():
    targets = [
        ResolvedTarget(name="b", address="x:1", has_job=True, is_in_target_network=True, has_tcp_ports=True),
        ResolvedTarget(name="a"),
        ResolvedTarget(name="c", address="x:1", has_job=True, is_in_target_network=True, has_tcp_ports=True),
    ]
    assert [t.name for t in order_targets(targets)] == ["a", "b", "c"]


def test_skips_unnamed_containers():
    result = extract([container(""), container("a")])
    assert [t.name for t in result.targets] == ["a"]
    assert result.counters.total == 1


def test_one_record_per_container():
    result = extract([container("a"), container("b", job=False), container("c", in_network=False)])
    assert len(result.targets) == 3
    assert len({t.name for t in result.targets}) == 3


def test_counters():
    result = extract([
        container("no-job", job=False),
        container("no-net", in_network=False),
        container("no-ports", ports=()),
        container("ambiguous", ports=(2000, 3000)),
        container("explicit", ports=(2000, 3000), explicit_port="3000"),
        container("single"),
    ])
    counters = result.counters
    assert counters.total == 6
    assert counters.no_job == 1
    assert counters.not_in_target_network == 1
    assert counters.no_tcp_ports == 1
    assert counters.ambiguous_ports == 1
    assert [t.name for t in result.exported] == ["ambiguous", "explicit", "single"]


def test_counters_cascade():
    # a container without job is only counted as such, even if outside the network without ports
    counters = count_diagnostics([ResolvedTarget(name="x")])
    assert counters.no_job == 1
    assert counters.not_in_target_network == 0
    assert counters.no_tcp_ports == 0


def test_empty_snapshot():
    result = extract([])
    assert result.targets == []
    assert result.counters.total == 0
