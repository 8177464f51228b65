"""Mirror mutations and the statistics recomputed after each one."""

from datetime import datetime

from dashboard.models import AVG_RESPONSE_TIME_PLACEHOLDER_MS
from dashboard.mirror import ServiceMirror
from dashboard.stats import compute_statistics
from tests.conftest import make_instance


def assert_stats_consistent(mirror: ServiceMirror):
    stats = mirror.statistics
    instances = mirror.instances()
    assert stats.total_instances == len(instances)
    assert stats.total_services == len({s.service_name for s in instances})
    assert stats.online_services <= stats.total_services


def test_replace_all_keeps_input_order(mirror):
    records = [make_instance(3, "c"), make_instance(1, "a"), make_instance(2, "b")]
    mirror.replace_all(records)

    assert [s.id for s in mirror.instances()] == [3, 1, 2]
    assert_stats_consistent(mirror)


def test_insert_and_remove_update_statistics(mirror):
    mirror.insert(make_instance(1, "order-service"))
    mirror.insert(make_instance(2, "order-service"))
    mirror.insert(make_instance(3, "pay-service", status="DOWN"))
    assert_stats_consistent(mirror)
    assert mirror.statistics.total_services == 2
    assert mirror.statistics.online_services == 1

    assert mirror.remove_by_id(3) is True
    assert_stats_consistent(mirror)
    assert mirror.statistics.total_services == 1


def test_remove_missing_id_is_noop(mirror):
    mirror.insert(make_instance(1))
    assert mirror.remove_by_id(42) is False
    assert len(mirror) == 1


def test_update_by_id_merges_patch(mirror):
    mirror.insert(make_instance(1, status="DOWN", virtualDomain=None))

    assert mirror.update_by_id(1, {"status": "UP", "virtual_domain": "orders.local"}) is True

    updated = mirror.get(1)
    assert updated.status == "UP"
    assert updated.virtual_domain == "orders.local"
    assert updated.service_name == "order-service"
    assert mirror.statistics.online_services == 1


def test_update_missing_id_is_noop(mirror):
    assert mirror.update_by_id(7, {"status": "UP"}) is False
    assert len(mirror) == 0


def test_replace_all_discards_earlier_optimistic_update(mirror):
    mirror.insert(make_instance(1, status="DOWN"))
    stale_snapshot = [make_instance(1, status="DOWN")]

    mirror.update_by_id(1, {"status": "UP"})
    mirror.replace_all(stale_snapshot)

    assert mirror.get(1).status == "DOWN"


def test_instance_count_by_name(mirror):
    mirror.replace_all([make_instance(1, "a"), make_instance(2, "a"), make_instance(3, "b")])
    assert mirror.instance_count("a") == 2
    assert mirror.instance_count("missing") == 0


def test_statistics_use_clock():
    stamp = datetime(2026, 1, 2, 3, 4, 5)
    mirror = ServiceMirror(clock=lambda: stamp)
    mirror.insert(make_instance(1))
    assert mirror.statistics.last_update_time == stamp


def test_online_counts_distinct_names_with_any_up_instance():
    stats = compute_statistics([
        make_instance(1, "a", status="UP"),
        make_instance(2, "a", status="DOWN"),
        make_instance(3, "b", status="DOWN"),
        make_instance(4, "c", status="STARTING"),
    ])
    assert stats.total_services == 3
    assert stats.online_services == 1
    assert stats.total_instances == 4
    assert stats.avg_response_time == AVG_RESPONSE_TIME_PLACEHOLDER_MS


def test_empty_statistics():
    stats = compute_statistics([])
    assert (stats.total_services, stats.online_services, stats.total_instances) == (0, 0, 0)
