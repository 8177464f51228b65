"""App state lifecycle, auto-refresh toggle and render snapshot."""

import time
from unittest import mock

from dashboard.models import SchedulerState, Severity
from dashboard.state import AppState
from tests.conftest import FakeRegistryClient, make_record


def make_state(client=None, **kwargs):
    kwargs.setdefault("refresh_interval_ms", 50)
    kwargs.setdefault("notification_ms", 60_000)
    return AppState(client=client or FakeRegistryClient(), **kwargs)


def test_mount_loads_mirror():
    client = FakeRegistryClient([make_record(1, "a"), make_record(2, "b")])
    state = make_state(client)
    try:
        state.mount()
        assert len(state.mirror) == 2
        assert state.notifications.current.severity is Severity.SUCCESS
    finally:
        state.unmount()


def test_context_manager_tears_down():
    client = FakeRegistryClient()
    with make_state(client) as state:
        state.toggle_auto_refresh()
        assert state.scheduler.state is SchedulerState.RUNNING

    assert state.scheduler.state is SchedulerState.STOPPED
    assert state.mounted is False
    # Caller-owned clients are left open
    assert client.closed is False


def test_repeated_mount_unmount_leaves_no_scheduler():
    state = make_state()
    for _ in range(3):
        state.mount(initial_refresh=False)
        state.scheduler.start()
        state.unmount()
    assert state.scheduler.state is SchedulerState.STOPPED
    state.unmount()


def test_toggle_auto_refresh_polls_silently():
    client = FakeRegistryClient([make_record(1)])
    state = make_state(client)
    try:
        assert state.toggle_auto_refresh() is True
        assert state.notifications.current.message == "Auto refresh enabled, every 0.05 seconds"
        time.sleep(0.2)
        # Polling must not overwrite the toggle message
        assert state.notifications.current.message == "Auto refresh enabled, every 0.05 seconds"
        assert client.call_names().count("list_services") >= 2
        assert state.refresh_config.enabled is True

        assert state.toggle_auto_refresh() is False
        assert state.notifications.current.message == "Auto refresh disabled"
        assert state.refresh_config.enabled is False
    finally:
        state.unmount()


def test_filter_and_snapshot():
    client = FakeRegistryClient([
        make_record(1, "Order-Service"),
        make_record(2, "order-service", status="DOWN"),
        make_record(3, "pay-service"),
    ])
    state = make_state(client)
    try:
        state.mount()
        state.set_filter(search_query="order")
        assert [s.id for s in state.filtered_services()] == [1, 2]

        state.set_filter(status_filter="DOWN")
        snapshot = state.snapshot()
        assert [row["id"] for row in snapshot["services"]] == [2]
        assert snapshot["services"][0]["instanceCount"] == 1
        assert snapshot["services"][0]["serviceName"] == "order-service"
        assert snapshot["filter"] == {"searchQuery": "order", "statusFilter": "DOWN"}
        assert snapshot["statistics"]["totalInstances"] == 3
        assert snapshot["autoRefresh"]["state"] == "STOPPED"
        assert snapshot["notification"]["cssClass"] == "bg-success text-white"
        assert snapshot["surfaces"]["register"]["open"] is False

        state.set_filter(search_query="", status_filter="")
        assert len(state.filtered_services()) == 3
    finally:
        state.unmount()


def test_toggle_only_announces_a_real_change():
    state = make_state()
    seen = []
    state.notifications.add_listener(lambda n: seen.append(n.message))
    real_stop = state.scheduler.stop

    def stop_while_another_request_starts():
        stopped = real_stop()
        state.scheduler.start()
        return stopped

    state.scheduler.stop = stop_while_another_request_starts
    try:
        assert state.toggle_auto_refresh() is True
        assert seen == []
        assert state.scheduler.state is SchedulerState.RUNNING
    finally:
        state.scheduler.stop = real_stop
        state.unmount()


def test_snapshot_counts_instances_once_per_name():
    client = FakeRegistryClient([
        make_record(1, "a"),
        make_record(2, "a", status="DOWN"),
        make_record(3, "b"),
    ])
    state = make_state(client)
    try:
        state.mount()
        state.set_filter(status_filter="DOWN")
        with mock.patch.object(state.mirror, "instance_count", side_effect=AssertionError("per-row scan")):
            rows = state.snapshot()["services"]
        assert [(row["id"], row["instanceCount"]) for row in rows] == [(2, 2)]
    finally:
        state.unmount()
