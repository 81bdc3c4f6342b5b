import asyncio
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.application import Broadcaster, DemoAuthProvider, PayrollService
from backend.core.errors import AuthError
from backend.core.payroll_rules import calculate
from backend.infrastructure import InMemoryPayrollStore, SheetsError
from backend.routes.realtime import _forward, queue_delivery
from backend.workers.sync import SyncWorker

EMPLOYEE = {
    "employeeName": "Jane Doe",
    "employeeId": "E-100",
    "department": "Engineering",
    "hourlyRate": "20",
    "hoursPerDay": "8",
    "daysPerWeek": "5",
    "weeksPerYear": "52",
    "federalTaxRate": "12",
}


class CountingCalculator:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, values):
        self.calls += 1
        return calculate(values)


class FlakyStore(InMemoryPayrollStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def load_input(self):
        if self.fail:
            raise SheetsError("Google Sheets unreachable")
        return super().load_input()


class LockedStore(InMemoryPayrollStore):
    def is_ready(self) -> bool:
        return False


@pytest.fixture()
def events():
    return []


@pytest.fixture()
def broadcaster(events):
    broadcaster = Broadcaster()
    broadcaster.subscribe(lambda event, payload: events.append((event, payload)))
    return broadcaster


def test_single_field_update_changes_one_field_and_pushes_once(broadcaster, events):
    store = InMemoryPayrollStore()
    calculator = CountingCalculator()
    service = PayrollService(store, DemoAuthProvider(), broadcaster, calculator=calculator)

    asyncio.run(service.create_employee(EMPLOYEE))
    before = store.load_input()
    events.clear()

    asyncio.run(service.update_field("department", "Operations"))

    after = store.load_input()
    assert after == dict(before, department="Operations")
    assert calculator.calls == 1
    assert [event for event, _ in events] == ["dataUpdated"]
    assert events[0][1]["annualPay"] == pytest.approx(41600)


def test_create_employee_pushes_calculation_complete(broadcaster, events):
    service = PayrollService(InMemoryPayrollStore(), DemoAuthProvider(), broadcaster)

    result = asyncio.run(service.create_employee(EMPLOYEE))

    assert events == [("calculationComplete", result.to_payload())]
    assert asyncio.run(service.latest()) == result


def test_mutation_requires_ready_store(broadcaster, events):
    service = PayrollService(LockedStore(), DemoAuthProvider(), broadcaster)

    with pytest.raises(AuthError):
        asyncio.run(service.create_employee(EMPLOYEE))
    with pytest.raises(AuthError):
        asyncio.run(service.update_field("hourlyRate", "20"))
    assert events == []


def test_tick_is_silent_when_result_unchanged(broadcaster, events):
    service = PayrollService(InMemoryPayrollStore(), DemoAuthProvider(), broadcaster)
    worker = SyncWorker(service, interval=0)

    asyncio.run(service.create_employee(EMPLOYEE))
    events.clear()

    assert asyncio.run(worker.tick()) is False
    assert asyncio.run(worker.tick()) is False
    assert events == []


def test_tick_pushes_out_of_band_changes_once(broadcaster, events):
    store = InMemoryPayrollStore()
    service = PayrollService(store, DemoAuthProvider(), broadcaster)
    worker = SyncWorker(service, interval=0)

    asyncio.run(service.create_employee(EMPLOYEE))
    events.clear()

    store.save(dict(store.load_input(), hourlyRate=30.0), store.load_result())

    assert asyncio.run(worker.tick()) is True
    assert asyncio.run(worker.tick()) is False
    assert len(events) == 1
    event, payload = events[0]
    assert event == "dataUpdated"
    assert payload["annualPay"] == pytest.approx(62400)
    assert store.load_result().annual_pay == pytest.approx(62400)


def test_tick_is_silent_with_empty_store(broadcaster, events):
    service = PayrollService(InMemoryPayrollStore(), DemoAuthProvider(), broadcaster)
    assert asyncio.run(SyncWorker(service).tick()) is False
    assert events == []


def test_tick_skipped_without_viewers():
    store = InMemoryPayrollStore()
    service = PayrollService(store, DemoAuthProvider(), Broadcaster())
    store.save(EMPLOYEE, None)

    assert asyncio.run(SyncWorker(service).tick()) is False
    assert store.load_result() is None


def test_tick_reports_upstream_failure(broadcaster, events):
    store = FlakyStore()
    service = PayrollService(store, DemoAuthProvider(), broadcaster)
    store.fail = True

    assert asyncio.run(SyncWorker(service).tick()) is False
    assert events == [("error", {"message": "Real-time sync failed: Google Sheets unreachable"})]


def test_worker_with_zero_interval_does_not_start():
    service = PayrollService(InMemoryPayrollStore(), DemoAuthProvider(), Broadcaster())
    worker = SyncWorker(service, interval=0)
    worker.start()
    assert worker.running is False


def test_worker_loop_runs_until_stopped(broadcaster, events):
    store = InMemoryPayrollStore()
    service = PayrollService(store, DemoAuthProvider(), broadcaster)
    store.save(EMPLOYEE, None)

    async def scenario():
        worker = SyncWorker(service, interval=0.01)
        worker.start()
        await asyncio.sleep(0.1)
        await worker.stop()
        return worker.running

    assert asyncio.run(scenario()) is False
    assert [event for event, _ in events] == ["dataUpdated"]


def test_broadcaster_isolates_failing_subscriber():
    broadcaster = Broadcaster()
    received = []

    def broken(event, payload):
        raise RuntimeError("viewer gone")

    broadcaster.subscribe(broken)
    unsubscribe = broadcaster.subscribe(lambda event, payload: received.append(event))

    assert broadcaster.publish("dataUpdated", {}) == 1
    assert received == ["dataUpdated"]

    unsubscribe()
    assert broadcaster.subscriber_count == 1
    broadcaster.publish("dataUpdated", {})
    assert received == ["dataUpdated"]


def test_slow_viewer_drops_events_without_starving_others(caplog):
    broadcaster = Broadcaster()
    stalled: asyncio.Queue = asyncio.Queue(maxsize=2)
    healthy: asyncio.Queue = asyncio.Queue(maxsize=32)
    broadcaster.subscribe(queue_delivery(stalled))
    broadcaster.subscribe(queue_delivery(healthy))

    with caplog.at_level("WARNING", logger="backend.routes.realtime"):
        delivered = [broadcaster.publish("dataUpdated", {"annualPay": float(n)}) for n in range(5)]

    assert delivered == [2, 2, 2, 2, 2]
    assert stalled.qsize() == 2
    assert [healthy.get_nowait()["data"]["annualPay"] for _ in range(5)] == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert caplog.text.count("Viewer queue full; dropping dataUpdated") == 3


class BrokenSocket:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_json(self, message):
        if self.sent:
            raise ValueError("socket in a bad state")
        self.sent.append(message)


def test_forwarding_stops_quietly_on_send_failure(caplog):
    websocket = BrokenSocket()

    async def scenario():
        queue: asyncio.Queue = asyncio.Queue()
        deliver = queue_delivery(queue)
        deliver("dataUpdated", {"annualPay": 1.0})
        deliver("dataUpdated", {"annualPay": 2.0})
        await asyncio.wait_for(_forward(websocket, queue), timeout=1)

    with caplog.at_level("WARNING", logger="backend.routes.realtime"):
        asyncio.run(scenario())

    assert websocket.sent == [{"event": "dataUpdated", "data": {"annualPay": 1.0}}]
    assert "Stopped forwarding to viewer: socket in a bad state" in caplog.text
