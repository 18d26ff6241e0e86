from __future__ import annotations

import uuid

import pytest

from ringi.domain.approval import InMemoryRequestTable
from ringi.domain.approval.workflow import ApprovalWorkflow
from ringi.domain.locking import ExclusiveSection, ProcessLock
from ringi.domain.notifications import NotificationComposer

from tests.fixtures.recording_channel import RecordingNotificationChannel
from tests.fixtures.sequential_ids import SequentialIds
from tests.fixtures.step_clock import TOKYO, StepClock
from tests.fixtures.users import BOB


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def table() -> InMemoryRequestTable:
    return InMemoryRequestTable()


@pytest.fixture
def channel() -> RecordingNotificationChannel:
    return RecordingNotificationChannel()


@pytest.fixture
def section() -> ExclusiveSection:
    # Unique name per test so tests never share a process-wide lock.
    return ExclusiveSection(ProcessLock(f"test-{uuid.uuid4().hex}"), poll_interval=0.001, timeout=2.0)


@pytest.fixture
def make_workflow(table, channel, section):
    def _make(**overrides) -> ApprovalWorkflow:
        kwargs = dict(
            table=table,
            section=section,
            channel=channel,
            composer=NotificationComposer(base_url="https://ringi.example.com/app"),
            id_generator=SequentialIds(),
            clock=StepClock(),
            tz=TOKYO,
        )
        kwargs.update(overrides)
        return ApprovalWorkflow(**kwargs)

    return _make


@pytest.fixture
def workflow(make_workflow) -> ApprovalWorkflow:
    return make_workflow()


@pytest.fixture
def laptop_form() -> dict:
    return {
        "title": "Laptop",
        "approver": BOB,
        "amount": 1000,
        "description": "Replacement for a broken laptop",
        "benefits": "Developer productivity",
        "avoidableRisks": "Downtime",
    }
