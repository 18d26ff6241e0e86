from __future__ import annotations

import csv

import pytest

from ringi.core.errors import StoreUnavailable
from ringi.db.connection import init_db, make_engine, make_session_factory
from ringi.domain.approval import (
    ApprovalRequestEntity,
    ApprovalStatus,
    ColumnLayout,
    CsvRequestTable,
    InMemoryRequestTable,
    SqlRequestTable,
)
from ringi.domain.approval.workflow import ApprovalWorkflow
from ringi.domain.locking import ExclusiveSection, ProcessLock

from tests.fixtures.recording_channel import RecordingNotificationChannel
from tests.fixtures.sequential_ids import SequentialIds
from tests.fixtures.users import ALICE, BOB


def _entity(**changes) -> ApprovalRequestEntity:
    return ApprovalRequestEntity(
        id="APR_1",
        title="Laptop",
        applicant=ALICE,
        approver=BOB,
        amount=1000.0,
        avoidable_risks="Downtime",
        created_at="2026/04/01 09:00:00",
    ).with_changes(**changes)


# ---------------------------------------------------------------------------
# ColumnLayout
# ---------------------------------------------------------------------------


def test_default_layout_round_trips_entity() -> None:
    layout = ColumnLayout.default()

    row = layout.to_row(_entity())

    assert row[:5] == ["APR_1", "Laptop", ALICE, BOB, "pending"]
    assert layout.to_entity(row) == _entity()


def test_header_layout_matches_labels_loosely() -> None:
    layout = ColumnLayout.from_header(
        ["Notes", "ID", "Title", "Applicant", "Approver", "Status", "Avoidable Risks", "created_at"]
    )

    assert layout.offset("id") == 1
    assert layout.offset("avoidable_risks") == 6
    assert layout.offset("created_at") == 7
    assert layout.offset("amount") is None


def test_header_layout_preserves_unmapped_cells_and_skips_missing_fields() -> None:
    layout = ColumnLayout.from_header(["Notes", "ID", "Title", "Applicant", "Approver", "Status"])
    row = ["keep me", "APR_1", "Laptop", ALICE, BOB, "pending"]

    entity = layout.to_entity(row)
    rewritten = layout.to_row(entity.with_changes(status=ApprovalStatus.WITHDRAWN), base=row)

    assert entity.amount is None
    assert entity.created_at == ""
    assert rewritten == ["keep me", "APR_1", "Laptop", ALICE, BOB, "withdrawn"]


def test_layout_requires_core_columns() -> None:
    with pytest.raises(StoreUnavailable):
        ColumnLayout.from_header(["ID", "Title", "Applicant"])


def test_fixed_order_layout() -> None:
    layout = ColumnLayout.from_order(["status", "id", "title", "approver", "applicant"])

    entity = layout.to_entity(["approved", "APR_9", "Desk", BOB, ALICE])

    assert entity.status is ApprovalStatus.APPROVED
    assert (entity.id, entity.applicant, entity.approver) == ("APR_9", ALICE, BOB)
    assert layout.header_row() == ["status", "id", "title", "approver", "applicant"]


def test_fixed_order_rejects_unknown_column() -> None:
    with pytest.raises(StoreUnavailable):
        ColumnLayout.from_order(["id", "title", "applicant", "approver", "status", "colour"])


def test_status_cell_is_read_case_and_space_insensitively() -> None:
    record = ColumnLayout.default().to_entity(["APR_1", "T", ALICE, BOB, " Approved "])

    assert record.status is ApprovalStatus.APPROVED


def test_unknown_status_cell_is_reported() -> None:
    with pytest.raises(StoreUnavailable):
        ColumnLayout.default().to_entity(["APR_1", "T", ALICE, BOB, "archived"])


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


@pytest.fixture(params=["memory", "csv", "sql"])
def any_table(request, tmp_path):
    if request.param == "memory":
        return InMemoryRequestTable()
    if request.param == "csv":
        return CsvRequestTable.initialize(path=tmp_path / "requests.csv")
    engine = make_engine("sqlite://")
    init_db(engine)
    return SqlRequestTable(make_session_factory(engine))


def test_table_append_scan_update(any_table) -> None:
    layout = any_table.layout
    any_table.append(layout.to_row(_entity(id="APR_1")))
    any_table.append(layout.to_row(_entity(id="APR_2", title="Monitor")))

    any_table.update(1, layout.to_row(_entity(id="APR_2", title="Monitor", status=ApprovalStatus.APPROVED)))

    entities = [layout.to_entity(r) for r in any_table.scan()]
    assert [e.id for e in entities] == ["APR_1", "APR_2"]
    assert entities[1].status is ApprovalStatus.APPROVED
    assert entities[0].amount == 1000.0


def test_table_update_out_of_range(any_table) -> None:
    with pytest.raises(IndexError):
        any_table.update(0, ["APR_X"])


def test_workflow_runs_on_every_table(any_table) -> None:
    workflow = ApprovalWorkflow(
        table=any_table,
        section=ExclusiveSection(ProcessLock("tables-test")),
        channel=RecordingNotificationChannel(),
        id_generator=SequentialIds(),
    )

    record = workflow.create(ALICE, {"title": "Laptop", "approver": BOB, "amount": 1000})
    workflow.update_status(BOB, record.id, "approved", comment="ok")

    [listed] = workflow.list_requests(ALICE, 10, 0).data
    assert listed.status is ApprovalStatus.APPROVED
    assert listed.approver_comment == "ok"
    assert listed.amount == 1000.0


def test_csv_sheet_missing_is_store_unavailable(tmp_path) -> None:
    sheet = CsvRequestTable(path=tmp_path / "missing.csv")

    with pytest.raises(StoreUnavailable):
        sheet.scan()
    with pytest.raises(StoreUnavailable):
        sheet.append(["APR_1"])
    with pytest.raises(StoreUnavailable):
        _ = sheet.layout


def test_csv_sheet_is_header_driven(tmp_path) -> None:
    # Arrange: a sheet exported with its own column order and an extra column
    path = tmp_path / "requests.csv"
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["Status", "ID", "Title", "Applicant", "Approver", "Memo"])
        writer.writerow(["pending", "APR_1", "Laptop", ALICE, BOB, "ops"])
    sheet = CsvRequestTable(path=path)
    workflow = ApprovalWorkflow(
        table=sheet,
        section=ExclusiveSection(ProcessLock("csv-header-test")),
        channel=RecordingNotificationChannel(),
    )

    # Act
    workflow.withdraw(ALICE, "APR_1")

    # Assert
    with path.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))
    assert rows[0] == ["Status", "ID", "Title", "Applicant", "Approver", "Memo"]
    assert rows[1] == ["withdrawn", "APR_1", "Laptop", ALICE, BOB, "ops"]


def test_csv_sheet_with_fixed_layout_still_skips_header(tmp_path) -> None:
    layout = ColumnLayout.from_order(["id", "title", "applicant", "approver", "status"])
    CsvRequestTable.initialize(path=tmp_path / "requests.csv", layout=layout)
    sheet = CsvRequestTable(path=tmp_path / "requests.csv", layout=layout)

    sheet.append(layout.to_row(_entity()))

    assert sheet.scan() == [["APR_1", "Laptop", ALICE, BOB, "pending"]]


def test_sql_table_missing_is_store_unavailable() -> None:
    table = SqlRequestTable(make_session_factory(make_engine("sqlite://")))

    with pytest.raises(StoreUnavailable):
        table.scan()
