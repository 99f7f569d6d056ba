"""
tests/test_sync_service.py

End-to-end sync runs over in-memory connectors.

Coverage
--------
- Report invariants (counts, one result per item, unique remote ids)
- No collection configured: null collection status, no polling
- Slow file never ready: not-processed, no association call
- Association failure keeps the upload
- Fatal configuration and listing errors
- Overall run deadline
- Abandoned in-flight files are never assigned after the report
"""

from __future__ import annotations

import threading

import pytest
from conftest import PENDING, READY, FakeClock, FakeIngestion, FakeStorage, make_config, make_item

from docsync.config import ReadinessPolicy
from docsync.domain.sync_run import CollectionStatus, RunReport, UploadStatus
from docsync.errors import ConfigError, ListingError
from docsync.services.sync_service import SyncService, build_sync_service


def _run(config, storage, ingestion, clock: FakeClock) -> RunReport:
    service = SyncService(
        config=config,
        storage=storage,
        ingestion=ingestion,
        sleep=clock.sleep,
        clock=clock,
    )
    return service.run()


def _assert_invariants(report: RunReport) -> None:
    assert report.successful + report.failed == report.total_files
    assert 0 <= report.added_to_collection <= report.successful
    assert len(report.results) == report.total_files
    remote_ids = [r.remote_id for r in report.results if r.remote_id is not None]
    assert len(remote_ids) == len(set(remote_ids))


def test_one_fetch_failure_without_collection(clock) -> None:
    items = [make_item("a.md"), make_item("b.pdf"), make_item("c.txt")]
    storage = FakeStorage(items, failing_refs={items[1].content_ref})
    ingestion = FakeIngestion()

    report = _run(make_config(), storage, ingestion, clock)

    _assert_invariants(report)
    assert (report.total_files, report.successful, report.failed, report.added_to_collection) == (3, 2, 1, 0)
    assert [(e.file, e.error) for e in report.errors] == [
        ("b.pdf", "Failed to fetch blob content: Not Found")
    ]
    assert [r.file for r in report.results] == ["a.md", "b.pdf", "c.txt"]


def test_without_collection_every_upload_has_null_status(clock) -> None:
    items = [make_item("a.md"), make_item("b.md")]
    ingestion = FakeIngestion()

    report = _run(make_config(), FakeStorage(items), ingestion, clock)

    assert [r.collection_status for r in report.results] == [None, None]
    assert ingestion.status_calls == {}
    assert ingestion.assignments == []
    assert clock.sleeps == []


def test_slow_file_is_not_processed_and_never_assigned(clock) -> None:
    items = [make_item("fast.md"), make_item("slow.pdf")]
    ingestion = FakeIngestion(statuses={"fast.md": [PENDING, READY], "slow.pdf": [PENDING]})
    config = make_config(knowledge_collection_id="kb-1", upload_concurrency=1)

    report = _run(config, FakeStorage(items), ingestion, clock)

    _assert_invariants(report)
    assert report.successful == 2
    assert report.added_to_collection == 1
    statuses = {r.file: r.collection_status for r in report.results}
    assert statuses == {"fast.md": CollectionStatus.ADDED, "slow.pdf": CollectionStatus.NOT_PROCESSED}
    assert ingestion.status_calls["fast.md"] == 2
    assert ingestion.status_calls["slow.pdf"] == 6
    assert ingestion.assignments == [("kb-1", ingestion.remote_id_for("fast.md"))]
    assert clock.sleeps[0] == 5.0


def test_association_failure_keeps_uploaded_status(clock) -> None:
    items = [make_item("a.md")]
    ingestion = FakeIngestion(failing_assignments={"a.md"})

    report = _run(make_config(knowledge_collection_id="kb-1"), FakeStorage(items), ingestion, clock)

    _assert_invariants(report)
    result = report.results[0]
    assert result.status == UploadStatus.UPLOADED
    assert result.collection_status == CollectionStatus.COLLECTION_FAILED
    assert report.added_to_collection == 0
    assert len(ingestion.uploads) == 1


def test_collection_phase_skipped_when_nothing_uploaded(clock) -> None:
    items = [make_item("a.md")]
    storage = FakeStorage(items, failing_refs={items[0].content_ref})
    ingestion = FakeIngestion()

    report = _run(make_config(knowledge_collection_id="kb-1"), storage, ingestion, clock)

    assert report.failed == 1
    assert clock.sleeps == []
    assert ingestion.status_calls == {}


def test_missing_credentials_abort_before_listing(clock) -> None:
    storage = FakeStorage([make_item("a.md")])
    config = make_config(open_webui_api_key=None, blob_read_write_token="")

    with pytest.raises(ConfigError) as ctx:
        _run(config, storage, FakeIngestion(), clock)

    assert ctx.value.missing == ["BLOB_READ_WRITE_TOKEN", "OPEN_WEB_UI_API_KEY"]
    assert ctx.value.failed_at is not None
    assert storage.list_calls == 0


def test_build_sync_service_validates_config() -> None:
    with pytest.raises(ConfigError):
        build_sync_service(make_config(open_webui_base_url=None))


def test_listing_failure_is_fatal(clock) -> None:
    storage = FakeStorage([], listing_error=ListingError("Failed to list blobs: HTTP 403"))

    with pytest.raises(ListingError):
        _run(make_config(), storage, FakeIngestion(), clock)


def test_unexpected_listing_exception_becomes_listing_error(clock) -> None:
    storage = FakeStorage([], listing_error=KeyError("blobs"))

    with pytest.raises(ListingError):
        _run(make_config(), storage, FakeIngestion(), clock)


def test_deadline_during_polling_marks_not_processed(clock) -> None:
    items = [make_item("slow.pdf")]
    ingestion = FakeIngestion(statuses={"slow.pdf": [PENDING]})
    config = make_config(
        knowledge_collection_id="kb-1",
        upload_concurrency=1,
        run_timeout_seconds=10.0,
        readiness=ReadinessPolicy(max_attempts=6, inter_attempt_delay_seconds=3.0, settling_delay_seconds=5.0),
    )

    report = _run(config, FakeStorage(items), ingestion, clock)

    _assert_invariants(report)
    assert report.results[0].status == UploadStatus.UPLOADED
    assert report.results[0].collection_status == CollectionStatus.NOT_PROCESSED
    assert ingestion.status_calls["slow.pdf"] == 2
    assert sum(clock.sleeps) == pytest.approx(10.0)


def test_many_items_concurrently_keep_invariants(clock) -> None:
    items = [make_item(f"doc-{index}.md") for index in range(12)]
    failing = {items[3].content_ref, items[7].content_ref}
    ingestion = FakeIngestion(
        failing_uploads={"doc-5.md"},
        failing_assignments={"doc-0.md"},
        statuses={"doc-1.md": [PENDING]},
    )
    config = make_config(knowledge_collection_id="kb-1", upload_concurrency=6)

    report = _run(config, FakeStorage(items, failing_refs=failing), ingestion, clock)

    _assert_invariants(report)
    assert report.failed == 3
    assert report.successful == 9
    assert report.added_to_collection == 7
    assert [r.file for r in report.results] == [item.path for item in items]


class BlockingStatusIngestion(FakeIngestion):
    """Holds the status check of ``slow.md`` until ``release``, then reports ready."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.release = threading.Event()

    def get_file_status(self, remote_id: str):
        if remote_id == self.remote_id_for("slow.md"):
            self.release.wait(timeout=5)
            return READY
        return super().get_file_status(remote_id)


def test_in_flight_poll_at_deadline_is_not_processed_and_never_assigned() -> None:
    items = [make_item("fast.md"), make_item("slow.md")]
    ingestion = BlockingStatusIngestion()
    config = make_config(
        knowledge_collection_id="kb-1",
        upload_concurrency=2,
        run_timeout_seconds=0.3,
        readiness=ReadinessPolicy(max_attempts=6, inter_attempt_delay_seconds=0.0, settling_delay_seconds=0.0),
    )
    service = SyncService(config=config, storage=FakeStorage(items), ingestion=ingestion)

    try:
        report = service.run()
    finally:
        ingestion.release.set()
        for thread in threading.enumerate():
            if thread.name.startswith("docsync-collection"):
                thread.join(timeout=5)

    _assert_invariants(report)
    statuses = {r.file: r.collection_status for r in report.results}
    assert statuses == {"fast.md": CollectionStatus.ADDED, "slow.md": CollectionStatus.NOT_PROCESSED}
    assert ingestion.assignments == [("kb-1", ingestion.remote_id_for("fast.md"))]
