from __future__ import annotations

import pytest

from core.objects.service import ObjectService
from tests.fakes import InMemoryRecords, RecordingBlobStore, RecordingLogger


@pytest.fixture()
def records() -> InMemoryRecords:
    return InMemoryRecords()


@pytest.fixture()
def blobs() -> RecordingBlobStore:
    return RecordingBlobStore()


@pytest.fixture()
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture()
def service(records: InMemoryRecords, blobs: RecordingBlobStore, recording_logger: RecordingLogger) -> ObjectService:
    return ObjectService(records, blobs, log=recording_logger)
