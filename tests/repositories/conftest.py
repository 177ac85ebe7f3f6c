import json
from typing import Any, Optional

import pytest
from pydantic import BaseModel

from meili_repository.config.settings import MeiliSettings
from meili_repository.errors import IndexServiceError
from meili_repository.repositories.models import (
    IndexRef,
    IndexStats,
    TaskError,
    TaskHandle,
    TaskInfo,
    TaskStatus,
)


class DummyEntity(BaseModel):
    id: str
    field: str


class FakeMeiliClient:
    """In-memory stand-in for MeiliClient.

    Mutations are applied when they are submitted; their tasks report
    "processing" for ``polls_before_done`` reads and then succeed, unless a
    failure was queued with fail_next_task().
    """

    def __init__(self, polls_before_done: int = 0) -> None:
        self.polls_before_done = polls_before_done
        self.indexes: dict[str, IndexRef] = {}
        self.documents: dict[str, dict[str, dict[str, Any]]] = {}
        self.update_batches: list[list[dict[str, Any]]] = []
        self.calls: list[str] = []
        self.task_reads: dict[int, int] = {}
        self._tasks: dict[int, TaskInfo] = {}
        self._failures: list[Optional[TaskError]] = []
        self._next_uid = 0
        self.never_finish = False

    def fail_next_task(
        self,
        code: str = "invalid_document_id",
        error_type: str = "invalid_request",
        link: str = "https://docs.meilisearch.com/errors#invalid_document_id",
    ) -> None:
        self._failures.append(TaskError(message="boom", code=code, type=error_type, link=link))

    def _enqueue(self, index_uid: str, task_type: str, apply) -> TaskHandle:
        uid = self._next_uid
        self._next_uid += 1
        error = self._failures.pop(0) if self._failures else None
        if error is None:
            apply()
        self._tasks[uid] = TaskInfo(
            uid=uid,
            index_uid=index_uid,
            status=TaskStatus.FAILED if error else TaskStatus.SUCCEEDED,
            type=task_type,
            error=error,
        )
        self.task_reads[uid] = 0
        return TaskHandle(task_uid=uid, index_uid=index_uid, type=task_type)

    def list_indexes(self) -> list[IndexRef]:
        self.calls.append("list_indexes")
        return list(self.indexes.values())

    def create_index(self, index_uid: str, primary_key: str) -> TaskHandle:
        self.calls.append("create_index")

        def apply():
            self.indexes[index_uid] = IndexRef(uid=index_uid, primary_key=primary_key)
            self.documents.setdefault(index_uid, {})

        return self._enqueue(index_uid, "indexCreation", apply)

    def get_index(self, index_uid: str) -> IndexRef:
        self.calls.append("get_index")
        if index_uid not in self.indexes:
            raise IndexServiceError("index not found", status_code=404, code="index_not_found")
        return self.indexes[index_uid]

    def get_task(self, task_uid: int) -> TaskInfo:
        self.task_reads[task_uid] += 1
        task = self._tasks[task_uid]
        if self.never_finish or self.task_reads[task_uid] <= self.polls_before_done:
            return task.model_copy(update={"status": TaskStatus.PROCESSING, "error": None})
        return task

    def update_documents(self, index_uid: str, payload, primary_key: Optional[str] = None) -> TaskHandle:
        self.calls.append("update_documents")
        documents = json.loads(payload) if isinstance(payload, (bytes, str)) else payload
        self.update_batches.append(documents)

        def apply():
            store = self.documents.setdefault(index_uid, {})
            for document in documents:
                store[str(document[primary_key or "id"])] = document

        return self._enqueue(index_uid, "documentAdditionOrUpdate", apply)

    def delete_document(self, index_uid: str, document_id: str) -> TaskHandle:
        self.calls.append("delete_document")
        return self._enqueue(
            index_uid,
            "documentDeletion",
            lambda: self.documents.get(index_uid, {}).pop(document_id, None),
        )

    def delete_all_documents(self, index_uid: str) -> TaskHandle:
        self.calls.append("delete_all_documents")
        return self._enqueue(
            index_uid,
            "documentDeletion",
            lambda: self.documents.get(index_uid, {}).clear(),
        )

    def get_document(self, index_uid: str, document_id: str) -> Optional[dict[str, Any]]:
        self.calls.append("get_document")
        return self.documents.get(index_uid, {}).get(document_id)

    def get_documents(self, index_uid: str, limit: int) -> list[dict[str, Any]]:
        self.calls.append("get_documents")
        return list(self.documents.get(index_uid, {}).values())[:limit]

    def get_stats(self, index_uid: str) -> IndexStats:
        self.calls.append("get_stats")
        return IndexStats(numberOfDocuments=len(self.documents.get(index_uid, {})))


@pytest.fixture
def fake_client():
    return FakeMeiliClient()


@pytest.fixture
def settings():
    return MeiliSettings(
        url="http://meili.test",
        api_key="test-key",
        synchronous=True,
        chunk_size=500,
        task_timeout_ms=500,
        poll_interval_ms=1,
    )


@pytest.fixture
def entity_type():
    return DummyEntity
