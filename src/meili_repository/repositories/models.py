"""Wire models for the Meilisearch index and task APIs."""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

Document = dict[str, Any]


class TaskStatus(str, Enum):
    """Lifecycle states of a service task."""
    ENQUEUED = "enqueued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELED)


class IndexRef(BaseModel):
    """Resolved reference to a named index."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uid: str
    primary_key: Optional[str] = Field(default=None, alias="primaryKey")


class TaskHandle(BaseModel):
    """Summary returned as soon as a mutation is enqueued.

    Holding a handle does not mean the mutation has been applied.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    task_uid: int = Field(validation_alias=AliasChoices("taskUid", "uid", "task_uid"))
    index_uid: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("indexUid", "index_uid")
    )
    status: TaskStatus = TaskStatus.ENQUEUED
    type: Optional[str] = None


class TaskError(BaseModel):
    """Error block attached to a failed task."""
    model_config = ConfigDict(frozen=True)

    message: Optional[str] = None
    code: Optional[str] = None
    type: Optional[str] = None
    link: Optional[str] = None


class TaskInfo(BaseModel):
    """Current state of a task as reported by GET /tasks/{uid}.

    Once ``status`` is terminal this is the task's result: succeeded, or
    failed/canceled with ``error`` describing why.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uid: int = Field(validation_alias=AliasChoices("uid", "taskUid"))
    index_uid: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("indexUid", "index_uid")
    )
    status: TaskStatus
    type: Optional[str] = None
    error: Optional[TaskError] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def succeeded(self) -> bool:
        return self.status == TaskStatus.SUCCEEDED and self.error is None


class IndexStats(BaseModel):
    """Subset of an index stats response used for counting documents.

    Search totals are capped by the index's ``pagination.maxTotalHits``
    (1000 by default); the stats document count is not.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    number_of_documents: int = Field(default=0, alias="numberOfDocuments")
    is_indexing: bool = Field(default=False, alias="isIndexing")
