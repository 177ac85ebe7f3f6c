"""Tests for create-if-absent index resolution."""

import pytest

from meili_repository.errors import IllegalStateError, IndexServiceError
from meili_repository.repositories.index_binding import IndexBinding
from meili_repository.repositories.models import IndexRef
from meili_repository.repositories.task_coordinator import TaskCoordinator


@pytest.fixture
def binding(fake_client):
    coordinator = TaskCoordinator(fake_client, max_wait_ms=200, poll_interval_ms=1)
    return IndexBinding(fake_client, coordinator, primary_key="id")


def test_existing_index_is_reused(binding, fake_client):
    fake_client.indexes["books"] = IndexRef(uid="books", primary_key="id")

    index = binding.resolve("books")

    assert index.uid == "books"
    assert fake_client.calls == ["list_indexes"]


def test_missing_index_is_created_then_refetched(binding, fake_client):
    fake_client.polls_before_done = 2

    index = binding.resolve("books")

    assert index == IndexRef(uid="books", primary_key="id")
    assert fake_client.calls == ["list_indexes", "create_index", "get_index"]
    assert binding.uid == "books"


def test_creation_failure_is_illegal_state(binding, fake_client):
    fake_client.fail_next_task(code="index_creation_failed", error_type="internal")

    with pytest.raises(IllegalStateError) as exc_info:
        binding.resolve("books")

    assert "books" in str(exc_info.value)


def test_lookup_failure_is_illegal_state(fake_client):
    class Unreachable:
        def list_indexes(self):
            raise IndexServiceError("connection refused")

    coordinator = TaskCoordinator(fake_client)
    binding = IndexBinding(Unreachable(), coordinator, primary_key="id")

    with pytest.raises(IllegalStateError) as exc_info:
        binding.resolve("books")

    assert isinstance(exc_info.value.__cause__, IndexServiceError)


def test_index_before_resolve_raises(binding):
    with pytest.raises(IllegalStateError):
        binding.index


def test_resolves_only_once(binding, fake_client):
    binding.resolve("books")

    with pytest.raises(IllegalStateError):
        binding.resolve("other")

    assert binding.uid == "books"
