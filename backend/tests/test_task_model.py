from __future__ import annotations

from datetime import timedelta

import pytest

from app.core.errors import ValidationError
from app.models.task import MAX_DESCRIPTION_LENGTH, Task, TaskFilter

from .factories import T0, make_task


def test_validate_accepts_description_at_the_length_limit() -> None:
    make_task(description="x" * MAX_DESCRIPTION_LENGTH).validate()


@pytest.mark.parametrize(
    "overrides",
    [
        {"task_id": " "},
        {"owner_id": ""},
        {"description": "   \n\t"},
        {"description": "x" * (MAX_DESCRIPTION_LENGTH + 1)},
    ],
)
def test_validate_rejects_bad_records(overrides: dict) -> None:
    task = make_task(**overrides)
    with pytest.raises(ValidationError):
        task.validate()


def test_length_limit_counts_characters_after_trimming() -> None:
    make_task(description="  " + "é" * MAX_DESCRIPTION_LENGTH + "  ").validate()


def test_hash_round_trip_keeps_deleted_timestamp() -> None:
    task = make_task(category="work")
    task.completed = True
    task.deleted_at = T0 + timedelta(days=1)

    data = task.to_hash()
    assert data["completed"] == "1"
    assert data["user_id"] == "alice"
    assert Task.from_hash(data) == task


def test_active_task_hash_has_no_deleted_field() -> None:
    data = make_task().to_hash()
    assert "deleted_at" not in data
    assert Task.from_hash(data).deleted_at is None


def test_from_hash_accepts_legacy_true_flag() -> None:
    data = make_task().to_hash()
    data["completed"] = "true"
    assert Task.from_hash(data).completed is True


@pytest.mark.parametrize("missing", ["id", "user_id", "created_at"])
def test_from_hash_rejects_incomplete_records(missing: str) -> None:
    data = make_task().to_hash()
    del data[missing]
    with pytest.raises(ValueError):
        Task.from_hash(data)


@pytest.mark.parametrize(
    "task_filter",
    [TaskFilter(limit=-1), TaskFilter(limit=1001), TaskFilter(offset=-1)],
)
def test_filter_rejects_out_of_range_pagination(task_filter: TaskFilter) -> None:
    with pytest.raises(ValidationError):
        task_filter.validate()


def test_filter_accepts_unbounded_and_capped_limits() -> None:
    TaskFilter().validate()
    TaskFilter(limit=0).validate()
    TaskFilter(limit=1000, offset=5).validate()
    assert TaskFilter(category="  work ").category_name == "work"
    assert TaskFilter(category=None).category_name == ""
