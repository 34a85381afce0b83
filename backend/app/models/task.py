"""Task model: the canonical record, listing filters and hash encoding."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from app.core.errors import ValidationError

MAX_DESCRIPTION_LENGTH = 10000
MAX_LIST_LIMIT = 1000
RESTORE_WINDOW = timedelta(days=7)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(raw: str | None) -> datetime | None:
    if not raw:
        return None
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass(slots=True)
class Task:
    id: str
    owner_id: str
    description: str
    category: str = ""  # "" means uncategorized
    completed: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def validate(self) -> None:
        """Reject records that must never reach storage."""
        if not self.id.strip():
            raise ValidationError("task ID cannot be empty")
        if not self.owner_id.strip():
            raise ValidationError("owner ID cannot be empty")
        description = self.description.strip()
        if not description:
            raise ValidationError("task description cannot be empty")
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"task description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )

    def to_hash(self) -> dict[str, str]:
        data = {
            "id": self.id,
            "user_id": self.owner_id,
            "description": self.description,
            "category": self.category,
            "completed": "1" if self.completed else "0",
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.deleted_at is not None:
            data["deleted_at"] = self.deleted_at.isoformat()
        return data

    @classmethod
    def from_hash(cls, data: dict[str, str]) -> "Task":
        """Build a Task from HGETALL output. Raises ValueError if malformed."""
        if not data.get("id") or not data.get("user_id"):
            raise ValueError("task hash is missing id or owner")
        created_at = _parse_time(data.get("created_at"))
        if created_at is None:
            raise ValueError("task hash is missing created_at")
        return cls(
            id=data["id"],
            owner_id=data["user_id"],
            description=data.get("description", ""),
            category=data.get("category", ""),
            completed=data.get("completed") in ("1", "true"),
            created_at=created_at,
            updated_at=_parse_time(data.get("updated_at")) or created_at,
            deleted_at=_parse_time(data.get("deleted_at")),
        )


@dataclass(slots=True)
class TaskFilter:
    category: str | None = None
    completed: bool | None = None
    include_deleted: bool = False
    limit: int | None = None  # None means no limit
    offset: int = 0

    def validate(self) -> None:
        if self.limit is not None and not 0 <= self.limit <= MAX_LIST_LIMIT:
            raise ValidationError(f"limit must be between 0 and {MAX_LIST_LIMIT}")
        if self.offset < 0:
            raise ValidationError("offset must be non-negative")

    @property
    def category_name(self) -> str:
        return (self.category or "").strip()


@dataclass(slots=True)
class CategoryInfo:
    name: str
    task_count: int
