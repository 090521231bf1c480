"""Data models for commit information."""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from commitresume.errors import ValidationError

FileStatus = Literal["added", "modified", "removed", "renamed"]
FILE_STATUSES = ("added", "modified", "removed", "renamed")

LANGUAGE_EXTENSIONS: Dict[str, str] = {
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".py": "Python",
    ".java": "Java",
    ".cpp": "C++",
    ".c": "C",
    ".cs": "C#",
    ".php": "PHP",
    ".rb": "Ruby",
    ".go": "Go",
    ".rs": "Rust",
    ".swift": "Swift",
    ".kt": "Kotlin",
}


def coerce_count(value: Any) -> int:
    """Coerce a line/file count to a non-negative integer (0 when unusable)."""
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def file_extension(filename: str) -> str:
    """Return the lower-cased extension of a filename, including the dot."""
    return "." + filename.rsplit(".", 1)[-1].lower()


def _optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _entries(value: Any, model: type) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        return []
    return [
        item if isinstance(item, model) else dict(item)
        for item in value
        if isinstance(item, (model, Mapping))
    ]


def _is_identity(value: Any) -> bool:
    if isinstance(value, CommitIdentity):
        return True
    if not isinstance(value, Mapping):
        return False
    name, email = value.get("name"), value.get("email")
    return isinstance(name, str) and bool(name.strip()) and isinstance(email, str) and bool(email.strip())


class CommitIdentity(BaseModel):
    """Author or committer of a commit."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    login: Optional[str] = Field(None, description="Hosting account login, if linked")
    avatar_url: Optional[str] = Field(None, description="Avatar URL, if linked")

    @field_validator("name", "email")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("login", "avatar_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        return _optional_text(value)


class CommitStats(BaseModel):
    """Line statistics for a commit."""

    model_config = ConfigDict(frozen=True)

    additions: int = Field(0, description="Number of lines added")
    deletions: int = Field(0, description="Number of lines deleted")
    total: int = Field(0, description="Total lines changed")

    @field_validator("additions", "deletions", "total", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> int:
        return coerce_count(value)


class CommitFile(BaseModel):
    """A single file touched by a commit."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field("", description="Path of the file")
    status: FileStatus = Field("modified", description="added, modified, removed or renamed")
    additions: int = Field(0, description="Number of lines added")
    deletions: int = Field(0, description="Number of lines deleted")
    changes: int = Field(0, description="Total lines changed")
    patch: Optional[str] = Field(None, description="Unified diff hunk, if provided")
    previous_filename: Optional[str] = Field(None, description="Old path for renamed files")

    @field_validator("filename", mode="before")
    @classmethod
    def _filename(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> str:
        # Unknown statuses never reject the commit.
        return value if value in FILE_STATUSES else "modified"

    @field_validator("additions", "deletions", "changes", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> int:
        return coerce_count(value)

    @field_validator("patch", "previous_filename", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @property
    def extension(self) -> str:
        return file_extension(self.filename)


class CommitParent(BaseModel):
    """Reference to a parent commit."""

    model_config = ConfigDict(frozen=True)

    sha: str = ""
    url: Optional[str] = None

    @field_validator("sha", mode="before")
    @classmethod
    def _sha(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("url", mode="before")
    @classmethod
    def _url(cls, value: Any) -> Optional[str]:
        return _optional_text(value)


def _starts_or_contains(prefix: str, keyword: Optional[str] = None) -> Callable[[str], bool]:
    def predicate(message: str) -> bool:
        return message.startswith(prefix) or (keyword is not None and keyword in message)

    return predicate


def _contains_any(*keywords: str) -> Callable[[str], bool]:
    def predicate(message: str) -> bool:
        return any(keyword in message for keyword in keywords)

    return predicate


# Evaluated in order against the lower-cased message; first match wins.
COMMIT_TYPE_RULES: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ("feature", _starts_or_contains("feat", "feature")),
    ("bugfix", _starts_or_contains("fix", "bug")),
    ("refactor", _starts_or_contains("refactor")),
    ("documentation", _starts_or_contains("docs", "documentation")),
    ("test", _starts_or_contains("test")),
    ("style", _starts_or_contains("style", "formatting")),
    ("performance", _starts_or_contains("perf", "performance")),
    ("chore", _starts_or_contains("chore")),
    ("feature", _contains_any("add", "implement", "create")),
    ("bugfix", _contains_any("fix", "resolve", "correct")),
    ("improvement", _contains_any("update", "improve", "enhance")),
    ("cleanup", _contains_any("remove", "delete", "clean")),
)


class Commit(BaseModel):
    """A normalized, validated commit.

    Instances are immutable. Build them with :func:`normalize_commit` so that
    malformed records surface as :class:`commitresume.errors.ValidationError`.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "sha": "abc123def4567890",
                "message": "Add OAuth login flow",
                "author": {"name": "Jane Doe", "email": "jane@example.com", "login": "jane"},
                "committer": {"name": "Jane Doe", "email": "jane@example.com", "login": "jane"},
                "timestamp": "2024-01-15T10:30:00Z",
                "stats": {"additions": 120, "deletions": 8, "total": 128},
                "files": [
                    {
                        "filename": "src/auth/oauth.py",
                        "status": "added",
                        "additions": 120,
                        "deletions": 8,
                        "changes": 128,
                    }
                ],
                "parents": [{"sha": "0123456789abcdef", "url": None}],
            }
        },
    )

    sha: str = Field(..., description="Full commit SHA")
    message: str = Field(..., description="Commit message, trimmed")
    author: CommitIdentity = Field(..., description="Commit author")
    committer: CommitIdentity = Field(..., description="Commit committer (defaults to author)")
    timestamp: datetime = Field(..., description="Authored instant, UTC")
    url: Optional[str] = Field(None, description="Web URL of the commit")
    stats: CommitStats = Field(default_factory=CommitStats)
    files: List[CommitFile] = Field(default_factory=list)
    parents: List[CommitParent] = Field(default_factory=list)
    files_provided: bool = Field(False, exclude=True, description="Whether the record carried a files array")

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = {**data, "files_provided": isinstance(data.get("files"), (list, tuple))}
        if not _is_identity(data.get("committer")):
            data["committer"] = data.get("author")
        return data

    @field_validator("sha")
    @classmethod
    def _check_sha(cls, value: str) -> str:
        if len(value) < 7:
            raise ValueError("must be at least 7 characters")
        return value

    @field_validator("message", mode="before")
    @classmethod
    def _check_message(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("must be a non-empty string")
        return value.strip()

    @field_validator("author", "committer", mode="before")
    @classmethod
    def _check_identity(cls, value: Any) -> Any:
        if isinstance(value, CommitIdentity):
            return value
        if not isinstance(value, Mapping):
            raise ValueError("must be an object with name and email")
        return dict(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _require_timestamp(cls, value: Any) -> Any:
        if value is None or value == "" or isinstance(value, bool):
            raise ValueError("must be an ISO-8601 instant")
        return value

    @field_validator("timestamp")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("url", mode="before")
    @classmethod
    def _url(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @field_validator("stats", mode="before")
    @classmethod
    def _stats(cls, value: Any) -> Any:
        if isinstance(value, CommitStats):
            return value
        return dict(value) if isinstance(value, Mapping) else {}

    @field_validator("files", mode="before")
    @classmethod
    def _files(cls, value: Any) -> List[Any]:
        return _entries(value, CommitFile)

    @field_validator("parents", mode="before")
    @classmethod
    def _parents(cls, value: Any) -> List[Any]:
        return _entries(value, CommitParent)

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def message_summary(self) -> str:
        return self.message.splitlines()[0]

    def primary_language(self) -> str:
        """Language with the most changed lines, or ``"Unknown"``.

        Ties go to the language seen first while scanning ``files``.
        """
        weights: Dict[str, int] = {}
        for changed in self.files:
            language = LANGUAGE_EXTENSIONS.get(changed.extension)
            if language:
                weights[language] = weights.get(language, 0) + changed.changes

        if not weights:
            return "Unknown"
        return max(weights, key=weights.__getitem__)

    def commit_type(self) -> str:
        """Classify the commit from its message."""
        message = self.message.lower()
        for commit_type, matches in COMMIT_TYPE_RULES:
            if matches(message):
                return commit_type
        return "other"

    def summary(self) -> Dict[str, Any]:
        """Compact description of this commit for listings."""
        from commitresume.analysis.triviality import is_trivial

        return {
            "sha": self.short_sha,
            "type": self.commit_type(),
            "language": self.primary_language(),
            "impact": self.stats.total,
            "files_changed": len(self.files),
            "is_trivial": is_trivial(self),
            "message_preview": self.message[:100],
        }


_FIELD_LABELS = {
    "sha": "SHA",
    "message": "message",
    "author": "author",
    "committer": "committer",
    "timestamp": "timestamp",
}


def normalize_commit(raw: Any) -> Commit:
    """Normalize a raw commit record into a :class:`Commit`.

    Args:
        raw: Mapping in the shape produced by the commits endpoint, or an
            existing Commit (returned unchanged)

    Returns:
        Validated Commit

    Raises:
        ValidationError: If sha, message, author name/email or timestamp is invalid
    """
    if isinstance(raw, Commit):
        return raw
    if not isinstance(raw, Mapping):
        raise ValidationError("commit", "Invalid commit record: expected an object")

    try:
        return Commit.model_validate(dict(raw))
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = [str(part) for part in first["loc"]] or ["commit"]
        label = _FIELD_LABELS.get(loc[0], loc[0])
        raise ValidationError(".".join(loc), f"Invalid commit {label}: {first['msg']}") from e
