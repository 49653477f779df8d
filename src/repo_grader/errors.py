"""
Custom exception hierarchy for Repo Grader.

The analysis core never raises: malformed files are skipped and empty
input yields zero-valued results. These errors belong to the outer
surface (snapshot loading, configuration, saved reports) and carry error
codes, recoverability hints, and context for the CLI to display.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for categorizing failures."""

    # Snapshot errors
    SNAPSHOT_PATH_NOT_FOUND = "snapshot_path_not_found"
    SNAPSHOT_PERMISSION_DENIED = "snapshot_permission_denied"
    SNAPSHOT_INVALID = "snapshot_invalid"

    # Configuration errors
    CONFIG_INVALID = "config_invalid"
    CONFIG_FILE_NOT_FOUND = "config_file_not_found"

    # Saved report errors
    REPORT_NOT_FOUND = "report_not_found"
    REPORT_INCOMPATIBLE = "report_incompatible"

    # General errors
    UNKNOWN = "unknown"


@dataclass
class RepoGraderError(Exception):
    """
    Base exception for all Repo Grader errors.

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the operation can be retried
        context: Additional context for debugging
        suggestion: Suggested action to resolve the error
    """

    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = False
    context: dict[str, Any] = field(default_factory=dict)
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r}, "
            f"recoverable={self.recoverable}"
            f")"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "code": self.code.value,
            "recoverable": self.recoverable,
            "context": self.context,
            "suggestion": self.suggestion,
        }


@dataclass
class SnapshotError(RepoGraderError):
    """Building or loading a repository snapshot failed."""

    path: str | None = None

    def __post_init__(self) -> None:
        if self.path:
            self.context["path"] = self.path


@dataclass
class ConfigError(RepoGraderError):
    """Configuration error."""

    config_path: str | None = None
    key: str | None = None

    def __post_init__(self) -> None:
        if self.config_path:
            self.context["config_path"] = self.config_path
        if self.key:
            self.context["key"] = self.key


@dataclass
class ReportError(RepoGraderError):
    """A saved report could not be loaded."""

    report_path: str | None = None
    schema_version: str | None = None

    def __post_init__(self) -> None:
        if self.report_path:
            self.context["report_path"] = self.report_path
        if self.schema_version:
            self.context["schema_version"] = self.schema_version


# Factory functions for common errors
def path_not_found(path: str) -> SnapshotError:
    """Create error for missing path."""
    return SnapshotError(
        message=f"Path not found: {path}",
        code=ErrorCode.SNAPSHOT_PATH_NOT_FOUND,
        path=path,
        suggestion="Pass a repository directory or a snapshot JSON file.",
    )


def permission_denied(path: str) -> SnapshotError:
    """Create error for permission denied."""
    return SnapshotError(
        message=f"Permission denied: {path}",
        code=ErrorCode.SNAPSHOT_PERMISSION_DENIED,
        path=path,
        suggestion="Check file permissions or run with appropriate privileges.",
    )


def invalid_snapshot(path: str, reason: str) -> SnapshotError:
    """Create error for a snapshot file that does not validate."""
    return SnapshotError(
        message=f"Invalid snapshot: {reason}",
        code=ErrorCode.SNAPSHOT_INVALID,
        path=path,
        suggestion="A snapshot is a JSON object with 'tree', 'files' and optional 'metadata' keys.",
    )


def invalid_config(path: str, reason: str) -> ConfigError:
    """Create error for invalid configuration."""
    return ConfigError(
        message=f"Invalid configuration: {reason}",
        code=ErrorCode.CONFIG_INVALID,
        config_path=path,
        suggestion="Check the configuration file format and values.",
    )


def report_not_found(path: str) -> ReportError:
    """Create error for a missing saved report."""
    return ReportError(
        message=f"Report not found: {path}",
        code=ErrorCode.REPORT_NOT_FOUND,
        report_path=path,
        suggestion="Run 'repo-grader analyze --out <file>' first.",
    )


def incompatible_report(path: str, reason: str, schema_version: str | None = None) -> ReportError:
    """Create error for a report written by an incompatible schema version."""
    return ReportError(
        message=f"Cannot load report: {reason}",
        code=ErrorCode.REPORT_INCOMPATIBLE,
        report_path=path,
        schema_version=schema_version,
        suggestion="Re-run the analysis to produce a report with the current schema.",
    )
