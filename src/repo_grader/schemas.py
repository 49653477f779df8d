"""
Pydantic schemas for Repo Grader data models.

All data structures passed between the file selector, detectors,
analyzers and the scoring aggregator are defined here to ensure type
safety, validation, and serialization consistency.

Schema Version History:
- 1.0.0: Initial release
- 1.1.0: Added framework/database/CI/testing detections, contributor score
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Schema version for data compatibility
SCHEMA_VERSION = "1.1.0"
SCHEMA_VERSION_MAJOR = 1
SCHEMA_VERSION_MINOR = 1
SCHEMA_VERSION_PATCH = 0

LetterGrade = Literal["A", "B", "C", "D", "F"]


class OutputModel(BaseModel):
    """Base model for results; serializes with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenModel(OutputModel):
    """Immutable record, safe to share between concurrent runs."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class VersionedModel(OutputModel):
    """Base model with schema versioning support."""

    schema_version: str = Field(default=SCHEMA_VERSION, description="Schema version for compatibility")

    @classmethod
    def check_version_compatibility(cls, data: dict[str, Any]) -> tuple[bool, str]:
        """
        Check if data is compatible with current schema version.

        Returns:
            Tuple of (is_compatible, message)
        """
        data_version = data.get("schemaVersion", data.get("schema_version", "1.0.0"))
        try:
            parts = str(data_version).split(".")
            major = int(parts[0])
            minor = int(parts[1]) if len(parts) > 1 else 0

            if major != SCHEMA_VERSION_MAJOR:
                return False, f"Incompatible major version: {data_version} vs {SCHEMA_VERSION}"
            if minor > SCHEMA_VERSION_MINOR:
                return True, f"Data from newer minor version: {data_version} (current: {SCHEMA_VERSION})"
            return True, "Compatible"
        except (ValueError, IndexError):
            return False, f"Invalid version format: {data_version}"


# --- Snapshot input ---


class TreeEntry(FrozenModel):
    """One node in the repository's file hierarchy."""

    path: str = Field(..., description="Path relative to the repository root, '/'-separated")
    type: Literal["blob", "tree"] = Field(..., description="blob for files, tree for directories")
    size: int | None = Field(default=None, ge=0, description="Blob size in bytes when known")
    mode: str | None = Field(default=None)
    sha: str | None = Field(default=None)

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        """Use forward slashes and drop leading './'."""
        v = v.replace("\\", "/")
        while v.startswith("./"):
            v = v[2:]
        return v


class FileContent(FrozenModel):
    """A materialized file body; always a subset of the tree's blobs."""

    path: str
    content: str
    size: int = Field(default=0, ge=0, description="Content size; defaults to len(content)")

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        """Use forward slashes and drop leading './'."""
        v = v.replace("\\", "/")
        while v.startswith("./"):
            v = v[2:]
        return v

    @model_validator(mode="before")
    @classmethod
    def default_size(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("size") is None and isinstance(data.get("content"), str):
            data = {**data, "size": len(data["content"])}
        return data


class RepoMetadata(FrozenModel):
    """Optional host-provided facts about the repository."""

    name: str | None = None
    description: str | None = None
    license: str | None = Field(default=None, description="SPDX identifier reported by the host")
    language: str | None = None
    topics: tuple[str, ...] = ()


class RepoSnapshot(OutputModel):
    """Point-in-time input for one analysis run."""

    tree: list[TreeEntry] = Field(default_factory=list)
    files: list[FileContent] = Field(default_factory=list)
    metadata: RepoMetadata | None = None


# --- Detections ---


class CloudServiceDetection(FrozenModel):
    """One cloud service usage found in one file."""

    service: str = Field(..., description="Canonical, human-readable service name")
    sdk_package: str | None = Field(default=None, description="Package or client id that triggered it")
    source: str = Field(..., description="File path the detection came from")
    via: str = Field(..., description="Detection method tag")


class PackageDetection(FrozenModel):
    """One declared package dependency found in one manifest."""

    name: str
    version: str | None = None
    source: str
    via: str


class StackDetection(FrozenModel):
    """A framework, database, CI/CD or testing tool found in the repository."""

    name: str
    version: str | None = None
    source: str
    via: str
    category: str | None = None


class TechDetectResult(VersionedModel):
    """Detections grouped by ecosystem, plus the files that were considered."""

    aws: list[CloudServiceDetection] = Field(default_factory=list)
    azure: list[CloudServiceDetection] = Field(default_factory=list)
    gcp: list[CloudServiceDetection] = Field(default_factory=list)
    python: list[PackageDetection] = Field(default_factory=list)
    node: list[PackageDetection] = Field(default_factory=list)
    go: list[PackageDetection] = Field(default_factory=list)
    java: list[PackageDetection] = Field(default_factory=list)
    php: list[PackageDetection] = Field(default_factory=list)
    rust: list[PackageDetection] = Field(default_factory=list)
    ruby: list[PackageDetection] = Field(default_factory=list)
    frameworks: list[StackDetection] = Field(default_factory=list)
    databases: list[StackDetection] = Field(default_factory=list)
    cicd: list[StackDetection] = Field(default_factory=list)
    testing: list[StackDetection] = Field(default_factory=list)
    manifest_files: list[str] = Field(default_factory=list)


# --- Quality report ---


class Signal(FrozenModel):
    """A named boolean probe about repository state."""

    name: str
    found: bool
    details: str | None = None


class CategoryResult(OutputModel):
    """A weighted group of signals summarized into one 0-100 score."""

    key: str
    label: str
    score: int = Field(..., ge=0, le=100)
    weight: float = Field(..., ge=0)
    signals: list[Signal] = Field(default_factory=list)


class ChecklistItem(FrozenModel):
    """One item of the contributor readiness checklist."""

    label: str
    passed: bool
    description: str


class ContributorFriendliness(OutputModel):
    """How approachable the repository is for new contributors."""

    score: int = Field(..., ge=0, le=100)
    signals: list[Signal] = Field(default_factory=list)
    readiness_checklist: list[ChecklistItem] = Field(default_factory=list)


class TechStackItem(FrozenModel):
    """A coarse technology label shown next to the report."""

    name: str
    category: Literal["language", "framework", "tool", "platform", "database"]


class Report(VersionedModel):
    """Composite quality report for one repository snapshot."""

    overall_score: int = Field(default=0, ge=0, le=100)
    grade: LetterGrade = "F"
    categories: list[CategoryResult] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    tech_stack: list[TechStackItem] = Field(default_factory=list)
    contributor: ContributorFriendliness | None = None
    repo_structure: str = ""
    file_count: int = Field(default=0, ge=0)
    tree_entry_count: int = Field(default=0, ge=0)
