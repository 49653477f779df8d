"""
Repo Grader - Score repository health and detect its technology stack.

A library and CLI that:
1. Selects a bounded set of candidate files from a repository tree
2. Detects cloud services, packages, frameworks and tooling per ecosystem
3. Probes documentation, security, CI/CD, dependency and community signals
4. Combines category scores into a weighted overall score and letter grade
"""

__version__ = "1.0.0"
__author__ = "Repo Grader Contributors"

from repo_grader.engine import analyze_repository
from repo_grader.schemas import (
    SCHEMA_VERSION,
    CategoryResult,
    FileContent,
    Report,
    RepoMetadata,
    RepoSnapshot,
    Signal,
    TechDetectResult,
    TreeEntry,
    VersionedModel,
)
from repo_grader.tech_detect import detect_tech

__all__ = [
    "__version__",
    "SCHEMA_VERSION",
    "CategoryResult",
    "FileContent",
    "Report",
    "RepoMetadata",
    "RepoSnapshot",
    "Signal",
    "TechDetectResult",
    "TreeEntry",
    "VersionedModel",
    "analyze_repository",
    "detect_tech",
]
