"""
Technology detection entry point.

Runs every detector over the selected files and assembles a
``TechDetectResult``. Files are visited in canonical order (shallowest
first, then ordinal path) so the outcome does not depend on the order in
which the caller supplied them. A detector that raises on one file loses
only that file's contribution.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from repo_grader.cloud_detectors import AWS_DETECTORS, AZURE_DETECTORS, GCP_DETECTORS
from repo_grader.config import SelectorSettings
from repo_grader.dedup import dedup_by_name, dedup_cloud, dedup_packages
from repo_grader.file_selector import canonical_key, select_tech_files
from repo_grader.package_detectors import PACKAGE_DETECTORS
from repo_grader.schemas import FileContent, TechDetectResult, TreeEntry
from repo_grader.stack_detectors import (
    CICD_DETECTORS,
    DATABASE_DETECTORS,
    FRAMEWORK_DETECTORS,
    TESTING_DETECTORS,
)

logger = logging.getLogger(__name__)

D = TypeVar("D")
Detector = Callable[[str, str], list[D]]


def canonical_files(files: Iterable[FileContent]) -> list[FileContent]:
    """Drop repeated paths (first one wins) and order by depth, then path."""
    unique: dict[str, FileContent] = {}
    for f in files:
        unique.setdefault(f.path, f)
    return sorted(unique.values(), key=lambda f: canonical_key(f.path))


def run_detectors(detectors: Sequence[Detector], files: Sequence[FileContent]) -> list[D]:
    """
    Apply each detector to each file and concatenate the results.

    Files are the outer loop, so detections appear in file order. A
    detector raising on a file is logged and that (detector, file) pair
    contributes nothing; the rest of the batch continues.
    """
    results: list[D] = []
    for f in files:
        for detector in detectors:
            try:
                results.extend(detector(f.path, f.content))
            except Exception as e:
                logger.warning(f"Detector {detector.__name__} failed on {f.path}: {e}")
    return results


def detect_tech(
    tree: Sequence[TreeEntry],
    files: Sequence[FileContent],
    settings: SelectorSettings | None = None,
) -> TechDetectResult:
    """
    Detect cloud services, packages and tooling in a repository snapshot.

    Only files chosen by the selector are scanned. When no tree is given
    there is nothing to select from, and every supplied file is scanned.

    Args:
        tree: Full repository tree
        files: Retrieved file contents (a subset of the tree's blobs)
        settings: Selection bounds

    Returns:
        Deduplicated, sorted detections per ecosystem plus the candidate paths
    """
    manifest_files = select_tech_files(list(tree), settings)
    candidates = canonical_files(files)
    if tree:
        selected = set(manifest_files)
        candidates = [f for f in candidates if f.path in selected]

    logger.debug(f"Running detectors over {len(candidates)} of {len(files)} files")

    packages = {
        ecosystem: dedup_packages(run_detectors(detectors, candidates))
        for ecosystem, detectors in PACKAGE_DETECTORS.items()
    }

    return TechDetectResult(
        aws=dedup_cloud(run_detectors(AWS_DETECTORS, candidates)),
        azure=dedup_cloud(run_detectors(AZURE_DETECTORS, candidates)),
        gcp=dedup_cloud(run_detectors(GCP_DETECTORS, candidates)),
        frameworks=dedup_by_name(run_detectors(FRAMEWORK_DETECTORS, candidates)),
        databases=dedup_by_name(run_detectors(DATABASE_DETECTORS, candidates)),
        cicd=dedup_by_name(run_detectors(CICD_DETECTORS, candidates)),
        testing=dedup_by_name(run_detectors(TESTING_DETECTORS, candidates)),
        manifest_files=manifest_files,
        **packages,
    )
