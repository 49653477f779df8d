"""
Full analysis pipeline.

Runs every category analyzer over one snapshot, applies the configured
weights and assembles the ``Report``. The pipeline is a pure function of
its inputs: equal snapshots and configuration give equal reports.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from repo_grader.config import RepoGraderConfig
from repo_grader.errors import incompatible_report, report_not_found
from repo_grader.repo_structure import generate_mermaid_diagram
from repo_grader.schemas import FileContent, Report, RepoMetadata, RepoSnapshot, TechStackItem, TreeEntry
from repo_grader.scoring import (
    compute_overall_score,
    generate_next_steps,
    generate_risks,
    generate_strengths,
    score_to_grade,
)
from repo_grader.signal_extractor import (
    CATEGORY_ANALYZERS,
    analyze_contributor_friendliness,
    detect_tech_stack,
)

logger = logging.getLogger(__name__)


def _with_primary_language(stack: list[TechStackItem], language: str | None) -> list[TechStackItem]:
    """Put the host-reported language first unless the stack already names it."""
    if not language:
        return stack
    if any(item.name.lower() == language.lower() for item in stack):
        return stack
    return [TechStackItem(name=language, category="language"), *stack]


def analyze_repository(
    tree: Sequence[TreeEntry],
    files: Sequence[FileContent],
    metadata: RepoMetadata | None = None,
    config: RepoGraderConfig | None = None,
) -> Report:
    """
    Grade a repository snapshot.

    Args:
        tree: Full repository tree
        files: Retrieved file contents
        metadata: Optional host-provided facts (license, language)
        config: Thresholds and category weights; defaults when omitted

    Returns:
        Report with categories in fixed order, summaries and extras
    """
    config = config or RepoGraderConfig.default()
    tree = list(tree)
    files = list(files)

    categories = []
    for key, analyzer in CATEGORY_ANALYZERS:
        result = analyzer(files, tree, metadata, config.analysis)
        categories.append(result.model_copy(update={"weight": config.scoring.weight_for(key)}))

    overall = compute_overall_score(categories)
    logger.debug(f"Scored {len(categories)} categories over {len(files)} files: overall {overall}")

    return Report(
        overall_score=overall,
        grade=score_to_grade(overall),
        categories=categories,
        strengths=generate_strengths(categories),
        risks=generate_risks(categories),
        next_steps=generate_next_steps(categories),
        tech_stack=_with_primary_language(
            detect_tech_stack(files, tree), metadata.language if metadata else None
        ),
        contributor=analyze_contributor_friendliness(files, tree, metadata, config.analysis),
        repo_structure=generate_mermaid_diagram(tree),
        file_count=len(files),
        tree_entry_count=len(tree),
    )


def analyze_snapshot(snapshot: RepoSnapshot, config: RepoGraderConfig | None = None) -> Report:
    return analyze_repository(snapshot.tree, snapshot.files, snapshot.metadata, config)


def save_report(report: Report, path: Path, pretty: bool = True) -> Path:
    """Write a report as camelCase JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(report.model_dump_json(by_alias=True, indent=2 if pretty else None))
    return path


def load_report(path: Path) -> Report:
    """
    Load a saved report, refusing ones from an incompatible schema version.

    Args:
        path: Path to a report JSON file

    Returns:
        Report object

    Raises:
        ReportError: If the file is missing, unreadable or incompatible
    """
    path = Path(path)
    if not path.exists():
        raise report_not_found(str(path))

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise incompatible_report(str(path), f"not valid JSON ({e})")
    if not isinstance(data, dict):
        raise incompatible_report(str(path), "expected a JSON object")

    compatible, message = Report.check_version_compatibility(data)
    version = data.get("schemaVersion", data.get("schema_version"))
    if not compatible:
        raise incompatible_report(str(path), message, schema_version=version)
    if message != "Compatible":
        logger.warning(message)

    try:
        return Report.model_validate(data)
    except ValidationError as e:
        raise incompatible_report(str(path), str(e), schema_version=version)
