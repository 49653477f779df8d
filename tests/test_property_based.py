"""
Property-based tests using Hypothesis for Repo Grader.

These tests verify ordering, idempotence and bounds over a wide variety of
generated trees, detections and scores, including edge cases that
example-based tests do not reach.
"""

import json
import string

from hypothesis import given, settings, strategies as st

from repo_grader.dedup import dedup_cloud, dedup_packages
from repo_grader.file_selector import select_analysis_files, select_tech_files
from repo_grader.package_detectors import detect_package_json, detect_requirements_txt
from repo_grader.repo_structure import generate_mermaid_diagram
from repo_grader.schemas import (
    CategoryResult,
    CloudServiceDetection,
    FileContent,
    PackageDetection,
    Signal,
    TreeEntry,
)
from repo_grader.scoring import compute_overall_score, score_to_grade
from repo_grader.signal_extractor import CATEGORY_ANALYZERS, analyze_contributor_friendliness
from repo_grader.tech_detect import detect_tech

# --- Custom Strategies ---

SEGMENT = st.text(alphabet=string.ascii_letters + string.digits + "_-.", min_size=1, max_size=12).filter(
    lambda s: s not in (".", "..")
)
NOTABLE_NAMES = st.sampled_from([
    "package.json", "requirements.txt", "pyproject.toml", "main.tf", "Dockerfile", "README.md",
    "go.mod", "Cargo.toml", "app.py", "ci.yml", "LICENSE", "CONTRIBUTING.md", "bug.md",
])


@st.composite
def file_path_strategy(draw: st.DrawFn) -> str:
    """Generate repository paths, biased towards files the selector cares about."""
    dirs = draw(st.lists(
        st.one_of(SEGMENT, st.sampled_from([".github", "workflows", "ISSUE_TEMPLATE", "infra", "src", "node_modules"])),
        min_size=0,
        max_size=4,
    ))
    name = draw(st.one_of(NOTABLE_NAMES, SEGMENT))
    return "/".join(dirs + [name])


@st.composite
def tree_strategy(draw: st.DrawFn) -> list[TreeEntry]:
    """Generate a tree with unique blob paths and their parent directories."""
    paths = draw(st.lists(file_path_strategy(), min_size=0, max_size=30, unique=True))
    entries = [
        TreeEntry(path=p, type="blob", size=draw(st.integers(min_value=0, max_value=200_000)))
        for p in paths
    ]
    dirs = {"/".join(p.split("/")[:i]) for p in paths for i in range(1, p.count("/") + 1)}
    entries += [TreeEntry(path=d, type="tree") for d in sorted(dirs - set(paths))]
    return entries


@st.composite
def cloud_detection_strategy(draw: st.DrawFn) -> CloudServiceDetection:
    return CloudServiceDetection(
        service=draw(st.sampled_from(["S3", "Lambda", "SQS", "Storage", "Pub/Sub"])),
        source=draw(st.sampled_from(["main.tf", "package.json", "app.py", "infra/a.tf"])),
        via=draw(st.sampled_from(["terraform", "js-sdk-v3", "boto3"])),
    )


@st.composite
def category_strategy(draw: st.DrawFn) -> CategoryResult:
    signals = draw(st.lists(
        st.builds(Signal, name=st.text(min_size=1, max_size=20), found=st.booleans()),
        max_size=6,
    ))
    return CategoryResult(
        key=draw(st.text(min_size=1, max_size=10)),
        label=draw(st.text(min_size=1, max_size=10)),
        score=draw(st.integers(min_value=0, max_value=100)),
        weight=draw(st.one_of(st.just(0.0), st.floats(min_value=0.01, max_value=1.0))),
        signals=signals,
    )


def files_for(tree: list[TreeEntry], body: str) -> list[FileContent]:
    return [FileContent(path=e.path, content=body) for e in tree if e.type == "blob"]


# --- Selection ---

class TestSelectionProperties:
    """Property-based tests for file selection."""

    @given(data=st.data(), tree=tree_strategy())
    @settings(max_examples=100)
    def test_selection_order_independent(self, data: st.DataObject, tree: list[TreeEntry]) -> None:
        """Shuffling the tree never changes the selection."""
        shuffled = data.draw(st.permutations(tree))
        assert select_tech_files(tree) == select_tech_files(list(shuffled))
        assert select_analysis_files(tree) == select_analysis_files(list(shuffled))

    @given(tree=tree_strategy())
    def test_selection_is_unique_subset_of_blobs(self, tree: list[TreeEntry]) -> None:
        """Selected paths are distinct blobs outside skipped directories."""
        selected = select_tech_files(tree)
        blobs = {e.path for e in tree if e.type == "blob"}
        assert len(selected) == len(set(selected))
        assert set(selected) <= blobs
        assert not any("node_modules" in p.split("/") for p in selected)


# --- Detection ---

class TestDetectionProperties:
    """Property-based tests for detectors and deduplication."""

    @given(detections=st.lists(cloud_detection_strategy(), max_size=30))
    def test_dedup_idempotent(self, detections: list[CloudServiceDetection]) -> None:
        """Deduplicating twice equals deduplicating once."""
        once = dedup_cloud(detections)
        assert dedup_cloud(once) == once
        assert len({(d.service, d.via, d.source) for d in once}) == len(once)

    @given(data=st.data(), detections=st.lists(cloud_detection_strategy(), max_size=30))
    def test_dedup_order_independent(self, data: st.DataObject, detections: list[CloudServiceDetection]) -> None:
        """Records differ only by key, so any input order gives the same output."""
        shuffled = data.draw(st.permutations(detections))
        assert dedup_cloud(detections) == dedup_cloud(list(shuffled))

    @given(names=st.lists(st.sampled_from(["a", "b", "c"]), max_size=10))
    def test_package_dedup_sorted(self, names: list[str]) -> None:
        """Package output is sorted by name."""
        detections = [PackageDetection(name=n, source="requirements.txt", via="requirements") for n in names]
        result = [d.name for d in dedup_packages(detections)]
        assert result == sorted(set(names))

    @given(content=st.text(max_size=500))
    def test_detectors_never_raise(self, content: str) -> None:
        """Arbitrary manifest text yields a list, never an exception."""
        assert isinstance(detect_package_json("package.json", content), list)
        assert isinstance(detect_requirements_txt("requirements.txt", content), list)

    @given(deps=st.dictionaries(st.text(min_size=1, max_size=15), st.one_of(st.text(max_size=8), st.integers(), st.none())))
    def test_package_json_names_preserved(self, deps: dict) -> None:
        """Every non-SDK dependency name comes back exactly once."""
        content = json.dumps({"dependencies": deps})
        names = [d.name for d in detect_package_json("package.json", content)]
        assert len(names) == len(set(names))
        assert set(names) <= set(deps)

    @given(data=st.data(), tree=tree_strategy())
    @settings(max_examples=50)
    def test_detect_tech_order_independent(self, data: st.DataObject, tree: list[TreeEntry]) -> None:
        """The serialized result is the same for any input order."""
        files = files_for(tree, '{"dependencies": {"express": "4", "@aws-sdk/client-s3": "3"}}\n')
        shuffled_tree = data.draw(st.permutations(tree))
        shuffled_files = data.draw(st.permutations(files))
        assert (
            detect_tech(tree, files).model_dump_json()
            == detect_tech(list(shuffled_tree), list(shuffled_files)).model_dump_json()
        )


# --- Scoring ---

class TestScoringProperties:
    """Property-based tests for scores and grades."""

    @given(categories=st.lists(category_strategy(), max_size=10))
    def test_overall_within_category_range(self, categories: list[CategoryResult]) -> None:
        """The weighted mean lies between the lowest and highest weighted score."""
        overall = compute_overall_score(categories)
        weighted = [c.score for c in categories if c.weight > 0]
        if not weighted:
            assert overall == 0
        else:
            assert min(weighted) <= overall <= max(weighted)

    @given(score=st.integers(min_value=0, max_value=99))
    def test_grade_monotonic(self, score: int) -> None:
        """A higher score never earns a worse grade."""
        order = "FDCBA"
        assert order.index(score_to_grade(score)) <= order.index(score_to_grade(score + 1))

    @given(tree=tree_strategy(), body=st.text(max_size=300))
    @settings(max_examples=50)
    def test_analyzer_scores_bounded(self, tree: list[TreeEntry], body: str) -> None:
        """Every analyzer returns a score in [0, 100] whatever the input."""
        files = files_for(tree, body)
        for key, analyzer in CATEGORY_ANALYZERS:
            result = analyzer(files, tree)
            assert result.key == key
            assert 0 <= result.score <= 100
        assert 0 <= analyze_contributor_friendliness(files, tree).score <= 100


# --- Structure diagram ---

class TestDiagramProperties:
    """Property-based tests for the Mermaid diagram."""

    @given(data=st.data(), tree=tree_strategy())
    def test_diagram_order_independent(self, data: st.DataObject, tree: list[TreeEntry]) -> None:
        """The diagram depends only on the set of entries."""
        shuffled = data.draw(st.permutations(tree))
        diagram = generate_mermaid_diagram(tree)
        assert diagram == generate_mermaid_diagram(list(shuffled))
        assert diagram.startswith("graph TD\n")
        assert diagram.endswith("\n")
