"""Tests for candidate file selection."""

import pytest

from repo_grader.config import SelectorSettings
from repo_grader.file_selector import (
    canonical_key,
    is_arm_template,
    is_cfn_template,
    is_skipped_path,
    select_analysis_files,
    select_tech_files,
)
from repo_grader.schemas import TreeEntry


def blob(path: str, size: int | None = 100) -> TreeEntry:
    return TreeEntry(path=path, type="blob", size=size)


def directory(path: str) -> TreeEntry:
    return TreeEntry(path=path, type="tree")


@pytest.fixture
def monorepo_tree():
    """A tree with manifests at several depths and some vendored noise."""
    return [
        blob("services/api/package.json"),
        blob("package.json"),
        blob("apps/web/package.json"),
        blob("node_modules/react/package.json"),
        blob("requirements.txt"),
        blob("requirements/dev.txt"),
        blob("infra/main.tf"),
        blob("go.mod"),
        blob(".github/workflows/ci.yml"),
        blob("src/app.py"),
        blob("src/big.py", size=500_000),
        blob("vendor/lib/setup.py"),
        directory("src"),
    ]


class TestHelpers:
    """Tests for path helpers."""

    def test_canonical_key_orders_by_depth_then_path(self):
        """Test that shallower paths sort first."""
        paths = ["b/c/d.json", "z.json", "a/b.json", "a.json"]
        assert sorted(paths, key=canonical_key) == ["a.json", "z.json", "a/b.json", "b/c/d.json"]

    def test_skipped_path_matches_any_segment(self):
        """Test that a skip dir anywhere in the path excludes it."""
        skip = {"node_modules", "vendor"}
        assert is_skipped_path("node_modules/x/package.json", skip)
        assert is_skipped_path("apps/web/node_modules/x/package.json", skip)
        assert not is_skipped_path("apps/web/package.json", skip)

    def test_cfn_template_requires_known_location(self):
        """Test CloudFormation path heuristics."""
        assert is_cfn_template("template.yaml")
        assert is_cfn_template("stack.template.json")
        assert is_cfn_template("cloudformation/network.yml")
        assert not is_cfn_template("config/settings.yaml")

    def test_arm_template_hint(self):
        """Test ARM template path heuristics."""
        assert is_arm_template("infra/azuredeploy.json")
        assert not is_arm_template("package.json")


class TestSelectTechFiles:
    """Tests for tech-detection file selection."""

    def test_empty_tree(self):
        """Test that an empty tree selects nothing."""
        assert select_tech_files([]) == []

    def test_excludes_skipped_directories(self, monorepo_tree):
        """Test that vendored paths never appear."""
        selected = select_tech_files(monorepo_tree)
        assert "node_modules/react/package.json" not in selected
        assert "vendor/lib/setup.py" not in selected

    def test_category_order_and_depth_order(self, monorepo_tree):
        """Test package.json category first, shallowest first within it."""
        selected = select_tech_files(monorepo_tree)
        assert selected[:3] == ["package.json", "apps/web/package.json", "services/api/package.json"]
        assert selected.index("requirements.txt") < selected.index("requirements/dev.txt")
        assert selected.index("requirements/dev.txt") < selected.index("infra/main.tf")
        assert selected.index("infra/main.tf") < selected.index("go.mod")

    def test_source_sample_last_and_bounded_by_size(self, monorepo_tree):
        """Test that Python sources come last and large ones are skipped."""
        selected = select_tech_files(monorepo_tree)
        assert selected[-1] == "src/app.py"
        assert "src/big.py" not in selected

    def test_no_duplicates(self, monorepo_tree):
        """Test that each path appears once."""
        selected = select_tech_files(monorepo_tree)
        assert len(selected) == len(set(selected))

    def test_per_category_cap(self):
        """Test that each category is capped."""
        tree = [blob(f"pkg{i:02d}/package.json") for i in range(10)]
        selected = select_tech_files(tree, SelectorSettings(max_files_per_category=3))
        assert selected == ["pkg00/package.json", "pkg01/package.json", "pkg02/package.json"]

    def test_source_cap(self):
        """Test that the source sample is capped."""
        tree = [blob(f"src/m{i}.py") for i in range(5)]
        selected = select_tech_files(tree, SelectorSettings(max_source_files=2))
        assert selected == ["src/m0.py", "src/m1.py"]

    def test_input_order_does_not_matter(self, monorepo_tree):
        """Test that shuffled trees select the same list."""
        assert select_tech_files(list(reversed(monorepo_tree))) == select_tech_files(monorepo_tree)

    def test_directories_ignored(self):
        """Test that tree entries are never selected."""
        assert select_tech_files([directory("package.json")]) == []


class TestSelectAnalysisFiles:
    """Tests for quality-analysis file selection."""

    def test_case_insensitive_targets(self):
        """Test that nonstandard casing is still picked up."""
        selected = select_analysis_files([blob("Readme.md"), blob("contributing.md")])
        assert selected == ["Readme.md", "contributing.md"]

    def test_workflow_and_template_caps(self):
        """Test workflow and issue template caps."""
        tree = [blob(f".github/workflows/w{i}.yml") for i in range(8)]
        tree += [blob(f".github/ISSUE_TEMPLATE/t{i}.md") for i in range(5)]
        selected = select_analysis_files(tree, SelectorSettings(max_workflow_files=2, max_issue_templates=1))
        assert selected == [
            ".github/workflows/w0.yml",
            ".github/workflows/w1.yml",
            ".github/ISSUE_TEMPLATE/t0.md",
        ]

    def test_targets_before_workflows(self):
        """Test fixed targets come before workflows."""
        tree = [blob(".github/workflows/ci.yml"), blob("README.md")]
        assert select_analysis_files(tree) == ["README.md", ".github/workflows/ci.yml"]
