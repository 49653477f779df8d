"""Tests for the technology detection entry point."""

import json
import logging

import pytest

from repo_grader import tech_detect
from repo_grader.schemas import FileContent, TreeEntry
from repo_grader.tech_detect import canonical_files, detect_tech, run_detectors


def blob(path: str) -> TreeEntry:
    return TreeEntry(path=path, type="blob", size=10)


@pytest.fixture
def snapshot():
    """A small polyglot repository."""
    files = [
        FileContent(path="package.json", content=json.dumps({
            "dependencies": {"express": "^4.18.0", "@aws-sdk/client-s3": "^3.0.0", "pg": "8"},
            "devDependencies": {"jest": "^29.0.0"},
        })),
        FileContent(path="requirements.txt", content="django>=4\nboto3\n"),
        FileContent(path="infra/main.tf", content='resource "aws_s3_bucket" "b" {}\n'),
        FileContent(path="app/handler.py", content="import boto3\nboto3.client('sqs')\n"),
        FileContent(path=".github/workflows/ci.yml", content="on: push\n"),
        FileContent(path="notes/unselected.tf", content='resource "aws_iam_role" "r" {}\n'),
    ]
    tree = [blob(f.path) for f in files]
    return tree, files


class TestCanonicalFiles:
    """Tests for file ordering."""

    def test_dedup_and_order(self):
        """Test first-wins dedup and depth ordering."""
        files = [
            FileContent(path="a/b.txt", content="1"),
            FileContent(path="z.txt", content="2"),
            FileContent(path="a/b.txt", content="3"),
        ]
        result = canonical_files(files)
        assert [(f.path, f.content) for f in result] == [("z.txt", "2"), ("a/b.txt", "1")]


class TestRunDetectors:
    """Tests for running detector batches."""

    def test_failing_detector_is_isolated(self, caplog):
        """Test that one raising detector loses only its own contribution."""
        def boom(path, content):
            raise RuntimeError("bad input")

        def echo(path, content):
            return [path]

        files = [FileContent(path="a", content=""), FileContent(path="b", content="")]
        with caplog.at_level(logging.WARNING, logger=tech_detect.__name__):
            results = run_detectors([boom, echo], files)

        assert results == ["a", "b"]
        assert "boom" in caplog.text


class TestDetectTech:
    """Tests for detect_tech."""

    def test_detects_across_ecosystems(self, snapshot):
        """Test a realistic snapshot."""
        tree, files = snapshot
        result = detect_tech(tree, files)

        assert [(d.service, d.via) for d in result.aws] == [
            ("S3", "terraform"),
            ("S3", "js-sdk-v3"),
            ("SQS", "boto3"),
        ]
        assert [d.name for d in result.node] == ["express", "jest", "pg"]
        assert [d.name for d in result.python] == ["boto3", "django"]
        assert [d.name for d in result.frameworks] == ["Django", "Express"]
        assert [d.name for d in result.databases] == ["PostgreSQL"]
        assert [d.name for d in result.cicd] == ["GitHub Actions"]
        assert [d.name for d in result.testing] == ["Jest"]

    def test_only_selected_files_scanned(self, snapshot):
        """Test that files outside the selection are ignored when a tree is given."""
        tree, files = snapshot
        result = detect_tech(tree, files)
        assert "notes/unselected.tf" not in result.manifest_files
        assert all(d.service != "IAM" for d in result.aws)

    def test_empty_tree_scans_all_files(self, snapshot):
        """Test that without a tree every file is a candidate."""
        _, files = snapshot
        result = detect_tech([], files)
        assert result.manifest_files == []
        assert any(d.service == "IAM" for d in result.aws)

    def test_order_independent(self, snapshot):
        """Test that shuffling inputs gives identical JSON."""
        tree, files = snapshot
        forward = detect_tech(tree, files).model_dump_json()
        backward = detect_tech(list(reversed(tree)), list(reversed(files))).model_dump_json()
        assert forward == backward

    def test_empty_inputs(self):
        """Test that nothing in gives empty lists out."""
        result = detect_tech([], [])
        assert result.aws == [] and result.python == [] and result.manifest_files == []

    def test_malformed_manifest_skipped(self):
        """Test parse-or-skip for a broken package.json."""
        files = [FileContent(path="package.json", content="{oops"), FileContent(path="go.mod", content="require x v1\n")]
        result = detect_tech([blob("package.json"), blob("go.mod")], files)
        assert result.node == []
        assert [d.name for d in result.go] == ["x"]

    def test_poetry_pyproject_packages(self):
        """Test a Poetry pyproject yields exactly its declared packages."""
        content = '[tool.poetry.dependencies]\npython = "^3.11"\nflask = "2.0"\n'
        result = detect_tech([blob("pyproject.toml")], [FileContent(path="pyproject.toml", content=content)])
        assert [(d.name, d.version) for d in result.python] == [("flask", "2.0")]

    def test_camel_case_serialization(self, snapshot):
        """Test JSON field aliases."""
        tree, files = snapshot
        data = json.loads(detect_tech(tree, files).model_dump_json(by_alias=True))
        assert "manifestFiles" in data
        assert "sdkPackage" in data["aws"][0]
