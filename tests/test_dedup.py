"""Tests for detection deduplication."""

from repo_grader.dedup import dedup_by_name, dedup_cloud, dedup_packages, unique_by
from repo_grader.schemas import CloudServiceDetection, PackageDetection, StackDetection


def cloud(service: str, source: str = "main.tf", via: str = "terraform") -> CloudServiceDetection:
    return CloudServiceDetection(service=service, source=source, via=via)


def package(name: str, version: str | None = None, source: str = "requirements.txt") -> PackageDetection:
    return PackageDetection(name=name, version=version, source=source, via="requirements")


class TestUniqueBy:
    """Tests for the generic helper."""

    def test_first_wins_and_order_kept(self):
        """Test first occurrence wins."""
        assert unique_by(["b", "a", "b", "c", "a"], lambda x: x) == ["b", "a", "c"]


class TestDedupCloud:
    """Tests for cloud detection merging."""

    def test_same_service_two_methods_kept(self):
        """Test that distinct methods are distinct records."""
        results = dedup_cloud([cloud("S3", via="terraform"), cloud("S3", via="cloudformation")])
        assert len(results) == 2

    def test_same_service_two_files_kept(self):
        """Test that distinct sources are distinct records."""
        results = dedup_cloud([cloud("S3", source="a.tf"), cloud("S3", source="b.tf")])
        assert [d.source for d in results] == ["a.tf", "b.tf"]

    def test_exact_repeat_removed(self):
        """Test that exact repeats collapse."""
        assert len(dedup_cloud([cloud("S3"), cloud("S3")])) == 1

    def test_sorted_by_service(self):
        """Test ordinal ordering by service."""
        results = dedup_cloud([cloud("SQS"), cloud("Lambda"), cloud("S3")])
        assert [d.service for d in results] == ["Lambda", "S3", "SQS"]

    def test_idempotent(self):
        """Test that deduplicating twice changes nothing."""
        once = dedup_cloud([cloud("S3"), cloud("IAM"), cloud("S3", source="x.tf")])
        assert dedup_cloud(once) == once

    def test_empty(self):
        """Test empty input."""
        assert dedup_cloud([]) == []


class TestDedupPackages:
    """Tests for package detection merging."""

    def test_first_version_wins_within_a_file(self):
        """Test (name, source) key keeps the first record."""
        results = dedup_packages([package("flask", "==1"), package("flask", "==2")])
        assert [(d.name, d.version) for d in results] == [("flask", "==1")]

    def test_same_name_two_files_kept(self):
        """Test per-file records survive."""
        results = dedup_packages([package("flask", source="b/requirements.txt"), package("flask")])
        assert [d.source for d in results] == ["b/requirements.txt", "requirements.txt"]

    def test_sorted_by_name(self):
        """Test ordinal sorting, uppercase before lowercase."""
        results = dedup_packages([package("zeta"), package("Alpha"), package("beta")])
        assert [d.name for d in results] == ["Alpha", "beta", "zeta"]


class TestDedupByName:
    """Tests for stack detection merging."""

    def test_one_per_name(self):
        """Test that a tool found in several files is reported once."""
        results = dedup_by_name([
            StackDetection(name="React", source="b/package.json", via="package.json"),
            StackDetection(name="Django", source="requirements.txt", via="pip"),
            StackDetection(name="React", source="package.json", via="package.json"),
        ])
        assert [(d.name, d.source) for d in results] == [("Django", "requirements.txt"), ("React", "b/package.json")]
