"""
Deduplication and canonical ordering of detections.

Detectors may report the same thing several times (once per matching
line, once per method). These helpers collapse repeats on a per-kind key
and sort the survivors so that results never depend on the order in
which detectors ran or files were visited.
"""

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

from repo_grader.schemas import CloudServiceDetection, PackageDetection, StackDetection

T = TypeVar("T")


def unique_by(items: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """Keep the first item seen for each key, preserving order."""
    seen: set[Hashable] = set()
    result: list[T] = []
    for item in items:
        k = key(item)
        if k not in seen:
            seen.add(k)
            result.append(item)
    return result


def cloud_key(d: CloudServiceDetection) -> tuple[str, str, str]:
    return d.service, d.via, d.source


def package_key(d: PackageDetection) -> tuple[str, str]:
    return d.name, d.source


def dedup_cloud(detections: Iterable[CloudServiceDetection]) -> list[CloudServiceDetection]:
    """
    Merge cloud service detections on (service, via, source).

    The same service found by two methods or in two files stays as two
    records. Output is sorted by service name, then source and method,
    using ordinal string comparison.
    """
    survivors = unique_by(detections, cloud_key)
    return sorted(survivors, key=lambda d: (d.service, d.source, d.via))


def dedup_packages(detections: Iterable[PackageDetection]) -> list[PackageDetection]:
    """
    Merge package detections on (name, source).

    When one manifest lists a package twice the first entry wins.
    Output is sorted by name, then source.
    """
    survivors = unique_by(detections, package_key)
    return sorted(survivors, key=lambda d: (d.name, d.source))


def dedup_by_name(detections: Iterable[StackDetection]) -> list[StackDetection]:
    """One record per tool name, first occurrence wins, sorted by name."""
    survivors = unique_by(detections, lambda d: d.name)
    return sorted(survivors, key=lambda d: d.name)
