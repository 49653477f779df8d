"""
Candidate file selection.

Given a full repository tree, pick the bounded, ordered list of paths
whose contents the detectors and analyzers need. Selection is purely
path-based: manifests and tool configs come first, a capped
sample of source files last. Every category is ordered shallowest-first
and capped, so very large monorepos cost a bounded amount of work.
"""

import logging
import re
from collections.abc import Callable, Collection, Iterable

from repo_grader.config import SelectorSettings
from repo_grader.manifests import basename
from repo_grader.schemas import TreeEntry

logger = logging.getLogger(__name__)

PYTHON_MANIFESTS = frozenset({
    "requirements.txt", "pyproject.toml", "Pipfile", "setup.py", "setup.cfg",
})
JAVA_BUILD_FILES = frozenset({"pom.xml", "build.gradle", "build.gradle.kts"})

REQUIREMENTS_DIR_PATTERN = re.compile(r"(?:^|/)requirements/.*\.txt$")
TERRAFORM_PATH_PATTERN = re.compile(r"^(?:terraform/|infra/|[^/]+\.tf$)")

CFN_EXTENSION_PATTERN = re.compile(r"\.(?:ya?ml|json)$")
CFN_PATH_PATTERNS = [
    re.compile(r"^template\."),
    re.compile(r"\.template\."),
    re.compile(r"^cloudformation/"),
    re.compile(r"^serverless\.ya?ml$"),
    re.compile(r"^sam\.ya?ml$"),
]
ARM_PATH_HINTS = ("arm", "template", "azuredeploy")

CICD_CONFIG_PATTERNS = [
    re.compile(p) for p in (
        r"^\.github/workflows/.*\.ya?ml$",
        r"^\.gitlab-ci\.ya?ml$",
        r"^\.circleci/",
        r"^Jenkinsfile$",
        r"^\.travis\.yml$",
        r"^azure-pipelines\.ya?ml$",
        r"^bitbucket-pipelines\.yml$",
        r"^\.buildkite/",
        r"^Dockerfile(\..*)?$",
        r"^docker-compose\.ya?ml$",
        r"^compose\.ya?ml$",
        r"^\.dockerignore$",
        r"^(kubernetes|k8s)/",
        r"^Chart\.yaml$",
        r"^(charts|helm)/.*Chart\.yaml$",
        r"^skaffold\.yaml$",
        r"^Makefile$",
        r"^Taskfile\.ya?ml$",
        r"^justfile$",
        r"^Earthfile$",
        r"^pulumi\.ya?ml$",
        r"^Pulumi\.\w+\.ya?ml$",
        r"^serverless\.ya?ml$",
        r"^\.terraform\.lock\.hcl$",
        r"^terragrunt\.hcl$",
    )
]

# Matched against the full path and against the basename
QUALITY_CONFIG_PATTERNS = [
    re.compile(p) for p in (
        r"^\.eslintrc",
        r"^eslint\.config\.",
        r"^\.prettierrc",
        r"^prettier\.config\.",
        r"^jest\.config\.",
        r"^vitest\.config\.",
        r"^playwright\.config\.",
        r"^cypress\.config\.",
        r"^\.storybook/",
        r"^biome\.json$",
        r"^\.ruff\.toml$",
        r"^\.flake8$",
        r"^\.pylintrc$",
        r"^mypy\.ini$",
        r"^\.mypy\.ini$",
        r"^tox\.ini$",
        r"^\.rubocop\.yml$",
        r"^\.husky/",
        r"^commitlint\.config\.",
        r"^\.commitlintrc",
    )
]

# Documentation, policy and tooling files read by the quality analyzers
ANALYSIS_TARGET_FILES = [
    "README.md", "README.rst", "readme.md",
    "CONTRIBUTING.md", "CHANGELOG.md", "CHANGES.md", "HISTORY.md",
    "LICENSE", "LICENSE.md", "LICENSE.txt",
    "SECURITY.md", "CODEOWNERS", ".github/CODEOWNERS",
    "CODE_OF_CONDUCT.md", ".github/CODE_OF_CONDUCT.md",
    ".github/FUNDING.yml", ".github/SUPPORT.md", "SUPPORT.md",
    ".github/dependabot.yml", ".github/dependabot.yaml",
    ".renovaterc", ".renovaterc.json", "renovate.json",
    "package.json", "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
    "Cargo.toml", "Cargo.lock", "go.mod", "go.sum",
    "requirements.txt", "Pipfile", "pyproject.toml", "setup.py", "setup.cfg",
    "Gemfile", "Gemfile.lock", "composer.json",
    "pom.xml", "build.gradle", "build.gradle.kts",
    ".eslintrc.json", ".eslintrc.js", ".eslintrc.yml", ".eslintrc",
    "eslint.config.js", "eslint.config.mjs",
    ".prettierrc", ".prettierrc.json", ".prettierrc.js", "prettier.config.js",
    "tsconfig.json", ".editorconfig", ".pre-commit-config.yaml", ".husky/pre-commit",
    "Makefile", "Dockerfile", "docker-compose.yml", "docker-compose.yaml", ".dockerignore",
    ".github/PULL_REQUEST_TEMPLATE.md", ".github/pull_request_template.md",
]
_ANALYSIS_TARGETS_LOWER = frozenset(name.lower() for name in ANALYSIS_TARGET_FILES)

WORKFLOW_DIR = ".github/workflows/"
ISSUE_TEMPLATE_DIR = ".github/ISSUE_TEMPLATE/"


def path_depth(path: str) -> int:
    return path.count("/")


def canonical_key(path: str) -> tuple[int, str]:
    """Sort key: shallower paths first, then ordinal path order."""
    return path_depth(path), path


def is_skipped_path(path: str, skip_dirs: Collection[str]) -> bool:
    """
    Check whether any directory segment of ``path`` is in the skip set.

    Args:
        path: '/'-separated repository path
        skip_dirs: Directory names to exclude (vendor, build, VCS...)

    Returns:
        True if the path lives under a skipped directory
    """
    return any(segment in skip_dirs for segment in path.split("/"))


def is_cfn_template(path: str) -> bool:
    if not CFN_EXTENSION_PATTERN.search(path):
        return False
    return any(p.search(path) for p in CFN_PATH_PATTERNS)


def is_arm_template(path: str) -> bool:
    return path.endswith(".json") and any(hint in path for hint in ARM_PATH_HINTS)


def is_quality_config(path: str) -> bool:
    name = basename(path)
    return any(p.search(path) or p.search(name) for p in QUALITY_CONFIG_PATTERNS)


def _source_sample_filter(max_bytes: int) -> Callable[[TreeEntry], bool]:
    def accept(entry: TreeEntry) -> bool:
        # Unknown sizes are admitted; the snapshot builder bounds them later
        return entry.path.endswith(".py") and (entry.size is None or entry.size < max_bytes)
    return accept


def _manifest_categories() -> list[tuple[str, Callable[[TreeEntry], bool]]]:
    return [
        ("package.json", lambda e: basename(e.path) == "package.json"),
        ("python", lambda e: basename(e.path) in PYTHON_MANIFESTS),
        ("requirements", lambda e: bool(REQUIREMENTS_DIR_PATTERN.search(e.path))),
        ("terraform", lambda e: e.path.endswith(".tf") and bool(TERRAFORM_PATH_PATTERN.search(e.path))),
        ("cloudformation", lambda e: is_cfn_template(e.path)),
        ("go", lambda e: basename(e.path) == "go.mod"),
        ("java", lambda e: basename(e.path) in JAVA_BUILD_FILES),
        ("php", lambda e: basename(e.path) == "composer.json"),
        ("rust", lambda e: basename(e.path) == "Cargo.toml"),
        ("ruby", lambda e: basename(e.path) == "Gemfile"),
        ("bicep", lambda e: e.path.endswith(".bicep")),
        ("arm", lambda e: is_arm_template(e.path)),
        ("cicd", lambda e: any(p.search(e.path) for p in CICD_CONFIG_PATTERNS)),
        ("quality", lambda e: is_quality_config(e.path)),
    ]


def _blobs(tree: list[TreeEntry], skip_dirs: frozenset[str]) -> list[TreeEntry]:
    blobs = [e for e in tree if e.type == "blob" and not is_skipped_path(e.path, skip_dirs)]
    return sorted(blobs, key=lambda e: canonical_key(e.path))


def _append_unique(selected: list[str], seen: set[str], paths: Iterable[str]) -> None:
    for path in paths:
        if path not in seen:
            seen.add(path)
            selected.append(path)


def select_tech_files(tree: list[TreeEntry], settings: SelectorSettings | None = None) -> list[str]:
    """
    Choose the candidate files for technology detection.

    Manifest and config categories come first in a fixed order, then a
    sample of Python sources for in-code SDK client detection. Within a
    category paths are ordered by depth then ordinal path, and each
    category is capped.

    Args:
        tree: Full repository tree
        settings: Selection bounds (defaults used when None)

    Returns:
        Ordered, deduplicated candidate paths; empty for an empty tree
    """
    settings = settings or SelectorSettings()
    blobs = _blobs(tree, settings.all_skip_dirs)
    if not blobs:
        return []

    selected: list[str] = []
    seen: set[str] = set()
    for name, accept in _manifest_categories():
        matches = [e.path for e in blobs if accept(e)]
        if len(matches) > settings.max_files_per_category:
            logger.debug(f"Capping {name} files at {settings.max_files_per_category} of {len(matches)}")
        _append_unique(selected, seen, matches[: settings.max_files_per_category])

    accept_source = _source_sample_filter(settings.max_source_file_bytes)
    sources = [e.path for e in blobs if accept_source(e) and e.path not in seen]
    if len(sources) > settings.max_source_files:
        logger.debug(f"Capping source sample at {settings.max_source_files} of {len(sources)}")
    _append_unique(selected, seen, sources[: settings.max_source_files])

    return selected


def select_analysis_files(tree: list[TreeEntry], settings: SelectorSettings | None = None) -> list[str]:
    """
    Choose the documentation, policy and workflow files the quality analyzers read.

    Fixed targets (matched case-insensitively, so ``Readme.md`` is caught)
    come first, then workflow files, issue templates and CodeQL configs.
    """
    settings = settings or SelectorSettings()
    blobs = _blobs(tree, settings.all_skip_dirs)

    exact: list[str] = []
    workflows: list[str] = []
    issue_templates: list[str] = []
    codeql: list[str] = []
    for entry in blobs:
        path = entry.path
        if path.lower() in _ANALYSIS_TARGETS_LOWER:
            exact.append(path)
        elif path.startswith(WORKFLOW_DIR) and path.endswith((".yml", ".yaml")):
            workflows.append(path)
        elif path.startswith(ISSUE_TEMPLATE_DIR):
            issue_templates.append(path)
        elif "codeql" in path and path.endswith(".yml"):
            codeql.append(path)

    selected: list[str] = []
    seen: set[str] = set()
    _append_unique(selected, seen, exact)
    _append_unique(selected, seen, workflows[: settings.max_workflow_files])
    _append_unique(selected, seen, issue_templates[: settings.max_issue_templates])
    _append_unique(selected, seen, codeql)
    return selected
