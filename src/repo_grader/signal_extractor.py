"""
Signal analyzers for repository quality categories.

Each analyzer looks at the retrieved files and the full tree and returns a
``CategoryResult``: a fixed, ordered list of named signals plus a 0-100
score. Every satisfied signal is worth a fixed number of points; the
point tables below are heuristics carried over as named constants rather
than derived values. Scores are clamped to [0, 100].

Categories:
- Documentation
- Security
- CI/CD
- Dependencies
- Code Quality
- License
- Community
- OpenSSF Scorecard-style checks

Contributor friendliness is scored the same way but reported on its own,
outside the weighted categories.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from repo_grader.config import DEFAULT_CATEGORY_WEIGHTS, AnalysisSettings
from repo_grader.file_selector import canonical_key
from repo_grader.manifests import NPM_DEPENDENCY_SECTIONS, dependency_map, load_json_object
from repo_grader.schemas import (
    CategoryResult,
    ChecklistItem,
    ContributorFriendliness,
    FileContent,
    RepoMetadata,
    Signal,
    TechStackItem,
    TreeEntry,
)

CATEGORY_LABELS: dict[str, str] = {
    "documentation": "Documentation",
    "security": "Security",
    "cicd": "CI/CD",
    "dependencies": "Dependencies",
    "codeQuality": "Code Quality",
    "license": "License",
    "community": "Community",
    "openssf": "OpenSSF",
}

WORKFLOW_DIR = ".github/workflows/"
ISSUE_TEMPLATE_DIR = ".github/ISSUE_TEMPLATE/"
PR_TEMPLATES = (
    ".github/PULL_REQUEST_TEMPLATE.md",
    ".github/pull_request_template.md",
    "PULL_REQUEST_TEMPLATE.md",
)
CODE_OF_CONDUCT_FILES = ("CODE_OF_CONDUCT.md", ".github/CODE_OF_CONDUCT.md")
LICENSE_FILES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "COPYING", "LICENCE")
DEPENDABOT_FILES = (".github/dependabot.yml", ".github/dependabot.yaml")
RENOVATE_FILES = (".renovaterc", ".renovaterc.json", "renovate.json")

MANIFEST_FILES = [
    "package.json", "Cargo.toml", "go.mod", "requirements.txt",
    "Pipfile", "pyproject.toml", "setup.py", "setup.cfg",
    "Gemfile", "composer.json", "pom.xml", "build.gradle", "build.gradle.kts",
]
LOCKFILES = ["package-lock.json", "yarn.lock", "pnpm-lock.yaml", "Cargo.lock", "go.sum", "Gemfile.lock"]

# Config file -> tool name; first match in declaration order wins
LINTER_FILES: dict[str, str] = {
    ".eslintrc.json": "ESLint", ".eslintrc.js": "ESLint", ".eslintrc.yml": "ESLint",
    ".eslintrc": "ESLint", "eslint.config.js": "ESLint", "eslint.config.mjs": "ESLint",
    ".flake8": "Flake8", ".pylintrc": "Pylint", "clippy.toml": "Clippy",
    ".rubocop.yml": "RuboCop", ".golangci.yml": "golangci-lint",
    "biome.json": "Biome", "deno.json": "Deno",
}
FORMATTER_FILES: dict[str, str] = {
    ".prettierrc": "Prettier", ".prettierrc.json": "Prettier", ".prettierrc.js": "Prettier",
    "prettier.config.js": "Prettier", ".prettierrc.yaml": "Prettier",
    "rustfmt.toml": "rustfmt", ".clang-format": "clang-format",
    "biome.json": "Biome", ".editorconfig": "EditorConfig",
}

TEST_DIR_NAMES = ["test", "tests", "__tests__", "spec", "src/test", "src/__tests__"]
TEST_FILE_PATTERNS = [
    (re.compile(r"\.test\.[jt]sx?$"), "JS/TS test files"),
    (re.compile(r"\.spec\.[jt]sx?$"), "JS/TS spec files"),
    (re.compile(r"_test\.go$"), "Go test files"),
    (re.compile(r"_test\.rs$"), "Rust test files"),
    (re.compile(r"test_.*\.py$"), "Python test files"),
    (re.compile(r"_spec\.rb$"), "Ruby spec files"),
]
CI_TEST_COMMANDS: dict[str, str] = {
    "npm test": "npm test",
    "npm run test": "npm run test",
    "yarn test": "yarn test",
    "pnpm test": "pnpm test",
    "pytest": "pytest",
    "cargo test": "cargo test",
    "go test": "go test",
    "jest": "Jest",
    "vitest": "Vitest",
    "make test": "make test",
    "bundle exec rspec": "RSpec",
    "phpunit": "PHPUnit",
}

PERMISSIVE_LICENSES = frozenset({"MIT", "Apache-2.0", "BSD-2-Clause", "BSD-3-Clause", "ISC", "Unlicense", "CC0-1.0"})
COPYLEFT_LICENSES = frozenset({"GPL-2.0", "GPL-3.0", "AGPL-3.0", "LGPL-2.1", "LGPL-3.0", "MPL-2.0"})

BINARY_EXTENSIONS = frozenset({".exe", ".dll", ".jar", ".so", ".class", ".pyc"})
SLSA_MARKERS = ("slsa", "provenance", "sigstore", "cosign")
SBOM_MARKERS = ("cyclonedx", "spdx", "sbom", "syft")

MARKDOWN_HEADER = re.compile(r"^#{1,3}\s+", re.MULTILINE)
FENCED_CODE_BLOCK = re.compile(r"```.*?```", re.DOTALL)
ACTION_USES = re.compile(r"uses:\s*\S+")
COMMIT_SHA = re.compile(r"^[0-9a-f]{40}$", re.IGNORECASE)
CONTRIBUTING_SECTION = re.compile(r"^#{1,3}\s+contribut", re.IGNORECASE | re.MULTILINE)
SETUP_SECTION = re.compile(r"^#{1,3}\s+(install|setup|getting\s+started)", re.IGNORECASE | re.MULTILINE)

# --- Point tables (heuristic) ---

DOCUMENTATION_POINTS = {
    "README exists": 25,
    "Substantial README (>500 chars)": 20,
    "README has sections": 15,
    "Code examples in README": 10,
    "CONTRIBUTING.md": 10,
    "CHANGELOG": 10,
    "docs/ directory": 10,
}
SECURITY_POINTS = {
    "SECURITY.md": 20,
    "CODEOWNERS": 15,
    "Dependabot configured": 20,
    "CodeQL / security scanning": 15,
    "PR-triggered workflows": 10,
    ".gitignore present": 10,
    "No exposed secret files": 10,
}
CICD_POINTS = {
    "GitHub Actions workflows": 25,
    "CI workflow (test/build)": 25,
    "Deploy / release workflow": 15,
    "PR-triggered checks": 15,
    "Dockerfile": 10,
    "Docker Compose": 5,
    "Makefile": 5,
}
DEPENDENCIES_POINTS = {
    "Dependency manifest": 30,
    "Lockfile present": 25,
    "Dependencies tracked": 20,
    "Reasonable dependency count": 15,
}
TECH_STACK_BONUS = 10
CODE_QUALITY_POINTS = {
    "Linter configured": 20,
    "Formatter configured": 15,
    "Type system": 15,
    "Git hooks": 10,
    "Tests present": 20,
    "CI runs tests": 10,
    "EditorConfig": 10,
}
LICENSE_POINTS = {
    "License file exists": 40,
    "SPDX license detected": 30,
    "Permissive license": 30,
    "Copyleft license": 20,
}
OTHER_LICENSE_BONUS = 10
COMMUNITY_POINTS = {
    "Issue templates": 20,
    "PR template": 20,
    "Code of Conduct": 20,
    "CONTRIBUTING.md": 20,
    "Funding configuration": 10,
    "SUPPORT.md": 10,
}
OPENSSF_POINTS = {
    "Token permissions": 15,
    "Pinned dependencies": 15,
    "No dangerous workflow patterns": 10,
    "No binary artifacts": 10,
    "SLSA / signed releases": 10,
    "Fuzzing": 10,
    "SBOM generation": 10,
    "Dependency update tool": 10,
    "Security policy": 5,
    "License detected": 5,
}
CONTRIBUTOR_POINTS = {
    "CONTRIBUTING.md exists": 12,
    "CONTRIBUTING.md is substantial (>200 chars)": 8,
    "Issue templates": 12,
    "PR template": 12,
    "Code of Conduct": 10,
    "Good first issue label in templates": 8,
    "README has Contributing section": 8,
    "Setup instructions in README": 10,
    "Funding configured": 7,
    "SUPPORT.md": 8,
}
MULTIPLE_ISSUE_TEMPLATES_BONUS = 5


@dataclass
class RepoView:
    """Lookup structures over one snapshot, built once per analyzer call."""

    files: list[FileContent]
    tree: list[TreeEntry]
    file_map: dict[str, FileContent] = field(init=False)
    tree_paths: set[str] = field(init=False)

    def __post_init__(self) -> None:
        self.file_map = {}
        for f in sorted(self.files, key=lambda f: canonical_key(f.path)):
            self.file_map.setdefault(f.path, f)
        self.tree_paths = {e.path for e in self.tree}

    @property
    def ordered_files(self) -> list[FileContent]:
        return list(self.file_map.values())

    @property
    def workflow_files(self) -> list[FileContent]:
        return [f for f in self.file_map.values() if f.path.startswith(WORKFLOW_DIR)]

    def blobs(self) -> list[TreeEntry]:
        return [e for e in self.tree if e.type == "blob"]

    def has(self, *paths: str) -> bool:
        """True if any path is a retrieved file or a tree entry."""
        return any(p in self.file_map or p in self.tree_paths for p in paths)

    def has_file(self, *paths: str) -> bool:
        return any(p in self.file_map for p in paths)

    def in_tree(self, *paths: str) -> bool:
        return any(p in self.tree_paths for p in paths)

    def find_file(self, *candidates: str) -> FileContent | None:
        """Exact path lookup first, then a case-insensitive scan."""
        for c in candidates:
            if c in self.file_map:
                return self.file_map[c]
        wanted = {c.lower() for c in candidates}
        for path, f in self.file_map.items():
            if path.lower() in wanted:
                return f
        return None

    def casing_note(self, canonical: str) -> str | None:
        """Describe a file found only under nonstandard casing, e.g. ``Readme.md``."""
        if canonical in self.file_map:
            return None
        lower = canonical.lower()
        for path in self.file_map:
            if path.lower() == lower and path != canonical:
                return f'Found as "{path}"; standard convention is "{canonical}"'
        return None

    def first_casing_note(self, *canonicals: str) -> str | None:
        for canonical in canonicals:
            note = self.casing_note(canonical)
            if note:
                return note
        return None

    def issue_templates(self) -> list[TreeEntry]:
        return [e for e in self.blobs() if e.path.startswith(ISSUE_TEMPLATE_DIR)]


def clamp_score(score: int) -> int:
    return max(0, min(100, score))


def score_signals(signals: Sequence[Signal], points: dict[str, int]) -> int:
    """Sum the points of every found signal."""
    return sum(points.get(s.name, 0) for s in signals if s.found)


def _category(key: str, signals: list[Signal], score: int) -> CategoryResult:
    return CategoryResult(
        key=key,
        label=CATEGORY_LABELS[key],
        score=clamp_score(score),
        weight=DEFAULT_CATEGORY_WEIGHTS[key],
        signals=signals,
    )


def analyze_documentation(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    """README presence and quality, contributing guide, changelog and docs folder."""
    settings = settings or AnalysisSettings()
    view = RepoView(list(files), list(tree))

    readme = view.find_file("README.md", "readme.md", "README.rst")
    readme_text = readme.content if readme else ""
    readme_length = len(readme_text)
    header_count = len(MARKDOWN_HEADER.findall(readme_text))
    contributing = view.find_file("CONTRIBUTING.md")
    changelog = view.find_file("CHANGELOG.md", "CHANGES.md", "HISTORY.md")
    has_docs_dir = any(e.type == "tree" and e.path.lower() in ("docs", "doc") for e in view.tree)

    signals = [
        Signal(
            name="README exists",
            found=readme is not None,
            details=view.first_casing_note("README.md", "README.rst") if readme else None,
        ),
        Signal(
            name="Substantial README (>500 chars)",
            found=readme_length > settings.substantial_readme_chars,
            details=f"{readme_length} characters" if readme else None,
        ),
        Signal(
            name="README has sections",
            found=header_count >= settings.min_readme_sections,
            details=f"{header_count} headers found",
        ),
        Signal(name="Code examples in README", found=bool(FENCED_CODE_BLOCK.search(readme_text))),
        Signal(
            name="CONTRIBUTING.md",
            found=contributing is not None,
            details=view.casing_note("CONTRIBUTING.md") if contributing else None,
        ),
        Signal(
            name="CHANGELOG",
            found=changelog is not None,
            details=view.first_casing_note("CHANGELOG.md", "CHANGES.md", "HISTORY.md") if changelog else None,
        ),
        Signal(name="docs/ directory", found=has_docs_dir),
    ]
    return _category("documentation", signals, score_signals(signals, DOCUMENTATION_POINTS))


def analyze_security(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    """Security policy, ownership, automated scanning and secret hygiene."""
    view = RepoView(list(files), list(tree))

    has_codeql = any(
        "codeql" in f.path or "codeql-analysis" in f.content or "CodeQL" in f.content
        for f in view.ordered_files
    )
    has_pr_workflow = any(
        "pull_request" in f.content or "pull-request" in f.content for f in view.workflow_files
    )
    # .env files and anything named like credentials or secrets
    suspicious = any(
        e.path.endswith(".env") or "credentials" in e.path.lower() or "secret" in e.path.lower()
        for e in view.blobs()
    )

    signals = [
        Signal(name="SECURITY.md", found=view.has("SECURITY.md")),
        Signal(name="CODEOWNERS", found=view.has("CODEOWNERS", ".github/CODEOWNERS")),
        Signal(name="Dependabot configured", found=view.has_file(*DEPENDABOT_FILES)),
        Signal(name="CodeQL / security scanning", found=has_codeql),
        Signal(name="PR-triggered workflows", found=has_pr_workflow),
        Signal(name=".gitignore present", found=view.in_tree(".gitignore")),
        Signal(name="No exposed secret files", found=not suspicious),
    ]
    return _category("security", signals, score_signals(signals, SECURITY_POINTS))


def analyze_cicd(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    """GitHub Actions coverage plus container and build tooling."""
    view = RepoView(list(files), list(tree))
    workflows = view.workflow_files
    workflow_count = sum(1 for e in view.blobs() if e.path.startswith(WORKFLOW_DIR))

    has_ci = any(
        ("push" in f.content or "pull_request" in f.content)
        and ("test" in f.content or "build" in f.content or "ci" in f.content)
        for f in workflows
    )
    has_deploy = any(
        "deploy" in f.path.lower()
        or "release" in f.path.lower()
        or "deploy" in f.content
        or "publish" in f.content
        for f in workflows
    )
    blob_paths = [e.path for e in view.blobs()]

    signals = [
        Signal(
            name="GitHub Actions workflows",
            found=workflow_count > 0,
            details=f"{workflow_count} workflow file(s)",
        ),
        Signal(name="CI workflow (test/build)", found=has_ci),
        Signal(name="Deploy / release workflow", found=has_deploy),
        Signal(name="PR-triggered checks", found=any("pull_request" in f.content for f in workflows)),
        Signal(
            name="Dockerfile",
            found=any(p == "Dockerfile" or p.endswith("/Dockerfile") for p in blob_paths),
        ),
        Signal(
            name="Docker Compose",
            found=any(p in ("docker-compose.yml", "docker-compose.yaml") for p in blob_paths),
        ),
        Signal(name="Makefile", found="Makefile" in blob_paths),
    ]
    return _category("cicd", signals, score_signals(signals, CICD_POINTS))


def _root_npm_dependencies(view: RepoView) -> dict[str, object]:
    pkg = view.file_map.get("package.json")
    if pkg is None:
        return {}
    manifest = load_json_object(pkg.path, pkg.content)
    if manifest is None:
        return {}
    return dependency_map(manifest, NPM_DEPENDENCY_SECTIONS)


def detect_tech_stack(files: Sequence[FileContent], tree: Sequence[TreeEntry]) -> list[TechStackItem]:
    """
    Coarse technology labels from the root manifests.

    Frameworks and tools come from the root package.json; languages and
    platforms from which root manifests exist in the tree.
    """
    view = RepoView(list(files), list(tree))
    deps = _root_npm_dependencies(view)
    stack: list[TechStackItem] = []

    def add(name: str, category: str) -> None:
        stack.append(TechStackItem(name=name, category=category))

    if "react" in deps or "react-dom" in deps:
        add("React", "framework")
    for dep, name in (
        ("vue", "Vue"),
        ("@angular/core", "Angular"),
        ("svelte", "Svelte"),
        ("next", "Next.js"),
        ("express", "Express"),
        ("fastify", "Fastify"),
    ):
        if dep in deps:
            add(name, "framework")
    if "nestjs" in deps or "@nestjs/core" in deps:
        add("NestJS", "framework")

    if "typescript" in deps:
        add("TypeScript", "language")
    for dep, name in (("tailwindcss", "Tailwind CSS"), ("webpack", "Webpack"), ("vite", "Vite")):
        if dep in deps:
            add(name, "tool")
    if any(runner in deps for runner in ("jest", "vitest", "mocha")):
        add("Test Framework", "tool")

    if view.in_tree("Cargo.toml"):
        add("Rust", "language")
    if view.in_tree("go.mod"):
        add("Go", "language")
    if view.in_tree("requirements.txt", "pyproject.toml", "Pipfile"):
        add("Python", "language")
    if view.in_tree("Gemfile"):
        add("Ruby", "language")
    if view.in_tree("composer.json"):
        add("PHP", "language")
    if view.in_tree("pom.xml", "build.gradle", "build.gradle.kts"):
        add("Java/JVM", "language")
    if view.in_tree("Dockerfile"):
        add("Docker", "platform")
    if view.in_tree("tsconfig.json") and not any(item.name == "TypeScript" for item in stack):
        add("TypeScript", "language")
    return stack


def analyze_dependencies(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    """Manifests, lockfiles and dependency count of the root project."""
    settings = settings or AnalysisSettings()
    view = RepoView(list(files), list(tree))

    manifests = [m for m in MANIFEST_FILES if view.has(m)]
    lockfiles = [lock for lock in LOCKFILES if view.in_tree(lock)]
    dep_count = len(_root_npm_dependencies(view))
    reasonable = dep_count < settings.max_reasonable_dependencies

    signals = [
        Signal(name="Dependency manifest", found=bool(manifests), details=", ".join(manifests)),
        Signal(name="Lockfile present", found=bool(lockfiles), details=", ".join(lockfiles)),
        Signal(
            name="Dependencies tracked",
            found=dep_count > 0,
            details=f"{dep_count} dependencies" if dep_count > 0 else None,
        ),
        Signal(
            name="Reasonable dependency count",
            found=reasonable,
            details=f"{dep_count} total" if dep_count > 0 else None,
        ),
    ]
    score = score_signals(signals, DEPENDENCIES_POINTS)
    if detect_tech_stack(files, tree):
        score += TECH_STACK_BONUS
    return _category("dependencies", signals, score)


def _first_tool(view: RepoView, lookup: dict[str, str]) -> str | None:
    for candidates in (view.file_map, view.tree_paths):
        for path, name in lookup.items():
            if path in candidates:
                return name
    return None


def analyze_code_quality(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    """Linting, formatting, typing, hooks and tests."""
    view = RepoView(list(files), list(tree))

    linter = _first_tool(view, LINTER_FILES)
    formatter = _first_tool(view, FORMATTER_FILES)
    has_typescript = view.has("tsconfig.json")

    hook_tool = None
    if view.has(".husky/pre-commit") or view.in_tree(".husky"):
        hook_tool = "Husky"
    elif view.has(".pre-commit-config.yaml"):
        hook_tool = "pre-commit"
    elif view.in_tree(".lefthook.yml", "lefthook.yml"):
        hook_tool = "Lefthook"

    test_dirs = [d for d in TEST_DIR_NAMES if any(e.type == "tree" and e.path == d for e in view.tree)]
    test_file_count = 0
    test_file_type = ""
    for pattern, label in TEST_FILE_PATTERNS:
        matches = sum(1 for e in view.blobs() if pattern.search(e.path))
        if matches:
            test_file_count += matches
            test_file_type = test_file_type or label
    if test_file_count:
        test_details = f"{test_file_count} test files found ({test_file_type})"
    elif test_dirs:
        test_details = f"{', '.join(test_dirs)} directory"
    else:
        test_details = None

    ci_test_command = next(
        (
            label
            for f in view.workflow_files
            for command, label in CI_TEST_COMMANDS.items()
            if command in f.content
        ),
        None,
    )

    signals = [
        Signal(name="Linter configured", found=linter is not None, details=linter),
        Signal(name="Formatter configured", found=formatter is not None, details=formatter),
        Signal(name="Type system", found=has_typescript, details="TypeScript" if has_typescript else None),
        Signal(name="Git hooks", found=hook_tool is not None, details=hook_tool),
        Signal(name="Tests present", found=bool(test_dirs) or test_file_count > 0, details=test_details),
        Signal(
            name="CI runs tests",
            found=ci_test_command is not None,
            details=f"via {ci_test_command}" if ci_test_command else None,
        ),
        Signal(name="EditorConfig", found=view.has(".editorconfig")),
    ]
    return _category("codeQuality", signals, score_signals(signals, CODE_QUALITY_POINTS))


def analyze_license(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    """
    License file presence and the host-reported SPDX identifier.

    A permissive license earns the most, copyleft a little less, and any
    other recognized identifier a small bonus.
    """
    view = RepoView(list(files), list(tree))
    spdx_id = metadata.license if metadata else None
    detected = bool(spdx_id) and spdx_id != "NOASSERTION"
    permissive = spdx_id in PERMISSIVE_LICENSES
    copyleft = spdx_id in COPYLEFT_LICENSES

    signals = [
        Signal(name="License file exists", found=view.in_tree(*LICENSE_FILES)),
        Signal(name="SPDX license detected", found=detected, details=spdx_id or None),
        Signal(name="Permissive license", found=permissive, details=spdx_id if permissive else None),
        Signal(name="Copyleft license", found=copyleft, details=spdx_id if copyleft else None),
    ]
    score = score_signals(signals, LICENSE_POINTS)
    if detected and not permissive and not copyleft:
        score += OTHER_LICENSE_BONUS
    return _category("license", signals, score)


def analyze_community(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    view = RepoView(list(files), list(tree))
    template_count = len(view.issue_templates())

    signals = [
        Signal(name="Issue templates", found=template_count > 0, details=f"{template_count} template(s)"),
        Signal(name="PR template", found=view.in_tree(*PR_TEMPLATES)),
        Signal(name="Code of Conduct", found=view.has(*CODE_OF_CONDUCT_FILES)),
        Signal(name="CONTRIBUTING.md", found=view.has("CONTRIBUTING.md")),
        Signal(name="Funding configuration", found=view.has(".github/FUNDING.yml")),
        Signal(name="SUPPORT.md", found=view.has(".github/SUPPORT.md") or view.in_tree("SUPPORT.md")),
    ]
    return _category("community", signals, score_signals(signals, COMMUNITY_POINTS))


def actions_pinned(workflows: Sequence[FileContent]) -> tuple[bool, int]:
    """
    Check that every ``uses:`` reference across all workflows is pinned to a full commit SHA.

    All-or-nothing: a single tag or branch reference fails the whole set,
    and a set with no references at all does not pass.

    Returns:
        Tuple of (all_pinned, reference_count)
    """
    refs = ACTION_USES.findall("\n".join(f.content for f in workflows))

    def pinned(use: str) -> bool:
        parts = use.split("@")
        return len(parts) > 1 and COMMIT_SHA.match(parts[1].strip()) is not None

    return bool(refs) and all(pinned(u) for u in refs), len(refs)


def has_dangerous_workflow(workflows: Sequence[FileContent]) -> bool:
    """
    A ``pull_request_target`` trigger combined with checking out the PR head, in the same file.

    Either condition alone is not flagged.
    """
    for f in workflows:
        has_target_trigger = "pull_request_target" in f.content
        checks_out_head = "actions/checkout" in f.content and (
            "github.event.pull_request.head.ref" in f.content
            or "github.event.pull_request.head.sha" in f.content
        )
        if has_target_trigger and checks_out_head:
            return True
    return False


def _extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    return name[name.rfind("."):].lower() if "." in name else ""


def analyze_openssf(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> CategoryResult:
    """A static approximation of OpenSSF Scorecard checks."""
    view = RepoView(list(files), list(tree))
    workflows = view.workflow_files
    workflow_text_lower = [f.content.lower() for f in workflows]

    pinned, ref_count = actions_pinned(workflows)
    has_dependabot = view.has_file(*DEPENDABOT_FILES)
    has_renovate = view.in_tree(*RENOVATE_FILES)
    has_fuzzing = any("fuzz" in e.path.lower() for e in view.tree) or any(
        "oss-fuzz" in f.content.lower() for f in view.ordered_files
    )
    if has_dependabot:
        update_tool = "Dependabot"
    elif has_renovate:
        update_tool = "Renovate"
    else:
        update_tool = None

    signals = [
        Signal(name="Token permissions", found=any("permissions:" in f.content for f in workflows)),
        Signal(
            name="Pinned dependencies",
            found=pinned,
            details="Actions pinned to SHA" if pinned else f"{ref_count} action ref(s) found",
        ),
        Signal(name="No dangerous workflow patterns", found=not has_dangerous_workflow(workflows)),
        Signal(
            name="No binary artifacts",
            found=not any(_extension(e.path) in BINARY_EXTENSIONS for e in view.blobs()),
        ),
        Signal(
            name="SLSA / signed releases",
            found=any(marker in text for text in workflow_text_lower for marker in SLSA_MARKERS),
        ),
        Signal(name="Fuzzing", found=has_fuzzing),
        Signal(
            name="SBOM generation",
            found=any(marker in text for text in workflow_text_lower for marker in SBOM_MARKERS),
        ),
        Signal(name="Dependency update tool", found=update_tool is not None, details=update_tool),
        Signal(name="Security policy", found=view.has("SECURITY.md")),
        Signal(name="License detected", found=view.in_tree(*LICENSE_FILES)),
    ]
    return _category("openssf", signals, score_signals(signals, OPENSSF_POINTS))


def analyze_contributor_friendliness(
    files: Sequence[FileContent],
    tree: Sequence[TreeEntry],
    metadata: RepoMetadata | None = None,
    settings: AnalysisSettings | None = None,
) -> ContributorFriendliness:
    """
    How approachable the repository is for new contributors.

    Returns a score, the signals behind it, and a readiness checklist
    suitable for showing as a to-do list.
    """
    settings = settings or AnalysisSettings()
    view = RepoView(list(files), list(tree))

    contributing = view.file_map.get("CONTRIBUTING.md")
    contributing_exists = contributing is not None or view.in_tree("CONTRIBUTING.md")
    template_count = len(view.issue_templates())
    has_pr_template = view.in_tree(*PR_TEMPLATES)
    has_coc = view.has(*CODE_OF_CONDUCT_FILES)
    has_good_first_issue = any(
        f.path.startswith(ISSUE_TEMPLATE_DIR)
        and ("good first issue" in f.content.lower() or "good-first-issue" in f.content.lower())
        for f in view.ordered_files
    )
    readme = view.find_file("README.md", "readme.md", "README.rst")
    readme_text = readme.content if readme else ""
    has_contributing_section = CONTRIBUTING_SECTION.search(readme_text) is not None
    has_setup = SETUP_SECTION.search(readme_text) is not None
    has_funding = view.has(".github/FUNDING.yml")
    has_support = view.has(".github/SUPPORT.md", "SUPPORT.md")

    signals = [
        Signal(name="CONTRIBUTING.md exists", found=contributing_exists),
        Signal(
            name="CONTRIBUTING.md is substantial (>200 chars)",
            found=contributing is not None and len(contributing.content) > settings.substantial_contributing_chars,
            details=f"{len(contributing.content)} characters" if contributing else None,
        ),
        Signal(name="Issue templates", found=template_count > 0, details=f"{template_count} template(s)"),
        Signal(name="PR template", found=has_pr_template),
        Signal(name="Code of Conduct", found=has_coc),
        Signal(name="Good first issue label in templates", found=has_good_first_issue),
        Signal(name="README has Contributing section", found=has_contributing_section),
        Signal(name="Setup instructions in README", found=has_setup),
        Signal(name="Funding configured", found=has_funding),
        Signal(name="SUPPORT.md", found=has_support),
    ]
    score = score_signals(signals, CONTRIBUTOR_POINTS)
    if template_count >= 2:
        score += MULTIPLE_ISSUE_TEMPLATES_BONUS

    checklist = [
        ChecklistItem(
            label="Contribution guide",
            passed=contributing_exists,
            description="A CONTRIBUTING.md file explaining how to contribute to the project",
        ),
        ChecklistItem(
            label="Issue templates",
            passed=template_count > 0,
            description="Structured issue templates in .github/ISSUE_TEMPLATE/ for bug reports and feature requests",
        ),
        ChecklistItem(
            label="PR template",
            passed=has_pr_template,
            description="A pull request template that guides contributors through the PR process",
        ),
        ChecklistItem(
            label="Code of conduct",
            passed=has_coc,
            description="A CODE_OF_CONDUCT.md that sets expectations for community behavior",
        ),
        ChecklistItem(
            label="Setup instructions",
            passed=has_setup,
            description="Clear instructions in the README for installing and running the project locally",
        ),
        ChecklistItem(
            label="Contributing section in README",
            passed=has_contributing_section,
            description="A section in the README that introduces contributors to the project workflow",
        ),
        ChecklistItem(
            label="Good first issue labels",
            passed=has_good_first_issue,
            description="Issue templates or labels that help newcomers find beginner-friendly tasks",
        ),
        ChecklistItem(
            label="Support resources",
            passed=has_support,
            description="A SUPPORT.md file directing users to help channels (forums, chat, etc.)",
        ),
        ChecklistItem(
            label="Funding information",
            passed=has_funding,
            description="A .github/FUNDING.yml file enabling sponsor buttons on the repository",
        ),
    ]
    return ContributorFriendliness(score=clamp_score(score), signals=signals, readiness_checklist=checklist)


Analyzer = Callable[..., CategoryResult]

# Weighted categories, in report order
CATEGORY_ANALYZERS: list[tuple[str, Analyzer]] = [
    ("documentation", analyze_documentation),
    ("security", analyze_security),
    ("cicd", analyze_cicd),
    ("dependencies", analyze_dependencies),
    ("codeQuality", analyze_code_quality),
    ("license", analyze_license),
    ("community", analyze_community),
    ("openssf", analyze_openssf),
]
