"""
Package dependency detectors for Python, Node, Go, Java, PHP, Rust and Ruby.

JSON manifests are parsed (parse-or-skip); the other formats are read with
anchored patterns tuned to their common idiomatic forms. Lines that do not
match are skipped, so a commented-out or unusual declaration may be missed
or picked up; full grammar awareness is not attempted.
"""

import re

from repo_grader.manifests import (
    COMPOSER_DEPENDENCY_SECTIONS,
    NPM_DEPENDENCY_SECTIONS,
    basename,
    load_json_object,
    version_string,
)
from repo_grader.schemas import PackageDetection

CLOUD_SDK_PREFIXES = ("@aws-sdk/", "aws-sdk", "@aws-cdk/", "aws-cdk-lib", "@azure/", "@google-cloud/")

# --- Python patterns ---
REQUIREMENT_LINE = re.compile(r"^([a-zA-Z0-9_][a-zA-Z0-9._-]*)(?:\[[^\]]*\])?\s*(.*)$")
REQUIREMENTS_DIR_FILE = re.compile(r"(?:^|/)requirements/.*\.txt$")
PEP621_DEPENDENCIES = re.compile(r"\[project\]\n[^\[]*dependencies\s*=\s*\[")
# Body of a TOML or Python list up to its closing bracket; brackets inside quoted items (extras) are skipped.
ARRAY_BODY = re.compile(r"""((?:"[^"]*"|'[^']*'|[^\]"'])*)\]""")
QUOTED_REQUIREMENT = re.compile(r"""["'](\w[\w.-]*)(?:\[[^\]]*\])?\s*([^"']*)["']""")
TOML_KEY_VALUE = re.compile(r"""^(\w[\w.-]*)\s*=\s*(?:["']([^"'\n]*)["']|(\S+))""")
POETRY_DEPENDENCIES = re.compile(r"\[tool\.poetry\.dependencies\](.*?)(?:\n\[|$)", re.DOTALL)
OPTIONAL_DEPENDENCY_TABLES = re.compile(r"\[project\.optional-dependencies\](.*?)(?=\n\[|$)", re.DOTALL)
POETRY_GROUP_TABLES = re.compile(
    r"\[tool\.poetry\.(?:dev-dependencies|group\.[\w-]+\.dependencies)\](.*?)(?=\n\[|$)",
    re.DOTALL,
)
PIPFILE_SECTIONS = re.compile(r"\[(?:packages|dev-packages)\](.*?)(?=\n\[|$)", re.DOTALL)
SETUP_PY_INSTALL_REQUIRES = re.compile(r"install_requires\s*=\s*\[")
SETUP_CFG_OPTIONS = re.compile(r"\[options\](.*?)(?:\n\[|$)", re.DOTALL)
SETUP_CFG_INSTALL_REQUIRES = re.compile(r"install_requires\s*=\s*([^\n]*(?:\n[ \t]+[^\n]*)*)")
SETUP_CFG_REQUIREMENT = re.compile(r"^(\w[\w.-]*)(?:\[[^\]]*\])?\s*(.*)$")

# --- Other ecosystems ---
GO_REQUIRE_BLOCK = re.compile(r"require\s*\((.*?)\)", re.DOTALL)
GO_REQUIRE_BLOCK_LINE = re.compile(r"^\s*(\S+)\s+(\S+)", re.MULTILINE)
GO_REQUIRE_SINGLE = re.compile(r"^require\s+([^\s(]\S*)\s+(\S+)", re.MULTILINE)
MAVEN_DEPENDENCY = re.compile(
    r"<dependency>\s*<groupId>([^<]*)</groupId>\s*<artifactId>([^<]*)</artifactId>"
    r"(?:\s*<version>([^<]*)</version>)?",
    re.DOTALL,
)
GRADLE_DEPENDENCY = re.compile(
    r"""(?:implementation|api|compileOnly|runtimeOnly|testImplementation)\s*\(?\s*["']([^"':]+):([^"':]+)(?::([^"']*))?["']"""
)
CARGO_SECTIONS = re.compile(r"\[(?:dev-|build-)?dependencies\](.*?)(?=\n\[|$)", re.DOTALL)
CARGO_SIMPLE = re.compile(r'^([\w-]+)\s*=\s*"([^"]*)"')
CARGO_TABLE = re.compile(r'^([\w-]+)\s*=\s*\{[^}]*version\s*=\s*"([^"]*)"')
GEM_LINE = re.compile(r"""^\s*gem\s+['"]([^'"]+)['"](?:\s*,\s*['"]([^'"]*)['"]\s*)?""", re.MULTILINE)


def _package(name: str, version: str | None, path: str, via: str) -> PackageDetection:
    return PackageDetection(name=name, version=version or None, source=path, via=via)


def _python_package(name: str, version: str | None, path: str, via: str) -> PackageDetection:
    return _package(name.lower(), (version or "").strip() or None, path, via)


# --- Python ---


def is_requirements_file(path: str) -> bool:
    return basename(path) == "requirements.txt" or bool(REQUIREMENTS_DIR_FILE.search(path))


def detect_requirements_txt(path: str, content: str) -> list[PackageDetection]:
    """
    Parse pip requirement lines.

    Comments and option lines (``-r``, ``--index-url``...) are skipped,
    extras are dropped and names are lower-cased; anything after the name
    is kept verbatim as the version specifier.
    """
    if not is_requirements_file(path):
        return []
    results = []
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", "-")):
            continue
        match = REQUIREMENT_LINE.match(line)
        if match:
            results.append(_python_package(match.group(1), match.group(2), path, "requirements"))
    return results


def _key_value_package(line: str, path: str, via: str) -> PackageDetection | None:
    match = TOML_KEY_VALUE.match(line)
    if not match or match.group(1) == "python":
        return None
    version = match.group(2) if match.group(2) is not None else match.group(3)
    return _python_package(match.group(1), version, path, via)


def _quoted_packages(text: str, path: str, via: str) -> list[PackageDetection]:
    return [
        _python_package(m.group(1), m.group(2), path, via)
        for m in QUOTED_REQUIREMENT.finditer(text)
    ]


def _array_packages(content: str, opener: re.Match | None, path: str, via: str) -> list[PackageDetection]:
    """Quoted requirements in the list whose opening bracket ``opener`` just matched."""
    if not opener:
        return []
    body = ARRAY_BODY.match(content, opener.end())
    if not body:
        return []
    return _quoted_packages(body.group(1), path, via)


def detect_pyproject_toml(path: str, content: str) -> list[PackageDetection]:
    """
    PEP 621 ``[project] dependencies``, Poetry tables and optional/dev dependency tables.

    A package declared in more than one table is reported once, from the
    first table that names it.
    """
    if basename(path) != "pyproject.toml":
        return []
    results = _array_packages(content, PEP621_DEPENDENCIES.search(content), path, "pyproject")

    poetry = POETRY_DEPENDENCIES.search(content)
    if poetry:
        for line in poetry.group(1).split("\n"):
            pkg = _key_value_package(line, path, "poetry")
            if pkg:
                results.append(pkg)

    for section in POETRY_GROUP_TABLES.finditer(content):
        for line in section.group(1).split("\n"):
            pkg = _key_value_package(line, path, "poetry-dev")
            if pkg:
                results.append(pkg)

    for section in OPTIONAL_DEPENDENCY_TABLES.finditer(content):
        results.extend(_quoted_packages(section.group(1), path, "pyproject-optional"))

    seen = set()
    unique = []
    for pkg in results:
        if pkg.name not in seen:
            seen.add(pkg.name)
            unique.append(pkg)
    return unique


def detect_pipfile(path: str, content: str) -> list[PackageDetection]:
    """``[packages]`` and ``[dev-packages]``; a ``"*"`` version means unpinned."""
    if basename(path) != "Pipfile":
        return []
    results = []
    for section in PIPFILE_SECTIONS.finditer(content):
        for line in section.group(1).split("\n"):
            match = TOML_KEY_VALUE.match(line)
            if not match:
                continue
            raw = match.group(2) if match.group(2) is not None else match.group(3)
            version = None if raw is None or raw.strip() == "*" else raw
            results.append(_python_package(match.group(1), version, path, "pipfile"))
    return results


def detect_setup_py(path: str, content: str) -> list[PackageDetection]:
    if basename(path) != "setup.py":
        return []
    return _array_packages(content, SETUP_PY_INSTALL_REQUIRES.search(content), path, "setup.py")


def detect_setup_cfg(path: str, content: str) -> list[PackageDetection]:
    """``install_requires`` in ``[options]``, including indented continuation lines."""
    if basename(path) != "setup.cfg":
        return []
    options = SETUP_CFG_OPTIONS.search(content)
    if not options:
        return []
    install_requires = SETUP_CFG_INSTALL_REQUIRES.search(options.group(1))
    if not install_requires:
        return []
    results = []
    for line in install_requires.group(1).split("\n"):
        match = SETUP_CFG_REQUIREMENT.match(line.strip())
        if match:
            results.append(_python_package(match.group(1), match.group(2), path, "setup.cfg"))
    return results


# --- Node ---


def is_cloud_sdk_package(name: str) -> bool:
    return name.startswith(CLOUD_SDK_PREFIXES)


def detect_package_json(path: str, content: str) -> list[PackageDetection]:
    """npm ``dependencies`` and ``devDependencies``, minus cloud SDKs (reported as cloud services)."""
    if basename(path) != "package.json":
        return []
    manifest = load_json_object(path, content)
    if manifest is None:
        return []
    results = []
    for section in NPM_DEPENDENCY_SECTIONS:
        table = manifest.get(section)
        if not isinstance(table, dict):
            continue
        for name, version in table.items():
            if not is_cloud_sdk_package(name):
                results.append(_package(name, version_string(version), path, "package.json"))
    return results


# --- Go ---


def detect_go_mod(path: str, content: str) -> list[PackageDetection]:
    """``require ( ... )`` blocks and single-line ``require`` directives."""
    if basename(path) != "go.mod":
        return []
    results = []
    for block in GO_REQUIRE_BLOCK.finditer(content):
        for line in GO_REQUIRE_BLOCK_LINE.finditer(block.group(1)):
            if not line.group(1).startswith("//"):
                results.append(_package(line.group(1), line.group(2), path, "go.mod"))
    for single in GO_REQUIRE_SINGLE.finditer(content):
        results.append(_package(single.group(1), single.group(2), path, "go.mod"))
    return results


# --- Java ---


def detect_maven_pom(path: str, content: str) -> list[PackageDetection]:
    if basename(path) != "pom.xml":
        return []
    return [
        _package(f"{m.group(1)}:{m.group(2)}", m.group(3), path, "maven")
        for m in MAVEN_DEPENDENCY.finditer(content)
    ]


def detect_gradle(path: str, content: str) -> list[PackageDetection]:
    """String-notation coordinates: ``implementation 'group:artifact:version'``."""
    if basename(path) not in ("build.gradle", "build.gradle.kts"):
        return []
    return [
        _package(f"{m.group(1)}:{m.group(2)}", m.group(3), path, "gradle")
        for m in GRADLE_DEPENDENCY.finditer(content)
    ]


# --- PHP ---


def detect_composer_json(path: str, content: str) -> list[PackageDetection]:
    """``require`` and ``require-dev``, excluding the PHP runtime and ``ext-*`` extensions."""
    if basename(path) != "composer.json":
        return []
    manifest = load_json_object(path, content)
    if manifest is None:
        return []
    results = []
    for section in COMPOSER_DEPENDENCY_SECTIONS:
        table = manifest.get(section)
        if not isinstance(table, dict):
            continue
        for name, version in table.items():
            if name != "php" and not name.startswith("ext-"):
                results.append(_package(name, version_string(version), path, "composer"))
    return results


# --- Rust ---


def detect_cargo_toml(path: str, content: str) -> list[PackageDetection]:
    if basename(path) != "Cargo.toml":
        return []
    results = []
    for section in CARGO_SECTIONS.finditer(content):
        for line in section.group(1).split("\n"):
            match = CARGO_SIMPLE.match(line) or CARGO_TABLE.match(line)
            if match:
                results.append(_package(match.group(1), match.group(2), path, "cargo"))
    return results


# --- Ruby ---


def detect_gemfile(path: str, content: str) -> list[PackageDetection]:
    if basename(path) != "Gemfile":
        return []
    return [_package(m.group(1), m.group(2), path, "gemfile") for m in GEM_LINE.finditer(content)]


PACKAGE_DETECTORS = {
    "python": [
        detect_requirements_txt,
        detect_pyproject_toml,
        detect_pipfile,
        detect_setup_py,
        detect_setup_cfg,
    ],
    "node": [detect_package_json],
    "go": [detect_go_mod],
    "java": [detect_maven_pom, detect_gradle],
    "php": [detect_composer_json],
    "rust": [detect_cargo_toml],
    "ruby": [detect_gemfile],
}
