"""
Configuration file support for Repo Grader.

Supports TOML configuration files (repo-grader.toml) for persistent
settings. Every value has a default, so a missing file is never an error.
The numeric thresholds here are heuristics, not derived quantities.
"""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from repo_grader.errors import ConfigError, ErrorCode, invalid_config

# Default config file names (searched in order)
CONFIG_FILE_NAMES = [
    "repo-grader.toml",
    ".repo-grader.toml",
    "pyproject.toml",  # Will look for [tool.repo-grader] section
]

DEFAULT_SKIP_DIRS = [
    "node_modules", "vendor", "bower_components", "__pycache__", ".git",
    ".next", ".nuxt", ".cache", ".venv", "venv", "env",
]

DEFAULT_CATEGORY_WEIGHTS = {
    "documentation": 0.2,
    "security": 0.1,
    "cicd": 0.15,
    "dependencies": 0.15,
    "codeQuality": 0.15,
    "license": 0.1,
    "community": 0.1,
    "openssf": 0.1,
}


class SelectorSettings(BaseModel):
    """Candidate file selection bounds."""

    skip_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))
    additional_skip_dirs: list[str] = Field(default_factory=list)
    max_files_per_category: int = Field(default=50, ge=1, le=10_000)
    max_source_files: int = Field(default=200, ge=0, le=10_000)
    max_source_file_bytes: int = Field(default=100_000, ge=1, le=10_000_000)
    max_workflow_files: int = Field(default=5, ge=0, le=100)
    max_issue_templates: int = Field(default=3, ge=0, le=100)
    max_snapshot_file_bytes: int = Field(default=1_000_000, ge=1024, le=100_000_000)

    @property
    def all_skip_dirs(self) -> frozenset[str]:
        """Built-in and user-added directory names to skip."""
        return frozenset(self.skip_dirs) | frozenset(self.additional_skip_dirs)


class AnalysisSettings(BaseModel):
    """Tunable analyzer thresholds."""

    substantial_readme_chars: int = Field(default=500, ge=0)
    min_readme_sections: int = Field(default=3, ge=1)
    substantial_contributing_chars: int = Field(default=200, ge=0)
    max_reasonable_dependencies: int = Field(default=200, ge=1)


class ScoringSettings(BaseModel):
    """Category weights for the overall score."""

    weights: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS))

    @field_validator("weights")
    @classmethod
    def weights_non_negative(cls, v: dict[str, float]) -> dict[str, float]:
        for key, weight in v.items():
            if weight < 0:
                raise ValueError(f"weight for '{key}' must be >= 0, got {weight}")
        return {**DEFAULT_CATEGORY_WEIGHTS, **v}

    def weight_for(self, key: str) -> float:
        return self.weights.get(key, DEFAULT_CATEGORY_WEIGHTS.get(key, 0.0))


class OutputSettings(BaseModel):
    """Output-related configuration."""

    pretty_json: bool = Field(default=True)
    show_signals: bool = Field(default=False)


class RepoGraderConfig(BaseModel):
    """Complete Repo Grader configuration."""

    selector: SelectorSettings = Field(default_factory=SelectorSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    @classmethod
    def default(cls) -> "RepoGraderConfig":
        """Create config with all defaults."""
        return cls()


def _parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML content."""
    return tomllib.loads(content)


def _find_config_file(start_dir: Path | None = None) -> Path | None:
    """
    Find configuration file by searching up from start directory.

    A pyproject.toml only counts when it has a [tool.repo-grader] table.

    Args:
        start_dir: Directory to start search (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if not config_path.is_file():
                continue
            if name == "pyproject.toml" and not _has_tool_section(config_path):
                continue
            return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _has_tool_section(pyproject: Path) -> bool:
    try:
        data = _parse_toml(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return bool(data.get("tool", {}).get("repo-grader"))


def load_config(config_path: Path | None = None, start_dir: Path | None = None) -> RepoGraderConfig:
    """
    Load configuration from file.

    Args:
        config_path: Explicit path to config file (optional)
        start_dir: Where the upward search starts when no path is given

    Returns:
        RepoGraderConfig with loaded settings

    Raises:
        ConfigError: If config file is invalid
    """
    if config_path is None:
        config_path = _find_config_file(start_dir)

    # No config file found - use defaults
    if config_path is None:
        return RepoGraderConfig.default()

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            message=f"Failed to read config file: {e}",
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            config_path=str(config_path),
        ) from e

    try:
        data = _parse_toml(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(
            message=f"Failed to parse config file: {e}",
            code=ErrorCode.CONFIG_INVALID,
            config_path=str(config_path),
        ) from e

    # Handle pyproject.toml (look for [tool.repo-grader] section)
    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("repo-grader", {})
        if not data:
            return RepoGraderConfig.default()

    try:
        return RepoGraderConfig.model_validate(data)
    except ValueError as e:
        raise invalid_config(str(config_path), str(e)) from e


def generate_default_config() -> str:
    """
    Generate default configuration file content.

    Returns:
        TOML string with default configuration
    """
    return '''# Repo Grader Configuration

[selector]
additional_skip_dirs = []          # Added to the built-in skip list
max_files_per_category = 50        # Per manifest/config category
max_source_files = 200             # .py files scanned for SDK calls
max_source_file_bytes = 100_000    # Larger source files are not sampled
max_workflow_files = 5
max_issue_templates = 3
max_snapshot_file_bytes = 1_000_000

[analysis]
substantial_readme_chars = 500
min_readme_sections = 3
substantial_contributing_chars = 200
max_reasonable_dependencies = 200

[scoring.weights]
documentation = 0.2
security = 0.1
cicd = 0.15
dependencies = 0.15
codeQuality = 0.15
license = 0.1
community = 0.1
openssf = 0.1

[output]
pretty_json = true
show_signals = false
'''


def save_default_config(path: Path | None = None) -> Path:
    """
    Save default configuration to file.

    Args:
        path: Path to save config (default: ./repo-grader.toml)

    Returns:
        Path where config was saved
    """
    if path is None:
        path = Path("repo-grader.toml")

    path.write_text(generate_default_config(), encoding="utf-8")
    return path
