"""Tests for framework, database, CI/CD and testing tool detectors."""

import json

from repo_grader.stack_detectors import (
    detect_cicd_tools,
    detect_go_frameworks,
    detect_java_frameworks,
    detect_js_databases,
    detect_js_frameworks,
    detect_js_testing,
    detect_python_databases,
    detect_python_frameworks,
    detect_python_testing,
    detect_ruby_frameworks,
    detect_rust_frameworks,
    detect_testing_configs,
)


def names(results):
    return [d.name for d in results]


class TestFrameworks:
    """Tests for framework detectors."""

    def test_js(self):
        """Test npm framework packages with versions."""
        content = json.dumps({"dependencies": {"react": "^18.2.0", "lodash": "4"}, "devDependencies": {"vite": "5"}})
        results = detect_js_frameworks("package.json", content)
        assert [(d.name, d.version, d.via) for d in results] == [("React", "^18.2.0", "package.json")]

    def test_python_uses_parsed_names(self):
        """Test that substrings of other names do not match."""
        content = "flask-cors==4.0\ndjango>=4\n"
        assert names(detect_python_frameworks("requirements.txt", content)) == ["Django"]

    def test_ruby(self):
        """Test Gemfile frameworks."""
        assert names(detect_ruby_frameworks("Gemfile", "gem 'rails', '~> 7.0'\n")) == ["Rails"]

    def test_java_maven_and_gradle(self):
        """Test Spring Boot in both build systems."""
        pom = "<artifactId>spring-boot-starter-web</artifactId>"
        gradle = "implementation 'org.springframework.boot:spring-boot-starter-web:3.2.0'"
        assert "Spring Boot" in names(detect_java_frameworks("pom.xml", pom))
        assert "Spring Boot" in names(detect_java_frameworks("build.gradle", gradle))

    def test_go(self):
        """Test go.mod module paths."""
        content = "require github.com/gin-gonic/gin v1.9.0\n"
        assert names(detect_go_frameworks("go.mod", content)) == ["Gin"]

    def test_rust_requires_declaration_at_line_start(self):
        """Test crate names only count as declarations."""
        assert names(detect_rust_frameworks("Cargo.toml", '[dependencies]\naxum = "0.7"\n')) == ["Axum"]
        assert detect_rust_frameworks("Cargo.toml", '# uses axum = maybe\n') == []


class TestDatabases:
    """Tests for database detectors."""

    def test_js(self):
        """Test npm database drivers."""
        content = json.dumps({"dependencies": {"pg": "8", "mongoose": "7"}})
        assert sorted(names(detect_js_databases("package.json", content))) == ["MongoDB", "PostgreSQL"]

    def test_python(self):
        """Test Python database packages."""
        assert names(detect_python_databases("requirements.txt", "SQLAlchemy==2.0\n")) == ["SQLAlchemy"]


class TestCicdTools:
    """Tests for path-based CI/CD detection."""

    def test_workflow(self):
        """Test GitHub Actions with category."""
        results = detect_cicd_tools(".github/workflows/ci.yml", "")
        assert [(d.name, d.category, d.via) for d in results] == [("GitHub Actions", "ci", "path")]

    def test_nested_dockerfile(self):
        """Test Dockerfiles below the root."""
        assert names(detect_cicd_tools("services/api/Dockerfile", "")) == ["Docker"]

    def test_unrelated_path(self):
        """Test that ordinary files are ignored."""
        assert detect_cicd_tools("src/main.py", "") == []


class TestTesting:
    """Tests for testing and quality tool detectors."""

    def test_config_files(self):
        """Test config file names."""
        assert names(detect_testing_configs("jest.config.ts", "")) == ["Jest"]
        assert names(detect_testing_configs("packages/ui/.eslintrc.json", "")) == ["ESLint"]

    def test_js_packages(self):
        """Test npm testing packages carry categories."""
        content = json.dumps({"devDependencies": {"vitest": "1", "prettier": "3"}})
        results = detect_js_testing("package.json", content)
        assert [(d.name, d.category) for d in results] == [("Vitest", "testing"), ("Prettier", "formatting")]

    def test_python_packages_and_tool_tables(self):
        """Test pyproject dependencies plus [tool.*] tables."""
        content = (
            '[project]\nname = "x"\ndependencies = ["pytest>=7"]\n\n'
            "[tool.ruff]\nline-length = 100\n\n[tool.mypy]\nstrict = true\n"
        )
        assert names(detect_python_testing("pyproject.toml", content)) == ["pytest", "Ruff", "mypy"]
