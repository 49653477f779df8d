"""
Framework, database, CI/CD and testing tool detectors.

Like the package detectors, every function here takes ``(path, content)``
and returns detections for that one file. Results are collapsed to one
entry per tool name afterwards, keeping the first file in canonical order.
"""

import re
from types import MappingProxyType

from repo_grader.manifests import (
    COMPOSER_DEPENDENCY_SECTIONS,
    NPM_DEPENDENCY_SECTIONS,
    basename,
    dependency_map,
    load_json_object,
    version_string,
)
from repo_grader.package_detectors import PACKAGE_DETECTORS
from repo_grader.schemas import StackDetection

PYTHON_MANIFEST_NAMES = frozenset({"requirements.txt", "pyproject.toml", "Pipfile", "setup.py", "setup.cfg"})
REQUIREMENTS_DIR_FILE = re.compile(r"(?:^|/)requirements/.*\.txt$")
GEM_NAME = re.compile(r"""gem\s+['"]([^'"]+)['"]""")
PYPROJECT_TOOL_TABLE = re.compile(r"^\[tool\.([\w-]+)", re.MULTILINE)

# --- Frameworks ---

JS_FRAMEWORKS = MappingProxyType({
    "react": "React",
    "react-dom": "React",
    "next": "Next.js",
    "vue": "Vue",
    "nuxt": "Nuxt",
    "@angular/core": "Angular",
    "svelte": "Svelte",
    "@sveltejs/kit": "SvelteKit",
    "express": "Express",
    "@nestjs/core": "NestJS",
    "hono": "Hono",
    "@remix-run/node": "Remix",
    "@remix-run/react": "Remix",
    "astro": "Astro",
    "gatsby": "Gatsby",
    "solid-js": "Solid",
    "preact": "Preact",
    "fastify": "Fastify",
    "koa": "Koa",
    "socket.io": "Socket.IO",
    "electron": "Electron",
    "@tanstack/react-query": "TanStack Query",
    "react-router": "React Router",
    "react-router-dom": "React Router",
    "redux": "Redux",
    "@reduxjs/toolkit": "Redux Toolkit",
    "zustand": "Zustand",
    "framer-motion": "Framer Motion",
    "three": "Three.js",
    "@trpc/server": "tRPC",
    "@trpc/client": "tRPC",
    "tailwindcss": "Tailwind CSS",
    "@emotion/react": "Emotion",
    "styled-components": "styled-components",
    "@mui/material": "Material UI",
    "@chakra-ui/react": "Chakra UI",
    "ant-design": "Ant Design",
    "antd": "Ant Design",
})

PY_FRAMEWORKS = MappingProxyType({
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
    "starlette": "Starlette",
    "celery": "Celery",
    "tornado": "Tornado",
    "sanic": "Sanic",
    "aiohttp": "aiohttp",
    "bottle": "Bottle",
    "pyramid": "Pyramid",
    "streamlit": "Streamlit",
    "gradio": "Gradio",
})

RUBY_FRAMEWORKS = MappingProxyType({"rails": "Rails", "sinatra": "Sinatra", "hanami": "Hanami"})

PHP_FRAMEWORKS = MappingProxyType({
    "laravel/framework": "Laravel",
    "symfony/framework-bundle": "Symfony",
    "slim/slim": "Slim",
    "cakephp/cakephp": "CakePHP",
})

JAVA_FRAMEWORKS = MappingProxyType({
    "org.springframework.boot:spring-boot-starter": "Spring Boot",
    "org.springframework.boot:spring-boot-starter-web": "Spring Boot",
    "org.springframework:spring-core": "Spring",
    "io.quarkus:quarkus-core": "Quarkus",
    "io.micronaut:micronaut-core": "Micronaut",
    "io.vertx:vertx-core": "Vert.x",
})

GO_FRAMEWORKS = MappingProxyType({
    "github.com/gin-gonic/gin": "Gin",
    "github.com/labstack/echo": "Echo",
    "github.com/gofiber/fiber": "Fiber",
    "github.com/go-chi/chi": "Chi",
    "github.com/gorilla/mux": "Gorilla Mux",
    "github.com/beego/beego": "Beego",
})

RUST_FRAMEWORKS = MappingProxyType({
    "actix-web": "Actix Web",
    "axum": "Axum",
    "rocket": "Rocket",
    "warp": "Warp",
    "tide": "Tide",
})

# --- Databases ---

JS_DB_PACKAGES = MappingProxyType({
    "pg": "PostgreSQL",
    "pg-pool": "PostgreSQL",
    "mysql2": "MySQL",
    "mysql": "MySQL",
    "mongoose": "MongoDB",
    "mongodb": "MongoDB",
    "redis": "Redis",
    "ioredis": "Redis",
    "prisma": "Prisma",
    "@prisma/client": "Prisma",
    "drizzle-orm": "Drizzle",
    "typeorm": "TypeORM",
    "sequelize": "Sequelize",
    "knex": "Knex",
    "better-sqlite3": "SQLite",
    "sqlite3": "SQLite",
    "mssql": "SQL Server",
    "cassandra-driver": "Cassandra",
    "neo4j": "Neo4j",
    "neo4j-driver": "Neo4j",
    "dynamoose": "DynamoDB",
    "@elastic/elasticsearch": "Elasticsearch",
    "firebase-admin": "Firebase",
})

PY_DB_PACKAGES = MappingProxyType({
    "psycopg2": "PostgreSQL",
    "psycopg2-binary": "PostgreSQL",
    "asyncpg": "PostgreSQL",
    "pymongo": "MongoDB",
    "motor": "MongoDB",
    "sqlalchemy": "SQLAlchemy",
    "redis": "Redis",
    "django-redis": "Redis",
    "databases": "Databases",
    "peewee": "Peewee",
    "tortoise": "Tortoise ORM",
    "tortoise-orm": "Tortoise ORM",
    "pymysql": "MySQL",
    "mysql-connector-python": "MySQL",
    "cassandra": "Cassandra",
    "elasticsearch": "Elasticsearch",
})

RUBY_DB_GEMS = MappingProxyType({
    "pg": "PostgreSQL",
    "mysql2": "MySQL",
    "mongoid": "MongoDB",
    "redis": "Redis",
    "sequel": "Sequel",
    "activerecord": "ActiveRecord",
})

PHP_DB_PACKAGES = MappingProxyType({
    "doctrine/orm": "Doctrine",
    "doctrine/dbal": "Doctrine",
    "predis/predis": "Redis",
    "mongodb/mongodb": "MongoDB",
    "illuminate/database": "Eloquent",
})

# Matched as substrings of Maven/Gradle build files
JAVA_DB_ARTIFACTS = MappingProxyType({
    "postgresql": "PostgreSQL",
    "mysql-connector": "MySQL",
    "hibernate-core": "Hibernate",
    "spring-data-jpa": "Spring Data JPA",
    "spring-data-mongodb": "MongoDB",
    "jedis": "Redis",
    "mongo-java-driver": "MongoDB",
    "elasticsearch-rest-high-level-client": "Elasticsearch",
})

GO_DB_PACKAGES = MappingProxyType({
    "github.com/jackc/pgx": "PostgreSQL",
    "github.com/lib/pq": "PostgreSQL",
    "github.com/go-redis/redis": "Redis",
    "github.com/redis/go-redis": "Redis",
    "gorm.io/gorm": "GORM",
    "go.mongodb.org/mongo-driver": "MongoDB",
    "github.com/go-sql-driver/mysql": "MySQL",
    "github.com/mattn/go-sqlite3": "SQLite",
})

RUST_DB_CRATES = MappingProxyType({
    "diesel": "Diesel",
    "sqlx": "SQLx",
    "tokio-postgres": "PostgreSQL",
    "sea-orm": "SeaORM",
    "mongodb": "MongoDB",
    "redis": "Redis",
})

# --- CI/CD and DevOps (path patterns) ---

CICD_PATH_PATTERNS = [
    (re.compile(pattern), name, category) for pattern, name, category in (
        (r"^\.github/workflows/.*\.ya?ml$", "GitHub Actions", "ci"),
        (r"^\.gitlab-ci\.ya?ml$", "GitLab CI", "ci"),
        (r"^\.circleci/", "CircleCI", "ci"),
        (r"^Jenkinsfile$", "Jenkins", "ci"),
        (r"^\.travis\.yml$", "Travis CI", "ci"),
        (r"^azure-pipelines\.ya?ml$", "Azure Pipelines", "ci"),
        (r"^bitbucket-pipelines\.yml$", "Bitbucket Pipelines", "ci"),
        (r"^\.buildkite/", "Buildkite", "ci"),
        (r"^(.*/)?Dockerfile(\..*)?$", "Docker", "container"),
        (r"^docker-compose\.ya?ml$", "Docker Compose", "container"),
        (r"^compose\.ya?ml$", "Docker Compose", "container"),
        (r"^\.dockerignore$", "Docker", "container"),
        (r"^(kubernetes|k8s)/", "Kubernetes", "orchestration"),
        (r"^Chart\.yaml$", "Helm", "orchestration"),
        (r"^(charts|helm)/.*Chart\.yaml$", "Helm", "orchestration"),
        (r"^skaffold\.yaml$", "Skaffold", "orchestration"),
        (r"^Makefile$", "Make", "build"),
        (r"^Taskfile\.ya?ml$", "Task", "build"),
        (r"^justfile$", "Just", "build"),
        (r"^Earthfile$", "Earthly", "build"),
        (r"^pulumi\.ya?ml$", "Pulumi", "iac"),
        (r"^Pulumi\.\w+\.ya?ml$", "Pulumi", "iac"),
        (r"^serverless\.ya?ml$", "Serverless Framework", "iac"),
        (r"^\.terraform\.lock\.hcl$", "Terraform", "iac"),
        (r"^terragrunt\.hcl$", "Terragrunt", "iac"),
    )
]

# --- Testing and quality tools ---

JS_TESTING_PACKAGES = MappingProxyType({
    "jest": ("Jest", "testing"),
    "vitest": ("Vitest", "testing"),
    "mocha": ("Mocha", "testing"),
    "ava": ("AVA", "testing"),
    "jasmine": ("Jasmine", "testing"),
    "cypress": ("Cypress", "e2e"),
    "playwright": ("Playwright", "e2e"),
    "@playwright/test": ("Playwright", "e2e"),
    "puppeteer": ("Puppeteer", "e2e"),
    "@storybook/react": ("Storybook", "testing"),
    "@storybook/vue3": ("Storybook", "testing"),
    "@storybook/svelte": ("Storybook", "testing"),
    "@testing-library/react": ("Testing Library", "testing"),
    "@testing-library/jest-dom": ("Testing Library", "testing"),
    "eslint": ("ESLint", "linting"),
    "@biomejs/biome": ("Biome", "linting"),
    "prettier": ("Prettier", "formatting"),
    "husky": ("Husky", "linting"),
    "lint-staged": ("lint-staged", "linting"),
    "commitlint": ("commitlint", "linting"),
    "@commitlint/cli": ("commitlint", "linting"),
    "nyc": ("NYC", "coverage"),
    "c8": ("c8", "coverage"),
    "@vitest/coverage-v8": ("Vitest Coverage", "coverage"),
})

PY_TESTING_PACKAGES = MappingProxyType({
    "pytest": ("pytest", "testing"),
    "pytest-cov": ("pytest-cov", "coverage"),
    "tox": ("tox", "testing"),
    "ruff": ("Ruff", "linting"),
    "black": ("Black", "formatting"),
    "mypy": ("mypy", "linting"),
    "flake8": ("flake8", "linting"),
    "pylint": ("pylint", "linting"),
    "bandit": ("Bandit", "linting"),
    "isort": ("isort", "formatting"),
    "coverage": ("Coverage.py", "coverage"),
})

RUBY_TESTING_GEMS = MappingProxyType({
    "rspec": ("RSpec", "testing"),
    "rspec-rails": ("RSpec", "testing"),
    "rubocop": ("RuboCop", "linting"),
    "simplecov": ("SimpleCov", "coverage"),
    "cucumber": ("Cucumber", "e2e"),
    "minitest": ("Minitest", "testing"),
})

JAVA_TESTING_ARTIFACTS = MappingProxyType({
    "junit": ("JUnit", "testing"),
    "junit-jupiter": ("JUnit 5", "testing"),
    "mockito": ("Mockito", "testing"),
    "jacoco": ("JaCoCo", "coverage"),
    "spotbugs": ("SpotBugs", "linting"),
    "checkstyle": ("Checkstyle", "linting"),
})

GO_TESTING_PACKAGES = MappingProxyType({
    "github.com/stretchr/testify": ("Testify", "testing"),
    "github.com/onsi/ginkgo": ("Ginkgo", "testing"),
    "github.com/onsi/gomega": ("Gomega", "testing"),
    "github.com/golangci/golangci-lint": ("golangci-lint", "linting"),
})

TESTING_CONFIG_PATTERNS = [
    (re.compile(pattern), name, category) for pattern, name, category in (
        (r"^\.eslintrc(\.(js|cjs|mjs|json|ya?ml))?$", "ESLint", "linting"),
        (r"^eslint\.config\.(js|cjs|mjs|ts)$", "ESLint", "linting"),
        (r"^\.prettierrc(\.(js|cjs|mjs|json|ya?ml))?$", "Prettier", "formatting"),
        (r"^prettier\.config\.(js|cjs|mjs|ts)$", "Prettier", "formatting"),
        (r"^jest\.config\.(js|cjs|mjs|ts|json)$", "Jest", "testing"),
        (r"^vitest\.config\.(js|cjs|mjs|ts)$", "Vitest", "testing"),
        (r"^playwright\.config\.(js|ts)$", "Playwright", "e2e"),
        (r"^cypress\.config\.(js|ts|cjs|mjs)$", "Cypress", "e2e"),
        (r"^\.storybook/", "Storybook", "testing"),
        (r"^biome\.json$", "Biome", "linting"),
        (r"^\.ruff\.toml$", "Ruff", "linting"),
        (r"^\.flake8$", "flake8", "linting"),
        (r"^\.pylintrc$", "pylint", "linting"),
        (r"^mypy\.ini$", "mypy", "linting"),
        (r"^\.mypy\.ini$", "mypy", "linting"),
        (r"^tox\.ini$", "tox", "testing"),
        (r"^\.rubocop\.yml$", "RuboCop", "linting"),
        (r"^\.husky/", "Husky", "linting"),
        (r"^commitlint\.config\.(js|cjs|mjs|ts)$", "commitlint", "linting"),
        (r"^\.commitlintrc(\.(js|cjs|mjs|json|ya?ml))?$", "commitlint", "linting"),
    )
]

# [tool.<name>] tables in pyproject.toml that configure a known tool
PYPROJECT_TOOL_TABLES = MappingProxyType({
    "pytest": "pytest",
    "ruff": "ruff",
    "black": "black",
    "mypy": "mypy",
    "isort": "isort",
    "coverage": "coverage",
    "pylint": "pylint",
    "bandit": "bandit",
})


# --- Helpers ---


def _is_python_manifest(path: str) -> bool:
    return basename(path) in PYTHON_MANIFEST_NAMES or bool(REQUIREMENTS_DIR_FILE.search(path))


def _python_package_names(path: str, content: str) -> list[str]:
    """Declared Python distribution names, in file order."""
    names: list[str] = []
    for detector in PACKAGE_DETECTORS["python"]:
        names.extend(pkg.name for pkg in detector(path, content))
    return names


def _json_dependencies(path: str, content: str, sections: tuple[str, ...]) -> dict[str, object]:
    manifest = load_json_object(path, content)
    if manifest is None:
        return {}
    return dependency_map(manifest, sections)


def _gem_names(content: str) -> list[str]:
    return [m.group(1) for m in GEM_NAME.finditer(content)]


def _cargo_declares(content: str, crate: str) -> bool:
    return re.search(rf"^{re.escape(crate)}\s*=", content, re.MULTILINE) is not None


def _stack(name: str, path: str, via: str, version=None, category: str | None = None) -> StackDetection:
    return StackDetection(name=name, version=version_string(version), source=path, via=via, category=category)


# --- Framework detectors ---


def detect_js_frameworks(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "package.json":
        return []
    deps = _json_dependencies(path, content, NPM_DEPENDENCY_SECTIONS)
    return [_stack(JS_FRAMEWORKS[dep], path, "package.json", ver) for dep, ver in deps.items() if dep in JS_FRAMEWORKS]


def detect_php_frameworks(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "composer.json":
        return []
    deps = _json_dependencies(path, content, COMPOSER_DEPENDENCY_SECTIONS)
    return [_stack(PHP_FRAMEWORKS[dep], path, "composer.json", ver) for dep, ver in deps.items() if dep in PHP_FRAMEWORKS]


def detect_python_frameworks(path: str, content: str) -> list[StackDetection]:
    if not _is_python_manifest(path):
        return []
    return [_stack(PY_FRAMEWORKS[n], path, "pip") for n in _python_package_names(path, content) if n in PY_FRAMEWORKS]


def detect_ruby_frameworks(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "Gemfile":
        return []
    return [_stack(RUBY_FRAMEWORKS[g], path, "Gemfile") for g in _gem_names(content) if g in RUBY_FRAMEWORKS]


def detect_java_frameworks(path: str, content: str) -> list[StackDetection]:
    """Maven matches on the artifact id, Gradle on the full ``group:artifact`` coordinate."""
    name = basename(path)
    if name == "pom.xml":
        return [
            _stack(framework, path, "Maven")
            for coordinate, framework in JAVA_FRAMEWORKS.items()
            if coordinate.split(":")[1] in content
        ]
    if name in ("build.gradle", "build.gradle.kts"):
        return [
            _stack(framework, path, "Gradle")
            for coordinate, framework in JAVA_FRAMEWORKS.items()
            if coordinate in content
        ]
    return []


def detect_go_frameworks(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "go.mod":
        return []
    return [_stack(name, path, "go.mod") for module, name in GO_FRAMEWORKS.items() if module in content]


def detect_rust_frameworks(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "Cargo.toml":
        return []
    return [_stack(name, path, "Cargo.toml") for crate, name in RUST_FRAMEWORKS.items() if _cargo_declares(content, crate)]


# --- Database detectors ---


def detect_js_databases(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "package.json":
        return []
    deps = _json_dependencies(path, content, NPM_DEPENDENCY_SECTIONS)
    return [_stack(JS_DB_PACKAGES[dep], path, "npm", ver) for dep, ver in deps.items() if dep in JS_DB_PACKAGES]


def detect_python_databases(path: str, content: str) -> list[StackDetection]:
    if not _is_python_manifest(path):
        return []
    return [_stack(PY_DB_PACKAGES[n], path, "pip") for n in _python_package_names(path, content) if n in PY_DB_PACKAGES]


def detect_ruby_databases(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "Gemfile":
        return []
    return [_stack(RUBY_DB_GEMS[g], path, "Gemfile") for g in _gem_names(content) if g in RUBY_DB_GEMS]


def detect_php_databases(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "composer.json":
        return []
    deps = _json_dependencies(path, content, COMPOSER_DEPENDENCY_SECTIONS)
    return [_stack(PHP_DB_PACKAGES[dep], path, "composer", ver) for dep, ver in deps.items() if dep in PHP_DB_PACKAGES]


def detect_java_databases(path: str, content: str) -> list[StackDetection]:
    name = basename(path)
    if name not in ("pom.xml", "build.gradle", "build.gradle.kts"):
        return []
    via = "Maven" if name == "pom.xml" else "Gradle"
    return [_stack(db, path, via) for artifact, db in JAVA_DB_ARTIFACTS.items() if artifact in content]


def detect_go_databases(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "go.mod":
        return []
    return [_stack(db, path, "go.mod") for module, db in GO_DB_PACKAGES.items() if module in content]


def detect_rust_databases(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "Cargo.toml":
        return []
    return [_stack(db, path, "Cargo.toml") for crate, db in RUST_DB_CRATES.items() if _cargo_declares(content, crate)]


# --- CI/CD detector ---


def detect_cicd_tools(path: str, content: str) -> list[StackDetection]:
    """Recognize CI, container, orchestration, build and IaC tooling from the file path alone."""
    return [
        _stack(name, path, "path", category=category)
        for pattern, name, category in CICD_PATH_PATTERNS
        if pattern.search(path)
    ]


# --- Testing detectors ---


def detect_testing_configs(path: str, content: str) -> list[StackDetection]:
    name = basename(path)
    return [
        _stack(tool, path, "config", category=category)
        for pattern, tool, category in TESTING_CONFIG_PATTERNS
        if pattern.search(path) or pattern.search(name)
    ]


def detect_js_testing(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "package.json":
        return []
    deps = _json_dependencies(path, content, NPM_DEPENDENCY_SECTIONS)
    return [
        _stack(JS_TESTING_PACKAGES[dep][0], path, "npm", category=JS_TESTING_PACKAGES[dep][1])
        for dep in deps
        if dep in JS_TESTING_PACKAGES
    ]


def detect_python_testing(path: str, content: str) -> list[StackDetection]:
    """Declared test/lint packages, plus ``[tool.*]`` tables in pyproject.toml."""
    if not _is_python_manifest(path):
        return []
    names = _python_package_names(path, content)
    if basename(path) == "pyproject.toml":
        names.extend(
            PYPROJECT_TOOL_TABLES[m.group(1)]
            for m in PYPROJECT_TOOL_TABLE.finditer(content)
            if m.group(1) in PYPROJECT_TOOL_TABLES
        )
    return [
        _stack(PY_TESTING_PACKAGES[n][0], path, "pip", category=PY_TESTING_PACKAGES[n][1])
        for n in names
        if n in PY_TESTING_PACKAGES
    ]


def detect_ruby_testing(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "Gemfile":
        return []
    return [
        _stack(RUBY_TESTING_GEMS[g][0], path, "Gemfile", category=RUBY_TESTING_GEMS[g][1])
        for g in _gem_names(content)
        if g in RUBY_TESTING_GEMS
    ]


def detect_java_testing(path: str, content: str) -> list[StackDetection]:
    name = basename(path)
    if name not in ("pom.xml", "build.gradle", "build.gradle.kts"):
        return []
    via = "Maven" if name == "pom.xml" else "Gradle"
    return [
        _stack(tool, path, via, category=category)
        for artifact, (tool, category) in JAVA_TESTING_ARTIFACTS.items()
        if artifact in content
    ]


def detect_go_testing(path: str, content: str) -> list[StackDetection]:
    if basename(path) != "go.mod":
        return []
    return [
        _stack(tool, path, "go.mod", category=category)
        for module, (tool, category) in GO_TESTING_PACKAGES.items()
        if module in content
    ]


FRAMEWORK_DETECTORS = [
    detect_js_frameworks,
    detect_php_frameworks,
    detect_python_frameworks,
    detect_ruby_frameworks,
    detect_java_frameworks,
    detect_go_frameworks,
    detect_rust_frameworks,
]

DATABASE_DETECTORS = [
    detect_js_databases,
    detect_python_databases,
    detect_ruby_databases,
    detect_php_databases,
    detect_java_databases,
    detect_go_databases,
    detect_rust_databases,
]

CICD_DETECTORS = [detect_cicd_tools]

TESTING_DETECTORS = [
    detect_testing_configs,
    detect_js_testing,
    detect_python_testing,
    detect_ruby_testing,
    detect_java_testing,
    detect_go_testing,
]
