"""
File selector constants.

Pattern tiers are matched against the full repository-relative path.
"""

import re

# Medium-priority files beyond this count are dropped (tree order wins)
DEFAULT_MEDIUM_CAP = 30

# High priority: manifests, framework configs, root entry points,
# schema/migrations, documentation, container and CI files. Never capped.
HIGH_PRIORITY_PATTERNS: list[re.Pattern[str]] = [
    # Build/package manifests (any depth, monorepo packages included)
    re.compile(
        r"(^|/)(package\.json|composer\.json|requirements\.txt|pyproject\.toml"
        r"|Gemfile|pom\.xml|build\.gradle|Cargo\.toml|go\.mod)$"
    ),
    # Framework configs
    re.compile(r"(^|/)(next|nuxt|vue|webpack|vite)\.config\.[^/]+$"),
    re.compile(r"(^|/)(angular|tsconfig)\.json$"),
    # Canonical entry points, repository root only
    re.compile(r"^(app|main|index|server)\.(js|ts|py|rb|go|php)$"),
    # Schema and migrations
    re.compile(r"(^|/)schema\.(js|ts|py|rb|sql)$"),
    re.compile(r"(^|/)models?/"),
    re.compile(r"(^|/)migrations?/"),
    re.compile(r"\.prisma$"),
    # Documentation
    re.compile(r"(^|/)(readme|contributing|changelog)\.[^/]+$", re.IGNORECASE),
    re.compile(r"(^|/)licen[cs]e([.\-_][^/]*)?$", re.IGNORECASE),
    # Containers
    re.compile(r"(^|/)Dockerfile$"),
    re.compile(r"(^|/)docker-compose[^/]*$"),
    # CI
    re.compile(r"^\.github/workflows/"),
    re.compile(r"(^|/)\.gitlab-ci[^/]*$"),
    re.compile(r"(^|/)Jenkinsfile$"),
]

# Path segments that mark dependency caches, VCS metadata and build output
NOISE_DIRECTORIES: frozenset[str] = frozenset({"node_modules", ".git", "vendor", "build", "dist"})
