"""Static vocabularies for the search endpoints and prompts."""

AVAILABLE_LANGUAGES: list[str] = ["TypeScript", "JavaScript", "Python", "Go", "Rust", "Java"]
AVAILABLE_FRAMEWORKS: list[str] = ["Next.js", "NestJS", "React", "Express", "FastAPI", "Django"]
COMPLEXITY_LEVELS: list[str] = ["low", "medium", "high"]

SEARCH_SUGGESTIONS: list[str] = [
    "authentication implementation",
    "API endpoints",
    "database operations",
    "React components",
    "Next.js configuration",
    "TypeScript interfaces",
    "error handling",
    "validation schemas",
    "middleware functions",
    "testing setup",
]

CASUAL_FALLBACK_REPLY = (
    "Hi! I search your analyzed repositories for code. Ask me something like "
    "'where is authentication handled?' or 'show me the API endpoints'."
)
HELP_FALLBACK_REPLY = (
    "Describe the code you are looking for in plain language, for example "
    "'JWT token validation' or 'database migrations'. You can narrow a search "
    "by repository, language, framework or complexity. Repositories must be "
    "analyzed before they can be searched."
)
