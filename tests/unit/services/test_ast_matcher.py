"""Unit tests for the heuristic AST matcher."""

import uuid

from app.schemas.search import RepositoryRef, SearchPatternSet
from app.services.search.matcher import (
    ASTMatcher,
    FileMatches,
    class_snippet,
    comment_snippet,
    function_snippet,
    import_snippet,
    score_comment,
    score_element,
    score_import,
)

from tests.helpers.mock_factories import make_file_ast


def _patterns(**overrides) -> SearchPatternSet:
    data = {
        "search_terms": [],
        "file_patterns": [],
        "code_patterns": [],
        "framework_hints": [],
    }
    data.update(overrides)
    return SearchPatternSet(**data)


def _fn(name: str, **extra) -> dict:
    return {
        "name": name,
        "params": extra.pop("params", []),
        "return_type": extra.pop("return_type", None),
        "location": extra.pop("location", {"start_line": 1, "end_line": 5}),
        **extra,
    }


class TestScoreElement:
    """Tests for function/class/variable scoring."""

    def test_term_hits_without_name_match(self):
        element = _fn("loginWithGoogle", calls=["next-auth", "session"])
        patterns = _patterns(search_terms=["next-auth", "session"])

        assert score_element(element, "next-auth", patterns) == 60

    def test_query_in_name_adds_fifty(self):
        element = _fn("handleLogin")

        assert score_element(element, "login", _patterns()) == 50

    def test_code_patterns_and_framework_hints(self):
        element = _fn("useSession", decorators=["react"])
        patterns = _patterns(code_patterns=["useSession"], framework_hints=["react"])

        # code pattern +25, framework hint +20
        assert score_element(element, "zzz", patterns) == 45

    def test_clamped_to_one_hundred(self):
        element = _fn("authToken", body="auth token jwt session cookie")
        patterns = _patterns(search_terms=["auth", "token", "jwt", "session", "cookie"])

        assert score_element(element, "auth", patterns) == 100

    def test_adding_a_matching_term_never_lowers_the_score(self):
        element = _fn("fetchUser", body="fetch user profile")
        fewer = _patterns(search_terms=["fetch"])
        more = _patterns(search_terms=["fetch", "profile"])

        assert score_element(element, "q", more) >= score_element(element, "q", fewer)

    def test_no_hits_is_zero(self):
        assert score_element(_fn("render"), "database", _patterns(search_terms=["sql"])) == 0


class TestScoreImportAndComment:
    def test_import_query_and_hint(self):
        element = {"source": "next-auth/react", "names": ["useSession"]}
        patterns = _patterns(framework_hints=["next-auth"])

        assert score_import(element, "next-auth", patterns) == 100

    def test_import_term_only(self):
        element = {"source": "prisma", "names": []}

        assert score_import(element, "orm", _patterns(search_terms=["prisma"])) == 35

    def test_doc_comment_bonus(self):
        element = {"text": "Validates the JWT token", "is_doc": True}

        assert score_comment(element, "jwt", _patterns()) == 50

    def test_plain_comment(self):
        element = {"text": "retry the request", "is_doc": False}

        assert score_comment(element, "zzz", _patterns(search_terms=["retry"])) == 20


class TestSnippets:
    def test_function_snippet(self):
        element = _fn("login", params=["email", "password"], return_type="Promise<User>")

        assert function_snippet(element) == "login(email, password): Promise<User>"

    def test_function_snippet_without_return_type(self):
        assert function_snippet(_fn("run")) == "run()"

    def test_class_snippet(self):
        element = {"name": "AuthService", "extends": "Base", "implements": ["Guard", "Logger"]}

        assert class_snippet(element) == "class AuthService extends Base implements Guard, Logger"

    def test_import_snippet(self):
        assert import_snippet({"source": "react", "names": ["useState"]}) == (
            "import {useState} from 'react'"
        )
        assert import_snippet({"source": "./styles.css", "names": []}) == (
            "import ... from './styles.css'"
        )

    def test_comment_snippet_truncates_long_text(self):
        text = "x" * 150

        assert comment_snippet({"text": text}) == "x" * 100 + "..."
        assert comment_snippet({"text": "short"}) == "short"


class TestASTMatcher:
    """Tests for per-file and per-repository matching."""

    def setup_method(self):
        self.matcher = ASTMatcher()
        self.repo = RepositoryRef(id=uuid.uuid4(), full_name="acme/web", description=None)

    def test_thresholds_are_strict(self):
        file_ast = make_file_ast(
            functions=[_fn("a", body="auth")],  # 30 > 20
            variables=[{"name": "b", "kind": "const", "value": "x"}],  # 0
        )
        patterns = _patterns(search_terms=["auth"])

        matches = self.matcher.match_file(file_ast, "zzz", patterns)

        assert [m.name for m in matches] == ["a"]

    def test_variable_needs_more_than_twenty_five(self):
        file_ast = make_file_ast(
            variables=[{"name": "cfg", "kind": "const", "value": "next"}],
        )

        # framework hint +20 is not enough for a variable
        assert self.matcher.match_file(file_ast, "zzz", _patterns(framework_hints=["next"])) == []

    def test_interface_kind_produces_interface_match(self):
        file_ast = make_file_ast(
            classes=[{"name": "UserRepo", "kind": "interface", "location": {"start_line": 3, "end_line": 9}}],
        )

        matches = self.matcher.match_file(file_ast, "userrepo", _patterns())

        assert matches[0].type == "interface"
        assert matches[0].line_start == 3
        assert matches[0].line_end == 9

    def test_matches_sorted_by_score(self):
        file_ast = make_file_ast(
            functions=[_fn("helper", body="auth"), _fn("authenticate", body="auth")],
        )

        matches = self.matcher.match_file(file_ast, "auth", _patterns(search_terms=["auth"]))

        assert [m.name for m in matches] == ["authenticate", "helper"]

    def test_match_repository_skips_files_without_matches(self):
        ast_data = {
            "files": [
                make_file_ast("src/auth.ts", functions=[_fn("login")]),
                make_file_ast("src/ui.ts", functions=[_fn("render")]),
            ]
        }

        results = self.matcher.match_repository(self.repo, ast_data, "login", _patterns())

        assert len(results) == 1
        assert isinstance(results[0], FileMatches)
        assert results[0].file.path == "src/auth.ts"
        assert results[0].repository.full_name == "acme/web"

    def test_empty_ast_data(self):
        assert self.matcher.match_repository(self.repo, {}, "q", _patterns()) == []


class TestFileMatchesAverage:
    def test_average_of_match_scores(self):
        from app.schemas.search import FileRef, Match

        matches = [
            Match(type="function", name=str(s), snippet="", score=s, explanation="")
            for s in (40, 60, 80)
        ]
        result = FileMatches(
            repository=RepositoryRef(id=uuid.uuid4(), full_name="a/b"),
            file=FileRef(path="x.ts", language="typescript"),
            matches=matches,
        )

        assert result.average_score == 60

    def test_average_without_matches(self):
        from app.schemas.search import FileRef

        result = FileMatches(
            repository=RepositoryRef(id=uuid.uuid4(), full_name="a/b"),
            file=FileRef(path="x.ts", language="typescript"),
        )

        assert result.average_score == 0
