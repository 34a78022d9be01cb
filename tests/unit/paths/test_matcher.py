"""Unit tests for the module aware coverage path matcher."""

from pathlib import PurePosixPath

import pytest

from scoregate.config.models import CoverageConfiguration
from scoregate.paths.matcher import (
    CoveragePathMatcher,
    extract_module_root,
    is_bidirectional_suffix_match,
    normalize_path,
)


class TestNormalizePath:
    """Tests for normalize_path."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("src\\main\\Foo.java", "src/main/Foo.java"),
            ("/src/Foo.java/", "src/Foo.java"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize(self, path: str | None, expected: str) -> None:
        assert normalize_path(path) == expected


class TestExtractModuleRoot:
    """Tests for extract_module_root."""

    @pytest.mark.parametrize(
        ("report_file", "expected"),
        [
            ("module-a/target/site/jacoco/jacoco.xml", "module-a"),
            ("repo/module-b/build/reports/jacoco.xml", "module-b"),
            ("app\\bin\\coverage.xml", "app"),
            ("lib/obj/coverage.xml", "lib"),
            ("a/target/x/build/y.xml", "a"),
            ("coverage.xml", None),
            ("/target/jacoco.xml", None),
            (None, None),
        ],
    )
    def test_extract(self, report_file: str | None, expected: str | None) -> None:
        assert extract_module_root(report_file) == expected

    def test_path_object(self) -> None:
        report_file = PurePosixPath("core/target/jacoco.xml")
        assert extract_module_root(report_file) == "core"


class TestBidirectionalSuffixMatch:
    """Tests for is_bidirectional_suffix_match."""

    def test_either_direction(self) -> None:
        assert is_bidirectional_suffix_match("com/x/Foo.java", "src/com/x/Foo.java")
        assert is_bidirectional_suffix_match("src/com/x/Foo.java", "com/x/Foo.java")
        assert is_bidirectional_suffix_match("Foo.java", "Foo.java")

    def test_no_match(self) -> None:
        assert not is_bidirectional_suffix_match("Foo.java", "Bar.java")
        assert not is_bidirectional_suffix_match("", "Foo.java")


class TestCoveragePathMatcher:
    """Tests for CoveragePathMatcher.find_match."""

    def test_exact_with_source_path(self) -> None:
        matcher = CoveragePathMatcher(["src/main/java/com/x/Foo.java"])
        match = matcher.find_match("com/x/Foo.java", "src/main/java")
        assert match == "src/main/java/com/x/Foo.java"

    def test_exact_without_source_path(self) -> None:
        matcher = CoveragePathMatcher(["com/x/Foo.java"])
        assert matcher.find_match("com/x/Foo.java") == "com/x/Foo.java"

    def test_suffix_match_without_module(self) -> None:
        matcher = CoveragePathMatcher(["app/src/main/java/com/x/Foo.java"])
        assert matcher.find_match("com/x/Foo.java") == (
            "app/src/main/java/com/x/Foo.java"
        )

    def test_module_disambiguation(self) -> None:
        """Test that the report location selects the module of a file."""
        matcher = CoveragePathMatcher(
            [
                "module-b/src/main/java/com/x/Foo.java",
                "module-a/src/main/java/com/x/Foo.java",
            ]
        )
        match = matcher.find_match(
            "com/x/Foo.java",
            report_file="module-a/target/site/jacoco/jacoco.xml",
        )
        assert match == "module-a/src/main/java/com/x/Foo.java"

    def test_first_candidate_without_module(self) -> None:
        matcher = CoveragePathMatcher(
            [
                "module-b/src/main/java/com/x/Foo.java",
                "module-a/src/main/java/com/x/Foo.java",
            ]
        )
        assert matcher.find_match("com/x/Foo.java", report_file="jacoco.xml") == (
            "module-b/src/main/java/com/x/Foo.java"
        )

    def test_module_without_candidate(self) -> None:
        matcher = CoveragePathMatcher(["module-b/src/Foo.java"])
        match = matcher.find_match(
            "Foo.java", report_file="module-a/target/jacoco.xml"
        )
        assert match is None

    def test_no_match(self) -> None:
        matcher = CoveragePathMatcher(["src/Bar.java"])
        assert matcher.find_match("com/x/Foo.java") is None

    def test_empty_coverage_path(self) -> None:
        matcher = CoveragePathMatcher(["src/Foo.java"])
        assert matcher.find_match("") is None
        assert matcher.find_match(None) is None

    def test_windows_separators(self) -> None:
        matcher = CoveragePathMatcher(["src/main/java/com/x/Foo.java"])
        assert matcher.find_match("com\\x\\Foo.java") == "src/main/java/com/x/Foo.java"


class TestFindToolMatch:
    """Tests for resolving coverage paths with the source path of a tool."""

    def test_tool_source_path_wins(self) -> None:
        configuration = CoverageConfiguration.model_validate(
            {
                "sourcePath": "src/test/java",
                "tools": [
                    {"id": "jacoco", "metric": "line", "sourcePath": "src/main/java"}
                ],
            }
        )
        matcher = CoveragePathMatcher(
            ["src/test/java/com/x/Foo.java", "src/main/java/com/x/Foo.java"]
        )

        match = matcher.find_tool_match(
            "com/x/Foo.java", configuration, configuration.tools[0]
        )

        assert match == "src/main/java/com/x/Foo.java"

    def test_configuration_source_path(self) -> None:
        configuration = CoverageConfiguration.model_validate(
            {
                "sourcePath": "lib",
                "tools": [{"id": "cobertura", "metric": "line"}],
            }
        )
        matcher = CoveragePathMatcher(["app/pkg/mod.py", "lib/pkg/mod.py"])

        match = matcher.find_tool_match(
            "pkg/mod.py", configuration, configuration.tools[0]
        )

        assert match == "lib/pkg/mod.py"
