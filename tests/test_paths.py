"""
Tests for name validation and separator-aware path helpers.
"""
import re

import pytest

from mongotree.core.errors import InvalidCharacterError
from mongotree.tree.paths import (
    is_under,
    join,
    prefix_pattern,
    replace_prefix,
    split,
    validate_name,
)

FORBIDDEN = ["\\", "/", "$", "%", "?", "@", '"', "'", "!", ">", "<", "*",
             "&", "{", "}", "#", "=", "`", "|", ":", "+", " ", "\t", "\n"]


class TestValidateName:

    @pytest.mark.parametrize("name", ["subfolder-test", "report_v2.txt", "data.tar.gz", "ünïcödé", "(draft)"])
    def test_accepts_valid_names(self, name):
        validate_name(name)

    @pytest.mark.parametrize("char", FORBIDDEN)
    def test_rejects_each_forbidden_character(self, char):
        with pytest.raises(InvalidCharacterError) as exc:
            validate_name(f"a{char}b")
        assert exc.value.character == char

    def test_message_names_character_and_kind(self):
        with pytest.raises(InvalidCharacterError) as exc:
            validate_name("subfolder-test ")
        assert str(exc.value) == 'Character " " cannot be used as part of a folder name'

        with pytest.raises(InvalidCharacterError) as exc:
            validate_name("test/txt", kind="file")
        assert str(exc.value) == 'Character "/" cannot be used as part of a file name'

    @pytest.mark.parametrize("name,first", [
        ("a:b/c", ":"),
        ("x+y$z", "+"),
        ("back\\slash/", "\\"),
        ("tab\tand space ", "\t"),
    ])
    def test_reports_leftmost_offender(self, name, first):
        with pytest.raises(InvalidCharacterError) as exc:
            validate_name(name)
        assert exc.value.character == first


class TestPathHelpers:

    def test_join_and_split(self):
        assert join("root/a", "b") == "root/a/b"
        assert split("root/a/b") == ("root/a", "b")
        assert split("root") == ("", "root")

    @pytest.mark.parametrize("path,prefix,expected", [
        ("a/b", "a/b", True),
        ("a/b/c", "a/b", True),
        ("a/b/c/d", "a/b", True),
        ("a/b2", "a/b", False),
        ("a/b-other/c", "a/b", False),
        ("a", "a/b", False),
        ("folder-test-2", "folder-test", False),
    ])
    def test_is_under_is_separator_bounded(self, path, prefix, expected):
        assert is_under(path, prefix) is expected

    def test_replace_prefix_rewrites_leading_segments_only(self):
        assert replace_prefix("a/b/c", "a/b", "a/x") == "a/x/c"
        assert replace_prefix("a/b", "a/b", "a/x") == "a/x"
        # Later occurrences of the old prefix are untouched
        assert replace_prefix("a/b/a/b", "a/b", "z") == "z/a/b"

    def test_replace_prefix_leaves_siblings_alone(self):
        assert replace_prefix("a/b2/c", "a/b", "a/x") == "a/b2/c"
        assert replace_prefix("q/a/b", "a/b", "a/x") == "q/a/b"

    def test_replace_prefix_is_idempotent(self):
        once = replace_prefix("a/b/c", "a/b", "a/x")
        assert replace_prefix(once, "a/b", "a/x") == once

    def test_prefix_pattern(self):
        pattern = prefix_pattern("root/a.b")
        assert re.match(pattern, "root/a.b")
        assert re.match(pattern, "root/a.b/c")
        assert not re.match(pattern, "root/a.b2")
        assert not re.match(pattern, "root/axb")
        assert not re.match(pattern, "x/root/a.b")
