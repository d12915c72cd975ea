"""
Tests for prefix matching modes.
"""

from compline.completion.matching import MatchMode, fuzzy_match, make_matcher, prefix_match


class TestPrefixMatch:
    """Test each match mode."""

    def test_case_sensitive(self):
        assert prefix_match("foo", "fo")
        assert not prefix_match("Foo", "fo")
        assert not prefix_match("Foo", "fo", MatchMode.CASE)

    def test_ignore_case(self):
        assert prefix_match("Foo", "fo", MatchMode.IGNORE_CASE)
        assert prefix_match("foo", "FO", MatchMode.IGNORE_CASE)

    def test_smart_case(self):
        assert prefix_match("Foo", "fo", MatchMode.SMART_CASE)
        assert prefix_match("Foo", "Fo", MatchMode.SMART_CASE)
        assert not prefix_match("foo", "Fo", MatchMode.SMART_CASE)

    def test_fuzzy(self):
        assert prefix_match("foobar", "fbr", MatchMode.FUZZY)
        assert prefix_match("FooBar", "fb", MatchMode.FUZZY)
        assert not prefix_match("foobar", "bf", MatchMode.FUZZY)
        assert fuzzy_match("abc", "")

    def test_empty_prefix_matches_everything(self):
        for mode in MatchMode:
            assert prefix_match("anything", "", mode)

    def test_not_a_prefix(self):
        assert not prefix_match("bar", "ar", MatchMode.IGNORE_CASE)


class TestMakeMatcher:
    """Test binding a mode into a predicate."""

    def test_bound_mode(self):
        match = make_matcher(MatchMode.IGNORE_CASE)
        assert match("FooBar", "foo")
        assert not match("Bar", "foo")

    def test_mode_from_string(self):
        match = make_matcher("smartcase")
        assert match("Foo", "fo")
