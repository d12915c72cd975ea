"""
Tests for word boundary computation and reconciliation.
"""

from compline.completion.boundary import adjust_start_col, reconcile, word_boundary
from compline.lsp.protocol import CompletionItem

from conftest import edit_item


def items(*raw):
    return [CompletionItem.from_dict(item) for item in raw]


class TestWordBoundary:
    """Test the locally computed boundary."""

    def test_keyword_run(self):
        assert word_boundary("local foo") == 6

    def test_stops_at_punctuation(self):
        assert word_boundary("require('plenary.asy") == 17

    def test_empty_and_trailing_space(self):
        assert word_boundary("") == 0
        assert word_boundary("abc ") == 4


class TestAdjustStartCol:
    """Test the provider boundary from edit ranges."""

    def test_agreeing_edits(self):
        line = "require('plenary.asy"
        result = items(edit_item("plenary.async", 9, 20), edit_item("plenary.busted", 9, 20))
        assert adjust_start_col(0, line, result, "utf-16") == 9

    def test_disagreeing_edits_fall_back(self):
        result = items(edit_item("a", 3, 6), edit_item("b", 5, 6))
        assert adjust_start_col(0, "foo.bar", result, "utf-16") is None

    def test_edits_on_other_lines_are_ignored(self):
        result = items(edit_item("a", 2, 4, line=3), {"label": "b"})
        assert adjust_start_col(0, "foo.bar", result, "utf-16") is None

    def test_insert_replace_edits_are_ignored(self):
        item = CompletionItem.from_dict(
            {
                "label": "foo",
                "textEdit": {
                    "insert": {"start": {"line": 0, "character": 1}, "end": {"line": 0, "character": 3}},
                    "replace": {"start": {"line": 0, "character": 1}, "end": {"line": 0, "character": 4}},
                    "newText": "foo",
                },
            }
        )
        assert adjust_start_col(0, "xfoo", [item], "utf-16") is None

    def test_utf16_offsets_are_converted(self):
        # The emoji takes two utf-16 code units
        line = "\U0001F600 ab"
        result = items(edit_item("abc", 3, 5))
        assert adjust_start_col(0, line, result, "utf-16") == 2
        assert adjust_start_col(0, line, result, "utf-32") == 3


class TestReconcile:
    """Test boundary reconciliation across responses."""

    line = "require('plenary.asy"

    def test_first_response_sets_boundary(self):
        assert reconcile(17, None, self.line, 0, items(edit_item("x", 9, 20)), None) == 9

    def test_first_response_without_edits(self):
        assert reconcile(17, None, self.line, 0, items({"label": "x"}), None) is None

    def test_agreeing_response_keeps_boundary(self):
        assert reconcile(17, 9, self.line, 0, items(edit_item("x", 9, 20)), None) == 9

    def test_conflicting_response_uses_local_boundary(self):
        assert reconcile(17, 9, self.line, 0, items(edit_item("x", 5, 20)), None) == 17

    def test_response_without_edits_keeps_boundary(self):
        assert reconcile(17, 9, self.line, 0, [], None) == 9
