"""
Tests for the word provider and the command line interface.
"""

import asyncio

from click.testing import CliRunner

from compline.cli import _load_words, main
from compline.completion.engine import CompletionEngine
from compline.config import CompletionConfig
from compline.lsp.protocol import CompletionParams, Position, TextDocumentIdentifier
from compline.providers.words import WordProvider

from conftest import FakeSurface, drain


def params(line, character):
    return CompletionParams(
        text_document=TextDocumentIdentifier(uri="untitled:1"), position=Position(line, character)
    )


class TestWordProvider:
    """Test vocabulary completion."""

    def test_prefix_match_with_edit_range(self):
        surface = FakeSurface(["x = Pri"], cursor=(0, 7))
        provider = WordProvider(["print", "private", "open", "print", " "], surface)

        result = asyncio.run(provider.complete(params(0, 7)))

        assert [item.label for item in result.items] == ["print", "private"]
        assert not result.is_incomplete
        edit = result.items[0].text_edit
        assert edit.new_text == "print"
        assert edit.range.start.character == 4
        assert edit.range.end.character == 7

    def test_results_are_capped(self):
        surface = FakeSurface(["a"], cursor=(0, 1))
        provider = WordProvider(["a1", "a2", "a3"], surface, max_items=2)

        result = asyncio.run(provider.complete(params(0, 1)))

        assert len(result.items) == 2
        assert result.is_incomplete

    def test_engine_round_trip(self, scheduler, notifier):
        async def scenario():
            engine = CompletionEngine(
                config=CompletionConfig(), scheduler=scheduler, clock=scheduler.clock, notifier=notifier
            )
            surface = FakeSurface(["import o"], cursor=(0, 8))
            engine.enable(WordProvider(["os", "operator", "sys"], surface), surface)
            engine.invoke(surface.surface_id)
            await drain()
            return surface

        surface = asyncio.run(scenario())
        start_col, candidates = surface.popups[0]
        assert start_col == 7
        assert [c.word for c in candidates] == ["operator", "os"]


class TestCli:
    """Test the click commands."""

    def test_config_command(self, monkeypatch):
        monkeypatch.setenv("COMPLINE_MATCH_MODE", "fuzzy")
        result = CliRunner().invoke(main, ["config"])

        assert result.exit_code == 0
        assert "match_mode" in result.output
        assert "fuzzy" in result.output

    def test_invalid_setting_is_reported(self, monkeypatch):
        monkeypatch.setenv("COMPLINE_MATCH_MODE", "regex")
        result = CliRunner().invoke(main, ["config"])
        assert result.exit_code != 0

    def test_load_words(self, tmp_path):
        words_file = tmp_path / "words.txt"
        words_file.write_text("alpha\nbeta gamma\n")
        assert _load_words(str(words_file)) == ["alpha", "beta", "gamma"]
        assert "print" in _load_words(None)
