"""
CLI commands for compline.

Main entry point: `compline repl` to try completion interactively, or
`compline config` to inspect the effective settings.
"""

import asyncio
import string
from pathlib import Path
from typing import List, Optional

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.filters import has_completions
from prompt_toolkit.key_binding import KeyBindings
from rich.console import Console
from rich.table import Table

from compline import __version__
from compline.completion.engine import CompletionEngine
from compline.config import MATCH_MODES, CompletionConfig, load_config
from compline.host.prompt_surface import CandidateCompletion, PromptToolkitSurface
from compline.providers.words import WordProvider

console = Console()


@click.group()
@click.version_option(__version__, prog_name="compline")
@click.option(
    "--env-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Read settings from this .env file (default: search from cwd)",
)
@click.pass_context
def main(ctx, env_file: Optional[str]):
    """
    compline - LSP completion orchestration

    Usage:
        compline config                        # Show effective settings
        compline repl --words /usr/share/dict/words
    """
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(env_file)
    except ValueError as e:
        raise click.BadParameter(str(e))


@main.command()
@click.pass_context
def config(ctx):
    """Show the effective configuration."""
    settings: CompletionConfig = ctx.obj["config"]

    table = Table(title="compline settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in vars(settings).items():
        table.add_row(name, str(value))
    console.print(table)


@main.command()
@click.option(
    "--words",
    "words_file",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Vocabulary file, one word per line (default: Python keywords and builtins)",
)
@click.option(
    "--match-mode",
    default=None,
    type=click.Choice(MATCH_MODES),
    help="Override COMPLINE_MATCH_MODE",
)
@click.option(
    "--max-items",
    default=50,
    type=int,
    help="Items per response before results are marked incomplete",
)
@click.pass_context
def repl(ctx, words_file: Optional[str], match_mode: Optional[str], max_items: int):
    """Type with live completion from a word list (Ctrl-D to quit)."""
    settings: CompletionConfig = ctx.obj["config"]
    if match_mode:
        settings.match_mode = match_mode

    words = _load_words(words_file)
    console.print(f"[dim]{len(words)} words loaded. Tab accepts, Ctrl-Space completes, Ctrl-D quits.[/dim]")
    asyncio.run(_run_repl(settings, words, max_items))


def _load_words(words_file: Optional[str]) -> List[str]:
    if words_file:
        return Path(words_file).read_text(encoding="utf-8", errors="replace").split()

    import builtins
    import keyword

    return list(keyword.kwlist) + [name for name in dir(builtins) if not name.startswith("_")]


async def _run_repl(settings: CompletionConfig, words: List[str], max_items: int):
    engine = CompletionEngine(config=settings)
    kb = KeyBindings()
    session = PromptSession(key_bindings=kb, complete_while_typing=False)
    surface = PromptToolkitSurface(session.default_buffer, surface_id="repl", engine=engine)

    provider = WordProvider(
        words,
        surface,
        max_items=max_items,
        trigger_characters=list(string.ascii_letters + "_"),
    )
    engine.enable(provider, surface, autotrigger=True)

    @kb.add("c-space")
    def _(event):
        """Request completion at the cursor."""
        engine.invoke(surface.surface_id)

    @kb.add("tab", filter=has_completions)
    def _(event):
        """Accept the selected (or first) candidate."""
        state = event.current_buffer.complete_state
        completion = state.current_completion or state.completions[0]
        if isinstance(completion, CandidateCompletion):
            surface.apply_candidate(completion.candidate)

    @kb.add("c-g")
    def _(event):
        """Close the popup without accepting."""
        surface.dismiss_popup()

    while True:
        surface.enter_insert()
        try:
            text = await session.prompt_async("> ")
        except KeyboardInterrupt:
            surface.leave_insert()
            continue
        except EOFError:
            break
        surface.leave_insert()
        console.print(f"[green]{text}[/green]")

    engine.detach(surface.surface_id)


if __name__ == "__main__":
    main()
