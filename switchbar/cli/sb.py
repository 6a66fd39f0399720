#!/usr/bin/env python3
"""
Developer CLI for the switchbar search core.

Usage:
    sb search SNAPSHOT "query"   - Run the command bar pipeline over a snapshot
    sb tokenize "text"           - Show how text is tokenized
    sb config                    - Print the effective configuration
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import click
import yaml
from rich.console import Console
from rich.table import Table

from switchbar.core.config import SwitchbarConfig
from switchbar.core.errors import SwitchbarError
from switchbar.core.logging_setup import configure_logging
from switchbar.core.models import SourceType, SwitchOption
from switchbar.core.orchestrator import SwitchOptionsPipeline
from switchbar.core.providers import StaticCandidateSource
from switchbar.core.terms import expand_term
from switchbar.core.tokenizer import tokenize as tokenize_text

console = Console()

TYPE_STYLE = {
    SourceType.TAB: "green",
    SourceType.HISTORY: "cyan",
    SourceType.BOOKMARK: "magenta",
    SourceType.COMMAND: "yellow",
}


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path),
              help="YAML configuration file")
@click.option("--log-level", default=None, help="Override configured log level")
@click.pass_context
def cli(ctx, config_path: Optional[Path], log_level: Optional[str]):
    """switchbar - jump to tabs, bookmarks and history."""
    try:
        config = SwitchbarConfig.load(config_path)
    except SwitchbarError as e:
        raise click.ClickException(str(e))
    configure_logging(log_level or config.logging.level, config.logging.file)
    ctx.obj = config


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("query", default="")
@click.option("--limit", "-l", type=int, default=None, help="Max results shown")
@click.option("--no-favicons", is_flag=True, help="Skip favicon download")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_obj
def search(config: SwitchbarConfig, snapshot: Path, query: str, limit: Optional[int],
           no_favicons: bool, as_json: bool):
    """Search a JSON/YAML snapshot of tabs, bookmarks and history."""
    if limit is not None:
        config.pipeline.display_cap = limit
    if no_favicons:
        config.favicons.enabled = False

    try:
        source = StaticCandidateSource.from_file(snapshot, history_config=config.history)
    except (OSError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read snapshot: {e}")

    options = asyncio.run(run_pipeline(source, config, query))

    if as_json:
        click.echo(json.dumps([o.to_dict() for o in options], ensure_ascii=False, indent=2))
    else:
        display_options(query, options)


async def run_pipeline(source: StaticCandidateSource, config: SwitchbarConfig,
                       query: str) -> List[SwitchOption]:
    pipeline = SwitchOptionsPipeline(source, config)
    try:
        return await pipeline.get_results(query)
    finally:
        await pipeline.aclose()


def display_options(query: str, options: List[SwitchOption]):
    """Display options in a table."""
    if not options:
        console.print("[yellow]No results found[/yellow]")
        return

    table = Table(title=f"Results for {query!r}" if query else "All candidates")
    table.add_column("#", style="dim", width=3)
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("URL / Action", style="dim")

    for i, option in enumerate(options, 1):
        style = TYPE_STYLE[option.source_type]
        if option.source_type is SourceType.COMMAND:
            title, target = option.name, option.action_text
        else:
            title, target = option.title, option.url
        table.add_row(str(i), f"[{style}]{option.source_type.value}[/{style}]", title, target)

    console.print(table)


@cli.command()
@click.argument("text")
@click.option("--field", "-f", type=click.Choice(["title", "url"]), default=None,
              help="Tokenize as a document field instead of a query")
@click.option("--expand", is_flag=True, help="Also show n-gram expansions")
def tokenize(text: str, field: Optional[str], expand: bool):
    """Show the tokens produced for TEXT."""
    tokens = tokenize_text(text, field)
    if not tokens:
        console.print("[yellow]No tokens[/yellow]")
        return
    for token in tokens:
        if expand:
            console.print(f"[bold]{token}[/bold]: {', '.join(expand_term(token)[1:])}")
        else:
            console.print(token)


@cli.command(name="config")
@click.pass_obj
def show_config(config: SwitchbarConfig):
    """Print the effective configuration as YAML."""
    click.echo(yaml.safe_dump(config.model_dump(mode='json'), default_flow_style=False))


if __name__ == "__main__":
    cli()
