"""CLI interface for nestparse."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from nestparse.config import ParserSettings, RulesSettings, Settings, get_settings, set_settings
from nestparse.formatters import build_tree, format_as_json
from nestparse.models.ast import Node
from nestparse.pipeline.driver import parse
from nestparse.rules import NestParseError, RuleParseError, RuleSet, parse_yaml_rules_file

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _configure_settings(rules_file: Path, ruleset: str, max_depth: int | None) -> Settings:
    """Configure global settings from CLI options."""
    current = get_settings()
    settings = Settings(
        parser=ParserSettings(max_depth=max_depth if max_depth is not None else current.parser.max_depth),
        rules=RulesSettings(rules_file=rules_file, ruleset=ruleset),
    )
    set_settings(settings)
    return settings


def _load_rules(settings: Settings) -> RuleSet:
    """Load the configured ruleset, exiting with an error message on failure."""
    rules_file = settings.rules.rules_file
    ruleset = settings.rules.ruleset
    logger.info("Loading ruleset '%s' from %s", ruleset, rules_file)
    try:
        rules = parse_yaml_rules_file(str(rules_file), ruleset)
    except (FileNotFoundError, RuleParseError) as e:
        logger.error("Failed to load rules file: %s", e)
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    logger.info("Loaded %d rule(s)", len(rules))
    return rules


def _write_output(text: str, output_path: Path | None) -> None:
    """Write output text to file or stdout."""
    if output_path:
        output_path.write_text(text)
    else:
        click.echo(text)


def _handle_output(nodes: list[Node], output_format: str, output_path: Path | None, title: str) -> None:
    """Handle formatting and outputting results."""
    if output_format.lower() == "json":
        _write_output(format_as_json(nodes, pretty=True), output_path)
    elif output_path:
        with open(output_path, "w") as f:
            Console(file=f).print(build_tree(nodes, title))
    else:
        console.print(build_tree(nodes, title))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level",
)
@click.pass_context
def main(ctx: click.Context, log_level: str) -> None:
    """Rule-driven parsing of nested text."""
    setup_logging(log_level.upper())
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@main.command("parse")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="YAML rules file",
)
@click.option(
    "--ruleset",
    type=str,
    default="default",
    help="Ruleset to use from the rules file (default: default)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default="console",
    help="Output format (default: console)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file path (default: stdout)",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum nesting depth of matched regions",
)
def parse_command(
    file: Path,
    rules_file: Path,
    ruleset: str,
    output_format: str,
    output: Path | None,
    max_depth: int | None,
) -> None:
    """Parse FILE with a ruleset and print the resulting tree."""
    settings = _configure_settings(rules_file, ruleset, max_depth)
    rules = _load_rules(settings)

    try:
        nodes = parse(file.read_text(), rules, max_depth=settings.parser.max_depth)
    except NestParseError as e:
        logger.error("Failed to parse %s: %s", file, e)
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    logger.info("Parsed %s into %d top-level node(s)", file, len(nodes))
    _handle_output(nodes, output_format, output, str(file))


@main.command("rules")
@click.argument("rules_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--ruleset",
    type=str,
    default="default",
    help="Ruleset to list (default: default)",
)
def rules_command(rules_file: Path, ruleset: str) -> None:
    """List the rules of a ruleset in priority order."""
    settings = _configure_settings(rules_file, ruleset, None)
    rules = _load_rules(settings)

    console.print(f"\n[bold blue]Ruleset: {escape(ruleset)}[/bold blue]\n")
    if not rules:
        console.print("  [dim]No rules - input is kept as literal text[/dim]\n")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Settings")
    for position, rule in enumerate(rules, 1):
        table.add_row(str(position), escape(rule.name), escape(rule.describe()))
    console.print(table)


if __name__ == "__main__":
    main()
