"""Anagnorisis command line.

    anagnorisis describe TRACE   print the pattern description and the
                                 subscription it needs
    anagnorisis replay TRACE     replay recorded batches through a
                                 recognizer; exit 1 if nothing matches
"""

from __future__ import annotations

import json

import click

from anagnorisis import __version__
from anagnorisis.config import RecognizerSettings
from anagnorisis.recognizer.recognizer import MutationRecognizer
from anagnorisis.types.core import AttributeHandle
from anagnorisis.types.errors import AnagnorisisError
from anagnorisis.utils.logger import logger
from anagnorisis.utils.serialization import describe_node

from .trace import Trace, TracePlayer, load_trace


def _configure_logging(verbose: bool, settings: RecognizerSettings) -> None:
    logger.remove()
    level = "DEBUG" if verbose or settings.debug else "WARNING"
    # Resolve stderr per message so the sink follows click's stream redirection.
    logger.add(lambda message: click.echo(message, err=True, nl=False), level=level)


def _load(ctx: click.Context, trace_file) -> Trace:
    settings: RecognizerSettings = ctx.obj["settings"]
    try:
        data = json.load(trace_file)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{trace_file.name}: not valid JSON ({e})") from e
    try:
        return load_trace(data, strict=settings.strict_patterns)
    except AnagnorisisError as e:
        raise click.ClickException(e.get_formatted_message()) from e


def _label(result) -> str:
    if isinstance(result, AttributeHandle):
        return f"@{result.name}={result.value!r} on {describe_node(result.owner)}"
    return describe_node(result)


@click.group(invoke_without_command=True)
@click.version_option(__version__, message="Anagnorisis v%(version)s")
@click.option("--verbose", "-v", is_flag=True, help="Log recognizer sessions to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Anagnorisis - Declarative change recognition for document trees."""
    try:
        settings = RecognizerSettings.from_env()
    except AnagnorisisError as e:
        raise click.ClickException(e.get_formatted_message()) from e

    _configure_logging(verbose, settings)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("trace_file", type=click.File("r"))
@click.pass_context
def describe(ctx: click.Context, trace_file) -> None:
    """Show the pattern of TRACE_FILE and the subscription it requires."""
    trace = _load(ctx, trace_file)
    recognizer = MutationRecognizer(
        trace.pattern, TracePlayer(trace.batches), settings=ctx.obj["settings"]
    )
    config = recognizer.subscription_config()

    click.echo(f"Pattern: {recognizer.describe()}")
    click.echo(f"Subscription: {json.dumps(config.to_dict(), sort_keys=True)}")
    if config.is_empty:
        click.echo("Warning: pattern names no criterion and will never match", err=True)


@cli.command()
@click.argument("trace_file", type=click.File("r"))
@click.option("--json", "as_json", is_flag=True, help="Print the outcome as JSON.")
@click.pass_context
def replay(ctx: click.Context, trace_file, as_json: bool) -> None:
    """Replay the batches of TRACE_FILE until the pattern matches."""
    trace = _load(ctx, trace_file)
    player = TracePlayer(trace.batches)
    recognizer = MutationRecognizer(trace.pattern, player, settings=ctx.obj["settings"])

    matches = []
    session = recognizer.observe_until_match(matches.append)
    player.play()

    if matches:
        outcome = {
            "matched": True,
            "batch": player.delivered - 1,
            "result": _label(matches[0]),
            "session": session.session_id,
        }
    else:
        session.cancel()
        outcome = {"matched": False, "batches": player.delivered}

    if as_json:
        click.echo(json.dumps(outcome, sort_keys=True))
    elif matches:
        click.echo(f"Matched {outcome['result']} in batch {outcome['batch']}")
    else:
        click.echo(f"No match in {player.delivered} batches")

    if not matches:
        ctx.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
