from __future__ import annotations

from pathlib import Path

import click
from lxml import etree

from . import __version__, api
from .diagnostics import LoggingObserver, build_logger, format_chain
from .errors import QuerySyntaxError
from .lxml_backend import LxmlTree
from .models import ElementReport
from .settings import CONFIG_PATH, SynthesisSettings, load_settings, save_settings, settings_payload


def _load_tree(html_file: Path) -> LxmlTree:
    try:
        return LxmlTree.from_file(html_file)
    except (OSError, etree.ParserError) as exc:
        raise click.ClickException(f"Could not read {html_file}: {exc}") from exc


def _locate(tree: LxmlTree, xpath: str) -> ElementReport:
    try:
        report = tree.locate(xpath)
    except QuerySyntaxError as exc:
        raise click.ClickException(str(exc)) from exc
    if report is None:
        raise click.ClickException(f"No element matches {xpath}")
    return report


@click.group()
@click.version_option(version=__version__, prog_name="xpathfinder")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Settings file (default: {CONFIG_PATH}).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Synthesize and verify unique XPath selectors for HTML documents."""
    ctx.obj = load_settings(config_path)
    ctx.meta["config_path"] = config_path or CONFIG_PATH


@cli.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("xpath")
@click.option("--best-effort", is_flag=True, help="Single-pass heuristic without verification.")
@click.option("--verbose", is_flag=True, help="Print the ancestor chain and every checked candidate.")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write synthesis diagnostics to xpathfinder.log in this folder.",
)
@click.pass_obj
def synthesize(
    settings: SynthesisSettings,
    html_file: Path,
    xpath: str,
    best_effort: bool,
    verbose: bool,
    log_dir: Path | None,
) -> None:
    """Print a selector for the first element matching XPATH."""
    tree = _load_tree(html_file)
    report = _locate(tree, xpath)

    if verbose:
        click.echo(format_chain(report.chain))

    if best_effort:
        click.echo(api.synthesize_best_effort_selector(report.chain, tree, settings=settings))
        return

    observer = LoggingObserver(build_logger("xpathfinder.synthesis", log_dir)) if log_dir else None
    result = api.synthesize(report.chain, tree, observer=observer, settings=settings)
    if verbose:
        for attempt in result.attempts:
            click.echo(f"  {attempt.status:<9} {attempt.selector}")
        click.echo(f"stage: {result.stage} ({'verified' if result.verified else 'unverified'})")
    click.echo(result.selector)


@cli.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("selector")
@click.pass_context
def verify(ctx: click.Context, html_file: Path, selector: str) -> None:
    """Check whether SELECTOR matches exactly one element."""
    tree = _load_tree(html_file)
    verification = api.verification_details(selector, tree, settings=ctx.obj)
    if verification.status == "ambiguous":
        click.echo(f"ambiguous ({verification.match_count})")
        for sample in verification.samples:
            click.echo(f"  {sample}")
    elif verification.error:
        click.echo(f"none ({verification.error})")
    else:
        click.echo(verification.status)
    if not verification.ok:
        ctx.exit(1)


@cli.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("xpath")
@click.option("--minimal", is_flag=True, help="Only labels and positions.")
def inspect(html_file: Path, xpath: str, minimal: bool) -> None:
    """Print the ancestor chain of the first element matching XPATH."""
    tree = _load_tree(html_file)
    report = _locate(tree, xpath)
    click.echo(format_chain(report.chain, minimal=minimal))
    if not minimal:
        click.echo(f"indexed: {api.indexed_path(report.levels, tree)}")
        click.echo(f"full: {api.full_path(report.levels)}")


@cli.command()
@click.option("--write", is_flag=True, help="Save the effective settings to the settings file.")
@click.pass_context
def config(ctx: click.Context, write: bool) -> None:
    """Print the effective settings as JSON."""
    click.echo(settings_payload(ctx.obj))
    if not write:
        return
    path = ctx.meta["config_path"]
    ok, error = save_settings(ctx.obj, path)
    if not ok:
        raise click.ClickException(error or f"Could not write {path}")
    click.echo(f"Saved {path}", err=True)


def main() -> None:
    cli()
