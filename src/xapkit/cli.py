"""Command line interface for xapkit."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from xapkit.config import ConfigError, ConfigManager, XapkitConfig, resolve_with_precedence
from xapkit.config.resolver import assign_path
from xapkit.search import (
    Match,
    XapkitError,
    drop_index,
    normalize_text,
    open_builder,
    open_executor,
    open_handle,
    registry_from_settings,
)

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Report an error either as a JSON payload or as a Click exception.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Exception being reported, chained for non-JSON output.

    Raises:
        SystemExit: In JSON mode, after printing the payload.
        click.ClickException: Otherwise.
    """

    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from original


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("xapkit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.addHandler(handler)
    logger.setLevel(level)


def _load_config(ctx: click.Context) -> XapkitConfig:
    """Load configuration honoring the group-level overrides stored on ``ctx``."""
    options = ctx.find_root().obj or {}
    manager = ConfigManager(options.get("config_path"))
    overrides: dict[str, Any] = {}
    if options.get("index_path"):
        overrides["index.path"] = options["index_path"]
    config = manager.load(cli_overrides=overrides)
    _configure_logging(config.logging.level)
    return config


def _split_pair(raw: str, option: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise click.BadParameter(f"Expected KEY=VALUE, got {raw!r}.", param_hint=option)
    return key.strip(), value


def _parse_slot(raw: str) -> tuple[int, float]:
    slot, value = _split_pair(raw, "--slot")
    try:
        return int(slot), float(value)
    except ValueError:
        raise click.BadParameter(
            f"Slots take an integer number and a numeric value, got {raw!r}.",
            param_hint="--slot",
        ) from None


def _render_data(data: Any, *, limit: int = 0) -> str:
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else str(data)
    if limit and len(text) > limit:
        return text[: limit - 1] + "…"
    return text


def _match_payload(match: Match) -> dict[str, Any]:
    return {
        "docid": match.docid,
        "rank": match.rank,
        "weight": match.weight,
        "percent": match.percent,
        "data": _render_data(match.data),
    }


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="xapkit")
@click.option(
    "--index",
    "index_path",
    type=click.Path(file_okay=False, path_type=str),
    help="Index directory, overriding index.path from the configuration.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file to use instead of ~/.xapkit/config.yaml.",
)
@click.pass_context
def cli(ctx: click.Context, index_path: str | None, config_path: Path | None) -> None:
    """xapkit indexes records into Xapian and searches them with labelled queries."""
    ctx.obj = {"index_path": index_path, "config_path": config_path}


@cli.command()
@click.option("--id", "record_id", type=int, required=True, help="Positive integer record id.")
@click.option("--text", type=str, help="Unprefixed free text.")
@click.option(
    "--field",
    "fields",
    multiple=True,
    metavar="LABEL=TEXT",
    help="Text indexed under the prefix registered for LABEL.",
)
@click.option(
    "--tag",
    "tags",
    multiple=True,
    metavar="LABEL=VALUE",
    help="Boolean term built from the prefix registered for LABEL.",
)
@click.option("--term", "terms", multiple=True, help="Raw boolean term.")
@click.option("--slot", "slots", multiple=True, metavar="N=VALUE", help="Numeric slot value.")
@click.option("--data", type=str, help="Payload stored with the record.")
@click.option(
    "--file",
    "text_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read unprefixed text from a file.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the record.")
@click.pass_context
def add(
    ctx: click.Context,
    record_id: int,
    text: str | None,
    fields: tuple[str, ...],
    tags: tuple[str, ...],
    terms: tuple[str, ...],
    slots: tuple[str, ...],
    data: str | None,
    text_file: Path | None,
    json_output: bool,
) -> None:
    """Index or replace a single record."""

    try:
        config = _load_config(ctx)
        registry = registry_from_settings(config.prefixes)
        builder = open_builder(config.index)
        with builder.handle:
            builder.set_id(record_id)
            body = [part for part in (text,) if part]
            if text_file is not None:
                body.append(
                    normalize_text(text_file.read_text(encoding="utf-8", errors="replace"))
                )
            if body:
                builder.add_text(" ".join(body))
            for raw in fields:
                label, value = _split_pair(raw, "--field")
                builder.add_text(value, registry.text_prefix(label))
            boolean_terms = list(terms)
            for raw in tags:
                label, value = _split_pair(raw, "--tag")
                boolean_terms.append(registry.boolean_prefix(label) + value)
            for term in boolean_terms:
                builder.add_boolean_term(term)
            for raw in slots:
                builder.add_to_slot(*_parse_slot(raw))
            if data is not None:
                builder.set_data(data)

            pending = builder.pending
            builder.execute()
    except click.ClickException:
        raise
    except (ConfigError, XapkitError) as exc:
        _handle_cli_error(str(exc), code="invalid_record", json_output=json_output, original=exc)
        return
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while indexing: {exc}",
            code="internal_error",
            json_output=json_output,
            original=exc,
        )
        return

    if json_output:
        console.print_json(
            data={
                "indexed": {
                    "docid": record_id,
                    "text_fields": len(pending.text_fields),
                    "boolean_terms": len(pending.boolean_terms),
                    "slots": sorted(pending.slot_values),
                },
                "index": config.index.path,
            }
        )
        return
    if not config.cli.quiet_default:
        console.print(f"[green]Indexed record {record_id} into {config.index.path}.[/green]")


@cli.command()
@click.argument("query")
@click.option("--limit", type=click.IntRange(min=0), help="Number of matches to return.")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Matches to skip.")
@click.option(
    "--check-at-least",
    type=click.IntRange(min=0),
    help="Candidates to scan before estimating the total.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON search results.")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    limit: int | None,
    offset: int,
    check_at_least: int | None,
    json_output: bool,
) -> None:
    """Search the index with QUERY using the configured prefix labels."""

    try:
        config = _load_config(ctx)
        registry = registry_from_settings(config.prefixes)
        executor = open_executor(config.index, registry)
        with executor.handle:
            executor.execute(
                query,
                config.query.num_to_fetch if limit is None else limit,
                offset,
                config.query.check_at_least if check_at_least is None else check_at_least,
            )
            results = [_match_payload(match) for match in executor]
            estimated = executor.get_num_matches()
    except (ConfigError, XapkitError) as exc:
        _handle_cli_error(str(exc), code="invalid_query", json_output=json_output, original=exc)
        return
    except Exception as exc:
        _handle_cli_error(
            f"Search failed: {exc}",
            code="search_error",
            json_output=json_output,
            original=exc,
        )
        return

    if json_output:
        console.print_json(
            data={
                "query": query,
                "counts": {"estimated": estimated, "returned": len(results), "offset": offset},
                "results": results,
            }
        )
        return

    if results:
        table = Table(title=f"Results for {query!r}")
        table.add_column("Rank", justify="right")
        table.add_column("Doc ID", justify="right")
        table.add_column("Weight", justify="right")
        table.add_column("Data")
        for row in results:
            table.add_row(
                str(row["rank"] + 1),
                str(row["docid"]),
                f"{row['weight']:.3f}",
                _render_data(row["data"], limit=60),
            )
        console.print(table)
    console.print(
        f"[green]Search summary: returned={len(results)}, estimated={estimated}, "
        f"offset={offset}.[/green]"
    )


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit index details as JSON.")
@click.pass_context
def info(ctx: click.Context, json_output: bool) -> None:
    """Show the configured index location and document count."""

    try:
        config = _load_config(ctx)
        with open_handle(config.index) as handle:
            count = handle.doc_count
    except (ConfigError, XapkitError) as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except Exception as exc:
        _handle_cli_error(
            f"Unable to open index: {exc}",
            code="index_error",
            json_output=json_output,
            original=exc,
        )
        return

    if json_output:
        console.print_json(data={"index": config.index.path, "documents": count})
        return
    console.print(f"{config.index.path}: {count} document(s)")


@cli.command()
@click.option("--yes", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_context
def drop(ctx: click.Context, yes: bool) -> None:
    """Delete the configured index directory."""

    try:
        config = _load_config(ctx)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    target = config.index.path
    if not yes:
        click.confirm(f"Delete the index at {target}?", abort=True)
    if drop_index(target):
        console.print(f"[green]Removed index at {target}.[/green]")
    else:
        console.print(f"[yellow]No index found at {target}.[/yellow]")


@cli.group()
def config() -> None:
    """Manage xapkit configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    options = ctx.find_root().obj or {}
    manager = ConfigManager(options.get("config_path"))
    try:
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML value to assign to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value addressed by a dotted KEY."""
    options = ctx.find_root().obj or {}
    manager = ConfigManager(options.get("config_path"))
    manager.ensure_exists()

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must be a dotted path such as 'index.path'.")

    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    before = manager.read_text().splitlines()
    try:
