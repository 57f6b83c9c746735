import json
import logging
import sys
from typing import Dict, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .core.config import ConfigManager, SeverityLevel
from .core.errors import PostureScannerError
from .core.results import ResultStatus
from .plugins import get_plugins
from .scanners.posture_scanner import PostureScanner

STATUS_STYLES = {
    ResultStatus.OK: "green",
    ResultStatus.WARN: "yellow",
    ResultStatus.FAIL: "red",
    ResultStatus.UNKNOWN: "magenta",
}


def _parse_settings(values: Tuple[str, ...]) -> Dict[str, str]:
    settings = {}
    for value in values:
        key, sep, setting = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(
                f"expected KEY=VALUE, got {value!r}", param_hint="--setting"
            )
        settings[key.strip()] = setting.strip()
    return settings


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Evaluate compliance plugins against a collected cloud cache."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command("list")
@click.option("--category", help="Only show plugins in this category.")
@click.option(
    "--severity",
    type=click.Choice([s.value for s in SeverityLevel]),
    help="Only show plugins with this severity.",
)
def list_plugins(category: Optional[str], severity: Optional[str]):
    """List the registered plugins."""
    plugins = get_plugins(
        category=category,
        severity=SeverityLevel(severity) if severity else None,
    )

    table = Table(title="Plugins")
    table.add_column("ID", no_wrap=True)
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Severity")
    for plugin in plugins:
        table.add_row(
            plugin.plugin_id,
            plugin.descriptor.title,
            plugin.descriptor.category,
            plugin.descriptor.severity.value,
        )

    Console().print(table)


@main.command("run")
@click.option(
    "--cache",
    "cache_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON cache produced by the collector.",
)
@click.option(
    "--plugin", "plugin_ids", multiple=True, help="Plugin ID to run (repeatable)."
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="JSON or YAML scanner config.",
)
@click.option(
    "--govcloud", is_flag=True, default=False, help="Evaluate Azure Government locations."
)
@click.option(
    "--setting",
    "setting_values",
    multiple=True,
    help="Plugin setting as KEY=VALUE (repeatable).",
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON.")
@click.pass_context
def run(
    ctx: click.Context,
    cache_path: str,
    plugin_ids: Tuple[str, ...],
    config_path: Optional[str],
    govcloud: bool,
    setting_values: Tuple[str, ...],
    as_json: bool,
):
    """Run plugins against a cache file."""
    manager = ConfigManager(config_path)
    try:
        config = manager.load_config()
        config.plugin_settings.update(_parse_settings(setting_values))
        if govcloud:
            config.govcloud = True
        if ctx.obj.get("verbose"):
            config.verbose = True
        manager.validate(config)
    except PostureScannerError as e:
        raise click.ClickException(str(e)) from e

    try:
        with open(cache_path, "r") as f:
            cache = json.load(f)
    except ValueError as e:
        raise click.ClickException(f"Unable to read cache {cache_path}: {e}") from e

    try:
        report = PostureScanner(config).run_scan(cache, list(plugin_ids) or None)
    except PostureScannerError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report)

    if report.summary["fail"]:
        ctx.exit(1)


def _print_report(report):
    console = Console()
    table = Table(title=f"Scan {report.scan_id}")
    table.add_column("Plugin", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Region", no_wrap=True)
    table.add_column("Resource")
    table.add_column("Message")

    for plugin_id, output in report.outputs.items():
        for result in output.results:
            style = STATUS_STYLES[result.status]
            table.add_row(
                plugin_id,
                f"[{style}]{result.status.name}[/{style}]",
                result.region,
                result.resource or "",
                result.message,
            )

    console.print(table)
    summary = report.summary
    console.print(
        f"{summary['total_results']} results: {summary['ok']} ok, "
        f"{summary['warn']} warn, {summary['fail']} fail, {summary['unknown']} unknown"
    )


if __name__ == "__main__":
    main()
