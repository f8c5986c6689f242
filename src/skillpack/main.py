"""
skillpack CLI entry point

Typer + Rich command line for the skill catalog:
- browse: list, search, info, docs, requires, categories
- install / remove (full source or per agent)
- init: .env.example and .gitignore for installed skills
- mcp / serve: run the MCP stdio server or the HTTP API
"""

import json
import sys
from contextlib import contextmanager
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import Settings
from .errors import SkillError
from .logging import get_logger, setup_logging
from .service import SkillService, first_failure, results_payload
from .skills.docs import DOC_FILES

logger = get_logger(__name__)

# Typer app
app = typer.Typer(
    name="skills",
    help="skillpack - install skill bundles into projects and agent runtimes",
    add_completion=False,
)

# stdout carries command output (and JSON); errors go to stderr
console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> None:
    err_console.print(f"[red]✗[/red] {escape(message)}")
    raise typer.Exit(1)


@contextmanager
def _handle_errors():
    try:
        yield
    except SkillError as e:
        _fail(e.message)


def _print_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _service(ctx: typer.Context) -> SkillService:
    return ctx.obj


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    """
    skillpack - skill bundle manager

    Browse the catalog, copy skills into .skills/, or write SKILL.md files
    for Claude, Codex and Gemini.
    """
    if version:
        from . import __version__

        console.print(f"skillpack v{__version__}")
        raise typer.Exit(0)

    settings = Settings()
    setup_logging(
        log_dir=settings.log_dir_path,
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file_prefix=settings.log_file_prefix,
        log_max_size_mb=settings.log_max_size_mb,
        log_backup_count=settings.log_backup_count,
        log_to_console=settings.log_to_console,
        log_to_file=settings.log_to_file,
        stream=sys.stderr,
    )

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)

    ctx.obj = SkillService.from_settings(settings)
    ctx.meta["settings"] = settings


def _skills_table(records: list[dict], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Description")
    table.add_column("Installed", justify="center")
    for record in records:
        table.add_row(
            record["name"],
            record["category"],
            record["description"],
            "[green]✓[/green]" if record["installed"] else "",
        )
    return table


@app.command("list")
def list_command(
    ctx: typer.Context,
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
    installed: bool = typer.Option(False, "--installed", help="Only installed skills"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """List available skills"""
    with _handle_errors():
        records = _service(ctx).list_skills(category=category, installed_only=installed)

    if as_json:
        _print_json(records)
        return
    if not records:
        console.print("[yellow]No skills found[/yellow]")
        return
    console.print(_skills_table(records, f"Skills ({len(records)})"))


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search text"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """Search skills by name, description or tag"""
    records = _service(ctx).search(query)

    if as_json:
        _print_json(records)
        return
    if not records:
        console.print(f"[yellow]No skills matching '{escape(query)}'[/yellow]")
        return
    console.print(_skills_table(records, f"Results for '{escape(query)}' ({len(records)})"))


@app.command()
def info(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """Show skill metadata and requirements"""
    with _handle_errors():
        record = _service(ctx).skill_info(name)

    if as_json:
        _print_json(record)
        return

    lines = [
        f"[bold]{escape(record['displayName'])}[/bold] ({record['name']})",
        escape(record["description"]),
        "",
        f"Category: {escape(record['category'])}",
        f"Tags: {escape(', '.join(record['tags'])) or '-'}",
        f"Installed: {'yes' if record['installed'] else 'no'}",
        f"Env vars: {', '.join(record['envVars']) or '-'}",
        f"System deps: {', '.join(record['systemDeps']) or '-'}",
        f"Dependencies: {escape(', '.join(record['dependencies'])) or '-'}",
        f"CLI: {record['cliCommand'] or '-'}",
    ]
    console.print(Panel("\n".join(lines), title=record["name"], border_style="blue"))


@app.command()
def docs(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name"),
    file: Optional[str] = typer.Option(
        None, "--file", "-f", help=f"Which file: {', '.join(DOC_FILES)}"
    ),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """Show a skill's documentation"""
    with _handle_errors():
        record = _service(ctx).skill_docs(name, file=file)

    if as_json:
        _print_json(record)
        return
    if record["content"] is None:
        which = DOC_FILES[file] if file else "documentation"
        _fail(f"No {which} found for '{name}'")
    typer.echo(record["content"])


@app.command()
def requires(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """Show environment variables, dependencies and CLI command of a skill"""
    with _handle_errors():
        record = _service(ctx).requirements(name)

    if as_json:
        _print_json(record)
        return

    console.print(f"[bold]Requirements for {name}[/bold]")
    for label, key in (
        ("Env vars", "envVars"),
        ("System deps", "systemDeps"),
        ("Dependencies", "dependencies"),
    ):
        values = record[key]
        console.print(f"  {label}: {escape(', '.join(values)) if values else '[dim]none[/dim]'}")
    console.print(f"  CLI: {record['cliCommand'] or '[dim]none[/dim]'}")


def _report(results: list, verb: str) -> None:
    for result in results:
        target = f" for {result.agent} ({result.scope})" if result.agent else ""
        if not result.success:
            err_console.print(f"[red]✗[/red] {result.skill}{target}: {escape(result.error or '')}")
        elif getattr(result, "removed", True) is False:
            console.print(f"[dim]-[/dim] {result.skill}{target}: not installed")
        else:
            where = f" → {escape(result.path)}" if getattr(result, "path", None) else ""
            console.print(f"[green]✓[/green] {verb} {result.skill}{target}{where}")


@app.command()
def install(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="Skill name(s)"),
    agent: Optional[str] = typer.Option(
        None, "--for", help="Write SKILL.md for an agent: claude, codex, gemini, all"
    ),
    scope: str = typer.Option("global", "--scope", help="global or project"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace an existing install"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """Install one or more skills"""
    service = _service(ctx)
    payloads = []
    failed = False

    for name in names:
        try:
            results = service.install(name, agent=agent, scope=scope, overwrite=overwrite)
        except SkillError as e:
            err_console.print(f"[red]✗[/red] {escape(e.message)}")
            failed = True
            continue
        failed = failed or first_failure(results) is not None
        payloads.append(results_payload(results))
        if not as_json:
            _report(results, "Installed")

    if as_json and payloads:
        _print_json(payloads[0] if len(names) == 1 else payloads)
    if failed:
        raise typer.Exit(1)


@app.command()
def remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name"),
    agent: Optional[str] = typer.Option(
        None, "--for", help="Remove SKILL.md for an agent: claude, codex, gemini, all"
    ),
    scope: str = typer.Option("global", "--scope", help="global or project"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """Remove an installed skill"""
    with _handle_errors():
        results = _service(ctx).remove(name, agent=agent, scope=scope)

    if as_json:
        _print_json(results_payload(results))
    else:
        _report(results, "Removed")
    if first_failure(results):
        raise typer.Exit(1)


@app.command()
def categories(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
):
    """List categories with skill counts"""
    records = _service(ctx).categories()

    if as_json:
        _print_json(records)
        return

    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Skills", justify="right")
    for record in records:
        table.add_row(record["name"], str(record["count"]))
    console.print(table)


@app.command()
def init(ctx: typer.Context):
    """Write .env.example and add .skills/ to .gitignore for installed skills"""
    service = _service(ctx)
    if not service.installer.list_installed():
        console.print("[dim]No skills installed. Run: skills install <name>[/dim]")
        return

    with _handle_errors():
        outcome = service.init_project()

    if outcome["envExample"]:
        console.print(f"[green]✓[/green] Generated .env.example ({len(outcome['envVars'])} variables)")
    else:
        console.print("[dim]  No environment variables detected across installed skills[/dim]")
    if outcome["gitignoreUpdated"]:
        console.print("[green]✓[/green] Added .skills/ to .gitignore")
    else:
        console.print("[dim]  .skills/ already in .gitignore[/dim]")
    console.print(f"\n[bold]Initialized for {len(outcome['installed'])} installed skill(s)[/bold]")


@app.command()
def mcp(ctx: typer.Context):
    """Run the MCP server on stdio"""
    from .mcp_servers.skills import run_mcp_server

    run_mcp_server(_service(ctx))


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
):
    """Run the HTTP API"""
    from .api.server import run_api_server

    settings: Settings = ctx.meta["settings"]
    host = host or settings.api_host
    port = port or settings.api_port

    err_console.print(f"[green]✓[/green] skillpack API on http://{host}:{port}  (Ctrl+C to stop)")
    try:
        run_api_server(_service(ctx), host=host, port=port)
    except RuntimeError as e:
        logger.error(f"HTTP API failed to start: {e}")
        _fail(str(e))


if __name__ == "__main__":
    app()
