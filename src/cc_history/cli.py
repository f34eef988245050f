"""CLI for cc-history."""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console

from cc_history import __version__
from cc_history.config import DATA_PATH_ENV, LibraryConfig, resolve_config
from cc_history.errors import ConfigError, HistoryError, OutputError

app = typer.Typer(
    name="cc-history",
    help="Browse, search, export and migrate Claude Code session history.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    config: LibraryConfig
    json_output: bool = False


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cc-history {__version__}")
        raise typer.Exit()


def parse_session_arg(value: str) -> int | str:
    """Digits select by index; anything else is a UUID, prefix or agent id."""
    value = value.strip()
    if value.isdigit():
        return int(value)
    return value


def fail(error: HistoryError, json_output: bool) -> NoReturn:
    """Report an error and exit with its exit code."""
    if json_output:
        payload: dict = {"code": error.error_code, "message": str(error)}
        if error.hint:
            payload["details"] = error.hint
        console.print_json(data={"success": False, "error": payload})
    else:
        err_console.print(f"[red]Error: {error}[/red]", highlight=False)
        if error.hint:
            err_console.print(error.hint, style="dim", highlight=False)
    raise typer.Exit(error.exit_code)


def get_state(ctx: typer.Context) -> CliState:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    data_path: Annotated[
        Path | None,
        typer.Option(
            "--data-path",
            "-d",
            envvar=DATA_PATH_ENV,
            help="Claude Code data directory (default: ~/.claude)",
        ),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Browse Claude Code session history."""
    from cc_history.logging import configure_logging

    configure_logging(verbose=verbose)
    ctx.obj = CliState(config=resolve_config(data_path=data_path), json_output=json_output)


@app.command("list")
def list_command(
    ctx: typer.Context,
    workspace: Annotated[
        str | None, typer.Option("--workspace", "-w", help="Filter by workspace path")
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", min=0, help="Number of sessions")] = 50,
    offset: Annotated[int, typer.Option("--offset", "-o", min=0, help="Sessions to skip")] = 0,
    full: Annotated[bool, typer.Option("--full", help="Do not page output")] = False,
) -> None:
    """List sessions, most recent first."""
    from cc_history.display import json_result, print_session_list
    from cc_history.sessions import list_sessions

    state = get_state(ctx)
    try:
        config = state.config.with_options(workspace=workspace, limit=limit, offset=offset)
        page = list_sessions(config)
    except HistoryError as e:
        fail(e, state.json_output)

    if state.json_output:
        data = [dict(s.to_dict(), index=i) for i, s in enumerate(page.data, offset)]
        console.print_json(data=json_result(data, page.pagination))
    elif full or not console.is_terminal:
        print_session_list(console, page, workspace)
    else:
        with console.pager(styles=True):
            print_session_list(console, page, workspace)


@app.command()
def view(
    ctx: typer.Context,
    session: Annotated[str, typer.Argument(help="Session index, UUID, UUID prefix or agent id")],
    workspace: Annotated[
        str | None, typer.Option("--workspace", "-w", help="Filter by workspace path")
    ] = None,
    agent: Annotated[
        bool, typer.Option("--agent", "-a", help="Treat SESSION as an agent id")
    ] = False,
    full: Annotated[bool, typer.Option("--full", help="Do not page output")] = False,
) -> None:
    """Show every message of a session."""
    from cc_history.display import json_result, print_session
    from cc_history.sessions import get_agent_session, get_session

    state = get_state(ctx)
    try:
        config = state.config.with_options(workspace=workspace)
        if agent:
            result = get_agent_session(session.strip(), config)
        else:
            result = get_session(parse_session_arg(session), config)
    except HistoryError as e:
        fail(e, state.json_output)

    if state.json_output:
        console.print_json(data=json_result(result.to_dict()))
    elif full or not console.is_terminal:
        print_session(console, result)
    else:
        with console.pager(styles=True):
            print_session(console, result)


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Text to search for (case-insensitive)")],
    session: Annotated[
        str | None, typer.Option("--session", "-s", help="Only search this session")
    ] = None,
    workspace: Annotated[
        str | None, typer.Option("--workspace", "-w", help="Filter by workspace path")
    ] = None,
    context: Annotated[
        int, typer.Option("--context", "-C", min=0, help="Context lines around each match")
    ] = 2,
    limit: Annotated[int, typer.Option("--limit", "-n", min=0, help="Number of matches")] = 50,
    offset: Annotated[int, typer.Option("--offset", "-o", min=0, help="Matches to skip")] = 0,
) -> None:
    """Search session messages for a query."""
    from cc_history.config import create_pagination, paginate
    from cc_history.display import json_result, print_search_results
    from cc_history.models import Page
    from cc_history.searcher import search_in_session, search_sessions

    state = get_state(ctx)
    if not query.strip():
        fail(ConfigError("Query required"), state.json_output)

    try:
        config = state.config.with_options(
            workspace=workspace, context=context, limit=limit, offset=offset
        )
        if session is None:
            page = search_sessions(query, config)
        else:
            matches = search_in_session(parse_session_arg(session), query, config)
            page = Page(
                data=paginate(matches, config),
                pagination=create_pagination(len(matches), config),
            )
    except HistoryError as e:
        fail(e, state.json_output)

    if state.json_output:
        data = [match.to_dict() for match in page.data]
        console.print_json(data=json_result(data, page.pagination))
    else:
        print_search_results(console, page, query)


@app.command()
def export(
    ctx: typer.Context,
    session: Annotated[
        str | None, typer.Argument(help="Session index, UUID or prefix")
    ] = None,
    all_sessions: Annotated[bool, typer.Option("--all", "-a", help="Export every session")] = False,
    export_format: Annotated[
        str, typer.Option("--format", "-f", help="Export format: json or markdown")
    ] = "markdown",
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to file instead of stdout")
    ] = None,
    workspace: Annotated[
        str | None, typer.Option("--workspace", "-w", help="Filter by workspace path")
    ] = None,
) -> None:
    """Export sessions to JSON or Markdown."""
    from cc_history.exporter import ExportFormat, export_all_sessions, export_session

    state = get_state(ctx)
    try:
        fmt = ExportFormat.parse(export_format)
        config = state.config.with_options(workspace=workspace)
        if all_sessions:
            content = export_all_sessions(fmt, config)
        elif session is not None:
            content = export_session(parse_session_arg(session), fmt, config)
        else:
            raise ConfigError(
                "Session identifier required. Provide a session index/UUID or use --all."
            )
    except HistoryError as e:
        fail(e, state.json_output)

    if output is not None:
        try:
            output.write_text(content, encoding="utf-8")
        except OSError as e:
            fail(OutputError(str(output), e.strerror or str(e)), state.json_output)
        if state.json_output:
            console.print_json(data={"success": True, "data": {"path": str(output)}})
        else:
            err_console.print(f"[green]Exported to {output}[/green]")
    else:
        typer.echo(content)


@app.command()
def migrate(
    ctx: typer.Context,
    session: Annotated[
        str | None,
        typer.Argument(help="Session index or UUID; separate several with commas"),
    ] = None,
    destination: Annotated[
        str | None, typer.Option("--destination", "-D", help="Destination workspace path")
    ] = None,
    source: Annotated[
        str | None, typer.Option("--source", "-S", help="Source workspace (with --all)")
    ] = None,
    mode: Annotated[str, typer.Option("--mode", "-m", help="copy or move")] = "copy",
    all_sessions: Annotated[
        bool, typer.Option("--all", "-a", help="Migrate every session of --source")
    ] = False,
) -> None:
    """Copy or move sessions to a different workspace."""
    from cc_history.display import print_migrate_result
    from cc_history.migrate import (
        MigrateConfig,
        MigrateMode,
        MigrateWorkspaceConfig,
        migrate_session,
        migrate_workspace,
    )

    state = get_state(ctx)
    try:
        migrate_mode = MigrateMode.parse(mode)
        if not destination:
            raise ConfigError("Destination required. Use --destination or -D.")

        if all_sessions:
            if not source:
                raise ConfigError("Source workspace required when using --all.")
            result = migrate_workspace(
                MigrateWorkspaceConfig(source=source, destination=destination, mode=migrate_mode),
                state.config,
            )
        elif session:
            refs = [parse_session_arg(part) for part in session.split(",") if part.strip()]
            result = migrate_session(
                MigrateConfig(sessions=refs, destination=destination, mode=migrate_mode),
                state.config,
            )
        else:
            raise ConfigError("Session identifier required. Provide a session or use --all.")
    except HistoryError as e:
        fail(e, state.json_output)

    if state.json_output:
        data = dict(result.to_dict(), mode=migrate_mode.value, destination=destination)
        console.print_json(data={"success": True, "data": data})
    else:
        print_migrate_result(console, result, migrate_mode.value)

    if result.failed_count > 0 and result.success_count == 0:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
