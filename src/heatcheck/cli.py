"""CLI entry point for HeatCheck."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from heatcheck.config import (
    PAGE_SIZE,
    TIMEFRAMES,
    TOP_N,
    ClientConfig,
    create_client as create_client_config,
    list_clients as list_clients_config,
    load_client,
    set_default_client,
)
from heatcheck.extraction.extractor import FIELDS, ExtractionStats
from heatcheck.metrics.outcomes import OutcomeClassifier
from heatcheck.process import aggregate_pairs, build_dashboard, extract_rows, load_calls
from heatcheck.search.filters import CallFilters
from heatcheck.storage.database import Database, DataUnavailableError
from heatcheck.storage.models import NO_SCORE, NONE_IDENTIFIED, NOT_SPECIFIED, TeamMember
from heatcheck.storage.repository import Repository

console = Console(force_terminal=True)


def _get_client_config(ctx) -> ClientConfig:
    """Get the client config from context."""
    config = ctx.obj["client_config"]
    if config is None:
        raise click.UsageError(
            "No client selected. Create one with 'heatcheck client create' or pass --client."
        )
    return config


def _open_db(ctx) -> Database:
    """Open the selected client's database for reading."""
    return Database.open_existing(ctx.obj["db_path"])


def _filters_from_options(timeframe, date_from, date_to, search="", heat="all", outcome="all",
                          page=1, page_size=0) -> CallFilters:
    return CallFilters(
        timeframe=timeframe,
        date_from=date_from,
        date_to=date_to,
        search=search or "",
        heat=heat,
        outcome=outcome,
        page=page,
        page_size=page_size,
    )


def _fmt(value, placeholder: str) -> str:
    return placeholder if value is None else str(value)


@click.group()
@click.option(
    "--client", "-C",
    default=None,
    help="Client slug (default: from clients.json)",
)
@click.option(
    "--db",
    default=None,
    help="Database path (overrides client config)",
    type=click.Path(),
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, client, db, verbose):
    """HeatCheck - Sales call analytics from AI call analyses."""
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        client_config = load_client(client)
    except ValueError:
        if client is not None:
            raise click.BadParameter(f"Unknown client: {client}", param_hint="--client")
        client_config = None

    if db:
        if client_config is None:
            client_config = ClientConfig(slug="local", name="Local database", db_path=Path(db))
        ctx.obj["db_path"] = Path(db)
    else:
        ctx.obj["db_path"] = client_config.db_path if client_config else None

    ctx.obj["client_config"] = client_config


# ---------------------------------------------------------------------------
# Client Management Commands
# ---------------------------------------------------------------------------


@cli.group(name="client")
def client_group():
    """Manage clients."""
    pass


@client_group.command(name="create")
@click.argument("slug")
@click.option("--name", required=True, help="Client display name")
@click.option("--industry", default="", help="Client industry")
def client_create(slug, name, industry):
    """Create a new client."""
    try:
        config = create_client_config(slug, name, industry)
        console.print(f"[green]Created client:[/green] {slug}")
        console.print(f"  Name: {config.name}")
        console.print(f"  DB: {config.db_path}")
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")


@client_group.command(name="list")
def client_list():
    """List all registered clients."""
    clients = list_clients_config()
    if not clients:
        console.print("[yellow]No clients registered.[/yellow]")
        return

    table = Table(title="Registered Clients")
    table.add_column("Slug", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Industry")
    table.add_column("Default", justify="center")

    for c in clients:
        table.add_row(
            c["slug"],
            c["name"],
            c["industry"],
            "[green]✓[/green]" if c["is_default"] else "",
        )
    console.print(table)


@client_group.command(name="info")
@click.argument("slug")
def client_info(slug):
    """Show details for a client."""
    try:
        config = load_client(slug)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    console.print(f"[bold]{config.name}[/bold] ({config.slug})")
    console.print(f"  Industry: {config.industry or '-'}")
    console.print(f"  DB: {config.db_path}")
    console.print(f"  Conversion keywords: {', '.join(config.conversion_keywords)}")

    if config.db_path.exists():
        with Database(config.db_path) as db:
            summary = Repository(db).get_summary()
        console.print(f"\n  Calls: {summary['total_calls']}")
        console.print(f"  With analysis: {summary['analyzed_calls']}")
        console.print(f"  Assigned: {summary['assigned_calls']}")
        console.print(f"  Team members: {summary['team_members']}")
    else:
        console.print("\n  [dim]No database yet (run ingest to start).[/dim]")


@client_group.command(name="set-default")
@click.argument("slug")
def client_set_default(slug):
    """Set the default client."""
    try:
        set_default_client(slug)
        console.print(f"[green]Default client set to:[/green] {slug}")
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")


# ---------------------------------------------------------------------------
# Ingestion and Team Commands
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("input_path", type=click.Path(exists=True))
@click.pass_context
def ingest(ctx, input_path):
    """Ingest call records from a .json/.csv file or a directory of them."""
    from heatcheck.ingest.reader import ingest_path

    config = _get_client_config(ctx)
    try:
        with Database(ctx.obj["db_path"]) as db:
            counts = ingest_path(db, Path(input_path))
            total = Repository(db).get_call_count()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    console.print(
        f"[green]Done![/green] Read [bold]{counts['read']}[/bold] calls "
        f"from {counts['files']} file(s) for {config.name}."
    )
    console.print(f"  New: {counts['inserted']}")
    if counts["duplicates"]:
        console.print(f"  Already stored: [dim]{counts['duplicates']}[/dim]")
    console.print(f"  Assigned to team members: {counts['assigned']}")
    console.print(f"Total calls in database: [bold]{total}[/bold]")


@cli.group(name="member")
def member_group():
    """Manage team members."""
    pass


@member_group.command(name="add")
@click.argument("member_id")
@click.option("--name", required=True, help="Member display name")
@click.option("--role", default=None, help="Member role")
@click.pass_context
def member_add(ctx, member_id, name, role):
    """Add a team member."""
    _get_client_config(ctx)
    with Database(ctx.obj["db_path"]) as db:
        added = Repository(db).add_team_member(TeamMember(id=member_id, name=name, role=role))
    if added:
        console.print(f"[green]Added team member:[/green] {name} ({member_id})")
    else:
        console.print(f"[red]Error:[/red] Team member '{member_id}' already exists")


@member_group.command(name="list")
@click.pass_context
def member_list(ctx):
    """List team members."""
    _get_client_config(ctx)
    try:
        with _open_db(ctx) as db:
            members = Repository(db).get_team_members()
    except DataUnavailableError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return

    if not members:
        console.print("[yellow]No team members yet.[/yellow]")
        return

    table = Table(title="Team Members")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Role")
    table.add_column("Active", justify="center")
    for m in members:
        table.add_row(m.id, m.name, m.role or "", "[green]✓[/green]" if m.is_active else "")
    console.print(table)


@cli.command()
@click.argument("call_id")
@click.argument("member_id")
@click.pass_context
def assign(ctx, call_id, member_id):
    """Assign a call to a team member."""
    _get_client_config(ctx)
    try:
        with _open_db(ctx) as db:
            Repository(db).assign_call(call_id, member_id)
    except (ValueError, DataUnavailableError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return
    console.print(f"[green]Assigned[/green] call {call_id} to {member_id}")


# ---------------------------------------------------------------------------
# Reporting Commands
# ---------------------------------------------------------------------------


def _window_options(f):
    f = click.option("--to", "date_to", default=None, help="End date (YYYY-MM-DD)")(f)
    f = click.option("--from", "date_from", default=None, help="Start date (YYYY-MM-DD)")(f)
    f = click.option(
        "--timeframe", "-t",
        type=click.Choice(TIMEFRAMES),
        default="all",
        help="Reporting window",
    )(f)
    return f


@cli.command()
@_window_options
@click.option("--search", "-s", default="", help="Match prospect, need, objection or outcome")
@click.option("--heat", type=click.Choice(["all", "high", "medium", "low"]), default="all")
@click.option("--outcome", type=click.Choice(["all", "converted", "interested", "objection"]), default="all")
@click.option("--page", type=int, default=1, help="Page number")
@click.option("--page-size", type=int, default=PAGE_SIZE, help="Rows per page (0 for all)")
@click.pass_context
def calls(ctx, timeframe, date_from, date_to, search, heat, outcome, page, page_size):
    """Show the call table with extracted fields."""
    config = _get_client_config(ctx)
    try:
        filters = _filters_from_options(
            timeframe, date_from, date_to, search, heat, outcome, page, page_size,
        )
        with _open_db(ctx) as db:
            rows = load_calls(db, filters)
            members = Repository(db).get_team_members()
    except (ValueError, DataUnavailableError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    dashboard = build_dashboard(
        rows, OutcomeClassifier(config.conversion_keywords), filters, members,
    )
    if not dashboard["calls"]:
        console.print("[yellow]No calls match.[/yellow]")
        return

    table = Table(title=f"Calls ({config.name}) - page {dashboard['page']}/{dashboard['pages']}")
    table.add_column("Date", style="dim")
    table.add_column("Prospect", style="bold")
    table.add_column("Heat", justify="right")
    table.add_column("Top Need", max_width=40)
    table.add_column("Objection", max_width=40)
    table.add_column("Outcome", max_width=40)
    table.add_column("Member")

    for call in dashboard["calls"]:
        table.add_row(
            call["created_at"][:10],
            call["prospect_name"] or "Unknown",
            _fmt(call["heat_score"], NO_SCORE),
            _fmt(call["top_need"], NOT_SPECIFIED),
            _fmt(call["main_objection"], NONE_IDENTIFIED),
            _fmt(call["outcome"], NOT_SPECIFIED),
            call["team_member_name"] or call["team_member_id"] or "[dim]Unassigned[/dim]",
        )
    console.print(table)
    console.print(f"[dim]{dashboard['total_matching']} matching calls[/dim]")


@cli.command()
@_window_options
@click.option("--top", "top_n", type=int, default=TOP_N, help="How many needs/objections to list")
@click.option("--project", is_flag=True, help="Also show an estimate with unassigned calls spread across members")
@click.pass_context
def metrics(ctx, timeframe, date_from, date_to, top_n, project):
    """Show client-wide and per-member performance."""
    config = _get_client_config(ctx)
    try:
        filters = _filters_from_options(timeframe, date_from, date_to)
        with _open_db(ctx) as db:
            rows = load_calls(db, filters)
            members = Repository(db).get_team_members()
    except (ValueError, DataUnavailableError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    dashboard = build_dashboard(
        rows, OutcomeClassifier(config.conversion_keywords), filters, members,
        project=project, top_n=top_n,
    )
    cohort = dashboard["cohort"]

    console.print()
    console.print(f"[bold]HeatCheck Metrics[/bold] [dim]({config.name})[/dim]")
    console.print(f"  Total calls: [bold]{cohort['total_calls']}[/bold]")
    console.print(f"  Avg HeatCheck: {_fmt(cohort['average_heat_score'], NO_SCORE)}")
    console.print(f"  Conversion rate: {cohort['conversion_rate']}%")
    console.print(f"  Unassigned calls: {cohort['unassigned_calls']}")

    for title, key in (("Top Needs", "top_needs"), ("Top Objections", "top_objections")):
        console.print(f"\n  [bold]{title}[/bold]")
        if not cohort[key]:
            console.print("    [dim]None yet[/dim]")
        for i, item in enumerate(cohort[key], 1):
            console.print(f"    {i}. {item['value']} [dim]({item['count']})[/dim]")

    if dashboard["members"]:
        console.print()
        table = Table(title="Team Performance")
        table.add_column("Member", style="cyan")
        table.add_column("Calls", justify="right")
        table.add_column("Converted", justify="right")
        table.add_column("Conversion", justify="right")
        table.add_column("Avg Heat", justify="right")
        for m in dashboard["members"]:
            table.add_row(
                m["member_name"],
                str(m["total_calls"]),
                str(m["converted_calls"]),
                f"{m['conversion_rate']}%",
                _fmt(m["average_heat_score"], NO_SCORE),
            )
        console.print(table)

    if project:
        console.print()
        table = Table(title="[yellow]ESTIMATE[/yellow] - unassigned calls spread across members")
        table.add_column("Member", style="cyan")
        table.add_column("Actual Calls", justify="right")
        table.add_column("+ Estimated", justify="right")
        table.add_column("Projected Calls", justify="right")
        table.add_column("Projected Conversion", justify="right")
        for p in dashboard["projected"]:
            table.add_row(
                p["member_name"],
                str(p["actual_total_calls"]),
                str(p["additional_calls"]),
                str(p["projected_total_calls"]),
                f"{p['projected_conversion_rate']}%",
            )
        console.print(table)
        console.print("[dim]Estimates are illustrative and not used in any report.[/dim]")


@cli.command()
@_window_options
@click.pass_context
def stats(ctx, timeframe, date_from, date_to):
    """Show how often each field could be extracted."""
    config = _get_client_config(ctx)
    try:
        filters = _filters_from_options(timeframe, date_from, date_to)
        with _open_db(ctx) as db:
            rows = load_calls(db, filters)
    except (ValueError, DataUnavailableError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    extraction = ExtractionStats()
    extract_rows(rows, stats=extraction)

    table = Table(title=f"Extraction Coverage ({config.name})")
    table.add_column("Field", style="cyan")
    table.add_column("Found", justify="right")
    table.add_column("Missing", justify="right")
    table.add_column("Coverage", justify="right")
    for name in FIELDS:
        found = extraction.found(name)
        pct = f"{found / extraction.total * 100:.0f}%" if extraction.total else "0%"
        table.add_row(name.replace("_", " ").title(), str(found), str(extraction.misses[name]), pct)
    console.print(table)
    console.print(f"[dim]{extraction.total} calls, {extraction.unanalyzed} without analysis text[/dim]")


@cli.command(name="export")
@_window_options
@click.option("--format", "fmt", type=click.Choice(["csv", "json"]), default="csv", help="Export format")
@click.option("--output", "-o", default=None, type=click.Path(), help="Output file")
@click.option("--project", is_flag=True, help="Include the labelled estimate in JSON exports")
@click.pass_context
def export_cmd(ctx, timeframe, date_from, date_to, fmt, output, project):
    """Export the call table (CSV) or metrics (JSON)."""
    from heatcheck.metrics.projection import project_unassigned
    from heatcheck.storage.export import export_calls_csv, export_metrics_json

    config = _get_client_config(ctx)
    try:
        filters = _filters_from_options(timeframe, date_from, date_to)
        with _open_db(ctx) as db:
            rows = load_calls(db, filters)
            members = Repository(db).get_team_members()
    except (ValueError, DataUnavailableError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    pairs = extract_rows(rows)
    default_name = "sales_call_analysis.csv" if fmt == "csv" else "metrics.json"
    output_path = Path(output) if output else config.exports_dir / default_name

    if fmt == "csv":
        count = export_calls_csv(pairs, output_path)
        console.print(f"[green]Exported {count} calls to {output_path}[/green]")
        return

    result = aggregate_pairs(pairs, OutcomeClassifier(config.conversion_keywords))
    export_metrics_json(
        result,
        output_path,
        member_names={m.id: m.name for m in members},
        projections=project_unassigned(result) if project else None,
    )
    console.print(f"[green]Exported metrics for {result.cohort.total_calls} calls to {output_path}[/green]")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=8000, help="Port")
def serve(host, port):
    """Run the web dashboard."""
    import uvicorn

    from heatcheck.web.app import create_app

    uvicorn.run(create_app(), host=host, port=port)
