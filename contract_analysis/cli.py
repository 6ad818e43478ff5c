"""
Contract Analysis - Command Line Interface

Analyze contracts with an LLM completion service.

Usage:
    contract-analysis analyze --contract path/to/contract.pdf --tier pro
    contract-analysis analyze -c contract.docx -o report.md --verbose
    contract-analysis analyze -c contract.txt -m gpt-4o-mini -f json -o out.json
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from contract_analysis import __version__
from contract_analysis.config import AgentConfig, configure_logging, get_config
from contract_analysis.exceptions import (
    ConfigurationError,
    ExtractionError,
    UnknownTierError,
    UploadRejectedError,
)
from contract_analysis.models import StageStatus, Tier
from contract_analysis.pipeline import (
    TIER_PROFILES,
    ContractAnalysisAgent,
    ReportFormat,
    get_plan_limits,
    parse_tier,
    print_report,
    save_report,
)


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="contract-analysis",
    help="LLM-powered contract analysis: summary, risks and clause explanations.",
    add_completion=False,
)

console = Console()


def _load_config(**overrides) -> AgentConfig:
    """get_config() that exits cleanly on invalid settings."""
    try:
        return get_config(**overrides)
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1)


# =============================================================================
# Main Commands
# =============================================================================

@app.command()
def analyze(
    contract: Path = typer.Option(
        ...,
        "--contract", "-c",
        help="Path to the contract file (PDF, DOCX, TXT or MD)",
        exists=True,
        readable=True,
    ),
    tier: str = typer.Option(
        "free",
        "--tier", "-t",
        help="Subscription tier: free, pro, business, enterprise",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file path for the report",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model", "-m",
        help="Completion model to use",
    ),
    format: ReportFormat = typer.Option(
        ReportFormat.MARKDOWN,
        "--format", "-f",
        help="Output format",
        case_sensitive=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
):
    """
    Analyze a contract and print or save the report.

    Examples:
        contract-analysis analyze --contract sample.pdf
        contract-analysis analyze -c contract.docx -t business -o report.md -v
    """
    config = _load_config(model=model, verbose=verbose)
    configure_logging(config.log_level, verbose=verbose)

    try:
        resolved_tier = parse_tier(tier, strict=True)
    except UnknownTierError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    async def _run():
        async with ContractAnalysisAgent(config=config, verbose=verbose) as agent:
            return await agent.analyze_file(contract, tier=resolved_tier)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Analyzing {contract.name}...", total=None)
            result = asyncio.run(_run())
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1)
    except ExtractionError as e:
        console.print(f"[red]Could not read document:[/red] {e}")
        raise typer.Exit(1)
    except UploadRejectedError as e:
        console.print(f"[yellow]Upload rejected:[/yellow] {e}")
        raise typer.Exit(1)

    if output:
        save_report(result, output, format=format)
        console.print(f"[green]Report saved to:[/green] {output}")
    elif format == ReportFormat.JSON:
        console.print_json(result.to_json())
    else:
        print_report(result, verbose=verbose)

    failed = [
        name for name, status in result.metadata.stages.items()
        if status in (StageStatus.FAILED, StageStatus.TIMEOUT)
    ]
    if failed:
        console.print(f"[yellow]Warning:[/yellow] stage(s) did not complete: {', '.join(failed)}")


@app.command()
def tiers():
    """
    Show tier profiles and plan limits.
    """
    table = Table(title="Subscription Tiers")
    table.add_column("Tier", style="bold")
    table.add_column("Max input chars", justify="right")
    table.add_column("Summary")
    table.add_column("Risks")
    table.add_column("Clauses")
    table.add_column("Max file", justify="right")
    table.add_column("Uploads")

    for tier in Tier:
        profile = TIER_PROFILES[tier]
        limits = get_plan_limits(tier)
        max_file = "unlimited" if limits.max_file_size_mb == -1 else f"{limits.max_file_size_mb}MB"
        table.add_row(
            tier.value,
            f"{profile.max_input_chars:,}",
            profile.summary_depth.value,
            profile.risk_detail.value,
            profile.clause_detail.value,
            max_file,
            ", ".join(limits.upload_types),
        )

    console.print(table)


@app.command()
def status():
    """
    Check that the completion endpoint is reachable.
    """
    config = _load_config()

    async def _check():
        async with ContractAnalysisAgent(config=config) as agent:
            return await agent.check_status()

    try:
        info = asyncio.run(_check())
    except ConfigurationError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    if info["available"]:
        console.print(f"[green]✓[/green] Completion API reachable at {info['base_url']}")
    else:
        console.print(f"[red]✗[/red] Completion API not reachable at {info['base_url']}")
    console.print(f"[bold]Model:[/bold] {info['configured_model']}")
    console.print(f"[bold]Stage timeout:[/bold] {info['stage_timeout']:.0f}s")

    if not info["available"]:
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    console.print(f"[bold]Contract Analysis[/bold] v{__version__}")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    app()
