"""Command-line interface for Commit Resume."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Dict, List, Optional, Sequence, TypeVar

import structlog
import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from commitresume.analysis import compute_commit_stats, explain_triviality
from commitresume.errors import AuthError, FormatError, UpstreamError
from commitresume.llm import SynthesisClient, create_llm_provider
from commitresume.models import AnalysisResult, Commit, Settings
from commitresume.pipeline import ResumePipeline, analyze_commits
from commitresume.providers import GitProvider, create_git_provider
from commitresume.providers.github import MAX_PER_PAGE

T = TypeVar("T")

app = typer.Typer(
    name="commitresume",
    help="Commit Resume - Turn repository commit history into resume bullet points",
    add_completion=False,
)
console = Console()


def configure_logging(level: str) -> None:
    """Route structlog output to stderr, filtered at ``level``."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def load_settings(verbose: bool = False) -> Settings:
    settings = Settings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    return settings


def git_provider(settings: Settings) -> GitProvider:
    if not settings.github_token:
        raise AuthError("GITHUB_TOKEN is not configured")
    return create_git_provider(
        "github",
        settings.github_token,
        base_url=settings.github_api_url,
        user_agent=settings.user_agent,
        timeout=settings.request_timeout,
    )


def build_pipeline(settings: Settings) -> ResumePipeline:
    config = settings.llm_config()
    provider = create_llm_provider(config)
    return ResumePipeline(SynthesisClient(provider, max_tokens=config.max_tokens, timeout=config.timeout))


def run_with_timeout(awaitable: Awaitable[T], timeout: float) -> T:
    """Run a coroutine under the outer request budget."""

    async def _bounded() -> T:
        return await asyncio.wait_for(awaitable, timeout=timeout)

    return asyncio.run(_bounded())


def write_json(data: Any, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        json.dump(data, f, indent=2, default=str)
    console.print(f"[bold green]✓[/bold green] Saved to {output}")


def print_result(result: AnalysisResult) -> None:
    """Render grouped bullet points and the summary."""
    summary = result.summary
    console.print(
        f"\n[bold]Commits:[/bold] {summary.total} of {summary.original_total} analyzed, "
        f"{summary.processed} significant, {summary.trivial} trivial"
        + (f", {summary.rejected} rejected" if summary.rejected else "")
    )

    if result.failed:
        console.print(f"[bold red]Synthesis failed:[/bold red] {result.error_type}: {result.error}")
        return

    if not result.groups:
        console.print(f"[yellow]No bullet points generated.[/yellow] {result.reasoning or ''}")
        return

    for group in result.groups:
        console.print(f"\n[bold magenta]{group.category.value}[/bold magenta] ({group.count})")
        for bullet in group.bullet_points:
            console.print(f"  • {bullet.text}")
            console.print(f"    [dim]{bullet.action_verb} | {bullet.business_impact} | {bullet.confidence:.2f}[/dim]")

    console.print(
        f"\n[bold green]✓[/bold green] {summary.bullet_points_generated} bullet points "
        f"in {summary.categories} categories"
    )


def print_usage(pipeline: ResumePipeline) -> None:
    """Show token usage and cost accumulated by the generation provider."""
    provider_stats = pipeline.synthesis_client.provider.get_usage_stats()
    console.print(f"\n[bold]API Usage:[/bold] {provider_stats['model']}")
    console.print(f"  Input Tokens: {provider_stats['total_tokens']['input']:,}")
    console.print(f"  Output Tokens: {provider_stats['total_tokens']['output']:,}")
    console.print(f"  Total Cost: ${provider_stats['total_cost']:.4f}")


async def describe_commits(pipeline: ResumePipeline, commits: Sequence[Commit]) -> List[Dict[str, Any]]:
    """Describe commits one at a time, recording failures per commit."""
    described = []
    for commit in commits:
        entry: Dict[str, Any] = {"sha": commit.sha, "message": commit.message_summary}
        try:
            synthesis = await pipeline.describe_commit(commit)
        except (FormatError, UpstreamError) as e:
            entry["error"] = f"{type(e).__name__}: {e}"
        else:
            entry["isTrivial"] = synthesis.is_trivial
            entry["reasoning"] = synthesis.reasoning
            entry["bulletPoints"] = [b.model_dump(mode="json", by_alias=True) for b in synthesis.bullet_points]
        described.append(entry)
    return described


def print_descriptions(described: List[Dict[str, Any]]) -> None:
    for entry in described:
        console.print(f"\n[cyan]{entry['sha'][:7]}[/cyan] {entry['message']}")
        if "error" in entry:
            console.print(f"  [bold red]Failed:[/bold red] {entry['error']}")
        elif entry["isTrivial"]:
            console.print(f"  [dim]{entry['reasoning'] or 'Trivial'}[/dim]")
        else:
            for bullet in entry["bulletPoints"]:
                console.print(f"  • {bullet['text']}")


@app.command()
def repos(
    sort: str = typer.Option("updated", "--sort", help="Sort by: created, updated, pushed, full_name"),
    limit: int = typer.Option(30, "--limit", "-n", help="Maximum repositories to show"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """List repositories visible to the configured token."""
    try:
        settings = load_settings(verbose)

        async def list_async():
            async with git_provider(settings) as provider:
                return await provider.list_repositories(sort=sort, per_page=limit)

        repositories = run_with_timeout(list_async(), settings.request_timeout)

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Repository", style="cyan")
        table.add_column("Language", style="green")
        table.add_column("Updated", style="blue")
        table.add_column("Private", justify="center")
        table.add_column("Description", style="white")

        for repo in repositories[:limit]:
            table.add_row(
                repo["full_name"] or "",
                repo["language"] or "",
                (repo["updated_at"] or "")[:10],
                "yes" if repo["private"] else "",
                (repo["description"] or "")[:60],
            )

        console.print(table)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def whoami(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Show the account behind the configured token."""
    try:
        settings = load_settings(verbose)

        async def whoami_async():
            async with git_provider(settings) as provider:
                return await provider.authenticate()

        user = run_with_timeout(whoami_async(), settings.request_timeout)

        console.print(f"[bold green]✓[/bold green] Authenticated as [cyan]{user['login']}[/cyan]")
        if user["name"]:
            console.print(f"[cyan]Name:[/cyan] {user['name']}")
        if user["email"]:
            console.print(f"[cyan]Email:[/cyan] {user['email']}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command(name="repo")
def repo_details(
    owner: str = typer.Argument(..., help="Repository owner"),
    repo: str = typer.Argument(..., help="Repository name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Check that a repository is reachable and show its details."""
    try:
        settings = load_settings(verbose)

        async def details_async():
            async with git_provider(settings) as provider:
                if not await provider.validate_repository(owner, repo):
                    return None
                return await provider.get_repository_details(owner, repo)

        details = run_with_timeout(details_async(), settings.request_timeout)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if details is None:
        console.print(f"[bold red]Error:[/bold red] Repository {owner}/{repo} not found or not accessible")
        raise typer.Exit(1)

    console.print(f"\n[bold]{details['full_name']}[/bold]")
    if details["description"]:
        console.print(details["description"])
    console.print(f"[cyan]Language:[/cyan] {details['language'] or 'Unknown'}")
    console.print(f"[cyan]Default Branch:[/cyan] {details['default_branch']}")
    console.print(f"[cyan]Visibility:[/cyan] {'private' if details['private'] else 'public'}")
    console.print(f"[cyan]Stars:[/cyan] {details['stargazers_count'] or 0}  [cyan]Forks:[/cyan] {details['forks_count'] or 0}")
    console.print(f"[cyan]Updated:[/cyan] {details['updated_at']}")
    console.print(f"[cyan]URL:[/cyan] {details['url']}")


@app.command()
def commits(
    owner: str = typer.Argument(..., help="Repository owner"),
    repo: str = typer.Argument(..., help="Repository name"),
    since: Optional[str] = typer.Option(None, "--since", help="Only commits after this ISO-8601 date"),
    until: Optional[str] = typer.Option(None, "--until", help="Only commits before this ISO-8601 date"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Filter by author login or email"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Branch or SHA to list from"),
    page: int = typer.Option(1, "--page", help="Page number"),
    per_page: int = typer.Option(30, "--per-page", "-n", help="Commits per page (max 100)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """List commits with file-level detail."""
    try:
        settings = load_settings(verbose)

        async def fetch_async():
            async with git_provider(settings) as provider:
                return await provider.fetch_commits(
                    owner, repo, since=since, until=until, author=author,
                    sha=branch, page=page, per_page=per_page,
                )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Fetching commits...", total=None)
            result = run_with_timeout(fetch_async(), settings.request_timeout)
            progress.update(task, completed=True)

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("SHA", style="cyan", width=10)
        table.add_column("Author", style="green")
        table.add_column("Date", style="blue")
        table.add_column("Message", style="white")
        table.add_column("Type", style="magenta")
        table.add_column("Language", style="green")
        table.add_column("+/-", justify="right", style="yellow")
        table.add_column("Trivial", style="dim")

        summaries = [commit.summary() for commit in result.commits]
        for commit, summary in zip(result.commits, summaries):
            table.add_row(
                summary["sha"],
                commit.author.name[:20],
                commit.timestamp.strftime("%Y-%m-%d %H:%M"),
                commit.message_summary[:60],
                summary["type"],
                summary["language"],
                f"+{commit.stats.additions} -{commit.stats.deletions}",
                explain_triviality(commit) or "",
            )

        console.print(table)
        pagination = result.pagination
        console.print(
            f"[dim]Page {pagination.page}, {len(result.commits)} commits"
            + (", more available" if pagination.has_next else "")
            + "[/dim]"
        )

        if output:
            write_json(
                {
                    "commits": [c.model_dump(mode="json") for c in result.commits],
                    "summaries": summaries,
                    "pagination": pagination.model_dump(),
                },
                output,
            )

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def contributors(
    owner: str = typer.Argument(..., help="Repository owner"),
    repo: str = typer.Argument(..., help="Repository name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Show contributors merged from the API and recent commit authors."""
    try:
        settings = load_settings(verbose)

        async def contributors_async():
            async with git_provider(settings) as provider:
                return await provider.get_repository_contributors(owner, repo)

        people = run_with_timeout(contributors_async(), settings.request_timeout)

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Login", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Contributions", justify="right", style="yellow")
        table.add_column("Type", style="dim")

        for person in people:
            table.add_row(person.login, person.name, str(person.contributions), person.type)

        console.print(table)
        console.print(f"\n[bold green]✓[/bold green] {len(people)} contributors")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def stats(
    owner: str = typer.Argument(..., help="Repository owner"),
    repo: str = typer.Argument(..., help="Repository name"),
    per_page: int = typer.Option(100, "--per-page", "-n", help="Number of recent commits to include"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Show statistics over recent commits."""
    try:
        settings = load_settings(verbose)

        async def stats_async():
            async with git_provider(settings) as provider:
                page = await provider.fetch_commits(owner, repo, per_page=per_page)
                return compute_commit_stats(page.commits)

        summary = run_with_timeout(stats_async(), settings.request_timeout)

        console.print(f"\n[bold]Repository Statistics[/bold] {owner}/{repo}")
        console.print(f"[cyan]Commits:[/cyan] {summary['total_commits']}")
        console.print(f"[cyan]Additions:[/cyan] {summary['total_additions']}")
        console.print(f"[cyan]Deletions:[/cyan] {summary['total_deletions']}")
        console.print(f"[cyan]Files Changed:[/cyan] {summary['total_files_changed']}")
        console.print(f"[cyan]Authors:[/cyan] {summary['authors']}")
        date_range = summary["date_range"]
        console.print(f"[cyan]Date Range:[/cyan] {date_range['earliest']} .. {date_range['latest']}")

        if summary["languages"]:
            table = Table(show_header=True, header_style="bold magenta", title="Languages")
            table.add_column("Language", style="green")
            table.add_column("Changes", justify="right", style="yellow")
            for entry in summary["languages"]:
                table.add_row(entry["language"], str(entry["changes"]))
            console.print(table)

        console.print("\n[bold]Commit Types:[/bold]")
        for commit_type, count in summary["commit_types"].items():
            if count:
                console.print(f"  {commit_type}: {count}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def generate(
    owner: str = typer.Argument(..., help="Repository owner"),
    repo: str = typer.Argument(..., help="Repository name"),
    since: Optional[str] = typer.Option(None, "--since", help="Only commits after this ISO-8601 date"),
    until: Optional[str] = typer.Option(None, "--until", help="Only commits before this ISO-8601 date"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Only commits by this author"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Branch or SHA to list from"),
    per_commit: bool = typer.Option(False, "--per-commit", help="Describe each commit separately"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Generate resume bullet points from a repository's commits."""
    try:
        settings = load_settings(verbose)
        pipeline = build_pipeline(settings)

        async def generate_async():
            async with git_provider(settings) as provider:
                page = await provider.fetch_commits(
                    owner, repo, since=since, until=until, author=author,
                    sha=branch, per_page=MAX_PER_PAGE,
                )
            if per_commit:
                return await describe_commits(pipeline, page.commits[: settings.max_commits])
            return await analyze_commits(pipeline, page.commits, max_commits=settings.max_commits)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Analyzing commits...", total=None)
            result = run_with_timeout(generate_async(), settings.request_timeout)
            progress.update(task, completed=True)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if per_commit:
        print_descriptions(result)
        print_usage(pipeline)
        if output:
            write_json({"commits": result}, output)
        if any("error" in entry for entry in result):
            raise typer.Exit(1)
        return

    print_result(result)
    print_usage(pipeline)
    if output:
        write_json(result.to_payload(), output)
    if result.failed:
        raise typer.Exit(1)


@app.command(name="generate-file")
def generate_file(
    path: Path = typer.Argument(..., help="JSON file holding a list of commits"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Generate resume bullet points from a JSON list of commits."""
    try:
        settings = load_settings(verbose)
        with open(path) as f:
            raw_commits = json.load(f)
        if isinstance(raw_commits, dict):
            raw_commits = raw_commits.get("commits")

        pipeline = build_pipeline(settings)
        result = run_with_timeout(
            analyze_commits(pipeline, raw_commits, max_commits=settings.max_commits),
            settings.request_timeout,
        )

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    print_result(result)
    print_usage(pipeline)
    if output:
        write_json(result.to_payload(), output)
    if result.failed:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from commitresume import __version__

    console.print(f"[bold]Commit Resume[/bold] version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
