"""reposettings CLI — reconcile repository settings from the command line."""

import asyncio
import logging

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from reposettings import __version__
from reposettings.config import Config, ConfigError, load_settings
from reposettings.github.client import GitHubAPIError, GitHubClient, RepoRef
from reposettings.sync.archive import ArchiveReconciler
from reposettings.sync.nop import PreviewArtifact

console = Console()


def _make_client(config: Config) -> GitHubClient:
    return GitHubClient(token=config.github_token, base_url=config.api_url)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _resolve_repo(repo: str | None, repo_path: str | None) -> RepoRef:
    if repo:
        return RepoRef.parse(repo)
    if repo_path:
        from reposettings.utils.git_ops import repo_ref_from_checkout

        return repo_ref_from_checkout(repo_path)
    raise click.UsageError("Give OWNER/REPO or --repo-path")


def _prepare(repo: str | None, repo_path: str | None, settings_path: str) -> tuple[Config, RepoRef, dict]:
    try:
        config = Config.from_env()
        _configure_logging(config.log_level)
        ref = _resolve_repo(repo, repo_path)
        settings = load_settings(settings_path)
    except (ValueError, ConfigError, OSError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(2)
    return config, ref, settings


async def _run_sync(config: Config, ref: RepoRef, settings: dict, nop: bool) -> list:
    async with _make_client(config) as client:
        reconciler = ArchiveReconciler(nop, client.repos, ref, settings, logging.getLogger("reposettings"))
        return await reconciler.sync()


async def _run_state(config: Config, ref: RepoRef, settings: dict):
    async with _make_client(config) as client:
        reconciler = ArchiveReconciler(True, client.repos, ref, settings, logging.getLogger("reposettings"))
        return await reconciler.get_state()


def _print_previews(previews: list[PreviewArtifact]) -> None:
    table = Table(title=f"Planned changes ({len(previews)})")
    table.add_column("Plugin", style="cyan")
    table.add_column("Repository")
    table.add_column("Request")
    table.add_column("Modifications", style="yellow")
    table.add_column("Level", style="dim")

    for p in previews:
        mods = ", ".join(f"{k}={v}" for k, v in p.change.modifications.items())
        table.add_row(
            p.source,
            p.resource.full_name,
            f"{p.endpoint.method} {p.endpoint.path}",
            mods,
            p.level,
        )

    console.print(table)


@click.group()
@click.version_option(version=__version__)
def main():
    """reposettings — declarative GitHub repository settings.

    Compare what a settings file declares with what GitHub reports, then
    apply the difference or preview it.
    """


# ── Archive ──────────────────────────────────────────────────────────


@main.command()
@click.argument("repo", required=False)
@click.option("--settings", "-s", "settings_path", required=True, help="Settings YAML file")
@click.option("--repo-path", default=None, help="Local checkout to take OWNER/REPO from")
@click.option("--nop/--apply", default=None, help="Preview changes instead of applying them")
def archive(repo: str | None, settings_path: str, repo_path: str | None, nop: bool | None):
    """Archive or unarchive REPO (OWNER/NAME) to match the settings file."""
    config, ref, settings = _prepare(repo, repo_path, settings_path)
    if nop is None:
        nop = config.nop

    mode = "nop" if nop else "apply"
    console.print(f"\n[bold blue]reposettings[/] — Archive sync ({mode}): {ref.full_name}\n")

    try:
        results = asyncio.run(_run_sync(config, ref, settings, nop))
    except (GitHubAPIError, httpx.HTTPError) as e:
        console.print(f"[red]Sync failed:[/] {escape(str(e))}")
        raise SystemExit(1)

    if not results:
        console.print("[green]No changes.[/]")
        return

    previews = [r for r in results if isinstance(r, PreviewArtifact)]
    if previews:
        _print_previews(previews)
    else:
        console.print(f"[green]Applied:[/] archived={bool(results[0].get('archived'))}")


# ── State ────────────────────────────────────────────────────────────


@main.command()
@click.argument("repo", required=False)
@click.option("--settings", "-s", "settings_path", required=True, help="Settings YAML file")
@click.option("--repo-path", default=None, help="Local checkout to take OWNER/REPO from")
def state(repo: str | None, settings_path: str, repo_path: str | None):
    """Show the archive state of REPO against the settings file."""
    config, ref, settings = _prepare(repo, repo_path, settings_path)

    try:
        result = asyncio.run(_run_state(config, ref, settings))
    except (GitHubAPIError, httpx.HTTPError) as e:
        console.print(f"[red]State check failed:[/] {escape(str(e))}")
        raise SystemExit(1)

    table = Table(title=f"Archive state: {ref.full_name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("is_archived", str(result.is_archived))
    table.add_row("should_archive", str(result.should_archive))
    table.add_row("should_unarchive", str(result.should_unarchive))
    console.print(table)


if __name__ == "__main__":
    main()
