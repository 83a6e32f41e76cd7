"""
Command line interface for the vc_changelog tool.

This module defines the ``main`` command group used as the entry point
of the ``changelog`` command. ``changelog generate`` gathers commits from
a local checkout or from GitHub, groups them and writes the Markdown
changelog; ``changelog serve`` runs the pull request validation webhook.
"""

from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import List, Optional

import click

from vc_changelog import __version__
from vc_changelog.config.loader import ClogConfig, ConfigError, parse_config
from vc_changelog.parsing.commit import parse_commits
from vc_changelog.pipeline import build_changelog
from vc_changelog.render.link_style import LinkStyle, infer_style
from vc_changelog.render.markdown import ChangeLog, RenderError
from vc_changelog.vcs import Provider, Querier, QueryError, RawCommit, create_querier
from vc_changelog.webhooks.server import DEFAULT_PORT, serve as serve_webhook

# Create a module-level logger. Attach a null handler and disable
# propagation until the CLI configures logging.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_RENDER_FAILURE = 7


def enable_package_logging() -> None:
    """Let the package loggers propagate to the handlers configured by the CLI.

    Module loggers start silent so that library use emits nothing until an
    application configures logging.
    """
    for name, candidate in list(logging.root.manager.loggerDict.items()):
        if name.split(".")[0] == "vc_changelog" and isinstance(candidate, logging.Logger):
            candidate.propagate = True


def print_info(message: str) -> None:
    """Print an info message to stderr, keeping stdout for the changelog."""
    click.echo(f"ℹ {message}", err=True)


def print_error(message: str) -> None:
    """Print an error message."""
    click.echo(f"✗ {message}", err=True)


def parse_timestamp(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[datetime.datetime]:
    """Click callback parsing an RFC 3339 timestamp such as ``2017-08-01T00:00:00Z``."""
    if not value:
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not an RFC 3339 timestamp")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def fetch_commits(
    querier: Querier,
    from_ref: str,
    to_ref: str,
    from_latest_tag: bool,
    since: Optional[datetime.datetime],
    until: Optional[datetime.datetime],
) -> List[RawCommit]:
    """Retrieve the raw commits selected by the command line options.

    A time range takes precedence over a revision range.
    """
    if since is not None or until is not None:
        since = since or datetime.datetime.fromtimestamp(1, tz=datetime.timezone.utc)
        until = until or datetime.datetime.now(tz=datetime.timezone.utc)
        logger.debug("Listing commits between %s and %s", since, until)
        return querier.get_commit_range(since, until)

    if from_latest_tag:
        from_ref = querier.get_latest_tag()
        logger.debug("Latest tag points at %s", from_ref)
    return querier.get_commits(from_ref, to_ref)


def load_repo_config(querier: Querier) -> ClogConfig:
    """Read the repository's ``.clog.toml``; an unreadable file counts as missing."""
    try:
        content = querier.get_config()
    except QueryError as exc:
        logger.warning("Could not read repository configuration: %s", exc)
        content = None
    return parse_config(content)


@click.group(context_settings={"auto_envvar_prefix": "CHANGELOG"})
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="changelog")
def main(verbose: bool) -> None:
    """Generate a changelog from conventional commit messages."""
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    enable_package_logging()


@main.command()
@click.option("--version", "-v", "version", default="", help="The version you are creating.")
@click.option("--subtitle", default="", help="The release subtitle.")
@click.option("--patch", "patch_version", is_flag=True, help="Format the heading as a patch release.")
@click.option("--repo", "-r", default="", help="The repository URL. Defaults to the origin remote for the local provider.")
@click.option("--from", "-f", "from_ref", default="", help="The beginning commit. Defaults to the start of history.")
@click.option("--to", "-t", "to_ref", default="HEAD", show_default=True, help="The last commit.")
@click.option("--from-latest-tag", is_flag=True, help="Start from the most recent tag.")
@click.option("--since", callback=parse_timestamp, help="Only commits after this RFC 3339 time. Takes precedence over --from/--to.")
@click.option("--until", callback=parse_timestamp, help="Only commits before this RFC 3339 time. Takes precedence over --from/--to.")
@click.option("--include-all", is_flag=True, help="Include commits whose type is not a known section.")
@click.option(
    "--provider",
    "-p",
    type=click.Choice([provider.value for provider in Provider]),
    default=Provider.LOCAL.value,
    show_default=True,
    help="Where to read commits from.",
)
@click.option("--link-style", type=click.Choice([style.value for style in LinkStyle]), help="Link style. Inferred from the repository URL if omitted.")
@click.option("--token", default="", help="API token for the github provider.")
@click.option("--git-dir", default="", help="Path to the .git directory (local provider).")
@click.option("--work-tree", default="", help="Path to the working tree (local provider).")
@click.option("--changelog", "changelog_file", type=click.Path(dir_okay=False, path_type=Path), help="File to write. Defaults to stdout.")
def generate(
    version: str,
    subtitle: str,
    patch_version: bool,
    repo: str,
    from_ref: str,
    to_ref: str,
    from_latest_tag: bool,
    since: Optional[datetime.datetime],
    until: Optional[datetime.datetime],
    include_all: bool,
    provider: str,
    link_style: Optional[str],
    token: str,
    git_dir: str,
    work_tree: str,
    changelog_file: Optional[Path],
) -> None:
    """Write a Markdown changelog for a range of commits."""
    selected = Provider.parse(provider)
    if selected is Provider.GITHUB and not repo:
        print_error("--repo is required for the github provider")
        raise click.exceptions.Exit(EXIT_INVALID_USAGE)

    try:
        querier = create_querier(selected, repo=repo, token=token, git_dir=git_dir, work_tree=work_tree)

        try:
            config = load_repo_config(querier)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        try:
            repo = repo or config.repo or querier.get_origin()
            raw_commits = fetch_commits(querier, from_ref, to_ref, from_latest_tag, since, until)
        except QueryError as exc:
            print_error(f"Could not get list of commits: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        style = LinkStyle.parse(link_style) if link_style else infer_style(repo)
        header = ChangeLog(
            repo=repo,
            version=version or config.version or "",
            subtitle=subtitle or config.subtitle or "",
            patch_version=patch_version or bool(config.patch_ver),
        )
        commits = parse_commits(raw_commits)
        logger.debug("Parsed %d commit(s) from %s", len(commits), repo)

        try:
            document = build_changelog(
                header,
                commits,
                config.alias_map(),
                order=config.order,
                style=style,
                include_all=include_all,
            )
        except RenderError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_RENDER_FAILURE)

        if changelog_file is not None:
            changelog_file.write_text(document, encoding="utf-8")
            print_info(f"Wrote changelog to {changelog_file}")
        else:
            click.echo(document, nl=False)

    except click.exceptions.Exit:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)


@main.command()
@click.option("--secret", "-s", default="", help="Webhook secret.")
@click.option("--token", default="", help="GitHub API token used to read commits and post statuses.")
@click.option("--port", "-n", type=int, default=DEFAULT_PORT, show_default=True, help="Webhook server port.")
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind.")
def serve(secret: str, token: str, port: int, host: str) -> None:
    """Serve a webhook endpoint for pull request validation."""
    if not secret:
        logger.warning("No webhook secret set; deliveries will not be verified")
    serve_webhook(secret, token, host=host, port=port)
