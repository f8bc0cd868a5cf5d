"""CLI entrypoint for aws-secrets-github-sync."""

from __future__ import annotations

import logging
from pathlib import Path

import rich_click as click
from botocore.exceptions import BotoCoreError, ClientError

from aws_secrets_github_sync import __version__
from aws_secrets_github_sync.config import load_config_file
from aws_secrets_github_sync.controllers import SyncCliController, UpdateSecretsCommand
from aws_secrets_github_sync.github import GitHubSecretsError

click.rich_click.USE_MARKDOWN = True
SYNC_CONTROLLER = SyncCliController()


def _load_config_defaults(ctx: click.Context, _param: click.Parameter, value: Path | None):
    if value is None:
        return value
    try:
        defaults = load_config_file(value)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error
    ctx.default_map = {**(ctx.default_map or {}), **defaults}
    return value


@click.command(
    epilog=(
        "Examples:\n\n"
        "`aws-secrets-github-sync -s my-secrets --all` updates every key.\n\n"
        "`aws-secrets-github-sync -s my-secrets -k TWINE_USERNAME -k TWINE_PASSWORD` "
        "updates two keys.\n\n"
        "`aws-secrets-github-sync -c sm2gh.json` reads settings from sm2gh.json."
    ),
)
@click.version_option(version=__version__, prog_name="aws-secrets-github-sync")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    is_eager=True,
    expose_value=False,
    callback=_load_config_defaults,
    help="Read options from a JSON file. Command-line flags take precedence.",
)
@click.option("--secret", "-s", required=True, help="Secrets Manager secret ID or ARN.")
@click.option(
    "--repo",
    "-r",
    default=None,
    help="GitHub repository owner/name (default is derived from the current git repository).",
)
@click.option(
    "--env",
    "-e",
    default=None,
    help="Update secrets of this GitHub deployment environment instead of the repository.",
)
@click.option(
    "--region",
    "-R",
    default=None,
    help="AWS region (if --secret is an ARN, region is not required).",
)
@click.option("--profile", "-p", default=None, help="AWS shared credentials profile.")
@click.option(
    "--keys",
    "-k",
    multiple=True,
    help="Which key to update. Can be repeated. To update all keys use --all.",
)
@click.option("--all", "-A", "all_keys", is_flag=True, default=False, help="Update all keys.")
@click.option(
    "--keep",
    multiple=True,
    help="Destination secret that --prune must not remove. Can be repeated.",
)
@click.option(
    "--prune",
    is_flag=True,
    default=False,
    help="Remove GitHub secrets that are not keys of the source secret.",
)
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt.")
@click.option("--debug", is_flag=True, default=False, help="Show debugging information.")
def aws_secrets_github_sync(  # noqa: PLR0913
    secret: str,
    repo: str | None,
    env: str | None,
    region: str | None,
    profile: str | None,
    keys: tuple[str, ...],
    all_keys: bool,
    keep: tuple[str, ...],
    prune: bool,
    yes: bool,
    debug: bool,
) -> None:
    """Update GitHub secrets from an AWS Secrets Manager secret."""

    command = UpdateSecretsCommand(
        secret=secret,
        repository=repo,
        environment=env,
        region=region,
        profile=profile,
        keys=keys,
        all_keys=all_keys,
        keep=keep,
        prune=prune,
        yes=yes,
    )
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        click.echo(f"Options: {command}", err=True)

    try:
        lines = SYNC_CONTROLLER.update(command)
    except (GitHubSecretsError, BotoCoreError, ClientError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    aws_secrets_github_sync()
