import logging
from pathlib import Path
from typing import Text, Tuple

import click

from evict import CommandHandler, FileStore, IssueRepository, parse_command
from evict.commands import (
    Command,
    CommentOnIssue,
    ListIssues,
    NewIssue,
    SetStatus,
    ShowIssue,
    TagIssue,
)
from evict.config import CONFIG_FILE_NAME, resolve_author
from evict.editor import compose
from evict.store import ISSUES_FILE_NAME
from evict.vcs import current_branch

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])
# option-like tokens go to the command's own argument parsing
ARGUMENT_SETTINGS = dict(ignore_unknown_options=True)

DEFAULT_ROOT = Path('.evict')


def create_handler(root: Path) -> CommandHandler:
    config_path = root / CONFIG_FILE_NAME
    return CommandHandler(
        IssueRepository(FileStore(root / ISSUES_FILE_NAME)),
        author=lambda: resolve_author(config_path, _prompt_author),
        branch=current_branch,
        editor=compose,
    )


def _prompt_author() -> Text:
    return click.prompt('Author name')


def _run(ctx: click.Context, initial: Command, args: Tuple[Text, ...]) -> None:
    handler: CommandHandler = ctx.obj
    ctx.exit(handler.run(parse_command(initial, args)))


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    '--root',
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_ROOT,
    envvar='EVICT_ROOT',
    show_default=True,
    help='Directory holding the issues and the config.',
)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx: click.Context, root: Path, debug: bool) -> None:
    """Track issues alongside a git working copy."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s',
        )
    # tests hand in their own handler
    if ctx.obj is None:
        ctx.obj = create_handler(root)


@cli.command('new', context_settings=ARGUMENT_SETTINGS)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def new_issue(ctx: click.Context, args: Tuple[Text, ...]) -> None:
    """Create an issue: [-t TITLE] [--no-body] [TITLE]"""
    _run(ctx, NewIssue(), args)


@cli.command('list', context_settings=ARGUMENT_SETTINGS)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def list_issues(ctx: click.Context, args: Tuple[Text, ...]) -> None:
    """List issues: [-t TAG] [-s STATUS]"""
    _run(ctx, ListIssues(), args)


@cli.command('show', context_settings=ARGUMENT_SETTINGS)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def show_issue(ctx: click.Context, args: Tuple[Text, ...]) -> None:
    """Show an issue with its tags and comments: ID"""
    _run(ctx, ShowIssue(), args)


@cli.command('comment', context_settings=ARGUMENT_SETTINGS)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def comment(ctx: click.Context, args: Tuple[Text, ...]) -> None:
    """Comment on an issue: ID"""
    _run(ctx, CommentOnIssue(), args)


@cli.command('tag', context_settings=ARGUMENT_SETTINGS)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def tag(ctx: click.Context, args: Tuple[Text, ...]) -> None:
    """Tag an issue: ID NAME..."""
    _run(ctx, TagIssue(enabled=True), args)


@cli.command('untag', context_settings=ARGUMENT_SETTINGS)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def untag(ctx: click.Context, args: Tuple[Text, ...]) -> None:
    """Remove tags from an issue: ID NAME..."""
    _run(ctx, TagIssue(enabled=False), args)


@cli.command('status', context_settings=ARGUMENT_SETTINGS)
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def set_status(ctx: click.Context, args: Tuple[Text, ...]) -> None:
    """Set the status of an issue: ID STATUS"""
    _run(ctx, SetStatus(), args)


def main() -> None:
    cli()
