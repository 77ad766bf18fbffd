"""claude-switch command line.

Commands:
    add <name>                 Log out, run Claude Code's login, save the result
    import <name>              Save the currently active Claude Code login
    use <name>                 Switch Claude Code to a saved profile
    list                       List saved profiles
    remove <name>              Delete a saved profile
    exec <name> -- <cmd...>    Run a command with the profile's credentials in its environment

Environment:
    XDG_CONFIG_HOME            Profiles live in $XDG_CONFIG_HOME/claude-switch (default ~/.config)
    CLAUDE_CONFIG_DIR          Claude Code's config directory (default ~/.claude)
    CLAUDE_SWITCH_CLAUDE_BIN   Claude Code executable used for login (default: claude)

Status messages go to stderr; only ``list`` writes to stdout.
"""

from __future__ import annotations

import logging
import sys

import rich.box
import rich.console
import rich.table
import rich.text
import typer

from claude_switch.error_boundary import ErrorBoundary
from claude_switch.errors import ClaudeSwitchError
from claude_switch.paths import Settings
from claude_switch.schemas.profiles import ApiKeyProfile, OAuthProfile, Profile
from claude_switch.services.switcher import API_KEY_ENV, SwitchOutcome, Switcher, build_switcher

__all__ = [
    'app',
    'main',
]

LOG_FORMAT = '%(levelname)s %(name)s: %(message)s'
EXPIRY_FORMAT = '%Y-%m-%d %H:%M UTC'

app = typer.Typer(
    help='Manage multiple Claude Code accounts.',
    add_completion=False,
    no_args_is_help=True,
)

boundary = ErrorBoundary()


@boundary.handler(ClaudeSwitchError)
def _handle_expected(exc: ClaudeSwitchError) -> int:
    _stderr().print(rich.text.Text.assemble(('error: ', 'bold red'), str(exc)))
    return 1


def _stderr() -> rich.console.Console:
    return rich.console.Console(stderr=True, highlight=False)


def _switcher(ctx: typer.Context) -> Switcher:
    switcher = ctx.obj
    if not isinstance(switcher, Switcher):
        raise RuntimeError('unreachable: switcher is built in the app callback')
    return switcher


def _say(message: str) -> None:
    _stderr().print(message, markup=False)


@app.callback()
def _app_main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Log debug details to stderr'),
) -> None:
    """Resolve settings once and build the components every command shares."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT, stream=sys.stderr)
    ctx.obj = build_switcher(Settings.from_env(), console=_stderr())


# -- Creating profiles --------------------------------------------------------


@app.command('add')
@boundary
def cli_add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help='Profile name'),
    label: str | None = typer.Option(None, '--label', help='Free-form description'),
) -> None:
    """Add a new profile (logs out, launches Claude's login flow, imports the result)."""
    profile = _switcher(ctx).add(name, label)
    _say(f"Saved profile '{name}' ({_describe(profile)})")


@app.command('import')
@boundary
def cli_import(
    ctx: typer.Context,
    name: str = typer.Argument(..., help='Profile name'),
    label: str | None = typer.Option(None, '--label', help='Free-form description'),
) -> None:
    """Import the currently active Claude Code credentials as a named profile."""
    profile = _switcher(ctx).import_profile(name, label)
    if isinstance(profile, OAuthProfile):
        _say(f"Imported current session as '{name}' ({profile.display_email}, {profile.display_plan})")
    else:
        _say(f"Imported current session as '{name}' (API key)")


# -- Switching ----------------------------------------------------------------


@app.command('use')
@boundary
def cli_use(ctx: typer.Context, name: str = typer.Argument(..., help='Profile name')) -> None:
    """Switch to a named profile."""
    result = _switcher(ctx).use(name)

    if isinstance(result.profile, ApiKeyProfile):
        _say("API key profiles can't be written to Claude's config files.")
        _say('Use one of these instead:')
        _say('')
        _say(f'  export {API_KEY_ENV}={result.profile.api_key}')
        _say(f'  claude-switch exec {name} -- claude')
        return

    suffix = {
        SwitchOutcome.REFRESHED: ' (token refreshed)',
        SwitchOutcome.REAUTHENTICATED: ' (re-authenticated)',
    }.get(result.outcome, '')
    _say(f"Switched to '{name}'{suffix}")


@app.command('exec', context_settings={'ignore_unknown_options': True})
@boundary
def cli_exec(
    ctx: typer.Context,
    name: str = typer.Argument(..., help='Profile name'),
    command: list[str] = typer.Argument(..., help='Command and arguments to run (after --)'),
) -> None:
    """Run a command with a profile's credentials injected via environment variables."""
    _switcher(ctx).exec(name, command)


# -- Listing / removal --------------------------------------------------------


@app.command('list')
@boundary
def cli_list(ctx: typer.Context) -> None:
    """List all profiles."""
    rows = _switcher(ctx).list_profiles()
    if not rows:
        _say("No profiles. Use 'claude-switch add <name>' or 'claude-switch import <name>' to create one.")
        return

    table = rich.table.Table(box=rich.box.SIMPLE_HEAD)
    table.add_column('', justify='center')
    for header in ('NAME', 'TYPE', 'EMAIL', 'ORG', 'PLAN', 'EXPIRES'):
        table.add_column(header, style='bold' if header == 'NAME' else None, no_wrap=header == 'NAME')

    for row in rows:
        style = 'bold green' if row.active else None
        marker = '*' if row.active else ''
        if row.profile is None:
            table.add_row(marker, row.name, rich.text.Text('error', style='red'), '-', '-', '-', '-', style=style)
            continue
        expires = row.profile.expires_at
        table.add_row(
            marker,
            row.name,
            row.profile.display_type,
            row.profile.display_email,
            row.profile.display_org,
            row.profile.display_plan,
            expires.strftime(EXPIRY_FORMAT) if expires else '-',
            style=style,
        )

    rich.console.Console(highlight=False).print(table)


@app.command('remove')
@boundary
def cli_remove(ctx: typer.Context, name: str = typer.Argument(..., help='Profile name')) -> None:
    """Remove a profile."""
    _switcher(ctx).remove(name)
    _say(f"Removed profile '{name}'")


def _describe(profile: Profile) -> str:
    if isinstance(profile, OAuthProfile):
        return profile.display_email
    return 'API key'


def main() -> None:
    app(prog_name='claude-switch')
