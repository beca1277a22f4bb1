import asyncio
import logging

import click

from config import Config
from .client import GameClient
from .errors import AuthError
from .leaderboard import LeaderboardProjection


def _render(view: LeaderboardProjection, username) -> None:
    for entry in view.entries:
        marker = '*' if entry.username == username else ' '
        click.echo(f"{marker} #{entry.rank} {entry.username}  {entry.score} pts")
    rank = f"#{view.rank}" if view.rank is not None else 'Loading...'
    click.echo(f"Your Rank: {rank}")


@click.group()
@click.option('--log-level', default=Config.LOG_LEVEL, show_default=True)
@click.pass_context
def cli(ctx, log_level):
    """Spin the wheel and follow the leaderboard."""
    logging.basicConfig(level=log_level.upper(), format='%(asctime)s %(levelname)s %(name)s %(message)s')
    ctx.obj = Config


@cli.command('login')
@click.argument('username')
@click.password_option(confirmation_prompt=False)
@click.pass_obj
def login_command(config, username, password):
    """Log in and remember the session for this tab id."""
    async def run():
        async with GameClient.from_config(config) as game:
            await game.login(username, password)
            _render(game.view(), game.username)

    try:
        asyncio.run(run())
    except AuthError as exc:
        raise click.ClickException(f'Login failed: {exc}') from exc


@cli.command('spin')
@click.pass_obj
def spin_command(config):
    """Spin once and report the result to the scoring service."""
    def announce(outcome):
        click.echo(f"Wheel landed on: {outcome.value}")

    async def run():
        async with GameClient.from_config(config, on_spin_start=announce) as game:
            if not await game.start(realtime=False):
                raise click.ClickException('Not logged in; run `spinboard login` first.')
            await game.spinner.spin()
            _render(game.view(), game.username)

    asyncio.run(run())


@cli.command('leaderboard')
@click.pass_obj
def leaderboard_command(config):
    """Print the current leaderboard."""
    async def run():
        async with GameClient.from_config(config) as game:
            await game.start(realtime=False)
            if game.session is None:
                await game.refresh_leaderboard()
            _render(game.view(), game.username)

    asyncio.run(run())


@cli.command('watch')
@click.pass_obj
def watch_command(config):
    """Print every leaderboard broadcast until interrupted."""
    async def run():
        async with GameClient.from_config(config) as game:
            game.leaderboard.subscribe(lambda snapshot: _render(game.view(), game.username))
            await game.start()
            if game.session is None:
                await game.refresh_leaderboard()
            await game.channel.wait()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


def main():
    cli()


if __name__ == '__main__':
    main()
