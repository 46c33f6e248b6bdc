import click

from synergy_cli.auth import login
from synergy_cli.chat import chat, history


@click.group()
@click.option(
    '--profile',
    envvar='SYNERGY_PROFILE',
    type=click.Path(dir_okay=False),
    help='Path to custom profile YAML file (overrides ~/.synergy/profile.yaml)'
)
@click.pass_context
def cli(ctx, profile):
    """Synergy CLI - log in and chat with your project teams."""
    ctx.ensure_object(dict)
    ctx.obj['PROFILE_PATH'] = profile


cli.add_command(login, "login")
cli.add_command(chat, "chat")
cli.add_command(history, "history")

if __name__ == '__main__':
    cli()
