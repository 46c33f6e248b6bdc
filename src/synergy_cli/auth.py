from functools import wraps

import click
import httpx

from synergy_types.auth import LoginResponse
from synergy_cli.config import CLIProfile, read_profile, write_profile


@click.command()
@click.option("--base-url", "-b", prompt="API url", default="http://localhost:8000")
@click.option("--email", "-e", prompt="E-mail")
@click.option("--password", "-p", prompt="Password", hide_input=True)
@click.pass_context
def login(ctx, base_url, email, password):
    """Log in and store the access token in the active profile."""
    profile_file = (ctx.obj or {}).get("PROFILE_PATH")
    base_url = base_url.rstrip("/")
    if base_url.endswith("/api"):
        base_url = base_url[:-4]

    try:
        response = httpx.post(f"{base_url}/api/auth/login", json={"email": email, "password": password})
    except httpx.HTTPError as e:
        click.echo(f"Could not reach {base_url}: {e}")
        ctx.exit(1)

    if response.status_code != 200:
        click.echo(f"Authentication failed: {_error_message(response)}")
        ctx.exit(1)

    login_response = LoginResponse.model_validate(response.json())
    written = write_profile(CLIProfile(
        api_url=base_url,
        token=login_response.token,
        email=login_response.user.email,
        user_id=login_response.user.id,
        username=login_response.user.name,
    ), profile_file)

    click.echo(f"Authentication successful! Logged in as {login_response.user.name} ({written})")


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message", response.text)
    except ValueError:
        return response.text


def authenticate(func):
    """Inject the stored ``CLIProfile`` as ``profile`` or abort when logged out."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        profile = read_profile((ctx.obj or {}).get("PROFILE_PATH"))

        if profile is None:
            click.echo("You are not logged in. Please login")
            ctx.exit(1)

        kwargs["profile"] = profile
        return func(*args, **kwargs)

    return wrapper
