"""
Command Line Interface for mongobox.
"""
import asyncio
import time

import click
import yaml
from pydantic import ValidationError

from ..BUILDERS.mongo_builder import MongoDbBuilder
from ..MANAGERS.environment_manager import EnvironmentManager
from ..MODELS.errors import MongoBoxError
from ..MODELS.settings import RuntimeSettings


def _builder_options(func):
    """Options shared by commands that build a container."""
    options = [
        click.option('--image', default=None, help='Image to run instead of the default'),
        click.option('--username', default=None, help='Root username'),
        click.option('--password', default=None, help='Root password'),
        click.option('--no-default-credentials', is_flag=True,
                     help='Do not seed the default username and password'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _make_builder(settings, image, username, password, no_default_credentials) -> MongoDbBuilder:
    builder = MongoDbBuilder(use_default_credentials=not no_default_credentials, settings=settings)
    if image:
        builder = builder.with_image(image)
    if username is not None:
        builder = builder.with_username(username)
    if password is not None:
        builder = builder.with_password(password)
    return builder


@click.group()
@click.option('--env-file', '-e', multiple=True, help='.env file with MONGOBOX_* settings')
@click.pass_context
def cli(ctx, env_file):
    """
    mongobox - disposable MongoDB containers.

    Starts a throw-away MongoDB server in Docker and reports when it accepts
    connections.
    """
    ctx.ensure_object(dict)
    ctx.obj['settings'] = EnvironmentManager().load_settings(list(env_file))


@cli.command()
@_builder_options
@click.pass_context
def config(ctx, image, username, password, no_default_credentials):
    """Print the resolved launch configuration."""
    builder = _make_builder(ctx.obj['settings'], image, username, password, no_default_credentials)
    data = builder.configuration.model_dump(mode='json', exclude_none=True)
    click.echo(yaml.safe_dump(data, sort_keys=False), nl=False)


@cli.command()
@_builder_options
@click.option('--timeout', '-t', type=float, default=None, help='Seconds to wait for readiness')
@click.option('--detach', '-d', is_flag=True, help='Leave the container running and exit')
@click.pass_context
def up(ctx, image, username, password, no_default_credentials, timeout, detach):
    """Start a MongoDB container and wait until it is ready."""
    settings = ctx.obj['settings']
    if timeout is not None:
        try:
            settings = RuntimeSettings.model_validate({**settings.model_dump(), 'startup_timeout': timeout})
        except ValidationError as e:
            click.echo(f"Error: invalid --timeout: {e.errors()[0]['msg']}")
            ctx.exit(1)

    builder = _make_builder(settings, image, username, password, no_default_credentials)
    try:
        container = builder.build()
        asyncio.run(container.start())
    except MongoBoxError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    click.echo(container.get_connection_string())
    if detach:
        return

    click.echo("Running... Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        click.echo("\nStopping container...")
        asyncio.run(container.stop())


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
