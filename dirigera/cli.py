"""python-dirigera cli tool."""
import asyncio
import functools
import logging
import os
import threading
from contextlib import asynccontextmanager
from pprint import pformat as pf

import asyncclick as click

from dirigera import (
    DirigeraException,
    DirigeraHub,
    HubConfig,
    HubEndpoint,
    PairingFlow,
    PairingState,
    load_config,
    save_config,
)
from dirigera.config import DEFAULT_CONFIG_PATH
from dirigera.pairing import DEFAULT_CLIENT_NAME

CONFIG_PATH_KEY = "dirigera.config_path"
HOST_KEY = "dirigera.host"

pass_hub = click.make_pass_decorator(DirigeraHub)


def handle_errors(func):
    """Report library errors as click errors instead of tracebacks."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except DirigeraException as err:
            raise click.ClickException(str(err)) from err

    return wrapper


def _endpoint(ip_address: str) -> HubEndpoint:
    try:
        return HubEndpoint(ip_address)
    except ValueError as err:
        raise click.BadParameter(f"'{ip_address}' is not a valid IP address") from err


@click.group(invoke_without_command=True)
@click.option(
    "--host",
    envvar="DIRIGERA_HOST",
    required=False,
    help="The IP address of the hub, overrides the configuration file.",
)
@click.option(
    "-t",
    "--token",
    envvar="DIRIGERA_TOKEN",
    required=False,
    help="The access token, overrides the configuration file.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    envvar="DIRIGERA_CONFIG",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Configuration file written by generate-token.",
)
@click.option("-d", "--debug", envvar="DIRIGERA_DEBUG", default=False, is_flag=True)
@click.version_option(package_name="python-dirigera")
@click.pass_context
async def cli(ctx, host, token, config_path, debug):
    """A tool for controlling devices through an IKEA Dirigera hub."""
    if debug:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    ctx.meta[CONFIG_PATH_KEY] = config_path
    ctx.meta[HOST_KEY] = host
    if ctx.invoked_subcommand == "generate-token":
        return

    if host is None or token is None:
        try:
            config = load_config(config_path)
        except DirigeraException as err:
            raise click.ClickException(str(err)) from err
        host = host or config.ip_address
        token = token or config.token
    try:
        hub = DirigeraHub.from_config(HubConfig(ip_address=host, token=token))
    except DirigeraException as err:
        raise click.ClickException(str(err)) from err

    @asynccontextmanager
    async def async_wrapped_hub(hub: DirigeraHub):
        try:
            yield hub
        finally:
            await hub.close()

    ctx.obj = await ctx.with_async_resource(async_wrapped_hub(hub))

    if ctx.invoked_subcommand is None:
        return await ctx.invoke(devices)


@cli.command(name="generate-token")
@click.argument("ip_address", required=False)
@click.option(
    "--name",
    default=DEFAULT_CLIENT_NAME,
    show_default=True,
    help="Name the hub shows for this client.",
)
@click.pass_context
@handle_errors
async def generate_token(ctx, ip_address, name):
    """Pair with the hub and store its access token."""
    config_path = ctx.meta[CONFIG_PATH_KEY]
    if os.path.exists(config_path):
        raise click.ClickException(f"'{config_path}' already exists!")

    ip_address = ip_address or ctx.meta[HOST_KEY]
    if ip_address is None:
        ip_address = click.prompt("What is the IP address of your Dirigera hub?")
    endpoint = _endpoint(ip_address)

    def on_state_change(state: PairingState):
        if state is PairingState.AwaitingUserConfirmation:
            click.echo("Press the action button on the bottom of your Dirigera hub")
        elif state is PairingState.Paired:
            click.echo(click.style("Paired", fg="green"))

    cancel = threading.Event()
    flow = PairingFlow(
        endpoint, client_name=name, cancel_event=cancel, on_state_change=on_state_change
    )
    click.echo(
        f"Pairing with {endpoint.ip_address}, "
        f"waiting up to {flow.max_wait:.0f} seconds for the button press"
    )
    try:
        token = await asyncio.to_thread(flow.run)
    finally:
        cancel.set()

    save_config(HubConfig(ip_address=endpoint.ip_address, token=token), config_path)
    click.echo(f"Configuration has been saved to '{config_path}'")


@cli.command()
@pass_hub
@handle_errors
async def devices(hub: DirigeraHub):
    """List all devices."""
    for device in await hub.devices():
        room = device.room.name if device.room else "Unknown"
        click.echo(
            f"{device.name:<20} {device.id:<40} {str(device.device_type):<20} {room}"
        )


@cli.command()
@click.argument("device_id")
@pass_hub
@handle_errors
async def device(hub: DirigeraHub, device_id):
    """Print out all attributes of a device."""
    dev = await hub.device(device_id)
    click.echo(click.style(f"== {dev.name} - {dev.device_type} ==", bold=True))
    click.echo(f"\tReachable: {dev.is_reachable}")
    click.echo(f"\tRoom:      {dev.room.name if dev.room else 'Unknown'}")
    click.echo(click.style("\t== Capabilities ==", bold=True))
    for capability in dev.capabilities.can_receive:
        click.echo(click.style(f"\t+ {capability.value}", fg="green"))
    click.echo(click.style("\t== Attributes ==", bold=True))
    click.echo(pf(dev.attributes.raw))


@cli.command()
@click.argument("device_id")
@pass_hub
@handle_errors
async def toggle(hub: DirigeraHub, device_id):
    """Toggle a device on or off."""
    dev = await hub.device(device_id)
    await hub.toggle_on_off(dev)
    click.echo(f"{dev.name} is now {'ON' if dev.attributes.is_on else 'OFF'}")


@cli.command(name="light-level")
@click.argument("device_id")
@click.argument("level", type=click.IntRange(0, 100))
@pass_hub
@handle_errors
async def light_level(hub: DirigeraHub, device_id, level: int):
    """Set the light level of a light."""
    dev = await hub.device(device_id)
    click.echo(f"Setting light level of {dev.name} to {level}")
    await hub.set_light_level(dev, level)


@cli.command()
@pass_hub
@handle_errors
async def scenes(hub: DirigeraHub):
    """List all scenes."""
    for scene in await hub.scenes():
        click.echo(f"{scene.name:<30} {scene.id}")


@cli.command()
@click.argument("scene_id")
@pass_hub
@handle_errors
async def trigger(hub: DirigeraHub, scene_id):
    """Trigger a scene."""
    scene = await hub.scene(scene_id)
    click.echo(f"Triggering {scene.name}")
    await hub.trigger_scene(scene)


@cli.command()
@click.argument("scene_id")
@pass_hub
@handle_errors
async def undo(hub: DirigeraHub, scene_id):
    """Undo the changes made by a scene."""
    scene = await hub.scene(scene_id)
    click.echo(f"Undoing {scene.name}")
    await hub.undo_scene(scene)


if __name__ == "__main__":
    cli()
