"""This dumps the raw devices and scenes of a hub."""
import json
import logging

import asyncclick as click

from dirigera import DirigeraException, load_hub
from dirigera.config import DEFAULT_CONFIG_PATH


@click.command()
@click.option("-c", "--config", "config_path", default=DEFAULT_CONFIG_PATH)
@click.option("-o", "--output", default=None, help="Save the dump to this file.")
@click.option("-d", "--debug", is_flag=True)
async def cli(config_path, output, debug):
    """Dump the unparsed device and scene data of the hub."""
    if debug:
        logging.basicConfig(level=logging.DEBUG)

    hub = load_hub(config_path)
    try:
        devices = await hub.get("/devices")
        click.echo(click.style("== Devices ==", bold=True))
        click.echo(json.dumps(devices, sort_keys=True, indent=2))
        click.echo()

        scenes = await hub.get("/scenes")
        click.echo(click.style("== Scenes ==", bold=True))
        click.echo(json.dumps(scenes, sort_keys=True, indent=2))
    except DirigeraException as err:
        click.echo(f"Error: {err}")
        return
    finally:
        await hub.close()

    if output is not None:
        click.echo(f"Saving info to {output}")
        with open(output, "w") as f:
            json.dump({"devices": devices, "scenes": scenes}, f, sort_keys=True, indent=2)
            f.write("\n")


if __name__ == "__main__":
    cli()
