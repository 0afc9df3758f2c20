"""Example: Trigger a scene by name."""
import asyncio

from dirigera import load_hub


async def main():
    """Trigger the "Evening" scene."""
    async with load_hub("config.json") as hub:
        for scene in await hub.scenes():
            if scene.name == "Evening":
                await hub.trigger_scene(scene)


if __name__ == "__main__":
    asyncio.run(main())
