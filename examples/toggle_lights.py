"""Example: Toggle all lights in a room."""
import asyncio

from dirigera import DeviceType, load_hub


async def main():
    """Toggle every light in the office."""
    async with load_hub("config.json") as hub:
        for device in await hub.devices():
            if device.device_type is DeviceType.Light and device.room is not None:
                if device.room.name == "Office":
                    await hub.toggle_on_off(device)


if __name__ == "__main__":
    asyncio.run(main())
