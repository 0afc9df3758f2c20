"""Shared sample data for the python-dirigera tests."""
import copy

import pytest

SAMPLE_LIGHT = {
    "id": "3b1a04db-9abe-4811-b60a-797970f51e8a_1",
    "type": "light",
    "deviceType": "light",
    "createdAt": "2023-10-29T11:20:13.000Z",
    "isReachable": True,
    "lastSeen": "2023-11-05T08:01:44.000Z",
    "isHidden": False,
    "attributes": {
        "customName": "Desk lamp",
        "firmwareVersion": "1.0.38",
        "hardwareVersion": "1",
        "manufacturer": "IKEA of Sweden",
        "model": "TRADFRI bulb E27 CWS 806lm",
        "productCode": "LED1924G9",
        "serialNumber": "84BA20FFFE5A5A5A",
        "otaStatus": "upToDate",
        "otaState": "readyToCheck",
        "otaProgress": 0,
        "otaPolicy": "autoUpdate",
        "isOn": True,
        "startupOnOff": "startPrevious",
        "lightLevel": 50,
        "permittingJoin": False,
        "colorMode": "temperature",
        "colorTemperature": 2700,
        "colorTemperatureMin": 4000,
        "colorTemperatureMax": 2202,
        "colorHue": 0.0,
        "colorSaturation": 0.0,
    },
    "capabilities": {
        "canSend": [],
        "canReceive": [
            "customName",
            "isOn",
            "lightLevel",
            "colorTemperature",
            "colorHue",
            "colorSaturation",
        ],
    },
    "room": {
        "id": "9c2e6a3d-1e0e-4c1b-9d7e-5b5e2c8f1a10",
        "name": "Office",
        "color": "ikea_green_no_65",
        "icon": "rooms_desk",
    },
    "remoteLinks": [],
}

SAMPLE_BLIND = {
    "id": "a1d7c3e4-0000-4b7c-9f3d-2b6a0c9d1e22_1",
    "type": "blind",
    "deviceType": "blinds",
    "createdAt": "2023-10-29T11:25:00.000Z",
    "isReachable": True,
    "lastSeen": "2023-11-05T08:00:00.000Z",
    "attributes": {
        "customName": "Bedroom blind",
        "batteryPercentage": 87,
        "blindsCurrentLevel": 0,
        "blindsTargetLevel": 0,
        "blindsState": "stopped",
    },
    "capabilities": {"canSend": [], "canReceive": ["customName", "blindsState"]},
    "remoteLinks": ["remote-1"],
}

SAMPLE_SCENE = {
    "id": "744173bf-f7d6-4f27-9dee-d7a2345ffe00",
    "type": "userScene",
    "info": {"name": "Evening", "icon": "scenes_cake"},
    "actions": [
        {
            "id": "3b1a04db-9abe-4811-b60a-797970f51e8a_1",
            "type": "device",
            "deviceId": "3b1a04db-9abe-4811-b60a-797970f51e8a_1",
            "attributes": {"isOn": True, "lightLevel": 30, "colorTemperature": 2202},
        }
    ],
    "commands": [],
    "triggers": [
        {
            "id": "b6f5c2d8-2a9e-4c87-8a51-3c6b6d0e9f01",
            "type": "app",
            "disabled": False,
            "triggeredAt": "2023-11-04T19:30:00.000Z",
        },
        {
            "id": "c0e1d2f3-0b1a-4d6c-9e8f-7a6b5c4d3e02",
            "type": "sunriseSunset",
            "disabled": True,
            "nextTriggerAt": "2023-11-05T15:42:00.000Z",
            "trigger": {"type": "sunset", "offset": -15},
            "endTriggerEvent": {"type": "duration", "trigger": {"duration": 3600}},
        },
    ],
    "undoAllowedDuration": 30,
    "createdAt": "2023-10-30T18:00:00.000Z",
    "lastCompleted": "2023-11-04T19:30:01.000Z",
    "lastTriggered": "2023-11-04T19:30:00.000Z",
}


@pytest.fixture
def light_data():
    """A light with colour temperature and hue support."""
    return copy.deepcopy(SAMPLE_LIGHT)


@pytest.fixture
def blind_data():
    """A blind without on/off support."""
    return copy.deepcopy(SAMPLE_BLIND)


@pytest.fixture
def scene_data():
    """A user scene with an app and a sunset trigger."""
    return copy.deepcopy(SAMPLE_SCENE)
