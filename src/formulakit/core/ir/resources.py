"""
Capability tags implied by formula elements.

The host checks these before running a project so that missing hardware or
permissions are reported up front.
"""

from __future__ import annotations

from enum import StrEnum

from formulakit.core.ir.elements import Function, Sensor


class Resource(StrEnum):
    """Hardware or permission capabilities a formula may require."""

    BLUETOOTH_SENSORS_ARDUINO = "BLUETOOTH_SENSORS_ARDUINO"
    SOCKET_RASPI = "SOCKET_RASPI"
    SENSOR_ACCELERATION = "SENSOR_ACCELERATION"
    SENSOR_INCLINATION = "SENSOR_INCLINATION"
    SENSOR_COMPASS = "SENSOR_COMPASS"
    SENSOR_GPS = "SENSOR_GPS"
    FACE_DETECTION = "FACE_DETECTION"
    BLUETOOTH_LEGO_NXT = "BLUETOOTH_LEGO_NXT"
    BLUETOOTH_LEGO_EV3 = "BLUETOOTH_LEGO_EV3"
    BLUETOOTH_PHIRO = "BLUETOOTH_PHIRO"
    ARDRONE_SUPPORT = "ARDRONE_SUPPORT"
    NFC_ADAPTER = "NFC_ADAPTER"
    COLLISION = "COLLISION"
    CAST_REQUIRED = "CAST_REQUIRED"
    MICROPHONE = "MICROPHONE"


FUNCTION_RESOURCES: dict[Function, Resource] = {
    Function.ARDUINOANALOG: Resource.BLUETOOTH_SENSORS_ARDUINO,
    Function.ARDUINODIGITAL: Resource.BLUETOOTH_SENSORS_ARDUINO,
    Function.RASPIDIGITAL: Resource.SOCKET_RASPI,
}


def _sensors(prefix: str) -> list[Sensor]:
    return [sensor for sensor in Sensor if sensor.name.startswith(prefix)]


SENSOR_RESOURCES: dict[Sensor, Resource] = {
    Sensor.X_ACCELERATION: Resource.SENSOR_ACCELERATION,
    Sensor.Y_ACCELERATION: Resource.SENSOR_ACCELERATION,
    Sensor.Z_ACCELERATION: Resource.SENSOR_ACCELERATION,
    Sensor.X_INCLINATION: Resource.SENSOR_INCLINATION,
    Sensor.Y_INCLINATION: Resource.SENSOR_INCLINATION,
    Sensor.COMPASS_DIRECTION: Resource.SENSOR_COMPASS,
    Sensor.LATITUDE: Resource.SENSOR_GPS,
    Sensor.LONGITUDE: Resource.SENSOR_GPS,
    Sensor.LOCATION_ACCURACY: Resource.SENSOR_GPS,
    Sensor.ALTITUDE: Resource.SENSOR_GPS,
    **{sensor: Resource.FACE_DETECTION for sensor in _sensors("FACE_")},
    **{sensor: Resource.BLUETOOTH_LEGO_NXT for sensor in _sensors("NXT_")},
    **{sensor: Resource.BLUETOOTH_LEGO_EV3 for sensor in _sensors("EV3_")},
    **{sensor: Resource.BLUETOOTH_PHIRO for sensor in _sensors("PHIRO_")},
    **{sensor: Resource.ARDRONE_SUPPORT for sensor in _sensors("DRONE_")},
    **{sensor: Resource.CAST_REQUIRED for sensor in _sensors("GAMEPAD_")},
    Sensor.NFC_TAG_MESSAGE: Resource.NFC_ADAPTER,
    Sensor.NFC_TAG_ID: Resource.NFC_ADAPTER,
    Sensor.COLLIDES_WITH_EDGE: Resource.COLLISION,
    Sensor.COLLIDES_WITH_FINGER: Resource.COLLISION,
    Sensor.LOUDNESS: Resource.MICROPHONE,
}

# Every collision probe element needs collision geometry
COLLISION_FORMULA_RESOURCE = Resource.COLLISION
