from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from huebridge.errors import HueError
from huebridge.models import BridgeInfo, Light, LightState, Scene, Sensor

DESCRIPTION_XML = """
<?xml version="1.0" encoding="UTF-8" ?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
<specVersion>
<major>1</major>
<minor>0</minor>
</specVersion>
<URLBase>http://192.168.86.27:80/</URLBase>
<device>
<deviceType>urn:schemas-upnp-org:device:Basic:1</deviceType>
<friendlyName>Philips hue (192.168.86.27)</friendlyName>
<manufacturer>Signify</manufacturer>
<manufacturerURL>http://www.philips-hue.com</manufacturerURL>
<modelDescription>Philips hue Personal Wireless Lighting</modelDescription>
<modelName>Philips hue bridge 2015</modelName>
<modelNumber>BSB002</modelNumber>
<modelURL>http://www.philips-hue.com</modelURL>
<serialNumber>ecb5fa2a484e</serialNumber>
<UDN>uuid:2f402f80-da50-11e1-9b23-ecb5fa2a484e</UDN>
<presentationURL>index.html</presentationURL>
<iconList>
<icon>
<mimetype>image/png</mimetype>
<url>hue_logo_0.png</url>
</icon>
</iconList>
</device>
</root>
"""


def test_bridge_info_from_xml() -> None:
    info = BridgeInfo.from_xml(DESCRIPTION_XML)

    assert info.device_type == "urn:schemas-upnp-org:device:Basic:1"
    assert info.friendly_name == "Philips hue (192.168.86.27)"
    assert info.manufacturer == "Signify"
    assert info.model_name == "Philips hue bridge 2015"
    assert info.model_number == "BSB002"
    assert info.serial_number == "ecb5fa2a484e"
    assert info.udn == "uuid:2f402f80-da50-11e1-9b23-ecb5fa2a484e"


def test_bridge_info_reencodes_captured_fields() -> None:
    info = BridgeInfo.from_xml(DESCRIPTION_XML.encode())

    assert BridgeInfo.from_xml(info.to_xml()) == info


def test_bridge_info_without_namespace() -> None:
    info = BridgeInfo.from_xml(
        "<root><device><friendlyName>Hall</friendlyName></device></root>"
    )

    assert info.friendly_name == "Hall"
    assert info.serial_number == ""


def test_bridge_info_rejects_other_documents() -> None:
    with pytest.raises(ValueError):
        BridgeInfo.from_xml("<html><body>hello</body></html>")
    with pytest.raises(ET.ParseError):
        BridgeInfo.from_xml("not xml")


def test_light_from_dict() -> None:
    light = Light.from_dict(
        7,
        {
            "name": "Desk",
            "type": "Extended color light",
            "modelid": "LCT015",
            "uniqueid": "00:17:88:01",
            "state": {"on": True, "bri": 120, "xy": [0.3, 0.3], "mode": "homeautomation"},
        },
    )

    assert light.index == 7
    assert light.model_id == "LCT015"
    assert light.state == LightState(on=True, bri=120, xy=[0.3, 0.3])
    assert light.raw["state"]["mode"] == "homeautomation"


def test_unbound_light_refuses_calls() -> None:
    light = Light(index=1, name="Desk")

    with pytest.raises(HueError):
        light.on()


def test_sensor_from_dict() -> None:
    sensor = Sensor.from_dict(
        3,
        {
            "name": "Daylight",
            "type": "Daylight",
            "state": {"daylight": True},
            "config": {"on": True},
        },
    )

    assert sensor.index == 3
    assert sensor.state == {"daylight": True}
    assert sensor.config == {"on": True}


def test_scene_from_dict() -> None:
    scene = Scene.from_dict(
        "4e1c6b20e-on-0",
        {"name": "Relax", "lights": ["1", "2"], "owner": "abc", "version": 2},
    )

    assert scene.id == "4e1c6b20e-on-0"
    assert scene.lights == ["1", "2"]
    assert scene.version == 2
    assert scene.recycle is False


def test_sensor_state_is_independent_of_raw() -> None:
    data = {"name": "Motion", "state": {"presence": False}, "config": {"on": True}}
    sensor = Sensor.from_dict(5, data)

    sensor.state["presence"] = True
    sensor.config["on"] = False

    assert data["state"] == {"presence": False}
    assert sensor.raw["config"] == {"on": True}


def test_null_nested_objects() -> None:
    sensor = Sensor.from_dict(1, {"state": None, "config": None})
    scene = Scene.from_dict("abc", {"lights": None})

    assert sensor.state == {} and sensor.config == {}
    assert scene.lights == []
