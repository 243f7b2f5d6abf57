from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Optional

from .errors import HueError

if TYPE_CHECKING:
    from .bridge import Bridge


UPNP_NAMESPACE = "urn:schemas-upnp-org:device-1-0"


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


@dataclass(frozen=True)
class BridgeInfo:
    """Device section of the bridge's UPnP ``description.xml``."""

    device_type: str = ""
    friendly_name: str = ""
    manufacturer: str = ""
    manufacturer_url: str = ""
    model_description: str = ""
    model_name: str = ""
    model_number: str = ""
    model_url: str = ""
    serial_number: str = ""
    udn: str = ""

    # field name -> element name inside <device>
    _XML_TAGS = {
        "device_type": "deviceType",
        "friendly_name": "friendlyName",
        "manufacturer": "manufacturer",
        "manufacturer_url": "manufacturerURL",
        "model_description": "modelDescription",
        "model_name": "modelName",
        "model_number": "modelNumber",
        "model_url": "modelURL",
        "serial_number": "serialNumber",
        "udn": "UDN",
    }

    @classmethod
    def from_xml(cls, data: bytes | str) -> BridgeInfo:
        """Parse a description document.

        Raises ``xml.etree.ElementTree.ParseError`` on malformed XML and
        ``ValueError`` when the document has no ``<root><device>`` element.
        Namespaces are ignored.
        """
        if isinstance(data, str):
            data = data.strip().encode("utf-8")
        else:
            data = data.strip()
        root = ET.fromstring(data)
        if _local(root.tag) != "root":
            raise ValueError(f"unexpected document element <{_local(root.tag)}>")
        device = next((el for el in root if _local(el.tag) == "device"), None)
        if device is None:
            raise ValueError("description has no <device> element")

        values = {_local(el.tag): (el.text or "").strip() for el in device}
        return cls(
            **{name: values.get(tag, "") for name, tag in cls._XML_TAGS.items()}
        )

    def to_xml(self) -> bytes:
        root = ET.Element("root", xmlns=UPNP_NAMESPACE)
        device = ET.SubElement(root, "device")
        for f in fields(self):
            ET.SubElement(device, self._XML_TAGS[f.name]).text = getattr(self, f.name)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)


@dataclass
class LightState:
    on: Optional[bool] = None
    bri: Optional[int] = None
    hue: Optional[int] = None
    sat: Optional[int] = None
    xy: Optional[list[float]] = None
    ct: Optional[int] = None
    alert: Optional[str] = None
    effect: Optional[str] = None
    colormode: Optional[str] = None
    reachable: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict) -> LightState:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def _require_bridge(resource: Any) -> Bridge:
    if resource.bridge is None:
        raise HueError(f"{type(resource).__name__} {resource.index} is not bound to a bridge")
    return resource.bridge


@dataclass
class Light:
    index: int
    name: str = ""
    type: str = ""
    model_id: str = ""
    manufacturer_name: str = ""
    unique_id: str = ""
    sw_version: str = ""
    state: LightState = field(default_factory=LightState)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)
    bridge: Optional[Bridge] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(
        cls, index: int, data: dict, bridge: Optional[Bridge] = None
    ) -> Light:
        return cls(
            index=index,
            name=data.get("name", ""),
            type=data.get("type", ""),
            model_id=data.get("modelid", ""),
            manufacturer_name=data.get("manufacturername", ""),
            unique_id=data.get("uniqueid", ""),
            sw_version=data.get("swversion", ""),
            state=LightState.from_dict(data.get("state") or {}),
            raw=data,
            bridge=bridge,
        )

    def _path(self, suffix: str = "") -> str:
        bridge = _require_bridge(self)
        return f"/api/{bridge.username}/lights/{self.index}{suffix}"

    def set_state(self, **state: Any) -> None:
        bridge = _require_bridge(self)
        bridge.put(self._path("/state"), state)
        for key, value in state.items():
            if hasattr(self.state, key):
                setattr(self.state, key, value)

    def on(self) -> None:
        self.set_state(on=True)

    def off(self) -> None:
        self.set_state(on=False)

    def rename(self, name: str) -> None:
        bridge = _require_bridge(self)
        bridge.put(self._path(), {"name": name})
        self.name = name

    def refresh(self) -> None:
        fresh = _require_bridge(self).get_light_by_index(self.index)
        for f in fields(self):
            setattr(self, f.name, getattr(fresh, f.name))


@dataclass
class Sensor:
    index: int
    name: str = ""
    type: str = ""
    model_id: str = ""
    manufacturer_name: str = ""
    unique_id: str = ""
    sw_version: str = ""
    state: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)
    bridge: Optional[Bridge] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(
        cls, index: int, data: dict, bridge: Optional[Bridge] = None
    ) -> Sensor:
        return cls(
            index=index,
            name=data.get("name", ""),
            type=data.get("type", ""),
            model_id=data.get("modelid", ""),
            manufacturer_name=data.get("manufacturername", ""),
            unique_id=data.get("uniqueid", ""),
            sw_version=data.get("swversion", ""),
            state=dict(data.get("state") or {}),
            config=dict(data.get("config") or {}),
            raw=data,
            bridge=bridge,
        )

    def rename(self, name: str) -> None:
        bridge = _require_bridge(self)
        bridge.put(f"/api/{bridge.username}/sensors/{self.index}", {"name": name})
        self.name = name

    def refresh(self) -> None:
        fresh = _require_bridge(self).get_sensor_by_index(self.index)
        for f in fields(self):
            setattr(self, f.name, getattr(fresh, f.name))


@dataclass
class Scene:
    id: str
    name: str = ""
    lights: list[str] = field(default_factory=list)
    owner: str = ""
    recycle: bool = False
    locked: bool = False
    last_updated: Optional[str] = None
    version: Optional[int] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, scene_id: str, data: dict) -> Scene:
        return cls(
            id=scene_id,
            name=data.get("name", ""),
            lights=list(data.get("lights") or []),
            owner=data.get("owner", ""),
            recycle=bool(data.get("recycle", False)),
            locked=bool(data.get("locked", False)),
            last_updated=data.get("lastupdated"),
            version=data.get("version"),
            raw=data,
        )
