"""Bridge discovery, authentication and resource access.

Everything starts with a :class:`Bridge`. Find one with :func:`find_bridges`
or build one from a known address with :func:`new_bridge`, then call
:meth:`Bridge.login` with a stored token (or :meth:`Bridge.create_user` after
pressing the link button) before using the light, sensor and scene accessors.
"""

from __future__ import annotations

import io
import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable, Optional, TypeVar

from . import transport
from .config import DESCRIPTION_PATH, DISCOVERY_HOST, DISCOVERY_PATH
from .errors import (
    BridgeError,
    DecodeError,
    IndexOutOfBoundsError,
    NoBridgesFoundError,
    NotAuthenticatedError,
    NotFoundError,
)
from .models import BridgeInfo, Light, Scene, Sensor

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

NOT_AVAILABLE = "not available"


def _decode_json(body: bytes, what: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"unable to decode {what}: {exc}") from exc


class Bridge:
    def __init__(
        self,
        address: str,
        username: str = "",
        info: Optional[BridgeInfo] = None,
        bridge_id: str = "",
    ) -> None:
        self.address = address
        self.username = username
        self.info = info
        self.bridge_id = bridge_id

    def __repr__(self) -> str:
        return f"Bridge(address={self.address!r}, authenticated={bool(self.username)})"

    # -- transport -------------------------------------------------------

    def get(self, path: str) -> tuple[bytes, io.BytesIO]:
        return transport.get(self.address, path)

    def put(self, path: str, params: Any) -> tuple[bytes, io.BytesIO]:
        return transport.put(self.address, path, params)

    def post(self, path: str, params: Any = None) -> tuple[bytes, io.BytesIO]:
        return transport.post(self.address, path, params)

    def delete(self, path: str) -> None:
        transport.delete(self.address, path)

    # -- identity & auth -------------------------------------------------

    def get_info(self) -> BridgeInfo:
        _, reader = self.get(DESCRIPTION_PATH)
        try:
            info = BridgeInfo.from_xml(reader.read())
        except (ET.ParseError, ValueError) as exc:
            raise DecodeError(
                f"failed to decode xml response from bridge description: {exc}"
            ) from exc
        self.info = info
        _LOGGER.info("Connected to bridge: %s", info)
        return info

    def login(self, username: str) -> None:
        """Check that ``username`` has bridge access and make it active.

        The stored username only changes when the bridge accepts the token.
        """
        self.get(f"/api/{username}")
        self.username = username

    def create_user(self, device_type: str) -> str:
        """Register a new whitelist entry and return its generated token.

        The bridge only accepts this within 30 seconds of its link button
        being pressed. The token is also stored as the active username.
        """
        body, _ = self.post("/api", {"devicetype": device_type})
        data = _decode_json(body, "user registration response")
        try:
            username = next(
                item["success"]["username"]
                for item in data
                if isinstance(item, dict) and "success" in item
            )
        except (StopIteration, TypeError, KeyError) as exc:
            raise DecodeError(f"no username in user registration response: {data!r}") from exc
        self.username = username
        return username

    def delete_user(self, username: str) -> None:
        self._require_username()
        self.delete(f"/api/{self.username}/config/whitelist/{username}")

    # -- resources -------------------------------------------------------

    def _require_username(self) -> None:
        if not self.username:
            raise NotAuthenticatedError()

    def _collection(
        self, resource: str, build: Callable[[int, dict, Bridge], T]
    ) -> list[T]:
        self._require_username()
        body, _ = self.get(f"/api/{self.username}/{resource}")
        data = _decode_json(body, f"{resource} list")
        if not isinstance(data, dict):
            raise DecodeError(f"unable to decode {resource} list: expected an object")

        items = []
        # The bridge keys each object by its index and leaves it out of the body.
        for key, value in data.items():
            try:
                index = int(key)
            except ValueError as exc:
                raise DecodeError(f"unable to convert {resource} index {key!r} to integer") from exc
            if not isinstance(value, dict):
                raise DecodeError(f"unable to decode {resource} entry {key!r}: expected an object")
            items.append(build(index, value, self))
        return items

    def _item(
        self, resource: str, kind: str, index: int, build: Callable[[int, dict, Bridge], T]
    ) -> T:
        self._require_username()
        try:
            body, _ = self.get(f"/api/{self.username}/{resource}/{index}")
        except BridgeError as exc:
            if NOT_AVAILABLE in exc.description:
                raise IndexOutOfBoundsError(kind, index) from exc
            raise
        if NOT_AVAILABLE.encode() in body:
            raise IndexOutOfBoundsError(kind, index)
        data = _decode_json(body, f"{kind} data")
        if not isinstance(data, dict):
            raise DecodeError(f"unable to decode {kind} data: expected an object")
        return build(index, data, self)

    def get_all_lights(self) -> list[Light]:
        return self._collection("lights", Light.from_dict)

    def get_light_by_index(self, index: int) -> Light:
        return self._item("lights", "light", index, Light.from_dict)

    def get_light_by_name(self, name: str) -> Light:
        for light in self.get_all_lights():
            if light.name == name:
                return light
        raise NotFoundError("light", name)

    def find_new_lights(self) -> None:
        """Start a search for new lights.

        The bridge searches for about a minute and adds at most 15 lights;
        this returns as soon as the search has been started.
        """
        self._require_username()
        self.post(f"/api/{self.username}/lights")

    def get_all_sensors(self) -> list[Sensor]:
        return self._collection("sensors", Sensor.from_dict)

    def get_sensor_by_index(self, index: int) -> Sensor:
        return self._item("sensors", "sensor", index, Sensor.from_dict)

    def get_all_scenes(self) -> list[Scene]:
        self._require_username()
        body, _ = self.get(f"/api/{self.username}/scenes")
        data = _decode_json(body, "scene list")
        if not isinstance(data, dict):
            raise DecodeError("unable to decode scene list: expected an object")
        scenes = []
        for scene_id, scene in data.items():
            if not isinstance(scene, dict):
                raise DecodeError(f"unable to decode scenes entry {scene_id!r}: expected an object")
            scenes.append(Scene.from_dict(scene_id, scene))
        return scenes


def find_bridges(host: str = DISCOVERY_HOST, path: str = DISCOVERY_PATH) -> list[Bridge]:
    body, _ = transport.get(host, path)
    data = _decode_json(body, "bridge list")
    if not isinstance(data, list):
        raise DecodeError("unable to decode bridge list: expected an array")

    bridges = []
    for entry in data:
        try:
            bridges.append(
                Bridge(
                    address=entry["internalipaddress"],
                    bridge_id=str(entry.get("id", "")),
                )
            )
        except (TypeError, KeyError) as exc:
            raise DecodeError(f"unable to decode bridge list entry {entry!r}") from exc
    if not bridges:
        raise NoBridgesFoundError()
    return bridges


def new_bridge(address: str) -> Bridge:
    bridge = Bridge(address)
    # Fails fast when nothing answering at the address looks like a bridge.
    bridge.get_info()
    return bridge
