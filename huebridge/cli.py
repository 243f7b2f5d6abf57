from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .bridge import Bridge, find_bridges, new_bridge
from .config import DEFAULT_CONFIG_PATH, Config, resolve_config, save_config
from .errors import HueError


def _config_path(args: argparse.Namespace) -> Path:
    if args.config:
        return Path(args.config).expanduser()
    return DEFAULT_CONFIG_PATH


def _choose_bridge(bridges: list[Bridge]) -> Bridge:
    print("Multiple Hue bridges found:")
    for number, bridge in enumerate(bridges, start=1):
        print(f"{number}) {bridge.address} ({bridge.bridge_id or 'unknown id'})")
    while True:
        choice = input("Select a bridge: ").strip()
        if choice.isdigit() and 1 <= int(choice) <= len(bridges):
            return bridges[int(choice) - 1]
        print(f"Enter a number between 1 and {len(bridges)}.")


def _bridge_from_args(args: argparse.Namespace, authenticated: bool = True) -> Bridge:
    bridge_ip = getattr(args, "bridge_ip", None)
    username = getattr(args, "username", None)
    cfg = resolve_config(_config_path(args))
    bridge_ip = bridge_ip or cfg.bridge_ip
    username = username or cfg.username
    if not bridge_ip:
        raise SystemExit(
            "No bridge configured. Run `huebridge setup` or pass --bridge-ip."
        )

    bridge = Bridge(bridge_ip)
    if authenticated:
        if not username:
            raise SystemExit("No username configured. Run `huebridge register` first.")
        bridge.login(username)
    return bridge


def cmd_discover(args: argparse.Namespace) -> None:
    for bridge in find_bridges():
        print(bridge.address)


def cmd_info(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args, authenticated=False)
    info = bridge.get_info()
    print(f"{info.friendly_name}")
    print(f"  model:  {info.model_name} ({info.model_number})")
    print(f"  serial: {info.serial_number}")
    print(f"  udn:    {info.udn}")


def cmd_register(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args, authenticated=False)
    print(bridge.create_user(args.devicetype))


def cmd_setup(args: argparse.Namespace) -> None:
    config_path = _config_path(args)
    bridge_ip = args.bridge_ip
    if not bridge_ip:
        bridges = find_bridges()
        if len(bridges) == 1 or args.non_interactive:
            if len(bridges) > 1:
                raise SystemExit(
                    "Multiple Hue bridges found. Pass --bridge-ip or run setup interactively."
                )
            bridge_ip = bridges[0].address
        else:
            bridge_ip = _choose_bridge(bridges).address

    bridge = new_bridge(bridge_ip)
    username = args.username
    if username:
        bridge.login(username)
    else:
        if args.non_interactive:
            raise SystemExit(
                "Username is required in non-interactive mode. "
                "Run setup interactively or provide --username."
            )
        print("Press the Hue bridge button, then press Enter to register.")
        input()
        username = bridge.create_user(args.devicetype)

    save_config(config_path, Config(bridge_ip=bridge_ip, username=username))
    print(f"Saved config to {config_path}")


def cmd_lights(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args)
    for light in sorted(bridge.get_all_lights(), key=lambda light: light.index):
        status = "on" if light.state.on else "off"
        print(f"{light.index}\t{status}\t{light.name}")


def cmd_light(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args)
    if args.target.isdigit():
        light = bridge.get_light_by_index(int(args.target))
    else:
        light = bridge.get_light_by_name(args.target)
    print(f"{light.index}\t{light.name}\t{light.type}")
    print(f"  {light.state}")


def cmd_sensors(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args)
    for sensor in sorted(bridge.get_all_sensors(), key=lambda s: s.index):
        print(f"{sensor.index}\t{sensor.type}\t{sensor.name}")


def cmd_scenes(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args)
    for scene in sorted(bridge.get_all_scenes(), key=lambda s: s.name):
        print(f"{scene.id}\t{scene.name}\t{','.join(scene.lights)}")


def cmd_search(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args)
    bridge.find_new_lights()
    print("Searching for new lights; run `huebridge lights` in about a minute.")


def cmd_set(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args)
    light = bridge.get_light_by_index(args.index)

    payload: dict = {}
    if args.on is not None:
        payload["on"] = args.on
    if args.bri is not None:
        payload["bri"] = args.bri
    if args.hue is not None:
        payload["hue"] = args.hue
    if args.sat is not None:
        payload["sat"] = args.sat
    if not payload:
        raise SystemExit("No state provided. Use --on/--off, --bri, --hue, or --sat.")

    light.set_state(**payload)
    print(f"Light {light.index} updated.")


def cmd_delete_user(args: argparse.Namespace) -> None:
    bridge = _bridge_from_args(args)
    bridge.delete_user(args.token)
    print(f"Deleted user {args.token}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="huebridge",
        description="Discover and control a Hue bridge on the local network.",
    )
    parser.add_argument(
        "--config",
        help="Path to config JSON (default: ~/.config/huebridge/config.json)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log HTTP requests"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_discover = sub.add_parser("discover", help="List bridges on the network")
    p_discover.set_defaults(func=cmd_discover)

    p_info = sub.add_parser("info", help="Show the bridge description")
    p_info.add_argument("--bridge-ip")
    p_info.set_defaults(func=cmd_info)

    p_register = sub.add_parser("register", help="Register with the Hue bridge")
    p_register.add_argument("--bridge-ip")
    p_register.add_argument("--devicetype", default="huebridge#cli")
    p_register.set_defaults(func=cmd_register)

    p_setup = sub.add_parser(
        "setup", help="Discover bridge, register, and save config"
    )
    p_setup.add_argument("--bridge-ip")
    p_setup.add_argument("--username")
    p_setup.add_argument("--devicetype", default="huebridge#cli")
    p_setup.add_argument(
        "--non-interactive",
        action="store_true",
        help="Fail instead of prompting; requires explicit values",
    )
    p_setup.set_defaults(func=cmd_setup)

    for name, func, help_text in (
        ("lights", cmd_lights, "List lights"),
        ("sensors", cmd_sensors, "List sensors"),
        ("scenes", cmd_scenes, "List scenes"),
        ("search", cmd_search, "Search for new lights"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--bridge-ip")
        p.add_argument("--username")
        p.set_defaults(func=func)

    p_light = sub.add_parser("light", help="Show one light by index or name")
    p_light.add_argument("target")
    p_light.add_argument("--bridge-ip")
    p_light.add_argument("--username")
    p_light.set_defaults(func=cmd_light)

    p_set = sub.add_parser("set", help="Set a light's state")
    p_set.add_argument("index", type=int)
    p_set.add_argument("--bridge-ip")
    p_set.add_argument("--username")
    p_set.add_argument(
        "--on",
        dest="on",
        action="store_const",
        const=True,
        default=None,
        help="Turn the light on",
    )
    p_set.add_argument(
        "--off",
        dest="on",
        action="store_const",
        const=False,
        default=None,
        help="Turn the light off",
    )
    p_set.add_argument("--bri", type=int, help="Brightness 1-254")
    p_set.add_argument("--hue", type=int, help="Hue 0-65535")
    p_set.add_argument("--sat", type=int, help="Saturation 0-254")
    p_set.set_defaults(func=cmd_set)

    p_delete = sub.add_parser("delete-user", help="Remove a whitelist entry")
    p_delete.add_argument("token")
    p_delete.add_argument("--bridge-ip")
    p_delete.add_argument("--username")
    p_delete.set_defaults(func=cmd_delete_user)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except HueError as exc:
        raise SystemExit(f"Error: {exc}")
