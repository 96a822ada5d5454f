from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List

import requests
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from . import __version__
from .actions import build_action
from .api import APP_NAME, Client, discover, latest_version
from .config import Config, default_log_level, default_timeout, resolve_config, save_config
from .dispatch import dispatch, query, report
from .errors import BridgeError, ConfigError, HueError, UsageError
from .selector import effective_action, resolve_selection

logger = logging.getLogger(__name__)

EXAMPLES = """\
examples
  hue config                  # view the hue config
  hue lights                  # get a list of lights
  hue lights 5                # get information about light 5
  hue lights 5,6,7 on         # turn lights 5 6 and 7 on
  hue lights on               # turn all lights on
  hue lights 1 ff0000         # turn light 1 red
  hue lights 1 red            # same as above
  hue lights 1 +10            # increase the brightness by 10 (out of 254)
  hue lights 1 -10            # decrease the brightness by 10 (out of 254)
  hue lights 1 =100           # set the brightness to 100 (out of 254)
  hue lights 1 +10%           # increase the brightness by 10%
  hue lights 1 -10%           # decrease the brightness by 10%
  hue lights 1 =100%          # set the brightness to 100%
  hue lights 4,5 colorloop    # enable the colorloop effect on lights 4 and 5
  hue lights 4,5 alert        # blink lights 4 and 5 for 30 seconds
  hue lights 4,5 clear        # clear any effects on lights 4 and 5
  hue lights 1 state          # set the state on light 1 as passed in as JSON over stdin
  hue rename 1 light-name     # set light 1's name to the given string
  hue lights reset            # reset lamps to default (on, as if just switched)
  hue lights 1,2 reset        # reset just bulbs 1 and 2
  hue help                    # this message
  hue register                # register this app to hue
  hue search                  # search for hue base stations
  hue alias                   # shows all the defined aliases
  hue alias bedroom 8,9,10    # creates an alias allowing `hue lights bedroom on` and so on
"""

HOST_NOT_SET = (
    "error: host not set\n"
    "\n"
    "search for hosts with `hue search`\n"
    "then run with `-H <host>`"
)


class _Parser(argparse.ArgumentParser):
    # usage errors exit 1, not argparse's 2
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _err(msg: str) -> None:
    Console(stderr=True).print(msg, style="red", markup=False, emoji=False, highlight=False, soft_wrap=True)


def _out(msg: str) -> None:
    Console().print(msg, markup=False, emoji=False, highlight=False, soft_wrap=True)


def _dump(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2)
    sys.stdout.write("\n")


def _setup_logging(level_name: str) -> None:
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _client(args: argparse.Namespace, cfg: Config) -> Client:
    if not cfg.host:
        raise ConfigError(HOST_NOT_SET)
    return Client(host=cfg.host, username=cfg.username, app_name=APP_NAME, timeout=args.timeout)


def _version_tuple(v: str) -> tuple:
    out = []
    for part in v.split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        out.append(int(digits) if digits else 0)
    return tuple(out)


def cmd_config(args: argparse.Namespace, cfg: Config) -> int:
    client = _client(args, cfg)
    _dump(client.config())
    return 0


def cmd_lights(args: argparse.Namespace, cfg: Config) -> int:
    words: List[str] = list(args.words or [])
    if len(words) > 2:
        raise UsageError(f"unexpected arguments: {' '.join(words[2:])}")
    action = None
    if words:
        token = effective_action(words[0], words[1] if len(words) > 1 else None)
        # bad colors and stdin are dealt with before anything is sent
        action = build_action(token, cfg.colors, sys.stdin) if token else None
    client = _client(args, cfg)
    # listing the lights also tells us whether the app is registered
    lights: Dict[str, Any] = client.lights()

    if not words:
        if args.json:
            _dump(lights)
            return 0
        table = Table(title=f"Lights ({len(lights)})")
        table.add_column("ID", justify="right")
        table.add_column("State")
        table.add_column("Bri", justify="right")
        table.add_column("Name")
        for key, light in lights.items():
            state = light.get("state") or {}
            table.add_row(
                Text(str(key)), Text("on" if state.get("on") else "off"),
                Text(str(state.get("bri", ""))), Text(str(light.get("name", ""))),
            )
        Console().print(table)
        return 0

    selection = resolve_selection(words[0], words[1] if len(words) > 1 else None, lights.keys(), cfg.alias)
    names = {str(k): str(v.get("name", "")) for k, v in lights.items()}
    if action is None:
        report(query(client, selection.ids, names), selection.ids, args.json)
        return 0
    report(dispatch(client, selection.ids, action, names), selection.ids, args.json)
    return 0


def cmd_register(args: argparse.Namespace, cfg: Config) -> int:
    if cfg.exists():
        _err(f"A config file already exists at {cfg.path}\n"
             "please remove it before attempting to register a new hub")
        return 1
    client = _client(args, cfg)
    _out("Please go and press the link button on your base station")
    try:
        username = client.register()
    except BridgeError as e:
        _err(f"failed to pair to Hue Base Station {cfg.host}: {e.description}")
        return 1
    _out("Hue Base Station paired!")
    _out(f"username: {username}")
    cfg = cfg.with_username(username)
    save_config(cfg.path, cfg.stored)
    _out(f"config file written to {cfg.path}")
    return 0


def cmd_alias(args: argparse.Namespace, cfg: Config) -> int:
    words = list(args.words or [])
    if not words:
        _dump(dict(cfg.alias))
        return 0
    if len(words) != 2:
        raise UsageError("wrong usage of alias, run `hue help`")
    cfg = cfg.with_alias(words[0], words[1])
    save_config(cfg.path, cfg.stored)
    _out(f"config in {cfg.path} updated")
    return 0


def cmd_search(args: argparse.Namespace, cfg: Config) -> int:
    stations = discover(timeout=args.timeout)
    if args.json:
        _dump(stations)
        return 0
    labels = [str(s.get("internalipaddress") or s.get("id") or s) if isinstance(s, dict) else str(s)
              for s in stations]
    if not labels:
        _out("No stations found. Check your network connection.")
    elif len(labels) == 1:
        _out(f"1 station found: {labels[0]}")
    else:
        _out(f"{len(labels)} stations found:\n")
        for i, name in enumerate(labels, 1):
            _out(f"{i}: {name}")
    return 0


def cmd_rename(args: argparse.Namespace, cfg: Config) -> int:
    client = _client(args, cfg)
    try:
        client.rename(args.light_id, args.name)
    except BridgeError as e:
        if e.unauthorized:
            raise
        _err(f"problem renaming light: {e.description}")
        return 1
    _out(f"light {args.light_id} renamed")
    return 0


def cmd_updates(args: argparse.Namespace) -> int:
    try:
        latest = latest_version(APP_NAME, timeout=args.timeout)
    except (requests.RequestException, KeyError, ValueError) as e:
        _err(f"failed to check for updates: {e}")
        return 1
    if _version_tuple(latest) > _version_tuple(__version__):
        _out(f"update available: {__version__} -> {latest}")
        return 1
    _out(f"{APP_NAME} is up to date ({__version__})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog="hue",
        description="control philips hue over the command line",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-c", "--config", default=None, help="config file, defaults to ~/.hue.json")
    p.add_argument("-H", "--host", default=None, help="the hostname or ip of the bridge to control")
    p.add_argument("-j", "--json", action="store_true", help="force output to be in json")
    p.add_argument("-u", "--updates", action="store_true", help="check for available updates")
    p.add_argument("-v", "--version", action="version", version=__version__,
                   help="print the version number and exit")
    p.add_argument("--timeout", type=float, default=None, help="HTTP timeout seconds (default $HUE_TIMEOUT or 5)")
    sub = p.add_subparsers(dest="cmd", metavar="command")

    sc = sub.add_parser("config", help="view the bridge config")
    sc.set_defaults(func=cmd_config)

    sl = sub.add_parser("lights", aliases=["light", "list"], help="list, query and control lights")
    # REMAINDER so brightness tokens like -10% are not taken for options
    sl.add_argument("words", nargs=argparse.REMAINDER, metavar="ARGS")
    sl.set_defaults(func=cmd_lights)

    sr = sub.add_parser("register", help="register this app with the bridge")
    sr.set_defaults(func=cmd_register)

    sa = sub.add_parser("alias", help="show aliases, or define one: alias <name> <ids>")
    sa.add_argument("words", nargs="*", metavar="ARGS")
    sa.set_defaults(func=cmd_alias)

    ss = sub.add_parser("search", help="search for hue base stations")
    ss.set_defaults(func=cmd_search)

    sn = sub.add_parser("rename", help="rename a light")
    sn.add_argument("light_id")
    sn.add_argument("name")
    sn.set_defaults(func=cmd_rename)

    sh = sub.add_parser("help", help="print this message")
    def _help(args: argparse.Namespace, cfg: Config) -> int:
        p.print_help()
        return 0
    sh.set_defaults(func=_help)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        _setup_logging(default_log_level())
        if args.timeout is None:
            args.timeout = default_timeout()
        if args.updates:
            return cmd_updates(args)
        if getattr(args, "func", None) is None:
            raise UsageError("unknown command: run `hue help` for more information")
        overrides = {"host": args.host} if args.host else {}
        cfg = resolve_config(args.config, overrides, allow_missing=args.cmd == "register")
        return args.func(args, cfg)
    except BridgeError as e:
        if e.unauthorized:
            _err("error: application not registered, run `hue register` first")
        else:
            _err(f"error: {e.description} (type {e.type})")
        return 1
    except requests.RequestException as e:
        logger.debug("bridge request failed: %s", e)
        _err("Service unavailable. Please try again later.")
        return 1
    except HueError as e:
        _err(str(e))
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
