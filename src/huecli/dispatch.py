from __future__ import annotations

import concurrent.futures
import dataclasses
import json
import logging
import sys
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

import requests
from rich.console import Console

from .actions import Action, Brightness, Color, Effect, PowerOff, PowerOn, RawState
from .errors import BridgeError

logger = logging.getLogger(__name__)

MAX_WORKERS = 16


@dataclasses.dataclass
class LightResult:
    id: str
    name: str
    action: Optional[str] = None
    response: Any = None
    error: Optional[Dict[str, Any]] = None
    before: Optional[int] = None
    after: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.action is None:
            # info query: the light object itself, or the error
            if self.error is not None:
                return {"id": self.id, "error": self.error}
            return self.response
        out: Dict[str, Any] = {"id": self.id, "name": self.name, "action": self.action,
                               "error": self.error, "response": self.response}
        if self.after is not None:
            out["bri"] = {"before": self.before, "after": self.after}
        return out


def _error_dict(e: Exception) -> Dict[str, Any]:
    if isinstance(e, BridgeError):
        return e.to_dict()
    return {"type": None, "address": "", "description": str(e)}


def _fan_out(fn: Callable[[str], LightResult], ids: Sequence[str]) -> Iterator[LightResult]:
    if not ids:
        return
    with concurrent.futures.ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(ids))) as pool:
        futures = [pool.submit(fn, i) for i in ids]
        for fut in concurrent.futures.as_completed(futures):
            yield fut.result()


def query(client: Any, ids: Sequence[str], names: Optional[Mapping[str, str]] = None) -> Iterator[LightResult]:
    """Fetch each light's current state concurrently; yields as they complete."""
    names = names or {}

    def _one(light_id: str) -> LightResult:
        res = LightResult(id=light_id, name=names.get(light_id, f"light {light_id}"))
        try:
            data = client.light(light_id)
        except (BridgeError, requests.RequestException) as e:
            logger.debug("light %s: %s", light_id, e)
            res.error = _error_dict(e)
            return res
        data["id"] = light_id
        res.response = data
        res.name = data.get("name", res.name)
        return res

    return _fan_out(_one, ids)


def apply_action(client: Any, light_id: str, action: Action) -> Dict[str, Any]:
    """Run one action against one light. Returns extra result fields."""
    if isinstance(action, PowerOn):
        return {"response": client.on(light_id)}
    if isinstance(action, PowerOff):
        return {"response": client.off(light_id)}
    if isinstance(action, Effect):
        return {"response": client.state(light_id, action.patch)}
    if isinstance(action, RawState):
        return {"response": client.state(light_id, dict(action.patch))}
    if isinstance(action, Brightness):
        data = client.light(light_id)
        before = int((data.get("state") or {}).get("bri") or 0)
        after = action.expr.apply(before)
        return {"response": client.state(light_id, {"bri": after}), "before": before, "after": after}
    if isinstance(action, Color):
        r, g, b = action.rgb
        return {"response": client.rgb(light_id, r, g, b)}
    raise TypeError(f"unsupported action {action!r}")


def dispatch(client: Any, ids: Sequence[str], action: Action,
             names: Optional[Mapping[str, str]] = None) -> Iterator[LightResult]:
    """Apply ``action`` to every id concurrently.

    Each light is independent: a failure is recorded on that light's result
    and the rest carry on. Results are yielded in completion order.
    """
    names = names or {}

    def _one(light_id: str) -> LightResult:
        res = LightResult(id=light_id, name=names.get(light_id, f"light {light_id}"), action=action.name)
        try:
            for k, v in apply_action(client, light_id, action).items():
                setattr(res, k, v)
        except (BridgeError, requests.RequestException) as e:
            logger.debug("light %s %s failed: %s", light_id, action.name, e)
            res.error = _error_dict(e)
        return res

    return _fan_out(_one, ids)


def summarize(res: LightResult) -> str:
    if res.action is None:
        if res.error is not None:
            return f'{res.id} "error" {res.error["description"]} (type {res.error["type"]})'
        state = res.response.get("state") or {}
        return f"{res.id} {'on' if state.get('on') else 'off'} {state.get('bri')} {res.name}"
    if res.error is not None:
        return f"{res.name} failed: {res.error['description']}"
    if res.action == "on":
        return f"💡 {res.name} was turned on"
    if res.action == "off":
        return f"🌑 {res.name} was turned off"
    if res.action == "brightness":
        return f"💡 {res.name} brightness updated: {res.before} → {res.after}"
    if res.action == "state":
        return f"{res.name} state changed"
    if res.action == "color":
        return f"{res.name} color changed"
    return f"{res.name} {Effect(res.action).message}"


def report(results: Iterable[LightResult], ids: Sequence[str], as_json: bool,
           console: Optional[Console] = None, err_console: Optional[Console] = None) -> List[LightResult]:
    """Print results, one line each as they arrive, or a single JSON document at the end."""
    collected: List[LightResult] = []
    if as_json:
        collected = list(results)
        order = {i: n for n, i in enumerate(ids)}
        collected.sort(key=lambda r: order.get(r.id, len(order)))
        json.dump([r.to_dict() for r in collected], sys.stdout, indent=2)
        sys.stdout.write("\n")
        return collected
    console = console or Console()
    err_console = err_console or Console(stderr=True)
    for res in results:
        collected.append(res)
        # failed actions go to stderr; query errors stay in the listing
        out = err_console if (res.action is not None and not res.ok) else console
        out.print(summarize(res), markup=False, emoji=False, highlight=False, soft_wrap=True)
    return collected
