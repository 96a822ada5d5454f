from __future__ import annotations

import copy
import json
import threading

import pytest

from huecli import cli
from huecli.errors import BridgeError


def make_lights():
    return {
        "1": {"name": "Kitchen", "state": {"on": True, "bri": 200}},
        "2": {"name": "Hall", "state": {"on": False, "bri": 100}},
        "3": {"name": "Desk", "state": {"on": True, "bri": 10}},
        "4": {"name": "Porch", "state": {"on": False, "bri": 254}},
    }


class FakeBridge:
    """In-memory stand-in for huecli.api.Client."""

    def __init__(self, lights=None, unauthorized=False, broken=()):
        self.data = lights if lights is not None else make_lights()
        self.unauthorized = unauthorized
        self.broken = set(broken)
        self.calls = []
        self.renamed = {}
        self._lock = threading.Lock()

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def _check(self, light_id):
        if light_id not in self.data:
            raise BridgeError(3, f"resource, /lights/{light_id}, not available", f"/lights/{light_id}")
        if light_id in self.broken:
            raise BridgeError(201, "parameter, bri, is not modifiable. Device is set to off.")

    def config(self):
        if self.unauthorized:
            raise BridgeError(1, "unauthorized user", "/")
        return {"name": "Philips hue", "apiversion": "1.50.0"}

    def lights(self):
        self._record("lights")
        if self.unauthorized:
            raise BridgeError(1, "unauthorized user", "/lights")
        return copy.deepcopy(self.data)

    def light(self, light_id):
        self._record("light", light_id)
        if light_id not in self.data:
            raise BridgeError(3, f"resource, /lights/{light_id}, not available", f"/lights/{light_id}")
        return copy.deepcopy(self.data[light_id])

    def state(self, light_id, patch):
        self._record("state", light_id, dict(patch))
        self._check(light_id)
        with self._lock:
            self.data[light_id]["state"].update(patch)
        return [{"success": {f"/lights/{light_id}/state/{k}": v}} for k, v in patch.items()]

    def on(self, light_id):
        return self.state(light_id, {"on": True})

    def off(self, light_id):
        return self.state(light_id, {"on": False})

    def rgb(self, light_id, r, g, b):
        self._record("rgb", light_id, (r, g, b))
        self._check(light_id)
        return [{"success": {f"/lights/{light_id}/state/hue": 0}}]

    def register(self):
        return "generated-user"

    def rename(self, light_id, name):
        self._check(light_id)
        self.renamed[light_id] = name
        return [{"success": {f"/lights/{light_id}/name": name}}]

    def targets(self, kind):
        return sorted(c[1] for c in self.calls if c[0] == kind)


@pytest.fixture
def bridge(monkeypatch):
    fake = FakeBridge()
    monkeypatch.setattr(cli, "Client", lambda **kwargs: fake)
    return fake


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "hue.json"
    path.write_text(json.dumps({"host": "10.0.0.2", "username": "abc123"}))
    return path
