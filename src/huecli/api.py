from __future__ import annotations

import dataclasses
import logging
import socket
from typing import Any, Dict, List, Optional

import requests

from .colors import rgb_to_hsb
from .errors import BridgeError

logger = logging.getLogger(__name__)

DISCOVERY_URL = "https://discovery.meethue.com/"
PYPI_URL = "https://pypi.org/pypi/{name}/json"
APP_NAME = "huecli"


def raise_for_bridge_error(data: Any) -> Any:
    # The bridge answers 200 with a list of {"success": ...} / {"error": ...} entries
    if isinstance(data, list):
        for entry in data:
            if isinstance(entry, dict) and isinstance(entry.get("error"), dict):
                err = entry["error"]
                raise BridgeError(
                    int(err.get("type", 0)),
                    str(err.get("description", "unknown error")),
                    str(err.get("address", "")),
                )
    return data


@dataclasses.dataclass
class Client:
    host: str
    username: Optional[str] = None
    app_name: str = APP_NAME
    timeout: float = 5.0
    session: Optional[requests.Session] = None

    def _s(self) -> requests.Session:
        if self.session is None:
            self.session = requests.Session()
        return self.session

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        # an unset username still gets the bridge's "unauthorized user" reply
        return f"http://{self.host}/api/{self.username or 'nouser'}{path}"

    def _get(self, path: str) -> Any:
        url = self._url(path)
        logger.debug("GET %s", url)
        r = self._s().get(url, timeout=self.timeout)
        r.raise_for_status()
        return raise_for_bridge_error(r.json())

    def _put(self, path: str, payload: Dict[str, Any]) -> Any:
        url = self._url(path)
        logger.debug("PUT %s %s", url, payload)
        r = self._s().put(url, json=payload, timeout=self.timeout)
        r.raise_for_status()
        return raise_for_bridge_error(r.json())

    # --- Bridge ---
    def config(self) -> Dict[str, Any]:
        return self._get("/config")

    def register(self) -> str:
        """Pair with the bridge; the link button must have been pressed."""
        url = f"http://{self.host}/api"
        payload = {"devicetype": f"{self.app_name}#{socket.gethostname()}"[:40]}
        logger.debug("POST %s %s", url, payload)
        r = self._s().post(url, json=payload, timeout=self.timeout)
        r.raise_for_status()
        data = raise_for_bridge_error(r.json())
        try:
            username = data[0]["success"]["username"]
        except (IndexError, KeyError, TypeError):
            raise BridgeError(0, f"unexpected register response: {data}") from None
        self.username = username
        return username

    # --- Lights ---
    def lights(self) -> Dict[str, Any]:
        return self._get("/lights")

    def light(self, light_id: str) -> Dict[str, Any]:
        return self._get(f"/lights/{light_id}")

    def state(self, light_id: str, patch: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self._put(f"/lights/{light_id}/state", patch)

    def on(self, light_id: str) -> List[Dict[str, Any]]:
        return self.state(light_id, {"on": True})

    def off(self, light_id: str) -> List[Dict[str, Any]]:
        return self.state(light_id, {"on": False})

    def rgb(self, light_id: str, r: int, g: int, b: int) -> List[Dict[str, Any]]:
        return self.state(light_id, rgb_to_hsb(r, g, b))

    def rename(self, light_id: str, name: str) -> List[Dict[str, Any]]:
        return self._put(f"/lights/{light_id}", {"name": name})


def discover(timeout: float = 5.0, session: Optional[requests.Session] = None) -> List[Dict[str, Any]]:
    """Find bridges on the local network through the vendor discovery service.

    Returns the raw station records, each with at least ``id`` and
    ``internalipaddress``.
    """
    s = session or requests.Session()
    logger.debug("GET %s", DISCOVERY_URL)
    r = s.get(DISCOVERY_URL, timeout=timeout)
    r.raise_for_status()
    data = r.json()
    return data if isinstance(data, list) else []


def latest_version(name: str = APP_NAME, timeout: float = 5.0,
                   session: Optional[requests.Session] = None) -> str:
    s = session or requests.Session()
    url = PYPI_URL.format(name=name)
    logger.debug("GET %s", url)
    r = s.get(url, timeout=timeout)
    r.raise_for_status()
    return str(r.json()["info"]["version"])
