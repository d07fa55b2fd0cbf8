import json
import logging
import math
from typing import Any

import httpx

from youless_exporter.backends.base import (
    Backend,
    DeviceBodyError,
    DeviceDecodeError,
    DeviceTransportError,
    FetchError,
    Reading,
)

logger = logging.getLogger(__name__)

# JSON key -> (Reading attribute, value kind)
# Sample: [{"tm":1575316361,"net": 1133.932,"pwr": 431,"ts0":1535271600,"cs0": 0.000,
#           "ps0": 0,"p1": 4590.448,"p2": 4315.399,"n1": 2320.876,"n2": 5451.039,
#           "gas": 2878.709,"gts":1912022000}]
_FIELDS: dict[str, tuple[str, str]] = {
    "tm": ("timestamp", "uint"),
    "net": ("net_counter", "float"),
    "pwr": ("power", "int"),
    "ts0": ("s0_timestamp", "uint"),
    "cs0": ("s0_counter", "float"),
    "ps0": ("s0_power", "uint"),
    "p1": ("p1", "float"),
    "p2": ("p2", "float"),
    "n1": ("n1", "float"),
    "n2": ("n2", "float"),
    "gas": ("gas", "float"),
    "gts": ("gas_timestamp", "uint"),
}

_INT_RANGES: dict[str, tuple[int, int]] = {
    "int": (-(2**63), 2**63 - 1),
    "uint": (0, 2**64 - 1),
}


def _reject_constant(name: str) -> float:
    raise ValueError(f"Invalid JSON constant {name!r}")


def _coerce(key: str, value: Any, kind: str) -> int | float:
    """Convert a JSON value to the Python type of its Reading field."""
    if value is None:
        return 0.0 if kind == "float" else 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DeviceDecodeError(f"Field {key!r} is not a number: {value!r}")
    if kind == "float":
        try:
            number = float(value)
        except OverflowError as exc:
            raise DeviceDecodeError(f"Field {key!r} is out of range") from exc
        if not math.isfinite(number):
            raise DeviceDecodeError(f"Field {key!r} is not finite: {value!r}")
        return number
    # Integer fields take JSON integers only, 431.0 is rejected like 431.5
    if isinstance(value, float):
        raise DeviceDecodeError(f"Field {key!r} is not an integer: {value!r}")
    low, high = _INT_RANGES[kind]
    if not low <= value <= high:
        raise DeviceDecodeError(f"Field {key!r} is out of range: {value!r}")
    return value


def parse_youless_response(data: Any) -> Reading:
    """Parse the decoded JSON of a YouLess /e response into a Reading.

    The device answers with an array holding one object. Only the first
    element is used, later elements are ignored. Missing keys keep their
    zero value and unknown keys are skipped.

    Raises:
        DeviceDecodeError: if ``data`` is not a non-empty list of objects or a
            field holds a value of the wrong type.
    """
    if not isinstance(data, list):
        raise DeviceDecodeError(f"Expected a JSON array, got {type(data).__name__}")
    if not data:
        raise DeviceDecodeError("Empty JSON array, no reading available")

    entry = data[0]
    if not isinstance(entry, dict):
        raise DeviceDecodeError(f"Expected a JSON object, got {type(entry).__name__}")

    values = {
        attr: _coerce(key, entry[key], kind)
        for key, (attr, kind) in _FIELDS.items()
        if key in entry
    }
    return Reading(**values)


class YoulessBackend(Backend):
    """Backend that reads the YouLess LS-120 JSON endpoint once per fetch."""

    def __init__(self, config: dict) -> None:
        self._url: str = config["url"]
        self._timeout: float | None = config.get("timeout")
        self._client: httpx.Client | None = None

    async def start(self) -> None:
        # No timeout configured means httpx's own default applies
        kwargs: dict[str, Any] = {}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        self._client = httpx.Client(**kwargs)
        logger.info("YouLess backend started, reading %s on every scrape", self._url)

    async def stop(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        logger.info("YouLess backend stopped")

    def read(self) -> Reading:
        """Fetch and decode one reading, raising FetchError on any failure."""
        if self._client is None:
            raise DeviceTransportError(f"Failed calling {self._url}: backend not started")
        try:
            with self._client.stream("GET", self._url) as resp:
                resp.raise_for_status()
                try:
                    body = resp.read()
                except httpx.HTTPError as exc:
                    raise DeviceBodyError(
                        f"Failed reading response from {self._url}: {exc}"
                    ) from exc
        except httpx.HTTPStatusError as exc:
            raise DeviceTransportError(
                f"Failed calling {self._url}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DeviceTransportError(f"Failed calling {self._url}: {exc}") from exc

        try:
            data = json.loads(body, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as exc:
            raise DeviceDecodeError(f"Failed decoding response from {self._url}: {exc}") from exc

        try:
            return parse_youless_response(data)
        except DeviceDecodeError as exc:
            raise DeviceDecodeError(f"Failed decoding response from {self._url}: {exc}") from exc

    def fetch(self) -> Reading:
        try:
            reading = self.read()
        except FetchError as exc:
            logger.warning("%s, reporting zero reading", exc)
            return Reading()
        logger.debug("YouLess fetch OK: power=%d W", reading.power)
        return reading
