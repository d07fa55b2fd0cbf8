from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Reading:
    """One snapshot of the meter state. All zeros means no data was fetched."""

    timestamp: int = 0  # Device clock (epoch seconds)
    net_counter: float = 0.0  # Net counter (kWh), roughly p1 + p2 - n1 - n2
    power: int = 0  # Actual power (W), negative when exporting
    s0_timestamp: int = 0  # Last S0 measurement (epoch seconds)
    s0_counter: float = 0.0  # S0 counter (kWh)
    s0_power: int = 0  # S0 computed power (W)
    p1: float = 0.0  # Consumption, low tariff (kWh)
    p2: float = 0.0  # Consumption, high tariff (kWh)
    n1: float = 0.0  # Production, low tariff (kWh)
    n2: float = 0.0  # Production, high tariff (kWh)
    gas: float = 0.0  # Gas counter (m^3)
    gas_timestamp: int = 0  # Last gas meter sample, yyMMddhhmm


class FetchError(Exception):
    """Fetching a reading from the device failed."""


class DeviceTransportError(FetchError):
    """The device could not be reached or answered with an error status."""


class DeviceBodyError(FetchError):
    """The response body could not be read."""


class DeviceDecodeError(FetchError):
    """The response body is not a usable reading."""


class Backend(ABC):
    """Abstract base class for meter data backends."""

    @abstractmethod
    async def start(self) -> None:
        """Open resources needed to talk to the device."""

    @abstractmethod
    async def stop(self) -> None:
        """Release resources opened by start()."""

    @abstractmethod
    def fetch(self) -> Reading:
        """Fetch a fresh reading. Returns Reading() instead of raising."""
