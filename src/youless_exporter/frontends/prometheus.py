"""Prometheus frontend: metric descriptors, the YouLess collector and /metrics."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from youless_exporter.backends.base import Backend
from youless_exporter.frontends.base import Frontend

logger = logging.getLogger(__name__)

# ── Metric descriptors ───────────────────────────────────────────────


@dataclass(frozen=True)
class MetricDescriptor:
    """Static metadata of one exported metric family."""

    name: str
    documentation: str
    labels: tuple[str, ...] = ()
    kind: str = "counter"  # "counter" or "gauge"

    def family(self, namespace: str = "") -> Metric:
        """Return an empty metric family for this descriptor."""
        name = f"{namespace}_{self.name}" if namespace else self.name
        if self.kind == "gauge":
            return GaugeMetricFamily(name, self.documentation, labels=self.labels)
        return CounterMetricFamily(name, self.documentation, labels=self.labels)


class MetricDescriptors(NamedTuple):
    gas_consumption: MetricDescriptor
    kwh_consumption: MetricDescriptor
    kwh_production: MetricDescriptor
    pwr_current: MetricDescriptor


DESCRIPTORS = MetricDescriptors(
    gas_consumption=MetricDescriptor("gas_consumption_total", "gas consumption."),
    kwh_consumption=MetricDescriptor(
        "kwh_consumption_total", "Kwh power consumption.", labels=("tariff",)
    ),
    kwh_production=MetricDescriptor(
        "kwh_production_total", "Kwh power production.", labels=("tariff",)
    ),
    pwr_current=MetricDescriptor("pwr_current", "Current watt consumption", kind="gauge"),
)

TARIFF_LOW = "low"
TARIFF_HIGH = "high"


# ── Collector ────────────────────────────────────────────────────────


class YoulessCollector:
    """Custom collector that fetches one reading per scrape.

    A failed fetch yields a zero reading, so every scrape reports the same
    six samples and the endpoint keeps answering while the device is down.
    """

    def __init__(
        self,
        backend: Backend,
        descriptors: MetricDescriptors = DESCRIPTORS,
        namespace: str = "",
    ) -> None:
        self._backend = backend
        self._descriptors = descriptors
        self._namespace = namespace

    def describe(self) -> list[Metric]:
        return [descriptor.family(self._namespace) for descriptor in self._descriptors]

    def collect(self) -> Iterator[Metric]:
        reading = self._backend.fetch()
        gas, consumption, production, power = self.describe()

        gas.add_metric([], reading.gas)
        consumption.add_metric([TARIFF_LOW], reading.p1)
        consumption.add_metric([TARIFF_HIGH], reading.p2)
        production.add_metric([TARIFF_LOW], reading.n1)
        production.add_metric([TARIFF_HIGH], reading.n2)
        power.add_metric([], float(reading.power))

        yield from (gas, consumption, production, power)


# ── Frontend ─────────────────────────────────────────────────────────


class PrometheusFrontend(Frontend):
    """Serves the Prometheus text exposition of the meter on /metrics."""

    def __init__(self, backend: Backend, config: dict) -> None:
        super().__init__(backend, config)
        self._namespace: str = config.get("namespace", "")
        self._registry = CollectorRegistry()
        self._collector = YoulessCollector(backend, DESCRIPTORS, self._namespace)
        self._registry.register(self._collector)
        self._router = self._build_router()

    def get_router(self) -> APIRouter:
        return self._router

    async def start(self) -> None:
        logger.info(
            "Prometheus frontend serving %d metric families on /metrics (namespace=%r)",
            len(DESCRIPTORS),
            self._namespace,
        )

    async def stop(self) -> None:
        logger.info("Prometheus frontend stopped")

    def _build_router(self) -> APIRouter:
        router = APIRouter()
        registry = self._registry

        # Sync handler: FastAPI runs it on the threadpool, one fetch per request
        @router.get("/metrics")
        def metrics():
            """Prometheus text exposition of a fresh reading."""
            return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

        return router
