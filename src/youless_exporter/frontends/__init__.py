"""Frontend registry and factory."""

from youless_exporter.backends.base import Backend
from youless_exporter.frontends.base import Frontend
from youless_exporter.frontends.prometheus import PrometheusFrontend

_FRONTENDS: dict[str, type[Frontend]] = {
    "prometheus": PrometheusFrontend,
}


def create_frontend(frontend_type: str, backend: Backend, config: dict) -> Frontend:
    """Create a frontend instance by type name."""
    cls = _FRONTENDS.get(frontend_type)
    if cls is None:
        raise ValueError(
            f"Unknown frontend type: {frontend_type!r}. Available: {', '.join(_FRONTENDS)}"
        )
    return cls(backend, config)
