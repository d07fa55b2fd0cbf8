"""Abstract base class for exporter frontends."""

from abc import ABC, abstractmethod

from fastapi import APIRouter

from youless_exporter.backends.base import Backend


class Frontend(ABC):
    """A frontend exposes meter readings over a specific protocol/API."""

    def __init__(self, backend: Backend, config: dict) -> None:
        self._backend = backend

    @abstractmethod
    def get_router(self) -> APIRouter:
        """Return the APIRouter with this frontend's HTTP endpoints."""

    @abstractmethod
    async def start(self) -> None:
        """Start frontend services."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop frontend services."""
