"""
Registry of named, process-lifetime service singletons.

Commands look services up by name for the duration of one call; they do not
keep references between calls.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar, cast

from neuroshell.core.common.exceptions import (
    ServiceNotFoundError,
    ServiceRegistrationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceRegistry:
    """Name to service lookup table."""

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}

    def register(self, name: str, service: Any) -> None:
        """Register a service instance under `name`.

        Raises:
            ServiceRegistrationError: If the name is empty or already taken
        """
        if not isinstance(name, str) or not name:
            raise ServiceRegistrationError(
                "Service name must be a non-empty string.", service_name=name
            )
        if name in self._services:
            raise ServiceRegistrationError(
                f"Service '{name}' is already registered.", service_name=name
            )
        self._services[name] = service
        logger.debug(f"Registered service: {name}")

    def get(self, name: str) -> Any | None:
        return self._services.get(name)

    def get_required(self, name: str, service_type: type[T] | None = None) -> T:
        """Get a service by name, raising if it is missing.

        Args:
            name: Registered service name
            service_type: Optional type the service must be an instance of

        Raises:
            ServiceNotFoundError: If nothing is registered under `name`
            TypeError: If the service is not a `service_type`
        """
        service = self._services.get(name)
        if service is None:
            raise ServiceNotFoundError(name)
        if service_type is not None and not isinstance(service, service_type):
            raise TypeError(
                f"Service '{name}' is {type(service).__name__}, "
                f"expected {service_type.__name__}"
            )
        return cast(T, service)

    def has_service(self, name: str) -> bool:
        return name in self._services

    def names(self) -> list[str]:
        return sorted(self._services)
