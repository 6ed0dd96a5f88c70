"""Logfire observability for the Smart Library core."""

import functools
import logging
import os
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

import logfire
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class ObservabilityConfig(BaseModel):
    """Configuration for Logfire observability."""

    token: str = Field(default_factory=lambda: os.getenv("LOGFIRE_TOKEN", ""))
    service_name: str = "smart-library"
    environment: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))

    enabled: bool = Field(
        default_factory=lambda: os.getenv("LOGFIRE_ENABLED", "true").lower() == "true"
    )
    console_output: bool = Field(
        default_factory=lambda: os.getenv("LOGFIRE_CONSOLE", "false").lower() == "true"
    )

    @property
    def send_to_logfire(self) -> bool:
        """Only ship spans when a token is configured."""
        return bool(self.token)


def initialize_observability(config: ObservabilityConfig | None = None) -> ObservabilityConfig:
    """Configure Logfire once at startup."""
    config = config or ObservabilityConfig()

    if not config.enabled:
        logger.debug("Observability disabled via configuration")
        return config

    logfire.configure(
        token=config.token or None,
        service_name=config.service_name,
        environment=config.environment,
        send_to_logfire=config.send_to_logfire,
        console=None if config.console_output else False,
    )
    logger.info(
        "Logfire configured (environment=%s, sending=%s)",
        config.environment,
        config.send_to_logfire,
    )
    return config


def traced(span_name: str, **static_attributes: Any) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a synchronous operation in a Logfire span."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with logfire.span(span_name, **static_attributes, **_span_arguments(kwargs)):
                return func(*args, **kwargs)

        return wrapper

    return decorator


def _span_arguments(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Keep only scalar keyword arguments as span attributes."""
    return {
        f"arg_{key}": value
        for key, value in kwargs.items()
        if isinstance(value, str | int | float | bool)
    }
