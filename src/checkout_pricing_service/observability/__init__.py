"""OpenTelemetry instrumentation and logging setup."""

from checkout_pricing_service.observability.config import configure_logging, setup_observability
from checkout_pricing_service.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
