"""OpenTelemetry instrumentation and observability utilities."""

from food_delivery_ledger.observability.config import configure_logging, setup_observability
from food_delivery_ledger.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
