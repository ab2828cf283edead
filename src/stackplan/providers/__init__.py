"""Provider capability and the bundled simulated provider."""

from .base import Provider, ProviderResult
from .simulated import SimulatedProvider

__all__ = ["Provider", "ProviderResult", "SimulatedProvider"]
