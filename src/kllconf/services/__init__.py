"""Service layer — mutation operations over a ConfigureState.

Services may import from domain, transform, and state layers.
"""

from kllconf.services.configure import ConfigureSession

__all__ = ["ConfigureSession"]
