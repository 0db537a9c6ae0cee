"""State layer — observable key-value store over the editor schema.

INVARIANT: Subscriber failures are warnings, never errors.
"""

from kllconf.state.store import ConfigureState

__all__ = ["ConfigureState"]
