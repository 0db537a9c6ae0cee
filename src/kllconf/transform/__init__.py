"""Transform layer — persisted config <-> editable model.

``normalize`` and ``mangle`` are pure functions over domain models.
"""

from kllconf.transform.mangle import mangle, merge_config
from kllconf.transform.normalize import normalize

__all__ = ["mangle", "merge_config", "normalize"]
