"""NodeSelect Core - Shared constants, node contract and validators.

Import specific names from submodules:
    from nodeselect.core.constants import ErrorCode, FilterKey
    from nodeselect.core.node import NodeEntry
    from nodeselect.core.validators import ValidationError
"""

from nodeselect.core import constants, node, validators

__all__ = [
    "constants",
    "node",
    "validators",
]
