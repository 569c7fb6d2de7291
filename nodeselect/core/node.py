"""
NodeSelect Core: Node descriptor contract.

The selection engine only reads node attributes. Any object exposing the
attributes of ``NodeLike`` can be evaluated; ``NodeEntry`` is the concrete
immutable descriptor produced by the inventory loader.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Collection, FrozenSet, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class NodeLike(Protocol):
    """Attributes of a node read during selection."""

    nodename: str
    hostname: str
    tags: Collection[str]
    os_family: Optional[str]
    os_arch: Optional[str]
    os_name: Optional[str]
    os_version: Optional[str]
    attributes: Mapping[str, str]


@dataclass(frozen=True)
class NodeEntry:
    """Immutable node descriptor."""

    nodename: str
    hostname: str = ""
    tags: FrozenSet[str] = frozenset()
    os_family: Optional[str] = None
    os_arch: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Accept any iterable of tags and freeze the attribute map
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def __hash__(self) -> int:
        return hash(self.nodename)
