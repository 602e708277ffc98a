"""Local AS view required by the path builder.

The builder only needs four facts about the local AS; anything that
provides them satisfies :class:`LocalTopology`. :class:`StaticTopology` is a
plain in-memory implementation for callers that already know the values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol

from scionpath.utils.isd_as import format_isd_as

#: MTU assumed when a topology does not state one.
DEFAULT_MTU = 1472


class LocalTopology(Protocol):
    def local_isd_as(self) -> int: ...

    def is_core_as(self) -> bool: ...

    def mtu(self) -> int: ...

    def border_router_address(self, interface_id: int) -> str: ...


@dataclass(frozen=True)
class StaticTopology:
    """Fixed local AS description.

    Attributes:
        isd_as: ISD-AS of the local AS.
        core: Whether the local AS is a core AS.
        local_mtu: MTU inside the local AS.
        border_routers: Interface id to border-router underlay address
            (``"host:port"``).
    """

    isd_as: int
    core: bool = False
    local_mtu: int = DEFAULT_MTU
    border_routers: Mapping[int, str] = field(default_factory=dict)

    def local_isd_as(self) -> int:
        return self.isd_as

    def is_core_as(self) -> bool:
        return self.core

    def mtu(self) -> int:
        return self.local_mtu

    def border_router_address(self, interface_id: int) -> str:
        """Underlay address of the router owning ``interface_id``.

        Raises:
            KeyError: If the local AS has no such interface.
        """
        try:
            return self.border_routers[interface_id]
        except KeyError:
            raise KeyError(
                f"No border router for interface {interface_id} "
                f"in {format_isd_as(self.isd_as)}"
            ) from None
