"""Routing option resolution.

Each provider needs two routing parameters on the wire: whether to restrict
the search to direct (single-hop) routes, and an optional cap on the number
of hops. The request carries a tri-state flag; providers may carry a
configured hop limit. These rules decide what actually gets sent.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RouteOptions:
    """Routing parameters to put on a provider's wire call.

    None means "omit the parameter and let the provider choose".
    """

    only_direct_routes: Optional[bool] = None
    max_route_length: Optional[int] = None


def resolve_only_direct_routes(
    only_direct_routes: Optional[bool],
    hop_limit: Optional[int],
) -> Optional[bool]:
    """Resolve the effective direct-route flag.

    An explicit flag always wins. Otherwise a configured hop limit implies
    bounded multi-hop routing (False), and with neither the flag is left
    unset for the provider to decide.
    """
    if only_direct_routes is not None:
        return only_direct_routes
    if hop_limit is not None:
        return False
    return None


def resolve_route_options(
    only_direct_routes: Optional[bool],
    hop_limit: Optional[int] = None,
) -> RouteOptions:
    """Resolve both routing parameters for one provider call.

    The hop limit is always passed through unchanged, even next to an
    explicit False; how the two interact is up to the provider.
    """
    return RouteOptions(
        only_direct_routes=resolve_only_direct_routes(only_direct_routes, hop_limit),
        max_route_length=hop_limit,
    )
