"""Tests for routing option resolution."""

import pytest

from solana_swap.routing import RouteOptions, resolve_only_direct_routes, resolve_route_options


class TestResolveOnlyDirectRoutes:
    """Tests for the direct-route flag precedence rules."""

    @pytest.mark.parametrize("flag", [True, False])
    @pytest.mark.parametrize("hop_limit", [None, 1, 2, 5])
    def test_explicit_flag_wins(self, flag, hop_limit):
        """An explicit flag is used whatever the hop limit."""
        assert resolve_only_direct_routes(flag, hop_limit) is flag

    @pytest.mark.parametrize("hop_limit", [1, 2, 5])
    def test_hop_limit_implies_multi_hop(self, hop_limit):
        """An unset flag with a hop limit resolves to False."""
        assert resolve_only_direct_routes(None, hop_limit) is False

    def test_unset_without_hop_limit_is_left_to_provider(self):
        """An unset flag without a hop limit stays unset."""
        assert resolve_only_direct_routes(None, None) is None


class TestResolveRouteOptions:
    """Tests for resolving both routing parameters."""

    def test_default_provider_choice(self):
        """SOL->USDC with no hop limit sends neither parameter."""
        assert resolve_route_options(None, None) == RouteOptions(
            only_direct_routes=None, max_route_length=None
        )

    def test_hop_limit_passed_through(self):
        """SOL->USDC with hop_limit=2 sends direct=False and the limit."""
        assert resolve_route_options(None, 2) == RouteOptions(
            only_direct_routes=False, max_route_length=2
        )

    def test_explicit_false_and_hop_limit_coexist(self):
        """Both parameters are passed through unmodified."""
        options = resolve_route_options(False, 3)

        assert options.only_direct_routes is False
        assert options.max_route_length == 3

    def test_explicit_true_keeps_hop_limit(self):
        """An explicit True does not drop the configured hop limit."""
        options = resolve_route_options(True, 3)

        assert options.only_direct_routes is True
        assert options.max_route_length == 3

    def test_hop_limit_optional(self):
        """The hop limit argument defaults to None."""
        assert resolve_route_options(True) == RouteOptions(only_direct_routes=True)
