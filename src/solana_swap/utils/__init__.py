"""Utility modules for solana-swap."""

from solana_swap.utils.lazy import LazyConnection

__all__ = ["LazyConnection"]
