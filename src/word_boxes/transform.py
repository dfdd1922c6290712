"""Affine transform composition used by the tree walk."""

from contracts.layout import accumulate, compose

__all__ = ["accumulate", "compose"]
