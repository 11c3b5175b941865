"""Inline configuration evaluators."""

from nspawnc.evaluators.base import BaseEvaluator, Overlay
from nspawnc.evaluators.nix import NixEvaluator

__all__ = [
    "BaseEvaluator",
    "NixEvaluator",
    "Overlay",
]
