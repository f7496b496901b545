"""Ports — protocols implemented by version shapes and JSON codecs."""

from .codec import IJsonCodec
from .hooks import Packable, Unpackable, Upgradable

__all__ = [
    "IJsonCodec",
    "Packable",
    "Unpackable",
    "Upgradable",
]
