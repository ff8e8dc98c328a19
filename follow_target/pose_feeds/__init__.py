"""Target pose feed implementations."""

from .scripted import ScriptedPoseFeed
from .udp_json import UdpJsonPoseFeed

__all__ = [
    "ScriptedPoseFeed",
    "UdpJsonPoseFeed",
]
