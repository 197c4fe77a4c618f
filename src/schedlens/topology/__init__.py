"""CPU topology resolution.

Usage:
    from schedlens.topology import TopologyMap

    topology = TopologyMap.from_settings(settings.machine)
    slot = topology.get_socket(5)
    position = topology.layout(5)
"""

from schedlens.topology.resolver import SocketSlot, TopologyError, TopologyMap

__all__ = [
    "SocketSlot",
    "TopologyError",
    "TopologyMap",
]
