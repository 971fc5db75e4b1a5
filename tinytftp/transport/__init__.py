"""UDP endpoint used by every transfer."""

from .udp import UdpEndpoint
