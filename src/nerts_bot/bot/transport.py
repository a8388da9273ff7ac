"""
Transport collaborator.

The bot never manages sessions; it is handed a transport that is already
connected to the game server and only needs three operations:

    send(peer_id, data, channel)   -> bool
    poll_available(channel)        -> size of the next datagram, or None
    receive(channel, max_size)     -> (peer_id, data), or None

Delivery is assumed reliable and in order. UdpTransport is a minimal
adapter for a relay that forwards the game's peer-to-peer traffic over UDP;
each datagram carries a one-byte channel prefix.
"""

import logging
import select
import socket
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, Iterable, Optional, Tuple

from ..errors import TransportError

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Reliable, ordered datagram transport to a single server peer."""

    @abstractmethod
    def send(self, peer_id: int, data: bytes, channel: int) -> bool:
        """Send one datagram. Returns False if the transport refused it."""

    @abstractmethod
    def poll_available(self, channel: int) -> Optional[int]:
        """Size of the next pending datagram, or None if nothing is waiting."""

    @abstractmethod
    def receive(self, channel: int, max_size: int) -> Optional[Tuple[int, bytes]]:
        """Pop the next datagram on ``channel`` as ``(peer_id, data)``."""

    def close(self) -> None:
        """Release transport resources."""


class UdpTransport(Transport):
    """
    Transport over a UDP socket talking to a single relay.

    Args:
        local_addr: (host, port) to bind.
        peer_addr: (host, port) of the relay. The host may be a name; it is
            resolved once here.
        peer_id: Identity reported for every datagram from the relay.
        channels: Inbound channels to queue. Datagrams on any other channel
            are dropped.
        max_pending: Datagrams kept per channel; the oldest is dropped when
            a queue is full.
    """

    def __init__(
        self,
        local_addr: Tuple[str, int],
        peer_addr: Tuple[str, int],
        peer_id: int,
        channels: Iterable[int] = (1,),
        max_pending: int = 64,
    ):
        self.peer_addr = resolve_address(peer_addr)
        self.peer_id = peer_id
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(local_addr)
        self.sock.setblocking(False)
        # Datagrams read while looking for another channel
        self._pending: Dict[int, Deque[bytes]] = {
            channel: deque(maxlen=max_pending) for channel in channels
        }
        logger.info(
            f"UDP transport bound to {self.sock.getsockname()}, "
            f"relay {peer_addr[0]}:{peer_addr[1]} at {self.peer_addr}"
        )

    def send(self, peer_id: int, data: bytes, channel: int) -> bool:
        if peer_id != self.peer_id:
            logger.warning(f"Refusing to send to unknown peer {peer_id}")
            return False
        try:
            sent = self.sock.sendto(bytes([channel]) + data, self.peer_addr)
        except OSError as e:
            logger.error(f"UDP send failed: {e}")
            return False
        return sent == len(data) + 1

    def _pump(self) -> None:
        while True:
            readable, _, _ = select.select([self.sock], [], [], 0)
            if not readable:
                return
            try:
                packet, addr = self.sock.recvfrom(0x10000)
            except BlockingIOError:
                return
            if addr != self.peer_addr or not packet:
                logger.debug(f"Ignoring datagram from {addr}")
                continue
            queue = self._pending.get(packet[0])
            if queue is None:
                logger.debug(f"Ignoring datagram on unread channel {packet[0]}")
                continue
            if len(queue) == queue.maxlen:
                logger.warning(f"Channel {packet[0]} backlog full, dropping oldest datagram")
            queue.append(packet[1:])

    def poll_available(self, channel: int) -> Optional[int]:
        self._pump()
        queue = self._pending.get(channel)
        if not queue:
            return None
        return len(queue[0])

    def receive(self, channel: int, max_size: int) -> Optional[Tuple[int, bytes]]:
        self._pump()
        queue = self._pending.get(channel)
        if not queue:
            return None
        data = queue.popleft()
        return self.peer_id, data[:max_size]

    def close(self) -> None:
        self.sock.close()


def resolve_address(addr: Tuple[str, int]) -> Tuple[str, int]:
    """Resolve ``(host, port)`` to the IPv4 ``(ip, port)`` that recvfrom reports.

    Raises:
        TransportError: If the host cannot be resolved.
    """
    host, port = addr
    try:
        infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
    except socket.gaierror as e:
        raise TransportError(f"Cannot resolve relay address {host}:{port}: {e}") from e
    return infos[0][4]


__all__ = ['Transport', 'UdpTransport', 'resolve_address']
