"""Record sequence numbering, datagram packing and handshake fragmentation."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

MAX_SEQUENCE_NUMBER = 0x0000FFFFFFFFFFFF


class SequenceNumberOverflowError(OverflowError):
    """The record sequence number of an epoch would wrap."""

    def __init__(self) -> None:
        super().__init__("sequence number overflow")


@dataclass
class SequenceCounter:
    """Per-epoch record sequence numbers for outgoing records."""

    _values: list[int] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def _ensure(self, epoch: int) -> None:
        if epoch < 0:
            raise ValueError(f"epoch must not be negative: {epoch}")
        if len(self._values) <= epoch:
            self._values.extend([0] * (epoch + 1 - len(self._values)))

    def next(self, epoch: int) -> int:
        """Take the next sequence number of an epoch.

        The association must be abandoned rather than let the number wrap,
        so a number beyond the 48-bit range raises.
        """
        with self._lock:
            self._ensure(epoch)
            seq = self._values[epoch]
            self._values[epoch] = seq + 1
        if seq > MAX_SEQUENCE_NUMBER:
            raise SequenceNumberOverflowError()
        return seq

    def set(self, epoch: int, value: int) -> None:
        """Make ``value`` the next sequence number of an epoch."""
        if value < 0:
            raise ValueError(f"sequence number must not be negative: {value}")
        with self._lock:
            self._ensure(epoch)
            self._values[epoch] = value

    def peek(self, epoch: int) -> int:
        """The sequence number the next record of an epoch would get."""
        with self._lock:
            self._ensure(epoch)
            return self._values[epoch]


@dataclass(frozen=True)
class HandshakeFragment:
    """A piece of a handshake message body and where it starts in the body."""

    offset: int
    data: bytes

    @property
    def length(self) -> int:
        """Number of body bytes in this fragment."""
        return len(self.data)

    @property
    def end(self) -> int:
        """Offset just past the last byte of this fragment."""
        return self.offset + len(self.data)


def compact_raw_packets(raw_packets: Iterable[bytes], mtu: int) -> list[bytes]:
    """Pack records into as few datagrams as fit below the MTU.

    A record is never split; a record larger than the MTU travels alone.
    """
    datagrams: list[bytes] = []
    current = bytearray()
    for raw in raw_packets:
        if current and len(current) + len(raw) >= mtu:
            datagrams.append(bytes(current))
            current = bytearray()
        current += raw
    datagrams.append(bytes(current))
    return datagrams


def split_handshake_content(content: bytes, mtu: int) -> list[HandshakeFragment]:
    """Cut a handshake message body into fragments of at most ``mtu`` bytes.

    An empty body still yields one empty fragment.
    """
    if mtu <= 0:
        raise ValueError(f"mtu must be positive: {mtu}")
    content = bytes(content)
    fragments = [
        HandshakeFragment(offset=start, data=content[start : start + mtu])
        for start in range(0, len(content), mtu)
    ]
    return fragments or [HandshakeFragment(offset=0, data=b"")]