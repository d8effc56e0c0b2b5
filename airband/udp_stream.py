"""Raw 32-bit float audio sent over UDP."""

from __future__ import annotations

import logging
import socket
from array import array
from typing import Iterable, Optional, Union

from .constants import WAVE_RATE, MixMode

_log = logging.getLogger(__name__)

_SEND_FLAGS = getattr(socket, "MSG_DONTWAIT", 0) | getattr(socket, "MSG_NOSIGNAL", 0)


class UdpStream:
    """Sends native-endian float32 samples to one UDP destination."""

    def __init__(
        self,
        dest_address: str,
        dest_port: Union[str, int],
        mode: MixMode = MixMode.MONO,
        continuous: bool = False,
    ) -> None:
        self.dest_address = dest_address
        self.dest_port = str(dest_port)
        self.mode = mode
        self.continuous = continuous
        self._socket: Optional[socket.socket] = None

    @property
    def is_open(self) -> bool:
        """True once a destination has been connected."""
        return self._socket is not None

    def open(self) -> None:
        """Resolve the destination and connect a datagram socket to it."""
        target = f"{self.dest_address}:{self.dest_port}"
        try:
            results = socket.getaddrinfo(
                self.dest_address, self.dest_port, socket.AF_UNSPEC, socket.SOCK_DGRAM
            )
        except socket.gaierror as exc:
            raise OSError(f"udp_stream: could not resolve {target} - {exc}") from exc

        for family, socktype, proto, _canon, addr in results:
            try:
                sock = socket.socket(family, socktype, proto)
            except OSError as exc:
                _log.error("udp_stream: socket failed: %s", exc)
                continue
            try:
                sock.connect(addr)
            except OSError as exc:
                _log.info("udp_stream: connect to %s failed: %s", target, exc)
                sock.close()
                continue
            self._socket = sock
            break
        else:
            raise OSError(
                f"udp_stream: could not set up UDP socket to {target} - all addresses failed"
            )

        _log.info(
            "udp_stream: sending %s 32-bit float at %d Hz to %s",
            "Mono" if self.mode == MixMode.MONO else "Stereo",
            WAVE_RATE,
            target,
        )

    def write(self, data: Iterable[float]) -> None:
        """Send samples without blocking; delivery is not checked."""
        if self._socket is None:
            return
        payload = array("f", data).tobytes()
        try:
            self._socket.send(payload, _SEND_FLAGS)
        except OSError:
            pass

    def write_stereo(self, left: Iterable[float], right: Iterable[float]) -> None:
        """Interleave left and right samples and send them."""
        if self._socket is None:
            return
        left = list(left)
        right = list(right)
        if len(left) != len(right):
            raise ValueError("left and right channels differ in length")
        self.write(sample for pair in zip(left, right) for sample in pair)

    def close(self) -> None:
        """Close the socket if it is open."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def __enter__(self) -> "UdpStream":
        self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()