"""Socket configuration and creation helpers for TCP and UDP endpoints."""

import socket
import struct
import sys
from dataclasses import dataclass

import psutil

from matchbook.errors import FatalError, ensure
from matchbook.time_utils import current_time_str

MAX_TCP_SERVER_BACKLOG = 1024

if sys.platform == "darwin":
    SO_TIMESTAMP = 0x0800  # SO_TIMESTAMP_MONOTONIC
    SCM_TIMESTAMP = getattr(socket, "SCM_TIMESTAMP", 0x02)
else:
    SO_TIMESTAMP = getattr(socket, "SO_TIMESTAMP", 29)
    SCM_TIMESTAMP = getattr(socket, "SCM_TIMESTAMP", SO_TIMESTAMP)


@dataclass
class SocketCfg:
    ip: str = ""
    iface: str = ""
    port: int = -1
    is_udp: bool = False
    is_listening: bool = False
    needs_so_timestamp: bool = False

    def __str__(self):
        return (
            f"SocketCfg[ip:{self.ip}"
            f" iface:{self.iface}"
            f" port:{self.port}"
            f" is_udp:{int(self.is_udp)}"
            f" is_listening:{int(self.is_listening)}"
            f" needs_SO_timestamp:{int(self.needs_so_timestamp)}"
            "]"
        )


def get_iface_ip(iface):
    """IPv4 address of the named interface, or an empty string if it has none."""
    for address in psutil.net_if_addrs().get(iface, ()):
        if address.family == socket.AF_INET:
            return address.address
    return ""


def set_non_blocking(sock):
    """Make reads on ``sock`` return immediately; return whether it succeeded."""
    try:
        sock.setblocking(False)
    except OSError:
        return False
    return True


def disable_nagle(sock):
    """Turn off Nagle's algorithm on ``sock``; return whether it succeeded."""
    try:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    except OSError:
        return False
    return True


def set_so_timestamp(sock):
    """Enable software receive timestamps on ``sock``; return whether it succeeded."""
    try:
        sock.setsockopt(socket.SOL_SOCKET, SO_TIMESTAMP, 1)
    except OSError:
        return False
    return True


def join(sock, ip):
    """Join the multicast group ``ip`` on any interface; return whether it succeeded."""
    try:
        group = socket.inet_aton(ip)
    except OSError:
        group = b"\xff\xff\xff\xff"
    membership = group + struct.pack("!I", socket.INADDR_ANY)
    try:
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
    except OSError:
        return False
    return True


def create_socket(logger, socket_cfg):
    """Create a non-blocking TCP or UDP socket that connects or listens as configured."""
    ip = socket_cfg.ip or get_iface_ip(socket_cfg.iface)
    logger.log("% %() % cfg:%\n", __name__, "create_socket", current_time_str(), socket_cfg)

    flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
    if socket_cfg.is_listening:
        flags |= socket.AI_PASSIVE
    sock_type = socket.SOCK_DGRAM if socket_cfg.is_udp else socket.SOCK_STREAM
    protocol = socket.IPPROTO_UDP if socket_cfg.is_udp else socket.IPPROTO_TCP

    try:
        results = socket.getaddrinfo(ip, str(socket_cfg.port), socket.AF_INET, sock_type, protocol, flags)
    except (socket.gaierror, UnicodeError) as exc:
        raise FatalError(f"getaddrinfo() failed. error:{exc}") from exc

    sock = None
    for family, rp_type, rp_proto, _canon, address in results:
        if sock is not None:
            sock.close()
        try:
            sock = socket.socket(family, rp_type, rp_proto)
        except OSError as exc:
            raise FatalError(f"socket() failed. errno:{exc.strerror}") from exc

        ensure(set_non_blocking(sock), "setNonBlocking() failed.")

        if not socket_cfg.is_udp:
            ensure(disable_nagle(sock), "disableNagle() failed.")

        if not socket_cfg.is_listening:
            # A non-blocking connect reports completion later; its result is not checked here.
            sock.connect_ex(address)
        else:
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            except OSError as exc:
                raise FatalError(f"setsockopt() SO_REUSEADDR failed. errno:{exc.strerror}") from exc
            bind_address = ("", socket_cfg.port) if socket_cfg.is_udp else address
            try:
                sock.bind(bind_address)
            except OSError as exc:
                raise FatalError(f"bind() failed. errno:{exc.strerror}") from exc

        if not socket_cfg.is_udp and socket_cfg.is_listening:
            try:
                sock.listen(MAX_TCP_SERVER_BACKLOG)
            except OSError as exc:
                raise FatalError(f"listen() failed. errno:{exc.strerror}") from exc

        if socket_cfg.needs_so_timestamp:
            ensure(set_so_timestamp(sock), "setSOTimestamp() failed.")

    ensure(sock is not None, f"No usable address for {socket_cfg}")
    return sock