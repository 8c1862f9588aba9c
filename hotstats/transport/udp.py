import asyncio
import socket

from hotstats.transport.base import Transport
from hotstats.transport.base import TransportError


class DatagramSocket(object):
    """
    Connected, non-blocking UDP socket. Local send failures are raised to the caller.
    """

    def __init__(self, sock):
        self.sock = sock

    def send(self, data):
        return self.sock.send(data)

    def is_closing(self):
        return self.sock.fileno() == -1

    def close(self):
        self.sock.close()


class UDPTransport(Transport):
    """
    Transport that sends each line as an independent datagram.
    """

    async def send(self, line):
        data = line.encode('utf-8')
        endpoint = await self._connection()

        try:
            try:
                num_bytes = endpoint.send(data)
            except ConnectionRefusedError:
                # Pending ICMP error left by an earlier datagram; this datagram was not sent
                num_bytes = endpoint.send(data)
        except OSError as e:
            raise TransportError(
                'udp send failure: addr={}:{}, exception={}'.format(self.host, self.port, e),
            ) from e

        return num_bytes

    async def _open(self):
        loop = asyncio.get_running_loop()
        family, _, _, _, addr = (await loop.getaddrinfo(
            self.host,
            self.port,
            type=socket.SOCK_DGRAM,
        ))[0]

        sock = socket.socket(family, socket.SOCK_DGRAM)
        sock.setblocking(False)

        try:
            await loop.sock_connect(sock, addr)
        except OSError:
            sock.close()
            raise

        return DatagramSocket(sock)
