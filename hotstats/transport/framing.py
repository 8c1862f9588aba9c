import asyncio
import logging


class LineBuffer(object):
    """
    Reassembles newline-delimited metric lines from a byte stream. Reads may carry several lines
    at once, or split a line across reads; incomplete trailing data is held until the rest of the
    line arrives.
    """

    def __init__(self):
        self.pending = b''

    def feed(self, data):
        """
        Append received bytes and extract every complete line.

        :param data: Bytes received from the stream.
        :return: List of complete, non-empty lines, in stream order.
        """
        self.pending += data

        offset = self.pending.rfind(b'\n')
        if offset == -1:
            return []

        packet, self.pending = self.pending[:offset + 1], self.pending[offset + 1:]

        return [
            line
            for line in packet.decode('utf-8').split('\n')
            if line
        ]


class LineReceiverProtocol(asyncio.Protocol):
    """
    Server side of a statsd TCP stream: dispatches each received metric line to a handler.
    """

    def __init__(self, on_line):
        """
        Create a protocol instance for a single connection.

        :param on_line: Function invoked with each received line.
        """
        self.logger = logging.getLogger('hotstats')
        self.on_line = on_line
        self.buffer = LineBuffer()

    def connection_made(self, transport):
        self.logger.debug('accepted connection: peer={}'.format(
            transport.get_extra_info('peername'),
        ))

    def data_received(self, data):
        for line in self.buffer.feed(data):
            self.on_line(line)

    def connection_lost(self, exc):
        if self.buffer.pending:
            self.logger.debug('connection closed with partial line discarded: pending={!r}'.format(
                self.buffer.pending,
            ))


async def serve(host, port, on_line):
    """
    Start a TCP server that receives statsd lines.

    :param host: Address to bind to.
    :param port: Port to bind to; 0 selects a free port.
    :param on_line: Function invoked with each received line.
    :return: The asyncio server, already listening.
    """
    loop = asyncio.get_running_loop()

    return await loop.create_server(lambda: LineReceiverProtocol(on_line), host, port)
