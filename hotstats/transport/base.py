import asyncio
import logging


class TransportError(Exception):
    """
    Raised when a line cannot be delivered to the local socket: connection refused or reset, name
    resolution failure, or a failed write.
    """
    pass


class Transport(object):
    """
    Interface for a metrics transport. A transport owns at most one underlying connection, opened
    lazily on the first send and reused until it is closed or breaks.
    """

    def __init__(self, host, port):
        """
        Create a transport.

        :param host: Hostname or IP address of the statsd server.
        :param port: Port of the statsd server.
        """
        self.logger = logging.getLogger('hotstats')

        self.host = host
        self.port = port
        self.closed = False
        self._handle = None
        self._opening = None

    async def send(self, line):
        """
        Send a single formatted line.

        :param line: Formatted metric line, without a trailing newline.
        :return: Number of bytes written.
        """
        raise NotImplementedError

    async def close(self):
        """
        Release the underlying connection, if one is open. Sends issued afterwards fail.
        """
        self.closed = True

        if self._opening is not None:
            try:
                await self._opening
            except TransportError:
                pass

        handle, self._handle = self._handle, None
        if handle is not None:
            self.logger.debug('closing connection: addr={}:{}'.format(self.host, self.port))
            await self._release(handle)

    async def _open(self):
        """
        Open the underlying connection.

        :return: Connection handle, exposing `is_closing()` and `close()`.
        """
        raise NotImplementedError

    async def _release(self, handle):
        handle.close()

    async def _connection(self):
        """
        Retrieve the open connection, opening it first if necessary. Concurrent callers that
        arrive while the connection is opening all wait on the same attempt, and resume in the
        order in which they arrived.

        :return: Connection handle.
        """
        if self.closed:
            raise TransportError('transport is closed: addr={}:{}'.format(self.host, self.port))

        if self._handle is not None and not self._handle.is_closing():
            return self._handle

        if self._opening is None:
            self._opening = asyncio.ensure_future(self._connect())

        return await self._opening

    async def _connect(self):
        try:
            self.logger.debug('opening connection: addr={}:{}'.format(self.host, self.port))
            self._handle = await self._open()
        except OSError as e:
            raise TransportError(
                'unable to connect: addr={}:{}, exception={}'.format(self.host, self.port, e),
            ) from e
        finally:
            self._opening = None

        return self._handle

    def _discard(self, handle):
        """
        Drop a broken connection so that the next send opens a new one.

        :param handle: The broken connection handle.
        """
        if self._handle is handle:
            self._handle = None

        handle.close()


class MockTransport(Transport):
    """
    Transport implementation that records lines in memory instead of sending them; used when the
    client is configured in mock mode.
    """

    def __init__(self, host=None, port=None):
        super(MockTransport, self).__init__(host, port)

        self.buffer = []

    async def send(self, line):
        if self.closed:
            raise TransportError('transport is closed')

        self.buffer.append(line)

        return len(line.encode('utf-8'))

    async def close(self):
        self.closed = True
