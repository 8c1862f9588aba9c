import asyncio

from hotstats.transport.base import Transport
from hotstats.transport.base import TransportError


class TCPTransport(Transport):
    """
    Transport that writes newline-terminated lines to a single long-lived stream connection.
    Lines are written in the order in which sends are issued. A failed send is reported to the
    caller and not retried; the broken connection is dropped and the next send reconnects.
    """

    async def send(self, line):
        data = '{}\n'.format(line).encode('utf-8')
        writer = await self._connection()

        try:
            writer.write(data)
            await writer.drain()
        except OSError as e:
            self.logger.debug(
                'dropping broken connection: addr={}:{}, exception={}'.format(
                    self.host,
                    self.port,
                    e,
                ),
            )
            self._discard(writer)
            raise TransportError(
                'tcp write failure: addr={}:{}, exception={}'.format(self.host, self.port, e),
            ) from e

        return len(data)

    async def _open(self):
        _, writer = await asyncio.open_connection(self.host, self.port)

        return writer

    async def _release(self, writer):
        writer.close()

        try:
            await writer.wait_closed()
        except OSError as e:
            self.logger.debug('error while closing connection: exception={}'.format(e))
