import asyncio
import functools
import logging

from hotstats.metrics import sampling
from hotstats.metrics.format import TYPE_TAGS
from hotstats.metrics.format import format_line
from hotstats.transport.base import TransportError


class FanOutState(object):
    """
    Completion barrier for the constituent sends of a single emission.
    """

    def __init__(self, remaining, on_complete):
        """
        Create a barrier.

        :param remaining: Number of constituent sends that must settle.
        :param on_complete: Function invoked once with (first_error, total_bytes) when the last
                            constituent settles.
        """
        self.remaining = remaining
        self.first_error = None
        self.total_bytes = 0
        self.on_complete = on_complete

    def settle(self, error=None, num_bytes=0):
        """
        Record the outcome of one constituent send.

        :param error: Exception raised by the send, if any.
        :param num_bytes: Number of bytes written by the send.
        """
        self.remaining -= 1
        self.total_bytes += num_bytes

        if error is not None and self.first_error is None:
            self.first_error = error

        if self.remaining == 0:
            self.on_complete(self.first_error, self.total_bytes)


class FanOutCoordinator(object):
    """
    Issues one send per stat name of an emission and reports their aggregate outcome once all of
    them have settled.
    """

    def __init__(self, transport, prefix='', suffix='', telegraf=False, error_handler=None,
                 loop=None):
        """
        Create a coordinator.

        :param transport: Transport over which lines are sent.
        :param prefix: String prepended to every stat name.
        :param suffix: String appended to every stat name.
        :param telegraf: True to render tags in Telegraf style.
        :param error_handler: Optional function invoked with the error of an emission that failed
                              and has no callback.
        :param loop: Event loop on which sends are scheduled; defaults to the running loop.
        """
        self.logger = logging.getLogger('hotstats')

        self.transport = transport
        self.prefix = prefix
        self.suffix = suffix
        self.telegraf = telegraf
        self.error_handler = error_handler
        self.loop = loop
        self.pending = set()

    def emit(self, record, callback=None):
        """
        Send a metric record under each of its stat names. Every stat name takes its own sampling
        draw; sampled-out names settle immediately with zero bytes.

        :param record: MetricRecord to send.
        :param callback: Optional function invoked exactly once with (error, num_bytes) after
                         every constituent send has settled. error is the first failure, or None.
        :return: Future resolving to the same (error, num_bytes) pair. It never raises.
        """
        loop = self.loop if self.loop is not None else asyncio.get_running_loop()
        future = loop.create_future()

        def complete(error, num_bytes):
            if not future.done():
                future.set_result((error, num_bytes))

            if callback is not None:
                callback(error, num_bytes)
            elif error is not None:
                self._unhandled(error)

        state = FanOutState(len(record.stat_names), complete)
        type_tag = TYPE_TAGS[record.type]

        for stat in record.stat_names:
            if not sampling.should_send(record.sample_rate, sampling.draw()):
                loop.call_soon(state.settle)
                continue

            line = format_line(
                prefix=self.prefix,
                stat=stat,
                suffix=self.suffix,
                value=record.value,
                type_tag=type_tag,
                sample_rate=record.sample_rate,
                tags=record.tags,
                telegraf=self.telegraf,
            )

            task = loop.create_task(self.transport.send(line))
            self.pending.add(task)
            task.add_done_callback(functools.partial(self._settle, state))

        return future

    async def flush(self):
        """
        Wait until every send issued so far has settled.
        """
        while self.pending:
            await asyncio.wait(list(self.pending))

    def _settle(self, state, task):
        self.pending.discard(task)

        if task.cancelled():
            return state.settle(TransportError('send cancelled before completion'))

        error = task.exception()
        if error is not None:
            return state.settle(error)

        state.settle(num_bytes=task.result())

    def _unhandled(self, error):
        if self.error_handler is not None:
            return self.error_handler(error)

        self.logger.warning('discarding failed metric emission: exception={}'.format(error))
