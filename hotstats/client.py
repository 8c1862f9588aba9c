import logging
from collections.abc import Mapping
from numbers import Real

from hotstats.meta.config import Config
from hotstats.metrics.fanout import FanOutCoordinator
from hotstats.metrics.format import COUNTER
from hotstats.metrics.format import DISTRIBUTION
from hotstats.metrics.format import GAUGE
from hotstats.metrics.format import HISTOGRAM
from hotstats.metrics.format import SET
from hotstats.metrics.format import TIMING
from hotstats.metrics.format import MetricRecord
from hotstats.metrics.format import merge_tags
from hotstats.metrics.timer import DurationTimerContextManager
from hotstats.transport import create_transport


class StatsdClient(object):
    """
    Client for emitting metrics to a statsd server.

    Emission methods never block: they schedule the send on the event loop and return an
    `asyncio.Future` resolving to an `(error, num_bytes)` pair. Delivery failures are never raised
    to the caller; they are reported through the optional callback and the future.

    Every emission method accepts a stat name or a list of stat names, a value, and then the
    optional slots `sample_rate`, `tags` and `callback`. A list or mapping passed in the
    `sample_rate` slot is treated as tags, and a callable passed in either earlier slot is treated
    as the callback, so `client.timing('a', 42, ['tag'], cb)` and
    `client.timing(['a', 'b'], 42, None, cb)` both work.
    """

    def __init__(self, config=None, error_handler=None, loop=None, **options):
        """
        Create a client instance. The transport connection is opened on the first emission.

        :param config: Config instance or mapping of options; if omitted, options are read from
                       keyword arguments.
        :param error_handler: Optional function invoked with the error of any failed emission
                              issued without a callback. If omitted, such errors are logged.
        :param loop: Event loop on which sends are scheduled; defaults to the running loop at the
                     time of each emission.
        :param options: Client options (host, port, protocol, prefix, suffix, global_tags,
                        default_sample_rate, telegraf, mock).
        """
        self.logger = logging.getLogger('hotstats')

        if isinstance(config, Config):
            self.config = Config(config.as_dict(), **options) if options else config
        else:
            self.config = Config(config, **options)

        self.transport = create_transport(self.config)
        self.coordinator = FanOutCoordinator(
            transport=self.transport,
            prefix=self.config.prefix,
            suffix=self.config.suffix,
            telegraf=self.config.telegraf,
            error_handler=error_handler,
            loop=loop,
        )

        self.logger.debug('initialized statsd client: config={}'.format(self.config))

    @property
    def mock_buffer(self):
        """
        Lines recorded by the client in mock mode; None otherwise.
        """
        return getattr(self.transport, 'buffer', None)

    def increment(self, stat, value=1, sample_rate=None, tags=None, callback=None):
        """
        Emit a counter increment.

        :param stat: Stat name, or list of stat names.
        :param value: Delta value; defaults to 1.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once with (error, num_bytes).
        :return: Future resolving to (error, num_bytes).
        """
        return self._emit(stat, value, COUNTER, sample_rate, tags, callback)

    def decrement(self, stat, value=1, sample_rate=None, tags=None, callback=None):
        """
        Emit a counter decrement; the value is negated and sent as a counter.

        :param stat: Stat name, or list of stat names.
        :param value: Magnitude of the decrement; defaults to 1.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once with (error, num_bytes).
        :return: Future resolving to (error, num_bytes).
        """
        return self._emit(stat, -value, COUNTER, sample_rate, tags, callback)

    def timing(self, stat, duration, sample_rate=None, tags=None, callback=None):
        """
        Emit a timing metric.

        :param stat: Stat name, or list of stat names.
        :param duration: Duration, in milliseconds.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once with (error, num_bytes).
        :return: Future resolving to (error, num_bytes).
        """
        return self._emit(stat, duration, TIMING, sample_rate, tags, callback)

    def histogram(self, stat, value, sample_rate=None, tags=None, callback=None):
        """
        Emit a histogram metric.

        :param stat: Stat name, or list of stat names.
        :param value: Observed value.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once with (error, num_bytes).
        :return: Future resolving to (error, num_bytes).
        """
        return self._emit(stat, value, HISTOGRAM, sample_rate, tags, callback)

    def distribution(self, stat, value, sample_rate=None, tags=None, callback=None):
        """
        Emit a distribution metric, aggregated globally by the server.

        :param stat: Stat name, or list of stat names.
        :param value: Observed value.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once with (error, num_bytes).
        :return: Future resolving to (error, num_bytes).
        """
        return self._emit(stat, value, DISTRIBUTION, sample_rate, tags, callback)

    def gauge(self, stat, value, sample_rate=None, tags=None, callback=None):
        """
        Emit a gauge metric.

        :param stat: Stat name, or list of stat names.
        :param value: Gauge value.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once with (error, num_bytes).
        :return: Future resolving to (error, num_bytes).
        """
        return self._emit(stat, value, GAUGE, sample_rate, tags, callback)

    def set(self, stat, value, sample_rate=None, tags=None, callback=None):
        """
        Emit a set metric, counting unique occurrences of the value.

        :param stat: Stat name, or list of stat names.
        :param value: Set member.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once with (error, num_bytes).
        :return: Future resolving to (error, num_bytes).
        """
        return self._emit(stat, value, SET, sample_rate, tags, callback)

    unique = set

    def timer(self, stat, sample_rate=None, tags=None, callback=None):
        """
        Create a context manager, also usable as a decorator, that emits the duration of its body
        as a timing metric.

        :param stat: Stat name, or list of stat names.
        :param sample_rate: Optional sample rate in (0, 1].
        :param tags: Optional list or mapping of tags.
        :param callback: Optional function invoked once per timed execution with
                         (error, num_bytes).
        :return: Context manager instance.
        """
        def emit_duration(duration):
            try:
                self.timing(stat, duration, sample_rate, tags, callback)
            except RuntimeError as e:
                # No running event loop to schedule the send on
                self.logger.warning(
                    'discarding timer emission: stat={}, exception={}'.format(stat, e),
                )

        return DurationTimerContextManager(emit_duration)

    async def close(self):
        """
        Wait for in-flight sends to settle, then release the transport. Emissions issued after the
        client is closed fail with a TransportError.
        """
        self.logger.debug('closing statsd client')

        await self.coordinator.flush()
        await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args, **kwargs):
        await self.close()

    def _emit(self, stat, value, metric_type, sample_rate, tags, callback):
        sample_rate, tags, callback = self._resolve_args(sample_rate, tags, callback)

        record = MetricRecord(
            stat_names=self._stat_names(stat),
            value=value,
            type=metric_type,
            sample_rate=self._sample_rate(sample_rate),
            tags=merge_tags(tags, self.config.global_tags),
        )

        return self.coordinator.emit(record, callback)

    @staticmethod
    def _resolve_args(sample_rate, tags, callback):
        """
        Assign loosely positioned optional arguments to their slots by their runtime shape.

        :return: Tuple of (sample_rate, tags, callback).
        """
        if callback is None and callable(tags):
            tags, callback = None, tags

        if callback is None and callable(sample_rate):
            sample_rate, callback = None, sample_rate

        if isinstance(sample_rate, (list, tuple, Mapping)):
            sample_rate, tags = tags, sample_rate

        if tags is not None and not isinstance(tags, (list, tuple, Mapping)):
            raise TypeError('Tags must be a list or mapping, not {}.'.format(type(tags).__name__))

        return sample_rate, tags, callback

    @staticmethod
    def _stat_names(stat):
        if isinstance(stat, str):
            return (stat,)

        stat_names = tuple(stat)
        if not stat_names:
            raise ValueError('At least one stat name is required.')

        return stat_names

    def _sample_rate(self, sample_rate):
        if sample_rate is None:
            return self.config.default_sample_rate

        if isinstance(sample_rate, bool) or not isinstance(sample_rate, Real) or \
                not 0 < sample_rate <= 1:
            raise ValueError('Sample rate must be a number in (0, 1], not {!r}.'.format(sample_rate))

        return sample_rate
