import contextlib
import time


class DurationTimerContextManager(contextlib.ContextDecorator):
    """
    Context manager, and function decorator, for timing an execution duration.
    """

    def __init__(self, duration_cb):
        """
        Create a context manager instance.

        :param duration_cb: Callback function invoked with the duration, in milliseconds, of the
                            context manager body when complete.
        """
        self.duration_cb = duration_cb
        self.start_ms = None

    def __enter__(self):
        self.start_ms = 1000.0 * time.perf_counter()

        return self

    def __exit__(self, *args, **kwargs):
        end_ms = 1000.0 * time.perf_counter()

        self.duration_cb(end_ms - self.start_ms)
