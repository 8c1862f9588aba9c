import random


def should_send(sample_rate, draw):
    """
    Decide whether a sampled metric is transmitted.

    :param sample_rate: Probability in (0, 1] that the metric is transmitted.
    :param draw: Uniform random draw in [0, 1).
    :return: True if the metric should be sent; False if it is sampled out.
    """
    if sample_rate >= 1:
        return True

    return draw <= sample_rate


def draw():
    """
    Take an independent uniform random draw for a single send.
    """
    return random.random()
