"""Wall-clock helpers and nanosecond unit conversions."""

import time

NANOS_TO_MICROS = 1000
MICROS_TO_MILLIS = 1000
MILLIS_TO_SECS = 1000
NANOS_TO_MILLIS = NANOS_TO_MICROS * MICROS_TO_MILLIS
NANOS_TO_SECS = NANOS_TO_MILLIS * MILLIS_TO_SECS


def current_nanos():
    """Nanoseconds since the epoch on the system clock."""
    return time.time_ns()


def current_time_str():
    """Current local time in ctime() form, without a trailing newline."""
    return time.ctime()