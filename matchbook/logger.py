"""Asynchronous file logger with a minimal %-substitution format."""

import re
import sys
import time
from enum import IntEnum

from matchbook.errors import FatalError, fatal
from matchbook.lf_queue import LFQueue
from matchbook.thread_utils import create_and_start_thread
from matchbook.time_utils import current_time_str

LOG_QUEUE_SIZE = 8 * 1024 * 1024

_PERCENT_SPLIT = re.compile(r"(%%|%)")


class LogType(IntEnum):
    CHAR = 0
    INTEGER = 1
    LONG_INTEGER = 2
    LONG_LONG_INTEGER = 3
    UNSIGNED_INTEGER = 4
    UNSIGNED_LONG_INTEGER = 5
    UNSIGNED_LONG_LONG_INTEGER = 6
    FLOAT = 7
    DOUBLE = 8


def _render(log_type, value):
    if log_type is LogType.CHAR:
        return value
    if log_type in (LogType.FLOAT, LogType.DOUBLE):
        return "%g" % value
    return str(value)


class Logger:
    """Queue values from the caller and write them to a file on a background thread."""

    def __init__(self, file_name):
        self.file_name = str(file_name)
        try:
            self._file = open(file_name, "w", encoding="utf-8")
        except OSError as exc:
            raise FatalError(f"Could not open log file:{self.file_name}") from exc
        self._queue = LFQueue(LOG_QUEUE_SIZE)
        self._running = True
        self._closed = False
        self._thread = create_and_start_thread(
            -1, f"Common/Logger {self.file_name}", self._flush_queue
        )

    def _drain(self):
        while (element := self._queue.peek()) is not None:
            self._file.write(_render(*element))
            self._queue.pop()
        self._file.flush()

    def _flush_queue(self):
        while self._running:
            self._drain()
            time.sleep(0.01)
        self._drain()

    def push_value(self, value):
        """Queue one value; strings are queued character by character."""
        if isinstance(value, str):
            for char in value:
                self._queue.push((LogType.CHAR, char))
        elif isinstance(value, bool):
            self._queue.push((LogType.INTEGER, int(value)))
        elif isinstance(value, int):
            log_type = LogType.LONG_LONG_INTEGER if value < 0 else LogType.UNSIGNED_LONG_LONG_INTEGER
            self._queue.push((log_type, int(value)))
        elif isinstance(value, float):
            self._queue.push((LogType.DOUBLE, value))
        else:
            self.push_value(str(value))

    def log(self, fmt, *args):
        """Queue ``fmt`` with each lone % replaced by the next argument; %% yields %."""
        missing = object()
        values = iter(args)
        pieces = []
        for part in _PERCENT_SPLIT.split(fmt):
            if part == "%%":
                pieces.append("%")
            elif part == "%":
                value = next(values, missing)
                if value is missing:
                    fatal("missing arguments to log()")
                pieces.append(value)
            elif part:
                pieces.append(part)
        if next(values, missing) is not missing:
            fatal("extra arguments provided to log()")
        for piece in pieces:
            self.push_value(piece)

    def close(self):
        """Write out everything queued, stop the background thread and close the file."""
        if self._closed:
            return
        self._closed = True
        print(f"{current_time_str()} Flushing and closing Logger for {self.file_name}", file=sys.stderr)
        while len(self._queue) and self._thread.is_alive():
            time.sleep(0.01)
        self._running = False
        self._thread.join()
        self._file.close()
        print(f"{current_time_str()} Logger for {self.file_name} exiting.", file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()