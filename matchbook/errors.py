"""Fatal invariant violations raised throughout the exchange."""


class FatalError(RuntimeError):
    """Raised when an invariant of the exchange is violated."""


def ensure(condition, message):
    """Raise FatalError with ``message`` unless ``condition`` holds."""
    if not condition:
        raise FatalError(message)


def fatal(message):
    """Unconditionally raise FatalError with ``message``."""
    raise FatalError(message)