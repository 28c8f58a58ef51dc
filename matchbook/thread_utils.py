"""Starting named worker threads, optionally pinned to a CPU core."""

import os
import sys
import threading
import time


def set_thread_core(core_id):
    """Pin the calling thread to ``core_id``; return whether it succeeded."""
    if core_id < 0:
        return False
    if not hasattr(os, "sched_setaffinity"):
        print("Thread affinity not supported on this OS", file=sys.stderr)
        return False
    try:
        os.sched_setaffinity(0, {core_id})
    except (OSError, ValueError, OverflowError):
        return False
    return True


def create_and_start_thread(core_id, name, func, *args):
    """Start a daemon thread named ``name`` running ``func(*args)``.

    With a non-negative ``core_id`` the thread pins itself to that core first
    and terminates the process if it cannot. Waits one second before returning.
    """

    def runner():
        if core_id >= 0 and not set_thread_core(core_id):
            print(
                f"Failed to set core affinity for {name} thread: "
                f"{threading.get_ident()} to core {core_id}",
                file=sys.stderr,
                flush=True,
            )
            os._exit(1)
        print(
            f"Set core affinity for {name} thread: {threading.get_ident()} to core {core_id}",
            file=sys.stderr,
        )
        func(*args)

    thread = threading.Thread(target=runner, name=name, daemon=True)
    thread.start()
    time.sleep(1)
    return thread