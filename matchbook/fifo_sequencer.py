"""Orders client requests from all connections by receive time."""

from operator import itemgetter

from matchbook.errors import fatal
from matchbook.time_utils import current_time_str

ME_MAX_PENDING_REQUESTS = 1024


class FIFOSequencer:
    """Collects requests with their receive times and publishes them oldest first."""

    def __init__(self, client_requests, logger):
        self._incoming_requests = client_requests
        self._logger = logger
        self._pending = []

    def add_client_request(self, rx_time, request):
        """Hold ``request`` received at ``rx_time`` until the next publish."""
        if len(self._pending) >= ME_MAX_PENDING_REQUESTS:
            fatal("Too many pending requests")
        self._pending.append((rx_time, request))

    def sequence_and_publish(self):
        """Sort pending requests by receive time and push them onto the request queue."""
        if not self._pending:
            return

        self._logger.log(
            "%() % Processing % requests.\n",
            "FIFOSequencer.sequence_and_publish",
            current_time_str(),
            len(self._pending),
        )

        self._pending.sort(key=itemgetter(0))

        for rx_time, request in self._pending:
            self._logger.log(
                "%() % Writing RX:% Req:% to FIFO.\n",
                "FIFOSequencer.sequence_and_publish",
                current_time_str(),
                rx_time,
                request,
            )
            self._incoming_requests.push(request)

        self._pending.clear()