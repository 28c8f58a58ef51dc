import pytest

from matchbook.client_request import ClientRequestType, MEClientRequest, OMClientRequest
from matchbook.client_response import ClientResponseType, MEClientResponse, OMClientResponse
from matchbook.errors import FatalError
from matchbook.lf_queue import LFQueue
from matchbook.order_server import OrderServer
from matchbook.tcp_socket import TCPSocket
from matchbook.types import ME_MAX_NUM_CLIENTS, Side


@pytest.fixture
def queues():
    return LFQueue(64), LFQueue(64)


@pytest.fixture
def server(tmp_path, monkeypatch, queues):
    monkeypatch.chdir(tmp_path)
    requests, responses = queues
    order_server = OrderServer(requests, responses, "lo", 0)
    yield order_server
    order_server.close()


def _request(client_id, order_id):
    return MEClientRequest(ClientRequestType.NEW, client_id, 0, order_id, Side.BUY, 100, 10)


def _wire(seq_num, client_id, order_id):
    return OMClientRequest(seq_num, _request(client_id, order_id)).to_bytes()


def _socket(server):
    return TCPSocket(server._logger)


def _drain(queue):
    items = []
    while len(queue):
        items.append(queue.pop())
    return items


def test_request_forwarded_after_round_finishes(server, queues):
    requests, _ = queues
    sock = _socket(server)
    sock.inbound_data += _wire(1, 3, 7)

    server.recv_callback(sock, 50)
    assert len(requests) == 0
    assert sock.inbound_data == bytearray()

    server.recv_finished_callback()
    assert _drain(requests) == [_request(3, 7)]


def test_partial_message_is_kept_for_next_read(server, queues):
    requests, _ = queues
    sock = _socket(server)
    second = _wire(2, 3, 8)
    sock.inbound_data += _wire(1, 3, 7) + second[:10]

    server.recv_callback(sock, 1)
    assert sock.inbound_data == bytearray(second[:10])

    sock.inbound_data += second[10:]
    server.recv_callback(sock, 2)
    server.recv_finished_callback()
    assert _drain(requests) == [_request(3, 7), _request(3, 8)]


def test_sequence_gap_is_dropped(server, queues):
    requests, _ = queues
    sock = _socket(server)
    sock.inbound_data += _wire(1, 4, 1) + _wire(3, 4, 2) + _wire(2, 4, 3)

    server.recv_callback(sock, 1)
    server.recv_finished_callback()
    assert _drain(requests) == [_request(4, 1), _request(4, 3)]


def test_request_on_other_connection_is_dropped(server, queues):
    requests, _ = queues
    first, second = _socket(server), _socket(server)
    first.inbound_data += _wire(1, 5, 1)
    second.inbound_data += _wire(2, 5, 2)

    server.recv_callback(first, 1)
    server.recv_callback(second, 2)
    server.recv_finished_callback()
    assert _drain(requests) == [_request(5, 1)]
    assert second.inbound_data == bytearray()


def test_requests_published_in_receive_time_order(server, queues):
    requests, _ = queues
    late, early = _socket(server), _socket(server)
    late.inbound_data += _wire(1, 1, 11)
    early.inbound_data += _wire(1, 2, 22)

    server.recv_callback(late, 200)
    server.recv_callback(early, 100)
    server.recv_finished_callback()
    assert _drain(requests) == [_request(2, 22), _request(1, 11)]


def test_out_of_range_client_id_is_fatal(server):
    sock = _socket(server)
    sock.inbound_data += _wire(1, ME_MAX_NUM_CLIENTS, 1)
    with pytest.raises(FatalError):
        server.recv_callback(sock, 1)


def test_responses_are_sequenced_per_client(server, queues):
    _, responses = queues
    sock = _socket(server)
    sock.inbound_data += _wire(1, 6, 1) + _wire(2, 6, 2)
    server.recv_callback(sock, 1)

    accepted = MEClientResponse(ClientResponseType.ACCEPTED, 6, 0, 1, 1, Side.BUY, 100, 0, 10)
    filled = MEClientResponse(ClientResponseType.FILLED, 6, 0, 1, 1, Side.BUY, 100, 10, 0)
    responses.push(accepted)
    responses.push(filled)

    assert server._send_responses() is True
    assert len(responses) == 0
    expected = OMClientResponse(1, accepted).to_bytes() + OMClientResponse(2, filled).to_bytes()
    assert sock.outbound_data == bytearray(expected)


def test_response_for_unknown_client_is_fatal(server, queues):
    _, responses = queues
    responses.push(MEClientResponse(ClientResponseType.ACCEPTED, 9, 0, 1, 1, Side.SELL, 100, 0, 10))
    with pytest.raises(FatalError):
        server._send_responses()


def test_no_responses_reports_nothing_sent(server, queues):
    _, responses = queues
    assert server._send_responses() is False
    assert len(responses) == 0