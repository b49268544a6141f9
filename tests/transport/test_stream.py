import io
import threading
import time

import pytest

from stompwire.protocol import factory
from stompwire.protocol.frame import Frame
from stompwire.transport.stream import FrameReader, FrameWriter


def reader_for(data):
    return FrameReader(io.BytesIO(data))


def test_read_frame():

    reader = reader_for(b'SEND\ndestination:/queue/x\nreceipt:77\n\nhello\x00')
    frame = reader.read_frame(1)

    assert frame.action == 'SEND'
    assert list(frame.headers.items()) == [('destination', '/queue/x'), ('receipt', '77')]
    assert frame.body == b'hello'


def test_empty_stream_zero_timeout():

    start = time.monotonic()
    assert reader_for(b'').read_frame(0) is None
    assert time.monotonic() - start < 0.5


def test_zero_timeout_reads_available_frame():

    frame = reader_for(b'DISCONNECT\n\n\x00').read_frame(0)
    assert frame.action == 'DISCONNECT'
    assert frame.body is None


def test_socket_without_data_times_out(pair):

    near, far = pair
    reader = FrameReader(near)

    start = time.monotonic()
    assert reader.read_frame(0.2) is None
    elapsed = time.monotonic() - start

    assert elapsed >= 0.1
    assert elapsed < 2


def test_heartbeats_skipped():

    reader = reader_for(b'\n\r\n\nCONNECTED\nversion:1.2\n\n\x00\n\n')

    frame = reader.read_frame(0)
    assert frame.action == 'CONNECTED'
    assert frame.headers == {'version': '1.2'}

    assert reader.read_frame(0) is None


def test_malformed_header_skipped():

    frame = reader_for(b'SEND\ndestination:/q\nnocolon\nx:1:2\n\n\x00').read_frame(0)
    assert frame.headers == {'destination': '/q', 'x': '1:2'}


def test_last_header_wins():

    frame = reader_for(b'SEND\na:1\nb:2\na:3\n\n\x00').read_frame(0)
    assert list(frame.headers.items()) == [('a', '3'), ('b', '2')]


def test_header_decoding():

    frame = reader_for(b'MESSAGE\nnote:a\\cb\\nc\\q\n\n\x00').read_frame(0)
    assert frame.headers['note'] == 'a:b\nc\\q'

    frame = reader_for(b'CONNECTED\nserver:a\\cb\n\n\x00').read_frame(0)
    assert frame.headers['server'] == 'a\\cb'


def test_crlf_lines():

    frame = reader_for(b'SEND\r\ndestination:/q\r\n\r\nbody\x00').read_frame(0)
    assert frame.action == 'SEND'
    assert frame.headers == {'destination': '/q'}
    assert frame.body == b'body'


def test_content_length_truncates():

    reader = reader_for(b'SEND\ncontent-length:2\n\nhello\x00')
    frame = reader.read_frame(0)

    assert frame.body == b'he'
    assert reader.read(4) == b'llo\x00'


def test_content_length_allows_nul():

    frame = reader_for(b'SEND\ncontent-length:5\n\nhe\x00lo\x00').read_frame(0)
    assert frame.body == b'he\x00lo'


def test_body_ends_at_nul():

    reader = reader_for(b'SEND\n\nab\x00cd\x00')
    frame = reader.read_frame(0)

    assert frame.body == b'ab'
    assert reader.read() == b'cd\x00'


def test_body_ends_with_input():

    frame = reader_for(b'SEND\n\nabc').read_frame(0)
    assert frame.body == b'abc'


def test_consecutive_frames():

    data = b'SEND\ncontent-length:2\n\nhi\x00\nMESSAGE\n\nthere\x00\n'
    reader = reader_for(data)

    first = reader.read_frame(0)
    second = reader.read_frame(0)

    assert first.action == 'SEND'
    assert first.text == 'hi'
    assert second.action == 'MESSAGE'
    assert second.text == 'there'
    assert reader.read_frame(0) is None


def test_utf8():

    frame = reader_for('SEND\ndestination:/q/é\n\né\x00'.encode('utf-8')).read_frame(0)
    assert frame.destination == '/q/é'
    assert frame.text == 'é'


def test_unknown_action_is_generic():

    frame = reader_for(b'BOGUS\nx:1\n\n\x00').read_frame(0)
    assert frame.action == 'BOGUS'
    assert frame.headers == {'x': '1'}


def test_custom_create():

    created = list()

    def create(action):
        frame = Frame(action)
        created.append(frame)
        return frame

    reader = FrameReader(io.BytesIO(b'RECEIPT\nreceipt-id:1\n\n\x00'), create)
    frame = reader.read_frame(0)

    assert created == [frame]
    assert frame.receipt_id == '1'


def test_partial_frame_completes(pair):

    near, far = pair
    reader = FrameReader(near)

    far.sendall(b'SEN')
    timer = threading.Timer(0.1, far.sendall, (b'D\ndestination:/q\n\nhi\x00',))
    timer.start()

    frame = reader.read_frame(2)
    timer.join()

    assert frame.action == 'SEND'
    assert frame.destination == '/q'
    assert frame.text == 'hi'


def test_busy_lock_returns_none():

    reader = reader_for(b'SEND\n\n\x00')
    reader.lock.acquire()

    try:
        start = time.monotonic()
        assert reader.read_frame(0.1) is None
        assert time.monotonic() - start >= 0.05
        assert reader.read_frame(0) is None
    finally:
        reader.lock.release()

    assert reader.read_frame(0).action == 'SEND'


def test_concurrent_readers_share_one_frame(pair):

    near, far = pair
    reader = FrameReader(near)
    results = list()

    def read():
        results.append(reader.read_frame(0.5))

    threads = [threading.Thread(target=read) for i in range(2)]
    for thread in threads:
        thread.start()

    time.sleep(0.1)
    far.sendall(b'MESSAGE\ndestination:/q\n\nonce\x00')

    for thread in threads:
        thread.join()

    frames = [frame for frame in results if frame is not None]
    assert len(results) == 2
    assert len(frames) == 1
    assert frames[0].text == 'once'


class Broken:

    def read1(self, size):
        raise OSError('connection reset')


def test_io_failure_propagates():

    reader = FrameReader(Broken())

    with pytest.raises(OSError):
        reader.read_frame(0)

    assert reader.lock.locked() == False


def test_write_frame():

    stream = io.BytesIO()
    writer = FrameWriter(stream)
    writer.write_frame(factory.send('/queue/x', 'hi'))

    assert stream.getvalue() == b'SEND\ndestination:/queue/x\ncontent-length:2\n\nhi\x00'


def test_write_then_read(pair):

    near, far = pair

    FrameWriter(far).write_frame(factory.send('/queue/x', 'hi'))
    frame = FrameReader(near).read_frame(1)

    assert frame.action == 'SEND'
    assert frame.destination == '/queue/x'
    assert frame.text == 'hi'


def test_concurrent_writers(pair):

    near, far = pair
    writer = FrameWriter(far)
    reader = FrameReader(near)

    def write(number):
        for count in range(25):
            body = '%d-%d' % (number, count) * 50
            writer.write_frame(factory.send('/queue/x', body))

    threads = [threading.Thread(target=write, args=(number,)) for number in range(4)]
    for thread in threads:
        thread.start()

    frames = list()
    while len(frames) < 100:
        frame = reader.read_frame(2)
        assert frame is not None
        frames.append(frame)

    for thread in threads:
        thread.join()

    for frame in frames:
        assert frame.destination == '/queue/x'
        assert len(frame.body) == frame.content_length


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
