import os
import threading
import unittest

from io import BytesIO
from tempfile import TemporaryDirectory

from tinytftp import context, states
from tinytftp.packet import types, decode
from tinytftp.transport import UdpEndpoint
from tinytftp.shared import Phase, TftpErrors
from tinytftp.exceptions import (TftpException, TftpFileError, TftpIOError,
                                 TftpFileNotFoundError, TftpProtocolError,
                                 TftpRemoteError, TftpRetriesExhausted)

class FakePeer(UdpEndpoint):
    """The other end of a transfer, scripted packet by packet."""

    def __init__(self):
        super().__init__('127.0.0.1')
        self.source = None

    def recv_packet(self, timeout=2):
        buffer, self.source = self.receive(timeout)
        return decode(buffer)

    def reply(self, pkt, address=None):
        self.send_to(pkt.encode().buffer, address or self.source)

    def drain(self, timeout=0.2):
        """Every packet still queued, until the line goes quiet."""
        pkts = []
        while True:
            try:
                pkts.append(self.recv_packet(timeout))
            except TftpException:
                return pkts


def in_thread(script):
    """Run a peer script in the background, keeping any failure for later."""
    failures = []

    def run():
        try:
            script()
        except Exception as err:
            failures.append(err)

    thread = threading.Thread(target=run)
    thread.start()
    return thread, failures


class TestTftpyServerContext(unittest.TestCase):

    def setUp(self):
        self.tmp = TemporaryDirectory()
        self.root = self.tmp.name
        self.content = os.urandom(1000)
        with open(os.path.join(self.root, '1000BFILE'), 'wb') as f:
            f.write(self.content)
        self.client = FakePeer()
        self.raddress, self.rport = self.client.address

    def tearDown(self):
        self.client.close()
        self.tmp.cleanup()

    def server_context(self):
        return context.Server(self.raddress, self.rport, 5, self.root)

    def test_context_server_download(self):
        with self.server_context() as serverstate:
            self.assertEqual(serverstate.phase, Phase.IDLE)
            serverstate.state = serverstate.state.handle(types.ReadRQ('1000BFILE'),
                                                         self.raddress, self.rport)
            self.assertIsInstance(serverstate.state, states.ExpectAck)
            self.assertEqual(serverstate.phase, Phase.TRANSFERRING)
            self.assertEqual(self.client.recv_packet(), types.Data(1, self.content[:512]))

            serverstate.state = serverstate.state.handle(types.Ack(1), self.raddress, self.rport)
            self.assertIsInstance(serverstate.state, states.ExpectAck)
            self.assertEqual(self.client.recv_packet(), types.Data(2, self.content[512:]))

            serverstate.state = serverstate.state.handle(types.Ack(2), self.raddress, self.rport)
            self.assertIsNone(serverstate.state)
            self.assertEqual(serverstate.phase, Phase.COMPLETED)
            self.assertEqual(serverstate.metrics.blocks, 2)

        self.assertTrue(serverstate.fileobj.closed)
        self.assertTrue(serverstate.endpoint.closed)

    def test_context_server_download_exact_multiple(self):
        with open(os.path.join(self.root, '1024BFILE'), 'wb') as f:
            f.write(b"x" * 1024)

        with self.server_context() as serverstate:
            serverstate.state = serverstate.state.handle(types.ReadRQ('1024BFILE'),
                                                         self.raddress, self.rport)
            for block in (1, 2):
                serverstate.state = serverstate.state.handle(types.Ack(block), self.raddress, self.rport)
            # The final DAT packet should be empty.
            self.assertEqual([len(p.data) for p in self.client.drain()], [512, 512, 0])
            finalstate = serverstate.state.handle(types.Ack(3), self.raddress, self.rport)
            self.assertIsNone(finalstate)

    def test_context_server_duplicate_ack_discarded(self):
        with self.server_context() as serverstate:
            serverstate.state = serverstate.state.handle(types.ReadRQ('1000BFILE'),
                                                         self.raddress, self.rport)
            serverstate.state = serverstate.state.handle(types.Ack(1), self.raddress, self.rport)
            current = serverstate.state
            serverstate.state = serverstate.state.handle(types.Ack(1), self.raddress, self.rport)
            self.assertIs(serverstate.state, current)
            self.assertEqual(serverstate.next_block, 2)
            self.assertEqual(serverstate.metrics.discarded, 1)

    def test_context_server_unexpected_ack(self):
        with self.server_context() as serverstate:
            serverstate.state = serverstate.state.handle(types.ReadRQ('1000BFILE'),
                                                         self.raddress, self.rport)
            self.assertRaises(TftpProtocolError, serverstate.state.handle,
                              types.Ack(7), self.raddress, self.rport)
            pkts = self.client.drain()
            self.assertEqual(pkts[-1].errorcode, TftpErrors.ILLEGALTFTPOP)

    def test_context_server_file_not_found(self):
        with self.server_context() as serverstate:
            self.assertRaises(TftpFileNotFoundError, serverstate.state.handle,
                              types.ReadRQ('nosuchfile'), self.raddress, self.rport)
        self.assertEqual(self.client.recv_packet(), types.Error(1, "File not found"))

    def test_context_server_insecure_path(self):
        with self.server_context() as serverstate:
            self.assertRaises(TftpFileError, serverstate.state.handle,
                              types.ReadRQ('../setup.py'), self.raddress, self.rport)
        self.assertEqual(self.client.recv_packet().errorcode, TftpErrors.ACCESSVIOLATION)

    def test_context_server_leading_slash(self):
        with self.server_context() as serverstate:
            serverstate.state = serverstate.state.handle(types.ReadRQ('/1000BFILE'),
                                                         self.raddress, self.rport)
            self.assertIsInstance(serverstate.state, states.ExpectAck)

    def test_context_server_unsupported_mode(self):
        with self.server_context() as serverstate:
            self.assertRaises(TftpProtocolError, serverstate.state.handle,
                              types.ReadRQ('1000BFILE', 'netascii'), self.raddress, self.rport)
        self.assertEqual(self.client.recv_packet().errorcode, TftpErrors.ILLEGALTFTPOP)

    def test_context_server_upload(self):
        with self.server_context() as serverstate:
            serverstate.state = serverstate.state.handle(types.WriteRQ('uploaded'),
                                                         self.raddress, self.rport)
            self.assertIsInstance(serverstate.state, states.ExpectData)
            self.assertEqual(self.client.recv_packet(), types.Ack(0))

            serverstate.state = serverstate.state.handle(types.Data(1, b"a" * 512),
                                                         self.raddress, self.rport)
            self.assertEqual(self.client.recv_packet(), types.Ack(1))

            # Out of order blocks are dropped without an ACK.
            current = serverstate.state
            serverstate.state = serverstate.state.handle(types.Data(3, b"c"),
                                                         self.raddress, self.rport)
            self.assertIs(serverstate.state, current)
            self.assertEqual(serverstate.metrics.discarded, 1)

            serverstate.state = serverstate.state.handle(types.Data(2, b"end"),
                                                         self.raddress, self.rport)
            self.assertEqual(self.client.recv_packet(), types.Ack(2))
            self.assertIsNone(serverstate.state)
            self.assertEqual(serverstate.phase, Phase.COMPLETED)

        with open(os.path.join(self.root, 'uploaded'), 'rb') as f:
            self.assertEqual(f.read(), b"a" * 512 + b"end")

    def test_context_server_cannot_create(self):
        with self.server_context() as serverstate:
            self.assertRaises(TftpFileError, serverstate.state.handle,
                              types.WriteRQ('nosuchdir/uploaded'), self.raddress, self.rport)
        self.assertEqual(self.client.recv_packet(), types.Error(2, "Cannot create file"))

    def test_context_server_data_without_write_request(self):
        with self.server_context() as serverstate:
            self.assertRaises(TftpProtocolError, serverstate.state.handle,
                              types.Data(1, b"data"), self.raddress, self.rport)
        self.assertEqual(self.client.recv_packet(), types.Error(5, "No write request received"))

    def test_context_server_illegal_first_packet(self):
        with self.server_context() as serverstate:
            self.assertRaises(TftpProtocolError, serverstate.state.handle,
                              types.Ack(0), self.raddress, self.rport)
        self.assertEqual(self.client.recv_packet(), types.Error(4, "Illegal TFTP operation"))

    def test_context_server_malformed_request(self):
        serverstate = self.server_context()
        with self.assertRaises(TftpProtocolError):
            with serverstate:
                serverstate.start(b"\x00\x09junk")
        self.assertEqual(serverstate.phase, Phase.ABORTED)
        self.assertEqual(self.client.recv_packet().errorcode, TftpErrors.ILLEGALTFTPOP)

    def test_context_server_download_remote_error(self):
        def script():
            self.client.recv_packet()
            self.client.reply(types.Ack(1))
            self.client.recv_packet()
            self.client.reply(types.Error(0, "Transfer cancelled"))

        thread, failures = in_thread(script)
        serverstate = self.server_context()
        with self.assertRaises(TftpRemoteError) as ctx:
            with serverstate:
                serverstate.start(types.ReadRQ('1000BFILE').encode().buffer)
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(ctx.exception.errmsg, "Transfer cancelled")
        self.assertEqual(serverstate.next_block, 2)
        self.assertEqual(serverstate.metrics.resent_packets, 0)
        self.assertTrue(serverstate.endpoint.closed)
        self.assertTrue(serverstate.fileobj.closed)
        # Nothing goes out in reply to an ERR.
        self.assertEqual(self.client.drain(), [])

    def test_context_server_upload_remote_error(self):
        def script():
            self.client.recv_packet()
            self.client.reply(types.Data(1, b"p" * 512))
            self.client.recv_packet()
            self.client.reply(types.Error(3))

        thread, failures = in_thread(script)
        serverstate = self.server_context()
        with self.assertRaises(TftpRemoteError) as ctx:
            with serverstate:
                serverstate.start(types.WriteRQ('partial').encode().buffer)
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(ctx.exception.error_code, TftpErrors.DISKFULL)
        self.assertEqual(serverstate.metrics.resent_packets, 0)
        self.assertEqual(serverstate.phase, Phase.ABORTED)
        self.assertTrue(serverstate.endpoint.closed)
        self.assertTrue(serverstate.fileobj.closed)
        self.assertFalse(os.path.exists(os.path.join(self.root, 'partial')))


class TestTftpyClientContext(unittest.TestCase):

    def setUp(self):
        self.tmp = TemporaryDirectory()
        self.server = FakePeer()
        self.host, self.port = self.server.address

    def tearDown(self):
        self.server.close()
        self.tmp.cleanup()

    def source_file(self, size):
        path = os.path.join(self.tmp.name, f'src{size}')
        with open(path, 'wb') as f:
            f.write(os.urandom(size))
        return path

    def test_context_client_upload_retries_exhausted(self):
        client = context.Upload(self.host, self.port, 0.05, self.source_file(1000),
                                filename='test_upload', retries=5)
        self.assertIsNone(client.state)
        self.assertEqual(client.phase, Phase.IDLE)

        with self.assertRaises(TftpRetriesExhausted):
            with client:
                client.start()

        self.assertIsInstance(client.state, states.SentWriteRQ)
        self.assertEqual(client.phase, Phase.ABORTED)
        self.assertTrue(client.endpoint.closed)
        self.assertTrue(client.fileobj.closed)

        sent = self.server.drain()
        self.assertEqual(sent, [types.WriteRQ('test_upload')] * 5)
        self.assertEqual(client.metrics.timeouts, 5)
        self.assertEqual(client.metrics.resent_packets, 4)

    def test_context_client_upload_missing_file(self):
        missing = os.path.join(self.tmp.name, 'missing')
        self.assertRaises(TftpFileNotFoundError, context.Upload,
                          self.host, self.port, 1, missing, filename='missing')

    def test_context_client_upload_error_aborts(self):
        def script():
            self.server.recv_packet()
            self.server.reply(types.Error(2, "Cannot create file"))

        thread, failures = in_thread(script)
        client = context.Upload(self.host, self.port, 1, self.source_file(100),
                                filename='test_upload')
        with self.assertRaises(TftpRemoteError) as ctx:
            with client:
                client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(ctx.exception.error_code, 2)
        self.assertEqual(ctx.exception.errmsg, "Cannot create file")
        self.assertEqual(client.metrics.resent_packets, 0)
        self.assertTrue(client.fileobj.closed)
        # Nothing else went out, not even an ERR in reply.
        self.assertEqual(self.server.drain(), [])

    def test_context_client_upload_unexpected_ack(self):
        received = []

        def script():
            self.server.recv_packet()
            self.server.reply(types.Ack(7))
            received.append(self.server.recv_packet())

        thread, failures = in_thread(script)
        client = context.Upload(self.host, self.port, 1, self.source_file(100),
                                filename='test_upload')
        with self.assertRaises(TftpProtocolError):
            with client:
                client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(received[0].errorcode, TftpErrors.ILLEGALTFTPOP)

    def test_context_client_upload_duplicate_ack(self):
        src = self.source_file(512)
        blocks = []

        def script():
            self.server.recv_packet()
            self.server.reply(types.Ack(0))
            blocks.append(self.server.recv_packet())
            self.server.reply(types.Ack(0))
            self.server.reply(types.Ack(1))
            blocks.append(self.server.recv_packet())
            self.server.reply(types.Ack(2))

        thread, failures = in_thread(script)
        with context.Upload(self.host, self.port, 1, src, filename='test_upload') as client:
            client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual([(b.blocknumber, len(b.data)) for b in blocks], [(1, 512), (2, 0)])
        self.assertEqual(client.phase, Phase.COMPLETED)
        self.assertEqual(client.metrics.discarded, 1)

    def test_context_client_download_resends_request(self):
        output = BytesIO()
        requests = []

        def script():
            requests.append(self.server.recv_packet())
            # Say nothing, the client should ask again.
            requests.append(self.server.recv_packet())
            self.server.reply(types.Data(1, b"abc"))
            requests.append(self.server.recv_packet())

        thread, failures = in_thread(script)
        with context.Download(self.host, self.port, 0.3, output, filename='remote') as client:
            client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(requests, [types.ReadRQ('remote'), types.ReadRQ('remote'), types.Ack(1)])
        self.assertEqual(output.getvalue(), b"abc")
        self.assertEqual(client.phase, Phase.COMPLETED)
        # A file-like object passed in is left open for the caller.
        self.assertFalse(output.closed)

    def test_context_client_download_out_of_order(self):
        output = BytesIO()
        acks = []

        def script():
            self.server.recv_packet()
            self.server.reply(types.Data(2, b"b" * 512))
            self.server.reply(types.Data(5, b"e"))
            self.server.reply(types.Data(1, b"a" * 512))
            acks.append(self.server.recv_packet())
            self.server.reply(types.Data(2, b"yz"))
            acks.append(self.server.recv_packet())

        thread, failures = in_thread(script)
        with context.Download(self.host, self.port, 1, output, filename='remote') as client:
            client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(acks, [types.Ack(1), types.Ack(2)])
        self.assertEqual(output.getvalue(), b"a" * 512 + b"yz")
        self.assertEqual(client.metrics.discarded, 2)
        self.assertEqual(client.metrics.timeouts, 0)

    def test_context_client_download_unknown_transfer_id(self):
        output = BytesIO()
        stranger = FakePeer()
        replies = []

        def script():
            self.server.recv_packet()
            self.server.reply(types.Data(1, b"a" * 512))
            self.server.recv_packet()
            stranger.reply(types.Data(2, b"evil"), self.server.source)
            replies.append(stranger.recv_packet())
            self.server.reply(types.Data(2, b"ok"))
            self.server.recv_packet()

        thread, failures = in_thread(script)
        try:
            with context.Download(self.host, self.port, 1, output, filename='remote') as client:
                client.start()
            thread.join()
        finally:
            stranger.close()

        self.assertEqual(failures, [])
        self.assertEqual(replies[0].errorcode, TftpErrors.UNKNOWNTID)
        self.assertEqual(output.getvalue(), b"a" * 512 + b"ok")
        self.assertEqual(client.peer, (self.host, self.port))

    def test_context_client_download_remote_error_removes_file(self):
        output = os.path.join(self.tmp.name, 'test_context_client_download')

        def script():
            self.server.recv_packet()
            self.server.reply(types.Error(1))

        thread, failures = in_thread(script)
        client = context.Download(self.host, self.port, 1, output, filename='remote')
        with self.assertRaises(TftpRemoteError) as ctx:
            with client:
                client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(ctx.exception.error_code, TftpErrors.FILENOTFOUND)
        self.assertFalse(os.path.exists(output))
        self.assertTrue(client.endpoint.closed)
        self.assertEqual(client.phase, Phase.ABORTED)

    def test_context_client_upload_remote_error_mid_transfer(self):
        def script():
            self.server.recv_packet()
            self.server.reply(types.Ack(0))
            self.server.recv_packet()
            self.server.reply(types.Ack(1))
            self.server.recv_packet()
            self.server.reply(types.Error(3))

        thread, failures = in_thread(script)
        client = context.Upload(self.host, self.port, 1, self.source_file(1500),
                                filename='test_upload')
        with self.assertRaises(TftpRemoteError) as ctx:
            with client:
                client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(ctx.exception.error_code, TftpErrors.DISKFULL)
        self.assertEqual(client.next_block, 2)
        self.assertEqual(client.metrics.resent_packets, 0)
        self.assertTrue(client.endpoint.closed)
        self.assertTrue(client.fileobj.closed)
        self.assertEqual(self.server.drain(), [])

    def test_context_client_download_remote_error_mid_transfer(self):
        output = os.path.join(self.tmp.name, 'test_context_client_download')

        def script():
            self.server.recv_packet()
            self.server.reply(types.Data(1, b"a" * 512))
            self.server.recv_packet()
            self.server.reply(types.Error(0, "Transfer cancelled"))

        thread, failures = in_thread(script)
        client = context.Download(self.host, self.port, 1, output, filename='remote')
        with self.assertRaises(TftpRemoteError):
            with client:
                client.start()
        thread.join()

        self.assertEqual(failures, [])
        self.assertEqual(client.next_block, 2)
        self.assertEqual(client.metrics.resent_packets, 0)
        self.assertTrue(client.endpoint.closed)
        self.assertTrue(client.fileobj.closed)
        self.assertFalse(os.path.exists(output))

    def test_context_client_download_send_failure_removes_file(self):
        output = os.path.join(self.tmp.name, 'test_context_client_download')
        client = context.Download(self.host, self.port, 1, output, filename='remote')
        self.assertTrue(os.path.exists(output))
        client.endpoint.close()

        with self.assertRaises(TftpIOError):
            with client:
                client.start()

        self.assertFalse(os.path.exists(output))
        self.assertEqual(client.phase, Phase.ABORTED)

    def test_context_client_download_retries_exhausted(self):
        output = os.path.join(self.tmp.name, 'test_context_client_download')
        client = context.Download(self.host, self.port, 0.05, output,
                                  filename='remote', retries=3)
        with self.assertRaises(TftpRetriesExhausted):
            with client:
                client.start()

        self.assertTrue(client.fileobj.closed)
        self.assertTrue(client.endpoint.closed)
        self.assertEqual(self.server.drain(), [types.ReadRQ('remote')] * 3)

    def test_context_block_rollover(self):
        with context.Download(self.host, self.port, 1, BytesIO(), filename='remote') as client:
            client.next_block = 65535
            client.next_block += 1
            self.assertEqual(client.next_block, 0)

if __name__ == '__main__':
    unittest.main()
