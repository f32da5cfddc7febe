"""Tests for CLI command handlers."""

from unittest.mock import Mock

from bigfile.codec import ChunkedObjectCodec
from bigfile.manifest import BigFileManifest
from cli.commands import (
    handle_delete,
    handle_domains,
    handle_get,
    handle_get_big,
    handle_list,
    handle_paths,
    handle_put,
    handle_put_big,
    handle_rename,
)
from cli.models import (
    DeleteCommand,
    DomainsCommand,
    GetBigCommand,
    GetCommand,
    ListCommand,
    PathsCommand,
    PutBigCommand,
    PutCommand,
    RenameCommand,
)
from cli.repl import dispatch_command
from common.exceptions import IntegrityError, RemoteError, TrackerConnectionError, TransferError
from common.types import ByKey, CreateOpenResult
from tracker.client import MogileClient


def _client():
    return Mock(spec=MogileClient)


class TestDirectoryCommands:

    def test_domains(self):
        client = _client()
        client.get_domains.return_value = {'photos': {'default': 2, 'thumbs': 1}}

        result = handle_domains(DomainsCommand(), client=client)

        assert "Found 1 domain(s):" in result
        assert "photos" in result
        assert "thumbs (mindevcount=1)" in result

    def test_domains_empty(self):
        client = _client()
        client.get_domains.return_value = {}

        assert handle_domains(DomainsCommand(), client=client) == "No domains found."

    def test_domains_connection_error(self):
        client = _client()
        client.get_domains.side_effect = TrackerConnectionError("Unable to connect to any tracker")

        assert handle_domains(DomainsCommand(), client=client) == "Error: Unable to connect to any tracker"

    def test_paths(self):
        client = _client()
        client.get_paths.return_value = ['http://n1/a.fid', 'http://n2/a.fid']

        result = handle_paths(PathsCommand(key='a'), client=client)

        assert "2 path(s) for a:" in result
        assert "http://n2/a.fid" in result

    def test_paths_none(self):
        client = _client()
        client.get_paths.return_value = []

        assert handle_paths(PathsCommand(key='a'), client=client) == "No paths found for key: a"

    def test_list(self):
        client = _client()
        client.iter_keys.return_value = iter(['photo:1', 'photo:2'])

        result = handle_list(ListCommand(prefix='photo:'), client=client)

        client.iter_keys.assert_called_once_with('photo:')
        assert "Found 2 key(s):" in result
        assert "  - photo:2" in result

    def test_list_empty(self):
        client = _client()
        client.iter_keys.return_value = iter([])

        assert handle_list(ListCommand(), client=client) == "No keys found matching prefix: (all)"

    def test_delete(self):
        client = _client()

        assert handle_delete(DeleteCommand(key='a'), client=client) == "Deleted: a"
        client.delete.assert_called_once_with('a')

    def test_delete_unknown_key(self):
        client = _client()
        client.delete.side_effect = RemoteError("ERR unknown_key unknown_key", "unknown_key", "unknown_key")

        assert handle_delete(DeleteCommand(key='a'), client=client).startswith("Error: ")

    def test_rename(self):
        client = _client()

        assert handle_rename(RenameCommand(from_key='a', to_key='b'), client=client) == "Renamed: a -> b"
        client.rename.assert_called_once_with('a', 'b')


class TestTransferCommands:

    def test_put(self, tmp_path):
        source = tmp_path / 'photo.jpg'
        source.write_bytes(b'x' * 2048)
        client = _client()
        uploaded = {}

        def store_stream(key, cls, reader, length):
            uploaded['data'] = reader.read(length)
            return CreateOpenResult(path='http://n1/1.fid', devid='1', fid='1')

        client.store_stream.side_effect = store_stream

        result = handle_put(PutCommand(key='photo:1', file_path=str(source)), client=client, default_class='default')

        assert uploaded['data'] == b'x' * 2048
        assert result == "Stored: photo:1 (2.00 KiB, class default) at http://n1/1.fid"
        assert client.store_stream.call_args.args[:2] == ('photo:1', 'default')

    def test_put_explicit_class(self, tmp_path):
        source = tmp_path / 'photo.jpg'
        source.write_bytes(b'x')
        client = _client()
        client.store_stream.return_value = CreateOpenResult(path='http://n1/1.fid', devid='1', fid='1')

        handle_put(PutCommand(key='k', file_path=str(source), storage_class='large'), client=client,
                   default_class='default')

        assert client.store_stream.call_args.args[1] == 'large'

    def test_put_missing_file(self, tmp_path):
        client = _client()

        result = handle_put(PutCommand(key='k', file_path=str(tmp_path / 'nope')), client=client,
                            default_class='default')

        assert result.startswith("Error: File not found")
        client.store_stream.assert_not_called()

    def test_put_transfer_error(self, tmp_path):
        source = tmp_path / 'photo.jpg'
        source.write_bytes(b'x')
        client = _client()
        client.store_stream.side_effect = TransferError("PUT http://n1/1.fid failed: 500")

        result = handle_put(PutCommand(key='k', file_path=str(source)), client=client, default_class='default')

        assert result == "Error: PUT http://n1/1.fid failed: 500"

    def test_get(self, tmp_path):
        client = _client()

        def passthru(destination, out):
            out.write(b'payload')
            return 7

        client.passthru.side_effect = passthru
        output = tmp_path / 'out.bin'

        result = handle_get(GetCommand(key='photo:1', output_path=str(output)), client=client)

        assert output.read_bytes() == b'payload'
        assert result == f"Downloaded: photo:1 -> {output} (7 B)"
        assert client.passthru.call_args.args[0] == ByKey('photo:1')

    def test_get_failure_leaves_no_file(self, tmp_path):
        client = _client()
        client.passthru.side_effect = TransferError("GET failed")
        output = tmp_path / 'out.bin'

        result = handle_get(GetCommand(key='photo:1', output_path=str(output)), client=client)

        assert result == "Error: GET failed"
        assert list(tmp_path.iterdir()) == []


class TestBigFileCommands:

    def test_put_big(self, tmp_path):
        source = tmp_path / 'backup.tar'
        source.write_bytes(b'x' * 10)
        codec = Mock(spec=ChunkedObjectCodec)
        codec.store_file.return_value = BigFileManifest(
            filename='backup.tar', total_size=3 * 1024 * 1024, chunk_count=3, chunks={},
        )

        result = handle_put_big(PutBigCommand(key='backup', file_path=str(source)), codec=codec,
                                default_class='large')

        codec.store_file.assert_called_once_with('backup', 'large', str(source))
        assert result == "Stored big file: backup (3.00 MiB in 3 chunk(s), class large)"

    def test_put_big_missing_file(self, tmp_path):
        codec = Mock(spec=ChunkedObjectCodec)

        result = handle_put_big(PutBigCommand(key='b', file_path=str(tmp_path / 'nope')), codec=codec,
                                default_class='large')

        assert result.startswith("Error: File not found")

    def test_get_big(self, tmp_path):
        codec = Mock(spec=ChunkedObjectCodec)
        codec.get_file.return_value = tmp_path / 'backup.tar'

        result = handle_get_big(GetBigCommand(key='backup', directory=str(tmp_path)), codec=codec)

        codec.get_file.assert_called_once_with('backup', str(tmp_path))
        assert result == f"Downloaded big file: backup -> {tmp_path / 'backup.tar'}"

    def test_get_big_integrity_error(self, tmp_path):
        codec = Mock(spec=ChunkedObjectCodec)
        codec.get_file.side_effect = IntegrityError("Mismatched md5 sum on chunk 2 of backup")

        result = handle_get_big(GetBigCommand(key='backup', directory=str(tmp_path)), codec=codec)

        assert result == "Error: Mismatched md5 sum on chunk 2 of backup"


class TestDispatch:

    def test_dispatch_routes_by_type(self, monkeypatch):
        client = _client()
        monkeypatch.setattr('cli.commands._client', client)

        assert dispatch_command(DeleteCommand(key='a')) == "Deleted: a"
        client.delete.assert_called_once_with('a')

    def test_dispatch_unknown(self):
        assert dispatch_command(object()).startswith("Unknown command type")
