"""Shared pytest fixtures for all tests."""

import random
from urllib.parse import parse_qsl, urlencode

import httpx
import pytest

from bigfile.codec import ChunkedObjectCodec
from bigfile.config import ChunkingConfig
from cli.config import Config
from storage.transfer import ObjectTransfer
from tracker.client import MogileClient
from tracker.config import ClientConfig
from tracker.connection import TrackerConnection


class StorageNode:
    """In-memory storage nodes answering HTTP PUT/GET through httpx.MockTransport."""

    def __init__(self):
        self.objects = {}
        self.requests = []
        self.failing_urls = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append((request.method, url, dict(request.headers)))
        if url in self.failing_urls:
            return httpx.Response(500, text="node failure")
        if request.method == 'PUT':
            self.objects[url] = request.read()
            return httpx.Response(201)
        if request.method == 'GET':
            if url not in self.objects:
                return httpx.Response(404)
            return httpx.Response(200, content=self.objects[url])
        return httpx.Response(405)

    def session(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


class FakeTracker:
    """
    In-memory tracker implementing the line protocol.

    Objects committed with CREATE_CLOSE get ``replicas`` paths: the uploaded
    path plus copies on other nodes. With ``duplicate_paths`` set, GET_PATHS
    lists every path twice.
    """

    def __init__(self, storage: StorageNode, replicas: int = 2):
        self.storage = storage
        self.replicas = replicas
        self.keys = {}
        self.pending = {}
        self.committed = []
        self.duplicate_paths = False
        self.domains = {'testdomain': {'default': 2, 'large': 3}}
        self.lines = []
        self._next_fid = 1

    def handle_line(self, line: str) -> str:
        self.lines.append(line)
        command, _, blob = line.rstrip('\n').partition(' ')
        args = dict(parse_qsl(blob, keep_blank_values=True))
        handler = getattr(self, f"_cmd_{command.lower()}", None)
        if handler is None:
            return "ERR unknown_command Unknown+command\r\n"
        return handler(args)

    @staticmethod
    def ok(fields: dict) -> str:
        return f"OK {urlencode(fields)}\r\n"

    def _cmd_get_domains(self, args):
        fields = {'domains': len(self.domains)}
        for i, (domain, classes) in enumerate(self.domains.items(), 1):
            fields[f"domain{i}"] = domain
            fields[f"domain{i}classes"] = len(classes)
            for j, (name, count) in enumerate(classes.items(), 1):
                fields[f"domain{i}class{j}name"] = name
                fields[f"domain{i}class{j}mindevcount"] = count
        return self.ok(fields)

    def _cmd_get_paths(self, args):
        paths = self.keys.get(args['key'], [])
        if self.duplicate_paths:
            paths = paths + paths
        fields = {'paths': len(paths)}
        for i, path in enumerate(paths, 1):
            fields[f"path{i}"] = path
        return self.ok(fields)

    def _cmd_create_open(self, args):
        fid = self._next_fid
        self._next_fid += 1
        path = f"http://node1:7500/dev1/0/000/000/{fid:010d}.fid"
        self.pending[str(fid)] = path
        return self.ok({'devid': 1, 'fid': fid, 'path': path})

    def _cmd_create_close(self, args):
        path = self.pending.pop(args['fid'], None)
        if path is None or path != args['path']:
            return "ERR unknown_fid Unknown+fid\r\n"
        paths = [path]
        for n in range(2, self.replicas + 1):
            copy = path.replace('node1', f"node{n}").replace('/dev1/', f"/dev{n}/")
            self.storage.objects[copy] = self.storage.objects.get(path, b'')
            paths.append(copy)
        self.keys[args['key']] = paths
        self.committed.append(args['key'])
        return self.ok({})

    def _cmd_delete(self, args):
        if self.keys.pop(args['key'], None) is None:
            return "ERR unknown_key unknown_key\r\n"
        return "OK \r\n"

    def _cmd_rename(self, args):
        if args['from_key'] not in self.keys:
            return "ERR unknown_key unknown_key\r\n"
        if args['to_key'] in self.keys:
            return "ERR key_exists Target+key+name+already+exists%3B+can%27t+overwrite.\r\n"
        self.keys[args['to_key']] = self.keys.pop(args['from_key'])
        return "OK \r\n"

    def _cmd_list_keys(self, args):
        limit = int(args.get('limit', 1000))
        after = args.get('after')
        matching = sorted(k for k in self.keys if k.startswith(args.get('prefix', '')))
        if after:
            matching = [k for k in matching if k > after]
        page = matching[:limit]
        fields = {'key_count': len(page), 'next_after': page[-1] if page else ''}
        for i, key in enumerate(page, 1):
            fields[f"key_{i}"] = key
        return self.ok(fields)


class FakeSocket:
    """Socket stand-in that feeds every written line to a FakeTracker."""

    def __init__(self, tracker: FakeTracker):
        self.tracker = tracker
        self.replies = []
        self.timeout = None
        self.closed = False
        self.read_error = None

    def settimeout(self, timeout):
        self.timeout = timeout

    def makefile(self, mode):
        return self

    def sendall(self, data: bytes):
        if self.closed:
            raise OSError("Bad file descriptor")
        self.replies.append(self.tracker.handle_line(data.decode('utf-8')))

    def readline(self):
        if self.read_error is not None:
            raise self.read_error
        if not self.replies:
            return b''
        return self.replies.pop(0).encode('utf-8')

    def close(self):
        self.closed = True


class SocketFactory:
    """Records connect attempts; hosts listed in ``down`` refuse connections."""

    def __init__(self, tracker: FakeTracker, down=()):
        self.tracker = tracker
        self.down = set(down)
        self.attempts = []
        self.sockets = []

    def __call__(self, address, timeout):
        self.attempts.append((address, timeout))
        if address[0] in self.down:
            raise ConnectionRefusedError(111, 'Connection refused')
        sock = FakeSocket(self.tracker)
        self.sockets.append(sock)
        return sock


@pytest.fixture
def storage():
    return StorageNode()


@pytest.fixture
def tracker(storage):
    return FakeTracker(storage)


@pytest.fixture
def socket_factory(tracker):
    return SocketFactory(tracker)


@pytest.fixture
def client_config():
    return ClientConfig.from_options(['tracker1:7001'], 'testdomain')


@pytest.fixture
def client(client_config, socket_factory, storage):
    """MogileClient wired to the fake tracker and the in-memory storage nodes."""
    connection = TrackerConnection(
        client_config.connect_timeout,
        client_config.read_timeout,
        socket_factory=socket_factory,
    )
    transfer = ObjectTransfer(timeout=client_config.command_timeout, session=storage.session())
    mogile = MogileClient(client_config, connection=connection, transfer=transfer, rng=random.Random(0))
    yield mogile
    mogile.close()


@pytest.fixture
def chunking_config():
    """Small sizes so chunked round trips stay fast."""
    return ChunkingConfig(
        big_threshold_bytes=1024,
        chunk_size_bytes=1024,
        max_buffer_bytes=4096,
        replication_wait_seconds=0.05,
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def codec(client, chunking_config):
    return ChunkedObjectCodec(client, chunking_config, rng=random.Random(0))


@pytest.fixture
def temp_config(tmp_path):
    """Config instance backed by a temporary JSON file."""
    config_dir = tmp_path / '.mogile'
    config_dir.mkdir()
    return Config(config_dir / 'config.json')
