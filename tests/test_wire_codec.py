"""Unit tests for tracker command encoding and reply decoding."""

import pytest

from common.exceptions import ProtocolError, RemoteError
from tracker.wire_codec import decode, encode


class TestEncode:
    """Tests for encode()."""

    def test_command_without_args_or_domain(self):
        assert encode('GET_DOMAINS') == 'GET_DOMAINS\n'

    def test_domain_is_first_parameter(self):
        line = encode('GET_PATHS', 'photos', {'key': 'a'})
        assert line == 'GET_PATHS domain=photos&key=a\n'

    def test_domain_only(self):
        assert encode('GET_DOMAINS', 'photos') == 'GET_DOMAINS domain=photos\n'

    def test_keys_and_values_are_form_encoded(self):
        line = encode('RENAME', None, {'from_key': 'a b&c', 'to_key': 'x=y/z'})
        assert line == 'RENAME from_key=a+b%26c&to_key=x%3Dy%2Fz\n'

    def test_non_string_values(self):
        assert encode('LIST_KEYS', None, {'prefix': '', 'limit': 10}) == 'LIST_KEYS prefix=&limit=10\n'


class TestDecode:
    """Tests for decode()."""

    def test_ok_reply(self):
        response = decode('OK paths=2&path1=http%3A%2F%2Fn1%2Fa.fid&path2=http%3A%2F%2Fn2%2Fa.fid\r\n')
        assert response == {
            'paths': '2',
            'path1': 'http://n1/a.fid',
            'path2': 'http://n2/a.fid',
        }
        assert list(response) == ['paths', 'path1', 'path2']

    def test_ok_with_empty_blob(self):
        assert decode('OK \r\n') == {}

    def test_ok_without_argument_section(self):
        with pytest.raises(ProtocolError):
            decode('OK\r\n')

    def test_err_reply_is_remote_error(self):
        with pytest.raises(RemoteError) as exc_info:
            decode('ERR unknown_key unknown+key\r\n')
        assert exc_info.value.code == 'unknown_key'
        assert exc_info.value.message == 'unknown key'
        assert str(exc_info.value) == 'ERR unknown_key unknown+key'

    def test_remote_error_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            decode('ERR no_domain No+domain+provided\n')

    def test_unknown_status(self):
        with pytest.raises(ProtocolError) as exc_info:
            decode('HELLO there\n')
        assert 'HELLO there' in str(exc_info.value)

    def test_malformed_query_string(self):
        with pytest.raises(ProtocolError):
            decode('OK paths=1&garbage\n')

    def test_blank_values_kept(self):
        assert decode('OK key_count=0&next_after=\n') == {'key_count': '0', 'next_after': ''}


def test_encoded_args_decode_back():
    """Arguments survive encode() when echoed back in an OK reply."""
    args = {'key': 'dir/file name.txt', 'class': 'déjà vu', 'fid': '42'}
    line = encode('CREATE_OPEN', None, args)
    blob = line.rstrip('\n').split(' ', 1)[1]

    assert decode(f'OK {blob}\r\n') == args
