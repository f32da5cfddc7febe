"""Tests for the CLI completer."""

from prompt_toolkit.document import Document

from cli.completer import MogileCompleter


def _complete(text):
    completer = MogileCompleter()
    return [c.text for c in completer.get_completions(Document(text), None)]


class TestMogileCompleter:

    def test_completes_command_names(self):
        assert _complete("pu") == ["put", "putbig"]

    def test_empty_input_lists_all_commands(self):
        completions = _complete("")
        assert "domains" in completions
        assert "getbig" in completions

    def test_no_completion_for_key_argument(self):
        assert _complete("put pho") == []

    def test_no_file_completion_for_other_commands(self, tmp_path, monkeypatch):
        (tmp_path / 'photo.jpg').write_bytes(b'x')
        monkeypatch.chdir(tmp_path)

        assert _complete("delete key ") == []

    def test_completes_local_files(self, tmp_path, monkeypatch):
        (tmp_path / 'photo.jpg').write_bytes(b'x')
        (tmp_path / 'pictures').mkdir()
        (tmp_path / 'notes.txt').write_bytes(b'x')
        monkeypatch.chdir(tmp_path)

        assert _complete("put key p") == ["photo.jpg", "pictures/"]

    def test_completes_all_files_for_new_token(self, tmp_path, monkeypatch):
        (tmp_path / 'a.bin').write_bytes(b'x')
        (tmp_path / 'b.bin').write_bytes(b'x')
        monkeypatch.chdir(tmp_path)

        assert _complete("putbig key ") == ["a.bin", "b.bin"]

    def test_completes_inside_subdirectory(self, tmp_path, monkeypatch):
        (tmp_path / 'data').mkdir()
        (tmp_path / 'data' / 'big.tar').write_bytes(b'x')
        monkeypatch.chdir(tmp_path)

        assert _complete("putbig key data/b") == ["data/big.tar"]

    def test_missing_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert _complete("put key missing/x") == []
