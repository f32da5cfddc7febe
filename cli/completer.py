"""Custom completer for the mogclient CLI with local file autocompletion."""

import os
from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, FILE_ARGUMENT_COMMANDS


class MogileCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file path completion for the <file> argument of put/putbig
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        if command not in FILE_ARGUMENT_COMMANDS:
            return

        # <file> is the second argument: "put <key> <file>"
        argument_index = len(tokens) if is_typing_new_token else len(tokens) - 1
        if argument_index != 2:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_local_files(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_local_files(self, partial: str) -> Iterable[Completion]:
        """Complete file and directory names relative to the working directory."""
        directory, _, name_prefix = partial.rpartition(os.sep)
        base = Path(directory) if directory else Path.cwd()
        if not base.is_dir():
            return

        entries = []
        for item in base.iterdir():
            if not item.name.startswith(name_prefix):
                continue
            rel_path = f"{directory}{os.sep}{item.name}" if directory else item.name
            if item.is_dir():
                rel_path += os.sep
            entries.append(rel_path)

        for rel_path in sorted(entries):
            yield Completion(rel_path, start_position=-len(partial))
