"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "domains", "paths", "list", "delete", "rename",
    "put", "get", "putbig", "getbig",
    "clear", "exit", "help",
]

FILE_ARGUMENT_COMMANDS = ("put", "putbig")

STYLE = Style.from_dict(
    {
        "prompt": "#2E9AFE bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;46;154;254m"
GREEN = "\033[92m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
 _ __ ___   ___   __ _  ___| (_) ___ _ __ | |_
| '_ ` _ \\ / _ \\ / _` |/ __| | |/ _ \\ '_ \\| __|
| | | | | | (_) | (_| | (__| | |  __/ | | | |_
|_| |_| |_|\\___/ \\__, |\\___|_|_|\\___|_| |_|\\__|
                 |___/
{RESET}"""

WELCOME_TITLE = "mogclient - Tracker and storage node shell"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "mogile> "

HELP_TEXT = """Available commands:
  domains                             List domains and their classes
  paths <key>                         Show replica URLs of a key
  list [prefix]                       List keys (optionally with a prefix)
  delete <key>                        Delete a key
  rename <from> <to>                  Rename a key
  put <key> <file> [class]            Store a local file under a key
  get <key> [output_path]             Download a key (default: ./<key>)
  putbig <key> <file> [class]         Store a large local file in chunks
  getbig <key> [directory]            Reassemble a chunked file into a directory
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  put photo:1 ./photo.jpg
  paths photo:1
  list photo:
  rename photo:1 photo:2
  putbig backup:2024 ./backup.tar large
  getbig backup:2024 ./restore"""
