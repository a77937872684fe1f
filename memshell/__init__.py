"""
memshell - A Unix-like shell over an in-memory virtual filesystem

This package provides a tree of simulated directories and text files, a
command pipeline (parsing, validation, redirection, execution) that runs
shell commands against it, and a small terminal front end.
"""

__version__ = "0.1.0"

from .exceptions import (
    ShellError,
    InvalidCommand,
    InvalidRedirector,
    InvalidPath,
    InvalidFileName,
)

from .filesystem import (
    VirtualFileSystem,
    Node,
    NodeKind,
    Directory,
    TextFile,
    MAX_DEPTH,
)

from .command_parser import (
    CommandLine,
    CommandParser,
    RedirectionParser,
    Redirect,
    RedirectType,
)

from .commands import (
    Command,
    CommandResult,
    ValidationResult,
    COMMANDS,
    get_command,
)

from .dispatcher import CommandDispatcher
from .history import CommandHistory

from .terminal import (
    TerminalSession,
    TerminalConfig,
)

__all__ = [
    # Errors
    "ShellError",
    "InvalidCommand",
    "InvalidRedirector",
    "InvalidPath",
    "InvalidFileName",

    # Filesystem
    "VirtualFileSystem",
    "Node",
    "NodeKind",
    "Directory",
    "TextFile",
    "MAX_DEPTH",

    # Parsing
    "CommandLine",
    "CommandParser",
    "RedirectionParser",
    "Redirect",
    "RedirectType",

    # Commands
    "Command",
    "CommandResult",
    "ValidationResult",
    "COMMANDS",
    "get_command",
    "CommandDispatcher",

    # Terminal
    "CommandHistory",
    "TerminalSession",
    "TerminalConfig",

    # Version info
    "__version__",
]
