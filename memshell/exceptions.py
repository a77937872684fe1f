"""
Error types raised by the memshell filesystem and command pipeline.

Each error carries operator-facing text; the prefix names the kind of
failure and the message names the offending token.
"""


class ShellError(Exception):
    """Base class for every error the shell reports to the operator."""

    prefix = ''

    def __init__(self, message: str = ''):
        self.message = message
        super().__init__(f"{self.prefix}{message}" if message else self.prefix.rstrip(': '))


class InvalidCommand(ShellError):
    """Unknown command name or failed argument validation."""
    prefix = 'Invalid command: '


class InvalidRedirector(ShellError):
    """Malformed output-redirection clause."""
    prefix = 'Invalid Redirector: '


class InvalidPath(ShellError):
    """A path did not resolve during a filesystem operation."""
    prefix = 'Invalid path: '


class InvalidFileName(ShellError):
    """A node name is empty or contains disallowed characters."""
    prefix = 'Invalid file name: '
