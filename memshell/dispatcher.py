#!/usr/bin/env python3
"""
Command dispatcher for the memshell terminal.

A line moves through these stages, any of which can reject it:

    parsed -> command resolved -> redirection checked
           -> arguments validated -> executed

Rejections raise InvalidCommand or InvalidRedirector before the filesystem
is touched. Output is returned to the caller or written to the redirection
target.
"""

import logging
from typing import Optional, Set

from .command_parser import CommandLine, CommandParser, RedirectionParser
from .commands import Command, CommandResult, get_command
from .exceptions import InvalidCommand, ShellError
from .filesystem import VirtualFileSystem
from .history import CommandHistory

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Runs input lines against one filesystem and history.

    The filesystem is passed in explicitly, so separate dispatchers never
    share state.
    """

    def __init__(self, fs: VirtualFileSystem, history: Optional[CommandHistory] = None):
        self.fs = fs
        self.history = history if history is not None else CommandHistory()
        self.parser = CommandParser()
        self.redirection = RedirectionParser(fs)
        # History indices currently being replayed by !N
        self._recalling: Set[int] = set()

    def _instantiate(self, command_line: CommandLine) -> Command:
        command_class = get_command(command_line.name)
        if command_class is None:
            raise InvalidCommand(f'Command "{command_line.name}" does not exist.')
        return command_class(self)

    def resolve(self, line: str) -> Command:
        """Documentation-only lookup: parse and resolve, ignoring arguments."""
        return self._instantiate(self.parser.parse(line))

    def prepare(self, line: str) -> Command:
        """
        Parse, resolve and validate ``line`` without executing it.

        Raises:
            InvalidCommand: unknown command or invalid arguments.
            InvalidRedirector: malformed or unusable redirection clause.
        """
        command_line = self.parser.parse(line)
        command = self._instantiate(command_line)
        logger.debug("Resolved %r to %s", command_line.name, type(command).__name__)

        arguments = command_line.args
        if command.redirectable:
            arguments, command.redirect = self.redirection.parse(arguments)
            if command.redirect is not None:
                logger.debug("Redirecting output %s %s",
                             command.redirect.type.value, command.redirect.target)

        command.set_arguments(arguments)
        result = command.validate(command.arguments)
        if not result.valid:
            raise InvalidCommand(f"{command.name}: {result.message}")
        return command

    def dispatch(self, line: str) -> CommandResult:
        """Run one input line and return what the caller should see."""
        if not line or not line.strip():
            return CommandResult()

        command = self.prepare(line)
        result = command.execute()
        if command.redirect is None:
            return result

        errors = [result.errors] if result.errors else []
        try:
            command.redirect.write(self.fs, result.text)
        except ShellError as e:
            errors.append(str(e))
        return CommandResult(errors='\n'.join(errors), exit_code=result.exit_code)

    def recall(self, index: int) -> CommandResult:
        """Re-run history line ``index`` through the full pipeline."""
        if index in self._recalling:
            raise InvalidCommand(f"!{index}: History recall loops back on itself.")

        line = self.history.get(index)
        if line is None:
            raise InvalidCommand(f"!{index}: Argument is out of bounds")

        logger.debug("Recalling history entry %d: %s", index, line)
        self._recalling.add(index)
        try:
            return self.dispatch(line)
        finally:
            self._recalling.discard(index)
