#!/usr/bin/env python3
"""
Command contracts for the memshell terminal.

Every command validates its arguments before anything is executed, and
validation never touches the filesystem tree. Commands report per-item
failures in ``CommandResult.errors`` instead of raising, so one bad path
never aborts the rest of the work.
"""

import logging
import re
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Dict, List, NamedTuple, Optional, Sequence, Type

from .command_parser import QUOTE, RECALL_PREFIX, Redirect
from .exceptions import ShellError
from .filesystem import MAX_DEPTH, Directory, Node, VirtualFileSystem, validate_name
from .paths import leaf_name

if TYPE_CHECKING:
    from .dispatcher import CommandDispatcher
    from .history import CommandHistory

logger = logging.getLogger(__name__)


class ValidationResult(NamedTuple):
    """Outcome of argument validation: a flag and, on failure, the reason."""
    valid: bool
    message: Optional[str] = None


VALID = ValidationResult(True)


def invalid(message: str) -> ValidationResult:
    return ValidationResult(False, message)


def requires(count: int) -> ValidationResult:
    noun = 'argument' if count == 1 else 'arguments'
    return invalid(f"Requires {count} {noun}.")


def cannot_access(path: str) -> str:
    return f"cannot access {path}: No such file or directory."


def is_quoted(token: str) -> bool:
    """True if ``token`` starts and ends with a double quote."""
    return len(token) >= 2 and token.startswith(QUOTE) and token.endswith(QUOTE)


def parse_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


@dataclass
class CommandResult:
    """
    Represents the result of a command execution.

    ``text`` is the command's output (what a redirection captures);
    ``errors`` holds per-item failures that are always shown to the caller.
    """
    text: str = ''
    errors: str = ''
    exit_code: int = 0

    def __str__(self) -> str:
        return '\n'.join(part for part in (self.text, self.errors) if part)

    def lines(self) -> List[str]:
        """Get output as list of lines."""
        return self.text.splitlines()


class Command:
    """
    Base class for all commands.

    Subclasses set ``name`` and ``documentation`` and implement ``validate``
    and ``execute``. The dispatcher supplies the filesystem and history.
    """

    name: ClassVar[str] = ''
    documentation: ClassVar[str] = ''
    # Whether the dispatcher looks for a > / >> clause in the arguments.
    redirectable: ClassVar[bool] = True

    RECURSIVE_FLAG = '-R'

    def __init__(self, dispatcher: 'CommandDispatcher',
                 arguments: Optional[Sequence[str]] = None):
        self.dispatcher = dispatcher
        self.arguments: List[str] = []
        self.recursive = False
        self.redirect: Optional[Redirect] = None
        if arguments is not None:
            self.set_arguments(arguments)

    def __str__(self) -> str:
        return self.manual()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.arguments!r}, recursive={self.recursive})"

    @property
    def fs(self) -> VirtualFileSystem:
        return self.dispatcher.fs

    @property
    def history(self) -> 'CommandHistory':
        return self.dispatcher.history

    @classmethod
    def has_recursive_flag(cls, arguments: Sequence[str]) -> bool:
        return bool(arguments) and arguments[0].upper() == cls.RECURSIVE_FLAG

    def set_arguments(self, arguments: Sequence[str]) -> None:
        """Store ``arguments``, stripping a leading -R into ``recursive``."""
        self.recursive = self.has_recursive_flag(arguments)
        self.arguments = list(arguments[1:] if self.recursive else arguments)

    def manual(self) -> str:
        return f"Command {self.name.upper()}:\n{self.documentation}"

    def validate(self, arguments: Sequence[str]) -> ValidationResult:
        raise NotImplementedError

    def execute(self) -> CommandResult:
        raise NotImplementedError


class CdCommand(Command):
    name = 'cd'
    documentation = "Changes the shell's current working directory to the one specified."

    def validate(self, arguments):
        if len(arguments) != 1:
            return requires(1)
        node = self.fs.lookup(arguments[0])
        if node is None:
            return invalid("No such file or directory or path does not exist.")
        if not node.is_dir():
            return invalid(f"{arguments[0]} is not a directory")
        return VALID

    def execute(self):
        self.fs.change_current_directory(self.fs.lookup(self.arguments[0]))
        return CommandResult()


class PwdCommand(Command):
    name = 'pwd'
    documentation = "Displays the absolute path of the current working directory."

    def validate(self, arguments):
        if arguments:
            return invalid("Does not take in any arguments.")
        return VALID

    def execute(self):
        return CommandResult(text=self.fs.cwd)


class CatCommand(Command):
    name = 'cat'
    documentation = "Displays the contents of files."

    def validate(self, arguments):
        if len(arguments) != 1:
            return requires(1)
        node = self.fs.lookup(arguments[0])
        if node is None:
            return invalid("No such file or directory")
        if not node.is_file():
            return invalid(f"{arguments[0]}: Is not a text file.")
        return VALID

    def execute(self):
        return CommandResult(text=self.fs.lookup(self.arguments[0]).contents)


class EchoCommand(Command):
    name = 'echo'
    documentation = "Displays text on screen."

    def validate(self, arguments):
        if len(arguments) != 1:
            return requires(1)
        if not is_quoted(arguments[0]):
            return invalid("String argument must be surrounded by quotation marks.")
        return VALID

    def execute(self):
        return CommandResult(text=self.arguments[0].replace(QUOTE, ''))


class MkdirCommand(Command):
    name = 'mkdir'
    documentation = "Creates directories."

    def validate(self, arguments):
        if not arguments:
            return invalid("Requires at least 1 argument.")
        return VALID

    def execute(self):
        # Each directory succeeds or fails on its own.
        errors = []
        for path in self.arguments:
            if self.fs.exists(path):
                errors.append(f"Cannot create directory: {path}: Directory already exists.")
            elif not self.fs.is_directory(self.fs.parent_of(path)):
                errors.append(f"Cannot create directory {path}: No such file or directory.")
            else:
                try:
                    self.fs.create_directory(path)
                except ShellError as e:
                    errors.append(str(e))
        return CommandResult(errors='\n'.join(errors), exit_code=1 if errors else 0)


class CopyCommand(Command):
    """Shared validation and placement rules for cp and mv."""

    name = 'cp'
    documentation = "Copies files and directories to the specified destinations."

    SUBTREE_ERROR = "Cannot move/copy to a subdirectory of itself."

    def validate(self, arguments):
        if len(arguments) != 2:
            return requires(2)

        source_path, destination_path = arguments
        source = self.fs.lookup(source_path)
        if source is None:
            return invalid(f"{source_path}: No such file or directory.")
        if source is self.fs.root:
            return invalid("Cannot move/copy the root directory.")

        destination = self.fs.lookup(destination_path)
        if destination is not None:
            if source.is_dir() and destination.is_file():
                return invalid(f"{destination.name}: Not a directory.")
            if self.fs.is_within(destination, source):
                return invalid(self.SUBTREE_ERROR)
            return VALID

        # A missing destination names the copy inside an existing directory.
        parent = self.fs.lookup(self.fs.parent_of(destination_path))
        if parent is None or not parent.is_dir():
            return invalid(f"{destination_path}: No such file or directory.")
        if self.fs.is_within(parent, source):
            return invalid(self.SUBTREE_ERROR)
        try:
            validate_name(leaf_name(destination_path))
        except ShellError as e:
            return invalid(e.message)
        return VALID

    def placement(self, source: Node):
        """Return (directory path, new name or None) for the source node."""
        destination_path = self.arguments[1]
        destination = self.fs.lookup(destination_path)
        if destination is None:
            return self.fs.parent_of(destination_path), leaf_name(destination_path)
        if source.is_file() and destination.is_file():
            return destination.parent.path, destination.name
        return destination.path, None

    def transfer(self, source: Node, directory: str, name: Optional[str]) -> None:
        self.fs.add(self.fs.copy_tree(source, name), directory)

    def execute(self):
        source = self.fs.lookup(self.arguments[0])
        directory, name = self.placement(source)
        try:
            self.transfer(source, directory, name)
        except ShellError as e:
            return CommandResult(errors=str(e), exit_code=1)
        return CommandResult()


class MoveCommand(CopyCommand):
    name = 'mv'
    documentation = "Moves or renames files and directories to their specified destinations."

    def transfer(self, source, directory, name):
        self.fs.move(source, directory, name)


class LsCommand(Command):
    name = 'ls'
    documentation = (
        "Displays the contents of directories. If no paths are given,\n"
        "displays the contents of the current working directory. For all\n"
        "files specified by path, displays the name of the file only.\n"
        "With -R, also lists every subdirectory.")

    def validate(self, arguments):
        return VALID

    def _block(self, directory: Directory) -> str:
        listing = directory.listing()
        return f"{directory.path}:\n{listing}" if listing else f"{directory.path}:"

    def _describe(self, directory: Directory) -> str:
        depth = MAX_DEPTH if self.recursive else 0
        return '\n\n'.join(self._block(d) for d in self.fs.walk(directory, depth))

    def execute(self):
        if not self.arguments:
            directory = self.fs.current_directory
            text = self._describe(directory) if self.recursive else directory.listing()
            return CommandResult(text=text)

        files, blocks, errors = [], [], []
        for path in self.arguments:
            node = self.fs.lookup(path)
            if node is None:
                errors.append(f"ls: {cannot_access(path)}")
            elif node.is_file():
                files.append(node.name)
            elif len(self.arguments) == 1 and not self.recursive:
                blocks.append(node.listing())
            else:
                blocks.append(self._describe(node))

        sections = [' '.join(files)] if files else []
        sections.extend(blocks)
        return CommandResult(text='\n\n'.join(s for s in sections if s),
                             errors='\n'.join(errors),
                             exit_code=1 if errors else 0)


class GrepCommand(Command):
    name = 'grep'
    documentation = (
        "Displays lines from files that match the pattern. If -R is\n"
        "supplied, recursively traverses the directory tree and displays\n"
        "all lines in all files that match the pattern.")

    def validate(self, arguments):
        if len(arguments) < 2:
            return invalid("Requires at least 2 arguments.")
        pattern = arguments[0]
        if not is_quoted(pattern):
            return invalid("Regex argument must be surrounded by quotation marks.")
        try:
            re.compile(pattern[1:-1])
        except re.error:
            return invalid(f"{pattern}: Invalid pattern.")
        return VALID

    def execute(self):
        regex = re.compile(self.arguments[0][1:-1])
        matches, errors = [], []

        for path in self.arguments[1:]:
            node = self.fs.lookup(path)
            if node is None:
                errors.append(f"grep: {cannot_access(path)}")
                continue
            if node.is_dir() and not self.recursive:
                errors.append(f"grep: {path}: Is a directory.")
                continue
            for text_file in self.fs.text_files(node, MAX_DEPTH):
                matches.extend(f"{text_file.path}: {line}"
                               for line in text_file.contents.splitlines()
                               if regex.search(line))

        return CommandResult(text='\n'.join(matches),
                             errors='\n'.join(errors),
                             exit_code=1 if errors else 0)


class ManCommand(Command):
    name = 'man'
    documentation = "Displays the documentation of various commands."

    def __init__(self, dispatcher, arguments=None):
        super().__init__(dispatcher, arguments)
        self.subject: Optional[Command] = None

    def validate(self, arguments):
        if len(arguments) != 1:
            return requires(1)
        if arguments[0] == self.name:
            self.subject = self
            return VALID
        try:
            self.subject = self.dispatcher.resolve(arguments[0])
        except ShellError:
            return invalid(f"No manual entry for {arguments[0]}")
        return VALID

    def execute(self):
        return CommandResult(text=self.subject.manual())


class HistoryCommand(Command):
    name = 'history'
    documentation = (
        "Prints out recent commands, one command per line. If provided with\n"
        "an integer argument x, then print out the last x commands.")

    def validate(self, arguments):
        if len(arguments) > 1:
            return invalid("Requires 0 or 1 argument(s).")
        if arguments:
            count = parse_int(arguments[0])
            if count is None:
                return invalid("Argument must be an integer")
            if count < 0 or count > self.history.size:
                return invalid("Argument is out of bounds")
        return VALID

    def execute(self):
        entries = self.history.entries()
        start = len(entries) - int(self.arguments[0]) if self.arguments else 0
        lines = [f"{number} {line}"
                 for number, line in enumerate(entries[start:], start=start + 1)]
        return CommandResult(text='\n'.join(lines))


class ExclaimCommand(Command):
    name = RECALL_PREFIX
    documentation = "Recalls any of the commands in History and executes the command."

    def validate(self, arguments):
        if len(arguments) != 1:
            return requires(1)
        index = parse_int(arguments[0])
        if index is None:
            return invalid("Argument must be an integer")
        if index < 1 or index > self.history.size:
            return invalid("Argument is out of bounds")
        return VALID

    def execute(self):
        try:
            return self.dispatcher.recall(int(self.arguments[0]))
        except ShellError as e:
            return CommandResult(errors=str(e), exit_code=1)


class ExitCommand(Command):
    name = 'exit'
    documentation = "Quits the program."
    redirectable = False

    def validate(self, arguments):
        if arguments:
            return invalid("Does not take in any arguments.")
        return VALID

    def execute(self):
        logger.info("exit requested")
        sys.exit(0)


COMMANDS: Dict[str, Type[Command]] = {
    command.name: command
    for command in (
        CatCommand, CdCommand, CopyCommand, EchoCommand, ExclaimCommand,
        ExitCommand, GrepCommand, HistoryCommand, LsCommand, ManCommand,
        MkdirCommand, MoveCommand, PwdCommand,
    )
}


def get_command(name: str) -> Optional[Type[Command]]:
    """Return the command class registered under ``name``, if any."""
    return COMMANDS.get(name)
