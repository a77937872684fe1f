#!/usr/bin/env python3
"""
Command parser for the memshell terminal emulator.

This module turns a raw input line into a command name and argument vector,
and separates an output-redirection clause from those arguments.

Design Principles:
- Single responsibility: Parse commands, don't execute them
- Double quotes group words into one token and stay in the token
- Redirection handling is independent of the command being run
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .exceptions import InvalidFileName, InvalidRedirector
from .filesystem import TextFile, VirtualFileSystem, validate_name
from .paths import leaf_name

logger = logging.getLogger(__name__)

QUOTE = '"'
RECALL_PREFIX = '!'


class RedirectType(Enum):
    """Types of output redirection."""
    WRITE = '>'      # Overwrite file
    APPEND = '>>'    # Append to file


@dataclass
class Redirect:
    """Represents an output redirection to a text file."""
    type: RedirectType
    target: str

    def write(self, fs: VirtualFileSystem, text: str) -> TextFile:
        """Write ``text`` to the target, creating the file if needed."""
        node = fs.lookup(self.target)
        if node is None:
            node = fs.create_text_file(self.target)
        elif not node.is_file():
            # The command itself may have put a directory at the target.
            raise InvalidRedirector(f"{self.target}: Is a directory.")
        if self.type is RedirectType.APPEND:
            node.append(text)
        else:
            node.write(text)
        logger.debug("Redirected %d chars to %s (%s)", len(text), node.path, self.type.value)
        return node


@dataclass
class CommandLine:
    """
    A tokenized input line.

    ``args`` still contains any redirection clause and recursive flag; the
    dispatcher strips those in later stages.
    """
    name: str
    args: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return ' '.join([self.name] + self.args)


class CommandParser:
    """
    Parser for the shell's line syntax.

    This parser handles:
    - Whitespace-separated tokens, with runs of whitespace collapsed
    - Double-quoted strings kept whole, quotes included
    - The history recall shorthand (!N)
    """

    def tokenize(self, line: str) -> List[str]:
        """Split on whitespace that is not inside double quotes."""
        tokens = []
        current = []
        in_quotes = False

        for char in line:
            if char == QUOTE:
                in_quotes = not in_quotes
                current.append(char)
            elif char.isspace() and not in_quotes:
                if current:
                    tokens.append(''.join(current))
                    current = []
            else:
                current.append(char)

        if current:
            tokens.append(''.join(current))

        return tokens

    def normalize(self, line: str) -> str:
        """Trim ``line`` and collapse whitespace runs outside quotes."""
        return ' '.join(self.tokenize(line))

    def parse(self, line: str) -> CommandLine:
        """Parse a line into a CommandLine; an empty line has an empty name."""
        tokens = self.tokenize(line)
        if not tokens:
            return CommandLine(name='')

        name, args = tokens[0], tokens[1:]
        if name.startswith(RECALL_PREFIX) and len(name) > 1:
            # !N is shorthand for "! N"
            args.insert(0, name[len(RECALL_PREFIX):])
            name = RECALL_PREFIX

        return CommandLine(name=name, args=args)


class RedirectionParser:
    """Finds, validates and strips a trailing ``>``/``>>`` clause."""

    SYMBOLS = tuple(redirect.value for redirect in RedirectType)
    CLAUSE_LENGTH = 2

    def __init__(self, fs: VirtualFileSystem):
        self.fs = fs

    def is_redirectable(self, args: Sequence[str]) -> bool:
        return any(arg in self.SYMBOLS for arg in args)

    def split(self, args: Sequence[str]) -> Tuple[List[str], List[str]]:
        """Split ``args`` at the first bare redirection symbol."""
        for index, arg in enumerate(args):
            if arg in self.SYMBOLS:
                return list(args[:index]), list(args[index:])
        return list(args), []

    def validate(self, clause: Sequence[str]) -> None:
        """
        Check a redirection clause against the filesystem.

        Raises:
            InvalidRedirector: the clause is malformed or its target unusable.
        """
        if len(clause) != self.CLAUSE_LENGTH:
            raise InvalidRedirector(
                "To redirect to a file, you must provide a redirection action "
                "and an outfile.")

        symbol, target = clause
        if symbol not in self.SYMBOLS:
            raise InvalidRedirector("First argument must be > or >>")

        node = self.fs.lookup(target)
        if node is not None:
            if node.is_dir():
                raise InvalidRedirector(f"{target}: Is a directory.")
            return

        parent = self.fs.parent_of(target)
        if not self.fs.exists(parent):
            raise InvalidRedirector(f"cannot access {parent}: No such file or directory.")
        if not self.fs.is_directory(parent):
            raise InvalidRedirector(f"{parent}: Not a directory.")
        try:
            validate_name(leaf_name(target))
        except InvalidFileName as e:
            raise InvalidRedirector(e.message) from e

    def parse(self, args: Sequence[str]) -> Tuple[List[str], Optional[Redirect]]:
        """Return the pre-redirection arguments and the validated Redirect."""
        arguments, clause = self.split(args)
        if not clause:
            return arguments, None

        self.validate(clause)
        # Pin the target now; the command may move the current directory.
        target = self.fs.resolve_absolute(clause[1])
        return arguments, Redirect(type=RedirectType(clause[0]), target=target)
