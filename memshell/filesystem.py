#!/usr/bin/env python3
"""
memshell filesystem - an in-memory tree of directories and text files.

Core philosophy:
- The tree is the single source of truth; paths are computed, never stored
- Only VirtualFileSystem changes tree topology
- Path resolution never moves the session's current directory
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional

from .exceptions import InvalidFileName, InvalidPath
from .paths import ROOT, is_absolute, leaf_name, parent_path, rebuild, tokenize

logger = logging.getLogger(__name__)

# Characters that may not appear in a node name.
SPECIAL_CHARS = " `!#&*()-+={}[]|;:\\'\"<>,?"
RESERVED_NAMES = ('.', '..')

# Upper bound on how many directory levels a recursive traversal descends.
MAX_DEPTH = 99


class NodeKind(Enum):
    """The two kinds of node the tree can hold."""
    DIRECTORY = 'directory'
    TEXT_FILE = 'text_file'


def validate_name(name: Optional[str]) -> str:
    """Return ``name`` unchanged or raise InvalidFileName."""
    if not name:
        raise InvalidFileName("File name cannot be null.")
    if name in RESERVED_NAMES:
        raise InvalidFileName(f"{name}: File name is reserved.")
    if any(char in name for char in SPECIAL_CHARS):
        raise InvalidFileName(
            f"{name}: File name cannot contain special characters: {SPECIAL_CHARS}")
    return name


@dataclass(eq=False)
class Node:
    """Base class for all filesystem nodes.

    Nodes compare by identity. The parent reference is a plain back-pointer;
    a node whose parent no longer lists it is considered deleted.
    """
    name: str
    parent: Optional['Directory'] = field(default=None, repr=False)
    read_only: bool = False
    hidden: bool = False

    kind: ClassVar[NodeKind]
    file_type: ClassVar[str]

    def __post_init__(self):
        # Only a directory may be nameless, and only as the root of a tree.
        if self.name or not self.is_dir():
            validate_name(self.name)

    def is_dir(self) -> bool:
        """Check if this is a directory."""
        return self.kind is NodeKind.DIRECTORY

    def is_file(self) -> bool:
        """Check if this is a text file."""
        return self.kind is NodeKind.TEXT_FILE

    @property
    def path(self) -> str:
        """Absolute path built from the names of this node's ancestors."""
        segments = []
        node = self
        while node is not None and node.name:
            segments.append(node.name)
            node = node.parent
        return rebuild(reversed(segments)) or ROOT

    def rename(self, new_name: str) -> None:
        """Rename this node, keeping its parent's name index consistent."""
        validate_name(new_name)
        parent = self.parent
        if parent is not None:
            parent.remove_child(self)
        self.name = new_name
        if parent is not None:
            parent.add_child(self)

    def toggle_read_only(self) -> None:
        self.read_only = not self.read_only

    def toggle_hidden(self) -> None:
        self.hidden = not self.hidden

    def attributes(self) -> List[str]:
        flags = []
        if self.read_only:
            flags.append('Read-only')
        if self.hidden:
            flags.append('Hidden')
        return flags

    def describe(self) -> str:
        """Multi-line report of name, type, path and cosmetic attributes."""
        return '\n'.join([
            'File' + '-' * 56,
            f"Name          {self.name}",
            f"Type of file  {self.file_type}",
            f"File path     {self.path}",
            f"Attributes    {', '.join(self.attributes())}",
        ])

    def is_empty(self) -> bool:
        raise NotImplementedError


@dataclass(eq=False)
class Directory(Node):
    """Directory node holding its children in insertion order."""
    children: Dict[str, Node] = field(default_factory=dict, repr=False)

    kind: ClassVar[NodeKind] = NodeKind.DIRECTORY
    file_type: ClassVar[str] = 'File folder'

    def is_empty(self) -> bool:
        return not self.children

    def child(self, name: str) -> Optional[Node]:
        """Return the child called ``name``, if any."""
        return self.children.get(name)

    def names(self) -> List[str]:
        return list(self.children)

    def entries(self) -> List[Node]:
        return list(self.children.values())

    def add_child(self, node: Node) -> None:
        """Append ``node``; a same-named child is replaced and ``node`` goes last."""
        previous = self.children.pop(node.name, None)
        if previous is not None and previous is not node:
            previous.parent = None
        self.children[node.name] = node
        node.parent = self

    def remove_child(self, node: Node) -> bool:
        """Detach ``node`` (matched by identity). Returns False if absent."""
        for name, child in self.children.items():
            if child is node:
                del self.children[name]
                node.parent = None
                return True
        return False

    def listing(self) -> str:
        """Child names separated by single spaces."""
        return ' '.join(self.children)


@dataclass(eq=False)
class TextFile(Node):
    """Text file node with mutable string contents."""
    contents: str = ''

    kind: ClassVar[NodeKind] = NodeKind.TEXT_FILE
    file_type: ClassVar[str] = 'Text Document'

    def is_empty(self) -> bool:
        return self.contents.strip() == ''

    def write(self, text: str) -> None:
        """Replace the contents."""
        self.contents = text

    def append(self, text: str) -> None:
        """Append ``text`` on a new line (no separator for an empty file)."""
        self.contents = f"{self.contents}\n{text}" if self.contents else text


class VirtualFileSystem:
    """
    In-memory filesystem for one shell session.

    The filesystem owns the root directory and the current-directory cursor.
    Every lookup goes through ``resolve_absolute`` so relative paths, ``.``
    and ``..`` behave the same everywhere.
    """

    SYSTEM_TYPE = 'Local Disc'

    def __init__(self):
        self._init_filesystem()

    def _init_filesystem(self):
        """Create an empty root and point the cursor at it."""
        self.root = Directory('')
        self.current_directory: Directory = self.root
        self.directories_created = 0
        self.text_files_created = 0

    def reset(self) -> None:
        """Discard the whole tree and start again from an empty root."""
        logger.info("Resetting filesystem\n%s", self.summary())
        self._init_filesystem()

    @property
    def cwd(self) -> str:
        """Absolute path of the current directory."""
        return self.current_directory.path

    # Path resolution

    def resolve_absolute(self, path: str) -> str:
        """
        Resolve ``path`` against the current directory.

        Every segment but the last must name an existing directory; the last
        segment is kept as a trailing name whether or not it exists, which
        lets callers validate paths they are about to create.

        Raises:
            InvalidPath: an intermediate segment is missing or is a file.
        """
        cursor = self.root if is_absolute(path) else self.current_directory
        segments = tokenize(path)
        trailing = ''

        for index, segment in enumerate(segments):
            if segment == '..':
                if cursor.parent is not None:
                    cursor = cursor.parent
            elif segment == '.':
                continue
            elif index == len(segments) - 1:
                trailing = segment
            else:
                child = cursor.child(segment)
                if child is None:
                    raise InvalidPath(f"{segment}: Directory does not exist.")
                if not child.is_dir():
                    raise InvalidPath("Cannot set directory to a file.")
                cursor = child

        base = cursor.path
        if not trailing:
            return base
        if base == ROOT:
            return base + trailing
        return f"{base}/{trailing}"

    def lookup(self, path: str) -> Optional[Node]:
        """Return the node at ``path``, or None. Never raises."""
        try:
            absolute = self.resolve_absolute(path)
        except InvalidPath:
            return None

        node: Node = self.root
        for segment in tokenize(absolute):
            if not node.is_dir():
                return None
            node = node.child(segment)
            if node is None:
                return None
        return node

    def exists(self, path: str) -> bool:
        """Check if a path exists."""
        return self.lookup(path) is not None

    def is_directory(self, path: str) -> bool:
        node = self.lookup(path)
        return node is not None and node.is_dir()

    def is_text_file(self, path: str) -> bool:
        node = self.lookup(path)
        return node is not None and node.is_file()

    def parent_of(self, path: str) -> str:
        """Path of the directory that ``path`` lives (or would live) in."""
        return parent_path(path, self.cwd)

    def _directory_at(self, path: str) -> Directory:
        directory = self.lookup(path)
        if directory is None or not directory.is_dir():
            raise InvalidPath(f"The path does not exist: {path}")
        return directory

    # Topology changes

    def add(self, node: Node, destination: str) -> None:
        """Attach ``node`` under the directory at ``destination``.

        A child with the same name is replaced.

        Raises:
            InvalidPath: ``destination`` is not an existing directory.
        """
        directory = self._directory_at(destination)
        directory.add_child(node)
        if node.is_dir():
            self.directories_created += 1
        else:
            self.text_files_created += 1
        logger.debug("Added %s %s", node.kind.value, node.path)
        self._check_cursor()

    def delete(self, path: str) -> bool:
        """Detach the node at ``path``; a missing path is a no-op."""
        node = self.lookup(path)
        if node is None or node.parent is None:
            return False
        logger.debug("Deleting %s", node.path)
        removed = node.parent.remove_child(node)
        self._check_cursor()
        return removed

    def _check_cursor(self) -> None:
        """Send the cursor back to the root if its directory was detached."""
        if not self.is_within(self.current_directory, self.root):
            logger.warning("Current directory %s was removed; returning to %s",
                           self.current_directory.name, ROOT)
            self.current_directory = self.root

    def change_current_directory(self, directory: Directory) -> None:
        """Move the cursor. Callers check that ``directory`` exists."""
        self.current_directory = directory

    def create_directory(self, path: str) -> Directory:
        """Create a directory at ``path`` under its (existing) parent."""
        directory = Directory(validate_name(leaf_name(path)))
        self.add(directory, self.parent_of(path))
        return directory

    def create_text_file(self, path: str, contents: str = '') -> TextFile:
        """Create a text file at ``path`` under its (existing) parent."""
        text_file = TextFile(validate_name(leaf_name(path)), contents=contents)
        self.add(text_file, self.parent_of(path))
        return text_file

    def copy_tree(self, node: Node, name: Optional[str] = None) -> Node:
        """Return a detached deep copy of ``node``, optionally renamed."""
        name = name or node.name
        if node.kind is NodeKind.TEXT_FILE:
            return TextFile(name, contents=node.contents)

        copy = Directory(name)
        for child in node.entries():
            copy.add_child(self.copy_tree(child))
        return copy

    def move(self, node: Node, destination: str, name: Optional[str] = None) -> None:
        """Relocate ``node`` into the directory at ``destination``.

        The destination is checked before ``node`` is detached, so a failed
        move leaves the tree untouched.
        """
        directory = self._directory_at(destination)
        if name is not None:
            validate_name(name)
        old_path = node.path
        if node.parent is not None:
            node.parent.remove_child(node)
        if name is not None:
            node.rename(name)
        directory.add_child(node)
        logger.debug("Moved %s to %s", old_path, node.path)
        self._check_cursor()

    # Traversal

    def walk(self, directory: Directory, depth: int = MAX_DEPTH) -> Iterator[Directory]:
        """Yield ``directory`` and its subdirectories, ``depth`` levels deep."""
        yield directory
        if depth > 0:
            for child in directory.entries():
                if child.is_dir():
                    yield from self.walk(child, depth - 1)

    def text_files(self, node: Node, depth: int = MAX_DEPTH) -> Iterator[TextFile]:
        """Yield ``node`` if it is a text file, else the text files under it."""
        if node.is_file():
            yield node
            return
        for directory in self.walk(node, depth):
            for child in directory.entries():
                if child.is_file():
                    yield child

    @staticmethod
    def is_within(node: Node, ancestor: Node) -> bool:
        """True if ``node`` is ``ancestor`` or lies somewhere beneath it."""
        current: Optional[Node] = node
        while current is not None:
            if current is ancestor:
                return True
            current = current.parent
        return False

    def summary(self) -> str:
        total = self.directories_created + self.text_files_created
        return '\n'.join([
            f"Type:         {self.SYSTEM_TYPE}",
            f"Total files:  {total}",
            f"\t     Directories({self.directories_created})",
            f"\t      TextFiles({self.text_files_created})",
        ])
