#!/usr/bin/env python3
"""
Terminal emulator for memshell.

This module provides the interactive front end: it reads lines, records
them in the history, handles the reserved reset line and hands everything
else to the CommandDispatcher.

Design Principles:
- The front end owns history and the REPL, nothing else
- All filesystem work goes through the dispatcher
- Errors are printed, never fatal; only exit ends the session
"""

import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from .command_parser import CommandParser
from .dispatcher import CommandDispatcher
from .exceptions import ShellError
from .filesystem import VirtualFileSystem
from .history import CommandHistory

logger = logging.getLogger(__name__)


@dataclass
class TerminalConfig:
    """Configuration for terminal session."""
    prompt: str = '/# '
    reset_command: str = 'reset'
    show_banner: bool = True
    log_level: str = 'WARNING'


class TerminalSession:
    """
    Main terminal session.

    This class provides the REPL loop and owns the session state: one
    filesystem, one history and the dispatcher that ties them together.
    """

    def __init__(self, config: Optional[TerminalConfig] = None,
                 fs: Optional[VirtualFileSystem] = None):
        """Initialize terminal session."""
        self.config = config or TerminalConfig()
        self.fs = fs or VirtualFileSystem()
        self.history = CommandHistory()
        self.parser = CommandParser()
        self.dispatcher = CommandDispatcher(self.fs, self.history)
        self.running = False

    def get_prompt(self) -> str:
        return self.config.prompt

    def execute_command(self, command_line: str) -> str:
        """
        Execute a command line and return the output.

        Raises SystemExit when the line runs ``exit``.
        """
        line = self.parser.normalize(command_line)
        if not line:
            return ''

        self.history.add(line)

        if line == self.config.reset_command:
            self.fs.reset()
            return ''

        try:
            result = self.dispatcher.dispatch(line)
        except ShellError as e:
            logger.debug("Rejected %r: %s", line, e)
            return str(e)

        return str(result)

    def run_interactive(self):
        """Run the interactive REPL loop."""
        self.running = True

        if self.config.show_banner:
            print("Welcome to memshell, an in-memory shell")
            print(f"Type 'man COMMAND' for help, '{self.config.reset_command}' "
                  "to start over, 'exit' to quit")
            print()

        while self.running:
            try:
                command_line = input(self.get_prompt())
                output = self.execute_command(command_line)
                if output:
                    print(output)
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                print()
                break

        self.running = False

    def run_command(self, command_line: str) -> str:
        """
        Run a single command and return output.

        This method is useful for non-interactive use.
        """
        return self.execute_command(command_line)

    def run_script(self, script_lines: List[str]) -> List[str]:
        """
        Run a script (list of command lines) and return outputs.
        """
        outputs = []
        for line in script_lines:
            # Skip comments and empty lines
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            outputs.append(self.execute_command(line))

        return outputs


def main(argv: Optional[List[str]] = None):
    """Main entry point for terminal emulator."""
    import argparse

    parser = argparse.ArgumentParser(description='memshell - in-memory shell emulator')
    parser.add_argument('-c', '--command', help='Execute command and exit')
    parser.add_argument('--prompt', default=TerminalConfig.prompt, help='Prompt string')
    parser.add_argument('--no-banner', action='store_true', help='Skip the welcome banner')
    parser.add_argument('--log-level', default=TerminalConfig.log_level,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level for diagnostics on stderr')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(name)s %(levelname)s %(message)s',
        stream=sys.stderr,
    )

    config = TerminalConfig(
        prompt=args.prompt,
        show_banner=not args.no_banner,
        log_level=args.log_level,
    )
    session = TerminalSession(config=config)

    if args.command:
        output = session.run_command(args.command)
        if output:
            print(output)
        return

    try:
        # Line editing for input() when the platform has it
        import readline  # noqa: F401
    except ImportError:
        pass

    session.run_interactive()


if __name__ == '__main__':
    main()
