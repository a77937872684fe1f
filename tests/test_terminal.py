#!/usr/bin/env python3
"""
Tests for the memshell terminal session.

These run whole input lines the way an operator types them: history,
reset, error reporting and exit all go through TerminalSession.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest
from unittest.mock import patch

from memshell.history import CommandHistory
from memshell.terminal import TerminalSession, TerminalConfig, main


class TestSessionScenarios(unittest.TestCase):
    """End-to-end command sequences."""

    def setUp(self):
        self.session = TerminalSession()

    def run_lines(self, *lines):
        return [self.session.execute_command(line) for line in lines]

    def test_navigation(self):
        outputs = self.run_lines('mkdir /a', 'mkdir /a/b', 'ls /a', 'cd /a/b', 'pwd')
        self.assertEqual(outputs, ['', '', 'b', '', '/a/b'])

    def test_echo_redirection(self):
        self.run_lines('mkdir /a', 'echo "hi" > /a/out.txt')
        self.assertEqual(self.session.execute_command('cat /a/out.txt'), 'hi')
        self.run_lines('echo "bye" >> /a/out.txt')
        self.assertEqual(self.session.execute_command('cat /a/out.txt'), 'hi\nbye')

    def test_grep_missing_path(self):
        output = self.session.execute_command('grep "x" /missing')
        self.assertEqual(output, 'grep: cannot access /missing: No such file or directory.')

    def test_mkdir_failures(self):
        self.session.execute_command('mkdir /x')
        self.assertIn('Directory already exists.', self.session.execute_command('mkdir /x'))
        self.assertIn('No such file or directory.', self.session.execute_command('mkdir /y/z'))

    def test_recall_reexecutes_with_redirection(self):
        self.run_lines('mkdir /a', 'echo "hi" >> /a/log.txt', '!2')
        self.assertEqual(self.session.execute_command('cat /a/log.txt'), 'hi\nhi')

    def test_recall_of_itself(self):
        output = self.session.execute_command('!1')
        self.assertEqual(output, 'Invalid command: !1: History recall loops back on itself.')

    def test_errors_are_returned_not_raised(self):
        self.assertEqual(self.session.execute_command('frobnicate'),
                         'Invalid command: Command "frobnicate" does not exist.')
        self.assertEqual(self.session.execute_command('echo "x" > /nope/out.txt'),
                         'Invalid Redirector: cannot access /nope: No such file or directory.')

    def test_redirect_onto_new_directory_keeps_session_alive(self):
        output = self.session.execute_command('mkdir /d > /d')
        self.assertEqual(output, 'Invalid Redirector: /d: Is a directory.')
        self.assertEqual(self.session.execute_command('ls'), 'd')

    def test_man(self):
        self.assertEqual(self.session.execute_command('man exit'),
                         'Command EXIT:\nQuits the program.')


class TestSessionHistory(unittest.TestCase):
    """History is recorded by the session, before the line runs."""

    def setUp(self):
        self.session = TerminalSession()

    def test_every_line_is_recorded(self):
        self.session.execute_command('mkdir /a')
        self.session.execute_command('bogus')
        self.assertEqual(self.session.execute_command('history'),
                         '1 mkdir /a\n2 bogus\n3 history')

    def test_lines_are_normalized(self):
        self.session.execute_command('   pwd    ')
        self.session.execute_command('echo   "a  b"')
        self.assertEqual(self.session.history.entries(), ['pwd', 'echo "a  b"'])

    def test_blank_lines_are_ignored(self):
        self.assertEqual(self.session.execute_command('   '), '')
        self.assertEqual(len(self.session.history), 0)


class TestResetAndExit(unittest.TestCase):

    def setUp(self):
        self.session = TerminalSession()

    def test_reset_clears_tree_but_not_history(self):
        self.session.execute_command('mkdir /a')
        self.session.execute_command('cd /a')
        self.assertEqual(self.session.execute_command('reset'), '')
        self.assertEqual(self.session.execute_command('pwd'), '/')
        self.assertEqual(self.session.execute_command('ls'), '')
        self.assertEqual(self.session.history.get(3), 'reset')

    def test_custom_reset_command(self):
        session = TerminalSession(TerminalConfig(reset_command='wipe'))
        session.execute_command('mkdir /a')
        session.execute_command('wipe')
        self.assertFalse(session.fs.exists('/a'))

    def test_exit(self):
        with self.assertRaises(SystemExit) as cm:
            self.session.execute_command('exit')
        self.assertEqual(cm.exception.code, 0)

    def test_exit_with_arguments_is_rejected(self):
        self.assertEqual(self.session.execute_command('exit now'),
                         'Invalid command: exit: Does not take in any arguments.')


class TestCommandHistory(unittest.TestCase):

    def test_one_based_access(self):
        history = CommandHistory()
        history.add('pwd')
        history.add('ls')
        self.assertEqual(history.get(1), 'pwd')
        self.assertEqual(history.get(2), 'ls')
        self.assertIsNone(history.get(0))
        self.assertIsNone(history.get(3))
        self.assertEqual(history.size, 2)


class TestScriptsAndInteractive(unittest.TestCase):

    def test_run_script_skips_comments(self):
        session = TerminalSession()
        outputs = session.run_script([
            '# build a tree',
            'mkdir /a',
            '',
            'ls',
        ])
        self.assertEqual(outputs, ['', 'a'])

    @patch('builtins.print')
    @patch('builtins.input', side_effect=['mkdir /a', 'ls', EOFError()])
    def test_interactive_loop(self, mock_input, mock_print):
        session = TerminalSession(TerminalConfig(show_banner=False))
        session.run_interactive()
        mock_input.assert_called_with('/# ')
        mock_print.assert_any_call('a')
        self.assertFalse(session.running)

    @patch('builtins.print')
    @patch('builtins.input', side_effect=[KeyboardInterrupt(), 'exit'])
    def test_interactive_exit(self, mock_input, mock_print):
        session = TerminalSession(TerminalConfig(show_banner=False))
        with self.assertRaises(SystemExit):
            session.run_interactive()
        mock_print.assert_any_call('^C')

    @patch('builtins.print')
    def test_main_single_command(self, mock_print):
        main(['-c', 'pwd', '--no-banner'])
        mock_print.assert_called_once_with('/')


if __name__ == '__main__':
    unittest.main()
