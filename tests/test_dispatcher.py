#!/usr/bin/env python3
"""
Tests for the dispatch pipeline: resolution, redirection and history recall.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from memshell.commands import EchoCommand
from memshell.dispatcher import CommandDispatcher
from memshell.exceptions import InvalidCommand, InvalidRedirector
from memshell.filesystem import VirtualFileSystem
from memshell.history import CommandHistory


@pytest.fixture
def dispatcher():
    fs = VirtualFileSystem()
    fs.create_directory('/a')
    return CommandDispatcher(fs)


class TestResolution:

    def test_empty_line(self, dispatcher):
        result = dispatcher.dispatch('   ')
        assert str(result) == ''
        assert result.exit_code == 0

    def test_unknown_command(self, dispatcher):
        with pytest.raises(InvalidCommand) as excinfo:
            dispatcher.dispatch('rm /a')
        assert str(excinfo.value) == 'Invalid command: Command "rm" does not exist.'

    def test_prepare_does_not_execute(self, dispatcher):
        command = dispatcher.prepare('mkdir /b')
        assert command.arguments == ['/b']
        assert not dispatcher.fs.exists('/b')

    def test_resolve_ignores_arguments(self, dispatcher):
        assert isinstance(dispatcher.resolve('echo unquoted'), EchoCommand)

    def test_dispatchers_do_not_share_state(self):
        first = CommandDispatcher(VirtualFileSystem())
        second = CommandDispatcher(VirtualFileSystem())
        first.dispatch('mkdir /only_here')
        assert first.fs.exists('/only_here')
        assert not second.fs.exists('/only_here')


class TestRedirection:

    def test_output_goes_to_file_only(self, dispatcher):
        result = dispatcher.dispatch('echo "hi" > /a/out.txt')
        assert str(result) == ''
        assert dispatcher.fs.lookup('/a/out.txt').contents == 'hi'

    def test_append(self, dispatcher):
        dispatcher.dispatch('echo "hi" > /a/out.txt')
        dispatcher.dispatch('echo "bye" >> /a/out.txt')
        assert dispatcher.dispatch('cat /a/out.txt').text == 'hi\nbye'

    def test_overwrite(self, dispatcher):
        dispatcher.dispatch('echo "hi" > /a/out.txt')
        dispatcher.dispatch('echo "bye" > /a/out.txt')
        assert dispatcher.dispatch('cat /a/out.txt').text == 'bye'

    def test_errors_are_not_redirected(self, dispatcher):
        result = dispatcher.dispatch('ls /missing > /a/out.txt')
        assert result.errors == 'ls: cannot access /missing: No such file or directory.'
        assert dispatcher.fs.lookup('/a/out.txt').contents == ''

    def test_relative_target(self, dispatcher):
        dispatcher.dispatch('cd /a')
        dispatcher.dispatch('pwd > where.txt')
        assert dispatcher.fs.lookup('/a/where.txt').contents == '/a'

    def test_relative_target_is_fixed_before_the_command_runs(self, dispatcher):
        dispatcher.dispatch('cd /a > out.txt')
        assert dispatcher.fs.is_text_file('/out.txt')
        assert not dispatcher.fs.exists('/a/out.txt')

    def test_command_creates_directory_at_target(self, dispatcher):
        result = dispatcher.dispatch('mkdir /d > /d')
        assert dispatcher.fs.is_directory('/d')
        assert result.errors == 'Invalid Redirector: /d: Is a directory.'
        assert result.exit_code == 0

    def test_copy_creates_directory_at_target(self, dispatcher):
        dispatcher.dispatch('mkdir /src')
        result = dispatcher.dispatch('cp /src /dst > /dst')
        assert dispatcher.fs.is_directory('/dst')
        assert result.errors == 'Invalid Redirector: /dst: Is a directory.'

    def test_quoted_symbol_is_not_a_redirect(self, dispatcher):
        assert dispatcher.dispatch('echo "a > b"').text == 'a > b'

    def test_bad_redirection_rejects_whole_line(self, dispatcher):
        with pytest.raises(InvalidRedirector) as excinfo:
            dispatcher.dispatch('mkdir /b > /a')
        assert str(excinfo.value) == 'Invalid Redirector: /a: Is a directory.'
        assert not dispatcher.fs.exists('/b')

    def test_missing_target(self, dispatcher):
        with pytest.raises(InvalidRedirector):
            dispatcher.dispatch('echo "x" >')

    def test_redirection_checked_before_arguments(self, dispatcher):
        with pytest.raises(InvalidRedirector):
            dispatcher.dispatch('echo unquoted > /missing/out.txt')

    def test_exit_is_not_redirectable(self, dispatcher):
        with pytest.raises(InvalidCommand) as excinfo:
            dispatcher.dispatch('exit > /a/out.txt')
        assert str(excinfo.value) == 'Invalid command: exit: Does not take in any arguments.'


class TestRecall:

    @pytest.fixture
    def history(self, dispatcher):
        return dispatcher.history

    def test_replays_line_with_redirection(self, dispatcher, history):
        for line in ('mkdir /b', 'echo "hi" >> /b/log.txt', '!2'):
            history.add(line)
            dispatcher.dispatch(line)
        assert dispatcher.fs.lookup('/b/log.txt').contents == 'hi\nhi'

    def test_recall_output(self, dispatcher, history):
        for line in ('pwd', '!1'):
            history.add(line)
        assert dispatcher.dispatch('!1').text == '/'

    def test_out_of_bounds(self, dispatcher, history):
        history.add('!3')
        with pytest.raises(InvalidCommand) as excinfo:
            dispatcher.dispatch('!3')
        assert str(excinfo.value) == 'Invalid command: !: Argument is out of bounds'

    def test_not_an_integer(self, dispatcher):
        with pytest.raises(InvalidCommand) as excinfo:
            dispatcher.dispatch('!x')
        assert str(excinfo.value) == 'Invalid command: !: Argument must be an integer'

    def test_self_reference_is_reported(self, dispatcher, history):
        history.add('!1')
        result = dispatcher.dispatch('!1')
        assert result.errors == 'Invalid command: !1: History recall loops back on itself.'
        assert result.exit_code == 1

    def test_mutual_recall_is_reported(self, dispatcher, history):
        history.add('!2')
        history.add('!1')
        result = dispatcher.dispatch('!1')
        assert 'History recall loops back on itself.' in result.errors

    def test_recalled_rejection_is_reported(self, dispatcher, history):
        history.add('cat /nope')
        history.add('!1')
        result = dispatcher.dispatch('!1')
        assert result.errors == 'Invalid command: cat: No such file or directory'

    def test_shared_history_object(self):
        history = CommandHistory()
        dispatcher = CommandDispatcher(VirtualFileSystem(), history)
        assert dispatcher.history is history
