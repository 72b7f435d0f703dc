# -*- coding: utf-8 -*-
import os
import sys

import pytest

import findmods.command
import findmods.git
from findmods.command import display_name, format_directory, is_marker
from findmods.git import DIFF_POLICY, GitError, Strategy


@pytest.mark.skipif(sys.platform == 'win32',
                    reason="does not run on windows")
def test_run_can_handle_badly_encoded_output():
    some_bytes = b'tsch\xfc\xdf'  # 'tschüß' in latin1, outside UTF-8
    code, output = findmods.git.run([b'echo', some_bytes])
    assert code == 0
    assert output == [some_bytes]


@pytest.mark.skipif(sys.platform == 'win32',
                    reason="does not run on windows")
def test_run_reports_unexpected_exit_status():
    with pytest.raises(GitError) as excinfo:
        findmods.git.run(['false'])
    assert 'exit status 1' in str(excinfo.value)


@pytest.mark.skipif(sys.platform == 'win32',
                    reason="does not run on windows")
def test_run_accepts_listed_exit_status():
    code, output = findmods.git.run(['false'], ok_codes=(0, 1))
    assert code == 1
    assert output == []


def test_run_reports_missing_binary():
    with pytest.raises(GitError) as excinfo:
        findmods.git.run(['findmods-no-such-binary'])
    assert 'cannot run findmods-no-such-binary' in str(excinfo.value)


def test_display_name():
    assert display_name('./foo/bar') == 'foo/bar'
    assert display_name('.') == '.'
    assert display_name('') == '.'
    assert display_name('/srv/checkout') == '/srv/checkout'
    assert display_name('.hidden/repo') == '.hidden/repo'


def test_format_directory():
    assert format_directory('./foo/bar/.git') == 'foo/bar'
    assert format_directory('./.git') == '.'
    assert format_directory('.git') == '.'


def test_is_marker():
    assert is_marker('./foo/.git')
    assert is_marker('.git')
    assert not is_marker('./foo/.GIT')
    assert not is_marker('./foo/.gitignore')
    assert not is_marker('./.git/objects')


def test_walk_includes_hidden_entries_and_files(tmpdir):
    root = str(tmpdir)
    os.makedirs(os.path.join(root, 'a', '.hidden'))
    open(os.path.join(root, 'a', '.hidden', 'file'), 'w').close()
    open(os.path.join(root, 'b'), 'w').close()

    entries = list(findmods.command.walk(root))

    relative = [(os.path.relpath(e.path, root), e.depth) for e in entries]
    assert relative == [
        ('.', 0),
        ('a', 1),
        (os.path.join('a', '.hidden'), 2),
        (os.path.join('a', '.hidden', 'file'), 3),
        ('b', 1),
        ]


def test_walk_of_missing_root_is_empty(tmpdir):
    missing = os.path.join(str(tmpdir), 'missing')
    assert list(findmods.command.walk(missing)) == []


@pytest.mark.skipif(sys.platform == 'win32',
                    reason="does not run on windows")
def test_walk_does_not_follow_symlinks(tmpdir):
    root = str(tmpdir)
    os.makedirs(os.path.join(root, 'real', 'inside'))
    os.symlink(os.path.join(root, 'real'), os.path.join(root, 'link'))
    os.symlink(os.path.join(root, 'nowhere'), os.path.join(root, 'broken'))

    paths = [os.path.relpath(e.path, root)
             for e in findmods.command.walk(root)]

    assert os.path.join('link', 'inside') not in paths
    assert os.path.join('real', 'inside') in paths


def test_strategy_parse():
    assert Strategy.parse('i') is Strategy.INDEX
    assert Strategy.parse('index') is Strategy.INDEX
    assert Strategy.parse('s') is Strategy.STATUS
    assert Strategy.parse('status') is Strategy.STATUS
    assert Strategy.parse('t') is Strategy.TREE
    assert Strategy.parse('tree') is Strategy.TREE
    with pytest.raises(ValueError):
        Strategy.parse('Index')


def test_diff_policy_arguments():
    arguments = DIFF_POLICY.arguments()
    assert '--ignore-submodules=all' in arguments
    assert '--diff-filter=t' in arguments


def test_default_strategy_is_index():
    assert findmods.command.parse_arguments([]) is Strategy.INDEX
    assert findmods.command.parse_arguments(['tree']) is Strategy.TREE


@pytest.mark.parametrize('argv', [['-h'], ['--help'], ['x', 'y', '-h']])
def test_help_exits_zero(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        findmods.command.parse_arguments(argv)
    assert excinfo.value.code == 0
    err = capsys.readouterr().err
    assert 'Usage: ' in err
    assert 'Version:  {}'.format(findmods.__version__) in err
    assert 'Origin:' not in err


def test_too_many_arguments_exit_one(capsys):
    with pytest.raises(SystemExit) as excinfo:
        findmods.command.parse_arguments(['i', 't'])
    assert excinfo.value.code == 1
    assert 'Only one argument should be present' in capsys.readouterr().err


def test_unknown_strategy_exits_two(capsys):
    with pytest.raises(SystemExit) as excinfo:
        findmods.command.parse_arguments(['x'])
    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert 'Unknown search kind x' in err
    assert 'Usage: ' in err


def test_usage_errors_do_not_scan(monkeypatch):
    def scan(root, strategy):
        raise AssertionError('scan should not run')
    monkeypatch.setattr(findmods.command, 'scan', scan)
    for argv, code in (['x'], 2), (['i', 's'], 1), (['-h'], 0):
        monkeypatch.setattr(sys, 'argv', ['findmods'] + argv)
        with pytest.raises(SystemExit) as excinfo:
            findmods.command.main()
        assert excinfo.value.code == code
