"""Asking git whether a checkout has modifications."""

import logging
import os
import shutil
import tempfile
from collections import namedtuple
from contextlib import contextmanager
from enum import Enum
from subprocess import PIPE, run as run_process

log = logging.getLogger(__name__)


class GitError(Exception):
    """Signal that git could not answer a question about a checkout."""


def run(command, ok_codes=(0,), **kw):
    """Run `command` and return its return code and lines of output.

    Raises `GitError` if the command cannot be started or exits with a
    status outside of `ok_codes`.
    """
    try:
        process = run_process(command, stdout=PIPE, stderr=PIPE, **kw)
    except OSError as e:
        raise GitError('cannot run {}: {}'.format(command[0], e))
    if process.returncode not in ok_codes:
        message = process.stderr.decode('utf-8', 'replace').strip()
        raise GitError(message or 'exit status {}'.format(process.returncode))
    # In Python 3, iterating over bytes yield integers, so we call
    # `splitlines()` to get lines instead.
    return process.returncode, process.stdout.splitlines()


class DiffPolicy(namedtuple('DiffPolicy',
                            'ignore_submodules include_ignored'
                            ' include_typechange')):
    """The options every diff is computed with."""

    def arguments(self):
        args = ['--no-ext-diff', '--no-renames', '--name-only', '-z']
        if self.ignore_submodules:
            args.append('--ignore-submodules=all')
        if not self.include_typechange:
            # A lower-case status letter excludes that kind of change.
            args.append('--diff-filter=t')
        # `git diff` never lists ignored paths, so `include_ignored`
        # needs no argument of its own.
        return args


DIFF_POLICY = DiffPolicy(ignore_submodules=True, include_ignored=False,
                         include_typechange=False)


class Repository(object):
    """A git store opened for the duration of a single check.

    Every git command runs against a scratch copy of the store's index,
    so refreshing stat information never writes to the checkout itself.
    """

    def __init__(self, marker):
        self.git_dir = os.path.abspath(marker)
        self.work_tree = os.path.dirname(self.git_dir)
        self.scratch = None
        self.index_file = None
        self.closed = False

    def __repr__(self):
        return '<Repository {!r}>'.format(self.work_tree)

    def git(self, *args, **kw):
        """Run a git subcommand against this store only.

        Pass `index_file` to use an index other than the scratch copy.
        """
        if self.closed:
            raise GitError('repository {} is closed'.format(self.work_tree))
        index_file = kw.pop('index_file', self.index_file)
        env = dict(os.environ)
        env.pop('GIT_INDEX_FILE', None)
        if index_file is not None:
            env['GIT_INDEX_FILE'] = index_file
        command = ['git', '--git-dir', self.git_dir,
                   '--work-tree', self.work_tree]
        command.extend(args)
        return run(command, cwd=self.work_tree, env=env, **kw)

    def copy_index(self, index):
        """Make a scratch copy of the index file at `index`.

        A store without an index yet gets an empty scratch index.
        """
        self.scratch = tempfile.mkdtemp(prefix='findmods-')
        self.index_file = os.path.join(self.scratch, 'index')
        if not os.path.exists(index):
            return
        try:
            shutil.copyfile(index, self.index_file)
        except OSError as e:
            raise GitError('cannot read index: {}'.format(e))

    def scratch_path(self, name):
        return os.path.join(self.scratch, name)

    def close(self):
        self.closed = True
        if self.scratch is not None:
            shutil.rmtree(self.scratch, ignore_errors=True)
            self.scratch = None


@contextmanager
def open_repository(marker):
    """Open the store at `marker`, whose work tree is the marker's parent.

    Git is pointed at the marker explicitly, so a broken marker raises
    `GitError` instead of silently falling back to an enclosing checkout.
    """
    repo = Repository(marker)
    try:
        code, lines = repo.git('rev-parse', '--absolute-git-dir')
        git_dir = os.fsdecode(lines[0]) if lines else repo.git_dir
        repo.copy_index(os.path.join(git_dir, 'index'))
        yield repo
    finally:
        repo.close()


def has_deltas(lines):
    return any(lines)


def modified_by_index(repo, policy=DIFF_POLICY):
    """Does the index differ from the working directory?

    Content that has been staged but not committed also counts, since
    the index then differs from the checkout's last recorded state.
    """
    log.debug('Scan with index %r', repo)
    arguments = policy.arguments()
    code, lines = repo.git('diff', *arguments)
    if has_deltas(lines):
        return True
    code, lines = repo.git('diff', '--cached', *arguments)
    return has_deltas(lines)


def modified_by_status(repo):
    """Is any tracked file in a state other than current?

    Status has its own exclusions (untracked, ignored and submodule
    entries) and does not consult the diff policy.
    """
    log.debug('Scan with status %r', repo)
    code, lines = repo.git('status', '--porcelain', '--untracked-files=no',
                           '--ignore-submodules=all')
    for line in lines:
        if line.strip():
            return True
    return False


def modified_by_tree(repo, policy=DIFF_POLICY):
    """Does the working directory differ from the checked-out commit's tree?

    The commit's tree is read into an index of its own, so nothing staged
    in the real index affects the answer.  A checkout whose HEAD resolves
    to no commit at all, as in a fresh repository, is reported as
    unmodified.
    """
    log.debug('Scan with tree %r', repo)
    code, lines = repo.git('rev-parse', '--verify', '--quiet',
                           'HEAD^{commit}', ok_codes=(0, 1))
    if code != 0 or not lines:
        log.debug('No commit behind HEAD in %r', repo)
        return False
    commit = lines[0].decode('ascii')
    tree_index = repo.scratch_path('tree-index')
    repo.git('read-tree', commit, index_file=tree_index)
    code, lines = repo.git('diff', *policy.arguments(),
                           index_file=tree_index)
    return has_deltas(lines)


class Strategy(Enum):
    INDEX = 'index'
    STATUS = 'status'
    TREE = 'tree'

    @classmethod
    def parse(cls, name):
        """Return the strategy called `name`, or raise `ValueError`."""
        try:
            return ALIASES[name]
        except KeyError:
            raise ValueError('Unknown search kind {}'.format(name))


ALIASES = {
    'i': Strategy.INDEX, 'index': Strategy.INDEX,
    's': Strategy.STATUS, 'status': Strategy.STATUS,
    't': Strategy.TREE, 'tree': Strategy.TREE,
    }

CHECKS = {
    Strategy.INDEX: modified_by_index,
    Strategy.STATUS: modified_by_status,
    Strategy.TREE: modified_by_tree,
    }


def has_modifications(marker, strategy):
    """Open the store at `marker` and run one `strategy` check on it."""
    with open_repository(marker) as repo:
        return CHECKS[strategy](repo)
