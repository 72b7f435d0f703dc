"""The 'findmods' command-line tool itself."""

import logging
import os
import sys
from collections import namedtuple
from optparse import OptionParser

import findmods
from findmods.git import GitError, Strategy, has_modifications

USAGE = '''usage: %prog [options] [strategy]

  Finds git checkouts beneath the current directory containing
  modifications, and prints each of them on its own line relative to
  the current directory.  Exits with status 100 if any were found.

Strategies:
  i, index    compare the index with the working directory
              (fastest and the default)
  s, status   get the status of each file and report if any are dirty
  t, tree     compare the working tree against the last commit,
              bypassing the index entirely'''

ABOUT = '''Version:  {version}
'''

MARKER = '.git'
CURDIR_PREFIX = os.curdir + os.sep
LOG_VARIABLE = 'FINDMODS_LOG'

EXIT_TOO_MANY_ARGUMENTS = 1
EXIT_UNKNOWN_STRATEGY = 2
EXIT_MODIFIED = 100

linesep = os.linesep.encode('ascii')
log = logging.getLogger(__name__)

WalkEntry = namedtuple('WalkEntry', 'path depth')


def output(thing):
    """Replacement for print() that outputs a path as raw bytes."""
    os.write(1, os.fsencode(thing) + linesep)


def walk(root):
    """Yield a WalkEntry for `root` and everything beneath it, depth first.

    Hidden entries are included and symbolic links are never followed.
    Anything that cannot be read is dropped instead of ending the walk,
    and a root that does not exist produces nothing at all.
    """
    try:
        os.lstat(root)
    except OSError:
        return
    yield WalkEntry(root, 0)

    stack = [iter(_children(root, 1))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        path, depth, is_dir = entry
        yield WalkEntry(path, depth)
        if is_dir:
            stack.append(iter(_children(path, depth + 1)))


def _children(path, depth):
    """Return (path, depth, is_dir) for each entry of directory `path`."""
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError:
        return []
    children = []
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        children.append((entry.path, depth, is_dir))
    return children


def is_marker(path):
    """Is the final component of `path` the git metadata directory name?"""
    return os.path.basename(path) == MARKER


def display_name(parent):
    """Turn the directory holding a marker into the name we print."""
    if parent in ('', os.curdir):
        return os.curdir
    if parent.startswith(CURDIR_PREFIX):
        return parent[len(CURDIR_PREFIX):]
    return parent


def format_directory(marker):
    """Return the printable directory name for the marker at `marker`."""
    return display_name(os.path.dirname(marker))


def scan(root, strategy):
    """Print every modified checkout beneath `root`, returning their count."""
    count = 0
    for entry in walk(root):
        if not is_marker(entry.path):
            continue
        name = format_directory(entry.path)
        try:
            modified = has_modifications(entry.path, strategy)
        except GitError as e:
            log.warning('Error in %s: %s', name, e)
            continue
        if modified:
            output(name)
            count += 1
    return count


def configure_logging():
    """Send log lines to standard error, at the level in $FINDMODS_LOG."""
    name = os.environ.get(LOG_VARIABLE, '').upper()
    level = logging.getLevelName(name) if name else logging.WARNING
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(format='%(levelname)s: %(message)s', level=level)


def make_parser():
    parser = OptionParser(usage=USAGE, add_help_option=False)
    parser.add_option('-h', '--help', action='store_true',
        help='print this help and exit')
    return parser


def print_help_and_exit(parser, code, message=''):
    """Print `message` and the full usage text to standard error, then exit.
    """
    if message:
        sys.stderr.write('{}\n\n'.format(message))
    sys.stderr.write(parser.format_help())
    sys.stderr.write('\n')
    sys.stderr.write(ABOUT.format(version=findmods.__version__))
    sys.exit(code)


def parse_arguments(argv):
    """Return the Strategy selected by the command-line arguments `argv`."""
    parser = make_parser()

    # Help wins wherever it appears, even next to arguments that would
    # otherwise be an error.
    if '-h' in argv or '--help' in argv:
        print_help_and_exit(parser, 0)

    (options, args) = parser.parse_args(argv)

    if len(args) > 1:
        print_help_and_exit(parser, EXIT_TOO_MANY_ARGUMENTS,
                            'Only one argument should be present')

    if not args:
        return Strategy.INDEX

    try:
        return Strategy.parse(args[0])
    except ValueError as e:
        print_help_and_exit(parser, EXIT_UNKNOWN_STRATEGY, e)


def main():
    configure_logging()
    strategy = parse_arguments(sys.argv[1:])
    log.debug('Scanning %s with the %s strategy', os.curdir, strategy.value)
    count = scan(os.curdir, strategy)
    sys.exit(EXIT_MODIFIED if count else 0)
