"""Find git checkouts beneath the current directory that have modifications

Before running a bulk operation across dozens of nested checkouts I
want to know which of them still carry edits that were never committed.
Walking into each one by hand and typing "git status" does not scale,
so this "findmods" script walks the tree for me, asks git about every
checkout it finds, and prints the ones that differ from their last
recorded state.

Installing and running "findmods"
---------------------------------

Install it from the Python Package Index with::

    $ pip install findmods

Then run it from the directory you want to audit::

    $ cd ~/devel
    $ findmods
    projects/website
    vendor/libfoo

Each modified checkout is printed on its own line, relative to the
current directory.  The exit status is 100 if anything was printed and
0 otherwise, so the command drops straight into shell scripts::

    $ findmods || echo "commit your work first"

Strategies
----------

There are three ways of asking git whether a checkout is modified.  Pick
one with a single argument:

* ``i`` or ``index`` (the default) compares the index with the working
  directory, and also reports content staged but not yet committed.
* ``s`` or ``status`` asks for the status of every tracked file and
  reports the checkout as soon as one of them is not current.
* ``t`` or ``tree`` compares the tree of the checked-out commit directly
  against the working directory, bypassing the index.  A checkout with
  no commits yet is never reported by this strategy.

All three ignore untracked files, ignored files, and submodules.

Checkouts that git cannot open are reported as warnings on standard
error and skipped.  Set ``FINDMODS_LOG=DEBUG`` to see every check as it
runs.  "findmods" never changes anything inside a checkout: git is run
against a scratch copy of the index, so even the index is left
untouched.

Changelog
---------

**1.0** (2026 Oct 19)

- Three detection strategies: index, status, and tree.
- Warnings instead of failures for checkouts that cannot be read.

"""
__version__ = '1.0'
