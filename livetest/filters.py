"""
Narrow a discovered test file set using command line arguments.
"""
import os

from livetest.errors import EmptySelectionError

SEPARATOR = '--'


def split_passthrough(argv):
    """Split argv at the first '--'; the tail is forwarded to the test runs"""
    argv = list(argv)
    if SEPARATOR in argv:
        index = argv.index(SEPARATOR)
        return argv[:index], argv[index + 1:]
    return argv, []


def select_test_files(discovered, filters):
    """Apply filters to the discovered files.

    Existing regular files are taken verbatim; anything else selects every
    discovered path containing it. Results are concatenated in argument order
    and duplicates are kept. Returns (selected, filtered).
    """
    discovered = list(discovered)
    if not filters:
        return discovered, False

    selected = []
    for arg in filters:
        if os.path.isfile(arg):
            selected.append(arg)
        else:
            selected.extend(path for path in discovered if arg in path)

    if not selected:
        raise EmptySelectionError(filters)
    return selected, True
