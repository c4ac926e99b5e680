"""Locate test files on disk"""
import fnmatch
import os


def discover_test_files(root, pattern='test_*.py'):
    """Return every file under root whose name matches pattern.

    Directories and files are visited in sorted order so that repeated
    runs see the same sequence. A missing or unreadable root raises OSError.
    """
    if not os.path.isdir(root):
        # os.walk hides this case, so raise it ourselves
        raise FileNotFoundError(f"Test root {root!r} is not a readable directory")

    def _raise(error):
        raise error

    found = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(d for d in dirnames if d != '__pycache__')
        for name in sorted(filenames):
            if fnmatch.fnmatchcase(name, pattern):
                found.append(os.path.join(dirpath, name))
    return found
