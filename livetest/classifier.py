"""
Classify warnings captured from test runs.

Python reports warnings on stderr as

    /path/to/module.py:12: DeprecationWarning: message

A warning is ours when its path lies inside the project directory but not
inside the dependency directory (the project's virtualenv by default).
"""
import os
import re
import sys

from livetest.errors import WarningPolicyViolation

WARNING_MARKER = re.compile(r'\b\w*Warning: ')


def is_warning_line(line):
    return WARNING_MARKER.search(line) is not None


def find_project_warnings(lines, project_root, dependency_dir):
    """Return the warning lines originating from project-owned source"""
    project_root = os.path.abspath(project_root)
    dependency_root = os.path.join(project_root, dependency_dir)
    matches = []
    for line in lines:
        line = line.rstrip('\n')
        if not is_warning_line(line):
            continue
        if project_root in line and dependency_root not in line:
            matches.append(line)
    return matches


def check_warnings(capture_path, project_root, dependency_dir, stream=None):
    """Report project warnings from the capture file, then delete it.

    Matches and their count are always printed to stream. Raises
    WarningPolicyViolation if any were found.
    """
    stream = stream or sys.stderr
    try:
        with open(capture_path, 'r', encoding='utf-8', errors='replace') as f:
            matches = find_project_warnings(f, project_root, dependency_dir)
    except FileNotFoundError:
        matches = []
    finally:
        if os.path.exists(capture_path):
            os.remove(capture_path)

    for line in matches:
        print(line, file=stream)
    print(f"{len(matches)} warning(s) from project source", file=stream, flush=True)

    if matches:
        raise WarningPolicyViolation(matches)
    return matches
