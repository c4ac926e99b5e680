#!/usr/bin/env python3
"""Test classification of captured warnings"""
import io
import os
import unittest

from test_base import LivetestTestBase

from livetest.classifier import check_warnings, find_project_warnings, is_warning_line
from livetest.errors import WarningPolicyViolation


class TestWarningMarker(unittest.TestCase):

    def test_warning_categories(self):
        self.assertTrue(is_warning_line('/a/b.py:3: DeprecationWarning: old\n'))
        self.assertTrue(is_warning_line('/a/b.py:3: ResourceWarning: unclosed file\n'))
        self.assertTrue(is_warning_line('/a/b.py:3: UserWarning: careful\n'))
        self.assertTrue(is_warning_line('x.py:1: Warning: plain\n'))

    def test_non_warning_lines(self):
        self.assertFalse(is_warning_line('Ran 3 tests in 0.01s\n'))
        self.assertFalse(is_warning_line('  warnings.warn("x")\n'))
        self.assertFalse(is_warning_line('Traceback (most recent call last):\n'))


class TestFindProjectWarnings(unittest.TestCase):
    root = '/work/project'

    def test_project_warning_matches(self):
        lines = [
            '/work/project/lib/client.py:10: DeprecationWarning: use send()\n',
            '  self._legacy()\n',
            'OK\n',
        ]
        self.assertEqual(find_project_warnings(lines, self.root, '.venv'),
                         ['/work/project/lib/client.py:10: DeprecationWarning: use send()'])

    def test_dependency_warnings_are_ignored(self):
        lines = [
            '/work/project/.venv/lib/python3.12/site-packages/dep.py:1: DeprecationWarning: x\n',
            '/usr/lib/python3.12/asyncio/events.py:5: ResourceWarning: y\n',
        ]
        self.assertEqual(find_project_warnings(lines, self.root, '.venv'), [])

    def test_project_paths_without_marker_are_ignored(self):
        lines = ['  File "/work/project/lib/client.py", line 10, in send\n']
        self.assertEqual(find_project_warnings(lines, self.root, '.venv'), [])


class TestCheckWarnings(LivetestTestBase):

    def _capture(self, lines):
        path = os.path.join(self.temp_dir, 'capture.log')
        with open(path, 'w') as f:
            f.writelines(lines)
        return path

    def test_dependency_only_capture_passes(self):
        dep = os.path.join(self.temp_dir, '.venv', 'site-packages', 'dep.py')
        path = self._capture([f'{dep}:1: DeprecationWarning: old api\n'])
        stream = io.StringIO()
        self.assertEqual(check_warnings(path, self.temp_dir, '.venv', stream), [])
        self.assertIn('0 warning(s) from project source', stream.getvalue())
        self.assertFalse(os.path.exists(path))

    def test_project_warnings_fail_with_count(self):
        own = os.path.join(self.temp_dir, 'lib', 'client.py')
        path = self._capture([
            f'{own}:4: DeprecationWarning: first\n',
            'some normal output\n',
            f'{own}:9: UserWarning: second\n',
        ])
        stream = io.StringIO()
        with self.assertRaises(WarningPolicyViolation) as ctx:
            check_warnings(path, self.temp_dir, '.venv', stream)
        self.assertEqual(len(ctx.exception.records), 2)
        self.assertNotEqual(ctx.exception.exit_code, 0)
        output = stream.getvalue()
        self.assertIn('DeprecationWarning: first', output)
        self.assertIn('2 warning(s) from project source', output)
        self.assertFalse(os.path.exists(path))

    def test_missing_capture_counts_as_clean(self):
        stream = io.StringIO()
        missing = os.path.join(self.temp_dir, 'never-written.log')
        self.assertEqual(check_warnings(missing, self.temp_dir, '.venv', stream), [])


if __name__ == '__main__':
    unittest.main()
