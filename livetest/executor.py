"""
Run the selected test files, once per requested interpreter version.

The child's stderr is split in two: the full stream is appended to a
capture file for the warning check, and everything except warning lines
is passed through to our own stderr.
"""
import logging
import os
import subprocess
import sys
import threading

from livetest.classifier import is_warning_line
from livetest.errors import ExecutionFailure

logger = logging.getLogger(__name__)


def interpreter_for(version):
    """Executable name for a declared interpreter version"""
    return f"python{version}"


def build_command(interpreter, test_files, passthrough=()):
    return [interpreter, '-m', 'unittest'] + list(test_files) + list(passthrough)


def build_env(overrides=None, python_warnings='default', base=None):
    """Environment for a test run: ours plus server URLs and warning filters"""
    env = dict(os.environ if base is None else base)
    if python_warnings:
        env['PYTHONWARNINGS'] = python_warnings
    env.update(overrides or {})
    return env


class StderrTee:
    """Copy a child's stderr to a capture file and a filtered pass-through"""

    def __init__(self, source, capture, passthrough):
        self.source = source
        self.capture = capture
        self.passthrough = passthrough
        self._thread = threading.Thread(target=self._pump, daemon=True)

    def start(self):
        self._thread.start()
        return self

    def join(self, timeout=None):
        self._thread.join(timeout)

    def _pump(self):
        for line in iter(self.source.readline, ''):
            self.capture.write(line)
            if not is_warning_line(line):
                self.passthrough.write(line)
                self.passthrough.flush()
        self.capture.flush()
        self.source.close()


def run_once(cmd, env, capture_path, passthrough=None):
    """Run one test command to completion and return its exit status"""
    passthrough = passthrough or sys.stderr
    logger.debug(f"Running: {' '.join(cmd)}")
    with open(capture_path, 'a', encoding='utf-8') as capture:
        process = subprocess.Popen(
            cmd,
            env=env,
            stderr=subprocess.PIPE,
            text=True,
            encoding='utf-8',
            errors='replace',
        )
        tee = StderrTee(process.stderr, capture, passthrough).start()
        try:
            returncode = process.wait()
        except BaseException:
            if process.poll() is None:
                process.terminate()
                process.wait()
            raise
        finally:
            tee.join()
    return returncode


def run_suite(test_files, passthrough_args, versions, env, capture_path,
              stream=None, marker_stream=None):
    """Execute the test files once, or once per declared version.

    Each versioned run is preceded by a '==> Python X' marker. The first
    failing run raises ExecutionFailure with that run's exit status.
    """
    marker_stream = marker_stream or sys.stdout
    runs = list(versions) or [None]
    for version in runs:
        if version is None:
            interpreter = sys.executable
        else:
            interpreter = interpreter_for(version)
            print(f"==> Python {version}", file=marker_stream, flush=True)

        cmd = build_command(interpreter, test_files, passthrough_args)
        try:
            returncode = run_once(cmd, env, capture_path, stream)
        except FileNotFoundError:
            logger.error(f"Interpreter {interpreter} not found")
            raise ExecutionFailure(127, version)

        if returncode != 0:
            raise ExecutionFailure(returncode, version)
    return len(runs)
