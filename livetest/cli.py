#!/usr/bin/env python3
"""
Command line entry point for livetest.

    livetest [--root DIR] [--pattern GLOB] [--list] [FILE|PATTERN ...] [-- ARGS ...]

Discovers test files, narrows them with the given files or substring
patterns, starts the live target and proxy servers when adapter tests are
selected, runs the tests (once per LIVETEST_PYTHON_VERSIONS entry if set)
and fails if any warning came from project source.
"""
import argparse
import logging
import os
import sys
import tempfile

from livetest.classifier import check_warnings
from livetest.config import RunConfiguration
from livetest.discovery import discover_test_files
from livetest.errors import HarnessError
from livetest.executor import build_env, run_suite
from livetest.filters import split_passthrough, select_test_files
from livetest.servers import LiveServers, needs_live_servers

logger = logging.getLogger(__name__)


def parse_args(argv):
    own, passthrough = split_passthrough(argv)
    parser = argparse.ArgumentParser(
        prog='livetest',
        description="Run the test suite, starting live HTTP servers for adapter tests",
        epilog="Arguments after '--' are passed unchanged to every test run.",
    )
    parser.add_argument('filters', nargs='*', metavar='FILE|PATTERN',
                        help="test file to run, or substring selecting discovered test files")
    parser.add_argument('--root', default=None, help="directory to search for tests (default: tests)")
    parser.add_argument('--pattern', default=None, help="test file name pattern (default: test_*.py)")
    parser.add_argument('--list', action='store_true', help="print the selected test files and exit")
    parser.add_argument('-v', '--verbose', action='store_true', help="enable debug logging")
    args = parser.parse_intermixed_args(own)
    args.passthrough = passthrough
    return parser, args


def configure_logging(verbose=False, environ=None):
    environ = os.environ if environ is None else environ
    level_name = 'DEBUG' if verbose else environ.get('LIVETEST_LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )


def _execute(config, test_files, passthrough, capture_path, env_overrides=None):
    env = build_env(env_overrides, config.python_warnings)
    return run_suite(test_files, passthrough, config.versions, env, capture_path)


def run(config, filters, passthrough, list_only=False, servers_factory=LiveServers):
    """Run one harness invocation; returns 0 or raises HarnessError"""
    discovered = discover_test_files(config.root, config.pattern)
    selected, filtered = select_test_files(discovered, filters)
    if filtered:
        logger.info(f"Selected {len(selected)} of {len(discovered)} test files")

    if list_only:
        for path in selected:
            print(path)
        return 0

    if not selected:
        logger.warning(f"No test files found under {config.root!r}; nothing to run")
        return 0

    fd, capture_path = tempfile.mkstemp(prefix='livetest-warnings-', suffix='.log')
    os.close(fd)
    try:
        if needs_live_servers(selected):
            with servers_factory(config) as servers:
                _execute(config, selected, passthrough, capture_path, servers.environment())
        else:
            logger.debug("No adapter tests selected; live servers not started")
            _execute(config, selected, passthrough, capture_path)
        check_warnings(capture_path, config.project_root, config.dependency_dir)
    finally:
        if os.path.exists(capture_path):
            os.remove(capture_path)
    return 0


def main(argv=None, environ=None):
    """Main entry point; returns the process exit status"""
    parser, args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.verbose, environ)
    try:
        config = RunConfiguration.from_environ(environ, root=args.root, pattern=args.pattern)
    except ValueError as e:
        parser.error(str(e))

    try:
        return run(config, args.filters, args.passthrough, list_only=args.list)
    except HarnessError as e:
        logger.error(e.message)
        return e.exit_code
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130


if __name__ == '__main__':
    sys.exit(main())
