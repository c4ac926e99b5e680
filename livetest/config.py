"""
Run configuration derived from the environment and the command line.

Everything is read once at startup; a RunConfiguration is not modified
for the rest of the run.
"""
import os
import re

DEFAULT_ROOT = 'tests'
DEFAULT_PATTERN = 'test_*.py'
DEFAULT_SERVER_PORT = 3000
DEFAULT_PROXY_PORT = 4000
DEFAULT_PROXY_USER = 'livetest'
DEFAULT_PROXY_PASSWORD = 'p@ss:w0rd'
DEFAULT_SERVER_TIMEOUT = 15.0
DEFAULT_PROXY_TIMEOUT = 5.0

_TRUTHY = ('1', 'true', 'yes', 'on')


def is_truthy(value):
    """Interpret an environment flag"""
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


def parse_versions(value):
    """Split a space or comma separated list of interpreter versions"""
    if not value:
        return []
    return [v for v in re.split(r'[\s,]+', value.strip()) if v]


def _int(environ, name, default):
    raw = environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float(environ, name, default):
    raw = environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")


class RunConfiguration:
    """Settings for a single harness invocation"""

    def __init__(self, root=DEFAULT_ROOT, pattern=DEFAULT_PATTERN, tls=False,
                 versions=None, ci=False, server_port=DEFAULT_SERVER_PORT,
                 proxy_port=DEFAULT_PROXY_PORT, proxy_user=DEFAULT_PROXY_USER,
                 proxy_password=DEFAULT_PROXY_PASSWORD, log_dir='logs',
                 cert_dir=os.path.join('.livetest', 'tls'),
                 dependency_dir='.venv', server_timeout=DEFAULT_SERVER_TIMEOUT,
                 proxy_timeout=DEFAULT_PROXY_TIMEOUT, python_warnings='default',
                 project_root=None):
        self.root = root
        self.pattern = pattern
        self.tls = tls
        self.versions = list(versions or [])
        self.ci = ci
        self.server_port = server_port
        self.proxy_port = proxy_port
        self.proxy_user = proxy_user
        self.proxy_password = proxy_password
        self.log_dir = log_dir
        self.cert_dir = cert_dir
        self.dependency_dir = dependency_dir
        self.server_timeout = server_timeout
        self.proxy_timeout = proxy_timeout
        self.python_warnings = python_warnings
        self.project_root = project_root or os.getcwd()

    @classmethod
    def from_environ(cls, environ=None, root=None, pattern=None):
        """Build a configuration from environment variables and CLI overrides"""
        if environ is None:
            environ = os.environ
        return cls(
            root=root or environ.get('LIVETEST_ROOT', DEFAULT_ROOT),
            pattern=pattern or DEFAULT_PATTERN,
            tls=is_truthy(environ.get('LIVETEST_TLS')),
            versions=parse_versions(environ.get('LIVETEST_PYTHON_VERSIONS')),
            ci=is_truthy(environ.get('CI')),
            server_port=_int(environ, 'LIVETEST_SERVER_PORT', DEFAULT_SERVER_PORT),
            proxy_port=_int(environ, 'LIVETEST_PROXY_PORT', DEFAULT_PROXY_PORT),
            proxy_user=environ.get('LIVETEST_PROXY_USER', DEFAULT_PROXY_USER),
            proxy_password=environ.get('LIVETEST_PROXY_PASSWORD', DEFAULT_PROXY_PASSWORD),
            log_dir=environ.get('LIVETEST_LOG_DIR', 'logs'),
            cert_dir=environ.get('LIVETEST_CERT_DIR', os.path.join('.livetest', 'tls')),
            dependency_dir=environ.get('LIVETEST_DEPENDENCY_DIR', '.venv'),
            server_timeout=_float(environ, 'LIVETEST_SERVER_TIMEOUT', DEFAULT_SERVER_TIMEOUT),
            proxy_timeout=_float(environ, 'LIVETEST_PROXY_TIMEOUT', DEFAULT_PROXY_TIMEOUT),
            python_warnings=environ.get('LIVETEST_PYTHONWARNINGS', 'default'),
        )

    @property
    def scheme(self):
        return 'https' if self.tls else 'http'

    @property
    def server_log(self):
        return os.path.join(self.log_dir, 'server.log')

    @property
    def proxy_log(self):
        return os.path.join(self.log_dir, 'proxy.log')

    @property
    def key_file(self):
        return os.path.join(self.cert_dir, 'key.pem')

    @property
    def cert_file(self):
        return os.path.join(self.cert_dir, 'cert.pem')
