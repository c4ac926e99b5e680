"""
Error taxonomy for livetest runs.

Every error carries the exit status the harness should terminate with.
"""


class HarnessError(Exception):
    """Base class for failures that end a run with a diagnostic"""

    exit_code = 1

    def __init__(self, message, exit_code=None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class PreconditionError(HarnessError):
    """Raised before any side effect when the run cannot start"""


class EmptySelectionError(PreconditionError):
    """Filters were given but matched no test files"""

    def __init__(self, filters):
        self.filters = list(filters)
        joined = ', '.join(repr(f) for f in self.filters)
        super().__init__(f"No test files matched the given filters: {joined}")


class PortInUseError(PreconditionError):
    """Something is already listening on the live server port"""

    def __init__(self, port):
        self.port = port
        super().__init__(
            f"Port {port} is already in use; another instance is probably running"
        )


class StartupTimeoutError(HarnessError):
    """A required helper server did not accept connections in time"""

    def __init__(self, name, port, timeout):
        self.name = name
        self.port = port
        self.timeout = timeout
        super().__init__(
            f"{name} did not start listening on port {port} within {timeout} seconds"
        )


class ExecutionFailure(HarnessError):
    """The test run exited non-zero; its status becomes the harness status"""

    def __init__(self, returncode, version=None):
        self.returncode = returncode
        self.version = version
        where = f" under Python {version}" if version else ""
        super().__init__(
            f"Test run{where} exited with status {returncode}",
            exit_code=returncode if returncode > 0 else 1,
        )


class WarningPolicyViolation(HarnessError):
    """Warnings were emitted from project-owned source"""

    def __init__(self, records):
        self.records = list(records)
        super().__init__(
            f"{len(self.records)} warning(s) originate from project source; fix them before merging"
        )


class CertificateError(PreconditionError):
    """TLS was requested but the key and certificate could not be created"""
