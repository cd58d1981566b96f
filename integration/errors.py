class MonteCarloError(RuntimeError):
    """Base class for every failure raised by the estimators and backends."""


class BackendUnavailable(MonteCarloError):
    """No usable compute device (or Triton is not importable)."""


# Alias
DeviceNotFound = BackendUnavailable


class KernelBuildFailure(MonteCarloError):
    """
    The sampling kernel failed to compile.
    The compiler diagnostics are kept verbatim in `build_log`.
    """
    def __init__(self, message, build_log=""):
        super().__init__(message)
        self.build_log = build_log

    def __str__(self):
        base = super().__str__()
        if self.build_log:
            return f"{base}\n--- build log ---\n{self.build_log}"
        return base


class InvalidArgument(MonteCarloError, ValueError):
    pass


class DeadlineExceeded(MonteCarloError, TimeoutError):
    pass
