from integration.errors import MonteCarloError


class ComputeBackend:
    """
    Owns the device, the compiled sampling program and any in-flight batch.

    Lifecycle: discover() -> build_program() -> (dispatch() -> read_results())* -> close().
    Used as a context manager, the first two happen on enter and close() on exit.
    """
    name = "base"

    def __init__(self, workers=None):
        self.requested_workers = workers
        self.device = None
        self.device_name = None
        self.compute_units = None
        self.built = False

    def discover(self):
        raise NotImplementedError

    def build_program(self):
        raise NotImplementedError

    def dispatch(self, shares, domain, roots, seed):
        raise NotImplementedError

    def read_results(self, timeout=None):
        raise NotImplementedError

    def close(self):
        self.built = False

    def _resolve_workers(self, reported):
        """Explicit override wins; the hardware count otherwise, never below 1."""
        if self.requested_workers is not None:
            return max(int(self.requested_workers), 1)
        return max(int(reported or 1), 1)

    def _require_built(self):
        if not self.built:
            raise MonteCarloError(f"{self.name} backend: build_program() must run before dispatch()")

    def __enter__(self):
        self.discover()
        self.build_program()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return f"{type(self).__name__}(device={self.device_name!r}, compute_units={self.compute_units})"
