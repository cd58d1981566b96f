import time

import torch

from backends.base import ComputeBackend
from integration.errors import (
    BackendUnavailable, DeadlineExceeded, InvalidArgument, KernelBuildFailure, MonteCarloError
)
from integration.parallel import WORKER_SEED_STRIDE

# How often read_results() checks the completion event while a deadline is set
POLL_INTERVAL = 1e-3


class TritonBackend(ComputeBackend):
    """
    Runs the Triton sampling kernel on a CUDA device, one program per
    streaming multiprocessor.
    """
    name = "triton"

    def __init__(self, device_index=0, workers=None):
        super().__init__(workers=workers)
        self.device_index = device_index
        self._kernels = None
        self._output = None
        self._done = None

    def discover(self):
        if not torch.cuda.is_available():
            raise BackendUnavailable("No CUDA device available for Triton.")
        if self.device_index >= torch.cuda.device_count():
            raise BackendUnavailable(
                f"CUDA device {self.device_index} requested, "
                f"only {torch.cuda.device_count()} present."
            )

        self.device = torch.device("cuda", self.device_index)
        props = torch.cuda.get_device_properties(self.device)
        self.device_name = props.name
        self.compute_units = self._resolve_workers(props.multi_processor_count)
        return self

    def build_program(self):
        """
        Imports and JIT-compiles the kernel with a zero-work launch so that
        compiler errors surface here rather than on the first timed run.

        The warm-up uses the default roots and box and a typical seed. Triton
        specializes integer arguments equal to 1 or divisible by 16, so a run
        whose roots, bounds or seed fall in another class compiles that
        variant lazily on its first launch.
        """
        if self.device is None:
            self.discover()

        try:
            from kernels import cubic_monte_carlo
        except ImportError as e:
            raise BackendUnavailable(f"Triton is not importable: {e}") from e

        from triton.compiler.errors import CompilationError
        from integration.domain import Domain

        shares = torch.zeros(1, dtype=torch.int32, device=self.device)
        output = torch.empty(1, dtype=torch.int64, device=self.device)
        warmup_roots = (0, 2, 6)
        warmup_domain = Domain.from_roots(warmup_roots)
        try:
            with torch.cuda.device(self.device):
                cubic_monte_carlo.launch_cubic_monte_carlo(
                    shares, output, warmup_domain, warmup_roots, seed=12345, seed_stride=WORKER_SEED_STRIDE
                )
                torch.cuda.synchronize(self.device)
        except CompilationError as e:
            raise KernelBuildFailure("Triton failed to compile the sampling kernel.", build_log=str(e)) from e
        except RuntimeError as e:
            raise KernelBuildFailure("Triton failed to load the sampling kernel.", build_log=str(e)) from e

        self._kernels = cubic_monte_carlo
        self.built = True
        return self

    def dispatch(self, shares, domain, roots, seed):
        self._require_built()
        if max(shares) > self._kernels.MAX_SHARE:
            raise InvalidArgument(
                f"Per-worker share {max(shares)} exceeds {self._kernels.MAX_SHARE}; use more workers."
            )

        shares_t = torch.tensor(shares, dtype=torch.int32, device=self.device)
        self._output = torch.zeros(len(shares), dtype=torch.int64, device=self.device)
        # Triton launches on the current device; record the event on the same stream
        with torch.cuda.device(self.device):
            self._kernels.launch_cubic_monte_carlo(
                shares_t, self._output, domain, roots, seed=seed, seed_stride=WORKER_SEED_STRIDE
            )
            self._done = torch.cuda.Event()
            self._done.record()

    def read_results(self, timeout=None):
        if self._output is None:
            raise MonteCarloError("read_results() called with no batch in flight.")

        if timeout is None:
            self._done.synchronize()
        else:
            deadline = time.monotonic() + timeout
            while not self._done.query():
                if time.monotonic() > deadline:
                    raise DeadlineExceeded(f"Triton batch did not finish within {timeout}s.")
                time.sleep(POLL_INTERVAL)

        partial_counts = self._output.cpu().tolist()
        self._output = None
        self._done = None
        return partial_counts

    def close(self):
        self._output = None
        self._done = None
        self._kernels = None
        if self.device is not None:
            torch.cuda.empty_cache()
        super().close()
