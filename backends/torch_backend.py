import threading
from concurrent.futures import ThreadPoolExecutor, wait

import torch

from backends.base import ComputeBackend
from integration.domain import Domain, cubic
from integration.errors import BackendUnavailable, DeadlineExceeded, KernelBuildFailure, MonteCarloError
from integration.parallel import WORKER_SEED_STRIDE

CHUNK_SIZE = 1 << 18


def sample_worker(n_points, domain, roots, seed, device, chunk_size=CHUNK_SIZE, cancel=None):
    """
    One worker's share of the hit-or-miss estimate, as a signed count.
    Owns its own generator; reads only its arguments.
    """
    gen = torch.Generator(device=device)
    gen.manual_seed(seed)
    # MPS has no float64
    dtype = torch.float32 if torch.device(device).type == "mps" else torch.float64

    count = 0
    remaining = n_points
    while remaining > 0:
        if cancel is not None and cancel.is_set():
            break
        n = min(chunk_size, remaining)
        y = domain.y_min + torch.rand(n, generator=gen, device=device, dtype=dtype) * domain.height
        x = domain.x_min + torch.rand(n, generator=gen, device=device, dtype=dtype) * domain.width
        f = cubic(x, roots)

        above = (f > 0) & (y > 0) & (y < f)
        below = (f < 0) & (y < 0) & (y > f)
        count += int(above.sum().item()) - int(below.sum().item())
        remaining -= n

    return count


class TorchBackend(ComputeBackend):
    """
    Same per-worker algorithm as the Triton kernel, written with torch ops and
    fanned out over a thread pool. Works on CPU, so the parallel path can run
    without a GPU.
    """
    name = "torch"

    def __init__(self, device="cpu", workers=None, chunk_size=CHUNK_SIZE):
        super().__init__(workers=workers)
        self.requested_device = device
        self.chunk_size = chunk_size
        self._pool = None
        self._futures = None
        self._cancel = None

    def discover(self):
        try:
            device = torch.device(self.requested_device)
        except RuntimeError as e:
            raise BackendUnavailable(f"Unknown torch device '{self.requested_device}': {e}") from e

        if device.type == "cuda":
            if not torch.cuda.is_available():
                raise BackendUnavailable("No CUDA device available for torch.")
            props = torch.cuda.get_device_properties(device)
            self.device_name = props.name
            reported = props.multi_processor_count
        elif device.type == "mps":
            if not torch.backends.mps.is_available():
                raise BackendUnavailable("Apple Metal (MPS) is not available.")
            self.device_name = "Apple MPS"
            reported = torch.get_num_threads()
        else:
            self.device_name = f"CPU ({torch.get_num_threads()} threads)"
            reported = torch.get_num_threads()

        self.device = device
        self.compute_units = self._resolve_workers(reported)
        return self

    def build_program(self):
        """Smoke-runs the worker on a handful of points to validate the device."""
        if self.device is None:
            self.discover()

        try:
            sample_worker(16, Domain(-1, 1, -1, 1), (0, 0, 0), seed=0, device=self.device)
        except RuntimeError as e:
            raise KernelBuildFailure(
                f"torch sampling worker failed on {self.device}.", build_log=str(e)
            ) from e

        self._pool = ThreadPoolExecutor(max_workers=self.compute_units, thread_name_prefix="mc-worker")
        self.built = True
        return self

    def dispatch(self, shares, domain, roots, seed):
        self._require_built()
        # One stop flag per batch; a batch replaced before read_results() is stopped
        if self._cancel is not None:
            self._cancel.set()
        self._cancel = threading.Event()
        self._futures = [
            self._pool.submit(
                sample_worker, share, domain, roots,
                seed + i * WORKER_SEED_STRIDE, self.device, self.chunk_size, self._cancel
            )
            for i, share in enumerate(shares)
        ]

    def read_results(self, timeout=None):
        if self._futures is None:
            raise MonteCarloError("read_results() called with no batch in flight.")

        futures, self._futures = self._futures, None
        cancel, self._cancel = self._cancel, None
        done, pending = wait(futures, timeout=timeout)
        if pending:
            cancel.set()
            for future in pending:
                future.cancel()
            raise DeadlineExceeded(
                f"{len(pending)} of {len(futures)} workers did not finish within {timeout}s."
            )

        # Worker exceptions propagate from result()
        return [future.result() for future in futures]

    def close(self):
        if self._cancel is not None:
            self._cancel.set()
            self._cancel = None
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None
        self._futures = None
        super().close()
