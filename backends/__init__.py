import torch

from backends.base import ComputeBackend
from backends.torch_backend import TorchBackend
from backends.triton_backend import TritonBackend
from integration.errors import InvalidArgument

BACKENDS = ("auto", "triton", "torch")


def select_backend(name="auto", device=None, workers=None):
    """
    Builds (but does not open) a backend by name.
    'auto' picks Triton when a CUDA device is present and no non-CUDA device
    was asked for, torch otherwise; it never retries another backend after a
    failure.
    """
    if name not in BACKENDS:
        raise InvalidArgument(f"Unknown backend '{name}', expected one of {BACKENDS}")

    try:
        requested = torch.device(device) if device else None
    except RuntimeError as e:
        raise InvalidArgument(f"Unknown torch device '{device}': {e}") from e

    if name == "auto":
        wants_cuda = requested is None or requested.type == "cuda"
        name = "triton" if wants_cuda and torch.cuda.is_available() else "torch"
        print(f"[Backend] auto -> {name}")

    if name == "triton":
        if requested is not None and requested.type != "cuda":
            raise InvalidArgument(f"Triton backend needs a CUDA device, got '{device}'")
        index = requested.index if requested is not None else None
        return TritonBackend(device_index=index or 0, workers=workers)
    return TorchBackend(device=device or "cpu", workers=workers)
