import torch
import triton
import triton.language as tl

BLOCK_SIZE = 1024

# Per-worker offsets are int32 Philox counters
MAX_SHARE = 2**31 - 1 - BLOCK_SIZE


@triton.jit
def cubic_monte_carlo_kernel(
    output_ptr,
    shares_ptr,
    a, b, c,
    x_min, x_max,
    y_min, y_max,
    seed,
    seed_stride,
    BLOCK_SIZE: tl.constexpr
):
    """
    Hit-or-miss sampling of f(x) = (x - a)(x - b)(x - c), one program per worker.

    Every program walks its own share of points in BLOCK_SIZE strides and
    writes a single signed count to output_ptr[pid]. No atomics: each
    program owns exactly one output slot.
    """
    # 1. Which worker are we, and how many points do we own
    pid = tl.program_id(axis=0)
    n_points = tl.load(shares_ptr + pid)

    # 2. Independent Philox stream per worker (y and x on neighbouring keys)
    rng_seed = seed + pid * seed_stride
    offs = tl.arange(0, BLOCK_SIZE)

    count = tl.zeros([BLOCK_SIZE], dtype=tl.int64)
    for start in range(0, n_points, BLOCK_SIZE):
        idx = start + offs
        mask = idx < n_points

        # 3. Uniform point in the bounding box
        y = y_min + tl.rand(rng_seed, idx) * (y_max - y_min)
        x = x_min + tl.rand(rng_seed + 1, idx) * (x_max - x_min)
        f = (x - a) * (x - b) * (x - c)

        # 4. Signed classification against the curve
        above = (f > 0) & (y > 0) & (y < f)
        below = (f < 0) & (y < 0) & (y > f)
        hit = above.to(tl.int64) - below.to(tl.int64)
        count += tl.where(mask, hit, 0)

    # 5. Reduce in registers, one store per worker
    tl.store(output_ptr + pid, tl.sum(count, axis=0))


def launch_cubic_monte_carlo(shares: torch.Tensor, output: torch.Tensor, domain, roots, seed, seed_stride):
    """
    Frontend wrapper: one program per entry of `shares` (int32, on device).
    Partial counts land in `output` (int64, same length). Asynchronous.
    """
    a, b, c = (int(r) for r in roots)
    grid = (shares.numel(),)

    cubic_monte_carlo_kernel[grid](
        output, shares,
        a, b, c,
        domain.x_min, domain.x_max,
        domain.y_min, domain.y_max,
        seed, seed_stride,
        BLOCK_SIZE=BLOCK_SIZE
    )
    return output
