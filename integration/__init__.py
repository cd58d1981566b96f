from integration.domain import Domain, Roots, analytic_integral, cubic, expected_estimate, roots_from_id
from integration.errors import (
    BackendUnavailable,
    DeadlineExceeded,
    DeviceNotFound,
    InvalidArgument,
    KernelBuildFailure,
    MonteCarloError,
)
from integration.parallel import parallel_montecarlo, partition
from integration.sequential import montecarlo
