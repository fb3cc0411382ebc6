"""iLQG solver settings.

Settings are immutable once built. Use dataclasses.replace() or
ILQG.configure() to change them between solves.

YAML layout (all keys optional):

    ilqg:
      dt: 0.001
      dt_sim: 0.001
      max_iterations: 100
      min_cost_improvement: 1.0e-5
      integrator: euler
      discretization: euler
      line_search:
        active: true
        max_iterations: 10
        alpha_0: 1.0
        n_alpha: 0.5
"""

from dataclasses import dataclass, field
from typing import Optional

from ..core.integration import DISCRETIZATIONS, INTEGRATORS, substeps
from ..exceptions import ConfigurationError, InvalidInputError
from ..utils.config import check_keys, load_yaml_section
from ..utils.validation import (
    validate_non_negative,
    validate_positive,
    validate_positive_integer,
)


@dataclass(frozen=True)
class LineSearchSettings:
    """Backtracking line search over alpha_0 * n_alpha**i.

    Attributes:
        active: If False, the full step alpha_0 is always accepted
        max_iterations: Number of step sizes tried per iteration
        alpha_0: Initial step size
        n_alpha: Contraction factor in (0, 1)
    """
    active: bool = True
    max_iterations: int = 10
    alpha_0: float = 1.0
    n_alpha: float = 0.5

    def __post_init__(self) -> None:
        validate_positive_integer(self.max_iterations, "line_search.max_iterations")
        validate_positive(self.alpha_0, "line_search.alpha_0")
        if not 0.0 < self.n_alpha < 1.0:
            raise InvalidInputError(f"line_search.n_alpha must be in (0, 1), got {self.n_alpha}")

    def alphas(self):
        """Step sizes in the order they are tried."""
        if not self.active:
            return [self.alpha_0]
        return [self.alpha_0 * self.n_alpha ** i for i in range(self.max_iterations)]


@dataclass(frozen=True)
class ILQGSettings:
    """Configuration parameters for the iLQG solver.

    Attributes:
        dt: Control step of the optimization grid (s)
        dt_sim: Integration step used inside one control step (s)
        max_iterations: Maximum number of iLQG iterations
        min_cost_improvement: Relative cost decrease below which the solver
            reports convergence
        integrator: 'euler' or 'rk4' for continuous systems
        discretization: 'euler', 'zoh' or 'tustin' for continuous Jacobians
        regularization_init: Initial Levenberg-Marquardt regularization
        regularization_min: Regularization floor (values below snap to 0)
        regularization_max: Regularization ceiling; exceeding it aborts
        regularization_factor: Base growth factor of the schedule
        line_search: Line search settings
        line_search_failure_is_convergence: Treat "no improving step" as
            convergence rather than divergence
        verbose: Log iteration progress at INFO instead of DEBUG
    """
    dt: float = 0.001
    dt_sim: float = 0.001
    max_iterations: int = 100
    min_cost_improvement: float = 1e-5
    integrator: str = "euler"
    discretization: str = "euler"

    regularization_init: float = 1e-6
    regularization_min: float = 1e-8
    regularization_max: float = 1e10
    regularization_factor: float = 2.0

    line_search: LineSearchSettings = field(default_factory=LineSearchSettings)
    line_search_failure_is_convergence: bool = True
    verbose: bool = False

    def __post_init__(self) -> None:
        """Validate parameters satisfy constraints."""
        validate_positive(self.dt, "dt")
        validate_positive(self.dt_sim, "dt_sim")
        if self.dt_sim > self.dt:
            raise InvalidInputError(f"dt_sim ({self.dt_sim}) must not exceed dt ({self.dt})")
        validate_positive_integer(self.max_iterations, "max_iterations")
        validate_non_negative(self.min_cost_improvement, "min_cost_improvement")

        if self.integrator not in INTEGRATORS:
            raise InvalidInputError(
                f"integrator must be one of {INTEGRATORS}, got '{self.integrator}'"
            )
        if self.discretization not in DISCRETIZATIONS:
            raise InvalidInputError(
                f"discretization must be one of {DISCRETIZATIONS}, got '{self.discretization}'"
            )

        validate_non_negative(self.regularization_init, "regularization_init")
        validate_positive(self.regularization_min, "regularization_min")
        validate_positive(self.regularization_max, "regularization_max")
        if self.regularization_min >= self.regularization_max:
            raise InvalidInputError("regularization_min must be below regularization_max")
        if not self.regularization_factor > 1.0:
            raise InvalidInputError(
                f"regularization_factor must exceed 1, got {self.regularization_factor}"
            )
        if not isinstance(self.line_search, LineSearchSettings):
            raise InvalidInputError("line_search must be a LineSearchSettings instance")

    @classmethod
    def from_yaml(cls, yaml_path: str, section: Optional[str] = None) -> "ILQGSettings":
        """Load settings from a YAML file.

        Args:
            yaml_path: Path to YAML file
            section: Optional top-level key holding the solver settings

        Returns:
            ILQGSettings instance

        Raises:
            FileNotFoundError: If YAML file does not exist
            ConfigurationError: Unknown keys or malformed sections
            InvalidInputError: If a value is out of range
        """
        config = dict(load_yaml_section(yaml_path, section))
        check_keys(cls, config)

        line_search = config.pop("line_search", None)
        if line_search is not None:
            if not isinstance(line_search, dict):
                raise ConfigurationError("line_search must be a mapping")
            check_keys(LineSearchSettings, line_search)
            config["line_search"] = LineSearchSettings(**line_search)

        return cls(**config)

    @property
    def substeps(self) -> int:
        """Integration sub-steps per control step."""
        return substeps(self.dt, self.dt_sim)

    def horizon_steps(self, time_horizon: float) -> int:
        """Number of control steps round(time_horizon / dt)."""
        return int(round(time_horizon / self.dt))
