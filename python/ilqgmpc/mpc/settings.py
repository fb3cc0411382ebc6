"""MPC wrapper settings.

YAML layout (all keys optional):

    mpc:
      state_forward_integration: true
      post_truncation: true
      measure_delay: true
      delay_measurement_multiplier: 1.0
      mpc_mode: FIXED_FINAL_TIME
      cold_start: false
      additional_delay_us: 0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import ConfigurationError
from ..utils.config import check_keys, load_yaml_section
from ..utils.validation import validate_non_negative


class MpcMode(Enum):
    """
    Time-horizon strategies.

    Attributes:
        FIXED_FINAL_TIME: The final time stays fixed; the horizon shrinks
            every cycle until it is exhausted
        FIXED_FINAL_TIME_WITH_MIN_TIME_HORIZON: As FIXED_FINAL_TIME, but the
            horizon never drops below min_time_horizon
        RECEDING_HORIZON: Constant horizon length shifted with time
    """
    FIXED_FINAL_TIME = "fixed_final_time"
    FIXED_FINAL_TIME_WITH_MIN_TIME_HORIZON = "fixed_final_time_with_min_time_horizon"
    RECEDING_HORIZON = "receding_horizon"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "MpcMode":
        """Accept an MpcMode, its value or its name (case insensitive)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        for mode in cls:
            if key.lower() in (mode.value, mode.name.lower()):
                return mode
        raise ConfigurationError(f"unknown mpc_mode '{value}'")


@dataclass(frozen=True)
class MpcSettings:
    """Configuration parameters for the MPC wrapper.

    Delays are given in microseconds.

    Attributes:
        state_forward_integration: Propagate the measured state over the
            expected delay with the policy currently executed
        post_truncation: Drop the leading policy steps already in the past
            when the solve returns
        measure_delay: Estimate the delay from the previous solve latency;
            otherwise use fixed_delay_us
        delay_measurement_multiplier: Scale applied to measured latencies
        mpc_mode: Time-horizon strategy
        cold_start: Re-seed every solve from the user initial guess instead
            of the previous solution
        additional_delay_us: Constant delay added to every estimate
        fixed_delay_us: Assumed latency when measure_delay is False
        min_time_horizon: Horizon floor for
            FIXED_FINAL_TIME_WITH_MIN_TIME_HORIZON (s)
    """
    state_forward_integration: bool = True
    post_truncation: bool = True
    measure_delay: bool = True
    delay_measurement_multiplier: float = 1.0
    mpc_mode: MpcMode = MpcMode.FIXED_FINAL_TIME
    cold_start: bool = False
    additional_delay_us: float = 0.0
    fixed_delay_us: float = 0.0
    min_time_horizon: float = 0.0

    def __post_init__(self) -> None:
        """Validate parameters satisfy constraints."""
        if not isinstance(self.mpc_mode, MpcMode):
            object.__setattr__(self, "mpc_mode", MpcMode.parse(self.mpc_mode))
        validate_non_negative(self.delay_measurement_multiplier, "delay_measurement_multiplier")
        validate_non_negative(self.additional_delay_us, "additional_delay_us")
        validate_non_negative(self.fixed_delay_us, "fixed_delay_us")
        validate_non_negative(self.min_time_horizon, "min_time_horizon")

    @classmethod
    def from_yaml(cls, yaml_path: str, section: Optional[str] = None) -> "MpcSettings":
        """Load settings from a YAML file.

        Args:
            yaml_path: Path to YAML file
            section: Optional top-level key holding the MPC settings

        Returns:
            MpcSettings instance

        Raises:
            FileNotFoundError: If YAML file does not exist
            ConfigurationError: Unknown keys or unknown mpc_mode
            InvalidInputError: If a value is out of range
        """
        config = load_yaml_section(yaml_path, section)
        check_keys(cls, config)
        return cls(**config)

    @property
    def additional_delay_s(self) -> float:
        return self.additional_delay_us * 1e-6

    @property
    def fixed_delay_s(self) -> float:
        return self.fixed_delay_us * 1e-6
