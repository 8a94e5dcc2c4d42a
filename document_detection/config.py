"""
Scanner configuration.

Defaults match the tuned values of the detection pipeline. Hosts can
override any of them through DOCSCAN_* environment variables (a .env file
is loaded by the server entry point).
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional, Tuple

from .errors import ConfigurationError


@dataclass(frozen=True)
class ScoringThresholds:
    """Acceptance bounds for a candidate quadrilateral (all inclusive)."""

    min_area: float
    max_area: float
    min_aspect: float
    max_aspect: float
    preferred_band: Tuple[float, float] = (0.4, 0.7)
    preferred_bonus: float = 0.3


STRICT_THRESHOLDS = ScoringThresholds(min_area=0.25, max_area=0.9, min_aspect=0.5, max_aspect=2.0)
RELAXED_THRESHOLDS = ScoringThresholds(min_area=0.20, max_area=0.9, min_aspect=0.45, max_aspect=2.2)


@dataclass(frozen=True)
class ScannerConfig:
    # Edge strategy
    canny_low: int = 50
    canny_high: int = 150
    dilate_iterations: int = 2

    # Threshold strategy
    close_iterations: int = 2

    # Quadrilateral approximation, as fractions of the contour perimeter
    approx_tolerances: Tuple[float, ...] = (0.02, 0.04, 0.06, 0.08, 0.10)

    # Scoring
    strict: ScoringThresholds = STRICT_THRESHOLDS
    relaxed: ScoringThresholds = RELAXED_THRESHOLDS
    preferred_bonus: float = 0.3
    stage2_min_area_ratio: float = 0.2

    # Resource policy
    detection_max_dimension: int = 1920
    encode_max_dimension: int = 2200
    max_input_pixels: int = 100_000_000
    uniform_std_threshold: float = 2.0

    # Live framing guidance
    framing_margin: int = 30
    framing_min_ratio: float = 0.3
    framing_max_ratio: float = 0.8

    # Rectification
    target_width: int = 800
    quality: float = 0.95

    def __post_init__(self):
        if self.canny_low < 0 or self.canny_high <= self.canny_low:
            raise ConfigurationError(f"Invalid Canny thresholds: {self.canny_low}/{self.canny_high}")
        if not self.approx_tolerances:
            raise ConfigurationError("approx_tolerances must not be empty")
        if self.detection_max_dimension <= 0 or self.encode_max_dimension <= 0:
            raise ConfigurationError("Max dimensions must be positive")
        if self.target_width <= 0:
            raise ConfigurationError(f"target_width must be positive, got {self.target_width}")
        if not 0 < self.quality <= 1:
            raise ConfigurationError(f"quality must be in (0, 1], got {self.quality}")

    def strict_thresholds(self) -> ScoringThresholds:
        return replace(self.strict, preferred_bonus=self.preferred_bonus)

    def relaxed_thresholds(self) -> ScoringThresholds:
        return replace(self.relaxed, preferred_bonus=self.preferred_bonus)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScannerConfig":
        """
        Build a config from DOCSCAN_<FIELD> variables, e.g. DOCSCAN_CANNY_LOW=40.

        Tuple and threshold fields are not configurable from the environment.
        """
        environ = os.environ if environ is None else environ
        overrides = {}

        for f in fields(cls):
            if f.type not in (int, float, "int", "float"):
                continue
            raw = environ.get(f"DOCSCAN_{f.name.upper()}")
            if raw is None or raw == "":
                continue
            caster = int if f.type in (int, "int") else float
            try:
                overrides[f.name] = caster(raw)
            except ValueError as e:
                raise ConfigurationError(f"DOCSCAN_{f.name.upper()}={raw!r} is not a valid {caster.__name__}") from e

        return cls(**overrides)


DEFAULT_CONFIG = ScannerConfig()
