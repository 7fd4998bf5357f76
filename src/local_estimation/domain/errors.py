"""Exceptions raised by the estimation core."""


class EstimationError(Exception):
    """Base class for estimation core errors."""


class InvalidCalibrationDataError(EstimationError, ValueError):
    """Raised when an imported calibration snapshot is malformed."""


class DetectionTimeoutError(EstimationError, TimeoutError):
    """Raised when reference detection runs past its deadline."""


class InvalidTransitionError(EstimationError, RuntimeError):
    """Raised when an estimation session step is invoked out of order."""
