"""Event generation exceptions."""


class GenerationError(RuntimeError):
    """Base class for failures of a single event generation attempt."""


class KinematicSelectionError(GenerationError):
    """No kinematics accepted within the iteration cap.

    Recoverable for the caller: the attempt is abandoned and a fresh
    interaction may be drawn.

    Attributes:
        iterations: Number of attempts made.
    """

    def __init__(self, message: str, iterations: int = 0) -> None:
        super().__init__(message)
        self.iterations = iterations


class ToleranceViolationError(GenerationError):
    """A sampled cross section exceeded the rejection bound beyond tolerance.

    Attributes:
        xsec: Sampled differential cross section.
        xsec_max: Bound used by the rejection method.
        deviation_pct: Symmetric fractional excess [%].
    """

    def __init__(self, xsec: float, xsec_max: float, deviation_pct: float) -> None:
        super().__init__(
            f"xsec = {xsec:.6g} exceeds max xsec = {xsec_max:.6g} "
            f"(deviation {deviation_pct:.3g}%)"
        )
        self.xsec = xsec
        self.xsec_max = xsec_max
        self.deviation_pct = deviation_pct


class InvalidInitialStateError(GenerationError):
    """The interaction cannot produce a QE event (no hit nucleon, bad remnant)."""
