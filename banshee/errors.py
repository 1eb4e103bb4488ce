"""Error taxonomy for the pacing and personal-best engines.

Structural problems with a track are ``ValueError`` subclasses so the HTTP
boundary can map them to 422 responses alongside every other bad-input error.
"""

from __future__ import annotations


class TrackError(ValueError):
    """Base class for structurally unusable track input."""


class MalformedInputError(TrackError):
    """Input rejected before any computation.

    Raised for out-of-range or non-finite coordinates, timestamps that go
    backwards beyond the configured tolerance, and unknown enum values.
    """


class InsufficientDataError(TrackError):
    """A track has too few points for a distance computation."""

    def __init__(self, n_points: int, required: int = 2) -> None:
        self.n_points = n_points
        self.required = required
        super().__init__(f"Need at least {required} track points, got {n_points}")


class NoActiveSessionError(RuntimeError):
    """A strict session accessor was used while no reference run is loaded."""

    def __init__(self) -> None:
        super().__init__("No active pacing session. Initialise one with a reference run first.")
