"""Parse CSV track exports into validated :class:`Track` values.

Expected columns (header row required, order free): ``lat``, ``lon``,
``timestamp_ms`` and optionally ``elevation_m``.  Extra columns are ignored.
"""

from __future__ import annotations

import io

import pandas as pd

from banshee.errors import MalformedInputError
from banshee.track import Track, validate_track

REQUIRED_COLUMNS: list[str] = ["lat", "lon", "timestamp_ms"]


def parse_track_csv(
    source: str | io.IOBase,
    *,
    tolerance_ms: int = 0,
    min_points: int = 2,
) -> Track:
    """Parse and validate a CSV track.

    Parameters
    ----------
    source:
        File path or file-like object containing the CSV data.
    tolerance_ms:
        Backwards timestamp jitter accepted by :func:`validate_track`.
    min_points:
        Minimum number of usable rows.

    Returns
    -------
    The parsed track, with rows missing a critical field dropped.

    Raises
    ------
    MalformedInputError
        If a required column is missing or the rows fail validation.
    InsufficientDataError
        If fewer than *min_points* usable rows remain.
    """
    try:
        df = pd.read_csv(source)  # type: ignore[arg-type]
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        msg = f"Could not read track CSV: {exc}"
        raise MalformedInputError(msg) from exc

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        msg = f"Track CSV is missing required column(s): {', '.join(missing)}"
        raise MalformedInputError(msg)

    for col in [*REQUIRED_COLUMNS, "elevation_m"]:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    df = df.dropna(subset=REQUIRED_COLUMNS).reset_index(drop=True)
    df["timestamp_ms"] = df["timestamp_ms"].round().astype("int64")

    track = Track.from_dataframe(df)
    return validate_track(track, min_points=min_points, tolerance_ms=tolerance_ms)
