from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd


def load_table(source: str, **csv_kwargs: Any) -> pd.DataFrame:
    """Load a CSV from a local path or URL with every column kept as text.

    Parameters
    ----------
    source:
        Filesystem path or ``http(s)`` URL understood by :func:`pandas.read_csv`.
    csv_kwargs:
        Additional keyword arguments forwarded to :func:`pandas.read_csv`.
    """

    csv_kwargs.setdefault("dtype", str)
    csv_kwargs.setdefault("keep_default_na", False)
    frame = pd.read_csv(source, **csv_kwargs)
    frame.columns = [str(column).strip() for column in frame.columns]
    return frame


def frame_to_records(frame: pd.DataFrame) -> List[Dict[str, str]]:
    """Return the rows as plain ``{column: value}`` dicts with trimmed values."""

    trimmed = frame.apply(lambda column: column.astype(str).str.strip())
    return trimmed.to_dict(orient="records")
