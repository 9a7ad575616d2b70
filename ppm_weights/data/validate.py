from typing import Iterable


def assert_required_columns(df, required: Iterable[str]) -> None:
    """Fail if the scores table lacks any of the `required` columns."""

    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Scores table is missing columns: {missing}; found {df.columns.astype(str).tolist()}")
