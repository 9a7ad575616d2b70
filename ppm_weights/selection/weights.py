from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ppm_weights.config import MODEL_COL, MODEL_LABEL_PREFIX, WEIGHT_DECIMALS


class InvalidInput(ValueError):
    """Raised when a score series cannot be turned into model weights."""


def _as_score_array(scores) -> np.ndarray:
    try:
        arr = np.asarray(scores, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Scores must be numeric; got {scores!r}.") from exc

    if arr.ndim != 1:
        raise InvalidInput(f"Scores must be a one-dimensional sequence; got shape {arr.shape}.")
    if arr.size == 0:
        raise InvalidInput("Scores must contain at least one model.")

    bad = np.where(~np.isfinite(arr))[0]
    if bad.size > 0:
        raise InvalidInput(
            "Scores must be finite. "
            f"Non-finite values at positions {bad.tolist()}: {arr[bad].tolist()}."
        )
    return arr


def score_deltas(scores) -> np.ndarray:
    """Return score - min(score); the best model gets delta 0."""

    s = _as_score_array(scores)
    return s - s.min()


def relative_likelihoods(scores) -> np.ndarray:
    """Return exp(-0.5 * delta) for each model (unnormalized)."""

    return np.exp(-0.5 * score_deltas(scores))


def compute_weights(scores, decimals: int = WEIGHT_DECIMALS) -> np.ndarray:
    """Convert information-criterion scores (lower = better) to model weights.

    delta_i = s_i - min(s); L_i = exp(-delta_i / 2); w_i = L_i / sum(L).

    Weights are rounded with numpy.round (round-half-to-even) to `decimals`
    digits. Output order matches input order.

    Raises InvalidInput for empty or non-finite input; validation happens
    before any arithmetic.
    """

    lik = relative_likelihoods(scores)
    # The minimum contributes exp(0) == 1, so the denominator is always >= 1.
    w = lik / lik.sum()
    return np.round(w, decimals)


def _default_labels(n: int) -> List[str]:
    return [f"{MODEL_LABEL_PREFIX}{i}" for i in range(n)]


def model_selection_table(
    scores,
    models: Optional[Sequence[str]] = None,
    *,
    criterion: str = "bic",
    decimals: int = WEIGHT_DECIMALS,
) -> pd.DataFrame:
    """Return the model-selection table for one comparison set.

    Columns: model, <criterion>, delta, relative_likelihood, weight.
    A pandas Series supplies its own index as model labels unless `models`
    is given.
    """

    if models is None and isinstance(scores, pd.Series):
        models = [str(m) for m in scores.index.tolist()]
        scores = scores.to_numpy()

    s = _as_score_array(scores)
    labels = list(models) if models is not None else _default_labels(s.size)

    if len(labels) != s.size:
        raise InvalidInput(f"Got {len(labels)} model labels for {s.size} scores.")
    if len(set(labels)) != len(labels):
        dupes = sorted({m for m in labels if labels.count(m) > 1}, key=str)
        raise InvalidInput(f"Duplicate model labels: {dupes}")

    delta = s - s.min()
    lik = np.exp(-0.5 * delta)
    return pd.DataFrame(
        {
            MODEL_COL: labels,
            criterion: s,
            "delta": np.round(delta, decimals),
            "relative_likelihood": np.round(lik, decimals),
            "weight": compute_weights(s, decimals=decimals),
        }
    )


def weights_by_comparison(
    df: pd.DataFrame,
    *,
    criterion: str,
    model_col: str = MODEL_COL,
    comparison_col: Optional[str] = None,
    skip_invalid: bool = False,
    decimals: int = WEIGHT_DECIMALS,
) -> Tuple[pd.DataFrame, Dict[str, str]]:
    """Compute model weights separately for each comparison set in `df`.

    Returns (table, skipped) where skipped maps comparison value -> reason.
    Comparison sets keep first-appearance order; models keep row order.
    Without a comparison column the whole table is one set.
    """

    if comparison_col is None:
        table = model_selection_table(
            df[criterion].to_numpy(),
            df[model_col].astype(str).tolist(),
            criterion=criterion,
            decimals=decimals,
        )
        return table, {}

    parts = []
    skipped: Dict[str, str] = {}
    for key, gdf in df.groupby(comparison_col, sort=False, dropna=False):
        try:
            part = model_selection_table(
                gdf[criterion].to_numpy(),
                gdf[model_col].astype(str).tolist(),
                criterion=criterion,
                decimals=decimals,
            )
        except InvalidInput as exc:
            if not skip_invalid:
                raise InvalidInput(f"Comparison set {comparison_col}={key!r}: {exc}") from exc
            skipped[str(key)] = str(exc)
            continue
        part.insert(0, comparison_col, key)
        parts.append(part)

    if not parts:
        cols = [comparison_col, model_col, criterion, "delta", "relative_likelihood", "weight"]
        return pd.DataFrame(columns=cols), skipped
    return pd.concat(parts, ignore_index=True), skipped
