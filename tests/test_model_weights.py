import math

import numpy as np
import pandas as pd
import pytest

from ppm_weights.selection.weights import (
    InvalidInput,
    compute_weights,
    model_selection_table,
    relative_likelihoods,
    score_deltas,
    weights_by_comparison,
)


def test_weights_sum_to_one_and_nonnegative():
    scores = [231.4, 228.9, 240.2, 229.0, 1000.0]
    w = compute_weights(scores)
    assert len(w) == len(scores)
    assert abs(float(w.sum()) - 1.0) <= 1e-6
    assert (w >= 0).all()


def test_equal_scores_split_evenly():
    assert compute_weights([10, 10, 10]).tolist() == [0.3333333, 0.3333333, 0.3333333]


def test_single_dominant_model():
    scores = [100, 102, 110]
    assert score_deltas(scores).tolist() == [0.0, 2.0, 10.0]
    assert relative_likelihoods(scores) == pytest.approx([1.0, math.exp(-1), math.exp(-5)])

    w = compute_weights(scores)
    assert w.tolist() == pytest.approx([0.7274752, 0.2676232, 0.0049017], abs=2e-7)
    assert abs(float(w.sum()) - 1.0) <= 1e-6


def test_order_preserved_for_unsorted_input():
    w = compute_weights([110, 100, 102])
    assert w.tolist() == compute_weights([100, 102, 110])[[2, 0, 1]].tolist()
    assert int(np.argmax(w)) == 1


def test_single_model_gets_full_weight():
    assert compute_weights([5]).tolist() == [1.0]


def test_rounded_to_seven_digits():
    w = compute_weights([0.0, 0.7, 3.1, 8.8])
    assert w.tolist() == np.round(w, 7).tolist()


def test_large_deltas_do_not_produce_nan():
    w = compute_weights([0.0, 5000.0])
    assert w.tolist() == [1.0, 0.0]


def test_accepts_series_and_tuple():
    s = pd.Series([3.0, 1.0], index=["a", "b"])
    assert compute_weights(s).tolist() == compute_weights((3.0, 1.0)).tolist()


def test_repeated_calls_are_bit_identical():
    scores = [412.7, 409.3, 415.0]
    a = compute_weights(scores)
    b = compute_weights(scores)
    assert a.tobytes() == b.tobytes()


def test_does_not_mutate_input():
    scores = np.array([3.0, 1.0, 2.0])
    compute_weights(scores)
    assert scores.tolist() == [3.0, 1.0, 2.0]


def test_empty_scores_rejected():
    with pytest.raises(InvalidInput):
        compute_weights([])


@pytest.mark.parametrize("bad", [[1, float("nan")], [1, float("inf")], [float("-inf"), 2]])
def test_non_finite_scores_rejected(bad):
    with pytest.raises(InvalidInput, match="finite"):
        compute_weights(bad)


def test_non_numeric_and_nested_scores_rejected():
    with pytest.raises(InvalidInput):
        compute_weights(["a", "b"])
    with pytest.raises(InvalidInput):
        compute_weights([[1.0, 2.0], [3.0, 4.0]])


def test_invalid_input_is_value_error():
    assert issubclass(InvalidInput, ValueError)


def test_model_selection_table_default_labels():
    table = model_selection_table([100, 102, 110])
    assert table.columns.tolist() == ["model", "bic", "delta", "relative_likelihood", "weight"]
    assert table["model"].tolist() == ["model0", "model1", "model2"]
    assert table["delta"].tolist() == [0.0, 2.0, 10.0]
    assert table["relative_likelihood"].tolist() == [1.0, 0.3678794, 0.0067379]
    assert table["weight"].tolist() == compute_weights([100, 102, 110]).tolist()


def test_model_selection_table_from_series():
    s = pd.Series({"elevation": 88.0, "slope+water": 85.5, "null": 97.1})
    table = model_selection_table(s, criterion="aic")
    assert table["model"].tolist() == ["elevation", "slope+water", "null"]
    assert table["aic"].tolist() == [88.0, 85.5, 97.1]
    assert table.loc[table["weight"].idxmax(), "model"] == "slope+water"


def test_model_selection_table_label_errors():
    with pytest.raises(InvalidInput, match="labels"):
        model_selection_table([1.0, 2.0], ["only_one"])
    with pytest.raises(InvalidInput, match="Duplicate"):
        model_selection_table([1.0, 2.0], ["m", "m"])


def _grouped_scores() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "period": ["late", "late", "early", "early", "early"],
            "model": ["model0", "model1", "model0", "model1", "model2"],
            "bic": [50.0, 50.0, 100.0, 102.0, 110.0],
        }
    )


def test_weights_by_comparison_groups_independently():
    table, skipped = weights_by_comparison(_grouped_scores(), criterion="bic", comparison_col="period")
    assert skipped == {}
    assert table.columns.tolist()[:2] == ["period", "model"]
    assert table["period"].tolist() == ["late", "late", "early", "early", "early"]
    late = table.loc[table["period"] == "late", "weight"].tolist()
    early = table.loc[table["period"] == "early", "weight"].tolist()
    assert late == [0.5, 0.5]
    assert early == compute_weights([100, 102, 110]).tolist()


def test_weights_by_comparison_without_groups():
    df = _grouped_scores().drop(columns="period")
    df["model"] = [f"model{i}" for i in range(len(df))]
    table, skipped = weights_by_comparison(df, criterion="bic")
    assert skipped == {}
    assert table.columns.tolist() == ["model", "bic", "delta", "relative_likelihood", "weight"]
    assert table["model"].tolist() == ["model0", "model1", "model2", "model3", "model4"]
    assert table["weight"].tolist()[:2] == [0.5, 0.5]
    assert abs(float(table["weight"].sum()) - 1.0) <= 1e-6


def test_weights_by_comparison_duplicate_labels_without_groups():
    df = _grouped_scores().drop(columns="period")
    with pytest.raises(InvalidInput, match="Duplicate"):
        weights_by_comparison(df, criterion="bic")


def test_weights_by_comparison_invalid_set():
    df = _grouped_scores()
    df.loc[0, "bic"] = np.nan

    with pytest.raises(InvalidInput, match="late"):
        weights_by_comparison(df, criterion="bic", comparison_col="period")

    table, skipped = weights_by_comparison(df, criterion="bic", comparison_col="period", skip_invalid=True)
    assert list(skipped) == ["late"]
    assert table["period"].unique().tolist() == ["early"]
