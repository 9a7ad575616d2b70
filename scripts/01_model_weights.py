from __future__ import annotations

import argparse
import platform
import sys
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ppm_weights.config import (  # noqa: E402
    CRITERION_DEFAULT,
    EXPERIMENT_NAMESPACE,
    MODEL_COL,
    OUTPUTS_DIR,
    SCORES_FILE,
    SUPPORTED_CRITERIA,
    WEIGHT_DECIMALS,
    WEIGHT_SUM_TOLERANCE,
)
from ppm_weights.data.ingest import load_model_scores  # noqa: E402
from ppm_weights.data.validate import assert_required_columns  # noqa: E402
from ppm_weights.reporting.tables import save_table  # noqa: E402
from ppm_weights.selection.weights import InvalidInput, weights_by_comparison  # noqa: E402
from ppm_weights.utils.logging import write_json  # noqa: E402


def package_versions(packages: Iterable[str]) -> Dict[str, Optional[str]]:
    out: Dict[str, Optional[str]] = {}
    for pkg in packages:
        try:
            out[pkg] = metadata.version(pkg)
        except metadata.PackageNotFoundError:
            out[pkg] = None
    return out


def sum_tolerance(n_models: int) -> float:
    # Each weight is rounded to WEIGHT_DECIMALS digits, so the sum can drift by n * half a unit.
    return WEIGHT_SUM_TOLERANCE + n_models * 0.5 * 10 ** (-WEIGHT_DECIMALS)


def check_weight_sums(table: pd.DataFrame, comparison_col: Optional[str]) -> Dict[str, float]:
    if table.empty:
        return {}
    if comparison_col is None:
        groups = [("all", table)]
    else:
        groups = [(str(k), g) for k, g in table.groupby(comparison_col, sort=False, dropna=False)]

    sums = {}
    off = {}
    for key, g in groups:
        total = float(g["weight"].sum())
        sums[key] = total
        if abs(total - 1.0) > sum_tolerance(len(g)):
            off[key] = total
    if off:
        raise SystemExit(f"Model weights do not sum to 1 beyond rounding error: {off}")
    return sums


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Information-criterion weights for competing point-process models."
    )
    parser.add_argument(
        "--scores",
        type=Path,
        default=SCORES_FILE,
        help="CSV of model scores with a 'model' column and one criterion column.",
    )
    parser.add_argument("--criterion", choices=SUPPORTED_CRITERIA, default=CRITERION_DEFAULT)
    parser.add_argument(
        "--comparison-col",
        type=str,
        default=None,
        help="Optional column grouping models into separately weighted comparison sets.",
    )
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Skip comparison sets with empty or non-finite scores instead of aborting.",
    )
    parser.add_argument("--outdir", type=Path, default=OUTPUTS_DIR, help="Output directory (default: outputs/).")
    args = parser.parse_args()

    if not args.scores.exists():
        raise SystemExit(f"Scores file not found: {args.scores}. Export model scores from the fitted models first.")

    df = load_model_scores(args.scores)
    required = [MODEL_COL, args.criterion]
    if args.comparison_col is not None:
        required.append(args.comparison_col)
    try:
        assert_required_columns(df, required)
    except ValueError as exc:
        raise SystemExit(f"{exc} in {args.scores}")

    if df.empty:
        raise SystemExit(f"Scores file has no model rows: {args.scores}")

    # Blank or text cells become NaN and are rejected as non-finite scores.
    df[args.criterion] = pd.to_numeric(df[args.criterion], errors="coerce")

    try:
        table, skipped = weights_by_comparison(
            df,
            criterion=args.criterion,
            model_col=MODEL_COL,
            comparison_col=args.comparison_col,
            skip_invalid=args.skip_invalid,
        )
    except InvalidInput as exc:
        raise SystemExit(f"Invalid model scores: {exc}")

    weight_sums = check_weight_sums(table, args.comparison_col)

    tables_dir = args.outdir / "tables"
    logs_dir = args.outdir / "logs"
    out_table = tables_dir / f"model_weights_{args.criterion}.csv"
    save_table(table, out_table)

    if args.comparison_col is None:
        groups = [("all", table)]
    else:
        groups = [(str(k), g) for k, g in table.groupby(args.comparison_col, sort=False, dropna=False)]

    n_models = {key: int(len(g)) for key, g in groups}
    best = []
    for key, g in groups:
        if g.empty:
            continue
        row = g.loc[g["weight"].idxmax()]
        best.append({"comparison": key, "model": str(row[MODEL_COL]), "weight": float(row["weight"])})

    run_meta = {
        "experiment": EXPERIMENT_NAMESPACE,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "argv": sys.argv,
        "python_version": sys.version,
        "platform": platform.platform(),
        "packages": package_versions(["numpy", "pandas"]),
        "input_scores": str(args.scores),
        "criterion": args.criterion,
        "comparison_col": args.comparison_col,
        "skip_invalid": args.skip_invalid,
        "weight_decimals": WEIGHT_DECIMALS,
        "rounding": "numpy.round (round-half-to-even)",
        "n_models": n_models,
        "weight_sums": weight_sums,
        "best_models": best,
        "skipped_comparisons": skipped,
        "output_table": str(out_table),
    }
    write_json(logs_dir / "model_weights_run_metadata.json", run_meta)

    print(f"Wrote {out_table} ({len(table)} models, {len(skipped)} comparison sets skipped)")


if __name__ == "__main__":
    main()
