from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
TABLES_DIR = OUTPUTS_DIR / "tables"
LOGS_DIR = OUTPUTS_DIR / "logs"

# Information-criterion scores exported from the point-process model fits.
SCORES_FILE = RAW_DIR / "model_scores.csv"

# Experiment identifier (used in outputs/ metadata)
EXPERIMENT_NAMESPACE = "ppm_model_weights_v1"

# Scores table layout
MODEL_COL = "model"
CRITERION_DEFAULT = "bic"
SUPPORTED_CRITERIA = ["bic", "aic", "aicc"]

# Default labels for unnamed models: model0, model1, model2, ...
MODEL_LABEL_PREFIX = "model"

# Reporting precision for delta / relative likelihood / weight columns.
WEIGHT_DECIMALS = 7
WEIGHT_SUM_TOLERANCE = 1e-6
