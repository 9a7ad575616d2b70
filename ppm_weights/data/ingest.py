from pathlib import Path
import pandas as pd


def load_model_scores(path: Path) -> pd.DataFrame:
    return pd.read_csv(path)
