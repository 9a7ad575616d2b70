import argparse
import platform
import sys

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ppm_weights.config import SCORES_FILE, OUTPUTS_DIR
from ppm_weights.utils.logging import write_json


def main() -> None:
    parser = argparse.ArgumentParser(description="Record interpreter, platform and input availability.")
    parser.add_argument("--outdir", type=Path, default=OUTPUTS_DIR, help="Output directory (default: outputs/).")
    args = parser.parse_args()

    info = {
        "python_version": sys.version,
        "platform": platform.platform(),
        "scores_file": str(SCORES_FILE),
        "scores_file_exists": SCORES_FILE.exists(),
    }
    out_path = args.outdir / "logs" / "environment_check.json"
    write_json(out_path, info)
    print(f"Wrote {out_path}")


if __name__ == "__main__":
    main()
