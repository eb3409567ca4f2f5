from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this script directly (python tools/warm_cache.py ...) by
# adding the project root to sys.path so `import kiosk...` works.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kiosk.config import settings  # noqa: E402
from kiosk.library import load_library  # noqa: E402
from kiosk.logging_setup import configure_logging  # noqa: E402
from kiosk.pipeline import warm_cache  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Populate the image cache for every still and animated slide, so a "
            "kiosk never resizes on its first pass through the playlist."
        )
    )
    parser.add_argument("--config", default=None,
                        help="Slide library YAML (default: CONFIG_PATH)")
    args = parser.parse_args()

    configure_logging(settings)
    library = load_library(args.config or settings.config_path)
    count = warm_cache(library, settings)
    print(f"{count} images ready in {Path(settings.cache_dir).resolve()}")


if __name__ == "__main__":
    main()
