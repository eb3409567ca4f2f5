from __future__ import annotations

import argparse
import json

from kiosk.config import settings
from kiosk.library import load_library
from kiosk.logging_setup import configure_logging
from kiosk.pipeline import build_slideshow


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Print the resolved slideshow for a kiosk client as JSON")
    parser.add_argument("client", nargs="?", default=None,
                        help="Client id (default: CLIENT_ID or hostname)")
    parser.add_argument("--config", type=str, default=None,
                        help="Slide library YAML (default: CONFIG_PATH)")
    args = parser.parse_args()

    configure_logging(settings)
    library = load_library(args.config or settings.config_path)
    slides = build_slideshow(args.client or settings.client_id, library, settings)

    payload = {"slides": [s.model_dump(exclude_none=True) for s in slides]}
    print(json.dumps(payload, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
