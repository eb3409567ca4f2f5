from __future__ import annotations

import argparse
import os
import time

import requests
from requests import RequestException


def fetch_slideshow(base_url: str, client: str | None = None, *,
                    attempts: int = 3, timeout: float = 20) -> dict:
    """GET /api/slideshow from a running kiosk, retrying transient failures."""
    url = base_url.rstrip("/") + "/api/slideshow"
    params = {"client": client} if client else None

    last_err: Exception | None = None
    for attempt in range(attempts):
        try:
            r = requests.get(url, params=params, timeout=timeout)
            r.raise_for_status()
            return r.json()
        except RequestException as e:
            last_err = e
            time.sleep(0.4 * (attempt + 1))
    raise last_err or RuntimeError("Fetch failed")


def summarize(payload: dict) -> list[str]:
    lines: list[str] = []
    for slide in payload.get("slides") or []:
        kind = slide.get("type", "?")
        if kind == "animated":
            detail = f"{len(slide.get('frames') or [])} frames @ {slide.get('fps')} fps"
        elif kind == "still":
            detail = slide.get("url", "")
        elif kind == "mux":
            detail = f"{len(slide.get('panels') or [])} panels"
        elif kind == "youtube":
            detail = slide.get("video_id", "")
        else:
            detail = slide.get("url", "")
        lines.append(f"{slide.get('id')}\t{kind}\t{slide.get('duration', '')}\t{detail}".rstrip())
    return lines


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fetch and summarize the playlist served by a running kiosk")
    parser.add_argument(
        "--url",
        default=os.getenv("KIOSK_URL", "http://localhost:3000"),
        help="Kiosk base URL (default: KIOSK_URL or http://localhost:3000)",
    )
    parser.add_argument("--client", default=None, help="Client id to request")
    args = parser.parse_args()

    try:
        payload = fetch_slideshow(args.url, args.client)
    except RequestException as e:
        raise SystemExit(f"Could not fetch playlist from {args.url}: {e}")

    lines = summarize(payload)
    for line in lines:
        print(line)
    print(f"{len(lines)} slides")


if __name__ == "__main__":
    main()
