#!/usr/bin/env python
"""
Upload photos to a running gallery API, one request per file.

Usage:
  python scripts/upload_photos.py ~/Pictures/whistler/*.jpg
  GALLERY_API_URL=http://localhost:8000 python scripts/upload_photos.py photo.heic
"""
from __future__ import annotations

import argparse
import os
from pathlib import Path

from travel_journal.core.env import configure_logging, load_dotenv_if_present
from travel_journal.core.models import UploadProgress
from travel_journal.gallery import GalleryClient, format_size


def _report(progress: UploadProgress) -> None:
    outcome = progress.outcome
    status = "ok " if outcome.success else "ERR"
    detail = outcome.url if outcome.success else outcome.message
    print(f"[{progress.fraction:6.1%}] {status} {outcome.name}: {detail}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Upload photos to the travel journal gallery.")
    parser.add_argument("files", nargs="+", type=Path, help="Image files to upload")
    parser.add_argument(
        "--api",
        default=None,
        help="Gallery API base URL (default: GALLERY_API_URL or http://localhost:8000)",
    )
    args = parser.parse_args()

    load_dotenv_if_present()
    configure_logging("WARNING")
    base_url = args.api or os.getenv("GALLERY_API_URL", "http://localhost:8000")
    files = [path for path in args.files if path.is_file()]
    skipped = len(args.files) - len(files)
    if skipped:
        print(f"Skipping {skipped} path(s) that are not files")
    if not files:
        print("Nothing to upload")
        return

    client = GalleryClient(base_url)
    try:
        outcomes = client.upload_batch(files, on_progress=_report)
    finally:
        client.close()
    uploaded = [o for o in outcomes if o.success]
    total_bytes = sum(o.photo.file_size for o in uploaded if o.photo)
    print(
        f"Upload complete: {len(uploaded)}/{len(outcomes)} files, {format_size(total_bytes)}"
    )


if __name__ == "__main__":
    main()
