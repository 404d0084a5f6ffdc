#!/usr/bin/env python
"""Run one conversion for a local image file and print the result URL."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from restyle.config import get_settings
from restyle.models import ConversionState, UploadRequest
from restyle.services.conversion_client import ConversionClient
from restyle.services.orchestrator import ConversionOrchestrator
from restyle.services.storage import get_object_store


def _print_progress(state: ConversionState) -> None:
    if state.progress:
        print(state.progress, file=sys.stderr)


async def _run(path: str, endpoint: str | None) -> int:
    settings = get_settings()
    if endpoint:
        settings = settings.model_copy(update={"conversion_endpoint_url": endpoint})

    upload = UploadRequest.from_path(path)
    async with ConversionClient.from_settings(settings) as client:
        orchestrator = ConversionOrchestrator(settings=settings, store=get_object_store(), client=client)
        state = await orchestrator.convert(upload, _print_progress)

    if state.result is None:
        print(f"Error: {state.error}", file=sys.stderr)
        return 1
    print(f"Original:  {state.result.source_url}")
    for url in state.result.output_urls:
        print(f"Converted: {url}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Restyle a local image")
    parser.add_argument("path", help="Image file to convert")
    parser.add_argument("--endpoint", default=None, help="Override CONVERSION_ENDPOINT_URL")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else get_settings().log_level.upper())
    sys.exit(asyncio.run(_run(args.path, args.endpoint)))


if __name__ == "__main__":
    main()
