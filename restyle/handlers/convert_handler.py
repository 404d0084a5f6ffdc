"""Conversion endpoint: turns a public image URL into styled output URL(s)."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from restyle.services.imagegen import ImageGenerationError, ImageProvider, get_image_provider

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/convert")
async def convert_image(request: Request, provider: ImageProvider = Depends(get_image_provider)):
    try:
        payload = await request.json()
    except ValueError as exc:
        logger.error("Malformed conversion request: %s", exc)
        return JSONResponse({"error": "Request body must be JSON"}, status_code=500)

    image_url = payload.get("imageUrl") if isinstance(payload, dict) else None
    if not image_url or not isinstance(image_url, str):
        return JSONResponse({"error": "Image URL is required"}, status_code=400)

    logger.info("Received image URL: %s", image_url)
    try:
        output = await provider.stylize(image_url)
    except ImageGenerationError as exc:
        logger.error("Image generation failed (%s): %s", exc.status_code, exc.message)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    return {"output": output}
