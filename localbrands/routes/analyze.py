from __future__ import annotations

from fastapi import APIRouter, HTTPException

from localbrands.infrastructure import get_analysis_adapter

router = APIRouter(tags=["analysis"])


@router.post("/analyze-image")
async def analyze_image(payload: dict) -> dict:
    """Suggest landing page copy for an uploaded photo."""
    image = payload.get("image")
    if not image:
        raise HTTPException(status_code=400, detail="Missing image data")
    if not isinstance(image, str):
        raise HTTPException(status_code=400, detail="image must be a base64 or data URL string")

    adapter = get_analysis_adapter()
    result = await adapter.analyze(image, payload.get("language") or "en")
    return result.to_wire()
