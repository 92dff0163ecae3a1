from __future__ import annotations

from fastapi import APIRouter, HTTPException

from localbrands.domain import TEMPLATE_IDS, PublishRequest
from localbrands.errors import PublishFailed
from localbrands.workers.publish import get_publish_orchestrator

router = APIRouter(tags=["publish"])

REQUIRED_FIELDS = ("businessName", "headline", "story")


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else ""


@router.post("/publish")
async def publish_site(payload: dict) -> dict:
    """Generate, push and deploy a landing page in one request."""
    if any(not _text(payload, key) for key in REQUIRED_FIELDS):
        raise HTTPException(status_code=400, detail="Missing required fields")

    template_id = payload.get("templateId")
    request = PublishRequest(
        business_name=_text(payload, "businessName"),
        headline=_text(payload, "headline"),
        story=_text(payload, "story"),
        phone=_text(payload, "phone"),
        image_url=_text(payload, "imageUrl"),
        template_id=template_id if template_id in TEMPLATE_IDS else "service",
        location=_text(payload, "location") or None,
    )

    outcome = await get_publish_orchestrator().run(request)
    if not outcome.succeeded:
        raise PublishFailed(outcome.run.error or "Publish failed")
    return {"success": True, "url": outcome.url, "repoUrl": outcome.repo_url}
