"""Static landing page rendering."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from localbrands.core.slug import digits_only
from localbrands.domain import PublishRequest

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

THEMES: dict[str, dict[str, str]] = {
    "culinary": {"primary": "#f97316", "secondary": "#ea580c", "accent": "#fff7ed"},
    "fashion": {"primary": "#8b5cf6", "secondary": "#7c3aed", "accent": "#f5f3ff"},
    "service": {"primary": "#0ea5e9", "secondary": "#0284c7", "accent": "#f0f9ff"},
}


@lru_cache(maxsize=1)
def _env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
        undefined=StrictUndefined,
    )


def whatsapp_link(phone: str, business_name: str) -> str:
    message = f"Halo, saya tertarik dengan {business_name}"
    return f"https://wa.me/{digits_only(phone)}?text={quote(message)}"


def render(content: PublishRequest) -> str:
    """Render the one-page site for ``content``.

    Raises ``ValueError`` for content without a business name or headline;
    callers validate before getting here.
    """

    if not content.business_name or not content.headline:
        raise ValueError("business name and headline are required to render a site")

    template = _env().get_template("landing.html.j2")
    return template.render(
        business_name=content.business_name,
        headline=content.headline,
        story=content.story,
        image_url=content.image_url,
        location=content.location,
        theme=THEMES.get(content.template_id, THEMES["service"]),
        whatsapp_link=whatsapp_link(content.phone, content.business_name),
    )
