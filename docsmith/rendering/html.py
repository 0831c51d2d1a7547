"""Jinja2 template engine turning page descriptors into HTML."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from ..errors import RenderError
from ..models import PageDescriptor, SiteData

_DEFAULT_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"


class HtmlEngine:
    """Renders pages with one template per page context (``<context>.html.j2``).

    A project may override any template by placing a file with the same name in
    ``templates_dir``.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    async def render(self, site: SiteData, page: PageDescriptor) -> str:
        template_name = f"{page.context}.html.j2"
        context: Dict[str, Any] = site.as_context()
        context.update(page.payload)
        context["page"] = page
        context["relative_root"] = _relative_root(page)
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateError as exc:
            raise RenderError(f"Unable to render page '{page.name}': {exc}", subject=page.name) from exc

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir is not None:
            directories.append(str(templates_dir))
        directories.append(str(_DEFAULT_TEMPLATES))
        loader = FileSystemLoader(directories)
        env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.filters["slug"] = lambda value: "".join(str(value).split()).lower()
        return env


def _relative_root(page: PageDescriptor) -> str:
    if not page.path:
        return ""
    return "../" * len([segment for segment in page.path.split("/") if segment])


__all__ = ["HtmlEngine"]
