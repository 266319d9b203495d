"""Template-backed components.

A ``.html`` file in the routes directory (``_app.html``,
``_layout.html``, a page template) becomes a :class:`TemplateComponent`
rendered with jinja2. Templates see the inner markup as ``component``::

    <main class="blog">{{ component }}</main>

plus ``data``, ``params``, ``url``, ``state`` and ``request``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape
from markupsafe import Markup

if TYPE_CHECKING:
    from roost.context import Context


def create_environment(
    routes_dir: str | Path,
    *,
    autoescape: bool = True,
    debug: bool = False,
) -> Environment:
    """Create the jinja2 Environment used for route templates.

    Template names are paths relative to *routes_dir*.
    """
    return Environment(
        loader=FileSystemLoader(str(routes_dir)),
        autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=True)
        if autoescape
        else False,
        auto_reload=debug,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class TemplateComponent:
    """A component rendering a jinja2 template with the request context."""

    __slots__ = ("template",)

    def __init__(self, template: Template) -> None:
        self.template = template

    @classmethod
    def from_string(cls, source: str, *, env: Environment | None = None) -> TemplateComponent:
        """Build a component from template source (autoescaped by default)."""
        env = env or Environment(autoescape=True)
        return cls(env.from_string(source))

    @property
    def name(self) -> str | None:
        return self.template.name

    def __call__(self, ctx: Context) -> Markup:
        return Markup(
            self.template.render(
                component=ctx.component,
                data=ctx.data,
                params=ctx.params,
                url=ctx.url,
                state=ctx.state,
                request=ctx.request,
            )
        )

    def __repr__(self) -> str:
        return f"<TemplateComponent {self.name or '<string>'}>"
