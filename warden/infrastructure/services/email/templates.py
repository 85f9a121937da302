"""Email template bundle.

Every ``*.tmpl`` file shipped in the ``templates`` directory of this package
is one message. A message template defines three blocks:

- ``subject``: a single line
- ``plain_body``: the text/plain part
- ``html_body``: the text/html alternative (auto-escaped)

The bundle is parsed once per process by `load_template_bundle` and is
read-only afterwards.
"""

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    Template,
    TemplateError,
)
from structlog import get_logger

from warden.core.exceptions import TemplateRenderError

logger = get_logger(__name__)

TEMPLATE_EXTENSION = "tmpl"
FRAGMENTS = ("subject", "plain_body", "html_body")


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    plain_body: str
    html_body: str


def _format_datetime_filter(value: Optional[datetime], format_string: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Jinja2 filter for formatting datetime objects."""
    if value is None:
        return ""
    return value.strftime(format_string)


class TemplateBundle:
    """Immutable set of parsed message templates keyed by file name.

    Attributes:
        templates: Read-only mapping of template name to parsed template.
    """

    def __init__(self, environment: Environment):
        self._environment = environment
        try:
            parsed = {
                name: environment.get_template(name)
                for name in environment.list_templates(extensions=[TEMPLATE_EXTENSION])
            }
        except TemplateError as e:
            logger.error("Email template failed to parse", error=str(e))
            raise TemplateRenderError(f"Email template failed to parse: {e}") from e

        self.templates: Mapping[str, Template] = MappingProxyType(parsed)
        logger.info("Email templates loaded", templates=sorted(parsed))

    @classmethod
    def from_package(cls) -> "TemplateBundle":
        return cls(_build_environment(PackageLoader("warden.infrastructure.services.email", "templates")))

    @classmethod
    def from_directory(cls, directory: str | Path) -> "TemplateBundle":
        return cls(_build_environment(FileSystemLoader(str(directory))))

    def render(self, template_name: str, data: Mapping[str, Any]) -> RenderedMessage:
        """Render the three fragments of `template_name` with `data`.

        Raises:
            TemplateRenderError: If the template or a fragment is missing, a
                variable is undefined, or the subject spans several lines.
        """
        template = self.templates.get(template_name)
        if template is None:
            logger.error("Email template not found", template=template_name)
            raise TemplateRenderError(f"Template file not found: {template_name}")

        fragments = {name: self._render_fragment(template, template_name, name, data) for name in FRAGMENTS}

        subject = fragments["subject"].strip()
        if not subject or "\n" in subject:
            logger.error("Email subject is not a single line", template=template_name)
            raise TemplateRenderError(f"Template {template_name} must render a single-line subject")

        logger.debug("Template rendered successfully", template=template_name, context_keys=list(data))
        return RenderedMessage(
            subject=subject,
            plain_body=fragments["plain_body"].strip() + "\n",
            html_body=fragments["html_body"].strip() + "\n",
        )

    @staticmethod
    def _render_fragment(template: Template, template_name: str, fragment: str, data: Mapping[str, Any]) -> str:
        block = template.blocks.get(fragment)
        if block is None:
            logger.error("Email template fragment missing", template=template_name, fragment=fragment)
            raise TemplateRenderError(f"Template {template_name} has no '{fragment}' block")

        try:
            context = template.new_context(dict(data))
            return "".join(block(context))
        except TemplateError as e:
            logger.error("Template rendering failed", template=template_name, fragment=fragment, error=str(e))
            raise TemplateRenderError(f"Template rendering failed: {e}") from e


def _build_environment(loader) -> Environment:
    environment = Environment(
        loader=loader,
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    environment.filters["format_datetime"] = _format_datetime_filter
    return environment


@lru_cache(maxsize=1)
def load_template_bundle() -> TemplateBundle:
    """Return the process-wide bundle of templates shipped with the package."""
    return TemplateBundle.from_package()
