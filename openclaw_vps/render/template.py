"""
Template rendering for the instance boot script.

Templates use the Go-template field form ``{{.Name}}`` for placeholders.
Rendering is a single pass over parsed segments: bound values are inserted
literally and never re-scanned, so a value that happens to contain ``{{.X}}``
is not expanded again.
"""

import logging
import re
import warnings
from dataclasses import dataclass
from typing import Mapping, Union

import pulumi

from openclaw_vps.errors import UnresolvedPlaceholderError, UnusedBindingWarning

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

#: Placeholders the ``user-data.sh`` boot script is expected to use.
USER_DATA_PLACEHOLDERS: frozenset[str] = frozenset(
    {
        "EBSVolumeID",
        "TailscaleAuthKey",
        "AnthropicApiKey",
        "DockerComposeB64",
    }
)


@dataclass(frozen=True)
class Literal:
    """Verbatim template text."""

    text: str


@dataclass(frozen=True)
class Placeholder:
    """A named substitution point."""

    name: str
    raw: str
    """The marker exactly as written in the template"""


Segment = Union[Literal, Placeholder]


@dataclass(frozen=True)
class Template:
    """
    A parsed template: an ordered sequence of literals and placeholders.

    Example:
        template = Template.parse("vol={{.EBSVolumeID}}\\n")
        template.placeholders  # ("EBSVolumeID",)
        template.render({"EBSVolumeID": "vol-123"})  # "vol=vol-123\\n"
    """

    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, text: str) -> "Template":
        """Split *text* into literal and placeholder segments."""
        segments: list[Segment] = []
        position = 0
        for match in PLACEHOLDER_PATTERN.finditer(text):
            if match.start() > position:
                segments.append(Literal(text[position:match.start()]))
            segments.append(Placeholder(name=match.group(1), raw=match.group(0)))
            position = match.end()
        if position < len(text):
            segments.append(Literal(text[position:]))
        return cls(segments=tuple(segments))

    @property
    def placeholders(self) -> tuple[str, ...]:
        """Placeholder names in order of first appearance."""
        seen: dict[str, None] = {}
        for segment in self.segments:
            if isinstance(segment, Placeholder):
                seen.setdefault(segment.name, None)
        return tuple(seen)

    def check_bindings(self, names) -> None:
        """
        Validate a set of binding names against the template.

        Raises:
            UnresolvedPlaceholderError: If any placeholder has no binding

        Warns:
            UnusedBindingWarning: For every binding the template never uses
        """
        names = set(names)
        missing = [p for p in self.placeholders if p not in names]
        if missing:
            raise UnresolvedPlaceholderError(missing)

        for unused in sorted(names - set(self.placeholders)):
            warnings.warn(
                f"Binding '{unused}' is not referenced by the template",
                UnusedBindingWarning,
                stacklevel=3,
            )

    def substitute(self, bindings: Mapping[str, str]) -> str:
        """Join segments with *bindings*. Assumes bindings were checked."""
        parts = []
        for segment in self.segments:
            if isinstance(segment, Placeholder):
                parts.append(str(bindings[segment.name]))
            else:
                parts.append(segment.text)
        return "".join(parts)

    def render(self, bindings: Mapping[str, str]) -> str:
        """Check *bindings* and substitute them into the template."""
        self.check_bindings(bindings.keys())
        return self.substitute(bindings)

    def render_output(
        self,
        bindings: Mapping[str, "pulumi.Input[str]"],
        check: bool = True,
    ) -> pulumi.Output[str]:
        """
        Substitute possibly-deferred *bindings* once they all resolve.

        Pass ``check=False`` when the binding names were already validated
        with :meth:`check_bindings`.
        """
        if check:
            self.check_bindings(bindings.keys())
        return pulumi.Output.all(**dict(bindings)).apply(self.substitute)


def render(template_text: str, bindings: Mapping[str, str]) -> str:
    """
    Render *template_text* with plain string bindings.

    Args:
        template_text: Raw template content (e.g. ``user-data.sh``)
        bindings: Mapping of placeholder name to value

    Returns:
        Rendered text with every placeholder replaced

    Raises:
        UnresolvedPlaceholderError: If a placeholder has no binding
    """
    return Template.parse(template_text).render(bindings)


def render_output(
    template_text: str,
    bindings: Mapping[str, "pulumi.Input[str]"],
) -> pulumi.Output[str]:
    """
    Render *template_text* once every deferred binding has resolved.

    Bindings may mix plain strings with ``pulumi.Output`` values such as
    resource ids and config secrets. Placeholder coverage is checked now,
    since binding names are known before their values are; substitution
    runs inside a single ``Output.all(...).apply(...)``. If any binding is
    secret, the rendered output is secret too.

    Raises:
        UnresolvedPlaceholderError: If a placeholder has no binding
    """
    template = Template.parse(template_text)
    template.check_bindings(bindings.keys())
    logger.debug(
        "Rendering template with placeholders: %s", ", ".join(template.placeholders)
    )
    return template.render_output(bindings, check=False)
