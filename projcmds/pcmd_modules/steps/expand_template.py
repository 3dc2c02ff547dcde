"""Template expansion for command bodies.

Specifiers have the shape ``%<flags><width>.<precision><char>``.
Flags: ``0`` zero-pad, ``-`` pad on the right, ``<`` truncate on
the left, ``>`` truncate on the right, ``^`` upper-case, ``_``
lower-case. ``%%`` is a literal percent sign.

Substitution values come from providers, zero-argument callables
returning IOResult. A provider is only called when its specifier
appears, so providers that prompt the user stay silent for
templates that do not need them.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from projcmds.pcmd_modules.errors import RegistryError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    SubstitutionProvider = Callable[[], IOResult[str, RegistryError]]

_SPECIFIER = re.compile(
    r"%(?P<flags>[-0<>^_]*)(?P<width>[0-9]+)?"
    r"(?P<precision>\.[0-9]*)?(?P<char>.)?",
    re.DOTALL,
)


def constant(value: str) -> SubstitutionProvider:
    """Provider that always yields the given value."""

    def _provide() -> IOResult[str, RegistryError]:
        return IOSuccess(value)

    return _provide


def lazy_once(provider: SubstitutionProvider) -> SubstitutionProvider:
    """Wrap a provider so it runs at most once.

    A successful value is cached for later calls. Failures are
    not cached.
    """
    cache: list[str] = []

    def _provide() -> IOResult[str, RegistryError]:
        if cache:
            return IOSuccess(cache[0])
        result = provider()
        if isinstance(result, IOSuccess):
            cache.append(unsafe_perform_io(result.unwrap()))
        return result

    return _provide


def apply_modifiers(
    value: str,
    flags: str,
    width: int | None,
    precision: int | None,
) -> str:
    """Apply printf-like flags, width and precision to a value.

    Order: case change, precision truncation, padding to width,
    truncation to width (only with ``<`` or ``>``).
    """
    if "^" in flags:
        value = value.upper()
    elif "_" in flags:
        value = value.lower()

    if precision is not None and len(value) > precision:
        if "<" in flags:
            value = value[len(value) - precision:]
        else:
            value = value[:precision]

    if width is not None and len(value) < width:
        padding = ("0" if "0" in flags else " ") * (width - len(value))
        value = value + padding if "-" in flags else padding + value

    if width is not None and len(value) > width:
        if "<" in flags:
            value = value[len(value) - width:]
        elif ">" in flags:
            value = value[:width]

    return value


def _malformed(
    template: str,
    specifier: str,
    reason: str,
) -> IOResult[str, RegistryError]:
    return IOFailure(
        RegistryError(
            operation="expand_template",
            error_type="MalformedModifierError",
            message=f"Malformed specifier '{specifier}': {reason}",
            context={"template": template, "specifier": specifier},
        ),
    )


def _expand_specifier(
    match: re.Match[str],
    template: str,
    providers: Mapping[str, SubstitutionProvider],
) -> IOResult[str, RegistryError]:
    specifier = match.group(0)
    flags = match.group("flags")
    width_text = match.group("width")
    precision_text = match.group("precision")
    char = match.group("char")

    if char is None:
        return _malformed(
            template, specifier, "missing specifier character",
        )
    if precision_text == ".":
        return _malformed(
            template, specifier, "precision has no digits",
        )
    if char == "%":
        if flags or width_text or precision_text:
            return _malformed(
                template, specifier, "'%%' takes no modifiers",
            )
        return IOSuccess("%")

    provider = providers.get(char)
    if provider is None:
        available = sorted(providers)
        return IOFailure(
            RegistryError(
                operation="expand_template",
                error_type="UnknownSpecifierError",
                message=(
                    f"Unknown specifier '%{char}' in template."
                    f" Available: {available}"
                ),
                context={
                    "template": template,
                    "specifier": specifier,
                    "available": available,
                },
            ),
        )

    width = int(width_text) if width_text else None
    precision = int(precision_text[1:]) if precision_text else None

    def _modify(value: str) -> IOResult[str, RegistryError]:
        return IOSuccess(
            apply_modifiers(value, flags, width, precision),
        )

    return provider().bind(_modify)


def expand_template(
    template: str,
    providers: Mapping[str, SubstitutionProvider],
) -> IOResult[str, RegistryError]:
    """Expand every specifier in one template.

    Fails on the first unknown or malformed specifier; no
    partially expanded string is ever returned.
    """
    parts: list[str] = []
    position = 0
    for match in _SPECIFIER.finditer(template):
        parts.append(template[position:match.start()])
        position = match.end()
        expanded = _expand_specifier(match, template, providers)
        if isinstance(expanded, IOFailure):
            return expanded
        parts.append(unsafe_perform_io(expanded.unwrap()))
    parts.append(template[position:])
    return IOSuccess("".join(parts))


def expand_each(
    templates: Sequence[str],
    providers: Mapping[str, SubstitutionProvider],
) -> IOResult[tuple[str, ...], RegistryError]:
    """Expand a sequence of templates, keeping them separate."""
    expanded: list[str] = []
    for template in templates:
        result = expand_template(template, providers)
        if isinstance(result, IOFailure):
            return result
        expanded.append(unsafe_perform_io(result.unwrap()))
    return IOSuccess(tuple(expanded))


def expand_templates(
    templates: str | Sequence[str],
    providers: Mapping[str, SubstitutionProvider],
    *,
    separator: str = " && ",
) -> IOResult[str, RegistryError]:
    """Expand a template, or a list of templates joined by separator."""
    if isinstance(templates, str):
        return expand_template(templates, providers)

    def _join(parts: tuple[str, ...]) -> IOResult[str, RegistryError]:
        return IOSuccess(separator.join(parts))

    return expand_each(templates, providers).bind(_join)
