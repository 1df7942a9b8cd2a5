"""
lictool.renderer - Template Rendering
=====================================

Turns a :class:`~lictool.models.LicenseTemplate` and a field mapping into the
final license text.

Rendering is a single ``re.sub`` pass over :data:`~lictool.placeholders.TOKEN_PATTERN`.
Substituted values are never scanned again, so a value that itself looks like
a token (an author called ``<year>``, say) ends up in the output verbatim.

Unfilled Optional Placeholders
------------------------------
A placeholder that is not required and has no value renders as:

1. the configured default for that field, if any;
2. otherwise ``""`` under the ``empty`` policy (the default), or the
   original token text under the ``keep`` policy.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum

from lictool.errors import MissingFieldsError
from lictool.models import LicenseTemplate, RenderedLicense
from lictool.placeholders import TOKEN_PATTERN, field_for_match, normalize_mapping


class UnfilledPolicy(str, Enum):
    """What to do with an optional placeholder nobody supplied a value for."""

    EMPTY = "empty"
    KEEP = "keep"


def render(
    template: LicenseTemplate,
    fields: Mapping[str, str],
    *,
    defaults: Mapping[str, str] | None = None,
    unfilled: UnfilledPolicy | str = UnfilledPolicy.EMPTY,
) -> RenderedLicense:
    """
    Substitute placeholders in a license template.

    Parameters
    ----------
    template : LicenseTemplate
        The template to render.
    fields : Mapping[str, str]
        Placeholder values. Alias keys such as ``fullname`` are accepted.
        Keys the template does not use are ignored.
    defaults : Mapping[str, str] | None
        Fallback values, consulted after ``fields``. A default also
        satisfies a required field.
    unfilled : UnfilledPolicy | str
        Policy for optional placeholders with no value.

    Returns
    -------
    RenderedLicense
        The identifier and rendered text.

    Raises
    ------
    MissingFieldsError
        If any required field has no value. Every missing field is listed.
    """
    policy = UnfilledPolicy(unfilled)
    values = normalize_mapping(defaults or {})
    values.update(normalize_mapping(fields))

    missing = [name for name in template.required_fields if name not in values]
    if missing:
        raise MissingFieldsError(missing)

    def substitute(match: re.Match[str]) -> str:
        field = field_for_match(match)
        if field in values:
            return values[field]
        if policy is UnfilledPolicy.KEEP:
            return match.group(0)
        return ""

    text = TOKEN_PATTERN.sub(substitute, template.body)
    return RenderedLicense(identifier=template.identifier, text=text)
