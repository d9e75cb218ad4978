from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.config_models import FieldTokens

"""Header resolver: bind semantic fields to concrete header labels.

Matching is case-insensitive substring containment. Headers are scanned in
their original column order and the first header that contains any of the
field's tokens wins, so ties always go to the leftmost column.
"""

__all__ = [
    "resolve_header",
    "resolve_fields",
]


def resolve_header(
    headers: Sequence[str],
    tokens: Sequence[str],
    exclude: Iterable[str] = (),
) -> str | None:
    """Return the first header, in column order, that contains any of the tokens.

    Parameters
    ----------
    headers: header labels in column order
    tokens: candidate tokens for the field (their order does not affect the match)
    exclude: labels that are not eligible (already bound to another field)
    """
    excluded = set(exclude)
    lowered = [t.lower() for t in tokens if t]
    for header in headers:
        if header in excluded:
            continue
        label = str(header).lower()
        if any(token in label for token in lowered):
            return header
    return None


def resolve_fields(
    headers: Sequence[str],
    table: FieldTokens,
    exclusive: bool = False,
) -> dict[str, str | None]:
    """Resolve every field of a token table against one header set.

    Fields are resolved in table order. By default each field is resolved
    independently, so a single header may serve several fields. With
    ``exclusive=True`` a header bound to an earlier field is skipped for the
    later ones.
    """
    bound: dict[str, str | None] = {}
    used: list[str] = []
    for field_name, tokens in table.items():
        header = resolve_header(headers, tokens, exclude=used if exclusive else ())
        bound[field_name] = header
        if header is not None:
            used.append(header)
    return bound
