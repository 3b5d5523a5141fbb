"""
Bind-variable normalisation shared by connections and prepared statements.

Callers may pass bind values the way they would to the SQLite driver itself:

- a single mapping binds named placeholders (``$text`` is bound from ``{"text": ...}``)
- a single list/tuple binds ``?`` placeholders positionally
- several positional values bind ``?`` placeholders in order
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Tuple, Union

Params = Union[Dict[str, Any], Tuple[Any, ...]]

_NAMED_PLACEHOLDER = re.compile(r"[:@$]([A-Za-z_][A-Za-z0-9_]*)")

# String literals, quoted identifiers and comments never hold placeholders.
_QUOTED_OR_COMMENT = re.compile(
    r"'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"'
    r"|`(?:[^`]|``)*`"
    r"|\[[^\]]*\]"
    r"|--[^\n]*"
    r"|/\*.*?(?:\*/|\Z)",
    re.DOTALL,
)


def bind_params(params: Sequence[Any]) -> Params:
    """
    Normalise a ``*params`` tuple into the form sqlite3 expects.

    Parameters
    ----------
    params : sequence
        The variadic bind arguments received by an execute/fetch call.

    Returns
    -------
    dict or tuple
        A dict for named placeholders, a tuple for positional ones.
    """
    if len(params) == 1:
        (only,) = params
        if isinstance(only, Mapping):
            return dict(only)
        if isinstance(only, (list, tuple)):
            return tuple(only)
    return tuple(params)


def placeholder_params(sql: str) -> Params:
    """
    Build NULL bind values for every placeholder in ``sql``.

    Used to compile a statement (``EXPLAIN``) without executing it. Text inside
    quotes or comments is ignored, so ``'x:y'`` is not taken for ``:y``.
    """
    code = _QUOTED_OR_COMMENT.sub(" ", sql)
    names = _NAMED_PLACEHOLDER.findall(code)
    if names:
        return {name: None for name in names}
    return (None,) * code.count("?")


__all__ = ["Params", "bind_params", "placeholder_params"]
