"""Turn contract file names into safe module identifiers."""

from __future__ import annotations

_RESERVED = frozenset(
    {
        "_", "abstract", "as", "async", "await", "become", "box", "break",
        "const", "continue", "crate", "do", "dyn", "else", "enum", "extern",
        "false", "final", "fn", "for", "if", "impl", "in", "let", "loop",
        "macro", "match", "mod", "move", "mut", "override", "priv", "pub",
        "ref", "return", "Self", "self", "static", "struct", "super", "trait",
        "true", "try", "type", "typeof", "unsafe", "unsized", "use",
        "virtual", "where", "while", "yield",
    }
)


def _is_separator(ch: str) -> bool:
    return not ch.isalnum()


def _counts_as_upper(ch: str) -> bool:
    # Anything unchanged by ASCII upper-casing counts, digits included.
    return ch.upper() == ch if ch.isascii() else True


def _is_lower(ch: str | None) -> bool:
    return ch is not None and ch.islower()


def to_snake_case(name: str) -> str:
    """Convert ``name`` to snake_case, splitting at case and digit changes."""
    trimmed = name.rstrip()
    while trimmed and _is_separator(trimmed[-1]):
        trimmed = trimmed[:-1]

    def neighbour(index: int) -> str | None:
        return name[index] if 0 <= index < len(name) else None

    parts: list[str] = []
    first = True
    for index, ch in enumerate(trimmed):
        if _is_separator(ch):
            if not first:
                first = True
                parts.append("_")
        elif (
            not first
            and _counts_as_upper(ch)
            and (_is_lower(neighbour(index + 1)) or _is_lower(neighbour(index - 1)))
        ):
            first = False
            parts.append("_" + ch.lower())
        else:
            first = False
            parts.append(ch.lower())
    return "".join(parts)


def safe_identifier_name(name: str) -> str:
    """Prefix an underscore when ``name`` starts with a digit."""
    return f"_{name}" if name[:1].isnumeric() else name


def safe_ident(name: str) -> str:
    """Return ``name``, with ``_`` appended if it is a reserved word.

    Raises ``ValueError`` if no legal identifier can be formed.
    """
    if name.isidentifier() and name not in _RESERVED:
        return name
    candidate = f"{name}_"
    if not candidate.isidentifier():
        raise ValueError(f"{name!r} is not a valid identifier")
    return candidate


def safe_module_name(name: str) -> str:
    """Convert a contract name into a valid module name."""
    return safe_ident(safe_identifier_name(to_snake_case(name)))