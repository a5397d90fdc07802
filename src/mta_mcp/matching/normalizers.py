import re
import unicodedata
from functools import lru_cache

# Separators in the free-text routes field ("A C E", "N,Q,R/W", "4-5-6")
ROUTE_TOKEN_SEPARATORS = re.compile(r"[^A-Z0-9]+")

# Alternating letter / digit runs of a station code ("R15" -> R, 15)
CODE_TOKENS = re.compile(r"[A-Z]+|\d+")


@lru_cache(maxsize=4096)
def remove_accents(text: str) -> str:
    """Remove accents from text.

    Example: "Café" -> "Cafe"
    """
    # Normalize to NFD (decomposes accented characters)
    normalized = unicodedata.normalize("NFD", text)
    # Remove combining diacritical marks
    return "".join(c for c in normalized if unicodedata.category(c) != "Mn")


@lru_cache(maxsize=4096)
def normalize_text(text: str) -> str:
    """Normalize text for case- and accent-insensitive comparison.

    - Case folds
    - Removes accents
    - Normalizes whitespace

    Example: "  Times Sq-42 St " -> "times sq-42 st"
    """
    result = remove_accents(text.casefold().strip())
    return " ".join(result.split())


def stop_sort_key(name: str | None, stop_id: str) -> tuple[str, str, str]:
    """Sort key ordering stops by name (ignoring case and accents), then id.

    The raw name is a secondary key so that names differing only in case or
    accents still order deterministically.
    """
    name = name or ""
    return (normalize_text(name), name, stop_id)


@lru_cache(maxsize=8192)
def tokenize_routes(routes: str) -> tuple[str, ...]:
    """Split a free-text routes field into upper-case route tokens.

    The same strings recur across thousands of stops, so results are memoized.

    Examples:
        "A C E" -> ("A", "C", "E")
        "n,q/r-w" -> ("N", "Q", "R", "W")
        "" -> ()
    """
    return tuple(t for t in ROUTE_TOKEN_SEPARATORS.split(routes.upper()) if t)


def code_tokens(code: str) -> list[str]:
    """Split a station code into its alternating letter and digit runs.

    Example: "R15" -> ["R", "15"], "H01A" -> ["H", "01", "A"]
    """
    return CODE_TOKENS.findall(code.upper())
