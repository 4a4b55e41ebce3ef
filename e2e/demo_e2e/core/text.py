from typing import Iterable


def normalize_text(s: str) -> str:
    return " ".join((s or "").replace("\u3000", " ").split())


def clean_text(s: str, remove: Iterable[str] = ()) -> str:
    """normalize_text after dropping decorations such as the flash close mark."""
    s = s or ""
    for r in remove:
        s = s.replace(r, "")
    return normalize_text(s)
