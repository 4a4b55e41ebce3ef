from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from playwright.sync_api import Locator, Page

from .errors import HarnessError
from .types import Query, Target

_QUERY_KEYS = ("role", "text", "css")


def resolve(root: Union[Page, Locator], query: Query) -> Locator:
    """
    Query -> Locator。毎回ここを通すので DOM が変わっても古い要素は掴まない。
    """
    if query.within is not None:
        root = resolve(root, query.within)

    if query.by == "role":
        if query.name is not None:
            loc = root.get_by_role(query.value, name=query.name, exact=query.exact)
        else:
            loc = root.get_by_role(query.value)
    elif query.by == "text":
        loc = root.get_by_text(query.value, exact=query.exact)
    elif query.by == "css":
        loc = root.locator(query.value)
    else:
        raise ValueError(f"Unknown query kind: {query.by}")

    if query.has_text is not None:
        loc = loc.filter(has_text=query.has_text)
    if query.nth is not None:
        loc = loc.nth(query.nth)
    return loc


def lookup(target: Target, aliases: Mapping[str, Query]) -> Optional[Query]:
    if target is None or isinstance(target, Query):
        return target
    if target not in aliases:
        raise HarnessError(f"Unknown locator alias: {target}")
    return aliases[target]


def query_from_dict(d: Dict[str, Any]) -> Query:
    """
    {css: "#menu"} / {role: link, name: "Get started"} / {text: "Installation"}
    in: で親を指定できる。
    """
    if not isinstance(d, dict):
        raise ValueError(f"Locator must be a dict: {d!r}")

    kinds = [k for k in _QUERY_KEYS if k in d]
    if len(kinds) != 1:
        raise ValueError(f"Locator needs exactly one of {_QUERY_KEYS}: {d!r}")
    by = kinds[0]

    within = d.get("in")
    nth = d.get("nth")
    if d.get("first"):
        nth = 0

    return Query(
        by=by,  # type: ignore[arg-type]
        value=str(d[by]),
        name=str(d["name"]) if d.get("name") is not None else None,
        exact=bool(d.get("exact", False)),
        has_text=str(d["has_text"]) if d.get("has_text") is not None else None,
        nth=int(nth) if nth is not None else None,
        within=query_from_dict(within) if within is not None else None,
    )


def css(selector: str, **kwargs: Any) -> Query:
    return Query(by="css", value=selector, **kwargs)


def role(role_name: str, name: Optional[str] = None, **kwargs: Any) -> Query:
    return Query(by="role", value=role_name, name=name, **kwargs)


def text(value: str, **kwargs: Any) -> Query:
    return Query(by="text", value=value, **kwargs)
