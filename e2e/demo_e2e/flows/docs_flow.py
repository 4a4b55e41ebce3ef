# e2e/demo_e2e/flows/docs_flow.py
from __future__ import annotations

from typing import Any, Dict, List

from demo_e2e.core.locators import role
from demo_e2e.core.types import Act, Assert, Navigate, Step
from demo_e2e.selectors import docs_selectors as D


def build_docs_title(params: Dict[str, Any]) -> List[Step]:
    return [
        Navigate(params.get("url", D.DOCS_URL)),
        Assert("title", expected=params.get("title_pattern", D.TITLE_PATTERN)),
    ]


def build_docs_get_started(params: Dict[str, Any]) -> List[Step]:
    """Get started リンク -> Installation 見出しが見える"""
    return [
        Navigate(params.get("url", D.DOCS_URL)),
        Act("click", role(D.GET_STARTED_LINK_ROLE, D.GET_STARTED_LINK_NAME)),
        Assert("visible", target=role(D.INSTALLATION_HEADING_ROLE, D.INSTALLATION_HEADING_NAME)),
    ]
