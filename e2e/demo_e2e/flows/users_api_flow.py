# e2e/demo_e2e/flows/users_api_flow.py
from __future__ import annotations

from typing import Any, Dict, List

from demo_e2e.core.errors import ScenarioDefinitionError
from demo_e2e.core.types import Act, Assert, Step
from demo_e2e.selectors import users_api_selectors as U


def build_users_api(params: Dict[str, Any]) -> List[Step]:
    """
    GET /app/users を Bearer トークン付きで叩き、
    status と users 配列・各ユーザーの項目の有無だけを見る（値の中身は見ない）。
    """
    query = params.get("query") or {}
    unknown = [k for k in query if k not in U.QUERY_KEYS]
    if unknown:
        raise ScenarioDefinitionError(f"users_api: unknown query keys {unknown}")

    token_var = params.get("token_variable", U.TOKEN_VARIABLE)
    return [
        Act(
            "request",
            params={
                "method": "GET",
                "url": params.get("url", U.USERS_API_URL),
                "headers": {
                    "Authorization": "Bearer ${%s}" % token_var,
                    "Content-Type": "application/json",
                },
                "query": dict(query),
                "into": "response",
            },
        ),
        Assert("status", expected=int(params.get("expected_status", 200)), params={"var": "response"}),
        Assert("json_type", expected="array", params={"var": "response", "field": U.USERS_FIELD}),
        Assert("json_items_have", expected=list(U.USER_FIELDS), params={"var": "response", "field": U.USERS_FIELD}),
    ]
