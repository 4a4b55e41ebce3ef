# e2e/demo_e2e/flows/router.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from demo_e2e.core.errors import ScenarioDefinitionError
from demo_e2e.core.types import Step

from demo_e2e.flows.docs_flow import build_docs_get_started, build_docs_title
from demo_e2e.flows.files_flow import build_download_upload
from demo_e2e.flows.key_press_flow import build_key_presses
from demo_e2e.flows.menu_flow import build_floating_menu, build_jqueryui_menu, build_jqueryui_menu_disabled
from demo_e2e.flows.notification_flow import build_notification
from demo_e2e.flows.users_api_flow import build_users_api

FlowBuilder = Callable[[Dict[str, Any]], List[Step]]

FLOWS: Dict[str, FlowBuilder] = {
    "docs_title": build_docs_title,
    "docs_get_started": build_docs_get_started,
    "users_api": build_users_api,
    "download_upload": build_download_upload,
    "floating_menu": build_floating_menu,
    "jqueryui_menu": build_jqueryui_menu,
    "jqueryui_menu_disabled": build_jqueryui_menu_disabled,
    "notification": build_notification,
    "key_presses": build_key_presses,
}


def build_flow(flow: str, params: Optional[Dict[str, Any]] = None) -> List[Step]:
    builder = FLOWS.get((flow or "").lower())
    if builder is None:
        raise ScenarioDefinitionError(f"Unknown flow: {flow} (known: {', '.join(sorted(FLOWS))})")
    return builder(params if isinstance(params, dict) else {})
