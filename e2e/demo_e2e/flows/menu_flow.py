# e2e/demo_e2e/flows/menu_flow.py
from __future__ import annotations

from typing import Any, Dict, List

from demo_e2e.core.locators import css
from demo_e2e.core.types import Act, Assert, Locate, Navigate, Step, WaitFor
from demo_e2e.selectors import internet_selectors as S


def build_floating_menu(params: Dict[str, Any]) -> List[Step]:
    base = params.get("base_url", S.BASE_URL)
    scroll_up = int(params.get("scroll_up_px", 300))
    settle_ms = int(params.get("settle_ms", 500))
    tolerance = float(params.get("tolerance", 1.0))
    links = params.get("links") or S.FLOATING_MENU_LINKS

    steps: List[Step] = [
        Navigate(base + S.FLOATING_MENU_PATH),
        Locate("menu", css(S.FLOATING_MENU_SELECTOR)),
        Assert("visible", target="menu"),
        Act("scroll_to_bottom"),
        # レイアウトが落ち着くまで
        WaitFor("timeout", timeout_ms=settle_ms),
        Assert("visible", target="menu"),
        Act("measure", "menu", params={"into": "menu_y_before"}),
        Act("scroll_by", params={"dy": -scroll_up}),
        Assert("close_to", expected="${menu_y_before}", target="menu", params={"tolerance": tolerance}),
    ]

    for text in links:
        link = css("a", has_text=text, within=css(S.FLOATING_MENU_SELECTOR))
        steps.append(Assert("visible", target=link))
        steps.append(Assert("attribute", expected=f"#{text.lower()}", target=link, params={"name": "href"}))

    steps.append(Act("screenshot", params={"path": params.get("screenshot", S.FLOATING_MENU_SCREENSHOT)}))
    return steps


def build_jqueryui_menu(params: Dict[str, Any]) -> List[Step]:
    """Enabled -> Downloads -> CSV とホバーで開いていき CSV をクリック"""
    base = params.get("base_url", S.BASE_URL)
    return [
        Navigate(base + S.JQUERY_MENU_PATH),
        Act("hover", css(S.JQUERY_ENABLED_SELECTOR)),
        WaitFor("visible", css(S.JQUERY_DOWNLOADS_SELECTOR)),
        Act("hover", css(S.JQUERY_DOWNLOADS_SELECTOR)),
        WaitFor("visible", css(S.JQUERY_CSV_SELECTOR)),
        Assert("visible", target=css(S.JQUERY_CSV_SELECTOR)),
        Act("click", css(S.JQUERY_CSV_SELECTOR)),
    ]


def build_jqueryui_menu_disabled(params: Dict[str, Any]) -> List[Step]:
    base = params.get("base_url", S.BASE_URL)
    item = css(S.JQUERY_DISABLED_ITEM_SELECTOR, has_text=S.JQUERY_DISABLED_ITEM_TEXT, nth=0)
    return [
        Navigate(base + S.JQUERY_MENU_PATH),
        Assert("visible", target=item),
        Assert("attribute", expected="true", target=item, params={"name": "aria-disabled"}),
    ]
