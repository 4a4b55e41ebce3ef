# e2e/demo_e2e/flows/notification_flow.py
from __future__ import annotations

from typing import Any, Dict, List

from demo_e2e.core.locators import css
from demo_e2e.core.types import Act, Assert, Locate, Navigate, Step, WaitFor
from demo_e2e.selectors import internet_selectors as S


def build_notification(params: Dict[str, Any]) -> List[Step]:
    """
    クリックと再読込の完了待ちをまとめて仕掛け、#flash にテキストが入ってから読む。
    再読込前に読むと前回のメッセージを拾ってしまう。
    """
    base = params.get("base_url", S.BASE_URL)
    times = int(params.get("times", 5))
    messages = list(params.get("messages") or S.NOTIFICATION_MESSAGES)
    remove = [S.FLASH_CLOSE_MARK]

    steps: List[Step] = [
        Navigate(base + S.NOTIFICATION_PATH),
        Locate("flash", css(S.FLASH_SELECTOR)),
    ]
    for i in range(times):
        steps += [
            Act("click", css(S.NOTIFICATION_LINK_SELECTOR), {"wait_navigation": True}),
            WaitFor("visible", "flash"),
            WaitFor("text", "flash", params={"remove": remove}),
            Assert(
                "text_in",
                expected=messages,
                target="flash",
                params={"remove": remove, "log": f"Iteration {i + 1}"},
            ),
        ]
    return steps
