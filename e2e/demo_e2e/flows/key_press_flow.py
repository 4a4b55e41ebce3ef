# e2e/demo_e2e/flows/key_press_flow.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from demo_e2e.core.errors import ScenarioDefinitionError
from demo_e2e.core.locators import css
from demo_e2e.core.types import Act, Assert, Locate, Navigate, Step
from demo_e2e.selectors import internet_selectors as S

# (押すキー, 画面に出る名前)。名前が None なら key.upper()
DEFAULT_KEYS: Tuple[Tuple[str, Optional[str]], ...] = (
    # Alphabet
    ("A", None),
    ("z", None),
    # Numbers
    ("0", None),
    ("9", None),
    # Special characters
    ("!", None),
    ("@", None),
    # Navigation
    ("ArrowUp", "UP"),
    ("ArrowDown", "DOWN"),
    ("Enter", None),
    ("Tab", "TAB"),
    ("Escape", "ESCAPE"),
    # Editing
    ("Backspace", None),
    ("Delete", None),
    # Modifiers
    ("Shift", None),
    ("Control", "CONTROL"),
    ("Alt", "ALT"),
)


def expected_echo(key: str, shown: Optional[str] = None) -> str:
    return f"{S.KEY_RESULT_PREFIX}{shown or key.upper()}"


def _parse_keys(raw: Sequence[Any]) -> List[Tuple[str, Optional[str]]]:
    out: List[Tuple[str, Optional[str]]] = []
    for item in raw:
        if isinstance(item, str):
            out.append((item, None))
        elif isinstance(item, dict) and "key" in item:
            out.append((str(item["key"]), item.get("shown")))
        else:
            raise ScenarioDefinitionError(f"key_presses: bad key entry {item!r}")
    return out


def build_key_presses(params: Dict[str, Any]) -> List[Step]:
    base = params.get("base_url", S.BASE_URL)
    keys = _parse_keys(params["keys"]) if params.get("keys") else list(DEFAULT_KEYS)

    steps: List[Step] = [
        Navigate(base + S.KEY_PRESSES_PATH),
        Locate("result", css(S.KEY_RESULT_SELECTOR)),
    ]
    for key, shown in keys:
        steps.append(Act("press", params={"key": key}))
        steps.append(Assert("text", expected=expected_echo(key, shown), target="result"))

    if params.get("combo", True):
        # Ctrl+C（ページ側は最後のキーしか出さないので結果は見ない）
        steps += [
            Act("key_down", params={"key": "Control"}),
            Act("press", params={"key": "C"}),
            Act("key_up", params={"key": "Control"}),
        ]
    return steps
