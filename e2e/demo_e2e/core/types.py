from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

QueryKind = Literal["role", "text", "css"]
Outcome = Literal["passed", "failed", "skipped"]

ACT_KINDS = (
    "click",
    "hover",
    "press",
    "key_down",
    "key_up",
    "set_input_files",
    "download",
    "scroll_to_bottom",
    "scroll_by",
    "measure",
    "screenshot",
    "request",
)
WAIT_CONDITIONS = ("visible", "hidden", "attached", "text", "load", "timeout")
ASSERT_CHECKS = (
    "title",
    "visible",
    "text",
    "text_in",
    "attribute",
    "close_to",
    "file_exists",
    "status",
    "json_type",
    "json_items_have",
)


@dataclass(frozen=True)
class Query:
    """
    Deferred element query. Nothing is looked up until the runner resolves it
    against the page, and it is resolved again for every step that uses it.
    """

    by: QueryKind
    value: str
    name: Optional[str] = None
    exact: bool = False
    has_text: Optional[str] = None
    nth: Optional[int] = None
    within: Optional["Query"] = None

    def describe(self) -> str:
        s = f"{self.by}={self.value!r}"
        if self.name is not None:
            s += f" name={self.name!r}"
        if self.has_text is not None:
            s += f" has_text={self.has_text!r}"
        if self.nth is not None:
            s += f" nth={self.nth}"
        if self.within is not None:
            s = f"{self.within.describe()} >> {s}"
        return s


# alias bound by a Locate step, or an inline query
Target = Union[str, Query, None]


@dataclass(frozen=True)
class Navigate:
    url: str
    wait_until: str = "domcontentloaded"


@dataclass(frozen=True)
class Locate:
    alias: str
    query: Query


@dataclass(frozen=True)
class Act:
    kind: str
    target: Target = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WaitFor:
    condition: str
    target: Target = None
    timeout_ms: Optional[int] = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Assert:
    check: str
    expected: Any = None
    target: Target = None
    params: Dict[str, Any] = field(default_factory=dict)
    timeout_ms: Optional[int] = None


Step = Union[Navigate, Locate, Act, WaitFor, Assert]


def describe_step(step: Step) -> str:
    if isinstance(step, Navigate):
        return f"navigate {step.url}"
    if isinstance(step, Locate):
        return f"locate {step.alias} = {step.query.describe()}"
    target = getattr(step, "target", None)
    t = target.describe() if isinstance(target, Query) else (target or "")
    if isinstance(step, Act):
        return f"act {step.kind} {t}".rstrip()
    if isinstance(step, WaitFor):
        return f"wait_for {step.condition} {t}".rstrip()
    if isinstance(step, Assert):
        return f"assert {step.check} {t}".rstrip()
    return repr(step)


@dataclass(frozen=True)
class Scenario:
    name: str
    steps: Tuple[Step, ...]
    title: Optional[str] = None
    tags: Tuple[str, ...] = ()
    requires: Tuple[str, ...] = ()
    skip: Optional[str] = None

    @property
    def uses_page(self) -> bool:
        return any(isinstance(s, Navigate) for s in self.steps)


@dataclass
class StepFailure:
    kind: str
    message: str
    step_index: int
    step: str
    expected: Any = None
    actual: Any = None


@dataclass
class ScenarioResult:
    name: str
    outcome: Outcome
    failure: Optional[StepFailure] = None
    skip_reason: Optional[str] = None
    steps_run: int = 0
    duration_sec: float = 0.0
    artifacts: List[Path] = field(default_factory=list)

    @property
    def reason(self) -> Optional[str]:
        if self.failure is not None:
            f = self.failure
            return f"[{f.kind}] step {f.step_index} ({f.step}): {f.message}"
        return self.skip_reason
