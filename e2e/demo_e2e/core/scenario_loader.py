from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import yaml

from demo_e2e.flows.router import build_flow

from .config import scenario_file
from .errors import ScenarioDefinitionError
from .locators import query_from_dict
from .types import (
    ACT_KINDS,
    ASSERT_CHECKS,
    WAIT_CONDITIONS,
    Act,
    Assert,
    Locate,
    Navigate,
    Scenario,
    Step,
    Target,
    WaitFor,
)


def load_scenarios(path: str | Path | None = None) -> List[Scenario]:
    p = Path(path) if path is not None else scenario_file()
    if not p.exists():
        raise FileNotFoundError(f"Scenario file not found: {p.resolve()}")

    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    return parse_scenarios(raw)


def parse_scenarios(raw: Any) -> List[Scenario]:
    if not isinstance(raw, list):
        raise ScenarioDefinitionError("scenarios.yaml must be a list")

    out: List[Scenario] = []
    seen = set()
    for row in raw:
        if not isinstance(row, dict):
            raise ScenarioDefinitionError("Each scenario must be a dict")
        sc = _to_scenario(row)
        if sc.name in seen:
            raise ScenarioDefinitionError(f"Duplicate scenario name: {sc.name}")
        seen.add(sc.name)
        out.append(sc)
    return out


def filter_scenarios(
    scenarios: Iterable[Scenario],
    keywords: Optional[Sequence[str]] = None,
    tags: Optional[Sequence[str]] = None,
) -> List[Scenario]:
    """keywords: 名前の部分一致（どれか）、tags: どれかを持つもの"""
    out = []
    for sc in scenarios:
        if keywords and not any(k.lower() in sc.name.lower() for k in keywords):
            continue
        if tags and not set(tags) & set(sc.tags):
            continue
        out.append(sc)
    return out


def _to_scenario(d: Dict[str, Any]) -> Scenario:
    if "name" not in d:
        raise ScenarioDefinitionError(f"Missing key 'name' in scenario: {d}")
    name = str(d["name"])

    has_flow = d.get("flow") is not None
    has_steps = d.get("steps") is not None
    if has_flow == has_steps:
        raise ScenarioDefinitionError(f"{name}: exactly one of 'flow' or 'steps' is required")

    params = d.get("params")
    if params is not None and not isinstance(params, dict):
        raise ScenarioDefinitionError(f"params must be dict: {name}")

    if has_flow:
        steps = build_flow(str(d["flow"]), params or {})
    else:
        steps = _to_steps(d["steps"], name)

    if not steps:
        raise ScenarioDefinitionError(f"{name}: no steps")

    return Scenario(
        name=name,
        steps=tuple(steps),
        title=str(d["title"]) if d.get("title") is not None else None,
        tags=tuple(str(t) for t in d.get("tags") or ()),
        requires=tuple(str(r) for r in d.get("requires") or ()),
        skip=str(d["skip"]) if d.get("skip") else None,
    )


def _to_steps(raw: Any, name: str) -> List[Step]:
    if not isinstance(raw, list):
        raise ScenarioDefinitionError(f"{name}: steps must be a list")

    out: List[Step] = []
    for i, item in enumerate(raw, start=1):
        if not isinstance(item, dict) or len(item) != 1:
            raise ScenarioDefinitionError(f"{name}: step {i} must be a single-key dict, got {item!r}")
        (key, body), = item.items()
        try:
            if key == "repeat":
                out.extend(_repeat(body, name))
            else:
                out.append(_to_step(key, body))
        except ScenarioDefinitionError:
            raise
        except (ValueError, KeyError, TypeError) as e:
            raise ScenarioDefinitionError(f"{name}: step {i} ({key}): {e}") from e
    return out


def _repeat(body: Dict[str, Any], name: str) -> List[Step]:
    times = int(body["times"])
    if times < 1:
        raise ValueError("repeat.times must be >= 1")
    inner = _to_steps(body["steps"], name)
    return [s for _ in range(times) for s in inner]


def _target(raw: Any) -> Target:
    if raw is None or isinstance(raw, str):
        return raw
    return query_from_dict(raw)


def _to_step(key: str, body: Any) -> Step:
    if key == "navigate":
        if isinstance(body, str):
            return Navigate(body)
        return Navigate(str(body["url"]), wait_until=body.get("wait_until", "domcontentloaded"))

    if key == "locate":
        body = dict(body)
        alias = body.pop("as")
        return Locate(str(alias), query_from_dict(body))

    if key == "act":
        kind = str(body["kind"])
        if kind not in ACT_KINDS:
            raise ValueError(f"unknown act kind {kind!r}")
        return Act(kind, _target(body.get("target")), dict(body.get("params") or {}))

    if key == "wait_for":
        cond = str(body["condition"])
        if cond not in WAIT_CONDITIONS:
            raise ValueError(f"unknown wait condition {cond!r}")
        timeout = body.get("timeout_ms")
        if cond == "timeout" and timeout is None:
            raise ValueError("wait_for timeout needs timeout_ms")
        return WaitFor(
            cond,
            _target(body.get("target")),
            int(timeout) if timeout is not None else None,
            dict(body.get("params") or {}),
        )

    if key == "assert":
        check = str(body["check"])
        if check not in ASSERT_CHECKS:
            raise ValueError(f"unknown assert check {check!r}")
        timeout = body.get("timeout_ms")
        return Assert(
            check,
            expected=body.get("expected"),
            target=_target(body.get("target")),
            params=dict(body.get("params") or {}),
            timeout_ms=int(timeout) if timeout is not None else None,
        )

    raise ValueError(f"unknown step type {key!r}")
