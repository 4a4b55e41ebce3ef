from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .types import ScenarioResult


@dataclass
class RunReport:
    results: Dict[str, ScenarioResult] = field(default_factory=dict)

    def add(self, result: ScenarioResult) -> None:
        if result.name in self.results:
            raise ValueError(f"Duplicate scenario name in report: {result.name}")
        self.results[result.name] = result

    def _by(self, outcome: str) -> List[ScenarioResult]:
        return [r for r in self.results.values() if r.outcome == outcome]

    @property
    def passed(self) -> List[ScenarioResult]:
        return self._by("passed")

    @property
    def failed(self) -> List[ScenarioResult]:
        return self._by("failed")

    @property
    def skipped(self) -> List[ScenarioResult]:
        return self._by("skipped")

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def outcomes(self) -> Dict[str, str]:
        return {name: r.outcome for name, r in self.results.items()}

    def summary(self) -> str:
        lines = [
            f"{len(self.results)} scenarios: "
            f"{len(self.passed)} passed, {len(self.failed)} failed, {len(self.skipped)} skipped"
        ]
        for r in self.results.values():
            line = f"  {r.outcome.upper():7} {r.name} ({r.duration_sec:.1f}s)"
            if r.reason:
                line += f" - {r.reason}"
            lines.append(line)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        out = []
        for r in self.results.values():
            d = asdict(r)
            d["artifacts"] = [str(p) for p in r.artifacts]
            d["reason"] = r.reason
            out.append(d)
        return {
            "counts": {
                "passed": len(self.passed),
                "failed": len(self.failed),
                "skipped": len(self.skipped),
            },
            "scenarios": out,
        }

    def write_json(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), ensure_ascii=False, indent=2, default=str), encoding="utf-8")
        return path
