from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SCENARIO_FILE = Path(__file__).resolve().parents[2] / "scenarios" / "scenarios.yaml"


def env_true(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class RunConfig:
    """
    Everything a run needs. Built once (usually from env) and passed down
    explicitly; nothing reads os.environ after this point.
    """

    artifact_dir: Path = Path("artifacts")
    screenshot_dir: Path = Path(".")
    headless: bool = True
    channel: Optional[str] = None
    slow_mo_ms: int = 0
    timeout_ms: int = 30000
    nav_timeout_ms: int = 45000
    expect_timeout_ms: int = 5000
    trace: bool = False
    page_per_scenario: bool = True
    poll_interval_sec: float = 0.2
    api_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "RunConfig":
        is_ci = env_true("CI")
        # 明示指定が無ければ CI のときだけ headless
        headless = env_true("PW_HEADLESS") if os.getenv("PW_HEADLESS") is not None else is_ci
        return cls(
            artifact_dir=Path(os.getenv("ARTIFACT_DIR", "artifacts")),
            screenshot_dir=Path(os.getenv("SCREENSHOT_DIR", ".")),
            headless=headless,
            channel=os.getenv("PW_CHANNEL") or None,
            slow_mo_ms=int(os.getenv("PW_SLOWMO_MS", "0")),
            timeout_ms=int(os.getenv("PW_TIMEOUT_MS", "30000")),
            nav_timeout_ms=int(os.getenv("PW_NAV_TIMEOUT_MS", "45000")),
            expect_timeout_ms=int(os.getenv("PW_EXPECT_TIMEOUT_MS", "5000")),
            trace=env_true("PW_TRACE", default=True),
            page_per_scenario=env_true("E2E_PAGE_PER_SCENARIO", default=True),
            poll_interval_sec=float(os.getenv("E2E_POLL_INTERVAL_SEC", "0.2")),
            api_token=os.getenv("USERS_API_TOKEN") or None,
        )

    def with_overrides(self, **kwargs: Any) -> "RunConfig":
        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        return replace(self, **kwargs)

    def variables(self) -> Dict[str, Any]:
        """Initial scenario variables available as ${name} in steps."""
        return {"api_token": self.api_token or ""}


def scenario_file() -> Path:
    return Path(os.getenv("E2E_SCENARIOS") or DEFAULT_SCENARIO_FILE)
