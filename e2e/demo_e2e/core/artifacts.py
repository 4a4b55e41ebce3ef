from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from playwright.sync_api import Page

logger = logging.getLogger(__name__)


def safe_name(s: str) -> str:
    s = re.sub(r"[^a-zA-Z0-9_.-]+", "_", s or "")
    s = s.strip("_")
    return s[:120] if s else "scenario"


@dataclass
class Artifacts:
    base_dir: Path
    scenario_name: str
    screenshot_dir: Path = Path(".")
    written: List[Path] = field(default_factory=list)

    @property
    def out_dir(self) -> Path:
        d = self.base_dir / safe_name(self.scenario_name)
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def downloads_dir(self) -> Path:
        d = self.out_dir / "downloads"
        d.mkdir(parents=True, exist_ok=True)
        return d

    def path(self, filename: str) -> Path:
        return self.out_dir / filename

    def screenshot_path(self, filename: str) -> Path:
        # 固定パス（上書き）。絶対パスならそのまま
        p = Path(filename)
        if not p.is_absolute():
            p = self.screenshot_dir / p
        p.parent.mkdir(parents=True, exist_ok=True)
        return p

    def record(self, p: Path) -> Path:
        if p not in self.written:
            self.written.append(p)
        return p

    def save_debug(self, page: Page, prefix: str) -> None:
        # スクショ
        try:
            p = self.path(f"{prefix}.png")
            page.screenshot(path=str(p), full_page=True)
            self.record(p)
        except Exception as e:
            logger.warning("screenshot failed for %s: %s", self.scenario_name, e)
        # HTML
        try:
            p = self.path(f"{prefix}.html")
            p.write_text(page.content(), encoding="utf-8")
            self.record(p)
        except Exception as e:
            logger.warning("html dump failed for %s: %s", self.scenario_name, e)
