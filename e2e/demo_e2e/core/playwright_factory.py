from __future__ import annotations

import logging
from dataclasses import dataclass

from playwright.sync_api import sync_playwright, Browser, BrowserContext, Playwright

from .config import RunConfig

logger = logging.getLogger(__name__)


@dataclass
class PWContextBundle:
    playwright: Playwright
    browser: Browser
    context: BrowserContext


def create_context(config: RunConfig) -> PWContextBundle:
    """
    毎回新規 context（プロファイル共有なし）。ダウンロードを受けるので accept_downloads。
    """
    pw = sync_playwright().start()

    launch_kwargs = {"headless": config.headless, "slow_mo": config.slow_mo_ms}
    if config.channel:
        launch_kwargs["channel"] = config.channel

    browser = pw.chromium.launch(**launch_kwargs)
    context = browser.new_context(accept_downloads=True)

    # タイムアウト統一
    context.set_default_timeout(config.timeout_ms)
    context.set_default_navigation_timeout(config.nav_timeout_ms)

    logger.info(
        "browser started (headless=%s channel=%s)", config.headless, config.channel or "chromium"
    )
    return PWContextBundle(playwright=pw, browser=browser, context=context)


def close_context(bundle: PWContextBundle) -> None:
    for name, close in (
        ("context", bundle.context.close),
        ("browser", bundle.browser.close),
        ("playwright", bundle.playwright.stop),
    ):
        try:
            close()
        except Exception as e:
            logger.debug("%s close failed: %s", name, e)
