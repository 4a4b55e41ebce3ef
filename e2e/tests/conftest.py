from datetime import datetime
from pathlib import Path

import pytest
from dotenv import load_dotenv
from playwright.sync_api import sync_playwright

from demo_e2e.core.artifacts import safe_name
from demo_e2e.core.config import RunConfig, env_true
from demo_e2e.core.runner import ScenarioRunner


def pytest_collection_modifyitems(config, items):
    # 実サイトに行くテストは E2E_LIVE=1 のときだけ
    if env_true("E2E_LIVE"):
        return
    skip_live = pytest.mark.skip(reason="live demo sites: set E2E_LIVE=1")
    for item in items:
        if item.get_closest_marker("e2e") is not None:
            item.add_marker(skip_live)


@pytest.fixture(scope="session", autouse=True)
def _load_env():
    load_dotenv()


# ---------------------------------------------------------------- offline


@pytest.fixture()
def run_config(tmp_path):
    return RunConfig(
        artifact_dir=tmp_path / "artifacts",
        screenshot_dir=tmp_path / "shots",
        timeout_ms=300,
        nav_timeout_ms=300,
        expect_timeout_ms=300,
        poll_interval_sec=0.01,
        trace=False,
        api_token="test-token",
    )


@pytest.fixture()
def runner(run_config):
    return ScenarioRunner(run_config)


# ------------------------------------------------------------------- live


@pytest.fixture(scope="session")
def live_config():
    return RunConfig.from_env()


@pytest.fixture(scope="session")
def pw():
    with sync_playwright() as p:
        yield p


@pytest.fixture(scope="session")
def artifacts_base_dir(live_config):
    base = live_config.artifact_dir
    base.mkdir(parents=True, exist_ok=True)
    return base


@pytest.fixture(scope="session")
def context(pw, live_config):
    launch_kwargs = {
        "headless": live_config.headless,
        "slow_mo": live_config.slow_mo_ms,
    }
    if live_config.channel:
        launch_kwargs["channel"] = live_config.channel

    browser = pw.chromium.launch(**launch_kwargs)
    ctx = browser.new_context(accept_downloads=True)
    ctx.set_default_timeout(live_config.timeout_ms)
    ctx.set_default_navigation_timeout(live_config.nav_timeout_ms)

    yield ctx

    ctx.close()
    browser.close()


@pytest.fixture()
def page(context):
    """
    テストごとに新しいタブを作る
    """
    p = context.new_page()
    yield p
    p.close()


@pytest.fixture()
def tracing_stop(request, context, artifacts_base_dir, live_config):
    """
    テストごとに trace を保存する
    """
    sc = getattr(getattr(request.node, "callspec", None), "params", {}).get("sc")
    name = safe_name(getattr(sc, "name", None) or request.node.name)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = Path(artifacts_base_dir) / name
    out_dir.mkdir(parents=True, exist_ok=True)
    trace_path = out_dir / f"trace_{name}_{ts}.zip"

    state = {"tracing": False}
    if live_config.trace:
        context.tracing.start(screenshots=True, snapshots=True, sources=True)
        state["tracing"] = True

    def _stop():
        if state["tracing"]:
            state["tracing"] = False
            context.tracing.stop(path=str(trace_path))

    yield _stop

    _stop()
