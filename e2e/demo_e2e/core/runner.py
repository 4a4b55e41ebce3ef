from __future__ import annotations

import logging
import re
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from playwright.sync_api import (
    BrowserContext,
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from .artifacts import Artifacts
from .config import RunConfig
from .errors import (
    AssertionMismatch,
    ElementNotFound,
    FileIOError,
    HarnessError,
    HTTPStatusMismatch,
    NavigationTimeout,
    WaitTimeout,
)
from .locators import lookup, resolve
from .report import RunReport
from .text import clean_text
from .types import (
    Act,
    Assert,
    Locate,
    Navigate,
    Query,
    Scenario,
    ScenarioResult,
    Step,
    StepFailure,
    Target,
    WaitFor,
    describe_step,
)
from .waits import close_to, poll

logger = logging.getLogger(__name__)

_VAR = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_.]*)\}")

JSON_TYPES = {
    "array": list,
    "object": dict,
    "string": str,
    "number": (int, float),
    "boolean": bool,
}


class _ScenarioState:
    def __init__(self, scenario: Scenario, page: Page, artifacts: Artifacts, variables: Dict[str, Any]):
        self.scenario = scenario
        self.page = page
        self.artifacts = artifacts
        self.variables = variables
        self.aliases: Dict[str, Query] = {}


def interpolate(value: Any, variables: Dict[str, Any]) -> Any:
    """
    "${name}" 単体ならその値をそのまま（型も保持）、文字列中なら str() で埋め込む。
    """
    if isinstance(value, str):
        m = _VAR.fullmatch(value)
        if m:
            return _var(variables, m.group(1))
        return _VAR.sub(lambda mm: str(_var(variables, mm.group(1))), value)
    if isinstance(value, dict):
        return {k: interpolate(v, variables) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [interpolate(v, variables) for v in value]
    return value


def _var(variables: Dict[str, Any], name: str) -> Any:
    if name not in variables:
        raise HarnessError(f"Unknown variable: {name}")
    return variables[name]


def _interpolate_query(q: Query, variables: Dict[str, Any]) -> Query:
    return replace(
        q,
        value=interpolate(q.value, variables),
        name=interpolate(q.name, variables),
        has_text=interpolate(q.has_text, variables),
        within=_interpolate_query(q.within, variables) if q.within is not None else None,
    )


class ScenarioRunner:
    """
    Runs scenarios one by one. A failing step fails its own scenario only;
    the remaining steps of that scenario are skipped and the run moves on.
    """

    def __init__(self, config: RunConfig):
        self.config = config

    # ------------------------------------------------------------------ run

    def run(self, scenarios: Iterable[Scenario], context: BrowserContext) -> RunReport:
        report = RunReport()
        shared_page: Optional[Page] = None

        try:
            for sc in scenarios:
                base_vars = self.config.variables()
                reason = self.skip_reason(sc, base_vars)
                if reason:
                    logger.info("SKIP %s: %s", sc.name, reason, extra={"scenario": sc.name})
                    report.add(ScenarioResult(name=sc.name, outcome="skipped", skip_reason=reason))
                    continue

                artifacts = self._artifacts_for(sc)
                page: Optional[Page] = None
                try:
                    if self.config.page_per_scenario:
                        page = context.new_page()
                    else:
                        if shared_page is None:
                            shared_page = context.new_page()
                        page = shared_page
                    self._trace_start(context)
                except Exception as e:
                    # ページが開けなくてもこのシナリオだけ失敗扱いにして続ける
                    failure = _to_failure(e, 0, None)
                    logger.error("FAIL %s before first step: %s", sc.name, failure.message, extra={"scenario": sc.name})
                    if page is not None and self.config.page_per_scenario:
                        _close_page(page)
                    report.add(ScenarioResult(name=sc.name, outcome="failed", failure=failure))
                    continue

                try:
                    result = self.execute(sc, page, artifacts=artifacts, variables=base_vars)
                finally:
                    self._trace_stop(context, artifacts)
                    if self.config.page_per_scenario:
                        _close_page(page)
                result.artifacts = list(artifacts.written)
                report.add(result)
        finally:
            if shared_page is not None:
                _close_page(shared_page)

        out = report.write_json(self.config.artifact_dir / "report.json")
        logger.info("report written: %s", out)
        logger.info("\n%s", report.summary())
        return report

    def skip_reason(self, sc: Scenario, variables: Dict[str, Any]) -> Optional[str]:
        if sc.skip:
            return sc.skip
        missing = [r for r in sc.requires if not variables.get(r)]
        if missing:
            return f"missing required variables: {', '.join(missing)}"
        return None

    # -------------------------------------------------------------- execute

    def execute(
        self,
        sc: Scenario,
        page: Page,
        artifacts: Optional[Artifacts] = None,
        variables: Optional[Dict[str, Any]] = None,
    ) -> ScenarioResult:
        variables = dict(self.config.variables() if variables is None else variables)
        artifacts = artifacts or self._artifacts_for(sc)
        started = time.monotonic()

        reason = self.skip_reason(sc, variables)
        if reason:
            return ScenarioResult(name=sc.name, outcome="skipped", skip_reason=reason)

        state = _ScenarioState(sc, page, artifacts, variables)
        logger.info("RUN %s (%d steps)", sc.name, len(sc.steps), extra={"scenario": sc.name})

        steps_run = 0
        for index, step in enumerate(sc.steps, start=1):
            try:
                self._run_step(state, step)
                steps_run = index
            except Exception as e:
                failure = _to_failure(e, index, step)
                logger.error(
                    "FAIL %s at step %d (%s): %s",
                    sc.name,
                    index,
                    failure.step,
                    failure.message,
                    extra={"scenario": sc.name},
                )
                if sc.uses_page:
                    artifacts.save_debug(page, f"failed_step_{index:02d}")
                return ScenarioResult(
                    name=sc.name,
                    outcome="failed",
                    failure=failure,
                    steps_run=steps_run,
                    duration_sec=time.monotonic() - started,
                    artifacts=list(artifacts.written),
                )

        logger.info("PASS %s", sc.name, extra={"scenario": sc.name})
        return ScenarioResult(
            name=sc.name,
            outcome="passed",
            steps_run=steps_run,
            duration_sec=time.monotonic() - started,
            artifacts=list(artifacts.written),
        )

    def _run_step(self, state: _ScenarioState, step: Step) -> None:
        logger.debug("  %s", describe_step(step))
        try:
            if isinstance(step, Navigate):
                self._navigate(state, step)
            elif isinstance(step, Locate):
                state.aliases[step.alias] = step.query
            elif isinstance(step, Act):
                self._act(state, step)
            elif isinstance(step, WaitFor):
                self._wait(state, step)
            elif isinstance(step, Assert):
                self._assert(state, step)
            else:
                raise HarnessError(f"Unknown step: {step!r}")
        except PlaywrightTimeoutError as e:
            if isinstance(step, Navigate):
                raise NavigationTimeout(_first_line(e)) from e
            raise WaitTimeout(_first_line(e)) from e

    # ---------------------------------------------------------------- steps

    def _locator(self, state: _ScenarioState, target: Target) -> Locator:
        q = lookup(target, state.aliases)
        if q is None:
            raise HarnessError("This step needs a target locator")
        return resolve(state.page, _interpolate_query(q, state.variables))

    def _navigate(self, state: _ScenarioState, step: Navigate) -> None:
        url = interpolate(step.url, state.variables)
        state.page.goto(url, wait_until=step.wait_until, timeout=self.config.nav_timeout_ms)

    def _act(self, state: _ScenarioState, step: Act) -> None:
        page = state.page
        params = interpolate(step.params, state.variables)
        timeout = self.config.timeout_ms
        kind = step.kind

        if kind == "click":
            loc = self._locator(state, step.target)
            if params.get("wait_navigation"):
                # クリックで再読込されるページは、遷移完了まで待ってから次へ
                with page.expect_navigation(wait_until=params.get("wait_until", "load"), timeout=timeout):
                    loc.click(timeout=timeout)
            else:
                loc.click(timeout=timeout)
        elif kind == "hover":
            self._locator(state, step.target).hover(timeout=timeout)
        elif kind == "press":
            page.keyboard.press(params["key"])
        elif kind == "key_down":
            page.keyboard.down(params["key"])
        elif kind == "key_up":
            page.keyboard.up(params["key"])
        elif kind == "set_input_files":
            files = params["files"]
            files = [files] if isinstance(files, (str, Path)) else list(files)
            for f in files:
                if not Path(f).is_file():
                    raise FileIOError(f"Upload source not found: {f}")
            self._locator(state, step.target).set_input_files([str(f) for f in files], timeout=timeout)
        elif kind == "download":
            self._download(state, step, params)
        elif kind == "scroll_to_bottom":
            page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")
        elif kind == "scroll_by":
            page.evaluate(
                "([dx, dy]) => window.scrollBy(dx, dy)",
                [int(params.get("dx", 0)), int(params.get("dy", 0))],
            )
        elif kind == "measure":
            box = self._locator(state, step.target).bounding_box(timeout=timeout)
            if box is None:
                raise ElementNotFound("Element has no bounding box (not rendered)")
            state.variables[params.get("into", "box_y")] = box[params.get("field", "y")]
        elif kind == "screenshot":
            p = state.artifacts.screenshot_path(params["path"])
            page.screenshot(path=str(p), full_page=bool(params.get("full_page", False)))
            state.artifacts.record(p)
        elif kind == "request":
            self._request(state, params)
        else:
            raise HarnessError(f"Unknown act kind: {kind}")

    def _download(self, state: _ScenarioState, step: Act, params: Dict[str, Any]) -> None:
        """
        クリックとダウンロードイベント待ちを同時に仕掛ける（クリック後に待つと取りこぼす）。
        """
        loc = self._locator(state, step.target)
        with state.page.expect_download(timeout=self.config.timeout_ms) as dl_info:
            loc.click(timeout=self.config.timeout_ms)
        download = dl_info.value

        name = download.suggested_filename
        dest = state.artifacts.downloads_dir / name
        try:
            download.save_as(str(dest))
        except (OSError, PlaywrightError) as e:
            raise FileIOError(f"Could not save download {name!r}: {e}") from e
        if not dest.is_file():
            raise FileIOError(f"Download was not written: {dest}")

        prefix = params.get("into", "download")
        state.variables[f"{prefix}_name"] = name
        state.variables[f"{prefix}_path"] = str(dest)
        state.artifacts.record(dest)
        logger.info("downloaded %s -> %s", name, dest)

    def _request(self, state: _ScenarioState, params: Dict[str, Any]) -> None:
        api = state.page.request
        resp = api.fetch(
            params["url"],
            method=params.get("method", "GET"),
            headers=params.get("headers") or None,
            params=params.get("query") or None,
            timeout=self.config.timeout_ms,
        )
        try:
            try:
                body = resp.json()
            except Exception:
                body = None
            state.variables[params.get("into", "response")] = {
                "status": resp.status,
                "url": resp.url,
                "body": body,
            }
            logger.info("%s %s -> %s", params.get("method", "GET"), params["url"], resp.status)
        finally:
            resp.dispose()

    def _wait(self, state: _ScenarioState, step: WaitFor) -> None:
        timeout = step.timeout_ms if step.timeout_ms is not None else self.config.timeout_ms
        params = interpolate(step.params, state.variables)
        cond = step.condition

        if cond in ("visible", "hidden", "attached"):
            loc = self._locator(state, step.target)
            try:
                loc.wait_for(state=cond, timeout=timeout)
            except PlaywrightTimeoutError as e:
                if cond == "attached":
                    raise ElementNotFound(_first_line(e)) from e
                raise
        elif cond == "text":
            loc = self._locator(state, step.target)
            want = params.get("text")
            remove = params.get("remove", ())
            ok, last = poll(
                lambda: clean_text(loc.text_content(timeout=timeout) or "", remove),
                (lambda t: t == want) if want is not None else bool,
                timeout / 1000,
                self.config.poll_interval_sec,
            )
            if not ok:
                raise WaitTimeout(
                    f"Text did not appear within {timeout}ms",
                    expected=want if want is not None else "<non-empty>",
                    actual=last,
                )
        elif cond == "load":
            state.page.wait_for_load_state(params.get("state", "load"), timeout=timeout)
        elif cond == "timeout":
            state.page.wait_for_timeout(timeout)
        else:
            raise HarnessError(f"Unknown wait condition: {cond}")

    def _assert(self, state: _ScenarioState, step: Assert) -> None:
        timeout_ms = step.timeout_ms if step.timeout_ms is not None else self.config.expect_timeout_ms
        timeout_sec = timeout_ms / 1000
        sample_ms = timeout_ms
        interval = self.config.poll_interval_sec
        expected = interpolate(step.expected, state.variables)
        params = interpolate(step.params, state.variables)
        check = step.check
        page = state.page

        if check == "title":
            ok, last = poll(page.title, lambda t: re.search(expected, t or "") is not None, timeout_sec, interval)
            if not ok:
                raise AssertionMismatch("Page title does not match", expected, last)

        elif check == "visible":
            loc = self._locator(state, step.target)
            want = True if expected is None else bool(expected)
            ok, last = poll(loc.is_visible, lambda v: v == want, timeout_sec, interval)
            if not ok:
                raise AssertionMismatch(
                    "Visibility mismatch", "visible" if want else "hidden", "visible" if last else "hidden"
                )

        elif check in ("text", "text_in"):
            loc = self._locator(state, step.target)
            remove = params.get("remove", ())
            if check == "text":
                accept = lambda t: t == clean_text(str(expected))
            else:
                allowed = {clean_text(str(x)) for x in expected}
                accept = lambda t: t in allowed
            ok, last = poll(
                lambda: clean_text(loc.text_content(timeout=sample_ms) or "", remove),
                accept,
                timeout_sec,
                interval,
            )
            if not ok:
                raise AssertionMismatch("Text mismatch", expected, last)
            if params.get("log"):
                logger.info("%s: %r", params["log"], last)

        elif check == "attribute":
            loc = self._locator(state, step.target)
            attr = params["name"]
            ok, last = poll(
                lambda: loc.get_attribute(attr, timeout=sample_ms),
                lambda v: v == expected,
                timeout_sec,
                interval,
            )
            if not ok:
                raise AssertionMismatch(f"Attribute {attr!r} mismatch", expected, last)

        elif check == "close_to":
            loc = self._locator(state, step.target)
            tol = float(params.get("tolerance", 1.0))
            field = params.get("field", "y")
            ok, last = poll(
                lambda: (loc.bounding_box(timeout=sample_ms) or {})[field],
                lambda v: close_to(v, expected, tol),
                timeout_sec,
                interval,
            )
            if not ok:
                raise AssertionMismatch(f"Position {field} not within {tol}", expected, last)

        elif check == "file_exists":
            if not Path(str(expected)).is_file():
                raise FileIOError(f"File does not exist: {expected}", expected=expected)

        elif check == "status":
            resp = self._response(state, params)
            if resp["status"] != expected:
                raise HTTPStatusMismatch(f"{resp['url']} status", expected, resp["status"])

        elif check == "json_type":
            value = self._json_field(state, params)
            if not isinstance(value, JSON_TYPES[expected]) or (expected == "number" and isinstance(value, bool)):
                raise AssertionMismatch(
                    f"Field {params['field']!r} has wrong type", expected, type(value).__name__
                )

        elif check == "json_items_have":
            items = self._json_field(state, params)
            if not isinstance(items, list):
                raise AssertionMismatch(f"Field {params['field']!r} is not an array", "array", type(items).__name__)
            for i, item in enumerate(items):
                keys = item.keys() if isinstance(item, dict) else ()
                missing = [k for k in expected if k not in keys]
                if missing:
                    raise AssertionMismatch(
                        f"{params['field']}[{i}] is missing {missing}", list(expected), sorted(keys)
                    )

        else:
            raise HarnessError(f"Unknown assert check: {check}")

    def _response(self, state: _ScenarioState, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("var", "response")
        resp = state.variables.get(name)
        if not isinstance(resp, dict) or "status" not in resp:
            raise HarnessError(f"No response recorded in variable {name!r}")
        return resp

    def _json_field(self, state: _ScenarioState, params: Dict[str, Any]) -> Any:
        body = self._response(state, params)["body"]
        field = params["field"]
        if not isinstance(body, dict) or field not in body:
            raise AssertionMismatch("Response body has no property", field, body)
        return body[field]

    # --------------------------------------------------------------- helpers

    def _artifacts_for(self, sc: Scenario) -> Artifacts:
        return Artifacts(
            base_dir=self.config.artifact_dir,
            scenario_name=sc.name,
            screenshot_dir=self.config.screenshot_dir,
        )

    def _trace_start(self, context: BrowserContext) -> None:
        if not self.config.trace:
            return
        try:
            context.tracing.start(screenshots=True, snapshots=True, sources=True)
        except PlaywrightError as e:
            logger.warning("tracing start failed: %s", e)

    def _trace_stop(self, context: BrowserContext, artifacts: Artifacts) -> None:
        if not self.config.trace:
            return
        # trace保存（必ず）
        try:
            p = artifacts.path("trace.zip")
            context.tracing.stop(path=str(p))
            artifacts.record(p)
        except PlaywrightError as e:
            logger.warning("tracing stop failed: %s", e)


def _first_line(e: BaseException) -> str:
    s = str(e).strip()
    return s.splitlines()[0] if s else type(e).__name__


def _to_failure(e: Exception, index: int, step: Optional[Step]) -> StepFailure:
    if isinstance(e, HarnessError):
        kind = e.kind
        expected, actual = e.expected, e.actual
    else:
        kind = type(e).__name__
        expected = actual = None
    return StepFailure(
        kind=kind,
        message=_first_line(e),
        step_index=index,
        step=describe_step(step) if step is not None else "open page",
        expected=expected,
        actual=actual,
    )


def _close_page(page: Page) -> None:
    try:
        page.close()
    except PlaywrightError as e:
        logger.debug("page close failed: %s", e)
