import pytest

from demo_e2e.core.errors import ScenarioDefinitionError
from demo_e2e.core.types import Act, Assert, Scenario
from demo_e2e.flows.key_press_flow import DEFAULT_KEYS, build_key_presses, expected_echo
from demo_e2e.flows.router import FLOWS, build_flow
from demo_e2e.selectors import internet_selectors as S
from demo_e2e.selectors import users_api_selectors as U

from fake_sites import BASE, USER, make_internet_page, notification_page
from fakes import FakeAPIResponse, FakePage


def _scenario(flow, name=None, **params):
    return Scenario(name=name or flow, steps=tuple(build_flow(flow, params)))


# --------------------------------------------------------------- key presses


@pytest.mark.parametrize(
    "key, shown, echo",
    [
        ("A", None, "You entered: A"),
        ("z", None, "You entered: Z"),
        ("ArrowUp", "UP", "You entered: UP"),
        ("Enter", None, "You entered: ENTER"),
    ],
)
def test_expected_echo(key, shown, echo):
    assert expected_echo(key, shown) == echo


def test_key_presses_echo_is_the_same_on_every_run(runner):
    first = build_key_presses({})
    second = build_key_presses({})
    assert first == second

    for _ in range(2):
        page = make_internet_page()
        result = runner.execute(Scenario(name="keys", steps=tuple(first)), page)
        assert result.outcome == "passed", result.reason

    pressed = [e[1] for e in page.log if e[0] == "press"]
    assert pressed[: len(DEFAULT_KEYS)] == [k for k, _ in DEFAULT_KEYS]
    assert ("key_down", "Control") in page.log and ("key_up", "Control") in page.log


def test_key_presses_custom_keys():
    steps = build_key_presses({"keys": ["b", {"key": "ArrowLeft", "shown": "LEFT"}], "combo": False})

    asserts = [s.expected for s in steps if isinstance(s, Assert)]
    assert asserts == ["You entered: B", "You entered: LEFT"]


def test_key_presses_rejects_bad_entry():
    with pytest.raises(ScenarioDefinitionError):
        build_key_presses({"keys": [42]})


# -------------------------------------------------------------- notification


def test_notification_message_is_always_a_known_text(runner):
    page = make_internet_page()

    result = runner.execute(_scenario("notification", times=5), page)

    assert result.outcome == "passed", result.reason
    clicks = [e for e in page.log if e == ("click", S.NOTIFICATION_LINK_SELECTOR)]
    assert len(clicks) == 5


def test_notification_unknown_text_fails(runner):
    page = make_internet_page(notification_messages=["Something else"])

    result = runner.execute(_scenario("notification", times=2), page)

    assert result.outcome == "failed"
    assert result.failure.kind == "AssertionMismatch"
    assert result.failure.actual == "Something else"


def test_notification_waits_before_reading():
    steps = build_flow("notification", {"times": 1})
    kinds = [type(s).__name__ + ":" + getattr(s, "kind", getattr(s, "condition", getattr(s, "check", ""))) for s in steps]

    click = kinds.index("Act:click")
    read = kinds.index("Assert:text_in")
    assert "WaitFor:text" in kinds[click:read]
    assert steps[click].params == {"wait_navigation": True}


def test_notification_reads_the_new_message_not_the_old_one(runner):
    # 再読込までの 0.1 秒間は前回の "Action successful" が残っている
    page = FakePage(routes={BASE + S.NOTIFICATION_PATH: notification_page(["Something else"], delay=0.1)})

    result = runner.execute(_scenario("notification", times=1, base_url=BASE), page)

    assert result.outcome == "failed"
    assert result.failure.step_index == 6
    assert result.failure.actual == "Something else"


# ------------------------------------------------------------ download/upload


def test_download_then_upload_shows_same_filename(runner, run_config):
    page = make_internet_page()

    result = runner.execute(_scenario("download_upload", name="roundtrip"), page)

    assert result.outcome == "passed", result.reason
    saved = run_config.artifact_dir / "roundtrip" / "downloads" / "report 2024.txt"
    assert saved.read_bytes() == b"hello"
    uploads = [e for e in page.log if e[0] == "set_input_files"]
    assert uploads[0][2] == [str(saved)]


def test_download_second_link(runner, run_config):
    page = make_internet_page()

    result = runner.execute(_scenario("download_upload", name="second", link_index=1), page)

    assert result.outcome == "passed", result.reason
    assert (run_config.artifact_dir / "second" / "downloads" / "other.png").exists()


# ------------------------------------------------------------------- menus


def test_floating_menu_keeps_position_and_links(runner, run_config):
    page = make_internet_page()

    result = runner.execute(_scenario("floating_menu"), page)

    assert result.outcome == "passed", result.reason
    shot = run_config.screenshot_dir / S.FLOATING_MENU_SCREENSHOT
    assert shot.exists()
    assert shot in result.artifacts


def test_floating_menu_drift_beyond_tolerance_fails(runner):
    from fake_sites import BASE, floating_menu_page

    page = make_internet_page()
    page.routes[BASE + S.FLOATING_MENU_PATH] = lambda p: floating_menu_page(p, drift=3.0)

    result = runner.execute(_scenario("floating_menu"), page)

    assert result.outcome == "failed"
    assert result.failure.kind == "AssertionMismatch"
    assert result.failure.step.startswith("assert close_to")


def test_jqueryui_menu_hover_opens_submenus(runner):
    page = make_internet_page()

    result = runner.execute(_scenario("jqueryui_menu"), page)

    assert result.outcome == "passed", result.reason
    actions = [e[:2] for e in page.log if e[0] in ("hover", "click")]
    assert actions == [
        ("hover", S.JQUERY_ENABLED_SELECTOR),
        ("hover", S.JQUERY_DOWNLOADS_SELECTOR),
        ("click", S.JQUERY_CSV_SELECTOR),
    ]


def test_jqueryui_disabled_item(runner):
    result = runner.execute(_scenario("jqueryui_menu_disabled"), make_internet_page())

    assert result.outcome == "passed", result.reason


# --------------------------------------------------------------------- docs


def test_docs_flows(runner):
    for flow in ("docs_title", "docs_get_started"):
        result = runner.execute(_scenario(flow), make_internet_page())
        assert result.outcome == "passed", result.reason


# ---------------------------------------------------------------- users API


def test_users_api_sends_bearer_token(runner):
    page = make_internet_page()

    result = runner.execute(_scenario("users_api", query={"limit": 20}), page)

    assert result.outcome == "passed", result.reason
    call = page.request.calls[0]
    assert call["headers"]["Authorization"] == "Bearer test-token"
    assert call["params"] == {"limit": 20}
    assert page.request.responses[U.USERS_API_URL].disposed


def test_users_api_empty_list_passes(runner):
    page = make_internet_page()
    page.request.responses[U.USERS_API_URL] = FakeAPIResponse(200, U.USERS_API_URL, {"users": []})

    assert runner.execute(_scenario("users_api"), page).outcome == "passed"


def test_users_api_missing_field_fails(runner):
    page = make_internet_page()
    broken = {k: v for k, v in USER.items() if k != "modified"}
    page.request.responses[U.USERS_API_URL] = FakeAPIResponse(200, U.USERS_API_URL, {"users": [USER, broken]})

    result = runner.execute(_scenario("users_api"), page)

    assert result.failure.kind == "AssertionMismatch"
    assert "users[1]" in result.failure.message
    assert "modified" in result.failure.message


def test_users_api_status_mismatch(runner):
    page = make_internet_page()
    page.request.responses[U.USERS_API_URL] = FakeAPIResponse(401, U.USERS_API_URL, {"error": "unauthorized"})

    result = runner.execute(_scenario("users_api"), page)

    assert result.failure.kind == "HTTPStatusMismatch"
    assert result.failure.expected == 200
    assert result.failure.actual == 401
    assert result.failure.step_index == 2


def test_users_api_users_not_array(runner):
    page = make_internet_page()
    page.request.responses[U.USERS_API_URL] = FakeAPIResponse(200, U.USERS_API_URL, {"users": {"a": 1}})

    result = runner.execute(_scenario("users_api"), page)

    assert result.failure.kind == "AssertionMismatch"
    assert result.failure.actual == "dict"


def test_users_api_unknown_query_key():
    with pytest.raises(ScenarioDefinitionError):
        build_flow("users_api", {"query": {"page": 2}})


def test_users_api_flow_does_not_touch_the_browser():
    steps = build_flow("users_api", {})

    assert isinstance(steps[0], Act) and steps[0].kind == "request"
    assert not Scenario(name="api", steps=tuple(steps)).uses_page


# ------------------------------------------------------------------- router


def test_unknown_flow():
    with pytest.raises(ScenarioDefinitionError):
        build_flow("gacha")


def test_every_flow_builds_with_defaults():
    for name in FLOWS:
        assert build_flow(name), name
