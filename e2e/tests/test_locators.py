import pytest

from demo_e2e.core.errors import HarnessError
from demo_e2e.core.locators import css, lookup, query_from_dict, resolve, role, text

from fakes import FakePage


@pytest.fixture()
def page():
    p = FakePage()
    nav = p.add(selectors="nav")
    p.add(selectors="a", text="Home", role="link", name="Home", parent=nav)
    p.add(selectors="a", text="News", role="link", name="News", parent=nav)
    p.add(selectors="a", text="Home", role="link", name="Home footer")
    p.add(role="heading", name="Installation", text="Installation")
    return p


def test_css_with_parent_and_filter(page):
    loc = resolve(page, css("a", has_text="Home", within=css("nav")))

    assert loc.count() == 1


def test_role_exact_and_nth(page):
    assert resolve(page, role("link", "Home")).count() == 2
    assert resolve(page, role("link", "Home", exact=True)).count() == 1
    assert resolve(page, role("link", nth=2)).text_content() == "Home"


def test_text_query(page):
    assert resolve(page, text("install")).count() == 1
    assert resolve(page, text("install", exact=True)).count() == 0


def test_resolution_is_deferred(page):
    loc = resolve(page, css("a", has_text="Contact"))
    assert loc.count() == 0

    page.add(selectors="a", text="Contact")

    assert loc.count() == 1


def test_lookup_alias():
    q = css("#menu")

    assert lookup("menu", {"menu": q}) is q
    assert lookup(q, {}) is q
    assert lookup(None, {}) is None
    with pytest.raises(HarnessError):
        lookup("other", {"menu": q})


def test_query_from_dict_requires_single_kind():
    assert query_from_dict({"text": "Hi", "exact": True}) == text("Hi", exact=True)
    with pytest.raises(ValueError):
        query_from_dict({"name": "x"})
    with pytest.raises(ValueError):
        query_from_dict("#menu")


def test_describe():
    q = css("a", has_text="Home", nth=0, within=css("#menu"))

    assert q.describe() == "css='#menu' >> css='a' has_text='Home' nth=0"
