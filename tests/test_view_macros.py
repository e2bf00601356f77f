"""Tests for markup matching and view macros."""

import pytest
from jinja2 import DictLoader, Environment

from shouldkit.core.errors import ConfigurationError
from shouldkit.macros.markup import has_tag, parse_markup, parse_selector, select
from shouldkit.macros.views import ViewMacros

SIGNUP = """
<html>
  <body>
    <form id="signup" class="form wide" action="/users">
      <label for="email">Email</label>
      <input type="text" name="email" id="email">
      <input type="password" name="password"/>
      <br>
      <button class="primary">Sign up</button>
    </form>
    <p class="note">Already have an account?</p>
  </body>
</html>
"""


class TestSelectors:
    """Tests for parse_selector."""

    def test_compound(self):
        (step,) = parse_selector("input#email.wide[type=text]")

        assert step.tag == "input"
        assert step.id == "email"
        assert step.classes == ("wide",)
        assert step.attrs == (("type", "text"),)

    def test_quoted_attribute_value(self):
        (step,) = parse_selector('input[name="user[email]"]')

        assert step.attrs == (("name", "user[email]"),)

    def test_descendants(self):
        steps = parse_selector("form#signup  input[name]")

        assert [s.tag for s in steps] == ["form", "input"]
        assert steps[1].attrs == (("name", None),)

    @pytest.mark.parametrize("selector", ["", "   ", "div > p", "a:hover", "#one#two"])
    def test_unsupported(self, selector):
        with pytest.raises(ConfigurationError):
            parse_selector(selector)


class TestMarkup:
    """Tests for parsing and matching markup."""

    def test_void_elements_do_not_nest(self):
        root = parse_markup(SIGNUP)
        (form,) = select(root, "form")

        assert [child.tag for child in form.children] == ["label", "input", "input", "br", "button"]

    def test_has_tag(self):
        assert has_tag(SIGNUP, "form#signup")
        assert has_tag(SIGNUP, "form.wide input[name=email]")
        assert has_tag(SIGNUP, "body button.primary")
        assert not has_tag(SIGNUP, "form p.note")
        assert not has_tag(SIGNUP, "input[name=username]")

    def test_select_in_document_order(self):
        inputs = select(parse_markup(SIGNUP), "input")

        assert [i.attrs["name"] for i in inputs] == ["email", "password"]

    def test_stray_end_tag_is_ignored(self):
        assert has_tag("<div></span><p>hi</p></div>", "div p")


class TestViewMacros:
    """Tests for ViewMacros."""

    @pytest.fixture
    def environment(self):
        return Environment(
            loader=DictLoader(
                {
                    "users/new.html": (
                        '<form id="signup">'
                        '{% for field in fields %}<input name="{{ field }}">{% endfor %}'
                        "</form>"
                    )
                }
            )
        )

    def test_template(self, environment):
        view = ViewMacros.for_template(environment, "users/new.html", lambda: {"fields": ["email"], "field": "email"})
        view.it_should_have_tag_for("signup form", "form#signup")
        view.it_should_have_tag_for("email field", "form#signup input[name={field}]")
        view.it_should_have_tag_for("password field", "input[name=password]")

        assert [c.full_description for c in view] == [
            "users/new.html should have a signup form",
            "users/new.html should have a email field",
            "users/new.html should have a password field",
        ]
        assert [r.passed for r in view.run()] == [True, True, False]

    def test_callable_selector(self):
        view = ViewMacros(lambda values: "<ul><li class='item'>one</li></ul>", description="list")
        view.it_should_have_tag_for("list item", lambda: "ul li.item")

        assert [r.passed for r in view.run()] == [True]

    def test_bad_selector_fails_early(self):
        view = ViewMacros(lambda values: "")

        with pytest.raises(ConfigurationError):
            view.it_should_have_tag_for("link", "a:hover")

    def test_failure_message(self):
        view = ViewMacros(lambda values: "<div></div>")
        case = view.it_should_have_tag_for("table", "table")

        with pytest.raises(AssertionError, match="Expected markup to contain 'table'"):
            case.run()
