"""
View macros.

A view group renders markup (by default a jinja2 template) and checks the
result for expected elements.

Usage:
    env = Environment(loader=PackageLoader("myapp"))
    signup = ViewMacros.for_template(env, "users/new.html", lambda: {"user": User()})
    signup.it_should_have_tag_for("signup form", "form#signup")
    signup.it_should_have_tag_for("email field", "form#signup input[name={field}]")
"""

from collections.abc import Callable, Mapping
from typing import Any

from jinja2 import Environment

from shouldkit.core.models import TestCase
from shouldkit.macros.base import MacroGroup
from shouldkit.macros.markup import has_tag, parse_selector

Context = Callable[[], Mapping[str, Any]]


class ViewMacros(MacroGroup):
    """
    Macros for rendered markup.

    ``render`` takes the render context and returns markup. String selectors
    are formatted with the same context, so ``input[name={field}]`` picks up
    ``field`` from it.
    """

    def __init__(
        self,
        render: Callable[[Mapping[str, Any]], str],
        *,
        context: Context | None = None,
        description: str = "",
    ):
        """Initialize the group with a render function and context factory."""
        super().__init__(description)
        self.render = render
        self.context: Context = context or dict
        self.act(self._render_view)

    @classmethod
    def for_template(
        cls,
        environment: Environment,
        template_name: str,
        context: Context | None = None,
    ) -> "ViewMacros":
        """Build a group that renders ``template_name`` from a jinja2 environment."""

        def render(values: Mapping[str, Any]) -> str:
            return environment.get_template(template_name).render(**values)

        return cls(render, context=context, description=template_name)

    def _render_view(self) -> tuple[str, Mapping[str, Any]]:
        values = self.context()
        return self.render(values), values

    def it_should_have_tag_for(self, name: str, selector: str | Callable[[], str]) -> TestCase:
        """
        The rendered view contains an element matching ``selector``.

        ``name`` describes the element in the case description.
        """
        if isinstance(selector, str) and "{" not in selector:
            parse_selector(selector)

        def has_element() -> None:
            markup, values = self.do_act()
            resolved = selector() if callable(selector) else selector.format(**values)
            assert has_tag(markup, resolved), f"Expected markup to contain {resolved!r}"

        return self.it(f"should have a {name}", has_element)
