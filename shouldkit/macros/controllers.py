"""
Controller macros.

Each case performs the group's action and inspects what came back: an
``ActionResult`` carrying the ``httpx.Response``, the variables the
handler assigned, and the template it rendered. An action that returns a
bare ``httpx.Response`` (a Starlette or FastAPI ``TestClient`` call, for
instance) is wrapped automatically.

Usage:
    users = ControllerMacros("GET /users")

    @users.act
    def index():
        return ActionResult(response=client.get("/users"), assigns={"users": [...]})

    users.it_should_be_success()
    users.it_should_assign("users")
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from shouldkit.core.errors import ConfigurationError
from shouldkit.core.models import TestCase
from shouldkit.macros.base import MacroGroup


@dataclass
class ActionResult:
    """What an action produced."""

    response: httpx.Response
    assigns: Mapping[str, Any] = field(default_factory=dict)
    template: str | None = None

    @classmethod
    def wrap(cls, result: Any) -> "ActionResult":
        """Coerce an action's return value into an ActionResult."""
        if isinstance(result, ActionResult):
            return result
        if isinstance(result, httpx.Response):
            return cls(response=result)
        raise ConfigurationError(
            f"Actions must return an ActionResult or httpx.Response, got {type(result).__name__}"
        )


def _describe_route(route: Any, hint: str | None) -> str:
    if hint:
        return repr(hint)
    if isinstance(route, str):
        return repr(route)
    return getattr(route, "__name__", repr(route))


class ControllerMacros(MacroGroup):
    """Macros for actions that produce an HTTP response."""

    def __init__(self, description: str = "", act: Callable[[], Any] | None = None):
        """Initialize the group, optionally with its action."""
        super().__init__(description)
        if act is not None:
            self.act(act)

    def perform(self) -> ActionResult:
        """Run the action and wrap its result."""
        return ActionResult.wrap(self.do_act())

    def it_should_assign(
        self,
        variable_name: str,
        value: Any = None,
        *,
        factory: Callable[[], Any] | None = None,
    ) -> TestCase:
        """
        The action assigns ``variable_name``.

        With ``value`` (or ``factory``, evaluated when the case runs) the
        assigned value must equal it; otherwise it must not be None.
        """

        def assigned() -> None:
            result = self.perform()
            actual = result.assigns.get(variable_name)
            if value is not None:
                assert actual == value, f"Expected {variable_name} to be {value!r}, got {actual!r}"
            elif factory is not None:
                expected = factory()
                assert actual == expected, f"Expected {variable_name} to be {expected!r}, got {actual!r}"
            else:
                assert actual is not None, f"Expected {variable_name} to be assigned"

        return self.it(f"should assign {variable_name}", assigned)

    def it_should_be_success(self) -> TestCase:
        """The response has a 2xx status."""

        def success() -> None:
            response = self.perform().response
            assert response.is_success, f"Expected a success status, got {response.status_code}"

        return self.it("should be a success", success)

    def it_should_be_forbidden(self) -> TestCase:
        """The response is 403 Forbidden."""

        def forbidden() -> None:
            response = self.perform().response
            assert response.status_code == httpx.codes.FORBIDDEN, (
                f"Expected status 403, got {response.status_code}"
            )

        return self.it("should be forbidden", forbidden)

    def it_should_render_template(self, template: str) -> TestCase:
        """The action renders ``template``."""

        def renders() -> None:
            rendered = self.perform().template
            assert rendered == template, f"Expected template {template!r}, rendered {rendered!r}"

        return self.it(f"should render the {template} template", renders)

    def it_should_redirect_to(self, route: str | Callable[[], str], *, hint: str | None = None) -> TestCase:
        """
        The response redirects to ``route``.

        A callable route is evaluated when the case runs; ``hint`` replaces
        it in the description.
        """

        def redirects() -> None:
            response = self.perform().response
            expected = route() if callable(route) else route
            location = response.headers.get("location")
            assert response.is_redirect, f"Expected a redirect, got status {response.status_code}"
            assert location == expected, f"Expected redirect to {expected!r}, got {location!r}"

        return self.it(f"should redirect to {_describe_route(route, hint)}", redirects)

    def it_should_expect(self, message: str, setup: Callable[[], Any]) -> TestCase:
        """
        Run ``setup`` (which installs expectations, typically mocks) and then the action.

        Example:
            it_should_expect("send a welcome email", lambda: mailer.expect_send("welcome"))
        """

        def expects() -> None:
            setup()
            self.perform()

        return self.it(f"should {message}", expects)

    it_should_expect_to = it_should_expect
