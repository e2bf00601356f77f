"""
Minimal markup matching for view assertions.

Rendered HTML is parsed into a light element tree and matched against a
small selector language: ``tag``, ``#id``, ``.class``, ``[attr]`` and
``[attr=value]`` compounds, joined by whitespace for descendants.
"""

import re
from dataclasses import dataclass, field
from html.parser import HTMLParser

from shouldkit.core.errors import ConfigurationError

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)

_COMPOUND = re.compile(
    r"""
    (?P<tag>[a-zA-Z][\w-]*|\*)?
    (?P<rest>(?:\#[\w-]+|\.[\w-]+|\[[\w-]+(?:=(?:"[^"]*"|'[^']*'|[^\]]*))?\])*)
    """,
    re.VERBOSE,
)
_PART = re.compile(r"""\#(?P<id>[\w-]+)|\.(?P<cls>[\w-]+)|\[(?P<attr>[\w-]+)(?:=(?P<value>"[^"]*"|'[^']*'|[^\]]*))?\]""")


@dataclass
class Element:
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list["Element"] = field(default_factory=list)
    parent: "Element | None" = field(default=None, repr=False, compare=False)

    @property
    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()

    def walk(self) -> list["Element"]:
        found: list[Element] = []
        for child in self.children:
            found.append(child)
            found.extend(child.walk())
        return found


@dataclass(frozen=True)
class Compound:
    """One selector step, e.g. ``input#email.wide[type=text]``."""

    tag: str | None = None
    id: str | None = None
    classes: tuple[str, ...] = ()
    attrs: tuple[tuple[str, str | None], ...] = ()

    def matches(self, element: Element) -> bool:
        if self.tag and self.tag != "*" and element.tag != self.tag.lower():
            return False
        if self.id and element.attrs.get("id") != self.id:
            return False
        if any(c not in element.classes for c in self.classes):
            return False
        for name, value in self.attrs:
            if name not in element.attrs:
                return False
            if value is not None and element.attrs[name] != value:
                return False
        return True


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Element(tag="#document")
        self._current = self.root

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = Element(tag=tag, attrs={k: v or "" for k, v in attrs}, parent=self._current)
        self._current.children.append(element)
        if tag not in VOID_ELEMENTS:
            self._current = element

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = Element(tag=tag, attrs={k: v or "" for k, v in attrs}, parent=self._current)
        self._current.children.append(element)

    def handle_endtag(self, tag: str) -> None:
        node: Element | None = self._current
        while node is not None and node is not self.root:
            if node.tag == tag:
                self._current = node.parent or self.root
                return
            node = node.parent
        # Stray end tag: ignore it.


def parse_markup(markup: str) -> Element:
    """Parse HTML into an element tree rooted at a ``#document`` element."""
    builder = _TreeBuilder()
    builder.feed(markup)
    builder.close()
    return builder.root


def parse_selector(selector: str) -> list[Compound]:
    """
    Parse a descendant selector into compound steps.

    Raises:
        ConfigurationError: If the selector uses unsupported syntax.
    """
    steps: list[Compound] = []
    for token in _split(selector):
        match = _COMPOUND.fullmatch(token)
        if not match or not token:
            raise ConfigurationError(f"Unsupported selector: {selector!r}")
        ids: list[str] = []
        classes: list[str] = []
        attrs: list[tuple[str, str | None]] = []
        for part in _PART.finditer(match.group("rest") or ""):
            if part.group("id"):
                ids.append(part.group("id"))
            elif part.group("cls"):
                classes.append(part.group("cls"))
            else:
                value = part.group("value")
                if value is not None and value[:1] in "\"'" and value[-1:] == value[:1] and len(value) > 1:
                    value = value[1:-1]
                attrs.append((part.group("attr"), value))
        if len(ids) > 1:
            raise ConfigurationError(f"Selector step {token!r} has more than one id")
        steps.append(
            Compound(tag=match.group("tag"), id=ids[0] if ids else None, classes=tuple(classes), attrs=tuple(attrs))
        )
    if not steps:
        raise ConfigurationError("Selector must not be empty")
    return steps


def _split(selector: str) -> list[str]:
    """Split on whitespace outside of brackets."""
    tokens: list[str] = []
    current: list[str] = []
    depth = 0
    for ch in selector.strip():
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        if ch.isspace() and depth == 0:
            if current:
                tokens.append("".join(current))
                current = []
            continue
        current.append(ch)
    if current:
        tokens.append("".join(current))
    return tokens


def select(root: Element, selector: str) -> list[Element]:
    """Return every element matching ``selector``, in document order."""
    steps = parse_selector(selector)
    found: list[Element] = []
    for element in root.walk():
        if steps[-1].matches(element) and _ancestors_match(element, steps[:-1]):
            found.append(element)
    return found


def _ancestors_match(element: Element, steps: list[Compound]) -> bool:
    if not steps:
        return True
    node = element.parent
    while node is not None:
        if steps[-1].matches(node) and _ancestors_match(node, steps[:-1]):
            return True
        node = node.parent
    return False


def has_tag(markup: str, selector: str) -> bool:
    """Check whether the markup contains at least one element matching ``selector``."""
    return bool(select(parse_markup(markup), selector))
