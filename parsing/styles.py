"""Resolved-style lookup for visibility decisions.

There is no layout engine here, so "computed" style is approximated by
cascading three sources for the few properties that decide visibility
(``display``, ``visibility``, ``height``, ``width``):

1. user-agent defaults (non-rendered elements, ``[hidden]``,
   ``input[type=hidden]``);
2. author rules from every ``<style>`` block, matched with BeautifulSoup's
   CSS ``select``;
3. the inline ``style`` attribute.

Ordering follows the CSS cascade: ``!important`` first, then origin
(user agent < author < inline), then selector specificity, then source
order.  At-rule blocks (``@media``, ``@supports``, ...) are skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import soupsieve

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

logger = logging.getLogger("reader")

VISIBILITY_PROPERTIES = ("display", "visibility", "height", "width")

# Elements browsers never render.
UA_HIDDEN_TAGS = {
    "area",
    "base",
    "basefont",
    "datalist",
    "head",
    "link",
    "meta",
    "noembed",
    "noframes",
    "param",
    "rp",
    "script",
    "style",
    "template",
    "title",
}

_ORIGIN_UA = 0
_ORIGIN_AUTHOR = 1
_ORIGIN_INLINE = 2

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_ZERO_LENGTH_RE = re.compile(r"^[+-]?(?:0+(?:\.0*)?|\.0+)(?:[a-z%]+)?$")
_ATTR_SEL_RE = re.compile(r"\[[^\]]*\]")
_ID_SEL_RE = re.compile(r"#[\w-]+")
_CLASS_SEL_RE = re.compile(r"\.[\w-]+")
_PSEUDO_CLASS_RE = re.compile(r"(?<!:):[\w-]+")
_TYPE_SEL_RE = re.compile(r"(?:^|[\s>+~(,])([a-zA-Z][\w-]*)")


@dataclass(frozen=True)
class Declaration:
    """One cascaded property value with its cascade sort key."""

    prop: str
    value: str
    important: bool
    origin: int
    specificity: tuple[int, int, int]
    order: int

    @property
    def key(self) -> tuple:
        return (self.important, self.origin, self.specificity, self.order)


def parse_declarations(text: str) -> list[tuple[str, str, bool]]:
    """Split a declaration block into ``(property, value, important)`` triples.

    Only the visibility-relevant properties are kept.
    """
    result: list[tuple[str, str, bool]] = []
    for chunk in text.split(";"):
        if ":" not in chunk:
            continue
        prop, _, value = chunk.partition(":")
        prop = prop.strip().lower()
        if prop not in VISIBILITY_PROPERTIES:
            continue
        value = value.strip().lower()
        important = False
        if value.endswith("!important"):
            important = True
            value = value[: -len("!important")].strip()
        if value:
            result.append((prop, value, important))
    return result


def iter_style_rules(css: str) -> list[tuple[str, str]]:
    """Return the top-level ``(selector_text, declarations)`` rules in *css*.

    Rules nested in at-rule blocks and at-rule statements are skipped.
    """
    css = _COMMENT_RE.sub("", css)
    rules: list[tuple[str, str]] = []
    depth = 0
    start = 0
    prelude = ""
    skip_block = False
    for pos, ch in enumerate(css):
        if ch == "{":
            if depth == 0:
                prelude = css[start:pos].strip()
                skip_block = prelude.startswith("@")
                start = pos + 1
            depth += 1
        elif ch == "}":
            if depth == 0:
                # stray closing brace
                start = pos + 1
                continue
            depth -= 1
            if depth == 0:
                if not skip_block and prelude:
                    rules.append((prelude, css[start:pos]))
                start = pos + 1
        elif ch == ";" and depth == 0:
            # @import / @charset statements
            start = pos + 1
    return rules


def selector_specificity(selector: str) -> tuple[int, int, int]:
    """Approximate ``(ids, classes, types)`` specificity of one selector."""
    attrs = len(_ATTR_SEL_RE.findall(selector))
    bare = _ATTR_SEL_RE.sub(" ", selector)
    bare = bare.replace("::", " ")
    ids = len(_ID_SEL_RE.findall(bare))
    classes = len(_CLASS_SEL_RE.findall(bare)) + attrs
    classes += len(_PSEUDO_CLASS_RE.findall(bare))
    no_hash = _ID_SEL_RE.sub(" ", _CLASS_SEL_RE.sub(" ", _PSEUDO_CLASS_RE.sub(" ", bare)))
    types = len(_TYPE_SEL_RE.findall(no_hash))
    return (ids, classes, types)


def is_zero_length(value: str) -> bool:
    return bool(_ZERO_LENGTH_RE.match(value.strip()))


class StyleResolver:
    """Cascade visibility-relevant properties for the elements of one soup.

    Author rules are matched once at construction, so later removals
    (including of the ``<style>`` elements themselves) do not change what
    the remaining elements resolve to.
    """

    def __init__(self, soup: BeautifulSoup) -> None:
        self._author: dict[int, list[Declaration]] = {}
        self._order = 0
        for style_el in soup.find_all("style"):
            css = style_el.string or style_el.get_text()
            if css:
                self._add_stylesheet(soup, css)

    def _add_stylesheet(self, soup: BeautifulSoup, css: str) -> None:
        for selector_text, block in iter_style_rules(css):
            decls = parse_declarations(block)
            if not decls:
                continue
            for selector in selector_text.split(","):
                selector = selector.strip()
                if not selector:
                    continue
                try:
                    matches = soup.select(selector)
                except (soupsieve.SelectorSyntaxError, NotImplementedError) as exc:
                    logger.debug("unsupported selector %r: %s", selector, exc)
                    continue
                specificity = selector_specificity(selector)
                for prop, value, important in decls:
                    self._order += 1
                    decl = Declaration(
                        prop=prop,
                        value=value,
                        important=important,
                        origin=_ORIGIN_AUTHOR,
                        specificity=specificity,
                        order=self._order,
                    )
                    for el in matches:
                        self._author.setdefault(id(el), []).append(decl)

    def _ua_declarations(self, el: Tag) -> list[Declaration]:
        hidden = (
            el.name in UA_HIDDEN_TAGS
            or el.has_attr("hidden")
            or (el.name == "input" and str(el.get("type", "")).lower() == "hidden")
        )
        if not hidden:
            return []
        return [Declaration("display", "none", False, _ORIGIN_UA, (0, 0, 0), 0)]

    def _inline_declarations(self, el: Tag) -> list[Declaration]:
        style = el.get("style")
        if not style or not isinstance(style, str):
            return []
        return [
            Declaration(prop, value, important, _ORIGIN_INLINE, (0, 0, 0), 0)
            for prop, value, important in parse_declarations(style)
        ]

    def resolve(self, el: Tag) -> dict[str, str]:
        """Return the winning value for each visibility property set on *el*."""
        decls = self._ua_declarations(el)
        decls.extend(self._author.get(id(el), ()))
        decls.extend(self._inline_declarations(el))
        winners: dict[str, Declaration] = {}
        for decl in decls:
            current = winners.get(decl.prop)
            if current is None or decl.key >= current.key:
                winners[decl.prop] = decl
        return {prop: decl.value for prop, decl in winners.items()}

    def is_hidden(self, el: Tag) -> bool:
        """True when *el* resolves to invisible or zero-sized."""
        style = self.resolve(el)
        if style.get("visibility") == "hidden":
            return True
        if style.get("display") == "none":
            return True
        for prop in ("height", "width"):
            value = style.get(prop)
            if value is not None and is_zero_length(value):
                return True
        return False
