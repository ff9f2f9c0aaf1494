"""Structural matchers over a parsed document tree.

A Matcher is a predicate on an element: tag name, attribute substring, and
optional ancestor/descendant relations. Matchers are grouped into ranked
families; extractors try each family in order and keep the first element
that matches with non-empty text.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from bs4 import Tag


@dataclass(frozen=True)
class Matcher:
    """Predicate on a single element.

    Attributes:
        tags: Accepted tag names; empty accepts any tag
        attr: Attribute to inspect (``class`` values are joined with spaces)
        contains: Substring the attribute value must contain (case-insensitive)
        equals: Token the attribute must contain exactly (e.g. class ``title``)
        has_descendant: Element must contain a descendant matching this
        inside: Element must have an ancestor matching this
    """
    tags: Tuple[str, ...] = ()
    attr: Optional[str] = None
    contains: Optional[str] = None
    equals: Optional[str] = None
    has_descendant: Optional["Matcher"] = None
    inside: Optional["Matcher"] = None

    def matches(self, element: Tag) -> bool:
        if not isinstance(element, Tag):
            return False
        if self.tags and element.name not in self.tags:
            return False
        if self.attr:
            value = _attr_text(element, self.attr)
            if value is None:
                return False
            if self.contains and self.contains.lower() not in value.lower():
                return False
            if self.equals and self.equals.lower() not in value.lower().split():
                return False
        if self.has_descendant and not any(
                self.has_descendant.matches(d) for d in element.find_all(True)):
            return False
        if self.inside and not any(
                self.inside.matches(p) for p in element.parents if isinstance(p, Tag)):
            return False
        return True

    def find_all(self, root: Tag) -> List[Tag]:
        """All descendants of root matching this predicate, in document order."""
        return [el for el in root.find_all(True) if self.matches(el)]

    def find_first(self, root: Tag) -> Optional[Tag]:
        for el in root.find_all(True):
            if self.matches(el):
                return el
        return None


def _attr_text(element: Tag, attr: str) -> Optional[str]:
    value = element.get(attr)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def tag(*names: str) -> Matcher:
    return Matcher(tags=tuple(names))


def class_contains(fragment: str, *names: str) -> Matcher:
    """Elements whose class attribute contains ``fragment``."""
    return Matcher(tags=tuple(names), attr="class", contains=fragment)


def class_is(token: str) -> Matcher:
    """Elements carrying exactly the class token ``token``."""
    return Matcher(attr="class", equals=token)


def first_text(root: Tag, family: Sequence[Matcher]) -> str:
    """Text of the first element matched by the highest-ranked matcher.

    Matchers are tried in rank order; within a matcher, elements are tried
    in document order until one has non-empty text.
    """
    for matcher in family:
        for element in matcher.find_all(root):
            text = " ".join(element.get_text(" ").split())
            if text:
                return text
    return ""


def outermost(elements: Iterable[Tag]) -> List[Tag]:
    """Drop elements nested inside another element of the same collection."""
    elements = list(elements)
    chosen = set(id(el) for el in elements)
    result = []
    for el in elements:
        if any(id(parent) in chosen for parent in el.parents):
            continue
        result.append(el)
    return result


@dataclass
class SelectorVocabulary:
    """Ranked matcher families used by the layout extractors."""
    card_families: List[Matcher] = field(default_factory=lambda: [
        class_contains("job-card"),
        class_contains("position-card"),
        class_contains("career-card"),
        class_contains("opening-card"),
        Matcher(attr="class", equals="card", has_descendant=class_contains("job")),
        Matcher(attr="class", equals="item", has_descendant=class_contains("position")),
    ])
    title: List[Matcher] = field(default_factory=lambda: [
        class_contains("job-title"),
        class_contains("position-title"),
        class_contains("role-title"),
        tag("h1", "h2", "h3"),
        class_is("title"),
        class_contains("heading"),
    ])
    location: List[Matcher] = field(default_factory=lambda: [
        class_contains("location"),
        class_contains("city"),
        class_contains("office"),
        class_contains("remote"),
    ])
    department: List[Matcher] = field(default_factory=lambda: [
        class_contains("department"),
        class_contains("team"),
        class_contains("division"),
    ])
    date: List[Matcher] = field(default_factory=lambda: [
        class_contains("date"),
        class_contains("posted"),
        class_contains("publish"),
        tag("time"),
    ])
    list_containers: List[Matcher] = field(default_factory=lambda: [
        class_contains("jobs-list"),
        class_contains("positions-list"),
        class_contains("careers-list"),
        class_contains("openings"),
        tag("ul", "ol"),
    ])
    list_items: List[Matcher] = field(default_factory=lambda: [
        tag("li"),
        class_is("item"),
    ])
    headings: Tuple[str, ...] = ("h1", "h2", "h3", "h4")
