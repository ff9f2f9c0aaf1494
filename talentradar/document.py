"""Fetched page representation shared by all extractors."""
from typing import List, Optional
from urllib.parse import urljoin, urldefrag

from bs4 import BeautifulSoup, Tag

from .models import clean_text

# Elements that hold an individual post or article on feeds and newsrooms
POST_CLASS_HINTS = ("post", "update", "news")


class Document:
    """A rendered page: its final URL and HTML, parsed lazily.

    The parsed tree is a BeautifulSoup document, so extractors can be tested
    against literal HTML without a browser.
    """

    def __init__(self, url: str, html: str) -> None:
        self.url = url
        self.html = html or ""
        self._soup: Optional[BeautifulSoup] = None

    def __repr__(self) -> str:
        return f"Document(url={self.url!r}, size={len(self.html)})"

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, "lxml")
        return self._soup

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    @property
    def text(self) -> str:
        """Visible body text with collapsed whitespace."""
        return clean_text(self.body.get_text(" "))

    def resolve(self, href: Optional[str]) -> str:
        """Resolve a link against the page URL and drop its fragment."""
        if not href:
            return self.url
        absolute, _ = urldefrag(urljoin(self.url, href.strip()))
        return absolute

    def links(self) -> List[Tag]:
        return self.soup.find_all("a", href=True)

    def text_blocks(self) -> List[str]:
        """Split the page into post-sized chunks of prose.

        Looks for articles first, then elements whose class names a post,
        update or news item, then paragraphs. Falls back to the whole body
        text when none are present.
        """
        blocks = [_block_text(el) for el in self.soup.find_all("article")]
        if not blocks:
            candidates = [
                el for el in self.soup.find_all(True)
                if _class_hint(el) and not _has_hinted_ancestor(el)
            ]
            blocks = [_block_text(el) for el in candidates]
        if not blocks:
            blocks = [_block_text(el) for el in self.soup.find_all("p")]
        blocks = [block for block in blocks if block]
        if not blocks and self.text:
            blocks = [self.text]
        return blocks


def _block_text(element: Tag) -> str:
    return clean_text(element.get_text(" "))


def _class_hint(element: Tag) -> bool:
    classes = " ".join(element.get("class") or []).lower()
    return any(hint in classes for hint in POST_CLASS_HINTS)


def _has_hinted_ancestor(element: Tag) -> bool:
    return any(_class_hint(parent) for parent in element.parents if isinstance(parent, Tag))
