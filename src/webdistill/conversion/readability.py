"""Main content isolation by readability scoring.

The scorer reads the parsed tree without changing it. Exclusions and
scores are kept in side tables keyed by node identity, and only deep
copies of the winning nodes are cleaned. The structured extractor can
therefore run before or after this pass against the same document.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..errors import ExtractionFailed
from ..models.document import Article
from .dom import ParsedDocument, normalize_space
from .page_meta import PageMeta, extract_page_meta

logger = logging.getLogger(__name__)

UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|footer|gdpr|"
    r"header|legends|menu|related|remark|replies|rss|shoutbox|sidebar|skyscraper|social|sponsor|"
    r"supplemental|ad-break|agegate|pagination|pager|popup|yom-remote",
    re.IGNORECASE,
)
OK_MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|shadow", re.IGNORECASE)
POSITIVE = re.compile(
    r"article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story",
    re.IGNORECASE,
)
NEGATIVE = re.compile(
    r"-ad-|hidden|^hid$| hid$| hid |^hid |banner|combx|comment|com-|contact|footer|gdpr|masthead|"
    r"media|meta|outbrain|promo|related|scroll|share|shoutbox|sidebar|skyscraper|sponsor|shopping|"
    r"tags|widget",
    re.IGNORECASE,
)
BYLINE = re.compile(r"byline|author|dateline|writtenby|p-author", re.IGNORECASE)
HIDDEN_STYLE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)
COMMAS = re.compile(r"[,،﹐︐︑⹁⸴⸲，]")
SENTENCE_END = re.compile(r"\.( |$)")

NON_CONTENT_TAGS = frozenset(
    {
        "nav",
        "footer",
        "script",
        "style",
        "form",
        "aside",
        "noscript",
        "iframe",
        "button",
        "input",
        "select",
        "textarea",
        "svg",
        "link",
        "meta",
    }
)
NON_CONTENT_ROLES = frozenset({"navigation", "banner", "contentinfo", "complementary", "menu", "menubar"})
UNLIKELY_EXEMPT_TAGS = frozenset({"html", "body", "a", "article", "main"})

SCORED_TAGS = frozenset({"p", "pre", "td", "section", "h2", "h3", "h4", "h5", "h6"})
DIV_BLOCK_CHILDREN = ["a", "blockquote", "dl", "div", "img", "ol", "p", "pre", "table", "ul"]

TAG_BONUS = {
    "div": 5,
    "pre": 3,
    "td": 3,
    "blockquote": 3,
    "address": -3,
    "ol": -3,
    "ul": -3,
    "dl": -3,
    "dd": -3,
    "dt": -3,
    "li": -3,
    "form": -3,
    "h1": -5,
    "h2": -5,
    "h3": -5,
    "h4": -5,
    "h5": -5,
    "h6": -5,
    "th": -5,
}

CONDITIONAL_TAGS = ["table", "ul", "ol", "div", "section"]
EMPTY_REMOVABLE_TAGS = [
    "p",
    "div",
    "section",
    "span",
    "li",
    "blockquote",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "ul",
    "ol",
]
MEDIA_TAGS = ["img", "picture", "video", "audio", "br", "hr", "table", "object"]
PRESENTATIONAL_ATTRIBUTES = frozenset(
    {
        "align",
        "background",
        "bgcolor",
        "border",
        "cellpadding",
        "cellspacing",
        "frame",
        "hspace",
        "rules",
        "style",
        "valign",
        "vspace",
        "width",
        "height",
        "color",
        "face",
        "size",
    }
)

MIN_PARAGRAPH_LENGTH = 25
MAX_ANCESTOR_LEVELS = 5
MIN_ALTERNATIVE_CANDIDATES = 3


@dataclass(frozen=True)
class _Flags:
    strip_unlikely: bool = True
    weight_classes: bool = True


# Each retry relaxes one more heuristic
ATTEMPT_FLAGS = (
    _Flags(strip_unlikely=True, weight_classes=True),
    _Flags(strip_unlikely=False, weight_classes=True),
    _Flags(strip_unlikely=False, weight_classes=False),
)


@dataclass
class _Attempt:
    content_html: str
    plain_text: str
    excerpt: Optional[str]
    byline: Optional[str]


def _class_and_id(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return f"{' '.join(classes)} {tag.get('id') or ''}"


def _class_weight(tag: Tag) -> int:
    weight = 0
    classes = tag.get("class") or []
    class_name = " ".join(classes) if isinstance(classes, list) else str(classes)
    if class_name:
        if NEGATIVE.search(class_name):
            weight -= 25
        if POSITIVE.search(class_name):
            weight += 25
    tag_id = tag.get("id")
    if isinstance(tag_id, str) and tag_id:
        if NEGATIVE.search(tag_id):
            weight -= 25
        if POSITIVE.search(tag_id):
            weight += 25
    return weight


def _is_hidden(tag: Tag) -> bool:
    if tag.has_attr("hidden"):
        return True
    if str(tag.get("aria-hidden", "")).lower() == "true":
        return True
    style = tag.get("style")
    return isinstance(style, str) and bool(HIDDEN_STYLE.search(style))


def _has_ancestor(tag: Tag, names: tuple[str, ...]) -> bool:
    return tag.find_parent(names) is not None


def _link_density(tag: Tag) -> float:
    text_length = len(normalize_space(tag.get_text(" ")))
    if not text_length:
        return 0.0
    link_length = 0.0
    for a in tag.find_all("a"):
        href = a.get("href")
        coefficient = 0.3 if isinstance(href, str) and href.startswith("#") else 1.0
        link_length += len(normalize_space(a.get_text(" "))) * coefficient
    return link_length / text_length


def _scorable_ancestors(tag: Tag) -> list[Tag]:
    """Up to five ancestors, stopping below the ``<html>`` element."""
    ancestors = []
    parent = tag.parent
    while isinstance(parent, Tag) and len(ancestors) < MAX_ANCESTOR_LEVELS:
        if isinstance(parent, BeautifulSoup) or parent.name == "html":
            break
        ancestors.append(parent)
        parent = parent.parent
    return ancestors


class ArticleExtractor:
    """
    Isolates the main article of a page.

    Paragraph-like nodes earn points for length and commas, pass them up
    to their ancestors, and the best-scoring ancestor (plus related
    siblings) becomes the article. Short results are retried with the
    unlikely-candidate filter off, then with class weighting off, and the
    longest attempt wins.

    Example:
        extractor = ArticleExtractor()
        article = extractor.extract(ParsedDocument.parse(html, url))
        print(article.title, article.length)
    """

    def __init__(
        self,
        char_threshold: int = 500,
        min_content_length: int = 100,
        n_top_candidates: int = 5,
    ):
        """
        Args:
            char_threshold: Text length below which a relaxed retry is made
            min_content_length: Shortest acceptable article text
            n_top_candidates: Runner-up candidates considered when looking
                for a shared ancestor of several strong nodes
        """
        self.char_threshold = char_threshold
        self.min_content_length = min_content_length
        self.n_top_candidates = n_top_candidates

    def extract(self, doc: ParsedDocument) -> Article:
        """
        Score ``doc`` and return its article.

        Raises:
            ExtractionFailed: No positively scored candidate, or the best
                article is shorter than ``min_content_length``
        """
        meta = extract_page_meta(doc)

        attempts: list[_Attempt] = []
        for flags in ATTEMPT_FLAGS:
            attempt = self._grab(doc, meta, flags)
            if attempt is None:
                continue
            attempts.append(attempt)
            if len(attempt.plain_text) >= self.char_threshold:
                break

        if not attempts:
            logger.debug(f"No content candidates found on {doc.base_url}")
            raise ExtractionFailed("Could not extract article content")

        best = max(attempts, key=lambda a: len(a.plain_text))
        if len(best.plain_text) < self.min_content_length:
            logger.debug(
                f"Article on {doc.base_url} too short: {len(best.plain_text)} < {self.min_content_length}"
            )
            raise ExtractionFailed("Could not extract article content")

        return Article(
            title=meta.title,
            content_html=best.content_html,
            plain_text=best.plain_text,
            byline=meta.byline or best.byline,
            excerpt=meta.excerpt or best.excerpt,
            site_name=meta.site_name,
            published_time=meta.published_time,
        )

    # Exclusion

    def _is_excluded(self, tag: Tag, flags: _Flags) -> bool:
        if tag.name in NON_CONTENT_TAGS:
            return True
        role = tag.get("role")
        if isinstance(role, str) and role.lower() in NON_CONTENT_ROLES:
            return True
        if _is_hidden(tag):
            return True
        if flags.strip_unlikely and tag.name not in UNLIKELY_EXEMPT_TAGS:
            match_string = _class_and_id(tag)
            if (
                UNLIKELY_CANDIDATES.search(match_string)
                and not OK_MAYBE_CANDIDATE.search(match_string)
                and not _has_ancestor(tag, ("table", "code"))
            ):
                return True
        return False

    def _is_byline(self, tag: Tag) -> bool:
        rel = tag.get("rel") or []
        itemprop = tag.get("itemprop") or ""
        if "author" in rel or "author" in str(itemprop):
            return True
        return bool(BYLINE.search(_class_and_id(tag)))

    def _walk(
        self,
        root: Tag,
        flags: _Flags,
        excluded: set[int],
        want_byline: bool,
    ) -> Iterator[tuple[Tag, Optional[str]]]:
        """
        Yield visible tags in document order, with a byline when one is found.

        Excluded subtrees are recorded in ``excluded`` and skipped.
        """
        stack = [child for child in reversed(list(root.children)) if isinstance(child, Tag)]
        while stack:
            tag = stack.pop()
            if self._is_excluded(tag, flags):
                excluded.add(id(tag))
                continue
            if want_byline and self._is_byline(tag):
                text = ParsedDocument.text(tag)
                if 0 < len(text) < 100:
                    excluded.add(id(tag))
                    want_byline = False
                    yield tag, text
                    continue
            yield tag, None
            stack.extend(child for child in reversed(list(tag.children)) if isinstance(child, Tag))

    # Scoring

    def _initial_score(self, tag: Tag, flags: _Flags) -> float:
        score = float(TAG_BONUS.get(tag.name, 0))
        if flags.weight_classes:
            score += _class_weight(tag)
        return score

    def _is_paragraph(self, tag: Tag) -> bool:
        if tag.name in SCORED_TAGS:
            return True
        return tag.name == "div" and tag.find(DIV_BLOCK_CHILDREN) is None

    def _grab(self, doc: ParsedDocument, meta: PageMeta, flags: _Flags) -> Optional[_Attempt]:
        excluded: set[int] = set()
        nodes: dict[int, Tag] = {}
        scores: dict[int, float] = {}
        byline: Optional[str] = None

        for tag, found_byline in self._walk(doc.body, flags, excluded, want_byline=not meta.byline):
            if found_byline:
                byline = found_byline
                continue
            if not self._is_paragraph(tag):
                continue

            text = ParsedDocument.text(tag)
            if len(text) < MIN_PARAGRAPH_LENGTH:
                continue
            ancestors = _scorable_ancestors(tag)
            if not ancestors:
                continue

            content_score = 1 + len(COMMAS.findall(text)) + min(len(text) // 100, 3)
            for level, ancestor in enumerate(ancestors):
                key = id(ancestor)
                if key not in scores:
                    nodes[key] = ancestor
                    scores[key] = self._initial_score(ancestor, flags)
                divider = 1 if level == 0 else 2 if level == 1 else level * 3
                scores[key] += content_score / divider

        if not scores:
            return None

        for key, node in nodes.items():
            scores[key] *= 1 - _link_density(node)

        ranked = sorted(nodes, key=lambda k: scores[k], reverse=True)[: self.n_top_candidates]
        top_key = ranked[0]
        top = nodes[top_key]
        top_score = scores[top_key]
        if top_score <= 0:
            return None

        top, top_score = self._promote_shared_ancestor(top, top_score, ranked, nodes, scores, flags)

        selected = self._collect_siblings(top, top_score, nodes, scores, excluded, flags)
        container = self._clean(doc, selected, excluded, flags)

        plain_text = normalize_space(container.get_text(" "))
        first_paragraph = container.find("p")
        excerpt = ParsedDocument.text(first_paragraph) if isinstance(first_paragraph, Tag) else None
        return _Attempt(
            content_html=str(container),
            plain_text=plain_text,
            excerpt=excerpt or None,
            byline=byline,
        )

    def _promote_shared_ancestor(
        self,
        top: Tag,
        top_score: float,
        ranked: list[int],
        nodes: dict[int, Tag],
        scores: dict[int, float],
        flags: _Flags,
    ) -> tuple[Tag, float]:
        """Prefer a common ancestor when several near-top candidates share it."""
        alternatives = [nodes[k] for k in ranked[1:] if scores[k] / top_score >= 0.75]
        if len(alternatives) < MIN_ALTERNATIVE_CANDIDATES:
            return top, top_score

        parent = top.parent
        while isinstance(parent, Tag) and parent.name not in ("body", "html", "[document]"):
            containing = sum(1 for alt in alternatives if any(p is parent for p in alt.parents))
            if containing >= MIN_ALTERNATIVE_CANDIDATES:
                key = id(parent)
                score = scores.get(key)
                if score is None:
                    score = self._initial_score(parent, flags)
                    nodes[key] = parent
                    scores[key] = score
                return parent, max(score, top_score)
            parent = parent.parent
        return top, top_score

    def _collect_siblings(
        self,
        top: Tag,
        top_score: float,
        nodes: dict[int, Tag],
        scores: dict[int, float],
        excluded: set[int],
        flags: _Flags,
    ) -> list[Tag]:
        parent = top.parent
        if not isinstance(parent, Tag) or isinstance(parent, BeautifulSoup):
            return [top]

        threshold = max(10.0, top_score * 0.2)
        top_class = " ".join(top.get("class") or [])
        selected = []

        for sibling in parent.children:
            if not isinstance(sibling, Tag) or id(sibling) in excluded:
                continue
            if sibling is top:
                selected.append(sibling)
                continue

            bonus = 0.0
            if flags.weight_classes and top_class and " ".join(sibling.get("class") or []) == top_class:
                bonus += top_score * 0.2

            key = id(sibling)
            if key in scores and scores[key] + bonus >= threshold:
                selected.append(sibling)
            elif sibling.name == "p":
                text = ParsedDocument.text(sibling)
                density = _link_density(sibling)
                if len(text) > 80 and density < 0.25:
                    selected.append(sibling)
                elif 0 < len(text) <= 80 and density == 0 and SENTENCE_END.search(text):
                    selected.append(sibling)

        return selected

    # Cleaning

    def _clean(self, doc: ParsedDocument, selected: list[Tag], excluded: set[int], flags: _Flags) -> Tag:
        """Copy ``selected`` into a fresh ``<div>`` and clean only the copy."""
        shell = BeautifulSoup("", "html.parser")
        container = shell.new_tag("div")
        shell.append(container)

        for node in selected:
            clone = copy.copy(node)
            # Clone and original share structure, so pair them up to carry exclusions across
            drop = [
                cloned
                for original, cloned in zip(node.find_all(True), clone.find_all(True))
                if id(original) in excluded
            ]
            for tag in drop:
                if not tag.decomposed:
                    tag.decompose()
            if clone.name == "body":
                clone.name = "div"
            container.append(clone)

        top_level = {id(child) for child in container.children}

        for tag in reversed(container.find_all(CONDITIONAL_TAGS)):
            if tag.decomposed or id(tag) in top_level:
                continue
            if self._should_drop_conditionally(tag, flags):
                tag.decompose()

        for tag in reversed(container.find_all(EMPTY_REMOVABLE_TAGS)):
            if tag.decomposed:
                continue
            if not tag.get_text(strip=True) and tag.find(MEDIA_TAGS) is None:
                tag.decompose()

        for a in container.find_all("a"):
            href = a.get("href")
            if isinstance(href, str) and href.strip().lower().startswith("javascript:"):
                a.unwrap()
                continue
            if isinstance(href, str) and not href.startswith("#"):
                resolved = doc.resolve_url(href)
                if resolved:
                    a["href"] = resolved

        for img in container.find_all("img"):
            src = img.get("src") or img.get("data-src")
            resolved = doc.resolve_url(src if isinstance(src, str) else None)
            if resolved:
                img["src"] = resolved
            elif img.has_attr("src"):
                del img["src"]
            for attr in ("data-src", "srcset"):
                if img.has_attr(attr):
                    del img[attr]

        for tag in container.find_all(True):
            for attr in [name for name in tag.attrs if name.lower() in PRESENTATIONAL_ATTRIBUTES]:
                del tag[attr]

        for string in list(container.find_all(string=True)):
            if isinstance(string, Comment):
                string.extract()
            elif isinstance(string, NavigableString) and string.find_parent("pre") is None:
                collapsed = re.sub(r"\s+", " ", str(string))
                if collapsed != string:
                    string.replace_with(collapsed)

        return container

    def _should_drop_conditionally(self, tag: Tag, flags: _Flags) -> bool:
        if _has_ancestor(tag, ("pre", "code")):
            return False
        if tag.name == "table" and (tag.find(["th", "caption", "thead"]) is not None):
            return False

        weight = _class_weight(tag) if flags.weight_classes else 0
        if weight < 0:
            return True

        text = normalize_space(tag.get_text(" "))
        if len(COMMAS.findall(text)) >= 10:
            return False

        paragraphs = len(tag.find_all("p"))
        images = len(tag.find_all("img"))
        list_items = len(tag.find_all("li")) - 100
        inputs = len(tag.find_all("input"))
        link_density = _link_density(tag)
        content_length = len(text)

        if images > 1 and paragraphs / images < 0.5:
            return True
        if tag.name not in ("ul", "ol") and list_items > paragraphs:
            return True
        if inputs > paragraphs / 3:
            return True
        if content_length < MIN_PARAGRAPH_LENGTH and (images == 0 or images > 2):
            return True
        if weight < 25 and link_density > 0.2:
            return True
        return weight >= 25 and link_density > 0.5
