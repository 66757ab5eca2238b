"""
HTML Inspection

Helpers the browser tool runs over the driver's current page HTML:
full/summarized page views, text search and CSS selector lookups, each
reporting the surrounding parent elements for context.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Comment, Tag

# Elements that never carry anything useful for an agent
NOISE_TAGS = ("script", "style", "noscript", "svg", "template")

INTERACTIVE_TAGS = ("a", "button", "input", "select", "textarea", "form")


def cleaned_document(html: str) -> BeautifulSoup:
    """Parse HTML and drop non-content tags and comments."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(list(NOISE_TAGS)):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return soup


def _describe(tag: Tag) -> str:
    attrs = []
    for key in ("id", "name", "type", "href", "placeholder", "value", "aria-label"):
        value = tag.get(key)
        if value:
            attrs.append(f'{key}="{value}"')
    classes = tag.get("class")
    if classes:
        attrs.append(f'class="{" ".join(classes)}"')
    text = " ".join(tag.get_text(" ", strip=True).split())[:80]
    head = " ".join([tag.name] + attrs)
    return f"<{head}> {text}".rstrip()


def summarize_page(html: str) -> str:
    """Title, headings and interactive elements, one per line."""
    doc = cleaned_document(html)
    lines = []
    if doc.title and doc.title.string:
        lines.append(f"Title: {doc.title.string.strip()}")

    headings = doc.find_all(["h1", "h2", "h3"])
    if headings:
        lines.append("")
        lines.append("Headings:")
        lines.extend(f"  {h.name}: {h.get_text(' ', strip=True)}" for h in headings)

    interactive = doc.find_all(list(INTERACTIVE_TAGS))
    lines.append("")
    lines.append(f"Interactive elements ({len(interactive)}):")
    lines.extend(f"  {_describe(el)}" for el in interactive)
    return "\n".join(lines).strip()


def page_html(html: str) -> str:
    return str(cleaned_document(html))


def parent_context(element: Tag, context_size: int) -> str:
    """Outline of up to context_size ancestors, nearest last."""
    parents = []
    for parent in element.parents:
        if len(parents) >= context_size or parent.name in (None, "[document]"):
            break
        parents.append(parent)
    if not parents:
        return ""
    lines = ["Parents:"]
    for depth, parent in enumerate(reversed(parents)):
        lines.append(f"{'  ' * (depth + 1)}{_describe_open(parent)}")
    return "\n".join(lines) + "\n"


def _describe_open(tag: Tag) -> str:
    attrs = "".join(f' {k}="{" ".join(v) if isinstance(v, list) else v}"'
                    for k, v in tag.attrs.items())
    return f"<{tag.name}{attrs}>"


def format_elements(elements: List[Tag], heading: str, context_size: int) -> str:
    out = [f"{heading}\n"]
    for index, element in enumerate(elements, 1):
        out.append(f"--- Element {index} ---\n")
        if context_size > 0:
            out.append(parent_context(element, context_size))
        out.append(f"Element: {element}\n\n")
    return "".join(out)


def select_elements(html: str, selector: str, context_size: int = 2) -> str:
    """Elements matching a CSS selector, with parent context."""
    doc = cleaned_document(html)
    matches = doc.select(selector)
    if not matches:
        return f"No elements found matching selector: {selector}"
    return format_elements(
        matches, f"Found {len(matches)} elements matching '{selector}':", context_size)


def _add(matches: List[Tag], element: Tag) -> None:
    # Tag equality is structural; identical siblings are distinct matches
    if not any(element is m for m in matches):
        matches.append(element)


def find_by_text(html: str, text: str, selector: Optional[str] = None,
                 context_size: int = 2) -> str:
    """Innermost elements whose text contains text (case-insensitive).

    Labels pull in the control they point at. With a selector, matches are
    filtered to elements the selector also matches and no parent context is
    shown. Only the body is searched when the page has one, so the title in
    <head> is not reported as a UI element.
    """
    doc = cleaned_document(html)
    scope = doc.body or doc
    needle = text.lower()

    matches: List[Tag] = []
    for string in scope.find_all(string=lambda s: s and needle in s.lower()):
        parent = string.parent
        if isinstance(parent, Tag):
            _add(matches, parent)

    for el in (scope.find_all(attrs={"placeholder": True})
               + scope.find_all(attrs={"aria-label": True})):
        values = f"{el.get('placeholder', '')} {el.get('aria-label', '')}".lower()
        if needle in values:
            _add(matches, el)

    for label in [m for m in matches if m.name == "label" and m.get("for")]:
        target = doc.find(id=label["for"])
        if target is not None:
            _add(matches, target)

    if selector:
        allowed = scope.select(selector)
        matches = [m for m in matches if any(m is a for a in allowed)]
        context_size = 0

    if not matches:
        return f"No elements found containing text: {text}"
    return format_elements(
        matches, f"Found {len(matches)} elements containing '{text}':", context_size)
