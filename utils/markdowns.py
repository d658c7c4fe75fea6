"""
Markdown rendering helpers used by the tag cache.

to_html() renders tag descriptions, to_text() strips the rendered HTML back
down to the plain text shown in tooltips and meta descriptions.
"""

from bs4 import BeautifulSoup
from markdown import markdown

MARKDOWN_EXTENSIONS = ['fenced_code', 'tables', 'nl2br', 'sane_lists']


def to_html(markdown_text: str) -> str:
    """Render markdown to HTML. Blank input renders to an empty string."""
    if not markdown_text or not markdown_text.strip():
        return ''
    return markdown(markdown_text, extensions=MARKDOWN_EXTENSIONS, output_format='html')


def to_text(html: str) -> str:
    """
    Extract the visible text of an HTML fragment.

    Whitespace runs collapse to a single space and the result is trimmed,
    so "<p>a</p>\\n<p>b</p>" becomes "a b".
    """
    if not html:
        return ''
    soup = BeautifulSoup(html, 'html.parser')
    return ' '.join(soup.get_text(separator=' ').split())
