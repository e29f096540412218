"""HTML to Telegram Markdown conversion for RSS Telegram Bot."""

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter, chomp

from .logging_config import create_execution_logger


class TelegramMarkdownConverter(MarkdownConverter):
    """MarkdownConverter emitting Telegram's legacy Markdown dialect.

    Telegram uses single ``*`` for bold and ``_`` for italic and has no
    headings or inline images.
    """

    def _wrap(self, text: str, marker: str) -> str:
        prefix, suffix, text = chomp(text)
        if not text:
            return ""
        return f"{prefix}{marker}{text}{marker}{suffix}"

    def convert_b(self, el, text, *args, **kwargs):
        return self._wrap(text, "*")

    convert_strong = convert_b

    def convert_i(self, el, text, *args, **kwargs):
        return self._wrap(text, "_")

    convert_em = convert_i

    def convert_hn(self, n, el, text, *args, **kwargs):
        heading = self._wrap(text.strip(), "*")
        return f"\n\n{heading}\n\n" if heading else ""

    # markdownify >= 1.0 dispatches headings here
    convert_hN = convert_hn

    def convert_img(self, el, text, *args, **kwargs):
        src = el.attrs.get("src")
        if not src:
            return ""
        alt = el.attrs.get("alt") or src
        return f"[{alt}]({src})"


class MarkdownRenderer:
    """Renders item HTML for delivery, falling back to the raw HTML."""

    def __init__(self, execution_id: str | None = None):
        self.logger = create_execution_logger("renderer", execution_id)
        self.converter = TelegramMarkdownConverter(bullets="•◦▪")

    def convert(self, html: str) -> str:
        """Convert HTML to Telegram Markdown. May raise."""
        soup = BeautifulSoup(html, "html.parser")
        return self.converter.convert_soup(soup).strip()

    def render(self, html: str, item_title: str = "") -> str:
        """Convert HTML, returning it unchanged if conversion fails.

        Args:
            html: Item content
            item_title: Used for log context only

        Returns:
            Telegram Markdown text, or the original HTML on failure
        """
        if not html:
            return ""

        try:
            return self.convert(html)
        except Exception as e:
            self.logger.warning(
                f"Failed to convert content, sending raw HTML: {e}",
                item_title=item_title,
                error=str(e),
            )
            return html
