"""Page to prompt-ready text: prune, sanitize, convert, then enforce a minimum length."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel

from job_hunter.config import DEFAULT_PAGE_TITLE, MIN_CONTENT_CHARS
from job_hunter.errors import ContentTooShortError
from job_hunter.tools.html_sanitizer import sanitize_page
from job_hunter.tools.markdown import html_to_markdown

logger = logging.getLogger(__name__)


class ExtractedText(BaseModel):
    content: str
    title: str
    word_count: int


def extract_job_content(page: str | Tag, title: str | None = None) -> ExtractedText:
    """Extract clean Markdown from a job page.

    Args:
        page: Raw HTML, a parsed document or a body tag. It is never modified.
        title: Page title to report. Read from the document's <title> when omitted.

    Raises:
        ContentTooShortError: if the Markdown is shorter than MIN_CONTENT_CHARS.
    """
    document = page if isinstance(page, Tag) else BeautifulSoup(page or "", "html.parser")

    markdown = html_to_markdown(sanitize_page(document))

    if len(markdown.strip()) < MIN_CONTENT_CHARS:
        logger.warning(
            "Extraction yielded %d chars (minimum %d)", len(markdown.strip()), MIN_CONTENT_CHARS
        )
        raise ContentTooShortError("Insufficient content found on this page")

    page_title = title or _document_title(document) or DEFAULT_PAGE_TITLE
    word_count = len(markdown.split())

    logger.info("Extraction OK: %d words, title=%r", word_count, page_title)
    return ExtractedText(content=markdown, title=page_title, word_count=word_count)


def _document_title(document: Tag) -> str | None:
    title_tag = document.find("title")
    if title_tag is None:
        return None
    text = title_tag.get_text(strip=True)
    return text or None
