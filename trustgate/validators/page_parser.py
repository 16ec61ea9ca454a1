"""
Page Parser

Lenient structural parse of the page-delimited text a remote AI service is
asked to produce:

    ## Title
    Photosynthesis

    ## Content
    Plants convert light into chemical energy...

    ---

    ## Title
    ...

Segments are separated by lines consisting of ``---``. Within a segment the
title is the text between the title marker and the content marker, the
content is everything after the content marker. Markers are matched at the
start of a line, case-insensitively.

Invalid segments become diagnostics and are skipped; the parse only fails
when no segment yields a page.
"""

import re
from dataclasses import dataclass, field

from trustgate.core.config.constants import Stage
from trustgate.core.exceptions import NoValidPagesError
from trustgate.core.logging.logger import get_logger

logger = get_logger(__name__)

PAGE_DELIMITER = re.compile(r"(?m)^[ \t]*---[ \t]*\r?$")
TITLE_MARKER = re.compile(r"(?im)^[ \t]*##[ \t]*title\b[ \t:]*")
CONTENT_MARKER = re.compile(r"(?im)^[ \t]*##[ \t]*content\b[ \t:]*")


@dataclass(frozen=True)
class ParsedPage:
    title: str
    content: str


@dataclass(frozen=True)
class PageDiagnostic:
    segment: int  # 1-based position among non-empty segments
    message: str

    def __str__(self) -> str:
        return f"Page {self.segment}: {self.message}"


@dataclass
class PageParseResult:
    pages: list[ParsedPage] = field(default_factory=list)
    diagnostics: list[PageDiagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.pages)


def _parse_segment(segment: str) -> ParsedPage | str:
    """A page, or the reason the segment is not one."""
    title_match = TITLE_MARKER.search(segment)
    content_match = CONTENT_MARKER.search(segment)

    if title_match is None and content_match is None:
        return "Missing '## Title' and '## Content' markers"
    if title_match is None:
        return "Missing '## Title' marker"
    if content_match is None:
        return "Missing '## Content' marker"
    if title_match.start() > content_match.start():
        return "'## Title' must come before '## Content'"

    title = segment[title_match.end():content_match.start()].strip()
    content = segment[content_match.end():]

    if TITLE_MARKER.search(content):
        return "Content contains another '## Title' marker (missing '---' delimiter?)"

    content = content.strip()
    if not title:
        return "Title is empty"
    if not content:
        return "Content is empty"
    return ParsedPage(title=title, content=content)


def parse_pages(text: str) -> PageParseResult:
    """Parse every segment; never raises."""
    result = PageParseResult()
    position = 0

    for raw in PAGE_DELIMITER.split(text):
        if not raw.strip():
            continue
        position += 1

        parsed = _parse_segment(raw)
        if isinstance(parsed, ParsedPage):
            result.pages.append(parsed)
        else:
            result.diagnostics.append(PageDiagnostic(segment=position, message=parsed))

    if result.diagnostics:
        logger.info(
            "Page segments skipped",
            stage=Stage.PAGE_PARSING.value,
            valid=len(result.pages),
            skipped=len(result.diagnostics),
        )
    return result


def require_pages(text: str) -> PageParseResult:
    """
    Parse and insist on at least one page.

    Raises:
        NoValidPagesError: Nothing parsed; details carry the diagnostics
    """
    result = parse_pages(text)
    if result.ok:
        return result

    errors = [str(diagnostic) for diagnostic in result.diagnostics]
    logger.warning("No valid pages in content", stage=Stage.PAGE_PARSING.value, errors=errors)
    message = "No valid pages found in response"
    if errors:
        message += ":\n" + "\n".join(errors)
    raise NoValidPagesError(message, details={"errors": errors})
