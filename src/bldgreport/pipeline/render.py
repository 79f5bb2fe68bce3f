"""Fill a Word template's «placeholder» tags and return the finished .docx.

Word freely splits text into runs, so a tag like «FISP Compliance Status»
may be spread over several runs. Each paragraph is matched on its joined
text and the replacement is written into the run where the tag starts;
the other runs the tag covered lose just the tag characters, so
surrounding formatting survives.

Sections «#name»...«/name» keep their content when the value is truthy
and drop it otherwise; «^name» inverts the test. When the opening and
closing tags each sit alone in a paragraph, the section covers whole
paragraphs (and any tables between them) and the tag paragraphs are
removed from the output.
"""

import io
import logging
import re
from collections.abc import Iterator, Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

from docx import Document
from docx.document import Document as DocumentObject
from docx.text.paragraph import Paragraph

from bldgreport.core.errors import ReportRenderError

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DEFAULT_DELIMITERS = ("«", "»")
DATE_FORMAT = "%m/%d/%Y"

SECTION_OPEN = "#"
SECTION_INVERTED = "^"
SECTION_CLOSE = "/"


def format_value(value: Any) -> str:
    """String form of a report value as it appears in the document."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _iter_nested(container) -> Iterator[Any]:
    yield container
    for table in container.tables:
        for row in table.rows:
            for cell in row.cells:
                yield from _iter_nested(cell)


def iter_containers(doc: DocumentObject) -> Iterator[Any]:
    """Body, table cells (nested included) and unlinked headers/footers."""
    yield from _iter_nested(doc)
    for section in doc.sections:
        for part in (
            section.header, section.first_page_header, section.even_page_header,
            section.footer, section.first_page_footer, section.even_page_footer,
        ):
            # Touching a linked header would add an empty definition to the package
            if not part.is_linked_to_previous:
                yield from _iter_nested(part)


def iter_paragraphs(doc: DocumentObject) -> Iterator[Paragraph]:
    for container in iter_containers(doc):
        yield from container.paragraphs


class ReportRenderer:
    """Renders one flat mapping of placeholder name -> value into a template."""

    def __init__(
        self,
        template_path: str | Path,
        delimiters: tuple[str, str] = DEFAULT_DELIMITERS,
        strict: bool = False,
    ):
        self.template_path = Path(template_path)
        self.start, self.end = delimiters
        self.strict = strict
        self._pattern = re.compile(
            re.escape(self.start) + r"([^" + re.escape(self.start + self.end) + r"]*)" + re.escape(self.end)
        )

    def template_exists(self) -> bool:
        return self.template_path.is_file()

    def render(self, values: Mapping[str, Any]) -> bytes:
        """Return the filled document as bytes.

        Raises:
            ReportRenderError: template missing or not a .docx, a tag or
                section left unclosed, or (strict mode) a tag with no value.
        """
        if not self.template_exists():
            raise ReportRenderError(f"template not found: {self.template_path}")
        try:
            doc = Document(str(self.template_path))
            for container in list(iter_containers(doc)):
                self._apply_paragraph_sections(container, values)
            for paragraph in iter_paragraphs(doc):
                self._fill_paragraph(paragraph, values)
            buf = io.BytesIO()
            doc.save(buf)
        except ReportRenderError:
            raise
        except Exception as e:
            raise ReportRenderError(f"failed to render {self.template_path.name}: {e}") from e
        return buf.getvalue()

    def _lookup(self, name: str, values: Mapping[str, Any]) -> str:
        if name in values:
            return format_value(values[name])
        if self.strict:
            raise ReportRenderError(f"no value for placeholder {self.start}{name}{self.end}")
        logger.debug("No value for placeholder %r, rendering empty", name)
        return ""

    def _keep_section(self, marker: str, name: str, values: Mapping[str, Any]) -> bool:
        if name not in values and self.strict:
            raise ReportRenderError(f"no value for section {self.start}{marker}{name}{self.end}")
        value = values.get(name)
        truthy = value is not None and bool(value)
        return truthy if marker == SECTION_OPEN else not truthy

    def _section_tag(self, tag: str) -> tuple[str, str] | None:
        """(marker, name) for a section tag body like "#Landmark", else None."""
        tag = tag.strip()
        if tag[:1] in (SECTION_OPEN, SECTION_INVERTED, SECTION_CLOSE):
            return tag[0], tag[1:].strip()
        return None

    def _apply_paragraph_sections(self, container, values: Mapping[str, Any]) -> None:
        """Resolve sections whose tags each fill a paragraph of their own."""
        stack: list[tuple[str, str, Paragraph]] = []
        blocks: list[tuple[Paragraph, Paragraph, bool]] = []
        for paragraph in container.paragraphs:
            match = self._pattern.fullmatch(paragraph.text.strip())
            section = self._section_tag(match.group(1)) if match else None
            if section is None:
                continue
            marker, name = section
            if marker != SECTION_CLOSE:
                stack.append((marker, name, paragraph))
                continue
            if not stack or stack[-1][1] != name:
                raise ReportRenderError(f"unmatched section close {self.start}/{name}{self.end}")
            open_marker, _, opening = stack.pop()
            blocks.append((opening, paragraph, self._keep_section(open_marker, name, values)))
        if stack:
            raise ReportRenderError(f"unclosed section {self.start}{stack[-1][0]}{stack[-1][1]}{self.end}")

        # Inner sections close first, so their elements are still attached here
        for opening, closing, keep in blocks:
            if not keep:
                element = opening._p.getnext()
                while element is not None and element is not closing._p:
                    following = element.getnext()
                    element.getparent().remove(element)
                    element = following
            for paragraph in (opening, closing):
                parent = paragraph._p.getparent()
                if parent is not None:
                    parent.remove(paragraph._p)

    def _paragraph_edits(self, full: str, values: Mapping[str, Any]) -> list[tuple[int, int, str]]:
        """Non-overlapping (start, end, replacement) edits for one paragraph's text."""
        edits: list[tuple[int, int, str]] = []
        stack: list[tuple[str, str, re.Match]] = []
        for match in self._pattern.finditer(full):
            section = self._section_tag(match.group(1))
            if section is None:
                edits.append((match.start(), match.end(), self._lookup(match.group(1).strip(), values)))
                continue
            marker, name = section
            if marker != SECTION_CLOSE:
                stack.append((marker, name, match))
                continue
            if not stack or stack[-1][1] != name:
                raise ReportRenderError(f"unmatched section close {self.start}/{name}{self.end}")
            open_marker, _, opening = stack.pop()
            if self._keep_section(open_marker, name, values):
                edits.append((opening.start(), opening.end(), ""))
                edits.append((match.start(), match.end(), ""))
            else:
                edits = [edit for edit in edits if edit[0] < opening.start()]
                edits.append((opening.start(), match.end(), ""))
        if stack:
            raise ReportRenderError(f"unclosed section {self.start}{stack[-1][0]}{stack[-1][1]}{self.end}")
        return sorted(edits)

    def _fill_paragraph(self, paragraph: Paragraph, values: Mapping[str, Any]) -> None:
        runs = paragraph.runs
        texts = [run.text for run in runs]
        full = "".join(texts)
        if self.start not in full and self.end not in full:
            return

        leftover = self._pattern.sub("", full)
        if self.start in leftover or self.end in leftover:
            raise ReportRenderError(f"unbalanced placeholder delimiters in paragraph: {full[:80]!r}")

        bounds = []
        pos = 0
        for text in texts:
            bounds.append((pos, pos + len(text)))
            pos += len(text)

        # Right to left, so text before each edit (and its offsets) is untouched
        for tag_start, tag_end, replacement in reversed(self._paragraph_edits(full, values)):
            first = True
            for i, (run_start, run_end) in enumerate(bounds):
                if run_end <= tag_start or run_start >= tag_end:
                    continue
                local_start = max(tag_start, run_start) - run_start
                local_end = min(tag_end, run_end) - run_start
                text = texts[i]
                if first:
                    texts[i] = text[:local_start] + replacement + text[local_end:]
                    first = False
                else:
                    texts[i] = text[:local_start] + text[local_end:]

        for run, text in zip(runs, texts):
            if run.text != text:
                run.text = text
