"""Writing styled text into Word and PowerPoint documents."""

from __future__ import annotations

import pathlib
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .errors import LetteringError, UnsupportedFileTypeError
from .structures import StyledSegment, StyledText


def _import_docx():
    try:
        from docx import Document  # type: ignore
        from docx.shared import Pt  # type: ignore
    except ImportError as exc:  # pragma: no cover - import guard
        raise LetteringError(
            "python-docx is required to write .docx files. "
            "Install the optional dependency with `pip install python-docx`."
        ) from exc
    return Document, Pt


def _import_pptx():
    try:
        from pptx import Presentation  # type: ignore
        from pptx.util import Inches, Pt  # type: ignore
    except ImportError as exc:  # pragma: no cover - import guard
        raise LetteringError(
            "python-pptx is required to write .pptx files. "
            "Install the optional dependency with `pip install python-pptx`."
        ) from exc
    return Presentation, Inches, Pt


def _apply_font(font, segment: StyledSegment, pt) -> None:
    style = segment.style
    if style.bold is not None:
        font.bold = style.bold
    if style.italic is not None:
        font.italic = style.italic
    if style.underline is not None:
        font.underline = style.underline
    if style.size is not None:
        font.size = pt(style.size)


def apply_to_docx_paragraph(paragraph, styled: StyledText) -> list:
    """Append one python-docx run per styled segment and return the runs."""

    _, Pt = _import_docx()
    runs = []
    for segment in styled.segments():
        run = paragraph.add_run(segment.text)
        _apply_font(run.font, segment, Pt)
        runs.append(run)
    return runs


def apply_to_pptx_paragraph(paragraph, styled: StyledText) -> list:
    """Append python-pptx runs per styled segment and return the runs.

    Newlines become paragraph line breaks, so a segment spanning a newline
    yields one run per line.
    """

    _, _, Pt = _import_pptx()
    runs = []
    for segment in styled.segments():
        for index, line in enumerate(segment.text.split("\n")):
            if index:
                paragraph.add_line_break()
            if not line:
                continue
            run = paragraph.add_run()
            run.text = line
            _apply_font(run.font, segment, Pt)
            runs.append(run)
    return runs


class BaseDocumentWriter(ABC):
    """Common base class for document writers."""

    def __init__(self, source_path: Optional[pathlib.Path] = None):
        self.source_path = source_path
        self.paragraphs: List[StyledText] = []

    @abstractmethod
    def add_paragraph(self, styled: StyledText) -> None:
        """Append ``styled`` as a new paragraph."""

    @abstractmethod
    def save(self, destination: pathlib.Path) -> None:
        """Persist the document."""


class DocxDocumentWriter(BaseDocumentWriter):
    """Appends styled paragraphs to a new or existing Word document."""

    def __init__(self, source_path: Optional[pathlib.Path] = None):
        super().__init__(source_path)
        Document, _ = _import_docx()
        self.document = Document(str(source_path)) if source_path else Document()

    def add_paragraph(self, styled: StyledText) -> None:
        paragraph = self.document.add_paragraph()
        apply_to_docx_paragraph(paragraph, styled)
        self.paragraphs.append(styled)

    def save(self, destination: pathlib.Path) -> None:
        self.document.save(str(destination))


class PptxDocumentWriter(BaseDocumentWriter):
    """Writes styled paragraphs into a text box on a presentation slide."""

    BLANK_LAYOUT = 6

    def __init__(self, source_path: Optional[pathlib.Path] = None):
        super().__init__(source_path)
        Presentation, Inches, _ = _import_pptx()
        self.presentation = (
            Presentation(str(source_path)) if source_path else Presentation()
        )
        layouts = self.presentation.slide_layouts
        layout = layouts[min(self.BLANK_LAYOUT, len(layouts) - 1)]
        slide = self.presentation.slides.add_slide(layout)
        self.text_frame = slide.shapes.add_textbox(
            Inches(0.5), Inches(0.5), Inches(9), Inches(6)
        ).text_frame
        self.text_frame.word_wrap = True

    def add_paragraph(self, styled: StyledText) -> None:
        if self.paragraphs:
            paragraph = self.text_frame.add_paragraph()
        else:
            paragraph = self.text_frame.paragraphs[0]
        apply_to_pptx_paragraph(paragraph, styled)
        self.paragraphs.append(styled)

    def save(self, destination: pathlib.Path) -> None:
        self.presentation.save(str(destination))


def detect_writer(
    path: pathlib.Path,
    *,
    source_path: Optional[pathlib.Path] = None,
) -> Tuple[str, BaseDocumentWriter]:
    """Select a writer for the output file based on its suffix."""

    suffix = path.suffix.lower()
    if suffix == ".docx":
        writer: BaseDocumentWriter = DocxDocumentWriter(source_path)
        return "docx", writer
    if suffix == ".pptx":
        writer = PptxDocumentWriter(source_path)
        return "pptx", writer
    raise UnsupportedFileTypeError(
        "This file type isn't supported. Please use .docx or .pptx."
    )
