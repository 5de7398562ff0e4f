"""Shared fixtures: sample documents, images and synchronous executors."""

import io
from concurrent.futures import Executor, Future
from pathlib import Path

import fitz
import pytest
from PIL import Image


class ImmediateExecutor(Executor):
    """Runs submitted work inline so OCR callbacks fire before submit returns."""

    def __init__(self):
        self.calls = 0

    def submit(self, fn, /, *args, **kwargs):
        self.calls += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class DeferredExecutor(Executor):
    """Queues submitted work until ``run_next`` is called."""

    def __init__(self):
        self.pending: list[tuple[Future, object, tuple]] = []

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args))
        return future

    def run_next(self) -> Future:
        future, fn, args = self.pending.pop(0)
        future.set_result(fn(*args))
        return future


@pytest.fixture
def immediate_executor():
    return ImmediateExecutor()


@pytest.fixture
def deferred_executor():
    return DeferredExecutor()


def make_png(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(scope="session")
def square_png() -> bytes:
    """A 1000x1000 white PNG."""
    return make_png(1000, 1000)


@pytest.fixture
def sample_txt_path(tmp_path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text(
        "MEETING NOTES\n"
        "Discuss the budget for next year.\n"
        "\n"
        "1. Review revenue\n"
        "- Approve hiring plan\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def sample_pdf_path(tmp_path) -> Path:
    """A one-page PDF with an all-caps title and two body lines."""
    pdf_path = tmp_path / "report.pdf"
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "QUARTERLY REPORT", fontsize=16, fontname="helv")
    page.insert_text(
        (72, 110), "Revenue grew strongly this quarter.", fontsize=12, fontname="helv"
    )
    page.insert_text((72, 140), "Costs stayed flat.", fontsize=12, fontname="helv")
    doc.save(pdf_path)
    doc.close()
    return pdf_path


@pytest.fixture
def sample_docx_path(tmp_path) -> Path:
    from docx import Document

    docx_path = tmp_path / "overview.docx"
    document = Document()
    document.add_heading("Project Overview", level=1)
    document.add_paragraph("This is the first paragraph.")
    document.add_heading("Timeline", level=2)
    document.add_paragraph("Work starts in March.")
    document.save(docx_path)
    return docx_path


@pytest.fixture
def sample_xlsx_path(tmp_path) -> Path:
    from openpyxl import Workbook

    xlsx_path = tmp_path / "budget.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "Revenue"
    ws.append(["Quarter", "Amount"])
    ws.append(["Q1", 100])
    ws.append(["Q2"])
    wb.create_sheet("Empty")
    costs = wb.create_sheet("Costs")
    costs.append(["Item", "Cost"])
    costs.append(["Rent", 50])
    wb.save(xlsx_path)
    return xlsx_path


@pytest.fixture
def sample_pptx_path(tmp_path) -> Path:
    from pptx import Presentation

    pptx_path = tmp_path / "deck.pptx"
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "AGENDA"
    slide.placeholders[1].text = "Budget review"
    second = prs.slides.add_slide(prs.slide_layouts[1])
    second.shapes.title.text = "Next Steps"
    second.placeholders[1].text = "Hire two engineers"
    prs.save(pptx_path)
    return pptx_path


@pytest.fixture
def empty_pptx_path(tmp_path) -> Path:
    from pptx import Presentation

    pptx_path = tmp_path / "empty.pptx"
    Presentation().save(pptx_path)
    return pptx_path
