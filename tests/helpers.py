"""Builders shared by the unit tests."""

import io
from datetime import datetime

from docx import Document

from bldgreport.pipeline.mapper import OUTPUT_FIELDS
from bldgreport.pipeline.render import iter_paragraphs


def make_row(**kwargs) -> dict:
    """A realistic spreadsheet row; override columns with keyword args.

    Headers with spaces go through a dict: make_row(**{"Use Type": "Office"}).
    """
    defaults = {
        "Address": "350 Fifth Avenue",
        "Building Owner/Manager": "ESRT Empire State Building LLC",
        "Use Type": "Office",
        "Block": 835,
        "BIN": 1015862,
        "Borough": "Manhattan",
        "Year Built": 1931,
        "M Floors": 102,
        "Approx Sq Ft": 2768591,
        "Landmark": "Yes",
        "Parking Garage (Yes/No)": "No",
        "FISP Compliance Status": "SAFE",
        "Sub": "9B",
        "FISP Filing Due": datetime(2099, 2, 21),
        "FISP Last Filing Status": "Accepted",
        "FISP Cycle Filing Window": "Cycle 9B",
        "LL97 Compliance Status": "Compliant",
    }
    defaults.update(kwargs)
    return defaults


def build_template(path, fields=OUTPUT_FIELDS) -> None:
    """Write a .docx template with one «field» paragraph per field.

    Also adds a placeholder split over several runs, one inside a table
    cell and one in the page header.
    """
    doc = Document()
    doc.sections[0].header.paragraphs[0].text = "Report for «Address»"
    doc.add_heading("Building Compliance Report", level=1)
    for field in fields:
        doc.add_paragraph(f"{field}: «{field}»")

    split = doc.add_paragraph("Status: ")
    split.add_run("«FISP ")
    split.add_run("Compliance").bold = True
    split.add_run(" Status»")
    split.add_run(" (FISP)")

    table = doc.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "Contact"
    table.cell(0, 1).text = "«Contact Email» / «Contact Phone»"
    doc.save(str(path))


def docx_text(data: bytes) -> str:
    """Body, table and header text of a rendered document, one paragraph per line."""
    doc = Document(io.BytesIO(data))
    return "\n".join(p.text for p in iter_paragraphs(doc))


def docx_lines(data: bytes) -> list[str]:
    return docx_text(data).split("\n")
