"""
Pytest configuration for the MEI document generation tests.
"""

import io
import re
import struct
import sys
import zlib
from pathlib import Path

import pytest
from faker import Faker
from PIL import Image, ImageDraw
from pypdf import PdfReader
from reportlab.pdfgen import canvas

# Add src/ to the Python path so tests run without installing the package
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from mei_docs.config import GenerationConfig  # noqa: E402
from mei_docs.fillers.acroform import TemplateField  # noqa: E402
from mei_docs.models import Signer, Subject  # noqa: E402


def build_fillable_template(fields=None) -> bytes:
    """A one-page A4 PDF with a text field for each name in `fields`."""
    if fields is None:
        fields = [f.value for f in TemplateField]

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(595, 842))
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(48, 800, "RECIBO DE PAGAMENTO DE PRO-LABORE")

    form = pdf.acroForm
    y = 760
    for name in fields:
        pdf.setFont("Helvetica", 8)
        pdf.drawString(48, y + 6, name)
        form.textfield(
            name=name,
            x=160, y=y, width=200, height=18,
            fontName="Helvetica", fontSize=10,
            borderWidth=0, forceBorder=False,
        )
        y -= 28

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def build_plain_pdf() -> bytes:
    """A valid PDF without any form."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(595, 842))
    pdf.drawString(48, 800, "sem formulario")
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def pdf_text(content: bytes) -> str:
    """All extracted text of a PDF, pages joined by newlines."""
    reader = PdfReader(io.BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def pdf_page_count(content: bytes) -> int:
    return len(PdfReader(io.BytesIO(content)).pages)


def build_oversized_png(width=30000, height=30000) -> bytes:
    """A tiny PNG whose header declares more pixels than Pillow will open."""
    def chunk(kind, body):
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header)
            + chunk(b"IDAT", zlib.compress(b"")) + chunk(b"IEND", b""))


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """Stands in for requests.Session; records requested URLs."""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.responses.get(url, FakeResponse(404))


@pytest.fixture
def fake():
    """Seeded pt_BR Faker."""
    generator = Faker("pt_BR")
    generator.seed_instance(1234)
    return generator


@pytest.fixture
def subject_factory(fake):
    """Build synthetic subjects; keyword arguments override fields."""
    counter = {"n": 0}

    def make(**overrides):
        counter["n"] += 1
        company = fake.company()
        values = dict(
            legal_name=f"{company} LTDA",
            trade_name=company,
            tax_id=re.sub(r"\D", "", fake.cnpj()),
            address=fake.address().replace("\n", ", "),
            registration_date="10/03/2019",
            status="Ativo",
            id=f"cli-{counter['n']}",
        )
        values.update(overrides)
        return Subject(**values)

    return make


@pytest.fixture
def subject():
    return Subject(
        legal_name="Padaria São José Ltda",
        trade_name="Padaria São José",
        tax_id="12345678000195",
        address="Rua das Flores, 100 - Centro, Sinop - MT",
        registration_date="10/03/2019",
        id="cli-padaria",
    )


@pytest.fixture
def signature_png() -> bytes:
    image = Image.new("RGBA", (240, 80), (255, 255, 255, 0))
    draw = ImageDraw.Draw(image)
    draw.line([(10, 60), (80, 20), (150, 55), (230, 15)], fill=(0, 0, 120, 255), width=4)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def oversized_png() -> bytes:
    return build_oversized_png()


@pytest.fixture
def signer(signature_png):
    return Signer(
        name="Maria Aparecida Contadora",
        registration_code="CRC-MT 012345/O-1",
        signature_image=signature_png,
    )


@pytest.fixture
def payslip_template() -> bytes:
    return build_fillable_template()


@pytest.fixture
def templates_dir(tmp_path, payslip_template):
    directory = tmp_path / "templates"
    directory.mkdir()
    (directory / "holerite-template.pdf").write_bytes(payslip_template)
    return directory


@pytest.fixture
def config(templates_dir):
    return GenerationConfig(templates_dir=templates_dir)


@pytest.fixture
def empty_config(tmp_path):
    """Config whose templates directory has no templates."""
    return GenerationConfig(templates_dir=tmp_path / "no-templates")


@pytest.fixture
def read_text():
    return pdf_text


@pytest.fixture
def page_count():
    return pdf_page_count


@pytest.fixture
def template_builder():
    return build_fillable_template


@pytest.fixture
def plain_pdf() -> bytes:
    return build_plain_pdf()


@pytest.fixture
def session_factory():
    """Build a FakeSession: session_factory({url: (status, body)}, error=None)."""
    def make(responses=None, error=None):
        responses = {url: FakeResponse(status, body) for url, (status, body) in (responses or {}).items()}
        return FakeSession(responses, error)
    return make
