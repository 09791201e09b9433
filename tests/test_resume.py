import io

import pytest
from docx import Document
from fastapi.testclient import TestClient

from app.core.exceptions import ValidationError
from app.main import app
from app.services.resume_service import docx_text, extract_text, parse_resume, pdf_text
from conftest import auth_headers, insert_user
from utils.resume_utils import extract_experience, is_date_range, is_job_title, parse_resume_text

client = TestClient(app)

RESUME = """Asha Rao
asha.rao@example.com | +91 987-654-3210
Bengaluru, KA

Summary: Backend developer with five years of Python and MongoDB experience.

Experience
Software Engineer at Acme Corp (2019 - Present)
Built REST API services in Python.

Education
Bachelor of Technology at IIT Delhi (2018)

Skills: Python, Docker, Kubernetes, Git
"""


def test_parse_resume_text():
    parsed = parse_resume_text(RESUME)

    assert parsed["personal_info"] == {
        "name": "Asha Rao",
        "email": "asha.rao@example.com",
        "phone": "+91 987-654-3210",
        "location": "Bengaluru, KA",
    }
    assert parsed["summary"] == "Backend developer with five years of Python and MongoDB experience."

    job = parsed["experience"][0]
    assert (job["title"], job["company"], job["duration"]) == ("Software Engineer", "Acme Corp", "2019 - Present")
    assert job["description"].startswith("Built REST API services in Python.")

    assert parsed["education"] == [
        {"degree": "Bachelor of Technology", "institute": "IIT Delhi", "year": "2018", "location": ""}
    ]
    assert set(parsed["skills"]) == {"Python", "MongoDB", "Git", "Docker", "REST API", "Kubernetes"}


def test_experience_line_fallback():
    text = "Senior Developer\nGlobex Ltd\n2016 - 2019\nMaintained billing systems."

    assert extract_experience(text) == [
        {
            "title": "Senior Developer",
            "company": "Globex Ltd",
            "duration": "2016 - 2019",
            "description": "Maintained billing systems.",
        }
    ]


def test_line_classifiers():
    assert is_job_title("Lead Designer")
    assert not is_job_title("Painted murals for local cafes")
    assert is_date_range("Jan 2020 to Mar 2021")
    assert not is_date_range("Since forever")


def test_empty_text_gives_empty_fields():
    parsed = parse_resume_text("")
    assert parsed["personal_info"]["email"] == ""
    assert parsed["experience"] == []
    assert parsed["skills"] == []


def test_docx_extraction():
    document = Document()
    document.add_paragraph("Asha Rao")
    table = document.add_table(rows=1, cols=1)
    table.rows[0].cells[0].text = "Skills: Python"
    buffer = io.BytesIO()
    document.save(buffer)

    text = docx_text(buffer.getvalue())
    assert "Asha Rao" in text
    assert "Skills: Python" in text


def test_unreadable_docx():
    with pytest.raises(ValidationError):
        docx_text(b"definitely not a zip")


def test_unsupported_type():
    with pytest.raises(ValidationError):
        extract_text("resume.odt", "application/vnd.oasis.opendocument.text", b"PK")


def make_pdf(lines):
    ops = ["BT", "/F1 11 Tf", "14 TL", "72 760 Td"]
    ops += [f"({line}) Tj T*" for line in lines]
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


PDF_LINES = [
    "Asha Rao",
    "asha.rao@example.com",
    "Bengaluru, KA",
    "Summary: Backend developer with five years of Python and MongoDB experience.",
    "Skills: Python, Docker, Kubernetes, Git",
]


def test_pdf_text_extraction():
    text = pdf_text(make_pdf(PDF_LINES))

    assert "Asha Rao" in text
    assert "asha.rao@example.com" in text
    assert "Kubernetes" in text


def test_parse_pdf_resume():
    parsed = parse_resume("resume.pdf", "application/pdf", make_pdf(PDF_LINES))

    assert parsed["personal_info"]["email"] == "asha.rao@example.com"
    assert "Python" in parsed["skills"]


def test_unreadable_pdf():
    with pytest.raises(ValidationError):
        pdf_text(b"%PDF-1.4\n")


def test_short_resume_rejected():
    with pytest.raises(ValidationError) as exc:
        parse_resume("resume.txt", "text/plain", b"Too short")
    assert exc.value.message == "Could not extract sufficient text from resume"


def test_parse_endpoint(mock_db):
    user = insert_user(mock_db)

    response = client.post(
        "/api/resume/parse",
        files={"resume": ("resume.txt", RESUME.encode(), "text/plain")},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["data"]["personal_info"]["name"] == "Asha Rao"


def test_parse_endpoint_requires_login():
    response = client.post(
        "/api/resume/parse", files={"resume": ("resume.txt", RESUME.encode(), "text/plain")}
    )
    assert response.status_code == 401
