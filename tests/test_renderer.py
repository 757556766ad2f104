"""Unit tests for the printable receipt."""

from datetime import date
from decimal import Decimal

import pytest

from app.api.v1.receipts.renderer import COPY_LABELS, PAGE_BREAK, render_receipt
from app.api.v1.receipts.schemas import ReceiptStudent
from app.core.config import SchoolBranding

BRANDING = SchoolBranding(
    name="Sunrise Public School",
    address_line="Main Road, Lucknow",
    logo_url="https://example.com/logo.png",
    academic_session="2025-26",
)
STUDENT = ReceiptStudent(
    name="Asha Verma",
    father_name="Ravi Verma",
    grade="5",
    section="A",
    admission_number="ADM001",
)


def _render(**kwargs) -> str:
    params = dict(
        branding=BRANDING,
        student=STUDENT,
        payment_date=date(2025, 5, 10),
        items=[("Teaching Fee", Decimal("12345.67"))],
        serial=42,
    )
    params.update(kwargs)
    return render_receipt(**params)


def test_receipt_contents() -> None:
    html = _render()
    assert "Sunrise Public School" in html
    assert "Main Road, Lucknow" in html
    assert 'src="https://example.com/logo.png"' in html
    assert "Serial No.: <strong>0042</strong>" in html
    assert "2025-05-10" in html
    assert "Asha Verma" in html
    assert "Father&#39;s Name" in html or "Father's Name" in html
    assert "Class 5 Section A" in html
    assert "12345.67" in html
    assert "Rupees Twelve Thousand Three Hundred Forty Five and Sixty Seven Paise Only" in html


def test_both_copies_on_each_page() -> None:
    html = _render()
    for label in COPY_LABELS:
        assert html.count(f"({label})") == 1
    assert PAGE_BREAK not in html


def test_multiple_copies_insert_page_breaks() -> None:
    html = _render(copies=3)
    assert html.count("(Student Copy)") == 3
    assert html.count(PAGE_BREAK) == 2


def test_rendering_is_deterministic() -> None:
    assert _render() == _render()


def test_zero_categories_print_blank_and_order_is_fixed() -> None:
    html = _render(items=[("Development", 500), ("Admission Fee", 1000)])
    assert html.index("Admission Fee") < html.index("Teaching Fee") < html.index("Development")
    assert ">1000.00<" in html
    assert ">500.00<" in html
    assert ">0.00<" not in html
    assert "Total Amount" in html
    assert ">1500.00<" in html


def test_summary_shows_remaining_balance() -> None:
    html = _render(yearly_fee_amount=Decimal("24000"), paid_so_far=Decimal("12345.67"))
    assert "11654.33" in html
    assert 'class="due"' in html


def test_summary_marks_overpayment() -> None:
    html = _render(yearly_fee_amount=Decimal("10000"), paid_so_far=Decimal("12345.67"))
    assert "2345.67 (Over)" in html
    assert 'class="settled"' in html


def test_summary_omitted_without_totals() -> None:
    assert "Total Paid" not in _render()


def test_session_override() -> None:
    assert "2024-25" in _render(session="2024-25")
    assert "2025-26" in _render()


def test_student_fields_are_escaped() -> None:
    html = _render(student=STUDENT.model_copy(update={"name": "<b>Asha</b>"}))
    assert "<b>Asha</b>" not in html
    assert "&lt;b&gt;Asha&lt;/b&gt;" in html


def test_requires_serial() -> None:
    with pytest.raises(ValueError):
        _render(serial=None)


def test_requires_student_name() -> None:
    with pytest.raises(ValueError):
        _render(student=STUDENT.model_copy(update={"name": "  "}))
