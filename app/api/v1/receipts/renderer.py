"""
Printable fee receipt (HTML).

One physical page carries two logical copies, "Student Copy" and "Office Copy", with identical
content apart from the copy label. Rendering is pure: same inputs, same bytes.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Tuple, Union

from jinja2 import DictLoader, Environment, StrictUndefined
from markupsafe import Markup

from app.core.config import SchoolBranding
from app.core.formatting import (
    Number,
    amount_to_indian_words,
    format_amount,
    format_class_section,
    format_date,
    format_serial,
    to_money,
)

from .distribution import CATEGORY_ORDER
from .schemas import ReceiptStudent

COPY_LABELS = ("Student Copy", "Office Copy")
PAGE_BREAK = '<div style="page-break-after:always"></div>'

_DOCUMENT_HTML = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Receipt</title><style>
@page { size: A4 portrait; margin: 8mm; }
html, body { height: auto; margin: 0; }
.receipt { page-break-inside: avoid; box-sizing: border-box; margin: 0 0 4mm 0; padding: 4mm; height: 134mm; overflow: hidden; border: 1px solid #000; font-family: serif; font-size: 10px; }
.header { text-align: center; margin-bottom: 6px; }
.brand { display: flex; align-items: center; justify-content: center; gap: 12px; min-height: 54px; }
.brand img { height: 50px; object-fit: contain; }
.school-name { font-size: 19px; font-weight: 700; letter-spacing: .5px; }
.address { font-style: italic; }
.title { display: inline-flex; gap: 6px; border: 1px solid #000; padding: 2px 6px; font-size: 12px; font-weight: 600; margin-top: 4px; }
.copy-label { font-size: 10px; font-weight: 400; }
.meta { line-height: 1.3; margin-bottom: 6px; }
.meta .row { display: flex; justify-content: space-between; }
table { width: 100%; border-collapse: collapse; font-size: 11px; margin-bottom: 6px; }
th, td { border: 1px solid #000; padding: 4px; }
thead th { background: #f3f3f3; }
td.num { text-align: center; width: 32px; }
td.amount { text-align: right; width: 90px; }
tr.total { font-weight: 600; }
.summary { border: 1px solid #000; padding: 3px 6px; margin-bottom: 8px; }
.due { color: #b10000; }
.settled { color: #0a7a0a; }
.signature { text-align: right; font-size: 11px; margin-top: 20px; }
.signature .line { border-top: 1px solid #000; padding-top: 4px; display: inline-block; }
</style></head>
<body><div class="layout">
{{ pages | join(page_break) }}
</div></body></html>
"""

_COPY_HTML = """<div class="receipt">
<div class="header">
<div class="brand">
{% if school.logo_url %}<img src="{{ school.logo_url }}" alt="School Logo">{% endif %}
<div class="school-name">{{ school.name }}</div>
</div>
<div class="address">{{ school.address_line }}</div>
<div class="title">Fee Receipt <span class="copy-label">({{ copy_label }})</span></div>
</div>
<div class="meta">
<div class="row"><span>Serial No.: <strong>{{ serial }}</strong></span><span>Date: {{ payment_date }}</span></div>
<div>Name of the Student: <strong>{{ student.name }}</strong></div>
{% if student.father_name %}<div>Father's Name: <strong>{{ student.father_name }}</strong></div>
{% endif %}
<div class="row"><span>Class: <strong>{{ class_section }}</strong></span><span>Session: <strong>{{ session }}</strong></span></div>
{% if student.admission_number %}<div>Admission No.: <strong>{{ student.admission_number }}</strong></div>
{% endif %}
</div>
<table>
<thead><tr><th>S.No.</th><th>Particulars</th><th>Amount (&#8377;)</th></tr></thead>
<tbody>
{% for label, amount in rows %}
<tr><td class="num">{{ loop.index }}.</td><td>{{ label }}</td><td class="amount">{{ amount }}</td></tr>
{% endfor %}
<tr class="total"><td class="num">{{ rows | length + 1 }}.</td><td>Total Amount</td><td class="amount">{{ total }}</td></tr>
</tbody>
</table>
<div>Amount In Words: <em>{{ amount_words }}</em></div>
{% if summary %}
<div class="summary"><strong>Yearly:</strong> &#8377;{{ summary.yearly }} &bull; <strong>Total Paid:</strong> &#8377;{{ summary.paid }} &bull; <strong>Remaining:</strong> <span class="{{ summary.css_class }}">&#8377;{{ summary.remaining }}</span></div>
{% endif %}
<div class="signature"><div style="height:40px;"></div><div class="line">Signature</div></div>
</div>
"""

_env = Environment(
    loader=DictLoader({"document.html": _DOCUMENT_HTML, "copy.html": _COPY_HTML}),
    autoescape=True,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def _summary(yearly_fee_amount: Optional[Number], paid_so_far: Optional[Number]) -> Optional[dict]:
    if yearly_fee_amount is None or paid_so_far is None:
        return None
    yearly = to_money(yearly_fee_amount)
    paid = to_money(paid_so_far)
    remaining = yearly - paid
    return {
        "yearly": format_amount(yearly),
        "paid": format_amount(paid),
        "remaining": format_amount(remaining) if remaining >= 0 else f"{format_amount(-remaining)} (Over)",
        "css_class": "settled" if remaining <= 0 else "due",
    }


def render_receipt(
    branding: SchoolBranding,
    student: ReceiptStudent,
    payment_date: Union[date, str],
    items: Iterable[Tuple[str, Number]],
    serial: Optional[int],
    *,
    yearly_fee_amount: Optional[Number] = None,
    paid_so_far: Optional[Number] = None,
    session: Optional[str] = None,
    copies: int = 1,
) -> str:
    """
    Render the complete print document.

    `items` may list categories in any order or omit some; lines always follow CATEGORY_ORDER
    and missing categories print blank. `copies` is the number of physical pages, each holding
    both logical copies. The serial must already be allocated.
    """
    if not student.name or not student.name.strip():
        raise ValueError("Student name is required to render a receipt")
    if serial is None:
        raise ValueError("Receipt serial must be allocated before rendering")
    if copies < 1:
        raise ValueError("copies must be at least 1")

    amounts = {label: to_money(value) for label, value in items}
    ordered = [(label, amounts.get(label, Decimal("0.00"))) for label in CATEGORY_ORDER]
    total = sum((amount for _, amount in ordered), Decimal("0.00"))

    context = {
        "school": branding,
        "student": student,
        "serial": format_serial(serial),
        "payment_date": format_date(payment_date),
        "class_section": format_class_section(student.grade, student.section),
        "session": session or branding.academic_session,
        "rows": [(label, format_amount(amount) if amount else "") for label, amount in ordered],
        "total": format_amount(total),
        "amount_words": amount_to_indian_words(total),
        "summary": _summary(yearly_fee_amount, paid_so_far),
    }
    copy_template = _env.get_template("copy.html")
    page = "".join(copy_template.render(copy_label=label, **context) for label in COPY_LABELS)
    return _env.get_template("document.html").render(
        pages=[Markup(page)] * copies,
        page_break=Markup(PAGE_BREAK),
    )
