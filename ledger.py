"""
Master ledger aggregation and CSV export.

Everything here is a pure function over lists of ``records.StudentRecord``:
no database access, no session state.
"""
import copy
import csv
import io
from datetime import date, datetime

from records import ClassGroup, ZERO

CSV_HEADER = [
    'Name',
    'Class',
    'Roll Number',
    'Total Fees',
    'Paid',
    'Balance',
    'Status',
    'Last Payment Date',
    'Last Payment Amount',
    'Payment Mode',
    'Academic Year',
    'Receipt Number',
]

PLACEHOLDER = '-'

VIEWS = ('class', 'school')


def _payment_sort_key(payment):
    return payment.date or date.min


def enrich_students(students, class_id=None):
    """Return copies of the students with payments sorted newest first and total_paid set.

    When ``class_id`` is given only students in that class are kept.
    """
    enriched = []
    for student in filter_by_class(students, class_id):
        record = copy.copy(student)
        # Undated payments go last; sorted() keeps equal dates in source order
        record.payments = sorted(student.payments, key=_payment_sort_key, reverse=True)
        record.total_paid = sum((p.amount_paid for p in record.payments), ZERO)
        enriched.append(record)
    return enriched


def filter_by_class(students, class_id):
    if not class_id:
        return list(students)
    class_id = str(class_id)
    return [s for s in students if s.class_id == class_id]


def search_students(students, term):
    """Case-insensitive substring match on name or roll number"""
    term = (term or '').strip().lower()
    if not term:
        return list(students)
    return [
        s for s in students
        if term in s.name.lower() or term in s.roll_no.lower()
    ]


def group_by_class(students):
    """Group students by class name, in order of first appearance"""
    groups = {}
    for student in students:
        group = groups.get(student.class_name)
        if group is None:
            group = groups[student.class_name] = ClassGroup(student.class_name)
        group.add(student)
    return list(groups.values())


def format_amount(value):
    return f'{(value or ZERO):.2f}'


def format_date(value):
    """M/D/YYYY without zero padding"""
    if value is None:
        return PLACEHOLDER
    return f'{value.month}/{value.day}/{value.year}'


def export_row(student):
    last = student.last_payment
    total_paid = student.total_paid or ZERO
    return [
        student.name,
        student.class_name,
        student.roll_no,
        format_amount(student.total_fees),
        format_amount(total_paid),
        format_amount(student.total_fees - total_paid),
        student.status,
        format_date(last.date) if last else PLACEHOLDER,
        format_amount(last.amount_paid) if last else PLACEHOLDER,
        last.mode_of_payment.replace('_', ' ', 1) if last else PLACEHOLDER,
        student.academic_year or PLACEHOLDER,
        last.receipt_number if last else PLACEHOLDER,
    ]


def export_csv(students):
    """Serialize students to quoted CSV text, or None when there is nothing to export.

    Every field is double-quoted and embedded quotes are doubled. Rows are
    separated by a bare newline with none after the last row.
    """
    if not students:
        return None
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for student in students:
        writer.writerow(export_row(student))
    text = buffer.getvalue()
    return text[:-1] if text.endswith('\n') else text


def export_filename(view, class_id=None, today=None):
    if view not in VIEWS:
        view = 'school'
    today = today or datetime.utcnow().date()
    return f"ledger-{view}-{class_id or 'all'}-{today.isoformat()}.csv"
