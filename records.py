"""
Typed records handed from the data-access layer to the ledger functions.

Rows coming out of the database (or loosely shaped mappings from an import)
are normalized here: missing or malformed amounts become zero, missing text
becomes an empty string and dates are parsed into ``datetime.date``. Nothing
in this module raises on bad data.
"""
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

PAID = 'paid'
PARTIALLY_PAID = 'partially_paid'
UNPAID = 'unpaid'
STATUSES = (PAID, PARTIALLY_PAID, UNPAID)

UNKNOWN_CLASS = 'Unknown'

ZERO = Decimal('0')


def to_decimal(value):
    """Coerce a currency amount to Decimal, treating anything unusable as zero"""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return amount if amount.is_finite() else ZERO


def to_date(value):
    """Parse a date, datetime, ISO string or epoch milliseconds; None otherwise"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def to_text(value):
    if value is None:
        return ''
    return str(value)


def _optional_text(value):
    text = to_text(value).strip()
    return text or None


class PaymentRecord:
    """A single recorded payment against a student."""
    def __init__(self, date=None, amount_paid=None, mode_of_payment='',
                 receipt_number='', description=None):
        self.date = to_date(date)
        self.amount_paid = to_decimal(amount_paid)
        self.mode_of_payment = to_text(mode_of_payment)
        self.receipt_number = to_text(receipt_number)
        self.description = _optional_text(description)

    @classmethod
    def from_mapping(cls, row):
        row = row or {}
        return cls(
            date=row.get('date'),
            amount_paid=row.get('amount_paid'),
            mode_of_payment=row.get('mode_of_payment'),
            receipt_number=row.get('receipt_number'),
            description=row.get('description'),
        )

    @classmethod
    def from_model(cls, payment):
        return cls(
            date=payment.date,
            amount_paid=payment.amount_paid,
            mode_of_payment=payment.mode_of_payment,
            receipt_number=payment.receipt_number,
            description=payment.description,
        )

    def __repr__(self):
        return f'<PaymentRecord {self.receipt_number} {self.amount_paid} on {self.date}>'


class StudentRecord:
    """A student with the payments recorded against them.

    ``total_paid`` stays ``None`` until the record has been through
    ``ledger.enrich_students``; ``balance`` treats that as zero paid.
    """
    def __init__(self, id, name='', roll_no='', class_id=None, class_name=None,
                 total_fees=None, status=UNPAID, academic_year=None,
                 payments=None, total_paid=None):
        self.id = id
        self.name = to_text(name)
        self.roll_no = to_text(roll_no)
        self.class_id = None if class_id in (None, '') else str(class_id)
        self.class_name = to_text(class_name).strip() or UNKNOWN_CLASS
        self.total_fees = to_decimal(total_fees)
        self.status = to_text(status) or UNPAID
        self.academic_year = _optional_text(academic_year)
        self.payments = list(payments or [])
        self.total_paid = None if total_paid is None else to_decimal(total_paid)

    @classmethod
    def from_mapping(cls, row):
        """Build a record from a loosely shaped mapping.

        The class name may arrive nested (``{"classes": {"name": ...}}``) the
        way a joined select returns it, or flat as ``class_name``/``class``.
        """
        row = row or {}
        nested = row.get('classes') or row.get('class_ref') or {}
        class_name = nested.get('name') if isinstance(nested, dict) else None
        if not class_name:
            class_name = row.get('class_name') or row.get('class')
        payments = row.get('payments') or []
        return cls(
            id=row.get('id'),
            name=row.get('name'),
            roll_no=row.get('roll_no'),
            class_id=row.get('class_id'),
            class_name=class_name if isinstance(class_name, str) else None,
            total_fees=row.get('total_fees'),
            status=row.get('status'),
            academic_year=row.get('academic_year'),
            payments=[PaymentRecord.from_mapping(p) for p in payments if isinstance(p, dict)],
        )

    @classmethod
    def from_model(cls, student):
        return cls(
            id=student.id,
            name=student.name,
            roll_no=student.roll_no,
            class_id=student.class_id,
            class_name=student.school_class.name if student.school_class else None,
            total_fees=student.total_fees,
            status=student.status,
            academic_year=student.academic_year,
            payments=[PaymentRecord.from_model(p) for p in student.payments],
        )

    @property
    def balance(self):
        return self.total_fees - (self.total_paid or ZERO)

    @property
    def last_payment(self):
        """Most recent payment, assuming payments are already sorted newest first"""
        return self.payments[0] if self.payments else None

    def __repr__(self):
        return f'<StudentRecord {self.id} {self.name!r} ({self.class_name})>'


class ClassGroup:
    """Students sharing a class name, with their fee totals."""
    def __init__(self, name, class_id=None):
        self.name = name
        self.class_id = class_id
        self.students = []
        self.total_fees = ZERO
        self.total_paid = ZERO
        self.unpaid = 0
        self.partial = 0

    def add(self, student):
        if self.class_id is None:
            self.class_id = student.class_id
        self.students.append(student)
        self.total_fees += student.total_fees
        self.total_paid += student.total_paid or ZERO
        if student.status == UNPAID:
            self.unpaid += 1
        elif student.status == PARTIALLY_PAID:
            self.partial += 1

    @property
    def count(self):
        return len(self.students)

    @property
    def balance(self):
        return self.total_fees - self.total_paid

    def __repr__(self):
        return f'<ClassGroup {self.name!r} students={self.count}>'


class LedgerEntryRecord:
    """An accounting line kept by the database; displayed, never computed."""
    def __init__(self, date=None, type='', description=None, debit=None,
                 credit=None, balance=None, receipt_number=None):
        self.date = to_date(date)
        self.type = to_text(type)
        self.description = _optional_text(description)
        self.debit = None if debit is None else to_decimal(debit)
        self.credit = None if credit is None else to_decimal(credit)
        self.balance = to_decimal(balance)
        self.receipt_number = _optional_text(receipt_number)

    @classmethod
    def from_model(cls, entry):
        return cls(
            date=entry.date,
            type=entry.type,
            description=entry.description,
            debit=entry.debit,
            credit=entry.credit,
            balance=entry.balance,
            receipt_number=entry.receipt_number,
        )


class FeeTypeRecord:
    """A fee type assigned to a student."""
    def __init__(self, name='', default_amount=None, description=None):
        self.name = to_text(name)
        self.default_amount = to_decimal(default_amount)
        self.description = _optional_text(description)

    @classmethod
    def from_model(cls, fee_type):
        return cls(
            name=fee_type.name,
            default_amount=fee_type.default_amount,
            description=fee_type.description,
        )


class StudentDetail:
    """Everything shown on a single student's dashboard page."""
    def __init__(self, student, fee_types=None, ledger_entries=None):
        self.student = student
        self.fee_types = list(fee_types or [])
        self.ledger_entries = list(ledger_entries or [])
