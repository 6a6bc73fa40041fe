from datetime import datetime

from extensions import db


# Database Models
class SchoolClass(db.Model):
    __tablename__ = 'classes'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    students = db.relationship('Student', back_populates='school_class')


class Student(db.Model):
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    roll_no = db.Column(db.String(50), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('classes.id'), nullable=True)
    total_fees = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='unpaid')  # paid, partially_paid, unpaid
    academic_year = db.Column(db.String(20), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    school_class = db.relationship('SchoolClass', back_populates='students')
    payments = db.relationship('Payment', back_populates='student', order_by='Payment.date.desc()')
    ledger_entries = db.relationship('LedgerEntry', back_populates='student', order_by='LedgerEntry.date')
    fee_types = db.relationship('StudentFeeType', back_populates='student')


class Payment(db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    amount_paid = db.Column(db.Numeric(12, 2), nullable=False)
    mode_of_payment = db.Column(db.String(50), nullable=False)  # cash, upi, bank_transfer, cheque
    receipt_number = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship('Student', back_populates='payments')


class LedgerEntry(db.Model):
    __tablename__ = 'ledger_entries'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    type = db.Column(db.String(30), nullable=False)  # fee, payment, adjustment
    description = db.Column(db.String(255), nullable=True)
    debit = db.Column(db.Numeric(12, 2), nullable=True)
    credit = db.Column(db.Numeric(12, 2), nullable=True)
    balance = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    receipt_number = db.Column(db.String(100), nullable=True)

    student = db.relationship('Student', back_populates='ledger_entries')


class FeeType(db.Model):
    __tablename__ = 'fee_types'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    default_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    description = db.Column(db.String(255), nullable=True)


class StudentFeeType(db.Model):
    __tablename__ = 'student_fee_types'

    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), primary_key=True)
    fee_type_id = db.Column(db.Integer, db.ForeignKey('fee_types.id'), primary_key=True)

    student = db.relationship('Student', back_populates='fee_types')
    fee_type = db.relationship('FeeType')


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), nullable=False, unique=True)
    password_hash = db.Column(db.String(128), nullable=False)  # bcrypt
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login_at = db.Column(db.DateTime, nullable=True)
