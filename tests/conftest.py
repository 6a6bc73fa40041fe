import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from datetime import date
from decimal import Decimal

import pytest

from app import create_app
from auth import hash_password
from extensions import db
from models import FeeType, LedgerEntry, Payment, SchoolClass, Student, StudentFeeType, User

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'correct-horse'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    user = User(email=ADMIN_EMAIL, password_hash=hash_password(ADMIN_PASSWORD), is_active=True)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def school(app):
    """Two classes, four students, one of them without a class"""
    grade5 = SchoolClass(name='Grade 5')
    grade6 = SchoolClass(name='Grade 6')
    db.session.add_all([grade5, grade6])
    db.session.flush()

    asha = Student(name='Asha', roll_no='R-01', class_id=grade5.id, total_fees=Decimal('1000'),
                   status='partially_paid', academic_year='2024-25')
    meera = Student(name='Meera', roll_no='R-03', class_id=grade5.id, total_fees=Decimal('1200'),
                    status='partially_paid', academic_year='2024-25')
    ravi = Student(name='Ravi', roll_no='R-02', class_id=grade6.id, total_fees=Decimal('1000'),
                   status='unpaid', academic_year='2024-25')
    kiran = Student(name='Kiran', roll_no='R-04', class_id=None, total_fees=Decimal('500'),
                    status='paid')
    db.session.add_all([asha, meera, ravi, kiran])
    db.session.flush()

    db.session.add_all([
        Payment(student_id=asha.id, date=date(2024, 1, 5), amount_paid=Decimal('400'),
                mode_of_payment='bank_transfer', receipt_number='R100'),
        Payment(student_id=meera.id, date=date(2023, 11, 2), amount_paid=Decimal('300'),
                mode_of_payment='cash', receipt_number='R090'),
        Payment(student_id=meera.id, date=date(2024, 2, 10), amount_paid=Decimal('250.50'),
                mode_of_payment='upi', receipt_number='R120'),
        Payment(student_id=kiran.id, date=date(2024, 3, 1), amount_paid=Decimal('500'),
                mode_of_payment='cash', receipt_number='R130'),
    ])

    tuition = FeeType(name='Tuition', default_amount=Decimal('900'), description='Term tuition')
    db.session.add(tuition)
    db.session.flush()
    db.session.add(StudentFeeType(student_id=asha.id, fee_type_id=tuition.id))
    db.session.add_all([
        LedgerEntry(student_id=asha.id, date=date(2024, 1, 1), type='fee', description='Annual fees',
                    debit=Decimal('1000'), balance=Decimal('1000')),
        LedgerEntry(student_id=asha.id, date=date(2024, 1, 5), type='payment', description='Bank transfer',
                    credit=Decimal('400'), balance=Decimal('600'), receipt_number='R100'),
    ])
    db.session.commit()
    return {
        'grade5': grade5.id,
        'grade6': grade6.id,
        'asha': asha.id,
        'ravi': ravi.id,
        'meera': meera.id,
        'kiran': kiran.id,
    }


@pytest.fixture
def logged_in(client, admin):
    response = client.post('/login', data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert response.status_code == 302
    return client
