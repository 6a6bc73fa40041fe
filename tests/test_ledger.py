from datetime import date
from decimal import Decimal

from ledger import (CSV_HEADER, enrich_students, export_csv, export_filename, export_row,
                    filter_by_class, group_by_class, search_students)
from records import PaymentRecord, StudentRecord


def make_student(id, name, class_id='1', class_name='Grade 5', total_fees=1000, status='unpaid',
                 payments=None, roll_no=None, academic_year='2024-25'):
    return StudentRecord(
        id=id,
        name=name,
        roll_no=roll_no or f'R-{id:02d}',
        class_id=class_id,
        class_name=class_name,
        total_fees=total_fees,
        status=status,
        academic_year=academic_year,
        payments=payments,
    )


def asha_and_ravi():
    asha = make_student(1, 'Asha', status='partially_paid', payments=[
        PaymentRecord(date='2024-01-05', amount_paid=400, mode_of_payment='bank_transfer', receipt_number='R100'),
    ])
    ravi = make_student(2, 'Ravi', class_id='2', class_name='Grade 6')
    return [asha, ravi]


def test_total_paid_and_balance():
    asha, ravi = enrich_students(asha_and_ravi())
    assert asha.total_paid == Decimal('400')
    assert asha.balance == Decimal('600')
    assert ravi.total_paid == Decimal('0')
    assert ravi.balance == Decimal('1000')
    assert ravi.last_payment is None


def test_enrich_does_not_touch_input():
    students = asha_and_ravi()
    enrich_students(students)
    assert students[0].total_paid is None


def test_last_payment_is_most_recent_whatever_the_input_order():
    student = make_student(1, 'Meera', payments=[
        PaymentRecord(date='2023-11-02', amount_paid=300, receipt_number='old'),
        PaymentRecord(date=None, amount_paid=10, receipt_number='undated'),
        PaymentRecord(date='2024-02-10', amount_paid=250, receipt_number='new'),
    ])
    enriched = enrich_students([student])[0]
    assert enriched.last_payment.receipt_number == 'new'
    assert [p.receipt_number for p in enriched.payments] == ['new', 'old', 'undated']
    assert enriched.total_paid == Decimal('560')


def test_class_filter():
    students = asha_and_ravi()
    assert [s.name for s in enrich_students(students, class_id='2')] == ['Ravi']
    assert [s.name for s in enrich_students(students, class_id=2)] == ['Ravi']
    assert len(filter_by_class(students, '')) == 2
    assert filter_by_class(students, '99') == []


def test_search_matches_name_or_roll_number():
    students = asha_and_ravi()
    assert search_students(students, '') == students
    assert search_students(students, '   ') == students
    assert [s.name for s in search_students(students, 'ASH')] == ['Asha']
    assert [s.name for s in search_students(students, 'r-02')] == ['Ravi']
    assert search_students(students, 'nobody') == []


def test_group_by_class_totals():
    students = enrich_students([
        make_student(1, 'Asha', total_fees=1000, status='partially_paid',
                     payments=[PaymentRecord(date='2024-01-05', amount_paid=400)]),
        make_student(2, 'Ravi', class_id='2', class_name='Grade 6', total_fees=800),
        make_student(3, 'Meera', total_fees=1200, status='unpaid'),
        make_student(4, 'Kiran', total_fees=500, status='paid',
                     payments=[PaymentRecord(date='2024-03-01', amount_paid=500)]),
    ])
    groups = group_by_class(students)

    assert [g.name for g in groups] == ['Grade 5', 'Grade 6']
    grade5 = groups[0]
    assert grade5.class_id == '1'
    assert grade5.count == 3
    assert grade5.total_fees == Decimal('2700')
    assert grade5.total_paid == Decimal('900')
    assert grade5.balance == Decimal('1800')
    assert grade5.unpaid == 1
    assert grade5.partial == 1
    for group in groups:
        assert group.total_paid == sum(s.total_paid for s in group.students)
        assert group.total_fees == sum(s.total_fees for s in group.students)


def test_missing_class_groups_as_unknown():
    student = make_student(1, 'Kiran', class_id=None, class_name=None)
    groups = group_by_class(enrich_students([student]))
    assert groups[0].name == 'Unknown'
    assert groups[0].class_id is None


def test_export_row_matches_reference_format():
    students = enrich_students(asha_and_ravi())
    text = export_csv(students)
    lines = text.split('\n')

    assert lines[0] == ','.join(f'"{h}"' for h in CSV_HEADER)
    assert lines[1] == ('"Asha","Grade 5","R-01","1000.00","400.00","600.00","partially_paid",'
                        '"1/5/2024","400.00","bank transfer","2024-25","R100"')
    assert lines[2] == '"Ravi","Grade 6","R-02","1000.00","0.00","1000.00","unpaid","-","-","-","2024-25","-"'
    assert len(lines) == 3
    assert not text.endswith('\n')


def test_export_balance_column_equals_balance():
    for student in enrich_students(asha_and_ravi()):
        assert export_row(student)[5] == f'{student.balance:.2f}'


def test_export_only_replaces_first_underscore_in_mode():
    student = make_student(1, 'Asha', payments=[
        PaymentRecord(date=date(2024, 12, 25), amount_paid='99.5', mode_of_payment='pay_by_card'),
    ])
    row = export_row(enrich_students([student])[0])
    assert row[7] == '12/25/2024'
    assert row[8] == '99.50'
    assert row[9] == 'pay by_card'


def test_export_missing_academic_year_uses_placeholder():
    row = export_row(enrich_students([make_student(1, 'Asha', academic_year=None)])[0])
    assert row[10] == '-'


def test_export_escapes_embedded_quotes():
    text = export_csv(enrich_students([make_student(1, 'Asha "Ash" Rao')]))
    assert text.split('\n')[1].startswith('"Asha ""Ash"" Rao",')


def test_export_empty_is_noop():
    assert export_csv([]) is None


def test_export_is_idempotent():
    students = enrich_students(asha_and_ravi())
    assert export_csv(students) == export_csv(students)


def test_export_filename():
    today = date(2024, 6, 1)
    assert export_filename('school', today=today) == 'ledger-school-all-2024-06-01.csv'
    assert export_filename('class', '7', today=today) == 'ledger-class-7-2024-06-01.csv'
    assert export_filename('bogus', today=today) == 'ledger-school-all-2024-06-01.csv'
