import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from auth import AuthError, AuthSession
from models import SchoolClass, Student, StudentFeeType
from records import FeeTypeRecord, LedgerEntryRecord, StudentDetail, StudentRecord

logger = logging.getLogger(__name__)


class DataAccessError(Exception):
    """Raised when records cannot be read from the database."""


class ClassOption:
    def __init__(self, id, name):
        self.id = str(id)
        self.name = name


class LedgerRepository:
    """Reads students, payments and ledger entries for a signed-in user."""

    def __init__(self, auth_session):
        if not isinstance(auth_session, AuthSession):
            raise AuthError('Not signed in')
        self.auth_session = auth_session

    def fetch_classes(self):
        try:
            classes = SchoolClass.query.order_by(SchoolClass.name).all()
        except SQLAlchemyError as e:
            logger.exception("Failed to load classes for %s", self.auth_session.email)
            raise DataAccessError('Failed to load classes') from e
        return [ClassOption(c.id, c.name) for c in classes]

    def fetch_students(self):
        """All students with their class name and payments, as typed records"""
        try:
            students = (
                Student.query
                .options(selectinload(Student.school_class), selectinload(Student.payments))
                .order_by(Student.id)
                .all()
            )
            records = [StudentRecord.from_model(s) for s in students]
        except SQLAlchemyError as e:
            logger.exception("Failed to load students for %s", self.auth_session.email)
            raise DataAccessError('Failed to load students') from e
        logger.debug("Loaded %d students", len(records))
        return records

    def fetch_student_detail(self, student_id):
        """Profile, fee types, payments and ledger for one student, or None"""
        try:
            student = (
                Student.query
                .options(
                    selectinload(Student.school_class),
                    selectinload(Student.payments),
                    selectinload(Student.ledger_entries),
                    selectinload(Student.fee_types).selectinload(StudentFeeType.fee_type),
                )
                .filter_by(id=student_id)
                .first()
            )
            if student is None:
                return None
            return StudentDetail(
                StudentRecord.from_model(student),
                fee_types=[FeeTypeRecord.from_model(link.fee_type) for link in student.fee_types],
                ledger_entries=[LedgerEntryRecord.from_model(e) for e in student.ledger_entries],
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to load student %s", student_id)
            raise DataAccessError('Failed to load student') from e
