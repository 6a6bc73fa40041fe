import logging

from flask import Blueprint, Response, abort, flash, redirect, render_template, request, url_for

from auth import current_auth, login_required
from ledger import VIEWS, enrich_students, export_csv, export_filename, group_by_class, search_students
from repository import DataAccessError, LedgerRepository

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)


def _ledger_params():
    view = request.args.get('view', 'school')
    if view not in VIEWS:
        view = 'school'
    class_id = request.args.get('class_id', '').strip()
    search = request.args.get('search', '').strip()
    return view, class_id, search


def _load_students(repository, class_id, search):
    """Fetch, enrich and filter students; a failed fetch is shown as an empty ledger"""
    try:
        students = repository.fetch_students()
    except DataAccessError as e:
        flash(str(e), 'error')
        students = []
    return search_students(enrich_students(students, class_id), search)


@dashboard_bp.route('/')
@dashboard_bp.route('/dashboard')
@login_required
def index():
    return redirect(url_for('dashboard.master_ledger'))


@dashboard_bp.route('/dashboard/master-ledger')
@login_required
def master_ledger():
    view, class_id, search = _ledger_params()
    repository = LedgerRepository(current_auth())

    try:
        class_options = repository.fetch_classes()
    except DataAccessError as e:
        flash(str(e), 'error')
        class_options = []

    students = _load_students(repository, class_id, search)
    groups = group_by_class(students) if view == 'school' else []

    return render_template('master_ledger.html',
                           view=view,
                           class_id=class_id,
                           search=search,
                           class_options=class_options,
                           students=students,
                           groups=groups)


@dashboard_bp.route('/dashboard/master-ledger/export')
@login_required
def export_master_ledger():
    view, class_id, search = _ledger_params()
    repository = LedgerRepository(current_auth())
    students = _load_students(repository, class_id, search)

    payload = export_csv(students)
    if payload is None:
        # Nothing selected: no file
        return '', 204

    filename = export_filename(view, class_id)
    logger.info("Exported %d students to %s", len(students), filename)
    return Response(
        payload,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@dashboard_bp.route('/dashboard/student/<int:student_id>')
@login_required
def student_detail(student_id):
    repository = LedgerRepository(current_auth())
    try:
        detail = repository.fetch_student_detail(student_id)
    except DataAccessError as e:
        flash(str(e), 'error')
        return redirect(url_for('dashboard.master_ledger'))

    if detail is None:
        abort(404)

    student = enrich_students([detail.student])[0]
    return render_template('student.html', detail=detail, student=student)
