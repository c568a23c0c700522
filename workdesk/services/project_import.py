import csv
import io
import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from workdesk.database.models.project import Project, PROJECT_PRIORITIES, PROJECT_STATUSES

logger = logging.getLogger(__name__)

# Fields a CSV column can be mapped to, with their labels
IMPORT_FIELDS = {
    'title': 'Title',
    'description': 'Description',
    'status': 'Status',
    'priority': 'Priority',
    'start_date': 'Start Date',
    'deadline': 'Deadline',
    'budget': 'Budget',
}
REQUIRED_FIELDS = ('title',)
PREVIEW_ROWS = 5


class ImportFileError(ValueError):
    pass


def read_csv(file_storage):
    """
    Decode an uploaded CSV into (headers, rows). Raises ImportFileError.
    Blank lines are dropped; each row is (line number in the file, cells).
    """
    if file_storage is None or not file_storage.filename:
        raise ImportFileError("A CSV file is required.")
    try:
        text = file_storage.read().decode('utf-8-sig')
    except UnicodeDecodeError:
        raise ImportFileError("The uploaded file is not UTF-8 encoded.")

    rows = [(line_no, row) for line_no, row in enumerate(csv.reader(io.StringIO(text)), start=1)
            if any(cell.strip() for cell in row)]
    if not rows:
        raise ImportFileError("The uploaded file is empty.")
    return [h.strip() for h in rows[0][1]], rows[1:]


def preview(file_storage):
    headers, rows = read_csv(file_storage)
    return {
        'headers': headers,
        'fields': [{'key': key, 'label': label, 'required': key in REQUIRED_FIELDS} for key, label in IMPORT_FIELDS.items()],
        'preview': [row for _, row in rows[:PREVIEW_ROWS]],
        'total_rows': len(rows),
    }


def _cell(row, index):
    if index is None or index >= len(row):
        return ''
    return row[index].strip()


def _row_to_project(row, mapping):
    data = {field: _cell(row, index) for field, index in mapping.items()}
    if not data.get('title'):
        raise ValueError("title is empty")

    project = {'title': data['title'], 'description': data.get('description') or None}

    status = (data.get('status') or 'planning').lower().replace(' ', '_')
    if status not in PROJECT_STATUSES:
        raise ValueError(f"unknown status '{data['status']}'")
    project['status'] = status

    priority = (data.get('priority') or 'medium').lower()
    if priority not in PROJECT_PRIORITIES:
        raise ValueError(f"unknown priority '{data['priority']}'")
    project['priority'] = priority

    for key in ('start_date', 'deadline'):
        if data.get(key):
            try:
                project[key] = date.fromisoformat(data[key])
            except ValueError:
                raise ValueError(f"{key} must be YYYY-MM-DD")

    if data.get('budget'):
        try:
            project['budget'] = Decimal(data['budget'].replace(',', '')).quantize(Decimal('0.01'))
        except InvalidOperation:
            raise ValueError("budget is not a number")
        if not project['budget'].is_finite():
            raise ValueError("budget is not a number")
    return project


def import_projects(file_storage, mapping, company_id):
    """
    Create one project per CSV row using `mapping` (field -> column index).
    Rows whose title already exists are skipped; invalid rows are reported.
    """
    unknown = [field for field in mapping if field not in IMPORT_FIELDS]
    if unknown:
        raise ImportFileError(f"Unknown import field(s): {', '.join(unknown)}")
    missing = [field for field in REQUIRED_FIELDS if field not in mapping]
    if missing:
        raise ImportFileError(f"Required field(s) not mapped: {', '.join(missing)}")

    headers, rows = read_csv(file_storage)
    out_of_range = [field for field, index in mapping.items() if index >= len(headers)]
    if out_of_range:
        raise ImportFileError(f"Column index out of range for: {', '.join(out_of_range)}")

    created, skipped, errors = 0, 0, []
    for line_no, row in rows:
        try:
            project = _row_to_project(row, mapping)
        except ValueError as e:
            errors.append({'row': line_no, 'message': str(e)})
            continue

        if Project.find_by_title(company_id, project['title']):
            skipped += 1
            continue

        project['created_by'] = company_id
        Project.create(project)
        created += 1

    logger.info("Project import for %s: %d created, %d skipped, %d errors", company_id, created, skipped, len(errors))
    return {'created': created, 'skipped': skipped, 'errors': errors}
