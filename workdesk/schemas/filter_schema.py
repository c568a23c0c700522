from marshmallow import Schema, fields, validate, validates_schema, ValidationError, EXCLUDE

from workdesk.database.models.invoice import INVOICE_STATUSES
from workdesk.database.models.project import PROJECT_STATUSES
from workdesk.database.models.timesheet import TIMESHEET_STATUSES


class ListFilterSchema(Schema):
    """Common list-page state. `page` and `seq` are handled by the paginator."""
    class Meta:
        unknown = EXCLUDE

    search = fields.Str(validate=validate.Length(max=255))
    per_page = fields.Int(validate=validate.Range(min=1, max=100))
    view = fields.Str(validate=validate.OneOf(["grid", "list"]))


class InvoiceFilterSchema(ListFilterSchema):
    status = fields.Str(validate=validate.OneOf(INVOICE_STATUSES + ("partially_paid",)))
    project_id = fields.Str()
    client_id = fields.Str()


class ProjectFilterSchema(ListFilterSchema):
    status = fields.Str(validate=validate.OneOf(PROJECT_STATUSES))


class TimesheetFilterSchema(ListFilterSchema):
    view = fields.Str(validate=validate.OneOf(["list", "calendar"]))
    status = fields.Str(validate=validate.OneOf(TIMESHEET_STATUSES))
    user_id = fields.Str()
    project_id = fields.Str()
    start_date = fields.Date()
    end_date = fields.Date()

    @validates_schema
    def check_range(self, data, **kwargs):
        if data.get("start_date") and data.get("end_date") and data["start_date"] > data["end_date"]:
            raise ValidationError("start_date must be on or before end_date.", "end_date")


# Default page sizes per list
INVOICE_PER_PAGE = 12
PROJECT_PER_PAGE = 12
TIMESHEET_PER_PAGE = 15

invoice_filter_schema = InvoiceFilterSchema()
project_filter_schema = ProjectFilterSchema()
timesheet_filter_schema = TimesheetFilterSchema()
