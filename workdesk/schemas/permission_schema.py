from marshmallow import Schema, fields, validate

from workdesk.utils.permissions import PERMISSIONS, ROLES

_known_permission = validate.OneOf(list(PERMISSIONS.keys()), error="Unknown permission: {input}")


class PermissionSetSchema(Schema):
    permissions = fields.List(fields.Str(validate=_known_permission), required=True)


class PermissionGrantSchema(Schema):
    permission = fields.Str(required=True, validate=_known_permission)


role_validator = validate.OneOf(ROLES, error="Unknown role: {input}")

permission_set_schema = PermissionSetSchema()
permission_grant_schema = PermissionGrantSchema()
