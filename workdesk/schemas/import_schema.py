from marshmallow import Schema, fields, validate


class ImportMappingSchema(Schema):
    # importable field -> CSV column index
    mapping = fields.Dict(keys=fields.Str(), values=fields.Int(validate=validate.Range(min=0)), required=True)


import_mapping_schema = ImportMappingSchema()
