from marshmallow import Schema, fields, validate, post_load

RTL_LANGUAGES = ("ar", "he")


class PreferenceSchema(Schema):
    # Unknown keys are rejected (marshmallow's default RAISE)
    sidebar_expanded = fields.Bool()
    language = fields.Str(validate=validate.Length(min=2, max=10))
    layout_direction = fields.Str(validate=validate.OneOf(["ltr", "rtl"]))
    theme = fields.Str(validate=validate.OneOf(["light", "dark", "system"]))

    @post_load
    def derive_direction(self, data, **kwargs):
        if "language" in data and "layout_direction" not in data:
            data["layout_direction"] = "rtl" if data["language"].split("-")[0] in RTL_LANGUAGES else "ltr"
        return data


preference_schema = PreferenceSchema()
