from marshmallow import Schema, fields, validate, EXCLUDE


# Checkout request from the public invoice payment page. The amount range
# (0 < amount <= remaining) is checked by the dispatcher so it can answer
# with a toast instead of a field error.
class CheckoutSchema(Schema):
    gateway = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    amount = fields.Decimal(places=2, allow_nan=False, allow_none=True, load_default=None)
    fields_ = fields.Dict(keys=fields.Str(), data_key="fields", attribute="fields", load_default=dict)


# SDK callback relayed by the browser once the provider reports success.
class ConfirmSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    gateway = fields.Str(required=True)
    amount = fields.Decimal(places=2, allow_nan=False, required=True)
    payment_id = fields.Str(required=True, validate=validate.Length(min=1))
    extra = fields.Dict(keys=fields.Str(), load_default=dict)


# Notification pushed by the billing API after a gateway settles a charge.
class PaymentWebhookSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    invoice_token = fields.Str(required=True)
    transaction_id = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    amount = fields.Decimal(
        places=2,
        required=True,
        validate=validate.Range(min=0.01, error="Payment amount must be positive.")
    )
    status = fields.Str(
        required=True,
        validate=validate.OneOf(["success", "failed", "pending"], error="Invalid payment status.")
    )


checkout_schema = CheckoutSchema()
confirm_schema = ConfirmSchema()
payment_webhook_schema = PaymentWebhookSchema()
