"""
Gateway catalogue.

GATEWAYS lists every supported payment gateway in display order. Each one
has a single GatewayConfig describing how checkout proceeds:

  redirect   POST to the billing API, then send the browser to the URL it returns
  form_post  POST, then auto-submit a hidden form to `payment_url` with `payment_data`
  sdk        (optionally POST a create endpoint,) load the provider script and
             hand checkout over to it; its callback is confirmed separately

Endpoints are paths on the billing API; `{token}` is the invoice payment token.
"""
from typing import Dict, List, Optional, Tuple

REDIRECT = 'redirect'
FORM_POST = 'form_post'
SDK = 'sdk'

PROCESS_ENDPOINT = 'invoices/payment/{token}'


class GatewayDescriptor:
    def __init__(self, id: str, name: str, icon: str):
        self.id = id
        self.name = name
        self.icon = icon

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'icon': self.icon}


class SdkSpec:
    """
    Provider script and the public credential it needs.
    `handoff_fields` are copied from the create response into the SDK options.
    """
    def __init__(self, script_url: str, key_setting: Optional[str] = None,
                 handoff_fields: Tuple[str, ...] = ()):
        self.script_url = script_url
        self.key_setting = key_setting
        self.handoff_fields = handoff_fields

    def resolve_script_url(self, credentials: Dict[str, str]) -> str:
        return self.script_url.format(key=credentials.get(self.key_setting, '') if self.key_setting else '')


class GatewayConfig:
    def __init__(self, gateway_id: str, kind: str, endpoint: Optional[str] = None,
                 url_fields: Tuple[str, ...] = ('redirect_url', 'payment_url'),
                 required_fields: Tuple[str, ...] = (), reload_on_missing_url: bool = False,
                 sdk: Optional[SdkSpec] = None, confirm_endpoint: str = PROCESS_ENDPOINT):
        if kind not in (REDIRECT, FORM_POST, SDK):
            raise ValueError(f"Unknown gateway kind: {kind}")
        if kind == SDK and sdk is None:
            raise ValueError(f"SDK gateway {gateway_id} needs an SdkSpec")
        if kind != SDK and endpoint is None:
            raise ValueError(f"Gateway {gateway_id} needs an endpoint")
        self.gateway_id = gateway_id
        self.kind = kind
        self.endpoint = endpoint
        self.url_fields = url_fields
        self.required_fields = required_fields
        self.reload_on_missing_url = reload_on_missing_url
        self.sdk = sdk
        self.confirm_endpoint = confirm_endpoint

    def endpoint_for(self, token: str) -> Optional[str]:
        return self.endpoint.format(token=token) if self.endpoint else None

    def confirm_endpoint_for(self, token: str) -> str:
        return self.confirm_endpoint.format(token=token)

    def missing_fields(self, fields: Dict) -> List[str]:
        return [name for name in self.required_fields if not str(fields.get(name) or '').strip()]

    def pick_url(self, data: Dict) -> Optional[str]:
        for field in self.url_fields:
            if data.get(field):
                return data[field]
        return None


GATEWAYS: List[GatewayDescriptor] = [
    GatewayDescriptor('bank', 'Bank Transfer', 'banknote'),
    GatewayDescriptor('stripe', 'Stripe', 'credit-card'),
    GatewayDescriptor('paypal', 'PayPal', 'paypal'),
    GatewayDescriptor('razorpay', 'Razorpay', 'indian-rupee'),
    GatewayDescriptor('mercadopago', 'Mercado Pago', 'wallet'),
    GatewayDescriptor('paystack', 'Paystack', 'credit-card'),
    GatewayDescriptor('flutterwave', 'Flutterwave', 'credit-card'),
    GatewayDescriptor('paytabs', 'PayTabs', 'credit-card'),
    GatewayDescriptor('skrill', 'Skrill', 'wallet'),
    GatewayDescriptor('coingate', 'CoinGate', 'bitcoin'),
    GatewayDescriptor('payfast', 'PayFast', 'credit-card'),
    GatewayDescriptor('tap', 'Tap', 'credit-card'),
    GatewayDescriptor('xendit', 'Xendit', 'credit-card'),
    GatewayDescriptor('paytr', 'PayTR', 'credit-card'),
    GatewayDescriptor('mollie', 'Mollie', 'credit-card'),
    GatewayDescriptor('toyyibpay', 'toyyibPay', 'credit-card'),
    GatewayDescriptor('cashfree', 'Cashfree', 'credit-card'),
    GatewayDescriptor('khalti', 'Khalti', 'wallet'),
    GatewayDescriptor('iyzipay', 'Iyzipay', 'credit-card'),
    GatewayDescriptor('benefit', 'Benefit', 'credit-card'),
    GatewayDescriptor('ozow', 'Ozow', 'credit-card'),
    GatewayDescriptor('easebuzz', 'Easebuzz', 'credit-card'),
    GatewayDescriptor('authorizenet', 'Authorize.Net', 'credit-card'),
    GatewayDescriptor('fedapay', 'FedaPay', 'credit-card'),
    GatewayDescriptor('payhere', 'PayHere', 'credit-card'),
    GatewayDescriptor('cinetpay', 'CinetPay', 'credit-card'),
    GatewayDescriptor('paiement', 'Paiement Pro', 'credit-card'),
    GatewayDescriptor('yookassa', 'YooKassa', 'credit-card'),
    GatewayDescriptor('aamarpay', 'Aamarpay', 'credit-card'),
    GatewayDescriptor('midtrans', 'Midtrans', 'credit-card'),
    GatewayDescriptor('paymentwall', 'PaymentWall', 'credit-card'),
    GatewayDescriptor('sspay', 'SSPay', 'credit-card'),
]

GATEWAY_CONFIGS: Dict[str, GatewayConfig] = {c.gateway_id: c for c in [
    GatewayConfig('bank', REDIRECT, 'bank/invoice-payment/{token}',
                  required_fields=('payment_receipt',), reload_on_missing_url=True),
    GatewayConfig('stripe', SDK, sdk=SdkSpec('https://js.stripe.com/v3/', 'stripe_key'),
                  confirm_endpoint='stripe/invoice-payment/{token}'),
    GatewayConfig('paypal', SDK, sdk=SdkSpec('https://www.paypal.com/sdk/js?client-id={key}', 'paypal_client_id'),
                  confirm_endpoint='paypal/invoice-payment/{token}'),
    GatewayConfig('razorpay', SDK, 'razorpay/create-invoice-order',
                  sdk=SdkSpec('https://checkout.razorpay.com/v1/checkout.js', 'razorpay_key', ('order_id',)),
                  confirm_endpoint='razorpay/invoice-payment/{token}'),
    GatewayConfig('mercadopago', REDIRECT, 'mercadopago/invoice-payment/{token}'),
    GatewayConfig('paystack', SDK, sdk=SdkSpec('https://js.paystack.co/v1/inline.js', 'paystack_public_key'),
                  confirm_endpoint='paystack/invoice-payment/{token}'),
    GatewayConfig('flutterwave', SDK, sdk=SdkSpec('https://checkout.flutterwave.com/v3.js', 'flutterwave_public_key'),
                  confirm_endpoint='flutterwave/invoice-payment/{token}'),
    GatewayConfig('paytabs', REDIRECT, 'paytabs/create-invoice-payment-link'),
    GatewayConfig('skrill', FORM_POST, 'skrill/create-invoice-payment-link'),
    GatewayConfig('coingate', FORM_POST, 'coingate/invoice-payment/{token}'),
    GatewayConfig('payfast', FORM_POST, 'payfast/invoice-payment/{token}'),
    GatewayConfig('tap', REDIRECT, 'tap/invoice-payment/{token}'),
    GatewayConfig('xendit', REDIRECT, 'xendit/invoice-payment/{token}'),
    GatewayConfig('paytr', REDIRECT, 'paytr/invoice-payment/{token}'),
    GatewayConfig('mollie', REDIRECT, 'mollie/invoice-payment/{token}', url_fields=('payment_url', 'redirect_url')),
    GatewayConfig('toyyibpay', REDIRECT, 'toyyibpay/invoice-payment/{token}',
                  required_fields=('billName', 'billEmail', 'billPhone')),
    GatewayConfig('cashfree', SDK, 'cashfree/create-invoice-payment-link',
                  sdk=SdkSpec('https://sdk.cashfree.com/js/v3/cashfree.js', 'cashfree_public_key', ('payment_session_id', 'order_id')),
                  confirm_endpoint='cashfree/verify-invoice-payment-link'),
    GatewayConfig('khalti', SDK, 'khalti/create-invoice-payment-link',
                  sdk=SdkSpec('https://khalti.s3.ap-south-1.amazonaws.com/KPG/dist/2020.12.17.0.0.0/khalti-checkout.iffe.js',
                              'khalti_public_key', ('product_identity', 'product_name')),
                  confirm_endpoint='khalti/process-invoice-payment-link'),
    GatewayConfig('iyzipay', REDIRECT, 'iyzipay/invoice-payment/{token}'),
    GatewayConfig('benefit', REDIRECT, 'benefit/invoice-payment/{token}'),
    GatewayConfig('ozow', REDIRECT, 'ozow/create-invoice-payment-link', url_fields=('payment_url', 'redirect_url')),
    GatewayConfig('easebuzz', REDIRECT, 'easebuzz/create-invoice-payment-link', url_fields=('payment_url', 'redirect_url')),
    GatewayConfig('authorizenet', REDIRECT, 'authorizenet/process-invoice-payment-link',
                  required_fields=('card_number', 'expiry_month', 'expiry_year', 'cvv'), reload_on_missing_url=True),
    GatewayConfig('fedapay', REDIRECT, 'fedapay/create-invoice-payment-link', url_fields=('payment_url', 'redirect_url')),
    GatewayConfig('payhere', FORM_POST, 'payhere/create-invoice-payment'),
    GatewayConfig('cinetpay', REDIRECT, 'cinetpay/invoice-payment/{token}', url_fields=('payment_url', 'redirect_url')),
    GatewayConfig('paiement', REDIRECT, 'paiement/invoice-payment/{token}', url_fields=('payment_url', 'redirect_url', 'url')),
    GatewayConfig('yookassa', REDIRECT, 'yookassa/invoice-payment/{token}'),
    GatewayConfig('aamarpay', REDIRECT, 'aamarpay/invoice-payment/{token}'),
    GatewayConfig('midtrans', SDK, 'midtrans/invoice-payment/{token}',
                  sdk=SdkSpec('https://app.midtrans.com/snap/snap.js', 'midtrans_client_key', ('snap_token', 'order_id')),
                  confirm_endpoint='midtrans/invoice-success/{token}'),
    GatewayConfig('paymentwall', SDK, 'paymentwall/invoice-payment/{token}',
                  sdk=SdkSpec('https://api.paymentwall.com/brick/build/brick-default.1.5.0.min.js',
                              'paymentwall_public_key', ('brick_token',)),
                  confirm_endpoint='paymentwall/process-invoice/{token}'),
    GatewayConfig('sspay', FORM_POST, 'sspay/create-invoice-payment'),
]}

# Credentials that may be sent to the browser. Everything else in
# payment_settings (secret keys, API keys, merchant keys) stays server side.
PUBLIC_CREDENTIAL_KEYS = (
    'stripe_key', 'paypal_client_id', 'razorpay_key', 'paystack_public_key', 'flutterwave_public_key',
    'cashfree_public_key', 'khalti_public_key', 'midtrans_client_key', 'paymentwall_public_key',
    'iyzipay_public_key', 'tap_public_key', 'benefit_public_key', 'currency',
    'bank_detail',
)

_DESCRIPTORS = {g.id: g for g in GATEWAYS}


def get_descriptor(gateway_id: str) -> Optional[GatewayDescriptor]:
    return _DESCRIPTORS.get(gateway_id)


def get_config(gateway_id: str) -> Optional[GatewayConfig]:
    return GATEWAY_CONFIGS.get(gateway_id)


def enabled_gateways(payment_settings: Optional[Dict[str, str]]) -> List[GatewayDescriptor]:
    """Gateways switched on (`is_<id>_enabled == '1'`), in catalogue order."""
    payment_settings = payment_settings or {}
    return [g for g in GATEWAYS if str(payment_settings.get(f'is_{g.id}_enabled', '')) == '1']


def public_credentials(payment_settings: Optional[Dict[str, str]]) -> Dict[str, str]:
    payment_settings = payment_settings or {}
    public = {key: payment_settings[key] for key in PUBLIC_CREDENTIAL_KEYS if payment_settings.get(key)}
    for key, value in payment_settings.items():
        if key.endswith('_mode') and value:
            public[key] = value
    return public
