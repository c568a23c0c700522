import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from workdesk.payments.client import GatewayClient
from workdesk.payments.errors import (
    AmountValidationError, GatewayFieldError, InvalidTransitionError, MalformedResponseError,
    PaymentError, UnknownGatewayError,
)
from workdesk.payments.gateways import FORM_POST, GATEWAYS, REDIRECT, SDK, get_config
from workdesk.payments.notifications import BrowserActions, ToastChannel
from workdesk.payments.sdk_loader import SdkLoader

logger = logging.getLogger(__name__)

CLOSED = 'closed'
METHOD_SELECTION = 'method-selection'
GATEWAY_MODAL_OPEN = 'gateway-modal-open'

CENTS = Decimal('0.01')


def parse_amount(value, remaining: Decimal) -> Decimal:
    """
    Validate a payment amount against the remaining balance.
    Raises AmountValidationError unless 0 < amount <= remaining.
    """
    try:
        amount = Decimal(str(value)).quantize(CENTS)
    except (InvalidOperation, ValueError, TypeError):
        raise AmountValidationError('Please enter a valid amount.')
    if not amount.is_finite() or amount <= 0:
        raise AmountValidationError('Amount must be greater than zero.')
    if amount > remaining:
        raise AmountValidationError(f'Amount cannot exceed the remaining balance of {remaining}.')
    return amount


class PaymentDispatcher:
    """
    Checkout flow for one invoice payment dialog.

        closed --open()--> method-selection --select_gateway()--> gateway-modal-open[id]
        gateway-modal-open --back()--> method-selection
        any --close()/cancel()--> closed

    Every gateway has a visibility flag; selecting one clears all the others
    first, so at most one gateway modal is open at any time. Failures are
    reported on the toast channel and never move the browser.
    """

    def __init__(self, invoice_token: str, remaining_amount, enabled_gateways: Iterable[str],
                 client: Optional[GatewayClient] = None, sdk_loader: Optional[SdkLoader] = None,
                 credentials: Optional[Dict[str, str]] = None, currency: Optional[str] = None,
                 toasts: Optional[ToastChannel] = None, actions: Optional[BrowserActions] = None):
        self.invoice_token = invoice_token
        self.remaining = Decimal(str(remaining_amount)).quantize(CENTS)
        self.enabled = list(enabled_gateways)
        self.client = client or GatewayClient()
        self.sdk_loader = sdk_loader or SdkLoader()
        self.credentials = credentials or {}
        self.currency = currency
        self.toasts = toasts or ToastChannel()
        self.actions = actions or BrowserActions()

        self.state = CLOSED
        self.active_gateway: Optional[str] = None
        self.visibility: Dict[str, bool] = {g.id: False for g in GATEWAYS}
        self.amount: Optional[Decimal] = None
        self.loading = False
        self.succeeded = False
        self.sdk_future = None

    # -- state -------------------------------------------------------------

    @property
    def open_modals(self):
        return [gateway_id for gateway_id, visible in self.visibility.items() if visible]

    def _hide_all(self):
        for gateway_id in self.visibility:
            self.visibility[gateway_id] = False
        self.active_gateway = None

    def open(self):
        if self.state != CLOSED:
            raise InvalidTransitionError(f'Cannot open payment dialog from {self.state}')
        self.state = METHOD_SELECTION
        self.amount = self.remaining
        self.succeeded = False
        return self

    def select_gateway(self, gateway_id: str, amount=None) -> bool:
        """Open the modal for `gateway_id`. Returns False (with a toast) when blocked."""
        if self.state not in (METHOD_SELECTION, GATEWAY_MODAL_OPEN):
            raise InvalidTransitionError(f'Cannot select a gateway from {self.state}')

        try:
            amount = parse_amount(self.amount if amount is None else amount, self.remaining)
            config = get_config(gateway_id)
            if config is None or gateway_id not in self.enabled:
                raise UnknownGatewayError('Selected payment method is not available.')
        except PaymentError as e:
            self.toasts.error(e.message)
            return False

        self._hide_all()
        self.visibility[gateway_id] = True
        self.active_gateway = gateway_id
        self.amount = amount
        self.state = GATEWAY_MODAL_OPEN

        if config.kind == SDK:
            self.sdk_future = self.sdk_loader.load(gateway_id, config.sdk.resolve_script_url(self.credentials))
        return True

    def back(self):
        if self.state != GATEWAY_MODAL_OPEN:
            raise InvalidTransitionError(f'Cannot go back from {self.state}')
        self._hide_all()
        self.state = METHOD_SELECTION
        self.loading = False

    def close(self):
        self._hide_all()
        self.state = CLOSED
        self.loading = False

    def cancel(self):
        self.close()

    # -- actions -----------------------------------------------------------

    def _payload(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(fields)
        payload['amount'] = float(self.amount)
        payload['invoice_token'] = self.invoice_token
        return payload

    def pay(self, **fields) -> bool:
        """
        Submit the open gateway's form. Issues at most one billing API call
        and is ignored while a previous submission is still in flight.
        """
        if self.state != GATEWAY_MODAL_OPEN:
            raise InvalidTransitionError(f'Cannot pay from {self.state}')
        if self.loading:
            logger.info("Ignoring duplicate submit for %s", self.active_gateway)
            return False

        gateway_id = self.active_gateway
        config = get_config(gateway_id)
        try:
            parse_amount(self.amount, self.remaining)
            missing = config.missing_fields(fields)
            if missing:
                raise GatewayFieldError(
                    f"Please fill in: {', '.join(missing)}", details={'missing': missing}
                )
        except PaymentError as e:
            self.toasts.error(e.message)
            return False

        self.loading = True
        try:
            if config.kind == REDIRECT:
                self._pay_redirect(config, fields)
            elif config.kind == FORM_POST:
                self._pay_form_post(config, fields)
            else:
                self._pay_sdk(config, fields)
            return True
        except PaymentError as e:
            self.toasts.error(e.message)
            return False
        finally:
            self.loading = False

    def _pay_redirect(self, config, fields):
        data = self.client.post(config.endpoint_for(self.invoice_token), self._payload(fields), gateway=config.gateway_id)
        url = config.pick_url(data)
        if url:
            self.actions.navigate(url)
        elif config.reload_on_missing_url:
            self.toasts.success(data.get('message') or 'Payment submitted successfully.')
            self.actions.reload()
            self.succeeded = True
        else:
            raise MalformedResponseError('Payment service did not return a checkout URL.')
        self.close()

    def _pay_form_post(self, config, fields):
        data = self.client.post(config.endpoint_for(self.invoice_token), self._payload(fields), gateway=config.gateway_id)
        if data.get('payment_url') and isinstance(data.get('payment_data'), dict):
            self.actions.submit_form(data['payment_url'], data['payment_data'])
        elif config.pick_url(data):
            self.actions.navigate(config.pick_url(data))
        else:
            raise MalformedResponseError('Payment service did not return checkout form data.')
        self.close()

    def _pay_sdk(self, config, fields):
        data = {}
        if config.endpoint:
            data = self.client.post(config.endpoint_for(self.invoice_token), self._payload(fields), gateway=config.gateway_id)
            handoff = {name: data[name] for name in config.sdk.handoff_fields if data.get(name)}
            if not handoff and config.pick_url(data):
                # Hosted fallback, e.g. Midtrans without a snap token
                self.actions.navigate(config.pick_url(data))
                self.close()
                return

        script_url = config.sdk.resolve_script_url(self.credentials)
        handle = self.sdk_loader.wait(config.gateway_id, script_url)

        options = {
            'amount': float(self.amount),
            'currency': self.currency,
            'invoice_token': self.invoice_token,
        }
        if config.sdk.key_setting:
            options['key'] = self.credentials.get(config.sdk.key_setting)
        for name in config.sdk.handoff_fields:
            if data.get(name):
                options[name] = data[name]
        self.actions.sdk_handoff(config.gateway_id, handle.script_url, options)

    def confirm(self, payment_id: str, **extra) -> bool:
        """Report the SDK's successful charge to the billing API."""
        if self.state != GATEWAY_MODAL_OPEN or get_config(self.active_gateway).kind != SDK:
            raise InvalidTransitionError('No SDK checkout is awaiting confirmation')
        if self.loading:
            return False
        if not payment_id:
            self.toasts.error('Missing payment reference.')
            return False

        config = get_config(self.active_gateway)
        payload = self._payload(extra)
        payload['payment_method'] = config.gateway_id
        payload['payment_id'] = payment_id

        self.loading = True
        try:
            data = self.client.post(config.confirm_endpoint_for(self.invoice_token), payload, gateway=config.gateway_id)
        except PaymentError as e:
            self.toasts.error(e.message)
            return False
        finally:
            self.loading = False

        self.toasts.success(data.get('message') or 'Payment processed successfully.')
        self.succeeded = True
        self.close()
        return True

    def to_dict(self):
        return {
            'state': self.state,
            'gateway': self.active_gateway,
            'amount': float(self.amount) if self.amount is not None else None,
            'remaining_amount': float(self.remaining),
            'open_modals': self.open_modals,
            'succeeded': self.succeeded,
            'toasts': self.toasts.to_list(),
            'actions': self.actions.to_list(),
        }
