class PaymentError(Exception):
    """Base class for checkout failures. `error_code` feeds the response envelope."""
    error_code = 'payment_error'
    status = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AmountValidationError(PaymentError):
    """Amount is not positive or exceeds the remaining balance."""
    error_code = 'validation_error'


class GatewayFieldError(PaymentError):
    """A gateway-specific field (card number, phone, ...) is missing."""
    error_code = 'validation_error'


class UnknownGatewayError(PaymentError):
    """Gateway id is not in the catalogue or not enabled for the invoice."""
    error_code = 'unknown_gateway'
    status = 404


class InvalidTransitionError(PaymentError):
    """Dispatcher asked to do something its current state does not allow."""
    error_code = 'invalid_state'
    status = 409


class GatewayTransportError(PaymentError):
    """The billing API could not be reached or answered a non-2xx without a usable body."""
    error_code = 'gateway_unavailable'
    status = 502


class GatewayBusinessError(PaymentError):
    """The billing API answered success: false."""
    error_code = 'payment_failed'
    status = 422


class MalformedResponseError(PaymentError):
    """The billing API answered something that is not JSON (e.g. an HTML error page)."""
    error_code = 'malformed_response'
    status = 502


class SdkLoadError(PaymentError):
    """The provider's checkout script could not be loaded."""
    error_code = 'sdk_unavailable'
    status = 502
