import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

TOAST_TYPES = ('success', 'error', 'info')


class ToastChannel:
    """Ordered user notifications produced while handling one checkout."""

    def __init__(self):
        self.messages: List[Dict[str, str]] = []

    def push(self, type: str, message: str):
        if type not in TOAST_TYPES:
            raise ValueError(f"Unknown toast type: {type}")
        self.messages.append({'type': type, 'message': message})
        if type == 'error':
            logger.warning("Toast (error): %s", message)
        else:
            logger.info("Toast (%s): %s", type, message)

    def success(self, message: str):
        self.push('success', message)

    def error(self, message: str):
        self.push('error', message)

    def info(self, message: str):
        self.push('info', message)

    def to_list(self):
        return list(self.messages)


class BrowserActions:
    """
    What the browser must do after a checkout step, in order.
    Action types: navigate, submit_form, reload, sdk_handoff.
    """

    def __init__(self):
        self.actions: List[Dict[str, Any]] = []

    @property
    def location(self) -> Optional[str]:
        for action in self.actions:
            if action['type'] == 'navigate':
                return action['url']
        return None

    def navigate(self, url: str):
        if self.location is not None:
            raise RuntimeError("Browser location already set for this checkout")
        self.actions.append({'type': 'navigate', 'url': url})

    def submit_form(self, action_url: str, fields: Dict[str, Any], method: str = 'POST'):
        self.actions.append({'type': 'submit_form', 'action': action_url, 'method': method, 'fields': fields})

    def reload(self):
        self.actions.append({'type': 'reload'})

    def sdk_handoff(self, gateway: str, script: str, options: Dict[str, Any]):
        self.actions.append({'type': 'sdk_handoff', 'gateway': gateway, 'script': script, 'options': options})

    def to_list(self):
        return list(self.actions)
