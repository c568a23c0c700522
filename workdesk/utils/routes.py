"""
Named front-end routes.

The navigation and payment flows refer to pages by name; `route()` turns a
name into the path the browser should open, optionally absolute when
APP_URL is configured.
"""
from flask import current_app, has_app_context

ROUTES = {
    'dashboard': '/dashboard',
    'companies.index': '/companies',
    'workspaces.index': '/workspaces',
    'projects.index': '/projects',
    'crm-contacts.index': '/crm-contacts',
    'tasks.index': '/tasks',
    'task-stages.index': '/task-stages',
    'assets.index': '/assets',
    'asset-categories.index': '/asset-categories',
    'equipment.index': '/equipment',
    'equipment-schedule.index': '/equipment-schedule',
    'equipment-types.index': '/equipment-types',
    'service-types.index': '/service-types',
    'zoom-meetings.index': '/zoom-meetings',
    'google-meetings.index': '/google-meetings',
    'budgets.dashboard': '/budgets/dashboard',
    'budgets.index': '/budgets',
    'expenses.index': '/expenses',
    'expense-approvals.index': '/expense-approvals',
    'project-reports.index': '/project-reports',
    'task-reports.index': '/task-reports',
    'purchases-reports.index': '/purchases-reports',
    'invoices.index': '/invoices',
    'invoices.show': '/invoices/{id}',
    'invoices.payment': '/invoices/payment/{token}',
    'notes.index': '/notes',
    'task-calendar.index': '/task-calendar',
    'contracts.index': '/contracts',
    'contract-types.index': '/contract-types',
    'plans.index': '/plans',
    'plan-requests.index': '/plan-requests',
    'plan-orders.index': '/plan-orders',
    'my-plan-requests.index': '/my-plan-requests',
    'my-plan-orders.index': '/my-plan-orders',
    'coupons.index': '/coupons',
    'referral.index': '/referral',
    'currencies.index': '/currencies',
    'landing-page': '/landing-page',
    'landing-page.custom-pages.index': '/landing-page/custom-pages',
    'newsletters.index': '/newsletters',
    'contacts.index': '/contacts',
    'media-library': '/media-library',
    'notification-templates.index': '/notification-templates',
    'email-templates.index': '/email-templates',
    'settings': '/settings',
    'timesheets.index': '/timesheets',
}


def route(name, absolute=None, **params):
    """
    Resolve a named route, filling `{placeholders}` from params.
    Raises KeyError for unknown names.
    """
    path = ROUTES[name].format(**params)
    base = absolute
    if base is None and has_app_context():
        base = current_app.config.get('APP_URL') or ''
    return f"{(base or '').rstrip('/')}{path}"
