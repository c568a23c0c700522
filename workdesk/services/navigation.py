"""
Sidebar navigation.

NAV_RULES is evaluated top to bottom for every request; the output keeps the
table order. A rule is shown when the user holds any of its permissions
(rules without permissions inherit their parent's gate), every flag it needs
is on, and the user's type is not in its `hidden_for`.

Parents with children collapse by how many children survive:
  0 -> the parent is dropped
  1 -> the parent becomes a link to that child (or takes over its children)
  2+ -> the parent is a submenu
"""
from typing import Any, Dict, Iterable, List, Optional, TypedDict

from workdesk.utils.authorization import has_any_permission
from workdesk.utils.routes import route


class NavEntry(TypedDict, total=False):
    title: str
    href: str
    icon: str
    children: List["NavEntry"]


class NavRule(TypedDict, total=False):
    title: str
    route: str
    icon: str
    perms: List[str]
    flags: List[str]
    hidden_for: List[str]
    children: List["NavRule"]


NAV_RULES: List[NavRule] = [
    {"title": "Dashboard", "route": "dashboard", "icon": "layout-grid", "perms": ["dashboard_view"]},
    {"title": "Companies", "route": "companies.index", "icon": "building-2", "perms": ["company_view_any"]},
    {"title": "Workspaces", "route": "workspaces.index", "icon": "building-2", "perms": ["workspace_view_any"]},
    {"title": "Projects", "route": "projects.index", "icon": "folder-open", "perms": ["project_view_any"]},
    {"title": "Contacts", "route": "crm-contacts.index", "icon": "contact", "perms": ["crm_contact_view_any"]},
    {
        "title": "Tasks", "icon": "check-square", "perms": ["task_view_any"],
        "children": [
            {"title": "All Tasks", "route": "tasks.index"},
            {"title": "Task Stages", "route": "task-stages.index", "perms": ["task_manage_stages"]},
        ],
    },
    {
        "title": "Assets", "icon": "package", "perms": ["asset_view_any"],
        "children": [
            {"title": "All Assets", "route": "assets.index"},
            {"title": "Asset Categories", "route": "asset-categories.index", "perms": ["asset_manage_categories"]},
        ],
    },
    {
        "title": "Equipment", "icon": "wrench", "perms": ["equipment_view_any"],
        "children": [
            {"title": "All Equipment", "route": "equipment.index"},
            {"title": "Schedule", "route": "equipment-schedule.index"},
            {"title": "Equipment Types", "route": "equipment-types.index", "perms": ["equipment_type_manage"]},
            {"title": "Service Types", "route": "service-types.index", "perms": ["service_type_manage"]},
        ],
    },
    {
        "title": "Zoom Meetings", "route": "zoom-meetings.index", "icon": "video",
        "perms": ["zoom_meeting_view_any"], "flags": ["is_zoom_meeting_test"],
    },
    {
        "title": "Google Meetings", "route": "google-meetings.index", "icon": "video",
        "perms": ["google_meeting_view_any"], "flags": ["is_google_meeting_test"],
    },
    {
        "title": "Reports", "icon": "bar-chart",
        "children": [
            {
                "title": "Budget & Expenses", "icon": "receipt", "perms": ["budget_view_any", "expense_view_any"],
                "children": [
                    {"title": "Budget Dashboard", "route": "budgets.dashboard", "perms": ["budget_dashboard_view"]},
                    {"title": "Budgets", "route": "budgets.index", "perms": ["budget_view_any"]},
                    {"title": "Expenses", "route": "expenses.index", "perms": ["expense_view_any"]},
                    {"title": "Expense Approvals", "route": "expense-approvals.index", "perms": ["expense_approval_approve"]},
                ],
            },
            {"title": "Project Reports", "route": "project-reports.index", "icon": "trending-up", "perms": ["project_report_view_any"]},
            {"title": "Task Report", "route": "task-reports.index", "icon": "check-square", "perms": ["project_report_view_any"]},
            {"title": "Purchases Report", "route": "purchases-reports.index", "icon": "shopping-bag", "perms": ["project_report_view_any"]},
        ],
    },
    {"title": "Invoices", "route": "invoices.index", "icon": "file-text", "perms": ["invoice_view_any"]},
    {"title": "Notes", "route": "notes.index", "icon": "file", "perms": ["note_view_any"]},
    {"title": "Calendar", "route": "task-calendar.index", "icon": "calendar", "perms": ["task_calendar_view"]},
    {
        "title": "Contracts", "icon": "file-text",
        "children": [
            {"title": "Contracts", "route": "contracts.index", "perms": ["contract_view_any"]},
            {"title": "Contract Types", "route": "contract-types.index", "perms": ["contract_type_view_any"]},
        ],
    },
    {
        "title": "Plans", "icon": "credit-card", "flags": ["saas_mode"],
        "children": [
            {"title": "Plans", "route": "plans.index", "perms": ["plan_view_any"]},
            {"title": "Plan Requests", "route": "plan-requests.index", "perms": ["plan_manage_requests"]},
            {"title": "Plan Orders", "route": "plan-orders.index", "perms": ["plan_manage_orders"]},
            {"title": "My Plan Requests", "route": "my-plan-requests.index", "perms": ["plan_view_my_requests"], "hidden_for": ["superadmin"]},
            {"title": "My Plan Orders", "route": "my-plan-orders.index", "perms": ["plan_view_my_orders"], "hidden_for": ["superadmin"]},
        ],
    },
    {"title": "Coupons", "route": "coupons.index", "icon": "ticket", "perms": ["coupon_view_any"], "flags": ["saas_mode"]},
    {"title": "Referral Program", "route": "referral.index", "icon": "gift", "perms": ["referral_view_any"], "flags": ["saas_mode"]},
    {"title": "Currencies", "route": "currencies.index", "icon": "dollar-sign", "perms": ["currency_view_any"]},
    {
        "title": "Landing Page", "icon": "globe",
        "children": [
            {"title": "Landing Page", "route": "landing-page", "perms": ["landing_page_manage"]},
            {"title": "Custom Pages", "route": "landing-page.custom-pages.index", "perms": ["custom_page_view_any"]},
            {"title": "Newsletters", "route": "newsletters.index", "perms": ["newsletter_view_any"]},
            {"title": "Contacts", "route": "contacts.index", "perms": ["contact_view_any"]},
        ],
    },
    {"title": "Media Library", "route": "media-library", "icon": "image", "perms": ["media_view_any"]},
    {
        "title": "Notification Templates", "route": "notification-templates.index", "icon": "bell",
        "perms": ["notification_template_view_any"], "hidden_for": ["superadmin"],
    },
    {"title": "Email Templates", "route": "email-templates.index", "icon": "mail", "perms": ["email_template_view_any"]},
    {"title": "Settings", "route": "settings", "icon": "settings", "perms": ["settings_view"]},
]


def _rule_visible(rule: NavRule, permissions, flags, user_type) -> bool:
    if rule.get("perms") and not has_any_permission(permissions, rule["perms"]):
        return False
    if any(not flags.get(flag) for flag in rule.get("flags", ())):
        return False
    if user_type in rule.get("hidden_for", ()):
        return False
    return True


def _build_entry(rule: NavRule, permissions, flags, user_type, base_url) -> Optional[NavEntry]:
    if not _rule_visible(rule, permissions, flags, user_type):
        return None

    entry: NavEntry = {"title": rule["title"]}
    if rule.get("icon"):
        entry["icon"] = rule["icon"]

    if "children" not in rule:
        entry["href"] = route(rule["route"], absolute=base_url)
        return entry

    children = [
        child for child in (
            _build_entry(child_rule, permissions, flags, user_type, base_url)
            for child_rule in rule["children"]
        ) if child
    ]
    if not children:
        return None
    if len(children) == 1:
        only = children[0]
        if "children" in only:
            entry["children"] = only["children"]
        else:
            entry["href"] = only["href"]
        return entry
    entry["children"] = children
    return entry


def build_navigation(permissions: Optional[Iterable[str]], flags: Optional[Dict[str, Any]] = None,
                     user_type: Optional[str] = None, base_url: str = "",
                     rules: Optional[List[NavRule]] = None) -> List[NavEntry]:
    """
    Build the sidebar tree for one request.

    Args:
        permissions: the user's permission names (None means none).
        flags: feature switches, e.g. {"saas_mode": True, "is_zoom_meeting_test": True}.
        user_type: the authenticated user's type.
        base_url: prefix for every href.
        rules: alternative rule table (defaults to NAV_RULES).
    """
    permissions = list(permissions or [])
    flags = flags or {}
    entries = []
    for rule in (NAV_RULES if rules is None else rules):
        entry = _build_entry(rule, permissions, flags, user_type, base_url)
        if entry:
            entries.append(entry)
    return entries


def navigation_flags(settings: Dict[str, Any], saas_mode: bool) -> Dict[str, bool]:
    """Feature switches used by NAV_RULES, from the company's settings."""
    return {
        "saas_mode": bool(saas_mode),
        "is_zoom_meeting_test": str(settings.get("is_zoom_meeting_test", "")) == "1",
        "is_google_meeting_test": str(settings.get("is_google_meeting_test", "")) == "1",
    }
