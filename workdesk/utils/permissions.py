# Permission catalogue
# Every permission the portal checks, with the label shown in the role and
# user permission editors.

PERMISSIONS = {
    # Dashboard
    'dashboard_view': 'View dashboard',

    # Companies & workspaces
    'company_view_any': 'View companies',
    'workspace_view_any': 'View workspaces',

    # Projects
    'project_view_any': 'View projects list',
    'project_create': 'Create projects',
    'project_delete': 'Delete projects',
    'project_import': 'Import projects from CSV',
    'project_report_view_any': 'View project, task and purchase reports',

    # CRM
    'crm_contact_view_any': 'View CRM contacts',

    # Tasks
    'task_view_any': 'View tasks',
    'task_manage_stages': 'Manage task stages',
    'task_calendar_view': 'View task calendar',

    # Assets & equipment
    'asset_view_any': 'View assets',
    'asset_manage_categories': 'Manage asset categories',
    'equipment_view_any': 'View equipment',
    'equipment_type_manage': 'Manage equipment types',
    'service_type_manage': 'Manage service types',

    # Meetings
    'zoom_meeting_view_any': 'View Zoom meetings',
    'google_meeting_view_any': 'View Google meetings',

    # Budgets & expenses
    'budget_view_any': 'View budgets',
    'budget_dashboard_view': 'View budget dashboard',
    'expense_view_any': 'View expenses',
    'expense_approval_approve': 'Approve expenses',

    # Timesheets
    'timesheet_view_any': 'View timesheets',
    'timesheet_delete': 'Delete timesheets',

    # Invoices
    'invoice_view_any': 'View invoices list',
    'invoice_delete': 'Delete invoices',
    'invoice_manage_payments': 'Manage invoice payments',

    # Notes & contracts
    'note_view_any': 'View notes',
    'contract_view_any': 'View contracts',
    'contract_type_view_any': 'View contract types',

    # Plans (SaaS)
    'plan_view_any': 'View plans',
    'plan_manage_requests': 'Manage plan requests',
    'plan_manage_orders': 'Manage plan orders',
    'plan_view_my_requests': 'View own plan requests',
    'plan_view_my_orders': 'View own plan orders',
    'coupon_view_any': 'View coupons',
    'referral_view_any': 'View referral program',

    # Settings & content
    'currency_view_any': 'View currencies',
    'landing_page_manage': 'Manage landing page',
    'custom_page_view_any': 'View custom pages',
    'newsletter_view_any': 'View newsletters',
    'contact_view_any': 'View landing page contacts',
    'media_view_any': 'View media library',
    'notification_template_view_any': 'View notification templates',
    'email_template_view_any': 'View email templates',
    'settings_view': 'View settings',

    # Access control
    'role_manage_permissions': 'Manage role permissions',
    'user_manage_permissions': 'Manage user permissions',
}

# Grouping for the permission editor
PERMISSION_CATEGORIES = {
    'Dashboard': ['dashboard_view'],
    'Organisation': ['company_view_any', 'workspace_view_any'],
    'Projects': ['project_view_any', 'project_create', 'project_delete', 'project_import', 'project_report_view_any'],
    'CRM': ['crm_contact_view_any'],
    'Tasks': ['task_view_any', 'task_manage_stages', 'task_calendar_view'],
    'Assets': ['asset_view_any', 'asset_manage_categories', 'equipment_view_any', 'equipment_type_manage', 'service_type_manage'],
    'Meetings': ['zoom_meeting_view_any', 'google_meeting_view_any'],
    'Budgets': ['budget_view_any', 'budget_dashboard_view', 'expense_view_any', 'expense_approval_approve'],
    'Timesheets': ['timesheet_view_any', 'timesheet_delete'],
    'Invoices': ['invoice_view_any', 'invoice_delete', 'invoice_manage_payments'],
    'Notes & Contracts': ['note_view_any', 'contract_view_any', 'contract_type_view_any'],
    'Plans': ['plan_view_any', 'plan_manage_requests', 'plan_manage_orders', 'plan_view_my_requests', 'plan_view_my_orders', 'coupon_view_any', 'referral_view_any'],
    'Content': ['currency_view_any', 'landing_page_manage', 'custom_page_view_any', 'newsletter_view_any', 'contact_view_any', 'media_view_any', 'notification_template_view_any', 'email_template_view_any', 'settings_view'],
    'Access Control': ['role_manage_permissions', 'user_manage_permissions'],
}

ROLES = ('company', 'manager', 'member', 'client')

# Role defaults applied by seed.py
DEFAULT_ROLE_PERMISSIONS = {
    'company': [p for p in PERMISSIONS if not p.startswith(('plan_manage', 'coupon_', 'company_'))],
    'manager': [
        'dashboard_view', 'project_view_any', 'project_create', 'task_view_any', 'task_manage_stages',
        'task_calendar_view', 'budget_view_any', 'budget_dashboard_view', 'expense_view_any',
        'expense_approval_approve', 'timesheet_view_any', 'invoice_view_any', 'note_view_any',
        'project_report_view_any', 'equipment_view_any', 'media_view_any',
    ],
    'member': [
        'dashboard_view', 'project_view_any', 'task_view_any', 'task_calendar_view',
        'timesheet_view_any', 'invoice_view_any', 'note_view_any',
    ],
    'client': ['dashboard_view', 'project_view_any', 'invoice_view_any'],
}
