from flask import current_app

from workdesk.database.models.setting import Setting
from workdesk.database.models.ui_preference import UIPreference
from workdesk.services.navigation import build_navigation, navigation_flags

# Settings the browser may read; payment credentials live in payment_settings
GLOBAL_SETTING_KEYS = (
    'app_name', 'currency', 'currency_symbol', 'date_format', 'time_format', 'default_language',
    'is_zoom_meeting_test', 'is_google_meeting_test', 'theme_color', 'logo_dark', 'logo_light', 'favicon',
)


def build_page_props(user):
    """Props shared by every page: session user, permissions, settings, sidebar and preferences."""
    permissions = user.get_permissions()
    settings = Setting.get_all(user.company_id)
    saas_mode = current_app.config.get('SAAS_MODE', False)
    flags = navigation_flags(settings, saas_mode)

    return {
        'auth': {
            'user': user.to_dict(),
            'permissions': permissions,
        },
        'globalSettings': {key: settings[key] for key in GLOBAL_SETTING_KEYS if key in settings},
        'isSaasMode': bool(saas_mode),
        'navigation': build_navigation(permissions, flags, user.type, base_url=current_app.config.get('APP_URL', '')),
        'preferences': UIPreference.get_for_user(user.id),
    }
