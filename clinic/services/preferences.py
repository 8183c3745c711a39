from clinic.models import UserPreference

DEFAULT_LAYOUT = [
    'stats-patients',
    'stats-appointments',
    'stats-emergencies',
    'stats-prescriptions',
    'appointments-list',
    'recent-patients',
]
AVAILABLE_WIDGETS = DEFAULT_LAYOUT + ['emergency-alerts', 'quick-stats']

DEFAULT_REMINDER_SETTINGS = {
    'sms24h': True,
    'sms1h': True,
    'email24h': True,
    'email1h': False,
}


def get_preferences(user) -> UserPreference:
    pref, _ = UserPreference.objects.get_or_create(
        user=user,
        defaults={
            'dashboard_layout': list(DEFAULT_LAYOUT),
            'reminder_settings': dict(DEFAULT_REMINDER_SETTINGS),
        },
    )
    return pref


def as_payload(pref: UserPreference) -> dict:
    return {
        'dashboardLayout': pref.dashboard_layout or list(DEFAULT_LAYOUT),
        'availableWidgets': AVAILABLE_WIDGETS,
        'reminderSettings': {**DEFAULT_REMINDER_SETTINGS, **(pref.reminder_settings or {})},
        'updatedAt': pref.updated_at,
    }


def update_preferences(user, *, dashboard_layout=None, reminder_settings=None) -> UserPreference:
    """Overwrite the stored values; the last write wins."""
    pref = get_preferences(user)
    if dashboard_layout is not None:
        pref.dashboard_layout = list(dashboard_layout)
    if reminder_settings is not None:
        pref.reminder_settings = {**DEFAULT_REMINDER_SETTINGS, **(pref.reminder_settings or {}), **reminder_settings}
    pref.save()
    return pref
