"""
URL mappings for the CareTag API.

Paths carry no trailing slash; ``APPEND_SLASH`` is off so the client
must call them exactly as listed.
"""
from django.urls import path

from .auth_views import (
    jwt_logout_view,
    jwt_refresh_view,
    login_view,
    me_view,
    password_change_view,
    password_reset_confirm_view,
    password_reset_view,
    profile_view,
    signup_view,
)
from .views import (
    appointments,
    audit,
    billing,
    clinics,
    dashboard,
    emergencies,
    feedback,
    functions,
    health,
    inventory,
    messages,
    patients,
    preferences,
    prescriptions,
    referrals,
    schedules,
    waitlist,
)

urlpatterns = [
    path('healthz', health.healthz),

    # auth
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/signup', signup_view, name='signup_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),
    path('api/auth/me', me_view, name='me'),
    path('api/auth/password', password_change_view, name='password_change'),
    path('api/auth/password-reset', password_reset_view, name='password_reset'),
    path('api/auth/password-reset/confirm', password_reset_confirm_view, name='password_reset_confirm'),
    path('api/profile', profile_view, name='profile'),

    # patients
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/caretag/<str:caretag_id>', patients.patient_by_caretag, name='patient_by_caretag'),
    path('api/patients/<int:patient_id>', patients.patient_detail, name='patient_detail'),
    path('api/patients/<int:patient_id>/timeline', patients.timeline, name='patient_timeline'),
    path('api/patients/<int:patient_id>/vitals', patients.patient_vitals, name='patient_vitals'),
    path('api/patients/<int:patient_id>/records', patients.patient_records, name='patient_records'),
    path('api/patients/<int:patient_id>/labs', patients.patient_labs, name='patient_labs'),
    path('api/patients/<int:patient_id>/referrals', patients.patient_referrals, name='patient_referrals'),

    # appointments
    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/today', appointments.appointments_today, name='appointments_today'),
    path('api/appointments/upcoming-reminders', appointments.upcoming_reminders, name='upcoming_reminders'),
    path('api/appointments/<int:appointment_id>', appointments.appointment_detail, name='appointment_detail'),

    # prescriptions
    path('api/prescriptions', prescriptions.prescriptions, name='prescriptions'),
    path('api/prescriptions/<int:prescription_id>', prescriptions.prescription_detail, name='prescription_detail'),
    path('api/prescriptions/<int:prescription_id>/refill', prescriptions.prescription_refill, name='prescription_refill'),
    path('api/prescription-templates', prescriptions.templates, name='templates'),
    path('api/prescription-templates/<int:template_id>', prescriptions.template_detail, name='template_detail'),
    path('api/prescription-templates/<int:template_id>/favorite', prescriptions.template_favorite, name='template_favorite'),
    path('api/tools/dosage', prescriptions.dosage_calculator, name='dosage'),

    # emergencies
    path('api/emergencies', emergencies.emergencies, name='emergencies'),
    path('api/emergencies/<int:emergency_id>', emergencies.emergency_detail, name='emergency_detail'),
    path('api/emergencies/<int:emergency_id>/resolve', emergencies.emergency_resolve, name='emergency_resolve'),

    # inventory
    path('api/inventory', inventory.inventory, name='inventory'),
    path('api/inventory/stats', inventory.inventory_stats_view, name='inventory_stats'),
    path('api/inventory/<int:item_id>', inventory.inventory_detail, name='inventory_detail'),

    # billing
    path('api/invoices', billing.invoices, name='invoices'),
    path('api/invoices/stats', billing.invoice_stats_view, name='invoice_stats'),
    path('api/invoices/<int:invoice_id>', billing.invoice_detail, name='invoice_detail'),
    path('api/invoices/<int:invoice_id>/status', billing.invoice_status, name='invoice_status'),

    # referrals
    path('api/referrals', referrals.referrals, name='referrals'),
    path('api/referrals/<int:referral_id>', referrals.referral_detail, name='referral_detail'),
    path('api/referrals/<int:referral_id>/status', referrals.referral_status, name='referral_status'),

    # messages
    path('api/messages', messages.messages, name='messages'),
    path('api/messages/conversations', messages.conversations, name='conversations'),
    path('api/messages/recipients', messages.recipients, name='message_recipients'),
    path('api/messages/with/<int:user_id>', messages.thread, name='message_thread'),
    path('api/messages/<int:message_id>/read', messages.message_read, name='message_read'),

    # scheduling, clinics, waitlist, feedback
    path('api/schedules', schedules.schedules, name='schedules'),
    path('api/schedules/<int:schedule_id>', schedules.schedule_detail, name='schedule_detail'),
    path('api/clinics', clinics.clinics, name='clinics'),
    path('api/clinics/stats', clinics.clinic_stats, name='clinic_stats'),
    path('api/clinics/<int:clinic_id>', clinics.clinic_detail, name='clinic_detail'),
    path('api/clinics/<int:clinic_id>/toggle-active', clinics.clinic_toggle_active, name='clinic_toggle_active'),
    path('api/waitlist', waitlist.waitlist, name='waitlist'),
    path('api/waitlist/<int:entry_id>', waitlist.waitlist_detail, name='waitlist_detail'),
    path('api/waitlist/<int:entry_id>/status', waitlist.waitlist_status, name='waitlist_status'),
    path('api/feedback', feedback.feedback, name='feedback'),

    # dashboard & analytics
    path('api/dashboard/stats', dashboard.stats, name='dashboard_stats'),
    path('api/dashboard/recent-patients', dashboard.recent_patients, name='dashboard_recent_patients'),
    path('api/dashboard/today-appointments', dashboard.today_appointments, name='dashboard_today_appointments'),
    path('api/dashboard/active-emergencies', dashboard.active_emergencies, name='dashboard_active_emergencies'),
    path('api/dashboard/recent-vitals', dashboard.recent_vitals, name='dashboard_recent_vitals'),
    path('api/analytics', dashboard.analytics, name='analytics'),

    # audit & preferences
    path('api/audit-logs', audit.audit_logs, name='audit_logs'),
    path('api/preferences', preferences.preferences, name='preferences'),

    # AI-assisted functions
    path('api/functions/health-insights', functions.health_insights, name='fn_health_insights'),
    path('api/functions/smart-diagnosis', functions.smart_diagnosis, name='fn_smart_diagnosis'),
    path('api/functions/appointment-reminder', functions.appointment_reminder, name='fn_appointment_reminder'),
    path('api/functions/drug-interactions', functions.drug_interactions, name='fn_drug_interactions'),
]
