"""
Integration tests for the CareTag API.

These exercise the behaviours the front-end depends on: patient
visibility and search, the CareTag lookup, dashboard counters, the
patient timeline, prescriptions and refills, billing arithmetic,
inventory stats, clinics, messaging, preferences and auditing.
"""
from datetime import date, time, timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from clinic.models import (
    Appointment,
    AuditLog,
    Clinic,
    EmergencyRecord,
    InventoryItem,
    MedicalRecord,
    Message,
    Patient,
    Prescription,
    PrescriptionTemplate,
    StaffSchedule,
    User,
    Vitals,
)


def _patient(name, caretag, doctor=None, **extra):
    defaults = {'date_of_birth': date(1985, 1, 1), 'gender': 'male'}
    defaults.update(extra)
    return Patient.objects.create(full_name=name, caretag_id=caretag, primary_doctor=doctor, **defaults)


class ClinicAPITests(APITestCase):
    def setUp(self) -> None:
        self.doctor = User.objects.create_user(username='doc', password='P@ssw0rd1', role='doctor')
        self.other = User.objects.create_user(username='doc2', password='P@ssw0rd1', role='doctor')
        self.admin = User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin')

        self.alice = _patient('Alice Johnson', 'CT-2024-0001', self.doctor, phone='555-0101', email='alice@example.com')
        self.bob = _patient('Bob Smith', 'CT-2024-0002', self.doctor, phone='555-0202')
        self.carol = _patient('Carol White', 'CT-2024-0003', self.other)
        self.client.force_authenticate(user=self.doctor)

    def as_user(self, user):
        self.client.force_authenticate(user=user)

    # ------------------------------------------------------------------
    # patients
    # ------------------------------------------------------------------
    def test_patient_search_matches_name_caretag_phone_and_email(self):
        url = reverse('patients')
        cases = {'alice': {'Alice Johnson'}, 'ct-2024-0002': {'Bob Smith'}, '0202': {'Bob Smith'},
                 'EXAMPLE.COM': {'Alice Johnson'}, '': {'Alice Johnson', 'Bob Smith'}}
        for q, expected in cases.items():
            resp = self.client.get(url, {'q': q})
            self.assertEqual(resp.status_code, status.HTTP_200_OK)
            self.assertEqual({p['full_name'] for p in resp.data['data']}, expected, q)

    def test_doctor_only_sees_own_or_treated_patients(self):
        resp = self.client.get(reverse('patients'))
        self.assertNotIn('Carol White', {p['full_name'] for p in resp.data['data']})
        resp = self.client.get(reverse('patient_detail', args=[self.carol.id]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        # an appointment with the patient makes them visible
        Appointment.objects.create(patient=self.carol, doctor=self.doctor, scheduled_at=timezone.now())
        resp = self.client.get(reverse('patient_detail', args=[self.carol.id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_admin_sees_every_patient(self):
        self.as_user(self.admin)
        resp = self.client.get(reverse('patients'))
        self.assertEqual(resp.data['pagination']['total'], 3)

    def test_patient_list_pagination(self):
        resp = self.client.get(reverse('patients'), {'page': 2, 'pageSize': 1})
        self.assertEqual(resp.data['pagination'], {'total': 2, 'page': 2, 'pageSize': 1})
        self.assertEqual(len(resp.data['data']), 1)

    def test_create_patient_requires_core_fields(self):
        resp = self.client.post(reverse('patients'), {'phone': '123'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resp.data['ok'])
        for field in ('full_name', 'date_of_birth', 'gender'):
            self.assertIn(field, resp.data['error']['message'])

    def test_create_patient_assigns_caretag_and_primary_doctor(self):
        payload = {'full_name': 'Dan Brown', 'date_of_birth': '2001-02-03', 'gender': 'male',
                   'allergies': 'Peanuts, Latex', 'blood_group': 'ab+'}
        resp = self.client.post(reverse('patients'), payload, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.data['data']
        self.assertRegex(data['caretag_id'], r'^CT-\d{4}-\d{4}$')
        self.assertEqual(data['primary_doctor'], self.doctor.id)
        self.assertEqual(data['allergies'], ['Peanuts', 'Latex'])
        self.assertEqual(data['blood_group'], 'AB+')
        self.assertTrue(AuditLog.objects.filter(action='CREATE', entity_type='patient', entity_id=str(data['id'])).exists())

    def test_duplicate_caretag_is_rejected_case_insensitively(self):
        payload = {'full_name': 'Eve', 'date_of_birth': '2001-02-03', 'gender': 'female', 'caretag_id': 'ct-2024-0001'}
        resp = self.client.post(reverse('patients'), payload, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('caretag_id', resp.data['error']['message'])

    def test_caretag_lookup_trims_and_uppercases(self):
        resp = self.client.get(reverse('patient_by_caretag', args=[' ct-2024-0001 ']))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['full_name'], 'Alice Johnson')

        resp = self.client.get(reverse('patient_by_caretag', args=['CT-9999-0001']))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data['error']['message'], 'No patient found with CareTag ID: CT-9999-0001')

    def test_update_and_delete_patient_are_audited(self):
        url = reverse('patient_detail', args=[self.bob.id])
        resp = self.client.patch(url, {'phone': '555-9999'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['phone'], '555-9999')

        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(Patient.objects.filter(pk=self.bob.id).exists())
        actions = list(AuditLog.objects.filter(entity_type='patient', entity_id=str(self.bob.id))
                       .order_by('created_at').values_list('action', flat=True))
        self.assertEqual(actions, ['UPDATE', 'DELETE'])

    def test_lab_results_carry_result_status(self):
        url = reverse('patient_labs', args=[self.alice.id])
        for value, expected in (('60', 'low'), ('85', 'normal'), ('140', 'high')):
            resp = self.client.post(url, {'test_name': 'Glucose', 'result_value': value,
                                          'reference_min': '70', 'reference_max': '100'}, format='json')
            self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
            self.assertEqual(resp.data['data']['result_status'], expected)

    # ------------------------------------------------------------------
    # timeline
    # ------------------------------------------------------------------
    def test_timeline_is_merged_newest_first_with_prefixed_ids(self):
        now = timezone.now()
        apt = Appointment.objects.create(patient=self.alice, doctor=self.doctor,
                                         scheduled_at=now - timedelta(days=3), reason='Checkup')
        vit = Vitals.objects.create(patient=self.alice, heart_rate=72, recorded_at=now - timedelta(days=1))
        em = EmergencyRecord.objects.create(patient=self.alice, doctor=self.doctor, severity='high', description='Fall')
        rec = MedicalRecord.objects.create(patient=self.alice, doctor=self.doctor, record_type='consultation')
        MedicalRecord.objects.filter(pk=rec.pk).update(created_at=now - timedelta(days=5))

        resp = self.client.get(reverse('patient_timeline', args=[self.alice.id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        ids = [e['id'] for e in resp.data['data']]
        self.assertEqual(ids, [f'em-{em.id}', f'vital-{vit.id}', f'apt-{apt.id}', f'rec-{rec.id}'])
        self.assertEqual(resp.data['data'][2]['title'], 'Checkup')

    # ------------------------------------------------------------------
    # dashboard
    # ------------------------------------------------------------------
    def test_dashboard_counts_are_live_and_scoped(self):
        now = timezone.now()
        Appointment.objects.create(patient=self.alice, doctor=self.doctor, scheduled_at=now + timedelta(hours=1))
        Appointment.objects.create(patient=self.alice, doctor=self.doctor, scheduled_at=now - timedelta(days=2))
        Appointment.objects.create(patient=self.carol, doctor=self.other, scheduled_at=now + timedelta(hours=1))
        Prescription.objects.create(patient=self.alice, doctor=self.doctor, medications=[{'name': 'A'}])
        Prescription.objects.create(patient=self.alice, doctor=self.doctor, medications=[{'name': 'B'}],
                                    status=Prescription.STATUS_COMPLETED)
        EmergencyRecord.objects.create(patient=self.alice, severity='low', description='x')
        EmergencyRecord.objects.create(patient=self.bob, severity='low', description='y', resolved_at=now)

        resp = self.client.get(reverse('dashboard_stats'))
        self.assertEqual(resp.data['data'], {
            'totalPatients': 2,
            'todayAppointments': 1,
            'activePrescriptions': 1,
            'activeEmergencies': 1,
        })

        self.as_user(self.admin)
        resp = self.client.get(reverse('dashboard_stats'))
        self.assertEqual(resp.data['data']['totalPatients'], 3)
        self.assertEqual(resp.data['data']['todayAppointments'], 2)

    def test_analytics_shape(self):
        self.as_user(self.admin)
        resp = self.client.get(reverse('analytics'))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.data['data']
        self.assertEqual(data['genderDistribution']['male'], 3)
        self.assertEqual(len(data['dailyRegistrations']), 14)
        self.assertEqual([g['label'] for g in data['ageGroups']], ['0-18', '19-35', '36-50', '51-65', '65+'])

    # ------------------------------------------------------------------
    # appointments
    # ------------------------------------------------------------------
    def test_create_appointment_for_invisible_patient_is_404(self):
        payload = {'patient': self.carol.id, 'scheduled_at': timezone.now().isoformat()}
        resp = self.client.post(reverse('appointments'), payload, format='json')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_appointment_filters_and_upcoming_reminders(self):
        now = timezone.now()
        soon = Appointment.objects.create(patient=self.alice, doctor=self.doctor, scheduled_at=now + timedelta(hours=2))
        Appointment.objects.create(patient=self.bob, doctor=self.doctor, scheduled_at=now + timedelta(days=3))
        Appointment.objects.create(patient=self.bob, doctor=self.doctor, scheduled_at=now + timedelta(hours=3),
                                   status=Appointment.STATUS_CANCELLED)

        resp = self.client.get(reverse('appointments'), {'status': 'cancelled'})
        self.assertEqual(len(resp.data['data']), 1)
        resp = self.client.get(reverse('appointments'), {'patient': self.alice.id})
        self.assertEqual([a['id'] for a in resp.data['data']], [soon.id])
        resp = self.client.get(reverse('upcoming_reminders'))
        self.assertEqual([a['id'] for a in resp.data['data']], [soon.id])

    # ------------------------------------------------------------------
    # prescriptions
    # ------------------------------------------------------------------
    def test_prescription_drops_blank_rows_and_sets_validity(self):
        payload = {
            'patient': self.alice.id,
            'diagnosis': 'Bronchitis',
            'medications': [{'name': 'Amoxicillin', 'dosage': '500mg'}, {'name': '  '}],
            'valid_months': 3,
            'max_refills': 2,
        }
        resp = self.client.post(reverse('prescriptions'), payload, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.data['data']
        self.assertEqual(len(data['medications']), 1)
        self.assertEqual(data['status'], 'active')
        self.assertNotIn('valid_months', data)
        self.assertGreater(date.fromisoformat(data['valid_until']), timezone.localdate() + timedelta(days=80))

    def test_prescription_without_medications_is_400(self):
        payload = {'patient': self.alice.id, 'medications': [{'name': ''}]}
        resp = self.client.post(reverse('prescriptions'), payload, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Please add at least one medication', str(resp.data['error']['message']))

    def test_refill_until_exhausted(self):
        rx = Prescription.objects.create(patient=self.alice, doctor=self.doctor, medications=[{'name': 'A'}], max_refills=1)
        url = reverse('prescription_refill', args=[rx.id])
        resp = self.client.post(url, {}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['refill_count'], 1)
        self.assertEqual(resp.data['data']['last_refill_date'], timezone.localdate().isoformat())

        resp = self.client.post(url, {}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data['error']['message'], 'No refills remaining for this prescription')

    def test_prescription_filters(self):
        old = Prescription.objects.create(patient=self.alice, doctor=self.doctor, diagnosis='Gout', medications=[{'name': 'A'}])
        Prescription.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=40))
        Prescription.objects.create(patient=self.bob, doctor=self.doctor, diagnosis='Flu', medications=[{'name': 'B'}])

        resp = self.client.get(reverse('prescriptions'), {'range': 'month'})
        self.assertEqual([p['diagnosis'] for p in resp.data['data']], ['Flu'])
        resp = self.client.get(reverse('prescriptions'), {'q': 'alice'})
        self.assertEqual([p['diagnosis'] for p in resp.data['data']], ['Gout'])

    def test_template_favourites_first_and_toggle(self):
        a = PrescriptionTemplate.objects.create(doctor=self.doctor, name='A', medications=[{'name': 'x'}])
        b = PrescriptionTemplate.objects.create(doctor=self.doctor, name='B', medications=[{'name': 'y'}])
        resp = self.client.post(reverse('template_favorite', args=[b.id]))
        self.assertTrue(resp.data['data']['is_favorite'])
        resp = self.client.get(reverse('templates'))
        self.assertEqual([t['id'] for t in resp.data['data']], [b.id, a.id])

    def test_dosage_tool(self):
        resp = self.client.post(reverse('dosage'), {'drug': 'Paracetamol', 'weight': '20'}, format='json')
        self.assertEqual(resp.data['data']['dose'], '300 mg')
        self.assertEqual(resp.data['data']['totalDaily'], '1200 mg/day')

    # ------------------------------------------------------------------
    # emergencies
    # ------------------------------------------------------------------
    def test_emergency_resolve_and_active_filter(self):
        resp = self.client.post(reverse('emergencies'), {'patient': self.alice.id, 'severity': 'critical',
                                                         'description': 'Chest pain'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['data']['blood_group'], '')
        em_id = resp.data['data']['id']

        resp = self.client.post(reverse('emergency_resolve', args=[em_id]), {'outcome': 'Stabilised'}, format='json')
        self.assertIsNotNone(resp.data['data']['resolved_at'])
        self.assertEqual(resp.data['data']['outcome'], 'Stabilised')

        resp = self.client.get(reverse('emergencies'), {'active': '1'})
        self.assertEqual(resp.data['data'], [])

    # ------------------------------------------------------------------
    # billing & inventory
    # ------------------------------------------------------------------
    def test_invoice_totals(self):
        payload = {
            'patient': self.alice.id,
            'items': [
                {'description': 'Consultation', 'quantity': 2, 'unit_price': '50'},
                {'description': 'Dressing', 'quantity': 1, 'unit_price': '20'},
            ],
            'tax_rate': '10',
            'discount': '5',
        }
        resp = self.client.post(reverse('invoices'), payload, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.data['data']
        self.assertEqual(Decimal(data['subtotal']), Decimal('120.00'))
        self.assertEqual(Decimal(data['tax_amount']), Decimal('12.00'))
        self.assertEqual(Decimal(data['total_amount']), Decimal('127.00'))
        self.assertRegex(data['invoice_number'], r'^INV-\d{8}-[A-Z0-9]{6}$')

        resp = self.client.post(reverse('invoice_status', args=[data['id']]), {'status': 'paid'}, format='json')
        self.assertIsNotNone(resp.data['data']['paid_at'])
        stats = self.client.get(reverse('invoice_stats')).data['data']
        self.assertEqual(stats['paid'], 1)
        self.assertEqual(stats['totalRevenue'], Decimal('127.00'))

    def test_inventory_stats(self):
        today = timezone.localdate()
        InventoryItem.objects.create(name='Gauze', category='Medical Supplies', unit='rolls', quantity=5,
                                     min_stock_level=10, cost_per_unit=Decimal('2.50'), expiry_date=today + timedelta(days=10))
        InventoryItem.objects.create(name='Gloves', category='PPE', unit='boxes', quantity=20,
                                     min_stock_level=10, cost_per_unit=Decimal('1.00'), expiry_date=today - timedelta(days=1))
        InventoryItem.objects.create(name='Scale', category='Equipment', unit='units', quantity=10, min_stock_level=10)

        stats = self.client.get(reverse('inventory_stats')).data['data']
        self.assertEqual(stats, {'total': 3, 'lowStock': 2, 'expiring': 1, 'totalValue': Decimal('32.50')})

        resp = self.client.get(reverse('inventory'), {'q': 'glo', 'category': 'all'})
        self.assertEqual([i['name'] for i in resp.data['data']], ['Gloves'])

    def test_inventory_requires_name_category_unit(self):
        resp = self.client.post(reverse('inventory'), {'quantity': 3}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('name', 'category', 'unit'):
            self.assertIn(field, resp.data['error']['message'])

    # ------------------------------------------------------------------
    # clinics
    # ------------------------------------------------------------------
    def test_clinic_toggle_twice_restores_state(self):
        clinic = Clinic.objects.create(name='Main', address='1 Road', city='Pune')
        self.as_user(self.admin)
        url = reverse('clinic_toggle_active', args=[clinic.id])
        self.assertFalse(self.client.post(url).data['data']['is_active'])
        self.assertTrue(self.client.post(url).data['data']['is_active'])
        stats = self.client.get(reverse('clinic_stats')).data['data']
        self.assertEqual(stats, {'total': 1, 'active': 1, 'inactive': 0})

    def test_doctors_cannot_write_clinics(self):
        resp = self.client.post(reverse('clinics'), {'name': 'X', 'address': 'Y', 'city': 'Z'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse('clinics')).status_code, status.HTTP_200_OK)

    def test_create_clinic_requires_name_address_and_city(self):
        self.as_user(self.admin)
        resp = self.client.post(reverse('clinics'), {'state': 'MH', 'address': ''}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resp.data['ok'])
        for field in ('name', 'address', 'city'):
            self.assertIn(field, resp.data['error']['message'])
        self.assertFalse(Clinic.objects.exists())

    # ------------------------------------------------------------------
    # messaging
    # ------------------------------------------------------------------
    def test_conversations_group_by_counterpart(self):
        self.client.post(reverse('messages'), {'recipient': self.other.id, 'content': 'Hi'}, format='json')
        Message.objects.create(sender=self.other, recipient=self.doctor, content='Hello back')
        Message.objects.create(sender=self.admin, recipient=self.doctor, content='Staff meeting')

        convs = self.client.get(reverse('conversations')).data['data']
        self.assertEqual([c['userId'] for c in convs], [self.admin.id, self.other.id])
        self.assertEqual(convs[1]['latestMessage']['content'], 'Hello back')
        self.assertEqual(convs[1]['unreadCount'], 1)

    def test_cannot_message_self(self):
        resp = self.client.post(reverse('messages'), {'recipient': self.doctor.id, 'content': 'me'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_recipient_marks_read(self):
        msg = Message.objects.create(sender=self.doctor, recipient=self.other, content='x')
        self.assertEqual(self.client.post(reverse('message_read', args=[msg.id])).status_code, status.HTTP_404_NOT_FOUND)
        self.as_user(self.other)
        self.assertTrue(self.client.post(reverse('message_read', args=[msg.id])).data['data']['is_read'])

    # ------------------------------------------------------------------
    # waitlist, feedback, schedules
    # ------------------------------------------------------------------
    def test_waitlist_ordered_by_priority(self):
        for patient, priority in ((self.alice, 1), (self.bob, 5)):
            self.client.post(reverse('waitlist'), {'patient': patient.id, 'priority': priority}, format='json')
        resp = self.client.get(reverse('waitlist'))
        self.assertEqual([e['patient'] for e in resp.data['data']], [self.bob.id, self.alice.id])

    def test_feedback_average(self):
        for rating in (4, 5):
            self.client.post(reverse('feedback'), {'rating': rating}, format='json')
        resp = self.client.get(reverse('feedback'))
        self.assertEqual(resp.data['summary'], {'count': 2, 'averageRating': Decimal('4.5')})
        resp = self.client.post(reverse('feedback'), {'rating': 6}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_schedule_end_after_start(self):
        resp = self.client.post(reverse('schedules'), {'day_of_week': 1, 'start_time': '17:00', 'end_time': '09:00'},
                                format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        resp = self.client.post(reverse('schedules'), {'day_of_week': 1, 'start_time': '09:00', 'end_time': '17:00',
                                                       'doctor': self.other.id}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['data']['doctor'], self.doctor.id)

    def test_schedule_doctor_filter_is_validated(self):
        StaffSchedule.objects.create(doctor=self.doctor, day_of_week=1, start_time=time(9), end_time=time(17))
        StaffSchedule.objects.create(doctor=self.other, day_of_week=2, start_time=time(9), end_time=time(13))
        self.as_user(self.admin)
        resp = self.client.get(reverse('schedules'), {'doctor': 'abc'})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('doctor', resp.data['error']['message'])
        resp = self.client.get(reverse('schedules'), {'doctor': self.other.id})
        self.assertEqual([row['doctor'] for row in resp.data['data']], [self.other.id])

    # ------------------------------------------------------------------
    # preferences & audit
    # ------------------------------------------------------------------
    def test_preferences_defaults_and_update(self):
        data = self.client.get(reverse('preferences')).data['data']
        self.assertEqual(data['dashboardLayout'][0], 'stats-patients')
        self.assertEqual(data['reminderSettings'],
                         {'sms24h': True, 'sms1h': True, 'email24h': True, 'email1h': False})

        resp = self.client.put(reverse('preferences'), {'dashboardLayout': ['recent-patients'],
                                                        'reminderSettings': {'email1h': True}}, format='json')
        self.assertEqual(resp.data['data']['dashboardLayout'], ['recent-patients'])
        self.assertTrue(resp.data['data']['reminderSettings']['email1h'])

        resp = self.client.put(reverse('preferences'), {'dashboardLayout': ['not-a-widget']}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_audit_log_filters(self):
        self.client.post(reverse('inventory'), {'name': 'Masks', 'category': 'PPE', 'unit': 'boxes'}, format='json')
        self.as_user(self.admin)
        rows = self.client.get(reverse('audit_logs'), {'entity': 'inventory_item'}).data['data']
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['username'], 'doc')
        rows = self.client.get(reverse('audit_logs'), {'q': 'Masks'}).data['data']
        self.assertEqual(len(rows), 1)
        rows = self.client.get(reverse('audit_logs'), {'action': 'DELETE'}).data['data']
        self.assertEqual(rows, [])
