"""
AI-assisted clinical decision support: health insights and differential
diagnosis for one patient.

Both operations gather the patient's recent chart, render it into a
prompt, ask the gateway for a JSON answer and fall back to a fixed
payload when the answer cannot be parsed.
"""
from __future__ import annotations

import json
import logging
from datetime import date
from typing import Optional

from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.models import LabResult, MedicalRecord, Patient, Prescription, Vitals
from clinic.permissions import is_admin
from clinic.services import llm
from clinic.services.audit import log_action
from clinic.services.patients import visible_patients

logger = logging.getLogger(__name__)

DISCLAIMER = 'This is AI-assisted decision support. Clinical judgment is essential. This is not a definitive diagnosis.'

INSIGHTS_SYSTEM = (
    'You are a clinical AI assistant providing health insights. Always respond with valid JSON only. '
    'Be medically accurate but note you are providing decision support, not diagnoses.'
)

DIAGNOSIS_SYSTEM = """You are an advanced clinical decision support AI assisting physicians with differential diagnosis. Your role is to:
1. Analyze patient data and presenting symptoms
2. Generate a prioritized list of differential diagnoses
3. Suggest relevant investigations and tests
4. Provide clinical reasoning for each diagnosis
5. Highlight red flags or urgent conditions

IMPORTANT DISCLAIMERS:
- This is decision support only, NOT a definitive diagnosis
- The physician must use clinical judgment
- Always consider life-threatening conditions first
- Recommend specialist referral when appropriate

Respond in valid JSON format only."""

INSIGHTS_SCHEMA = """{
  "overallStatus": "good|moderate|concerning|critical",
  "summary": "Brief overall health summary",
  "risks": [
    { "title": "Risk title", "severity": "low|medium|high", "description": "Details" }
  ],
  "recommendations": [
    { "category": "screening|lifestyle|medication|followup", "title": "Recommendation", "priority": "low|medium|high", "details": "Details" }
  ],
  "vitalsTrend": {
    "heartRate": "stable|increasing|decreasing|fluctuating",
    "bloodPressure": "normal|elevated|low|fluctuating",
    "oxygenation": "normal|low|concerning"
  },
  "nextSteps": ["Step 1", "Step 2", "Step 3"]
}"""

DIAGNOSIS_SCHEMA = """{
  "chiefComplaint": "Summarized chief complaint",
  "clinicalImpression": "Brief clinical impression based on available data",
  "differentialDiagnoses": [
    {
      "diagnosis": "Condition name",
      "probability": "high|moderate|low",
      "icdCode": "ICD-10 code if known",
      "reasoning": "Clinical reasoning supporting this diagnosis",
      "supportingFindings": ["Finding 1", "Finding 2"],
      "againstFindings": ["Finding that argues against"],
      "urgency": "emergent|urgent|routine"
    }
  ],
  "redFlags": [
    { "finding": "Concerning finding", "implication": "What this could indicate", "action": "Recommended immediate action" }
  ],
  "recommendedInvestigations": [
    { "test": "Test name", "rationale": "Why this test is needed", "priority": "immediate|soon|routine" }
  ],
  "recommendedActions": [
    { "action": "Action to take", "timing": "immediate|today|this_week", "rationale": "Why this action" }
  ],
  "specialistReferrals": [
    { "specialty": "Specialty name", "urgency": "emergent|urgent|routine", "reason": "Reason for referral" }
  ],
  "clinicalPearls": ["Relevant clinical tip or consideration"],
  "disclaimer": "This is AI-assisted decision support. Clinical judgment is essential."
}"""


def default_insights() -> dict:
    return {
        'overallStatus': 'moderate',
        'summary': 'Unable to generate detailed insights. Please review patient data manually.',
        'risks': [],
        'recommendations': [],
        'vitalsTrend': {'heartRate': 'stable', 'bloodPressure': 'normal', 'oxygenation': 'normal'},
        'nextSteps': ['Review patient vitals', 'Schedule follow-up appointment'],
    }


def default_diagnosis(chief_complaint: Optional[str]) -> dict:
    return {
        'chiefComplaint': chief_complaint or 'Unable to process',
        'clinicalImpression': 'AI analysis could not be completed. Please review patient data manually.',
        'differentialDiagnoses': [],
        'redFlags': [],
        'recommendedInvestigations': [],
        'recommendedActions': [
            {'action': 'Review patient manually', 'timing': 'today', 'rationale': 'AI parsing failed'},
        ],
        'specialistReferrals': [],
        'clinicalPearls': [],
        'disclaimer': 'This is AI-assisted decision support. Clinical judgment is essential.',
    }


def age_years(dob: date, today: Optional[date] = None) -> int:
    today = today or timezone.localdate()
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


def _join(items, empty: str) -> str:
    return ', '.join(items) if items else empty


def _na(value) -> str:
    return str(value) if value not in (None, '') else 'N/A'


# ---------------------------------------------------------------------
# Health insights
# ---------------------------------------------------------------------
def resolve_insights_patient(user, patient_id) -> Patient:
    """Admins get 404 for a missing patient; doctors get 403 for any they cannot see."""
    patient = visible_patients(user).filter(pk=patient_id).first()
    if patient is not None:
        return patient
    if is_admin(user):
        raise NotFound('Patient not found')
    raise PermissionDenied('Forbidden - No access to this patient')


def insights_prompt(patient, vitals, prescriptions, records) -> str:
    vitals_lines = '\n'.join(
        f'- {v.recorded_at.isoformat()}: HR={_na(v.heart_rate)}, '
        f'BP={_na(v.blood_pressure_systolic)}/{_na(v.blood_pressure_diastolic)}, '
        f'SpO2={_na(v.spo2)}%, Temp={_na(v.temperature)}°C'
        for v in vitals
    )
    record_lines = '\n'.join(
        f'- {r.created_at.isoformat()}: {r.record_type} - {r.diagnosis or "No diagnosis"}' for r in records
    )
    rx_lines = '\n'.join(
        f'- {rx.diagnosis}: {json.dumps(rx.medications)}' for rx in prescriptions if rx.status == Prescription.STATUS_ACTIVE
    )
    context = f"""
Patient Information:
- Name: {patient.full_name}
- Age: {age_years(patient.date_of_birth)} years
- Gender: {patient.gender}
- Blood Group: {patient.blood_group or 'Unknown'}
- Allergies: {_join(patient.allergies, 'None recorded')}
- Chronic Conditions: {_join(patient.chronic_conditions, 'None recorded')}
- Current Medications: {_join(patient.current_medications, 'None recorded')}

Recent Vitals (last 20 readings):
{vitals_lines}

Recent Medical History:
{record_lines}

Active Prescriptions:
{rx_lines}
"""
    return f"""You are an AI health analyst for a medical application. Based on the patient data provided, generate actionable health insights.

{context}

Analyze this patient data and provide:
1. Key health risks or concerns (based on vitals trends, conditions, medications)
2. Recommended screenings or tests
3. Lifestyle recommendations
4. Any medication considerations or potential interactions
5. A brief overall health summary

Respond in valid JSON format only:
{INSIGHTS_SCHEMA}"""


def health_insights(user, patient_id) -> dict:
    patient = resolve_insights_patient(user, patient_id)
    vitals = list(Vitals.objects.filter(patient=patient).order_by('-recorded_at')[:20])
    prescriptions = list(Prescription.objects.filter(patient=patient).order_by('-created_at')[:10])
    records = list(MedicalRecord.objects.filter(patient=patient).order_by('-created_at')[:10])
    logger.info('user %s (%s) requested health insights for patient %s', user.id, user.role, patient.id)

    content = llm.chat(INSIGHTS_SYSTEM, insights_prompt(patient, vitals, prescriptions, records),
                       temperature=0.4, max_tokens=2500)
    result = llm.parse_json(content, None)
    if not isinstance(result, dict):
        result = default_insights()
    return result


# ---------------------------------------------------------------------
# Smart diagnosis
# ---------------------------------------------------------------------
def diagnosis_prompt(patient, vitals, prescriptions, records, labs, *, symptoms, chief_complaint, duration, severity) -> str:
    med_lines = []
    for rx in prescriptions:
        for m in rx.medications if isinstance(rx.medications, list) else []:
            med_lines.append(f"- {m.get('name') or 'Unknown'} {m.get('dosage') or ''} ({m.get('frequency') or 'unknown frequency'})")
    latest = vitals[0] if vitals else None
    if latest:
        vitals_block = (
            f'LATEST VITALS ({latest.recorded_at:%Y-%m-%d}):\n'
            f'- Heart Rate: {_na(latest.heart_rate)} bpm\n'
            f'- Blood Pressure: {_na(latest.blood_pressure_systolic)}/{_na(latest.blood_pressure_diastolic)} mmHg\n'
            f'- SpO2: {_na(latest.spo2)}%\n'
            f'- Temperature: {_na(latest.temperature)}°C\n'
            f'- Respiratory Rate: {_na(latest.respiratory_rate)}/min'
        )
    else:
        vitals_block = 'LATEST VITALS (No recent vitals):\nNo recent vitals recorded'
    lab_lines = '\n'.join(
        f"- {lab.test_name}: {lab.result_value} {lab.result_unit or ''} "
        f"(Ref: {lab.reference_min if lab.reference_min is not None else '?'}-{lab.reference_max if lab.reference_max is not None else '?'})"
        for lab in labs[:5]
    ) or 'No recent lab results'
    record_lines = '\n'.join(
        f'- [{r.created_at:%Y-%m-%d}] {r.record_type}: {r.diagnosis or r.notes or "No details"}' for r in records[:10]
    ) or 'No recent records'

    context = f"""
PATIENT DEMOGRAPHICS:
- Name: {patient.full_name}
- Age: {age_years(patient.date_of_birth)} years
- Gender: {patient.gender}
- Blood Group: {patient.blood_group or 'Unknown'}

KNOWN ALLERGIES: {_join(patient.allergies, 'None documented')}

CHRONIC CONDITIONS: {_join(patient.chronic_conditions, 'None documented')}

CURRENT MEDICATIONS:
{chr(10).join(med_lines) or 'None documented'}

{vitals_block}

RECENT LAB RESULTS:
{lab_lines}

MEDICAL HISTORY (Recent Records):
{record_lines}

---
CURRENT PRESENTATION:
- Chief Complaint: {chief_complaint or 'Not specified'}
- Symptoms: {_join(symptoms, 'Not specified')}
- Duration: {duration or 'Not specified'}
- Severity: {severity or 'Not specified'}
"""
    return f"""Based on the following clinical data, provide a differential diagnosis analysis:

{context}

Generate a comprehensive differential diagnosis with the following structure:
{DIAGNOSIS_SCHEMA}

Provide 3-5 differential diagnoses ranked by probability. Focus on the most likely and most dangerous conditions."""


def smart_diagnosis(user, patient_id, *, symptoms=None, chief_complaint=None, duration=None, severity=None, request=None) -> dict:
    patient = visible_patients(user).filter(pk=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found or access denied')

    vitals = list(Vitals.objects.filter(patient=patient).order_by('-recorded_at')[:5])
    prescriptions = list(Prescription.objects.filter(patient=patient, status=Prescription.STATUS_ACTIVE))
    records = list(MedicalRecord.objects.filter(patient=patient).order_by('-created_at')[:15])
    labs = list(LabResult.objects.filter(patient=patient).order_by('-created_at')[:10])
    logger.info('generating differential diagnosis for patient %s', patient.id)

    prompt = diagnosis_prompt(
        patient, vitals, prescriptions, records, labs,
        symptoms=symptoms or [], chief_complaint=chief_complaint, duration=duration, severity=severity,
    )
    content = llm.chat(DIAGNOSIS_SYSTEM, prompt, temperature=0.3, max_tokens=4000)
    result = llm.parse_json(content, None)
    if not isinstance(result, dict):
        result = default_diagnosis(chief_complaint)

    result['disclaimer'] = result.get('disclaimer') or DISCLAIMER
    result['generatedAt'] = timezone.now().isoformat()
    result['patientId'] = patient.id

    log_action(user=user, action='AI_DIAGNOSIS', entity_type='patient', entity_id=patient.id,
               details={'chief_complaint': chief_complaint, 'symptoms': symptoms or [],
                        'differentials': len(result.get('differentialDiagnoses') or [])},
               request=request)
    return result
