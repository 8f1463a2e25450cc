"""
Care Plan prompt 模板。

PROMPT_VERSION 写入 CarePlan.llm_prompt_version；改模板时同步升版本号。
"""

from django.conf import settings

PROMPT_VERSION = "1.1"

SYSTEM_PROMPT = (
    "You are an expert clinical pharmacist specializing in specialty pharmacy care plans."
)

CARE_PLAN_SECTIONS = """Please generate a comprehensive Care Plan with the following sections:

1. **Problem List / Drug Therapy Problems (DTPs)**
   - List potential drug therapy problems related to this medication
   - Consider adverse reactions, drug interactions, contraindications

2. **Goals (SMART)**
   - Primary therapeutic goal with specific timeframe
   - Safety goals
   - Process goals for medication adherence

3. **Pharmacist Interventions / Plan**
   - Dosing & Administration details
   - Premedication requirements if applicable
   - Infusion protocol if applicable
   - Adverse event management strategies

4. **Monitoring Plan & Lab Schedule**
   - Pre-treatment, during-treatment and post-treatment monitoring
   - Specific lab values to track

Format the output in clear markdown with headers."""


def _join(values):
    return ', '.join(str(v) for v in values) if values else 'None'


def _order_history(order):
    limit = getattr(settings, 'CARE_PLAN_MAX_ORDERS_IN_PROMPT', 10)
    previous = (
        order.patient.orders
        .exclude(id=order.id)
        .order_by('-created_at')[:limit]
    )
    lines = [
        f"- {o.created_at:%Y-%m-%d}: {o.medication_name} ({o.primary_diagnosis}), status={o.status}"
        for o in previous
    ]
    return '\n'.join(lines) if lines else 'None'


def build_care_plan_prompt(order):
    patient = order.patient
    return f"""Create a Care Plan for a specialty pharmacy patient.

Patient Information:
- Name: {patient.full_name}
- DOB: {patient.dob}
- MRN: {patient.mrn}

Provider Information:
- Name: {order.provider.name}
- NPI: {order.provider.npi}

Medication: {order.medication_name}
Primary Diagnosis: {order.primary_diagnosis}
Additional Diagnoses: {_join(order.additional_diagnoses)}
Medication History: {_join(order.medication_history)}
Previous Orders:
{_order_history(order)}

Patient Records:
{order.patient_records or 'Not provided'}

{CARE_PLAN_SECTIONS}"""
