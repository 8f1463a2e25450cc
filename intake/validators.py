"""
请求体校验：dict → IntakeSubmission。

所有字段错误一次性收集，统一抛 ValidationError：
  detail = {"errors": [{"field": "provider.npi", "message": "..."}, ...]}
"""

import re
from datetime import date

from .exceptions import ValidationError
from .types import IntakeSubmission, MedicationData, PatientData, ProviderData

# ── 共用校验正则 ───────────────────────────────────────────────────────────
NPI_RE = re.compile(r"^\d{10}$")
MRN_RE = re.compile(r"^[A-Za-z0-9]{6}$")
ICD10_RE = re.compile(r"^[A-TV-Z]\d{2}(\.[A-Z0-9]{1,4})?$")

# NPI 校验位按 ISO 7812 计算，前面补上卡号前缀 80840
NPI_LUHN_PREFIX = "80840"


def npi_checksum_ok(npi: str) -> bool:
    total = 0
    for i, ch in enumerate(reversed(NPI_LUHN_PREFIX + npi)):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def validate_npi(npi: str) -> str | None:
    """返回错误信息；合法则返回 None。"""
    if not NPI_RE.match(npi):
        return "NPI must be exactly 10 digits."
    if not npi_checksum_ok(npi):
        return "NPI check digit is invalid."
    return None


def validate_icd10(code: str) -> str | None:
    if not ICD10_RE.match(code.strip().upper()):
        return f"Invalid ICD-10 code: {code!r} (expected e.g. G70.00, E11.9)."
    return None


def _text(data: dict, key: str) -> str:
    value = data.get(key, "")
    return value.strip() if isinstance(value, str) else ""


def _section(payload: dict, key: str, errors: list) -> dict:
    value = payload.get(key)
    if not isinstance(value, dict):
        errors.append({"field": key, "message": f"'{key}' object is required."})
        return {}
    return value


def parse_submission(payload) -> IntakeSubmission:
    if not isinstance(payload, dict):
        raise ValidationError(message="Request body must be a JSON object.")

    errors = []
    patient = _section(payload, "patient", errors)
    provider = _section(payload, "provider", errors)
    medication = _section(payload, "medication", errors)

    # -- patient --
    mrn = _text(patient, "mrn")
    if not MRN_RE.match(mrn):
        errors.append({"field": "patient.mrn", "message": "MRN must be exactly 6 letters or digits."})

    first_name = _text(patient, "first_name")
    last_name = _text(patient, "last_name")
    if not first_name:
        errors.append({"field": "patient.first_name", "message": "First name is required."})
    if not last_name:
        errors.append({"field": "patient.last_name", "message": "Last name is required."})

    dob = None
    try:
        dob = date.fromisoformat(_text(patient, "dob"))
    except ValueError:
        errors.append({"field": "patient.dob", "message": "DOB must be an ISO date (YYYY-MM-DD)."})
    else:
        if dob > date.today():
            errors.append({"field": "patient.dob", "message": "DOB cannot be in the future."})

    # -- provider --
    npi = _text(provider, "npi")
    npi_error = validate_npi(npi)
    if npi_error:
        errors.append({"field": "provider.npi", "message": npi_error})
    provider_name = _text(provider, "name")
    if not provider_name:
        errors.append({"field": "provider.name", "message": "Provider name is required."})

    # -- medication --
    medication_name = _text(medication, "name")
    if not medication_name:
        errors.append({"field": "medication.name", "message": "Medication name is required."})

    primary = _text(medication, "primary_diagnosis").upper()
    icd_error = validate_icd10(primary)
    if icd_error:
        errors.append({"field": "medication.primary_diagnosis", "message": icd_error})

    additional = medication.get("additional_diagnoses") or []
    if not isinstance(additional, list):
        errors.append({"field": "medication.additional_diagnoses", "message": "Must be a list."})
        additional = []
    additional = [str(code).strip().upper() for code in additional if str(code).strip()]
    for i, code in enumerate(additional):
        icd_error = validate_icd10(code)
        if icd_error:
            errors.append({"field": f"medication.additional_diagnoses[{i}]", "message": icd_error})

    history = medication.get("medication_history") or []
    if not isinstance(history, list):
        errors.append({"field": "medication.medication_history", "message": "Must be a list."})
        history = []

    if errors:
        raise ValidationError(
            message="Request validation failed.",
            code="VALIDATION_ERROR",
            detail={"errors": errors},
        )

    return IntakeSubmission(
        patient=PatientData(mrn=mrn, first_name=first_name, last_name=last_name, dob=dob),
        provider=ProviderData(npi=npi, name=provider_name),
        medication=MedicationData(
            name=medication_name,
            primary_diagnosis=primary,
            additional_diagnoses=additional,
            medication_history=history,
        ),
        patient_records=_text(payload, "patient_records"),
        confirm=payload.get("confirm") is True,
    )
