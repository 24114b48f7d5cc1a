# invoice_engine/domain/services/gstin_validation.py

import re

from invoice_engine.core.errors import ValidationError

PAN_REGEX = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
GSTIN_REGEX = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")

# State / UT name -> two-letter code used on invoices
INDIAN_STATES: dict[str, str] = {
    "Andhra Pradesh": "AP",
    "Arunachal Pradesh": "AR",
    "Assam": "AS",
    "Bihar": "BR",
    "Chhattisgarh": "CG",
    "Goa": "GA",
    "Gujarat": "GJ",
    "Haryana": "HR",
    "Himachal Pradesh": "HP",
    "Jharkhand": "JH",
    "Karnataka": "KA",
    "Kerala": "KL",
    "Madhya Pradesh": "MP",
    "Maharashtra": "MH",
    "Manipur": "MN",
    "Meghalaya": "ML",
    "Mizoram": "MZ",
    "Nagaland": "NL",
    "Odisha": "OR",
    "Punjab": "PB",
    "Rajasthan": "RJ",
    "Sikkim": "SK",
    "Tamil Nadu": "TN",
    "Telangana": "TS",
    "Tripura": "TR",
    "Uttar Pradesh": "UP",
    "Uttarakhand": "UK",
    "West Bengal": "WB",
    "Delhi": "DL",
    "Jammu and Kashmir": "JK",
    "Ladakh": "LA",
    "Chandigarh": "CH",
    "Dadra and Nagar Haveli and Daman and Diu": "DN",
    "Lakshadweep": "LD",
    "Puducherry": "PY",
    "Andaman and Nicobar Islands": "AN",
}

_STATES_BY_FOLDED_NAME = {name.casefold(): code for name, code in INDIAN_STATES.items()}


def is_valid_pan(pan: str | None) -> bool:
    if not pan:
        return False
    pan = pan.strip().upper()
    return bool(PAN_REGEX.match(pan))


def is_valid_gstin(gstin: str | None) -> bool:
    if not gstin:
        return False
    gstin = gstin.strip().upper()
    if not GSTIN_REGEX.match(gstin):
        return False

    # PAN part inside GSTIN
    pan_part = gstin[2:12]
    return is_valid_pan(pan_part)


def state_code_from_gstin(gstin: str) -> str:
    """Two-digit state code (first 2 chars) of a valid GSTIN."""
    if not is_valid_gstin(gstin):
        raise ValidationError(f"Invalid GST number format: {gstin!r}", field="gst_number")
    return gstin.strip()[:2]


def state_code_for(name: str | None) -> str | None:
    """'maharashtra ' -> 'MH'; None for unknown names."""
    if not name:
        return None
    return _STATES_BY_FOLDED_NAME.get(name.strip().casefold())
