"""Normalization of equivalent spellings used by list criteria.

Applicant records and offering criteria are entered by different people, so
the same year level, subsidy bracket or college may appear as a code, an
ordinal or a full name. Comparison always happens on canonical forms.
"""

from typing import Iterable, Optional


# ==================== Canonical Maps ====================

ST_BRACKET_MAP: dict[str, str] = {
    # Short codes
    "FDS": "Full Discount with Stipend",
    "FD": "Full Discount",
    "PD80": "PD80",
    "PD60": "PD60",
    "PD40": "PD40",
    "PD20": "PD20",
    "ND": "No Discount",
    # Full names
    "FULL DISCOUNT WITH STIPEND": "Full Discount with Stipend",
    "FULL DISCOUNT": "Full Discount",
    "80% PARTIAL DISCOUNT": "PD80",
    "60% PARTIAL DISCOUNT": "PD60",
    "40% PARTIAL DISCOUNT": "PD40",
    "20% PARTIAL DISCOUNT": "PD20",
    "NO DISCOUNT": "No Discount",
}

YEAR_LEVEL_MAP: dict[str, str] = {
    "1": "Freshman",
    "2": "Sophomore",
    "3": "Junior",
    "4": "Senior",
    "5": "Graduate",
    "1ST YEAR": "Freshman",
    "2ND YEAR": "Sophomore",
    "3RD YEAR": "Junior",
    "4TH YEAR": "Senior",
    "5TH YEAR": "Graduate",
    "FRESHMAN": "Freshman",
    "SOPHOMORE": "Sophomore",
    "JUNIOR": "Junior",
    "SENIOR": "Senior",
    "GRADUATE": "Graduate",
    "INCOMING FRESHMAN": "Incoming Freshman",
}

COLLEGE_CODE_MAP: dict[str, str] = {
    "CAS": "College of Arts and Sciences",
    "CAFS": "College of Agriculture and Food Science",
    "CEM": "College of Economics and Management",
    "CEAT": "College of Engineering and Agro-Industrial Technology",
    "CFNR": "College of Forestry and Natural Resources",
    "CHE": "College of Human Ecology",
    "CVM": "College of Veterinary Medicine",
    "CDC": "College of Development Communication",
    "CPAF": "College of Public Affairs and Development",
    "GS": "Graduate School",
    "SESAM": "School of Environmental Science and Management",
}

_COLLEGE_NAME_MAP = {name.upper(): name for name in COLLEGE_CODE_MAP.values()}


# ==================== Normalizers ====================


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Case-fold and collapse whitespace; None for blank input."""
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text.casefold() or None


def _lookup(value: Optional[str], mapping: dict[str, str]) -> Optional[str]:
    if value is None:
        return None
    key = " ".join(str(value).split()).upper()
    if not key:
        return None
    return mapping.get(key, str(value).strip())


def normalize_st_bracket(value: Optional[str]) -> Optional[str]:
    """Map a bracket code or full name to its canonical form."""
    return _lookup(value, ST_BRACKET_MAP)


def normalize_year_level(value: Optional[str]) -> Optional[str]:
    """Map '1', '1st Year' or 'FRESHMAN' to 'Freshman', and so on."""
    return _lookup(value, YEAR_LEVEL_MAP)


def normalize_college(value: Optional[str]) -> Optional[str]:
    """Map a college code to its full name; full names are kept."""
    if value is None:
        return None
    key = " ".join(str(value).split()).upper()
    if not key:
        return None
    return COLLEGE_CODE_MAP.get(key) or _COLLEGE_NAME_MAP.get(key) or str(value).strip()


# ==================== Matchers ====================


def matches_any(
    value: Optional[str],
    allowed: Iterable[str],
    canonical=normalize_text,
    fuzzy: bool = False,
) -> bool:
    """
    Check whether a value matches any allowed entry.

    Both sides are canonicalized and compared case-insensitively. With
    `fuzzy`, either string containing the other counts as a match.

    Args:
        value: Applicant value
        allowed: Allowed entries from the criteria
        canonical: Normalizer applied to both sides before comparing
        fuzzy: Accept substring matches in either direction

    Returns:
        True if the value matches at least one entry
    """
    target = normalize_text(canonical(value))
    if target is None:
        return False

    for entry in allowed:
        candidate = normalize_text(canonical(entry))
        if candidate is None:
            continue
        if candidate == target:
            return True
        if fuzzy and (candidate in target or target in candidate):
            return True
    return False
