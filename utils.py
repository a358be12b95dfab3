"""
Text normalization helpers shared by the parsers, aggregator and exporter
"""

import re
import unicodedata
from typing import Optional

from constants import SOURCE_ENCODING

_TIME_RE = re.compile(r'^\s*(\d{1,2}):(\d{2})')
_INT_RE = re.compile(r'^\s*([+-]?\d+)')
_AULA_SEDE_RE = re.compile(r'^([A-Z]{2})-')

DAY_ORDER = {
    'lunes': 1,
    'martes': 2,
    'miercoles': 3,
    'jueves': 4,
    'viernes': 5,
    'sabado': 6,
}


def decode_iso88591(content: bytes) -> str:
    """Decode a page body served in the site's legacy single-byte charset"""
    return content.decode(SOURCE_ENCODING)


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse every whitespace run (nbsp included) into one space and trim"""
    if not text:
        return ""
    return " ".join(text.split())


def to_search(text: str) -> str:
    """Lower-case and strip diacritics so 'Psicología' matches 'psicologia'"""
    decomposed = unicodedata.normalize('NFD', text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def parse_int(text: Optional[str]) -> Optional[int]:
    """Read a leading integer the way the site's numeric cells are written.

    Returns None when the text does not start with digits.
    """
    if not text:
        return None
    match = _INT_RE.match(text)
    if not match:
        return None
    return int(match.group(1))


def parse_time_to_minutes(hhmm: Optional[str]) -> int:
    """Convert 'HH:MM' to minutes since midnight; anything malformed counts as 00:00"""
    match = _TIME_RE.match(hhmm or "")
    if not match:
        return 0
    hours, minutes = int(match.group(1)), int(match.group(2))
    return hours * 60 + minutes


def day_name_to_num(day: str) -> int:
    """Map a Spanish weekday name to 1 (lunes) .. 6 (sabado), 0 when unknown"""
    key = to_search(normalize_whitespace(day))
    return DAY_ORDER.get(key, 0)


def extract_sede_from_aula_code(aula_code: str) -> str:
    """'HY-014' -> 'HY'; codes without a two-letter prefix are their own campus"""
    match = _AULA_SEDE_RE.match(aula_code)
    return match.group(1) if match else aula_code


def build_section_id(term_id: str, program: str, chair_id: int, tipo: str, label: str) -> str:
    return f"{term_id}_{program}_{chair_id}_{tipo}_{label}"


def build_meet_id(section_id: str, seq: int) -> str:
    return f"{section_id}_{seq}"


def build_materia_id(program: str, materia_code: Optional[int]) -> str:
    # A missing code keeps the historical "0NaN" sentinel instead of failing
    code = "NaN" if materia_code is None else str(materia_code)
    return f"{program}-{code.rjust(4, '0')}"


def build_catedra_key(program: str, chair_id: int) -> str:
    return f"{program}-{chair_id}"


def term_display_name(term_id: str) -> str:
    """'2025-2' -> '2025 / 2'"""
    year, sep, period = term_id.partition('-')
    if not sep:
        return term_id
    return f"{year} / {period}"
