"""
HTML parsers for the catalog list page and the per-chair detail pages.

Both layouts are loose: tables come and go, rows carry a variable number of
cells and several cells pack more than one value into free text. Nothing here
raises on malformed markup; missing pieces fall back to empty values.
"""

import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from constants import PROGRAMS
from models import ChairStub, DetailPage, MeetingRow, ProgramListing, SectionRequirement
from utils import extract_sede_from_aula_code, normalize_whitespace, parse_int

logger = logging.getLogger(__name__)

# "I - Prof. Pérez" / "A - Prof. Pérez"; the hyphen is required so "Prof." or
# "Dr." never read as a label
CHAIR_LABEL_RE = re.compile(r'^((?:[IVXLCDM]+|[A-Z]))\s*-\s*')
LEADING_DASH_RE = re.compile(r'^[-–]\s*')
MATERIA_HEADER_RE = re.compile(r'Materia\s*\(\s*(\d+)\s*-\s*([^)]+)\)', re.IGNORECASE)
ROMAN_RE = re.compile(r'^[IVXLCDM]+$', re.IGNORECASE)
OBLIG_SPLIT_RE = re.compile(r'\s*-\s*')

MIN_DETAIL_CELLS = 10


def split_chair_label(text: str) -> Tuple[str, str]:
    """Split '<LABEL> - <name>' into (label, name).

    When no label prefix matches the label is empty and the whole text is the
    instructor name.
    """
    raw = LEADING_DASH_RE.sub("", normalize_whitespace(text))
    match = CHAIR_LABEL_RE.match(raw)
    if not match:
        return "", raw
    return match.group(1), raw[match.end():].strip()


def parse_oblig(oblig: Optional[str]) -> List[SectionRequirement]:
    """Turn a practicum's prerequisite text ('IV - H') into requirement tokens.

    Roman numerals name a lecture (Teo) section, anything else a seminar.
    """
    if not oblig:
        return []
    requirements = []
    for token in OBLIG_SPLIT_RE.split(oblig):
        token = token.strip()
        if not token:
            continue
        tipo = "Teo" if ROMAN_RE.match(token) else "Sem"
        requirements.append(SectionRequirement(tipo=tipo, label=token))
    return requirements


def parse_list_page(html: str) -> List[ProgramListing]:
    """Extract chair stubs for every program tab found on the landing page"""
    soup = BeautifulSoup(html, 'html.parser')
    results = []

    for code, name, tab_id in PROGRAMS:
        tab = soup.find(id=tab_id)
        if tab is None:
            logger.debug(f"Program tab #{tab_id} not found, skipping {code}")
            continue

        entries = []
        for i, tr in enumerate(tab.select("table tr")):
            if i == 0:
                continue  # header
            tds = tr.find_all("td")
            if len(tds) < 4:
                continue

            chair_id = parse_int(normalize_whitespace(tds[0].get_text()))
            if chair_id is None:
                logger.debug(f"{code}: dropping row with unreadable chair id {tds[0].get_text()!r}")
                continue

            chair_label, docente = split_chair_label(tds[2].get_text(" "))
            entries.append(ChairStub(
                chair_id=chair_id,
                materia_name=normalize_whitespace(tds[1].get_text()),
                chair_label=chair_label,
                docente=docente,
            ))

        logger.debug(f"{code}: {len(entries)} chairs on list page")
        results.append(ProgramListing(program=code, program_name=name, entries=entries))

    return results


def parse_materia_header(soup: BeautifulSoup) -> Tuple[Optional[int], str]:
    """Find '( <code> - <name> )' in the page header.

    Returns (None, "") when no header cell carries the pattern.
    """
    candidates = soup.select("td.option1") or soup.find_all(["td", "th"])
    for cell in candidates:
        match = MATERIA_HEADER_RE.search(cell.get_text(" "))
        if match:
            return int(match.group(1)), normalize_whitespace(match.group(2))
    return None, ""


def has_seminar_table(soup: BeautifulSoup) -> bool:
    for th in soup.find_all("th"):
        if "seminarios" in normalize_whitespace(th.get_text()).lower():
            return True
    return False


def _cell_text(tds, idx: int) -> str:
    # seminar rows can be shorter than the other tables
    if idx >= len(tds):
        return ""
    return normalize_whitespace(tds[idx].get_text(" "))


def parse_meeting_rows(table, tipo: str) -> List[MeetingRow]:
    """Parse one meeting table into rows, skipping the header row"""
    if table is None:
        return []

    rows = []
    for i, tr in enumerate(table.find_all("tr")):
        if i == 0:
            continue
        tds = tr.find_all("td")
        if not tds:
            continue
        if len(tds) < MIN_DETAIL_CELLS and tipo != "Sem":
            continue

        aula_code = _cell_text(tds, 8)
        vac_raw = _cell_text(tds, 6)
        rows.append(MeetingRow(
            tipo=tipo,
            label=_cell_text(tds, 0),
            day_name=_cell_text(tds, 1).lower(),
            start=_cell_text(tds, 2),
            end=_cell_text(tds, 3),
            type_code=_cell_text(tds, 4),
            docente=_cell_text(tds, 5),
            vacantes=parse_int(vac_raw) if vac_raw else None,
            oblig=_cell_text(tds, 7) or None,
            aula_code=aula_code,
            sede_code=extract_sede_from_aula_code(aula_code),
            observ=_cell_text(tds, 9) or None,
        ))
    return rows


def parse_detail_page(html: str) -> DetailPage:
    """Extract the subject and the Teo/Sem/Prac meeting rows of one chair.

    Tables are, in order: lectures, seminars (only when some header mentions
    "seminarios") and practicums. The practicum table's position depends on
    whether the seminar table is present.
    """
    soup = BeautifulSoup(html, 'html.parser')
    materia_code, materia_name = parse_materia_header(soup)
    if materia_code is None:
        logger.debug("Detail page without a 'Materia ( code - name )' header")

    tables = soup.select("table.table_tabs")

    def table_at(idx: int):
        return tables[idx] if idx < len(tables) else None

    with_seminars = has_seminar_table(soup)
    prac_idx = 2 if with_seminars else 1

    return DetailPage(
        materia_code=materia_code,
        materia_name=materia_name,
        teos=parse_meeting_rows(table_at(0), "Teo"),
        sems=parse_meeting_rows(table_at(1), "Sem") if with_seminars else [],
        pracs=parse_meeting_rows(table_at(prac_idx), "Prac"),
    )
