"""
Builds subjects, chairs, sections and meets out of parsed detail pages and
accumulates the lookup indexes over them.
"""

import logging
from collections import OrderedDict
from threading import Lock
from typing import Dict, Iterable, List, Optional

from models import (
    Catedra, CatalogIndexes, ChairStub, DetailPage, Materia, Meet, MeetingRow, Section,
)
from parsers import parse_oblig
from utils import (
    build_catedra_key, build_materia_id, build_meet_id, build_section_id,
    day_name_to_num, parse_time_to_minutes, to_search,
)

logger = logging.getLogger(__name__)


class IdentifierCollisionError(Exception):
    """Two source rows produced the same entity id within one run"""


def _unique(values: Iterable[str]) -> List[str]:
    """Non-empty values de-duplicated in order of first occurrence"""
    return list(OrderedDict.fromkeys(v for v in values if v))


def group_rows_by_label(rows: List[MeetingRow]) -> Dict[str, List[MeetingRow]]:
    groups: Dict[str, List[MeetingRow]] = OrderedDict()
    for row in rows:
        groups.setdefault(row.label, []).append(row)
    return groups


class CatalogAggregator:
    """Accumulates the entity graph for one term run.

    Every public mutation happens under ``data_lock`` so chairs can be added
    from worker threads as well as from the coordinating thread.
    """

    def __init__(self, term_id: str, updated_at: int):
        self.term_id = term_id
        self.updated_at = updated_at

        self.materias: Dict[str, Materia] = {}
        self.catedras: List[Catedra] = []
        self.sections: List[Section] = []
        self.meets: List[Meet] = []
        self.indexes = CatalogIndexes()

        self._catedra_keys = set()
        self._section_ids = set()
        self.data_lock = Lock()

        self.stats = {
            'chairs': 0,
            'missing_materia_header': 0,
        }

    def register_program(self, program: str):
        """Make sure a program has an index entry even if it has no sections"""
        with self.data_lock:
            self.indexes.by_program.setdefault(program, [])

    def add_chair(self, program: str, program_name: str, stub: ChairStub, detail: DetailPage):
        """Merge one chair's parsed detail page into the dataset"""
        with self.data_lock:
            catedra_key = build_catedra_key(program, stub.chair_id)
            if catedra_key in self._catedra_keys:
                raise IdentifierCollisionError(f"Chair {catedra_key} listed more than once")
            self._catedra_keys.add(catedra_key)

            if detail.materia_code is None:
                self.stats['missing_materia_header'] += 1
                logger.warning(f"⚠️ {catedra_key}: no subject header on detail page")

            materia = self._resolve_materia(program, program_name, detail)

            self.catedras.append(Catedra(
                id=catedra_key,
                program=program,
                program_name=program_name,
                chair_id=stub.chair_id,
                chair_label=stub.chair_label or "",
                docente_titular=stub.docente,
                materia_id=materia.id,
                materia_code=detail.materia_code,
                materia_name=detail.materia_name,
            ))

            for tipo, rows in detail.rows_by_type():
                self._add_sections(program, program_name, stub.chair_id, materia, detail, tipo, rows)

            self.stats['chairs'] += 1

    def _resolve_materia(self, program: str, program_name: str, detail: DetailPage) -> Materia:
        materia_id = build_materia_id(program, detail.materia_code)
        materia = self.materias.get(materia_id)
        if materia is None:
            materia = Materia(
                id=materia_id,
                program=program,
                program_name=program_name,
                materia_code=detail.materia_code,
                materia_name=detail.materia_name,
                search_name=to_search(detail.materia_name),
            )
            self.materias[materia_id] = materia
        return materia

    def _add_sections(self, program: str, program_name: str, chair_id: int, materia: Materia,
                      detail: DetailPage, tipo: str, rows: List[MeetingRow]):
        catedra_key = build_catedra_key(program, chair_id)

        for label, items in group_rows_by_label(rows).items():
            section_id = build_section_id(self.term_id, program, chair_id, tipo, label)
            if section_id in self._section_ids:
                raise IdentifierCollisionError(f"Section id {section_id} produced twice")
            self._section_ids.add(section_id)

            oblig: Optional[str] = None
            if tipo == "Prac":
                oblig = next((r.oblig for r in items if r.oblig), None)

            section = Section(
                id=section_id,
                term_id=self.term_id,
                program=program,
                program_name=program_name,
                chair_id=chair_id,
                materia_id=materia.id,
                materia_code=detail.materia_code,
                materia_name=detail.materia_name,
                tipo=tipo,
                section_label=label,
                docentes=_unique(r.docente for r in items),
                vacantes=next((r.vacantes for r in items if r.vacantes is not None), None),
                oblig=oblig,
                requires=parse_oblig(oblig) if tipo == "Prac" else [],
                sedes=_unique(r.sede_code for r in items),
                aulas=_unique(r.aula_code for r in items),
                meets_count=len(items),
                updated_at=self.updated_at,
            )
            self.sections.append(section)

            self.indexes.by_program.setdefault(program, []).append(section_id)
            self.indexes.by_catedra.setdefault(catedra_key, []).append(section_id)
            self.indexes.by_materia.setdefault(materia.id, []).append(section_id)

            for seq, row in enumerate(items, start=1):
                self._add_meet(section, seq, row)

    def _add_meet(self, section: Section, seq: int, row: MeetingRow):
        meet_id = build_meet_id(section.id, seq)
        self.meets.append(Meet(
            id=meet_id,
            section_id=section.id,
            term_id=self.term_id,
            program=section.program,
            chair_id=section.chair_id,
            tipo=section.tipo,
            section_label=section.section_label,
            day_name=row.day_name,
            day_num=day_name_to_num(row.day_name),
            start=row.start,
            end=row.end,
            start_min=parse_time_to_minutes(row.start or "00:00"),
            end_min=parse_time_to_minutes(row.end or "00:00"),
            aula_code=row.aula_code,
            sede_code=row.sede_code,
            observ=row.observ,
        ))
        self.indexes.by_section_id.setdefault(section.id, []).append(meet_id)
        self.indexes.by_day_sede.setdefault(f"{row.day_name}|{row.sede_code}", []).append(meet_id)
