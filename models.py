"""
Record types for the catalog dataset.

Python attributes are snake_case; ``to_dict`` emits the camelCase field names
that downstream schedule tools read from the JSON files.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Any


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + "".join(part.capitalize() for part in rest)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camelize(v) for v in value]
    return value


class Record:
    """Mixin giving dataclasses a camelCase dict view"""

    def to_dict(self) -> Dict[str, Any]:
        return _camelize(asdict(self))


@dataclass
class Program(Record):
    code: str
    name: str


@dataclass
class Sede(Record):
    id: str
    name: str
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        # optional location fields are left out rather than written as null
        return {k: v for k, v in super().to_dict().items() if v is not None}


@dataclass
class Term(Record):
    id: str
    name: str
    updated_at: int


# Parsed page records

@dataclass
class ChairStub:
    """One row of a program's table on the list page"""
    chair_id: int
    materia_name: str = ""
    chair_label: str = ""
    docente: str = ""


@dataclass
class ProgramListing:
    program: str
    program_name: str
    entries: List[ChairStub] = field(default_factory=list)


@dataclass
class MeetingRow:
    """One weekly meeting row from a chair's detail tables"""
    tipo: str
    label: str = ""
    day_name: str = ""
    start: str = ""
    end: str = ""
    type_code: str = ""
    docente: str = ""
    vacantes: Optional[int] = None
    oblig: Optional[str] = None
    aula_code: str = ""
    sede_code: str = ""
    observ: Optional[str] = None


@dataclass
class DetailPage:
    """Everything read from one chair's detail page"""
    materia_code: Optional[int] = None
    materia_name: str = ""
    teos: List[MeetingRow] = field(default_factory=list)
    sems: List[MeetingRow] = field(default_factory=list)
    pracs: List[MeetingRow] = field(default_factory=list)

    def rows_by_type(self) -> List[tuple]:
        return [("Teo", self.teos), ("Sem", self.sems), ("Prac", self.pracs)]


# Dataset entities

@dataclass
class Materia(Record):
    id: str
    program: str
    program_name: str
    materia_code: Optional[int]
    materia_name: str
    search_name: str


@dataclass
class Catedra(Record):
    id: str
    program: str
    program_name: str
    chair_id: int
    chair_label: str
    docente_titular: str
    materia_id: str
    materia_code: Optional[int]
    materia_name: str


@dataclass
class SectionRequirement(Record):
    tipo: str
    label: str


@dataclass
class Section(Record):
    id: str
    term_id: str
    program: str
    program_name: str
    chair_id: int
    materia_id: str
    materia_code: Optional[int]
    materia_name: str
    tipo: str
    section_label: str
    docentes: List[str] = field(default_factory=list)
    vacantes: Optional[int] = None
    oblig: Optional[str] = None
    requires: List[SectionRequirement] = field(default_factory=list)
    sedes: List[str] = field(default_factory=list)
    aulas: List[str] = field(default_factory=list)
    meets_count: int = 0
    updated_at: int = 0


@dataclass
class Meet(Record):
    id: str
    section_id: str
    term_id: str
    program: str
    chair_id: int
    tipo: str
    section_label: str
    day_name: str
    day_num: int
    start: str
    end: str
    start_min: int
    end_min: int
    aula_code: str
    sede_code: str
    observ: Optional[str] = None


@dataclass
class CatalogIndexes:
    """Append-only multimaps from a composite key to entity ids"""
    by_program: Dict[str, List[str]] = field(default_factory=dict)
    by_catedra: Dict[str, List[str]] = field(default_factory=dict)
    by_materia: Dict[str, List[str]] = field(default_factory=dict)
    by_day_sede: Dict[str, List[str]] = field(default_factory=dict)
    by_section_id: Dict[str, List[str]] = field(default_factory=dict)

    def as_named_outputs(self) -> Dict[str, Dict[str, List[str]]]:
        return {
            'byProgram': self.by_program,
            'byCatedra': self.by_catedra,
            'byMateria': self.by_materia,
            'byDaySede': self.by_day_sede,
            'bySectionId': self.by_section_id,
        }


@dataclass
class CatalogDataset:
    """The full output of one term run"""
    term: Term
    programs: List[Program]
    sedes: List[Sede]
    materias: List[Materia]
    catedras: List[Catedra]
    sections: List[Section]
    meets: List[Meet]
    indexes: CatalogIndexes
