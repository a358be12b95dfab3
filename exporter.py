"""
Dataset emitter: deterministic ordering plus the JSON/CSV writers.
"""

import json
import logging
import shutil
import uuid
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from models import CatalogDataset, Materia, Meet, Section
from utils import to_search

logger = logging.getLogger(__name__)

INDEX_DIR = "indexes"


def sort_materias(materias: List[Materia]) -> List[Materia]:
    """Order subjects by display name, ignoring case and accents"""
    return sorted(materias, key=lambda m: (to_search(m.materia_name), m.materia_name, m.id))


def sort_sections(sections: List[Section]) -> List[Section]:
    return sorted(sections, key=lambda s: s.id)


def sort_meets(meets: List[Meet]) -> List[Meet]:
    return sorted(meets, key=lambda m: (m.day_num, m.start_min, m.id))


def sort_dataset(dataset: CatalogDataset) -> CatalogDataset:
    dataset.materias = sort_materias(dataset.materias)
    dataset.sections = sort_sections(dataset.sections)
    dataset.meets = sort_meets(dataset.meets)
    return dataset


def dataset_documents(dataset: CatalogDataset) -> Dict[str, Any]:
    """Every output document keyed by its relative path"""
    docs: Dict[str, Any] = {
        'term.json': dataset.term.to_dict(),
        'programs.json': [p.to_dict() for p in dataset.programs],
        'sedes.json': [s.to_dict() for s in dataset.sedes],
        'materias.json': [m.to_dict() for m in dataset.materias],
        'catedras.json': [c.to_dict() for c in dataset.catedras],
        'sections.json': [s.to_dict() for s in dataset.sections],
        'meets.json': [m.to_dict() for m in dataset.meets],
    }
    for name, index in dataset.indexes.as_named_outputs().items():
        docs[f"{INDEX_DIR}/{name}.json"] = index
    return docs


def meets_frame(dataset: CatalogDataset) -> pd.DataFrame:
    """One row per meet, joined with its section's subject and instructors"""
    sections = {s.id: s for s in dataset.sections}
    rows = []
    for meet in dataset.meets:
        section = sections.get(meet.section_id)
        row = meet.to_dict()
        row['materiaName'] = section.materia_name if section else ""
        row['docentes'] = '; '.join(section.docentes) if section else ""
        row['vacantes'] = section.vacantes if section else None
        rows.append(row)
    return pd.DataFrame(rows)


def _sibling(target: Path, tag: str) -> Path:
    return target.parent / f".{target.name}-{tag}-{uuid.uuid4().hex[:8]}"


def save_dataset(dataset: CatalogDataset, output_dir: str, write_csv: bool = False) -> Path:
    """Write the sorted dataset under ``output_dir``.

    Files go to a staging sibling directory first and replace ``output_dir``
    only once all of them are written. A previous dataset is moved aside and
    restored if the swap fails.
    """
    target = Path(output_dir)
    target.parent.mkdir(parents=True, exist_ok=True)
    # plain mkdir so the published directory follows the umask
    staging = _sibling(target, "new")
    staging.mkdir()

    try:
        (staging / INDEX_DIR).mkdir()
        for rel_path, doc in dataset_documents(dataset).items():
            with open(staging / rel_path, 'w', encoding='utf-8') as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)

        if write_csv:
            meets_frame(dataset).to_csv(staging / 'meets.csv', index=False)

        previous = None
        if target.exists():
            previous = _sibling(target, "old")
            target.rename(previous)
        try:
            staging.rename(target)
        except OSError:
            if previous is not None:
                previous.rename(target)
            raise
    except Exception:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    if previous is not None:
        shutil.rmtree(previous, ignore_errors=True)

    logger.info(f"💾 Wrote {len(dataset.sections)} sections and {len(dataset.meets)} meets to {target}")
    return target
