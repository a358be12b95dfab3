#!/usr/bin/env python3
"""
Tests for the text utilities and the list/detail page parsers
"""

import os
import sys
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bs4 import BeautifulSoup

from models import SectionRequirement
from parsers import (
    has_seminar_table,
    parse_detail_page,
    parse_list_page,
    parse_materia_header,
    parse_oblig,
    split_chair_label,
)
from sample_pages import DETAIL_34, DETAIL_35, DETAIL_50, LIST_PAGE, detail_page, list_page, row
from utils import (
    build_materia_id,
    build_section_id,
    day_name_to_num,
    decode_iso88591,
    extract_sede_from_aula_code,
    normalize_whitespace,
    parse_int,
    parse_time_to_minutes,
    term_display_name,
    to_search,
)


class TestTextUtils(unittest.TestCase):
    """Test the normalization helpers"""

    def test_normalize_whitespace(self):
        self.assertEqual(normalize_whitespace("  Juan \n\t Pérez  "), "Juan Pérez")
        self.assertEqual(normalize_whitespace(" I"), "I")
        self.assertEqual(normalize_whitespace(""), "")
        self.assertEqual(normalize_whitespace(None), "")

    def test_to_search_folds_accents_and_case(self):
        self.assertEqual(to_search("Psicología Social"), "psicologia social")
        self.assertEqual(to_search("MIÉRCOLES"), "miercoles")
        self.assertEqual(to_search("Ñandú"), "nandu")

    def test_parse_time_to_minutes(self):
        self.assertEqual(parse_time_to_minutes("00:00"), 0)
        self.assertEqual(parse_time_to_minutes("09:30"), 570)
        self.assertEqual(parse_time_to_minutes("8:30"), 510)
        self.assertEqual(parse_time_to_minutes("23:59"), 1439)

    def test_parse_time_malformed_defaults_to_midnight(self):
        for text in ["", None, "abc", ":30", "a9:00"]:
            self.assertEqual(parse_time_to_minutes(text), 0)

    def test_parse_time_is_monotonic(self):
        times = [f"{h:02d}:{m:02d}" for h in range(24) for m in range(0, 60, 7)]
        minutes = [parse_time_to_minutes(t) for t in times]
        self.assertEqual(minutes, sorted(minutes))
        self.assertEqual(len(set(minutes)), len(minutes))

    def test_day_name_to_num(self):
        self.assertEqual(day_name_to_num("lunes"), 1)
        self.assertEqual(day_name_to_num("Martes"), 2)
        self.assertEqual(day_name_to_num("miercoles"), 3)
        self.assertEqual(day_name_to_num("miércoles"), 3)
        self.assertEqual(day_name_to_num(" jueves "), 4)
        self.assertEqual(day_name_to_num("viernes"), 5)
        self.assertEqual(day_name_to_num("sábado"), 6)
        self.assertEqual(day_name_to_num("domingo"), 0)
        self.assertEqual(day_name_to_num(""), 0)

    def test_extract_sede_from_aula_code(self):
        self.assertEqual(extract_sede_from_aula_code("HY-014"), "HY")
        self.assertEqual(extract_sede_from_aula_code("AnexoSI"), "AnexoSI")
        self.assertEqual(extract_sede_from_aula_code("hy-014"), "hy-014")
        self.assertEqual(extract_sede_from_aula_code("HYX-1"), "HYX-1")
        self.assertEqual(extract_sede_from_aula_code(""), "")

    def test_parse_int(self):
        self.assertEqual(parse_int("34"), 34)
        self.assertEqual(parse_int(" 12 "), 12)
        self.assertEqual(parse_int("30 vac."), 30)
        self.assertIsNone(parse_int("abc"))
        self.assertIsNone(parse_int(""))

    def test_identifier_builders(self):
        self.assertEqual(build_section_id("2025-2", "PS", 34, "Prac", "1"), "2025-2_PS_34_Prac_1")
        self.assertEqual(build_materia_id("PS", 7), "PS-0007")
        self.assertEqual(build_materia_id("LM", 12345), "LM-12345")
        self.assertEqual(build_materia_id("PS", None), "PS-0NaN")

    def test_term_display_name(self):
        self.assertEqual(term_display_name("2025-2"), "2025 / 2")
        self.assertEqual(term_display_name("verano"), "verano")

    def test_decode_iso88591(self):
        self.assertEqual(decode_iso88591("Psicología".encode("iso-8859-1")), "Psicología")


class TestFreeTextMatchers(unittest.TestCase):
    """Test label splitting and prerequisite parsing"""

    def test_split_roman_label(self):
        self.assertEqual(split_chair_label("I - Juan Pérez"), ("I", "Juan Pérez"))
        self.assertEqual(split_chair_label("XIV- Juan Pérez"), ("XIV", "Juan Pérez"))

    def test_split_letter_label(self):
        self.assertEqual(split_chair_label("A - María López"), ("A", "María López"))

    def test_split_without_label(self):
        self.assertEqual(split_chair_label("Prof. Ana Gómez"), ("", "Prof. Ana Gómez"))
        self.assertEqual(split_chair_label("Dr. Ruiz"), ("", "Dr. Ruiz"))
        self.assertEqual(split_chair_label(""), ("", ""))

    def test_split_strips_leading_dash(self):
        self.assertEqual(split_chair_label("– Juan Pérez"), ("", "Juan Pérez"))

    def test_parse_oblig_roman_and_letter(self):
        self.assertEqual(
            parse_oblig("IV - H"),
            [SectionRequirement(tipo="Teo", label="IV"), SectionRequirement(tipo="Sem", label="H")],
        )

    def test_parse_oblig_empty(self):
        self.assertEqual(parse_oblig(None), [])
        self.assertEqual(parse_oblig(""), [])
        self.assertEqual(parse_oblig(" - "), [])

    def test_parse_oblig_single_token(self):
        self.assertEqual(parse_oblig("II"), [SectionRequirement(tipo="Teo", label="II")])
        self.assertEqual(parse_oblig("B"), [SectionRequirement(tipo="Sem", label="B")])


class TestListParser(unittest.TestCase):
    """Test list page parsing"""

    def setUp(self):
        self.listings = parse_list_page(LIST_PAGE)

    def test_only_present_programs_are_returned(self):
        self.assertEqual([l.program for l in self.listings], ["PS", "PR"])
        self.assertEqual(self.listings[0].program_name, "Licenciatura en Psicología")

    def test_chair_stub_with_label(self):
        stub = self.listings[0].entries[0]
        self.assertEqual(stub.chair_id, 34)
        self.assertEqual(stub.materia_name, "Historia de la Psicología")
        self.assertEqual(stub.chair_label, "I")
        self.assertEqual(stub.docente, "Juan Pérez")

    def test_malformed_and_short_rows_are_dropped(self):
        ids = [e.chair_id for e in self.listings[0].entries]
        self.assertEqual(ids, [34, 35])

    def test_unlabelled_instructor(self):
        stub = self.listings[0].entries[1]
        self.assertEqual(stub.chair_label, "")
        self.assertEqual(stub.docente, "Prof. Ana Gómez")

    def test_letter_label(self):
        stub = self.listings[1].entries[0]
        self.assertEqual((stub.chair_id, stub.chair_label, stub.docente), (50, "A", "María López"))

    def test_empty_page(self):
        self.assertEqual(parse_list_page("<html></html>"), [])

    def test_tab_without_table(self):
        listings = parse_list_page('<div id="TE"><p>Sin oferta</p></div>')
        self.assertEqual(len(listings), 1)
        self.assertEqual(listings[0].entries, [])


class TestDetailParser(unittest.TestCase):
    """Test chair detail page parsing"""

    def test_materia_header(self):
        soup = BeautifulSoup('<td class="option1">Materia ( 7 - Psicología Social )</td>', 'html.parser')
        self.assertEqual(parse_materia_header(soup), (7, "Psicología Social"))

    def test_missing_materia_header(self):
        detail = parse_detail_page(DETAIL_50)
        self.assertIsNone(detail.materia_code)
        self.assertEqual(detail.materia_name, "")

    def test_seminar_table_detected(self):
        detail = parse_detail_page(DETAIL_34)
        self.assertEqual(detail.materia_code, 1)
        self.assertEqual(detail.materia_name, "Historia de la Psicología")
        self.assertEqual(len(detail.teos), 3)
        self.assertEqual(len(detail.sems), 1)
        self.assertEqual(len(detail.pracs), 3)

    def test_practicum_read_from_second_table_without_seminars(self):
        detail = parse_detail_page(DETAIL_35)
        self.assertFalse(has_seminar_table(BeautifulSoup(DETAIL_35, 'html.parser')))
        self.assertEqual(detail.sems, [])
        self.assertEqual([r.label for r in detail.pracs], ["5"])
        self.assertEqual(detail.pracs[0].oblig, "I")

    def test_short_rows_kept_only_for_seminars(self):
        detail = parse_detail_page(DETAIL_34)
        sem = detail.sems[0]
        self.assertEqual(sem.tipo, "Sem")
        self.assertEqual(sem.label, "A")
        self.assertEqual(sem.docente, "Laura Díaz")
        self.assertIsNone(sem.vacantes)
        self.assertIsNone(sem.oblig)
        self.assertEqual(sem.aula_code, "")
        self.assertIsNone(sem.observ)

    def test_row_fields(self):
        detail = parse_detail_page(DETAIL_34)
        prac = detail.pracs[0]
        self.assertEqual(prac.label, "1")
        self.assertEqual(prac.day_name, "martes")
        self.assertEqual((prac.start, prac.end), ("14:00", "16:00"))
        self.assertEqual(prac.vacantes, 30)
        self.assertEqual(prac.oblig, "IV - H")
        self.assertEqual(prac.aula_code, "IN-201")
        self.assertEqual(prac.sede_code, "IN")

        second = detail.pracs[1]
        self.assertIsNone(second.vacantes)
        self.assertIsNone(second.oblig)
        self.assertEqual(second.sede_code, "AnexoSI")
        self.assertEqual(second.observ, "Quincenal")

    def test_day_name_is_lower_cased(self):
        detail = parse_detail_page(DETAIL_34)
        self.assertEqual([r.day_name for r in detail.teos], ["lunes", "miércoles", "sábado"])

    def test_unparseable_vacancy_is_null(self):
        detail = parse_detail_page(DETAIL_50)
        self.assertIsNone(detail.teos[0].vacantes)

    def test_missing_tables(self):
        html = detail_page("Materia ( 3 - Ética )", teos=[], pracs=[])
        detail = parse_detail_page(html)
        self.assertEqual((detail.teos, detail.sems, detail.pracs), ([], [], []))

        detail = parse_detail_page("<html><body>Sin datos</body></html>")
        self.assertIsNone(detail.materia_code)
        self.assertEqual((detail.teos, detail.sems, detail.pracs), ([], [], []))

    def test_only_lecture_table_present(self):
        html = (
            '<table><tr><td class="option1">Materia ( 3 - Ética )</td></tr></table>'
            '<table class="table_tabs"><tr><th>Teóricos</th></tr>'
            + "<tr>" + "".join(f"<td>{c}</td>" for c in row("I", "lunes", "10:00", "12:00")) + "</tr>"
            + "</table>"
        )
        detail = parse_detail_page(html)
        self.assertEqual(len(detail.teos), 1)
        self.assertEqual(detail.pracs, [])

    def test_list_page_builder_header_is_skipped(self):
        html = list_page({"LM": [("7", "Musicoterapia I", "II - Rosa Paz", "Ver")]})
        listing = parse_list_page(html)[0]
        self.assertEqual(listing.program, "LM")
        self.assertEqual(len(listing.entries), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
