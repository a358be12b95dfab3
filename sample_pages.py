"""
Small HTML pages shaped like the catalog site, used by the test modules
"""


def list_page(tabs):
    """tabs: {tab_id: [(cell0, cell1, cell2, cell3), ...]}"""
    parts = ["<html><body>"]
    for tab_id, rows in tabs.items():
        parts.append(f'<div id="{tab_id}"><table>')
        parts.append("<tr><th>Cátedra</th><th>Materia</th><th>Profesor</th><th>Ver</th></tr>")
        for row in rows:
            parts.append("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>")
        parts.append("</table></div>")
    parts.append("</body></html>")
    return "".join(parts)


def meeting_table(title, rows):
    parts = ['<table class="table_tabs">', f"<tr><th>{title}</th><th>Día</th><th>Inicio</th></tr>"]
    for row in rows:
        parts.append("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>")
    parts.append("</table>")
    return "".join(parts)


def detail_page(header, teos, pracs, sems=None):
    """Build a detail page; the seminar table is only emitted when ``sems`` is given"""
    parts = ["<html><body><table>"]
    if header is not None:
        parts.append(f'<tr><td class="option1">{header}</td></tr>')
    parts.append("</table>")
    parts.append(meeting_table("Teóricos", teos))
    if sems is not None:
        parts.append(meeting_table("Seminarios", sems))
    parts.append(meeting_table("Comisiones", pracs))
    parts.append("</body></html>")
    return "".join(parts)


def row(label, day, start, end, docente="", vac="", oblig="", aula="", observ="", type_code="T"):
    return (label, day, start, end, type_code, docente, vac, oblig, aula, observ)


LIST_PAGE = list_page({
    "PS": [
        ("34", "Historia de la Psicología", "I - Juan Pérez", "Ver"),
        ("abc", "Fila rota", "II - Nadie", "Ver"),
        ("35", "Psicología Social", "Prof. Ana Gómez", "Ver"),
        ("99", "Fila corta"),
    ],
    "PR": [
        ("50", "Didáctica General", "A - María López", "Ver"),
    ],
})

DETAIL_34 = detail_page(
    "Materia ( 1 - Historia de la Psicología )",
    teos=[
        row("I", "Lunes", "09:00", "11:00", docente="Juan Pérez", aula="HY-014"),
        row("I", "Miércoles", "09:00", "11:00", docente="Juan Pérez", aula="HY-014"),
        row("II", "Sábado", "10:00", "12:00", docente="Carla Ruiz", aula="SI-002"),
    ],
    sems=[
        ("A", "martes", "18:00", "20:00", "S", "Laura Díaz"),
    ],
    pracs=[
        row("1", "martes", "14:00", "16:00", docente="Pedro Sosa", vac="30", oblig="IV - H", aula="IN-201"),
        row("1", "jueves", "14:00", "16:00", docente="Pedro Sosa", vac="", aula="AnexoSI", observ="Quincenal"),
        row("2", "viernes", "", "", docente="", vac="", aula=""),
    ],
)

DETAIL_35 = detail_page(
    "Materia ( 7 - Psicología Social )",
    teos=[
        row("I", "lunes", "19:00", "21:00", docente="Ana Gómez", aula="HY-101"),
    ],
    pracs=[
        row("5", "martes", "08:00", "10:00", docente="Luis Vera", vac="25", oblig="I", aula="HY-102"),
        ("6", "martes", "08:00"),
    ],
)

DETAIL_50 = detail_page(
    None,
    teos=[
        row("A", "domingo", "8:30", "10:00", docente="María López", vac="x", aula="AV-001"),
    ],
    pracs=[],
)

DETAILS = {34: DETAIL_34, 35: DETAIL_35, 50: DETAIL_50}
