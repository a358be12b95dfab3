"""
Static configuration for the Facultad de Psicología (UBA) course catalog
"""

BASE_URL = "http://academica.psi.uba.ar"
LIST_PAGE_PATH = "/Psi/Ope154_.php"
DETAIL_PAGE_PATH = "/Psi/Ver154_.php"

SOURCE_ENCODING = "ISO-8859-1"

DEFAULT_TERM = "2025-2"
DEFAULT_MAX_WORKERS = 4
DEFAULT_RATE_LIMIT = 10
DEFAULT_TIMEOUT = 15
DEFAULT_RETRY_ATTEMPTS = 2

# (code, display name, id of the tab container on the list page)
PROGRAMS = [
    ("PS", "Licenciatura en Psicología", "PS"),
    ("PR", "Profesorado en Psicología", "PR"),
    ("LM", "Licenciatura en Musicoterapia", "LM"),
    ("TE", "Licenciatura en Terapia Ocupacional", "TE"),
]

SEDES = [
    {"id": "HY", "name": "Hipólito Yrigoyen", "address": "Hipólito Yrigoyen 3242, CABA"},
    {"id": "IN", "name": "Independencia", "address": "Av. Independencia 3065, CABA"},
    {"id": "SI", "name": "San Isidro"},
    {"id": "AV", "name": "Avellaneda"},
    {"id": "EC", "name": "EC"},
]

HTTP_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'es-AR,es;q=0.9,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
}
