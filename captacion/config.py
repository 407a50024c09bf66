"""
CLC Captación — Configuration: paths, alias sets, business constants, remotes.
"""
import os
from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with CAPTACION_DATA_DIR env var for other devices
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("CAPTACION_DATA_DIR", str(Path.home() / "CLC Captacion")))
BASE_FOLDER = _data_dir
STORE_FILE = _data_dir / "base_maestra.json"
EXPORTS_FOLDER = _data_dir / "exports"
REPORTS_FOLDER = _data_dir / "reports"

# ---------------------------------------------------------------------------
# Alias sets: logical field → acceptable raw header names (first match wins)
# ---------------------------------------------------------------------------
FIELD_ALIASES = {
    "date": ("fecha_de_carga", "fecha", "dia"),
    "category": ("rubro", "categoria", "interes"),
    "client_id": ("ci_cliente", "ci", "documento", "cedula"),
    "client_name": ("nombre", "contacto", "cliente", "nombre_cliente", "razon_social"),
    "agent": ("agente", "asesor", "vendedor", "operador"),
    "phone": ("telefono", "celular", "tel", "whatsapp"),
    "notes": ("observaciones", "observacion", "obs", "comentarios"),
    "diligence": ("estado_diligencia", "diligenciado"),
    "diligence_date": ("fecha_diligencia", "fecha_de_diligencia"),
    "quotas": ("cuotas", "cantidad_cuotas", "plan"),
    "amount": ("monto", "importe", "salario", "ingreso"),
}

# Fallbacks tried only after every alias of the field missed.
# ("substring", p) matches lower-cased header text containing p;
# ("token", t) matches a header whose normalized token equals t.
FIELD_HEURISTICS = {
    "notes": (("substring", "observ"), ("substring", "obs")),
    "diligence": (("token", "diligencia"),),
}

# Upper-cased on ingestion
CATEGORICAL_FIELDS = {"category", "agent", "diligence"}

MISSING_PLACEHOLDER = "N/A"

# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------
# Serial day 25569 is 1970-01-01 (spreadsheet day counts)
SERIAL_EPOCH_OFFSET = 25569
SERIAL_MAX_DAY = 2958465          # 9999-12-31

CURRENCY_PREFIX = "Gs. "
THOUSANDS_SEPARATOR = "."

SPREADSHEET_EXTENSIONS = {".xlsx", ".xlsm"}
TEXT_TABLE_EXTENSIONS = {".csv"}

# ---------------------------------------------------------------------------
# Installment plans (quota count → monthly / total, in Guaraníes)
# ---------------------------------------------------------------------------
INSTALLMENT_PLANS = {
    "1": (3_000_000, 3_000_000),
    "2": (1_560_000, 3_120_000),
    "3": (1_085_000, 3_255_000),
    "4": (850_000, 3_400_000),
    "5": (710_000, 3_550_000),
    "6": (615_000, 3_690_000),
}

# Diligences on or after this day are collected the following month
COLLECTION_CUTOFF_DAY = 6
# Collections are never booked past this day of the month
COLLECTION_MAX_DAY = 30

# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------
SNAPSHOT_PREFIX = "BASE_MAESTRA_"

# ---------------------------------------------------------------------------
# Remote collaborators
# ---------------------------------------------------------------------------
RELATIONAL_DEFAULT_TABLE = "clientes"
REMOTE_TIMEOUT_SECONDS = 20
DELIVERY_POLICIES = ("strict", "optimistic")


@dataclass(frozen=True)
class RemoteSettings:
    """Remote endpoints, read from the environment at call time."""
    sheets_url: str | None
    relational_url: str | None
    relational_key: str | None
    relational_table: str
    delivery_policy: str
    timeout: float


def get_remote_settings() -> RemoteSettings:
    policy = os.environ.get("CAPTACION_DELIVERY_POLICY", "strict").strip().lower()
    if policy not in DELIVERY_POLICIES:
        policy = "strict"
    return RemoteSettings(
        sheets_url=os.environ.get("CAPTACION_SHEETS_URL") or None,
        relational_url=os.environ.get("CAPTACION_RELATIONAL_URL") or None,
        relational_key=os.environ.get("CAPTACION_RELATIONAL_KEY") or None,
        relational_table=os.environ.get("CAPTACION_RELATIONAL_TABLE", RELATIONAL_DEFAULT_TABLE),
        delivery_policy=policy,
        timeout=float(os.environ.get("CAPTACION_REMOTE_TIMEOUT", REMOTE_TIMEOUT_SECONDS)),
    )
