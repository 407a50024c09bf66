"""Record normalization, ingestion, and the local snapshot store."""
from .schemas import MISSING, CanonicalRecord, Role, SnapshotFile, SyncAction, SyncResult
from .normalize import normalize_key, resolve, resolve_field, ExactAlias, SubstringHeuristic, TokenHeuristic
from .coerce import coerce_date, coerce_currency, parse_currency, format_currency
from .loader import ingest_file, ingest_rows, to_canonical_record, build_entry_record
from .backends import FileBackend, MemoryBackend
from .store import SnapshotStore
