"""
Building blocks for bulk uploads: column specs, parsed rows, the batch
reference resolver, per-upload context and the strategy base class.

Fields are split on plain commas; quoted fields are not supported.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from sfa.schemas.auth import UserSession
from sfa.utils.text_cleaner import normalize_header, normalize_lookup_key

logger = logging.getLogger(__name__)

LOOKUP_CHUNK_SIZE = 500


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    required: bool = False
    aliases: Tuple[str, ...] = ()


@dataclass
class ParsedRow:
    line_no: int
    values: Dict[str, Optional[str]]

    def get(self, name: str) -> Optional[str]:
        return self.values.get(name)


class UnresolvedReference(Exception):
    def __init__(self, label: str, name: str, matches: int = 0):
        if matches > 1:
            message = f"{label} '{name}' is ambiguous ({matches} matches)"
        else:
            message = f"{label} '{name}' not found"
        super().__init__(message)
        self.label = label
        self.name = name
        self.matches = matches


class ReferenceResolver:
    """
    Batch lookup of master-data names.

    Strategies register the names they need with ``want``; ``load`` then runs
    one query per reference kind and ``resolve`` answers from memory.
    Matching is exact after trimming and lower-casing both sides. The query
    side uses the database ``lower()``; on SQLite that is replaced with a
    Unicode-aware one in ``sfa.core.database``.
    """

    def __init__(self, kinds: Dict[str, Tuple[str, Any, Any]]):
        # kind -> (label, id column, name column)
        self.kinds = kinds
        self._wanted: Dict[str, Set[str]] = {kind: set() for kind in kinds}
        self._found: Dict[str, Dict[str, List[int]]] = {kind: {} for kind in kinds}

    def want(self, kind: str, name: Optional[str]) -> None:
        key = normalize_lookup_key(name)
        if key:
            self._wanted[kind].add(key)

    def load(self, db: Session) -> None:
        for kind, keys in self._wanted.items():
            if not keys:
                continue
            _, id_col, name_col = self.kinds[kind]
            found = self._found[kind]
            ordered = sorted(keys)
            for start in range(0, len(ordered), LOOKUP_CHUNK_SIZE):
                chunk = ordered[start:start + LOOKUP_CHUNK_SIZE]
                rows = (
                    db.query(id_col, func.lower(name_col))
                    .filter(func.lower(name_col).in_(chunk))
                    .order_by(id_col)
                    .all()
                )
                for record_id, name in rows:
                    found.setdefault(normalize_lookup_key(name), []).append(record_id)
            logger.debug("Resolved %s of %s %s names", len(found), len(keys), kind)

    def resolve(self, kind: str, name: Optional[str]) -> int:
        label = self.kinds[kind][0]
        ids = self._found[kind].get(normalize_lookup_key(name), [])
        if len(ids) != 1:
            raise UnresolvedReference(label, (name or "").strip(), len(ids))
        return ids[0]

    def lookup(self, kind: str, name: Optional[str]) -> Optional[int]:
        """Like ``resolve`` but returns None instead of raising."""
        try:
            return self.resolve(kind, name)
        except UnresolvedReference:
            return None

    def resolved_ids(self, kind: str) -> Set[int]:
        return {ids[0] for ids in self._found[kind].values() if len(ids) == 1}


@dataclass
class UploadContext:
    session: UserSession
    reference_no: str
    resolver: ReferenceResolver
    errors: Dict[int, str] = field(default_factory=dict)

    def fail(self, row: ParsedRow, message: str) -> None:
        """Record a row failure; only the first message per line is kept."""
        self.errors.setdefault(row.line_no, f"Line {row.line_no}: {message}")

    def fail_all(self, rows: Iterable[ParsedRow], message: str) -> None:
        for row in rows:
            self.fail(row, message)

    def has_failed(self, row: ParsedRow) -> bool:
        return row.line_no in self.errors

    def error_list(self) -> List[str]:
        return [self.errors[line_no] for line_no in sorted(self.errors)]


class UploadStrategy:
    """
    Per-upload-type behaviour plugged into the engine.

    ``build_header`` returns the record to insert (or None when the group
    failed); ``build_lines`` attaches child lines for document uploads.
    """

    upload_type: str = ""
    columns: Sequence[ColumnSpec] = ()
    named_columns: bool = False
    # kind -> (label, id column, name column)
    reference_kinds: Dict[str, Tuple[str, Any, Any]] = {}
    has_lines: bool = False

    def resolve_references(self, resolver: ReferenceResolver, rows: List[ParsedRow]) -> None:
        pass

    def prepare(self, db: Session, rows: List[ParsedRow], ctx: UploadContext) -> None:
        pass

    def group_rows(self, rows: List[ParsedRow]) -> List[List[ParsedRow]]:
        return [[row] for row in rows]

    def build_header(self, group: List[ParsedRow], ctx: UploadContext):
        raise NotImplementedError

    def build_lines(self, header, group: List[ParsedRow], ctx: UploadContext) -> list:
        return []


def _column_index(header_fields: List[str], strategy: UploadStrategy) -> Dict[str, int]:
    if not strategy.named_columns:
        return {spec.name: idx for idx, spec in enumerate(strategy.columns)}

    aliases: Dict[str, str] = {}
    for spec in strategy.columns:
        aliases[spec.name] = spec.name
        for alias in spec.aliases:
            aliases[alias] = spec.name

    col_map: Dict[str, int] = {}
    for idx, header in enumerate(header_fields):
        target = aliases.get(normalize_header(header))
        if target and target not in col_map:
            col_map[target] = idx

    missing = [spec.name for spec in strategy.columns if spec.required and spec.name not in col_map]
    if missing:
        # every row then fails in check_required
        logger.warning(
            "%s upload is missing required columns: %s", strategy.upload_type, ", ".join(missing)
        )
    return col_map


def parse_upload(text: str, strategy: UploadStrategy) -> List[ParsedRow]:
    """
    Split an upload into rows. Line numbers are 1-based and count the header,
    so the first data line is line 2. An empty or header-only file yields no rows.
    """
    lines = (text or "").lstrip("\ufeff").splitlines()
    if not lines or not lines[0].strip():
        return []

    header_fields = [h.strip() for h in lines[0].split(",")]
    col_index = _column_index(header_fields, strategy)

    data = [(idx, line) for idx, line in enumerate(lines) if idx > 0 and line.strip()]

    rows: List[ParsedRow] = []
    for idx, line in data:
        fields = [value.strip() for value in line.split(",")]
        values = {
            name: (fields[pos] or None) if pos < len(fields) else None
            for name, pos in col_index.items()
        }
        rows.append(ParsedRow(line_no=idx + 1, values=values))
    return rows


def check_required(rows: List[ParsedRow], strategy: UploadStrategy, ctx: UploadContext) -> List[ParsedRow]:
    """Fail rows with blank required fields and return the rest."""
    required = [spec.name for spec in strategy.columns if spec.required]
    valid: List[ParsedRow] = []
    for row in rows:
        missing = [name for name in required if not row.get(name)]
        if missing:
            ctx.fail(row, f"Missing required fields ({', '.join(missing)})")
            continue
        valid.append(row)
    return valid
