"""
Bulk upload runner.

1. parse the header and data lines, mapping columns positionally or by name
2. flag rows with missing required fields
3. resolve every referenced name with one query per reference kind
4. let the upload-type strategy build records, failing individual rows
5. insert everything in one transaction and write the bulk reference record
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sfa.core.config import settings
from sfa.core.exceptions import BulkUploadError, NotFoundError, UploadFormatError
from sfa.models.bulk_upload import BulkUploadRef
from sfa.models.product import Product
from sfa.schemas.auth import UserSession
from sfa.schemas.upload import BulkUploadResult
from sfa.services.bulk.engine import ReferenceResolver, UploadContext, check_required, parse_upload
from sfa.services.bulk.strategies import get_strategy
from sfa.utils.doc_numbers import bulk_upload_reference

logger = logging.getLogger(__name__)


def _record_failed_upload(
    db: Session,
    reference_no: str,
    upload_type: str,
    total: int,
    errors: List[str],
    file_name: Optional[str],
    session: UserSession,
) -> None:
    ref = BulkUploadRef(
        reference_no=reference_no,
        upload_type=upload_type,
        total_records=total,
        success_records=0,
        failed_records=total,
        error_log=errors,
        uploaded_by=session.user_id,
        file_name=file_name,
        status="failed",
    )
    try:
        db.add(ref)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Unable to record failed bulk upload %s: %s", reference_no, exc, exc_info=True)


def run_bulk_upload(
    db: Session,
    upload_type: str,
    text: str,
    file_name: Optional[str],
    session: UserSession,
) -> BulkUploadResult:
    strategy = get_strategy(upload_type)
    rows = parse_upload(text, strategy)

    resolver = ReferenceResolver(strategy.reference_kinds)
    ctx = UploadContext(session=session, reference_no=bulk_upload_reference(), resolver=resolver)

    if len(rows) > settings.BULK_UPLOAD_MAX_ROWS:
        message = f"Uploaded file exceeds row limit ({settings.BULK_UPLOAD_MAX_ROWS})."
        logger.warning("Bulk upload %s (%s) rejected: %s rows", ctx.reference_no, strategy.upload_type, len(rows))
        _record_failed_upload(
            db, ctx.reference_no, strategy.upload_type, len(rows), [message], file_name, session
        )
        raise UploadFormatError(message)

    valid = check_required(rows, strategy, ctx)
    strategy.resolve_references(resolver, valid)
    resolver.load(db)
    strategy.prepare(db, valid, ctx)

    pending = []
    for group in strategy.group_rows(valid):
        group = [row for row in group if not ctx.has_failed(row)]
        if not group:
            continue
        header = strategy.build_header(group, ctx)
        if header is None:
            continue
        lines = strategy.build_lines(header, group, ctx)
        if strategy.has_lines and not lines:
            continue
        pending.append(header)

    total = len(rows)
    errors = ctx.error_list()
    failed = len(errors)
    success = total - failed

    try:
        db.add_all(pending)
        db.add(
            BulkUploadRef(
                reference_no=ctx.reference_no,
                upload_type=strategy.upload_type,
                total_records=total,
                success_records=success,
                failed_records=failed,
                error_log=errors,
                uploaded_by=session.user_id,
                file_name=file_name,
                status="active",
            )
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Bulk upload %s (%s) failed during insert: %s",
            ctx.reference_no,
            strategy.upload_type,
            exc,
            exc_info=True,
        )
        _record_failed_upload(
            db,
            ctx.reference_no,
            strategy.upload_type,
            total,
            errors + ["Insert failed; no records from this file were saved"],
            file_name,
            session,
        )
        raise BulkUploadError("Bulk upload failed; no records were saved") from exc

    logger.info(
        "Bulk upload %s (%s): total=%s success=%s failed=%s",
        ctx.reference_no,
        strategy.upload_type,
        total,
        success,
        failed,
    )
    return BulkUploadResult(
        reference_no=ctx.reference_no,
        upload_type=strategy.upload_type,
        total=total,
        success=success,
        failed=failed,
        errors=errors,
    )


def list_bulk_references(
    db: Session,
    upload_type: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[BulkUploadRef]:
    query = db.query(BulkUploadRef)
    if upload_type:
        query = query.filter(BulkUploadRef.upload_type == upload_type)
    if status:
        query = query.filter(BulkUploadRef.status == status)
    return query.order_by(BulkUploadRef.bulk_ref_id.desc()).offset(offset).limit(limit).all()


def get_bulk_reference(db: Session, reference_no: str) -> BulkUploadRef:
    ref = (
        db.query(BulkUploadRef)
        .filter(BulkUploadRef.reference_no == reference_no)
        .order_by(BulkUploadRef.bulk_ref_id.desc())
        .first()
    )
    if not ref:
        raise NotFoundError("Bulk upload", reference_no)
    return ref


def retire_bulk_reference(db: Session, reference_no: str) -> BulkUploadRef:
    """Mark a reference deleted and deactivate the products it created."""
    ref = get_bulk_reference(db, reference_no)
    deactivated = (
        db.query(Product)
        .filter(Product.bulk_upload_ref == reference_no, Product.is_active.is_(True))
        .update({Product.is_active: False}, synchronize_session=False)
    )
    ref.status = "deleted"
    db.commit()
    db.refresh(ref)
    logger.info("Bulk upload %s retired; %s products deactivated", reference_no, deactivated)
    return ref
