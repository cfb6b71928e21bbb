import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.errors import InvalidInput, StorageFailure
from collecta.services.upload_service import UploadService

logger = logging.getLogger(__name__)


async def commit_or_fail(
    db: AsyncSession,
    action: str,
    new_files: Iterable[Optional[str]] = (),
    conflict: Optional[str] = None,
) -> None:
    """Commit the session; on a store error roll back and discard ``new_files``.

    ``new_files`` are images stored for this request only, so a failed write
    leaves neither a row nor an orphaned file behind. When ``conflict`` is given,
    a unique-constraint violation is reported as ``InvalidInput`` with that
    message instead of a storage failure.
    """
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        await UploadService.discard(new_files)
        if conflict is None:
            logger.exception("Store failure while trying to %s", action)
            raise StorageFailure(f"Could not {action}.") from e
        raise InvalidInput(conflict) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Store failure while trying to %s", action)
        await UploadService.discard(new_files)
        raise StorageFailure(f"Could not {action}.") from e
