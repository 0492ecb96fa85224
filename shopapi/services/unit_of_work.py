# shopapi/services/unit_of_work.py
import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shopapi.errors import ConflictError, StoreError
from shopapi.repositories.catalog import CatalogStore
from shopapi.repositories.ledger import OrderLedger

logger = logging.getLogger(__name__)


class UnitOfWork:
    """One database transaction shared by the catalog store and the order ledger.

    Usage::

        with UnitOfWork(SessionLocal) as uow:
            uow.catalog.decrement_stock(product_id, 2)
            uow.ledger.create(order)
            uow.commit()

    Leaving the block without calling ``commit()`` (including through an
    exception) rolls the transaction back.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self.catalog: Optional[CatalogStore] = None
        self.ledger: Optional[OrderLedger] = None
        self.committed = False

    def begin(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("unit of work already started")
        self.session = self._session_factory()
        # Results stay readable after the unit of work is closed
        self.session.expire_on_commit = False
        self.catalog = CatalogStore(self.session)
        self.ledger = OrderLedger(self.session)
        self.committed = False
        return self

    def commit(self) -> None:
        self._require_active()
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(f"commit: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"commit: {exc}") from exc
        self.committed = True

    def rollback(self) -> None:
        self._require_active()
        self.session.rollback()

    def close(self) -> None:
        if self.session is None:
            return
        try:
            if not self.committed:
                # Keep loaded results usable: rollback would expire them
                self.session.expunge_all()
                self.session.rollback()
                logger.debug("unit of work rolled back")
        finally:
            self.session.close()
            self.session = None
            self.catalog = None
            self.ledger = None

    def _require_active(self):
        if self.session is None:
            raise RuntimeError("unit of work not started")

    def __enter__(self) -> "UnitOfWork":
        return self.begin()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
