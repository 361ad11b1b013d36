# commerce_api/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from commerce_api.services._shared.errors import AuthorizationError, ValidationError
from commerce_api.services._shared.policies.common import is_owner
from commerce_api.uow import SQLAlchemyUnitOfWork, UnitOfWork

UnitOfWorkFactory = Callable[[], UnitOfWork]


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Open units of work through an injectable factory.
    * Offer shared validation helpers that raise field-level errors.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    - A Unit of Work only commits when the service calls ``save()``.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory | None = None) -> None:
        """
        Initialize the base service.

        :param uow_factory: Callable returning a fresh Unit of Work. Defaults to
            :class:`~commerce_api.uow.SQLAlchemyUnitOfWork`.
        :type uow_factory: Callable[[], UnitOfWork] | None
        """
        self._uow_factory: UnitOfWorkFactory = uow_factory or SQLAlchemyUnitOfWork

    # -------------------------- UoW helpers ---------------------------------

    def uow(self) -> UnitOfWork:
        """
        Create a Unit of Work for one operation.

        :returns: Open UoW; use it as a context manager.
        :rtype: UnitOfWork
        """
        return self._uow_factory()

    # ----------------------- Validation utilities ---------------------------

    @staticmethod
    def raise_if_errors(errors: Mapping[str, Sequence[str]]) -> None:
        """
        Raise a :class:`ValidationError` when ``errors`` holds any message.

        :param errors: Field name to messages collected so far.
        :type errors: Mapping[str, Sequence[str]]
        :raises ValidationError: If at least one field has a message.
        """
        collected = {k: v for k, v in errors.items() if v}
        if collected:
            raise ValidationError(collected)

    # --------------------------- AuthZ --------------------------------

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor is the resource owner.

        :param actor_id: Authenticated user id.
        :param owner_id: Expected owner id.
        :type owner_id: int
        :param msg: Optional custom error message.
        :type msg: str | None
        :raises AuthorizationError: If actor is not the owner.
        """
        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "You can only access your own resources.")
