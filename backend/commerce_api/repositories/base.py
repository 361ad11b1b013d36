"""Generic repository base and query utilities for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- The generic CRUD surface (``get_all``, ``get_by_id``, ``add``, ``update``,
  ``delete_by_id``).
- Safe sorting with a whitelist mapping (prevents SQL injection).
- Safe update helpers with per-repository updatable-field whitelists.
- Translation of driver errors raised on flush into service errors.
- No business logic, no commit/rollback; the Unit of Work owns transactions.

Design decisions
----------------
* Repositories MUST remain thin and persistence-focused:
  - They never implement use cases or domain policies.
  - They never call commit/rollback; the Unit of Work does.
* ``get_by_id`` reports absence with ``None``; callers decide whether a missing
  row is an error.
* Writes flush immediately so generated ids are available and constraint
  violations surface at the call site, already classified.
* Updates MUST NOT allow mass-assignment: each repo exposes an explicit
  ``_updatable_fields`` whitelist.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import InstrumentedAttribute, Session

from commerce_api.core.extensions import db
from commerce_api.infra.db.error_classifier import (
    StorageErrorClassifier,
    classify,
    to_service_error,
)

E = TypeVar("E")  # SQLAlchemy mapped entity type


# ----------------------------- Sorting utilities -----------------------------


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Parse public sort tokens into ``(field, is_desc)`` tuples.

    :param raw: Public tokens like ``["-created_at", "name"]``.
    :type raw: Iterable[str]
    :returns: List of ``(field_name, is_desc)`` tokens.
    :rtype: list[tuple[str, bool]]
    """
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        field = token[1:] if is_desc else token
        field = field.strip()
        if field:
            parsed.append((field, is_desc))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Apply safe ``ORDER BY`` clauses based on a whitelist mapping.

    Unknown sort tokens are ignored silently. The model's primary key is always
    appended as a final ascending tiebreaker for deterministic output.

    :param stmt: Base selectable.
    :type stmt: :class:`sqlalchemy.sql.Select`
    :param sortable_fields: Public field → SQLAlchemy attribute mapping.
    :type sortable_fields: Mapping[str, InstrumentedAttribute]
    :param tokens: Public sort tokens (e.g., ``["-created_at"]``).
    :type tokens: Iterable[str]
    :param pk_attr: Primary-key attribute used as a tiebreaker.
    :type pk_attr: InstrumentedAttribute | None
    :returns: Modified select with ``ORDER BY`` clauses.
    :rtype: :class:`sqlalchemy.sql.Select`
    """
    orders: list[Any] = []
    for field, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(field)
        if isinstance(col, InstrumentedAttribute):
            orders.append(col.desc() if is_desc else col.asc())

    if orders:
        stmt = stmt.order_by(*orders)

    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())

    return stmt


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single entity family.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.
    * ``entity_name``: name used in conflict/not-found messages.

    Subclasses MAY override:

    * ``_sortable_fields`` to expose safe sort keys.
    * ``_filterable_fields`` to enable equality filter whitelisting.
    * ``_updatable_fields`` to whitelist keys allowed for updates.
    * ``_default_eagerload`` to attach eager-loading options.

    This class NEVER opens, commits or rolls back transactions.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]
    entity_name: str = "Resource"

    def __init__(
        self,
        session: Session | None = None,
        *,
        classifier: StorageErrorClassifier = classify,
    ) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``commerce_api.core.extensions``.

        :param session: Session shared across the Unit of Work scope. The
            repository does not own it and must not outlive the unit of work.
        :type session: :class:`sqlalchemy.orm.Session` | None
        :param classifier: Storage error classifier for the bound engine.
        :type classifier: StorageErrorClassifier
        """
        self._session: Session | None = session
        self._classify = classifier

    # ------------------------------ Session access ---------------------------

    @property
    def session(self) -> Session:
        """Return the active SQLAlchemy session.

        :returns: Session bound to the current Unit of Work.
        :rtype: :class:`sqlalchemy.orm.Session`
        """
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect behind the session (``"postgresql"``, ...)."""
        return self.session.get_bind().dialect.name

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        """Attach eager-loading options to generic get/list operations."""
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        """Return the model's primary-key attribute (``model.id``) if available."""
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public sort keys to model attributes."""
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist of equality-filterable fields; unknown keys are ignored."""
        return {}

    def _updatable_fields(self) -> set[str]:
        """Whitelist of public keys that can be assigned on update.

        :returns: Set of allowed public keys for update operations.
        :rtype: set[str]
        """
        return set()

    # ------------------------------ Internals --------------------------------

    def _require_pk(self) -> InstrumentedAttribute[Any]:
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError(f"{type(self).__name__} requires a detectable PK attribute.")
        return pk_attr

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        """Apply whitelisted equality filters."""
        if not filters:
            return stmt
        allowed = self._filterable_fields()
        clauses: list[Any] = []
        for k, v in filters.items():
            col = allowed.get(k)
            if isinstance(col, InstrumentedAttribute):
                clauses.append(col == v)
        return stmt.where(and_(*clauses)) if clauses else stmt

    def _sanitize_update_fields(
        self,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
    ) -> dict[str, Any]:
        """Return a dict with only whitelisted update keys.

        :raises ValueError: If ``strict`` and unknown keys are present.
        """
        allowed = self._updatable_fields()
        if not allowed:
            if fields and strict:
                raise ValueError("No updatable fields configured for this repository.")
            return {}

        unknown = [k for k in fields if k not in allowed]
        if unknown and strict:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")

        return {k: v for k, v in fields.items() if k in allowed}

    def _translate(self, exc: SQLAlchemyError) -> Exception:
        return to_service_error(exc, entity=self.entity_name, classifier=self._classify)

    # --------------------------------- CRUD ----------------------------------

    def get_all(self) -> list[E]:
        """Return every row ordered by primary key."""
        return self.list()

    def get_by_id(self, entity_id: int) -> E | None:
        """Retrieve a single entity by primary key.

        :param entity_id: Primary-key value.
        :type entity_id: int
        :returns: Entity or ``None`` when absent.
        :rtype: E | None
        """
        stmt = self._default_eagerload(select(self.model).where(self._require_pk() == entity_id))
        result = self.session.execute(stmt).scalars().first()
        return cast(E | None, result)

    def add(self, instance: E) -> int:
        """Stage a new entity and flush to materialize its primary key.

        :param instance: New entity instance.
        :type instance: E
        :returns: The database-assigned id.
        :rtype: int
        :raises ConflictError: On uniqueness violations.
        """
        self.session.add(instance)
        self.flush()
        return cast(int, getattr(instance, "id"))

    def update(self, instance: E) -> None:
        """Persist in-place changes made to a loaded entity.

        :param instance: Entity already attached to this session.
        :type instance: E
        :raises ConflictError: On uniqueness violations.
        """
        self.session.add(instance)
        self.flush()

    def delete_by_id(self, entity_id: int) -> bool:
        """Delete the entity with the given id.

        :param entity_id: Primary-key value.
        :type entity_id: int
        :returns: ``True`` when a row was removed, ``False`` when absent.
        :rtype: bool
        """
        instance = self.get_by_id(entity_id)
        if instance is None:
            return False
        self.session.delete(instance)
        self.flush()
        return True

    def flush(self) -> None:
        """Flush pending changes without committing.

        Driver errors are classified and re-raised as service errors with the
        original exception chained as ``__cause__``.
        """
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc

    # ----------------------------- Safe updates -------------------------------

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Assign only whitelisted keys to ``instance`` and optionally flush.

        The assignment uses ``setattr`` to trigger SQLAlchemy ``@validates``
        decorators defined on the mapped class.

        :raises ValueError: If ``strict`` and unknown keys are present.
        """
        updates = self._sanitize_update_fields(fields, strict=strict)
        for k, v in updates.items():
            setattr(instance, k, v)
        if flush:
            self.flush()
        return instance

    # ------------------------------- Listing ---------------------------------

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[E]:
        """List entities with optional filtering and sorting.

        :param filters: Equality filters (public keys).
        :type filters: Mapping[str, Any] | None
        :param sort: Public sort tokens (e.g., ``["-created_at"]``).
        :type sort: Iterable[str] | None
        :param limit: Optional limit.
        :type limit: int | None
        :param offset: Optional offset.
        :type offset: int | None
        :returns: List of entities.
        :rtype: list[E]
        """
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        stmt = self._default_eagerload(stmt)
        stmt = apply_sorting(stmt, self._sortable_fields(), sort or [], pk_attr=self._pk_attr())

        if limit is not None:
            stmt = stmt.limit(int(limit))
        if offset is not None:
            stmt = stmt.offset(int(offset))

        results = self.session.execute(stmt).scalars().all()
        return cast(list[E], list(results))
