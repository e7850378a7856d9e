"""Global query filters applied to ORM sessions."""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, with_loader_criteria

INCLUDE_DELETED_OPTION = "include_deleted"


def _filter_soft_deleted(execute_state: ORMExecuteState) -> None:
    # Relationship and column loads inherit the criteria from the parent statement.
    if (
        not execute_state.is_select
        or execute_state.is_column_load
        or execute_state.is_relationship_load
        or execute_state.execution_options.get(INCLUDE_DELETED_OPTION, False)
    ):
        return

    from bookstore_fixtures.models import Book

    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(
            Book,
            lambda cls: cls.soft_deleted.is_(False),
            include_aliases=True,
        )
    )


def install_soft_delete_filter(target: Any) -> None:
    """Hide soft-deleted books from every ORM SELECT issued through `target`.

    `target` is a `Session`, a `sessionmaker` or the `Session` class itself.
    Pass ``execution_options(include_deleted=True)`` to see deleted rows.
    """
    if not event.contains(target, "do_orm_execute", _filter_soft_deleted):
        event.listen(target, "do_orm_execute", _filter_soft_deleted)
