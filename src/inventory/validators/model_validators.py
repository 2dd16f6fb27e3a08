"""Checks derived from a mapped model's table definition."""

from sqlalchemy import UniqueConstraint
from sqlalchemy import inspect as sa_inspect


def find_unknown_model_kwargs(model, kwargs: dict) -> list[str]:
    """
    Keys of `kwargs` that are not column attributes of `model`, in input order.

    Relationships (Book.category) count as unknown: the repository writes
    foreign key columns only.
    """
    columns = {attr.key for attr in sa_inspect(model).column_attrs}
    return [key for key in kwargs if key not in columns]


def get_unique_column_sets(model) -> list[tuple[str, ...]]:
    """
    Column-name tuples that must be unique together, without duplicates.

    Gathered from `unique=True` columns, UniqueConstraint objects and unique
    indexes, in that order.
    """
    table = model.__table__
    candidates = [(column.name,) for column in table.columns if column.unique]
    candidates += [
        tuple(column.name for column in constraint.columns)
        for constraint in table.constraints
        if isinstance(constraint, UniqueConstraint)
    ]
    candidates += [tuple(column.name for column in index.columns) for index in table.indexes if index.unique]

    found: list[tuple[str, ...]] = []
    for names in candidates:
        if names and names not in found:
            found.append(names)
    return found
