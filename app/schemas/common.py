from typing import Any


def reject_null(v: Any) -> Any:
    """
    Partial updates may omit a field but not null out a required column.
    """
    if v is None:
        raise ValueError("Field may be omitted but cannot be null")
    return v
