from datetime import datetime, timezone

from sqlalchemy import func, select

def utcnow() -> datetime:
    # Precisión de microsegundos; func.now() en SQLite solo guarda segundos
    return datetime.now(timezone.utc)

def assign_sequence(mapper, connection, target) -> None:
    """
    Listener `before_insert`: el contador de inserción lo calcula la base de
    datos dentro del propio INSERT (máximo actual + 1), sin depender del reloj.
    """
    if target.sequence is None:
        column = mapper.local_table.c.sequence
        target.sequence = select(func.coalesce(func.max(column), 0) + 1).correlate(None).scalar_subquery()
