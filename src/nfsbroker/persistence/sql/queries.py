"""SQL statements for the SQL store, written with ``?`` placeholders."""

INSTANCES_TABLE = "service_instances"
BINDINGS_TABLE = "service_bindings"

TABLES = (INSTANCES_TABLE, BINDINGS_TABLE)


def create_table(table: str) -> str:
    return f"CREATE TABLE IF NOT EXISTS {table} (id TEXT PRIMARY KEY, value TEXT)"


def select_value(table: str) -> str:
    return f"SELECT id, value FROM {table} WHERE id = ?"


def delete_row(table: str) -> str:
    return f"DELETE FROM {table} WHERE id = ?"
