from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class SimpleArray(TypeDecorator):
    """
    List of strings persisted as one comma-separated VARCHAR.
    Tag searches run LIKE against the serialized form.
    """
    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ",".join(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value == "":
            return []
        return value.split(",")
