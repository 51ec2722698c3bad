__all__ = ("QueryParamError", "InvalidValueError")


class QueryParamError(Exception):
    pass


class InvalidValueError(QueryParamError, TypeError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"value for '{key}' must be a string or a list of strings")
