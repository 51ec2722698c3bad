from queryparam.query import QueryParams

__all__ = ("QueryParams",)
