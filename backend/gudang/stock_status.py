"""Derived stock predicates shared by the ORM, reports and API views."""

import enum


class StockStatus(str, enum.Enum):
    habis = "Habis"
    kritis = "Kritis"
    menipis = "Menipis"
    normal = "Normal"


def is_low_stock(stock, min_stock):
    # Also used with mapped columns, where it yields a SQL expression.
    return stock <= min_stock


def classify_stock(stock: int, min_stock: int) -> StockStatus:
    if stock == 0:
        return StockStatus.habis
    if stock <= min_stock / 2:
        return StockStatus.kritis
    if stock <= min_stock:
        return StockStatus.menipis
    return StockStatus.normal
