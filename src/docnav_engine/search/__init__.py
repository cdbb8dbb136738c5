"""Predicate search over ancestor deltas."""

from . import predicates
from .categories import CATEGORIES, SearchCategory, get_category
from .predicates import Predicate

__all__ = ["CATEGORIES", "Predicate", "SearchCategory", "get_category", "predicates"]
