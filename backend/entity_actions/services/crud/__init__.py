"""
CRUD building blocks shared by every entity service.

Provides:
- ParamsNormalizer: raw parameters to typed query parameters
- FieldAuthorizer / filter_fields: allow-list checks and projection
- DocumentTransformer: post-processing of returned documents
- total_pages: pagination arithmetic
"""

from .params import ParamsNormalizer, split_list, to_number, is_list_action
from .fields import (
    FieldAuthorizer,
    filter_fields,
    get_path,
    set_path,
    split_path,
    MISSING,
)
from .transformer import DocumentTransformer, Populator
from .pagination import total_pages

__all__ = [
    # Params
    "ParamsNormalizer",
    "split_list",
    "to_number",
    "is_list_action",
    # Fields
    "FieldAuthorizer",
    "filter_fields",
    "get_path",
    "set_path",
    "split_path",
    "MISSING",
    # Transformer
    "DocumentTransformer",
    "Populator",
    # Pagination
    "total_pages",
]
