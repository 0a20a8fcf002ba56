"""
Pagination arithmetic for the ``list`` action.
"""


def total_pages(total: int, page_size: int) -> int:
    """
    Number of pages needed for ``total`` rows, ``ceil(total / page_size)``.

    Raises:
        ValueError: If page_size is not positive.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return (total + page_size - 1) // page_size
