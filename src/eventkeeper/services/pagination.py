"""Page arithmetic shared by list endpoints.

Pages are 0-indexed. Filtering (owner, soft delete) happens in the query
before offset/limit, so a page never contains rows the caller can't see.
"""

import math

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Highest page whose offset still binds as a signed 64-bit integer.
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE


def page_offset(page: int, size: int) -> int:
    return page * size


def page_count(total: int, size: int) -> int:
    return math.ceil(total / size) if size else 0
