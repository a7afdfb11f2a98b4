"""Helpers for reading whole collections out of protean repositories."""

DEFAULT_BATCH_SIZE = 100


def fetch_all(query, batch_size=DEFAULT_BATCH_SIZE):
    """Page through a protean QuerySet and return every matching record.

    QuerySets carry a default limit, so a bare ``.all()`` silently truncates
    larger collections.
    """
    records = []
    offset = 0
    while True:
        page = query.offset(offset).limit(batch_size).all()
        records.extend(page.items)
        if len(page.items) < batch_size:
            return records
        offset += batch_size
