"""Backend table and bucket names."""

PAGES_TABLE = "journal_pages"
MARKERS_TABLE = "page_items"
TIMELINES_TABLE = "timelines"
PAGE_TIMELINES_TABLE = "page_timelines"

PAGE_IMAGES_BUCKET = "journal-pages"
