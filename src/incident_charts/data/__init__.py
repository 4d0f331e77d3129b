"""Record loading, date windows and aggregation."""

from .records import IncidentRecord, RecordStore, RecordLoadError, parse_incident_date  # noqa: F401
from .window import CORPUS_END, CORPUS_START, DateWindow, DateWindowError, parse_date_window  # noqa: F401
from .aggregation import (  # noqa: F401
    GLOBAL_KEY,
    OTHERS_KEY,
    Bucket,
    GroupBy,
    SortOrder,
    Summary,
    aggregate,
    majority_share,
    rank_categories,
    select_keys,
    summarize,
    top_n,
)
