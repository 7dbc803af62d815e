"""Limits and thresholds shared by the extractors."""

# Default character budget for extracted text
DEFAULT_MAX_LENGTH = 10_000

# Output caps
MAX_HISTORY_ITEMS = 20
MAX_MESSAGES = 5
MAX_HISTORY_PER_SELECTOR = 15

# Minimum usable lengths
MIN_HISTORY_ITEM_LENGTH = 20
MIN_MESSAGE_LENGTH = 10
MIN_STATUS_LENGTH = 3
MAX_HISTORY_ITEM_LENGTH = 2000

# Status widgets longer than this are not status indicators
MAX_STATUS_SELECTOR_LENGTH = 300
MAX_STATUS_HEADING_LENGTH = 200
MAX_STATUS_WORDS = 20
MAX_STATUS_TITLE_LENGTH = 100
MIN_PARAGRAPH_LENGTH = 10
MAX_PARAGRAPH_LENGTH = 200
MAX_STATUS_HEADINGS = 5
MAX_STATUS_PARAGRAPHS = 5

# HTML validation thresholds
MIN_PAGE_TEXT_LENGTH = 50
MIN_JS_PAGE_TEXT_LENGTH = 20

# Vendor API descriptions are clipped to this many characters
API_DESCRIPTION_CLIP = 300

# Feed descriptions are clipped to this many characters
FEED_DESCRIPTION_CLIP = 500
MIN_FEED_DESCRIPTION_LENGTH = 10
MAX_FEED_TITLE_STATUS_LENGTH = 50

# Short strings get cookie/privacy noise stripped
PURIFY_SHORT_TEXT_LENGTH = 50

# Truncation
ELLIPSIS = "..."
MIN_PARTIAL_ITEM_BUDGET = 100
STATUS_BUDGET_SHARE = 0.3
HISTORY_BUDGET_SHARE = 0.5
MESSAGES_BUDGET_SHARE = 0.2
SECTION_SEPARATOR = "\n"

# History entries are de-duplicated on this prefix length
DEDUPE_PREFIX_LENGTH = 100
