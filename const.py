# Pagination Defaults
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

# Orders
ORDER_ID_PREFIX = "ORD"
ORDER_ID_MAX_ATTEMPTS = 3
DEFAULT_DELIVERY_TYPE = "Instant"
DEFAULT_DELIVERY_MINUTES = 45
DEFAULT_CONTACT_NAME = "Customer"

# Rooms
USER_ROOM_PREFIX = "user:"
CATEGORY_ROOM_PREFIX = "category:"
ADMIN_ROOM = "admin"
PARTNER_ROOM = "partner"
RIDER_ROOM = "rider"

# Socket events
EVENT_ORDERS_NEW = "orders:new"
EVENT_ORDERS_STATUS = "orders:status"
EVENT_ORDERS_PAYMENT_STATUS = "orders:payment-status"
EVENT_ORDERS_INIT = "orders:init"
EVENT_RIDER_LOCATION = "rider:location"
EVENT_RIDER_LOCATION_UPDATE = "rider:location-update"

# Coupons
FIRST_ORDER_COUPON_CODE = "FIRST20"
FIRST_ORDER_COUPON_VALUE = 20
FIRST_ORDER_COUPON_DAYS = 30
COUPON_CLEANUP_INTERVAL_SECONDS = 600

# Ratings
MIN_RATING = 1
MAX_RATING = 5

# Search
SEARCH_DEFAULT_LIMIT = 10
SEARCH_MAX_LIMIT = 50
SEARCH_RELATED_SAMPLE = 15
SEARCH_RELATED_TOP = 10
SEARCH_MAX_SUGGESTIONS = 5
AUTOCOMPLETE_LIMIT = 10
AUTOCOMPLETE_QUERY_LIMIT = 8
TRENDING_DEFAULT_LIMIT = 10
TRENDING_MAX_LIMIT = 20
