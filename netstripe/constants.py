"""Constants shared by the netstripe client."""

__version__ = "0.1.0"

DEFAULT_API_BASE = "https://api.stripe.com/v1"

DEFAULT_TIMEOUT = 30.0

USER_AGENT = f"netstripe/{__version__}"

# Oldest and newest API versions this client knows how to decode
MIN_API_VERSION = "2011-01-01"
MAX_API_VERSION = "2020-03-02"

# Header names
AUTHORIZATION_HEADER = "Authorization"
STRIPE_VERSION_HEADER = "Stripe-Version"
USER_AGENT_HEADER = "User-Agent"
CONTENT_TYPE_HEADER = "Content-Type"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Operators accepted inside a range filter such as created[gte]=...
RANGE_OPERATORS = ("gt", "gte", "lt", "lte")
