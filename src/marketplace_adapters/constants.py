"""Constants and default configuration for marketplace API adapters."""

# Batch execution defaults
DEFAULT_BATCH_SIZE = 20
DEFAULT_DELAY_BETWEEN_BATCHES_MS = 500
DEFAULT_MAX_CONCURRENT_BATCHES = 1
DEFAULT_CONTINUE_ON_ERROR = True
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_RETRY_DELAY_MS = 1000
DEFAULT_USE_EXPONENTIAL_BACKOFF = True
DEFAULT_JITTER_RATIO = 0.4  # 0.8-1.2 band

# Pagination
DEFAULT_MAX_PAGES = 10

# Default request timeout (seconds)
DEFAULT_TIMEOUT = 30

USER_AGENT = "MarketplaceAdapters/1.0 (Language=Python)"

# SP-API modules: default version and (restore rate per second, burst capacity)
SP_API_MODULES = {
    "catalogItems": {"default_version": "2022-04-01", "versions": ("2022-04-01", "2020-12-01"), "rate_limit": (2, 2)},
    "listingsItems": {"default_version": "2021-08-01", "versions": ("2021-08-01",), "rate_limit": (5, 10)},
    "productTypeDefinitions": {"default_version": "2020-09-01", "versions": ("2020-09-01",), "rate_limit": (5, 10)},
    "fbaInventory": {"default_version": "v1", "versions": ("v1",), "rate_limit": (2, 2)},
    "orders": {"default_version": "v0", "versions": ("v0",), "rate_limit": (0.0167, 20)},
    "easyShip": {"default_version": "2022-03-23", "versions": ("2022-03-23",), "rate_limit": (1, 5)},
    "vendors": {"default_version": "v1", "versions": ("v1",), "rate_limit": (10, 10)},
    "reports": {"default_version": "2021-06-30", "versions": ("2021-06-30",), "rate_limit": (0.0167, 15)},
    "feeds": {"default_version": "2021-06-30", "versions": ("2021-06-30",), "rate_limit": (0.0083, 15)},
    "authorization": {"default_version": "v1", "versions": ("v1",), "rate_limit": (1, 5)},
    "applicationIntegrations": {"default_version": "2024-04-01", "versions": ("2024-04-01",), "rate_limit": (1, 5)},
    "brandProtection": {"default_version": "v1", "versions": ("v1",), "rate_limit": (0.5, 5)},
}

# Used when a capability has no definition above
DEFAULT_RATE_LIMIT = (0.5, 5)
