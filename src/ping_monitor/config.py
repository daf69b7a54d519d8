from __future__ import annotations

# Always-probed sentinel and the optional router address
SENTINEL_HOST = "8.8.8.8"  # Google DNS
ROUTER_HOST = "192.168.1.1"

# Captive-portal style HTTP checks
APPLE_CHECK_NAME = "Apple"
APPLE_CHECK_URL = "http://captive.apple.com/hotspot-detect.html"
APPLE_EXPECTED_SUBSTRING = "Success"
MICROSOFT_CHECK_NAME = "Microsoft"
MICROSOFT_CHECK_URL = "http://www.msftncsi.com/ncsi.txt"
MICROSOFT_EXPECTED_BODY = "Microsoft NCSI"

# Names of the built-in targets; custom hosts may not reuse them
RESERVED_TARGET_NAMES: frozenset[str] = frozenset(
    {SENTINEL_HOST, ROUTER_HOST, APPLE_CHECK_NAME, MICROSOFT_CHECK_NAME}
)

# Public IP / geolocation lookups
PUBLIC_IP_URL = "https://api.ipify.org"
GEO_IP_URL_TEMPLATE = "https://ipinfo.io/{ip}/json"
COUNTRY_CACHE_TTL_SECONDS = 60 * 60
BOGON_COUNTRY = "bogon"

# Countries where traffic without a VPN is considered risky
VPN_RISK_COUNTRIES: frozenset[str] = frozenset({"ru", "kz", "cn"})

# Ping settings
PING_TIMEOUT_SECONDS = 20  # per probe, every cycle
PING_GRACE_SECONDS = 0.5  # extra wait before the ping process is killed

# Values shown before the first successful resolution
INITIAL_COUNTRY = "!?"
INITIAL_PUBLIC_IP = "255.255.255.255"
UNRESOLVED_MARKER = "?"

# Notifications
NOTIFICATION_TITLE = "ping_"

# Preference keys
KEY_INCLUDE_APPLE = "includeAppleCheck"
KEY_INCLUDE_MICROSOFT = "includeMicrosoftCheck"
KEY_INCLUDE_ROUTER = "includeRouterCheck"
KEY_INCLUDE_VPN = "includeVPNCheck"
KEY_PING_INTERVAL = "pingInterval"
KEY_IGNORED_TIMEOUTS = "ignoredTimeouts"
KEY_CUSTOM_DOMAINS = "customDomains"

# Preference defaults
DEFAULT_INCLUDE_APPLE = True
DEFAULT_INCLUDE_MICROSOFT = True
DEFAULT_INCLUDE_ROUTER = False
DEFAULT_INCLUDE_VPN = True
DEFAULT_PING_INTERVAL_SECONDS = 10
DEFAULT_IGNORED_TIMEOUTS = 1

PREFERENCES_FILE = "ping_monitor_prefs.json"

# Logging
LOG_FILE = "ping_monitor.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Live table refresh rate (seconds)
UI_REFRESH_INTERVAL = 0.5

# Emoji/status mapping
EMOJI_ALL_UP = "✅"
EMOJI_UP = "🟢"
EMOJI_DOWN = "💔"
EMOJI_PENDING = "…"
EMOJI_VPN_RISK = "💀"
EMOJI_VPN_OK = "🥽"
EMOJI_NO_FLAG = "🏳️"
