"""
Tracking Constants

Event source type tags, third-party integration names, and the curated
referrer table used for attribution labels.
"""

# ── Event source type tags ────────────────────────────────────────────────────
SOURCE_LINK_CLICK = "link_click"
SOURCE_FORM_SUBMIT = "form_submit"
SOURCE_PODIUM_WIDGET = "podium_widget"
SOURCE_YOUTUBE_VIDEO = "youtube_video"

# ── Attribution ───────────────────────────────────────────────────────────────
UTM_TAGS: tuple[str, ...] = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")

LABEL_DIRECT = "Direct"
MALFORMED_REFERRAL_MAX_LENGTH = 100
ELLIPSIS = "…"

# Exact hostnames only. Order matters only for readability; hostnames are unique.
REFERRER_SOURCES: list[tuple[str, list[str]]] = [
    ("Organic Search: Google", ["google.com", "www.google.com", "www.google.co.uk", "www.google.ca", "www.google.com.au"]),
    ("Organic Search: Bing", ["bing.com", "www.bing.com", "cn.bing.com"]),
    ("Organic Search: Yahoo", ["search.yahoo.com", "yahoo.com", "www.yahoo.com"]),
    ("Organic Search: DuckDuckGo", ["duckduckgo.com", "www.duckduckgo.com"]),
    ("Organic Search: Ecosia", ["ecosia.org", "www.ecosia.org"]),
    ("Organic Search: Baidu", ["baidu.com", "www.baidu.com"]),
    ("Organic Search: Yandex", ["yandex.ru", "yandex.com", "www.yandex.ru", "www.yandex.com"]),
    ("Email: Gmail", ["mail.google.com"]),
    ("Email: Outlook", ["outlook.live.com", "outlook.office.com", "outlook.office365.com"]),
    ("Email: Yahoo Mail", ["mail.yahoo.com"]),
    ("Email: AOL Mail", ["mail.aol.com"]),
    ("Email: Proton Mail", ["mail.proton.me"]),
    ("Email: iCloud Mail", ["www.icloud.com"]),
]

# ── Context classification ────────────────────────────────────────────────────
DEVICE_DESKTOP = "Desktop"
DEVICE_MOBILE = "Mobile"
DEVICE_TABLET = "Tablet"
FAMILY_OTHER = "Other"

# ── Page lifecycle ────────────────────────────────────────────────────────────
PAGE_UNLOAD_EVENT = "pagehide"

# ── Form plugins ──────────────────────────────────────────────────────────────
UNKNOWN_FORM_LABEL = "Unknown form"

# Forms that submit through their own AJAX handler and announce success with a
# custom event. The native submit listener ignores them.
AJAX_FORM_MARKERS = ", ".join(
    [
        ".wpcf7",
        ".wpforms-ajax-form",
        'form[target^="gform_ajax_frame"]',
        ".nf-form-cont",
    ]
)

CF7_MAIL_SENT_EVENT = "wpcf7mailsent"
WPFORMS_SUCCESS_EVENT = "wpformsAjaxSubmitSuccess"
GRAVITY_CONFIRMATION_EVENT = "gform_confirmation_loaded"
NINJA_SUBMIT_RESPONSE_EVENT = "nfFormSubmitResponse"

# ── Podium widget ─────────────────────────────────────────────────────────────
PODIUM_CALLBACK_NAME = "PodiumEventsCallback"
PODIUM_EVENTS: list[str] = ["Bubble Clicked", "Conversation Started", "Widget Closed"]

# ── YouTube IFrame API ────────────────────────────────────────────────────────
YOUTUBE_READY_CALLBACK_NAME = "onYouTubeIframeAPIReady"
YOUTUBE_API_GLOBAL = "YT"
YOUTUBE_INITIALIZED_ATTR = "data-wego-yt-initialized"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

STATE_PLAYING = "Playing"
STATE_PAUSED = "Paused"
STATE_ENDED = "Ended"
STATE_BUFFERING = "Buffering"

VIDEO_STATES: list[str] = [STATE_PLAYING, STATE_PAUSED, STATE_ENDED, STATE_BUFFERING]

# YT.PlayerState codes
PLAYER_STATE_LABELS: dict[int, str] = {
    0: STATE_ENDED,
    1: STATE_PLAYING,
    2: STATE_PAUSED,
    3: STATE_BUFFERING,
}
