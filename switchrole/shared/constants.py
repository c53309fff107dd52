CONTEXT_SYSTEM = "system"
CONTEXT_CATEGORY = "category"
CONTEXT_COURSE = "course"
CONTEXT_LEVELS = (CONTEXT_SYSTEM, CONTEXT_CATEGORY, CONTEXT_COURSE)

# User preference name prefix; the course id is appended.
LAST_COURSE_ROLE = "switchrolebanner_lastcourserole_"

HIDDEN_BANNERS_KEY = "switchrole_hidden_banners"
ROLE_SWITCHES_KEY = "role_switches"

SWITCHROLE_PARAM = "switchrole"

DEFAULT_EXCLUDED_ENDPOINTS = (
    "course.enrol_index",
    "course.switch_role",
    "banner.hide_banner",
)
DEFAULT_EXCLUDED_LAYOUTS = ("popup", "embedded")

DEFAULT_LAYOUT = "course"

# Largest id a course row can hold (signed 32-bit INTEGER column).
MAX_RECORD_ID = 2**31 - 1
