"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, to_local, today_in, parse_iso
from utils.money import format_cents, round_half_up, percent_of
from utils.studio_context import (
    get_current_studio_id,
    set_current_studio_id,
    clear_current_studio_id,
    studio_context,
)
