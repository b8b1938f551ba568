from .datetime import (
    convert_time_input,
    current_time_24h,
    epoch_millis,
    format_time_to_ampm,
    parse_date,
    today_iso,
    week_bounds,
    week_start,
)
