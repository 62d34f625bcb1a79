"""Speed bands and the status-line text."""

# (upper bound exclusive, icon), checked in order; anything above the last
# bound is the fastest band.
SPEED_BANDS = [
    (10.0, "\U0001F40C"),    # snail
    (30.0, "\U0001F6B6"),    # walking
    (60.0, "\U0001F3C3"),    # running
    (100.0, "\U0001F697"),   # car
]
FASTEST_ICON = "\U0001F680"  # rocket


def speed_icon(speed: float) -> str:
    for upper, icon in SPEED_BANDS:
        if speed < upper:
            return icon
    return FASTEST_ICON


def format_speed(speed: float, show_icon: bool = True) -> str:
    """Status-line text, e.g. '🚶 12.5 t/s' or '12.5 t/s' without the icon."""
    icon = f"{speed_icon(speed)} " if show_icon else ""
    return f"{icon}{speed:.1f} t/s"
