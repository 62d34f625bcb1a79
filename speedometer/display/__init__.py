from .icons import format_speed, speed_icon
from .status import StatusIndicator
