"""Day keys, driver numbering and colours shared by the route services"""
import re

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday", "all")

PALETTE = (
    "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
    "#8c564b", "#e377c2", "#17becf", "#bcbd22", "#393b79",
    "#ad494a", "#637939", "#ce6dbd", "#8c6d31", "#7f7f7f",
)
# placeholder colour older rows were created with
DEFAULT_COLOR = "#666"

_DRIVER_NUM_RE = re.compile(r"driver\s+(\d+)", re.IGNORECASE)
_HEX_RE = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


def normalize_day(raw: str | None) -> str:
    """Lower-case day key; anything unrecognised means "all"."""
    s = str(raw if raw is not None else "all").strip().lower()
    return s if s in DAYS else "all"


def driver_name(number: int) -> str:
    return f"Driver {number}"


def palette_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


def parse_driver_number(name: str | None) -> int | None:
    m = _DRIVER_NUM_RE.search(str(name or ""))
    return int(m.group(1)) if m else None


def driver_number(driver) -> int | None:
    """Explicit sequence number, falling back to the "Driver N" label for legacy rows."""
    if driver.sequence_number is not None:
        return driver.sequence_number
    return parse_driver_number(driver.name)


def sort_by_number(drivers: list) -> list:
    """Ascending driver number; unnumbered drivers keep their order at the end."""
    return sorted(drivers, key=lambda d: (driver_number(d) is None, driver_number(d) or 0))


def display_color(color: str | None, index: int) -> str:
    if color and color != DEFAULT_COLOR:
        return color
    return palette_color(index)


def is_hex_color(value: str) -> bool:
    return bool(_HEX_RE.match(str(value).strip()))
