"""Informational page served at ``GET /``."""

from __future__ import annotations

from datetime import timedelta

from upld.config import LIMITS, Limits

# Header width budget: three copies of the host plus "(1)" twice
HEADER_WIDTH = 70 - 6

HELP_TEMPLATE = """\
{host}(1){padding}{host_caps}{padding}{host}(1)

 NAME
     {host} - no bullshit command line pastebin

 SYNOPSIS
     # View helptext
     curl {host} -L

     # File Upload
     curl {host} -LT <file path>

     # Command output
     <command> | curl {host} -LT -

 DESCRIPTION
     A simple, no bullshit, command line pastebin.

     Pastes are created using HTTP PUT requests, which returns a URL
     containing a portion of the content's blake3 hash, encoded with
     base58.

     Content is deleted from storage after some time. Once deleted,
     the content will remain available for some time in regions that
     have it cached still. Content ids are hashes, so re-uploaded
     content will always get the same URL.

 NOTES
     * Maximum file size  :  {max_size}
     * Storage TTL        :  {store_ttl}
     * Cache TTL          :  {cache_ttl}
     * All time uploads   :  {upload_counter}

 EXAMPLES
     $ echo 'testing testing, this paste is long enough' | curl {host} -LT -
       https://{host}/deadbeef

     $ curl https://{host}/deadbeef
       testing testing, this paste is long enough

 CAVEATS
     Respect for intellectual property rights is paramount.
     Users must not post any material that infringes on the copyright
     or other intellectual property rights of others.
     This includes unauthorized copies of software, music, videos,
     and other copyrighted materials.
"""


def header_padding(host: str) -> str:
    """Spacing that centers the uppercased host between the two page names."""
    width = 3 * len(host)
    if width < HEADER_WIDTH:
        return " " * max((HEADER_WIDTH - width) // 2 + 1, 2)
    return " " * 2


def format_size(size: int) -> str:
    """Binary size, e.g. ``24 MiB`` or ``1.5 KiB``."""
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            break
        value /= 1024
    if value.is_integer():
        return f"{int(value)} {unit}"
    return f"{value:.1f} {unit}"


def format_duration(duration: timedelta) -> str:
    """Compact duration, e.g. ``7days`` or ``1day 2h 30m``."""
    seconds = int(duration.total_seconds())
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    parts = []
    if days:
        parts.append(f"{days}day" if days == 1 else f"{days}days")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)


def render_info(host: str, upload_count: int, limits: Limits = LIMITS) -> str:
    """Render the help page for requests arriving at ``host``."""
    padding = header_padding(host)
    return HELP_TEMPLATE.format(
        host=host,
        host_caps=host.upper(),
        padding=padding,
        max_size=format_size(limits.max_content_size),
        store_ttl=format_duration(limits.store_ttl),
        cache_ttl=format_duration(limits.cache_ttl),
        upload_counter=upload_count,
    )
