"""Redact sensitive account fields before they leave the API"""

from vps_monitor.models.account import MonitoredAccount, SafeAccount

MASKED_COOKIE_VALUE = "***hidden***"
IPV6_SEGMENT_MASK = "****"
IPV4_SEGMENT_MASK = "***"


def mask_cookie(cookie: str | None) -> str:
    """Replace a cookie with a fixed placeholder (empty stays empty)"""
    if not cookie:
        return ""
    return MASKED_COOKIE_VALUE


def _mask_segments(ip: str, separator: str, mask: str) -> str | None:
    segments = ip.split(separator)
    if len(segments) < 3:
        return None
    return separator.join([segments[0], *([mask] * (len(segments) - 2)), segments[-1]])


def mask_ip(ip: str | None) -> str:
    """
    Keep only the first and last segment of an address

    2602:294:0:dc:1234:4321:5019:0001 -> 2602:****:****:****:****:****:****:0001
    192.168.1.100 -> 192.***.***.100
    """
    if not ip:
        return ""

    if ":" in ip:
        masked = _mask_segments(ip, ":", IPV6_SEGMENT_MASK)
        if masked:
            return masked

    if "." in ip:
        masked = _mask_segments(ip, ".", IPV4_SEGMENT_MASK)
        if masked:
            return masked

    return MASKED_COOKIE_VALUE


def mask_account(account: MonitoredAccount) -> SafeAccount:
    masked_ip = mask_ip(account.ip)
    return SafeAccount(
        **account.model_dump(exclude={"cookie", "ip"}),
        cookie=mask_cookie(account.cookie),
        ip=masked_ip or None,
    )


def mask_accounts(accounts: list[MonitoredAccount]) -> list[SafeAccount]:
    return [mask_account(account) for account in accounts]
