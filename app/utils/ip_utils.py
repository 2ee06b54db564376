"""
Utilidades de IP

Obtiene la IP del cliente para el límite de intentos de login. Solo se
confía en X-Real-IP cuando la conexión viene del proxy local.
"""

import ipaddress
from typing import List, Union

from fastapi import Request

TRUSTED_PROXIES: List[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]] = [
    ipaddress.ip_address("127.0.0.1"),
    ipaddress.ip_address("::1"),
]


def is_trusted_proxy(client_ip: str) -> bool:
    try:
        return ipaddress.ip_address(client_ip) in TRUSTED_PROXIES
    except ValueError:
        return False


def get_client_ip(request: Request) -> str:
    """IP directa, o X-Real-IP si la conexión viene de un proxy de confianza."""
    direct_ip = request.client.host if request.client else "unknown"

    if is_trusted_proxy(direct_ip):
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

    return direct_ip


def normalize_ip_for_rate_limit(ip: str) -> str:
    """
    Normaliza la IP para que IPv4 e IPv6 equivalentes compartan contador.

    - ::1 → 127.0.0.1
    - ::ffff:x.x.x.x → x.x.x.x
    """
    if not ip or ip == "unknown":
        return ip

    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return ip

    if isinstance(addr, ipaddress.IPv6Address):
        if addr == ipaddress.IPv6Address("::1"):
            return "127.0.0.1"
        if addr.ipv4_mapped:
            return str(addr.ipv4_mapped)

    return str(addr)
