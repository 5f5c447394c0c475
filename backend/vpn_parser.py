"""
VPN configuration classification and field extraction

A best-effort line scan over WireGuard (.conf) and OpenVPN (.ovpn) files.
Unknown directives are ignored and malformed lines never raise; the result
always carries ``is_valid`` and, when invalid, a readable ``error``.
Key and certificate material is detected but never copied out.
"""
from typing import List, Optional

from models import ParsedVpnConfig, VpnKind

OPENVPN_DEFAULT_PORT = "1194"

UNKNOWN_FORMAT_ERROR = (
    "Unrecognized VPN configuration. Expected a WireGuard config "
    "([Interface] and [Peer] sections) or an OpenVPN client config "
    "(client with a remote server or <ca> block)."
)


def _lines(content: str) -> List[str]:
    return [line.strip() for line in content.splitlines()]


def _value_after_equals(line: str) -> Optional[str]:
    if "=" not in line:
        return None
    return line.split("=", 1)[1].strip()


def _missing_error(missing: List[str]) -> Optional[str]:
    if not missing:
        return None
    return f"Missing required fields: {', '.join(missing)}"


def is_wireguard(content: str) -> bool:
    return "[Interface]" in content and "[Peer]" in content


def is_openvpn(content: str) -> bool:
    if "client" not in content:
        return False
    return "<ca>" in content or any(line.startswith("remote ") for line in _lines(content))


def parse_wireguard(content: str) -> ParsedVpnConfig:
    endpoint = dns = address = None
    has_private_key = has_public_key = False

    for line in _lines(content):
        if line.startswith("Endpoint"):
            endpoint = endpoint or _value_after_equals(line)
        elif line.startswith("DNS"):
            dns = dns or _value_after_equals(line)
        elif line.startswith("Address"):
            address = address or _value_after_equals(line)
        elif line.startswith("PrivateKey"):
            has_private_key = True
        elif line.startswith("PublicKey"):
            has_public_key = True

    missing = []
    if not has_private_key:
        missing.append("PrivateKey")
    if not has_public_key:
        missing.append("PublicKey")
    if not endpoint:
        missing.append("Endpoint")

    return ParsedVpnConfig(
        vpn_type=VpnKind.WIREGUARD,
        endpoint=endpoint or None,
        dns=dns or None,
        address=address or None,
        is_valid=not missing,
        error=_missing_error(missing),
    )


def parse_openvpn(content: str) -> ParsedVpnConfig:
    endpoint = dns = None
    has_ca = False

    for line in _lines(content):
        if line.startswith("remote ") and endpoint is None:
            parts = line.split()
            if len(parts) >= 2:
                port = parts[2] if len(parts) >= 3 else OPENVPN_DEFAULT_PORT
                endpoint = f"{parts[1]}:{port}"
        elif line.startswith("dhcp-option DNS"):
            parts = line.split()
            if len(parts) >= 3 and dns is None:
                dns = parts[-1]
        elif line == "<ca>" or line.startswith("ca "):
            has_ca = True

    missing = []
    if endpoint is None:
        missing.append("remote server")
    if not has_ca:
        missing.append("CA certificate")

    return ParsedVpnConfig(
        vpn_type=VpnKind.OPENVPN,
        endpoint=endpoint,
        dns=dns,
        is_valid=not missing,
        error=_missing_error(missing),
    )


def parse_vpn_config(content: str) -> ParsedVpnConfig:
    """Classify ``content`` and extract its connection summary."""
    if is_wireguard(content):
        return parse_wireguard(content)
    if is_openvpn(content):
        return parse_openvpn(content)
    return ParsedVpnConfig(
        vpn_type=VpnKind.WIREGUARD,
        is_valid=False,
        error=UNKNOWN_FORMAT_ERROR,
    )
