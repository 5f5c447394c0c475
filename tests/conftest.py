"""Shared fixtures: an isolated config file, fake VPN clients and scripted OS calls."""

from pathlib import Path
from typing import List, Optional, Set, Tuple

import pytest

import config_manager
import vpn_manager
from elevation import Elevator, ProcessResult
from models import BackendConfig, VpnKind

WIREGUARD_CONF = """\
[Interface]
PrivateKey = aGVsbG8td29ybGQtcHJpdmF0ZS1rZXktbm90LXJlYWw=
Address = 10.8.0.2/32
DNS = 1.1.1.1

[Peer]
PublicKey = aGVsbG8td29ybGQtcHVibGljLWtleS1ub3QtcmVhbA==
AllowedIPs = 0.0.0.0/0
Endpoint = 1.2.3.4:51820
"""

OPENVPN_CONF = """\
client
dev tun
proto udp
remote vpn.example.com 443
dhcp-option DNS 9.9.9.9
<ca>
-----BEGIN CERTIFICATE-----
MIIB
-----END CERTIFICATE-----
</ca>
"""


class FakeElevator(Elevator):
    """Records elevated commands and replies with a scripted result."""

    name = "fake"

    def __init__(self) -> None:
        self.result: ProcessResult = ProcessResult(returncode=0)
        self.launch_error: Optional[Exception] = None
        self.calls: List[Tuple[List[str], bool]] = []

    def run(self, cmd: List[str], wait: bool = True) -> ProcessResult:
        self.calls.append((cmd, wait))
        if self.launch_error is not None:
            raise self.launch_error
        return self.result


class FakeQueries:
    """Answers the POSIX status queries from a set of running tunnel names."""

    def __init__(self) -> None:
        self.running: Set[str] = set()
        self.calls: List[List[str]] = []

    def __call__(self, cmd: List[str]) -> Tuple[bool, str]:
        self.calls.append(cmd)
        if cmd[0] == "ip":
            name = cmd[-1]
            if name in self.running:
                return True, f"7: {name}: <POINTOPOINT,NOARP,UP,LOWER_UP> mtu 1420\n"
            return False, f'Device "{name}" does not exist.\n'
        if cmd[0] == "pgrep":
            if "openvpn" in self.running:
                return True, "4242\n"
            return False, ""
        return False, ""


@pytest.fixture(autouse=True)
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the backend at a throwaway config file."""
    path = tmp_path / "config" / "vpn_backend.json"
    monkeypatch.setattr(config_manager, "CONFIG_FILE", path)
    return path


@pytest.fixture
def vpn_clients(tmp_path: Path) -> dict:
    """Install fake client binaries and register them as the only candidates."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    wg = bin_dir / "wg-quick"
    ovpn = bin_dir / "openvpn"
    wg.write_text("#!/bin/sh\n")
    ovpn.write_text("#!/bin/sh\n")

    config = BackendConfig(
        client_paths={
            VpnKind.WIREGUARD: [str(tmp_path / "missing" / "wg-quick"), str(wg)],
            VpnKind.OPENVPN: [str(ovpn)],
        },
        connect_timeout=0,
        poll_interval=0,
    )
    config_manager.save_config(config)
    return {VpnKind.WIREGUARD: str(wg), VpnKind.OPENVPN: str(ovpn)}


@pytest.fixture
def no_clients(tmp_path: Path) -> None:
    config_manager.save_config(
        BackendConfig(
            client_paths={
                VpnKind.WIREGUARD: [str(tmp_path / "nowhere" / "wg-quick")],
                VpnKind.OPENVPN: [str(tmp_path / "nowhere" / "openvpn")],
            },
            connect_timeout=0,
            poll_interval=0,
        )
    )


@pytest.fixture
def elevator(monkeypatch: pytest.MonkeyPatch) -> FakeElevator:
    fake = FakeElevator()
    monkeypatch.setattr(vpn_manager, "get_elevator", lambda name: fake)
    return fake


@pytest.fixture
def queries(monkeypatch: pytest.MonkeyPatch) -> FakeQueries:
    fake = FakeQueries()
    monkeypatch.setattr(vpn_manager, "run_command", fake)
    return fake


@pytest.fixture
def wg_config_path(tmp_path: Path) -> str:
    path = tmp_path / "profiles" / "office.conf"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(WIREGUARD_CONF)
    return str(path)


@pytest.fixture
def ovpn_config_path(tmp_path: Path) -> str:
    path = tmp_path / "profiles" / "home.ovpn"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(OPENVPN_CONF)
    return str(path)
