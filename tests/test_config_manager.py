"""Tests for configuration loading and the client path lookup table."""

import json

import config_manager
from models import BackendConfig, VpnKind


def test_defaults_when_file_missing(config_file):
    assert not config_file.exists()

    config = config_manager.load_config()

    assert config.config_path is None
    assert config.elevation == "auto"
    assert config.default_tunnel_name == "streamtv_vpn"
    assert config.openvpn_tunnel_name == "OpenVPN"


def test_save_creates_directory_and_writes_json(config_file):
    config_manager.save_config(BackendConfig(auto_connect=False, connect_timeout=2.5))

    data = json.loads(config_file.read_text())
    assert data["connect_timeout"] == 2.5
    assert data["vpn_type"] is None


def test_client_paths_are_keyed_by_kind_name(config_file):
    config_manager.save_config(BackendConfig(client_paths={VpnKind.OPENVPN: ["/opt/openvpn/sbin/openvpn"]}))

    data = json.loads(config_file.read_text())
    assert data["client_paths"] == {"OpenVPN": ["/opt/openvpn/sbin/openvpn"]}
    assert config_manager.load_config().client_paths == {VpnKind.OPENVPN: ["/opt/openvpn/sbin/openvpn"]}


def test_two_default_candidates_per_client():
    for platform, table in config_manager.DEFAULT_CLIENT_PATHS.items():
        for kind in VpnKind:
            assert len(table[kind]) == 2, (platform, kind)


def test_candidates_fall_back_to_platform_defaults():
    config = BackendConfig(client_paths={VpnKind.OPENVPN: ["/opt/openvpn"]})

    assert config_manager.client_candidates(VpnKind.OPENVPN, config) == ["/opt/openvpn"]
    assert config_manager.client_candidates(VpnKind.WIREGUARD, config) == (
        config_manager.DEFAULT_CLIENT_PATHS[config_manager.PLATFORM][VpnKind.WIREGUARD]
    )


def test_candidates_are_a_copy():
    candidates = config_manager.client_candidates(VpnKind.WIREGUARD, BackendConfig())
    candidates.append("/tmp/evil")

    assert "/tmp/evil" not in config_manager.DEFAULT_CLIENT_PATHS[config_manager.PLATFORM][VpnKind.WIREGUARD]


def test_safe_load_falls_back_on_invalid_json(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("{not json")

    assert config_manager.load_config_or_default() == BackendConfig()


def test_safe_load_falls_back_on_wrong_shape(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("[1, 2, 3]")

    assert config_manager.load_config_or_default() == BackendConfig()


def test_safe_load_reads_valid_file(config_file):
    config_manager.save_config(BackendConfig(default_tunnel_name="claudetv_vpn"))

    assert config_manager.load_config_or_default().default_tunnel_name == "claudetv_vpn"


def test_default_origins_are_explicit():
    origins = BackendConfig().allowed_origins

    assert "*" not in origins
    assert "tauri://localhost" in origins
