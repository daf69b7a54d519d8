import json

from ping_monitor import config
from ping_monitor.preferences import JsonFilePreferences, MemoryPreferences, MonitorConfig


def test_defaults():
    cfg = MonitorConfig(MemoryPreferences())
    assert cfg.include_apple
    assert cfg.include_microsoft
    assert not cfg.include_router
    assert cfg.include_vpn_check
    assert cfg.ping_interval == 10
    assert cfg.ignored_timeouts == 1
    assert cfg.custom_hosts == ()


def test_every_change_is_written_through():
    store = MemoryPreferences()
    cfg = MonitorConfig(store)
    cfg.include_router = True
    cfg.include_apple = False
    cfg.ping_interval = 30
    cfg.ignored_timeouts = 2
    assert store.values[config.KEY_INCLUDE_ROUTER] is True
    assert store.values[config.KEY_INCLUDE_APPLE] is False
    assert store.values[config.KEY_PING_INTERVAL] == 30
    assert store.values[config.KEY_IGNORED_TIMEOUTS] == 2


def test_limits_are_clamped():
    cfg = MonitorConfig(
        MemoryPreferences({config.KEY_PING_INTERVAL: 0, config.KEY_IGNORED_TIMEOUTS: -3})
    )
    assert cfg.ping_interval == 1
    assert cfg.ignored_timeouts == 0
    cfg.ping_interval = -5
    assert cfg.ping_interval == 1


def test_custom_hosts_keep_order_without_duplicates():
    store = MemoryPreferences()
    cfg = MonitorConfig(store)
    assert cfg.add_custom_host(" example.com ")
    assert cfg.add_custom_host("github.com")
    assert not cfg.add_custom_host("example.com")
    assert not cfg.add_custom_host("   ")
    assert cfg.custom_hosts == ("example.com", "github.com")
    assert store.values[config.KEY_CUSTOM_DOMAINS] == ["example.com", "github.com"]

    cfg.custom_hosts = ["b", "a", "b", "c"]
    assert cfg.custom_hosts == ("b", "a", "c")
    cfg.remove_custom_hosts_at([0, 2])
    assert cfg.custom_hosts == ("a",)
    assert cfg.remove_custom_host("a")
    assert not cfg.remove_custom_host("a")
    assert store.values[config.KEY_CUSTOM_DOMAINS] == []


def test_wrong_types_fall_back_to_defaults():
    store = MemoryPreferences(
        {
            config.KEY_INCLUDE_APPLE: "yes",
            config.KEY_PING_INTERVAL: True,
            config.KEY_CUSTOM_DOMAINS: ["ok.com", 3, "ok.com"],
        }
    )
    cfg = MonitorConfig(store)
    assert cfg.include_apple is True
    assert cfg.ping_interval == 10
    assert cfg.custom_hosts == ("ok.com",)


def test_json_file_round_trip(tmp_path):
    path = tmp_path / "prefs.json"
    cfg = MonitorConfig(JsonFilePreferences(str(path)))
    cfg.add_custom_host("example.com")
    cfg.include_microsoft = False

    saved = json.loads(path.read_text())
    assert saved[config.KEY_CUSTOM_DOMAINS] == ["example.com"]
    assert saved[config.KEY_INCLUDE_MICROSOFT] is False

    again = MonitorConfig(JsonFilePreferences(str(path)))
    assert again.custom_hosts == ("example.com",)
    assert not again.include_microsoft


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{not json")
    cfg = MonitorConfig(JsonFilePreferences(str(path)))
    assert cfg.ping_interval == config.DEFAULT_PING_INTERVAL_SECONDS


def test_unwritable_file_keeps_value_in_memory(tmp_path):
    path = tmp_path / "missing-dir" / "prefs.json"
    store = JsonFilePreferences(str(path))
    cfg = MonitorConfig(store)
    cfg.ignored_timeouts = 3
    assert cfg.ignored_timeouts == 3
    assert store.get_int(config.KEY_IGNORED_TIMEOUTS, 0) == 3


def test_built_in_target_names_are_not_custom_hosts():
    store = MemoryPreferences(
        {config.KEY_CUSTOM_DOMAINS: ["8.8.8.8", "example.com", "Microsoft"]}
    )
    cfg = MonitorConfig(store)
    assert cfg.custom_hosts == ("example.com",)
    for name in ("8.8.8.8", "192.168.1.1", "Apple", "Microsoft"):
        assert not cfg.add_custom_host(name)
    cfg.custom_hosts = ["Apple", "github.com"]
    assert cfg.custom_hosts == ("github.com",)
    assert store.values[config.KEY_CUSTOM_DOMAINS] == ["github.com"]
