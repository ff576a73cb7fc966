from time import sleep

from dbpulse import config
from dbpulse.phases import DeletePhase, ReadPhase, UpdatePhase, WorkloadPhase, WritePhase
from dbpulse.utils import profiler
from dbpulse.workload import default_phases, rate


def test_get_settings_defaults(monkeypatch):
    for var in (
        "DB_PATH",
        "WORKLOAD_PHASE_SECONDS",
        "WORKLOAD_BATCH_SIZE",
        "RECORD_RETENTION_SECONDS",
        "CACHE_TTL_SECONDS",
        "PORT",
    ):
        monkeypatch.delenv(var, raising=False)
    settings = config.Settings(_env_file=None)
    assert settings.db_path == "database.sqlite"
    assert settings.phase_seconds == 5.0
    assert settings.batch_size == 10
    assert settings.retention_seconds == 600
    assert settings.cache_ttl_seconds == 300
    assert settings.http_port == 3005


def test_get_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("WORKLOAD_PHASE_SECONDS", "1.5")
    monkeypatch.setenv("PORT", "8080")
    settings = config.get_settings()
    assert settings.phase_seconds == 1.5
    assert settings.http_port == 8080
    assert config.get_settings() is settings


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    assert stats.peak_rss_bytes and stats.peak_rss_bytes > 0
    assert isinstance(stats.cpu_percent, float)


def test_default_phases_run_in_order():
    phases = default_phases()
    assert [p.name for p in phases] == ["write", "read", "update", "delete"]
    assert [type(p) for p in phases] == [WritePhase, ReadPhase, UpdatePhase, DeletePhase]
    assert all(isinstance(p, WorkloadPhase) for p in phases)


def test_rate_rounds_to_nearest_integer():
    assert rate(7, 3.0) == 2
    assert rate(5, 3.0) == 2
    assert rate(1000, 0.5) == 2000


def test_rate_is_zero_without_operations_or_time():
    assert rate(0, 5.0) == 0
    assert rate(10, 0.0) == 0
