"""
Host specs shown next to the benchmark numbers.

Every call reads the counters fresh; nothing is cached. A metric that cannot
be read is reported as "Unknown" instead of failing the request.
"""

from __future__ import annotations

import os
import platform
from typing import Dict, Optional

import psutil

from dbpulse.utils.logging import get_logger

log = get_logger(__name__)

UNKNOWN = "Unknown"
GIB = 1024**3
MIB = 1024**2
# cgroup v1 reports "unlimited" as a huge page-aligned value
_CGROUP_V1_UNLIMITED = 9223372036854771712


def _format_memory(mem_bytes: int) -> str:
    mem_gb = mem_bytes / GIB
    if mem_gb >= 1:
        return f"{mem_gb:.1f}GB"
    return f"{mem_bytes / MIB:.0f}MB"


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, "r") as f:
            return f.read().strip()
    except OSError:
        return None


def get_container_resources() -> Dict[str, Optional[str]]:
    """
    Get container resource constraints.

    Reads from environment variables or cgroup files when running in a container.
    Returns dict with 'cpus' and 'memory' keys.
    """
    resources: Dict[str, Optional[str]] = {
        "cpus": os.environ.get("BENCHMARK_CPU_LIMIT") or None,
        "memory": os.environ.get("BENCHMARK_MEMORY_LIMIT") or None,
    }

    if resources["cpus"] is None:
        # cgroup v2: "<quota> <period>" or "max <period>"
        content = _read_text("/sys/fs/cgroup/cpu.max")
        if content:
            parts = content.split()
            if len(parts) == 2 and parts[0] != "max":
                try:
                    resources["cpus"] = f"{int(parts[0]) / int(parts[1]):.1f}"
                except (ValueError, ZeroDivisionError):
                    pass

    if resources["cpus"] is None:
        quota = _read_text("/sys/fs/cgroup/cpu/cpu.cfs_quota_us")
        period = _read_text("/sys/fs/cgroup/cpu/cpu.cfs_period_us")
        if quota and period:
            try:
                if int(quota) > 0:
                    resources["cpus"] = f"{int(quota) / int(period):.1f}"
            except (ValueError, ZeroDivisionError):
                pass

    if resources["memory"] is None:
        content = _read_text("/sys/fs/cgroup/memory.max")
        if content and content != "max":
            try:
                resources["memory"] = _format_memory(int(content))
            except ValueError:
                pass

    if resources["memory"] is None:
        content = _read_text("/sys/fs/cgroup/memory/memory.limit_in_bytes")
        if content:
            try:
                mem_bytes = int(content)
                if mem_bytes < _CGROUP_V1_UNLIMITED:
                    resources["memory"] = _format_memory(mem_bytes)
            except ValueError:
                pass

    return resources


def _cpu_model() -> str:
    cpuinfo = _read_text("/proc/cpuinfo")
    if cpuinfo:
        for line in cpuinfo.splitlines():
            if line.lower().startswith("model name"):
                return line.split(":", 1)[1].strip()
    return platform.processor() or UNKNOWN


def _percent(value: float) -> str:
    return f"{round(min(max(value, 0.0), 100.0), 1)}%"


def collect_specs() -> Dict[str, str]:
    """
    Snapshot of host CPU, memory and platform as display strings.

    CPU usage is the one-minute load average divided by the logical CPU count;
    memory usage is (total - available) / total. Both are percentages with one
    decimal, clamped to 0..100.
    """
    specs: Dict[str, str] = {
        "vCPUs": UNKNOWN,
        "CPU model": UNKNOWN,
        "Platform": f"{platform.system().lower()}, {platform.machine()}, {platform.release()}",
        "Total RAM": UNKNOWN,
        "CPU usage": UNKNOWN,
        "Memory usage": UNKNOWN,
    }

    cpus = psutil.cpu_count(logical=True)
    if cpus:
        specs["vCPUs"] = str(cpus)
    specs["CPU model"] = _cpu_model()

    try:
        memory = psutil.virtual_memory()
        specs["Total RAM"] = f"{round(memory.total / GIB)}GB"
        if memory.total:
            specs["Memory usage"] = _percent((memory.total - memory.available) / memory.total * 100)
    except (psutil.Error, OSError) as exc:
        log.warning("Memory counters unavailable", extra={"error": str(exc)})

    if cpus:
        try:
            load_1m = psutil.getloadavg()[0]
            specs["CPU usage"] = _percent(load_1m / cpus * 100)
        except (psutil.Error, OSError) as exc:
            log.warning("Load average unavailable", extra={"error": str(exc)})

    resources = get_container_resources()
    if resources["cpus"]:
        specs["Container CPUs"] = resources["cpus"]
    if resources["memory"]:
        specs["Container memory"] = resources["memory"]

    return specs


__all__ = ["collect_specs", "get_container_resources"]
