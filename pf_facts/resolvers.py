"""Built-in fact resolvers.

Each resolver reads one area of the host (kernel, OS, CPU, memory, network,
...) and adds its facts, structured and legacy, to the collection it is given.
"""

from __future__ import annotations

import getpass
import os
import platform
import socket
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import psutil

from pf_common.version import __version__

if TYPE_CHECKING:
    from pf_facts.collection import FactCollection


Resolver = Callable[["FactCollection"], None]

_UNITS = ("bytes", "KiB", "MiB", "GiB", "TiB", "PiB")


def human_bytes(value: int) -> str:
    """Render a byte count the way facter does, e.g. ``15.54 GiB``."""
    amount = float(value)
    for unit in _UNITS:
        if amount < 1024 or unit == _UNITS[-1]:
            if unit == "bytes":
                return f"{int(amount)} bytes"
            return f"{amount:.2f} {unit}"
        amount /= 1024
    return f"{value} bytes"


def _read_os_release(path: Path = Path("/etc/os-release")) -> dict[str, str]:
    """Parse /etc/os-release when available."""
    data: dict[str, str] = {}
    if not path.exists():
        return data
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        if "=" not in line or line.lstrip().startswith("#"):
            continue
        key, val = line.split("=", 1)
        data[key.strip()] = val.strip().strip('"')
    return data


def _os_family(os_id: str, id_like: str, system: str) -> str:
    tokens = {os_id.lower(), *id_like.lower().split()}
    if tokens & {"debian", "ubuntu"}:
        return "Debian"
    if tokens & {"rhel", "fedora", "centos"}:
        return "RedHat"
    if tokens & {"suse", "sles", "opensuse"}:
        return "Suse"
    if "arch" in tokens:
        return "Archlinux"
    if "alpine" in tokens:
        return "Alpine"
    if system == "Darwin":
        return "Darwin"
    if system == "Windows":
        return "windows"
    return system


def resolve_kernel(facts: FactCollection) -> None:
    uname = platform.uname()
    release = uname.release
    version = release.split("-", 1)[0]
    facts.add("kernel", uname.system)
    facts.add("kernelrelease", release)
    facts.add("kernelversion", version)
    facts.add("kernelmajversion", ".".join(version.split(".")[:2]))


def resolve_os(facts: FactCollection) -> None:
    uname = platform.uname()
    os_release = _read_os_release()
    name = os_release.get("NAME", "").split()[0] if os_release.get("NAME") else uname.system
    full = os_release.get("VERSION_ID") or uname.release
    parts = full.split(".")
    release = {"full": full, "major": parts[0]}
    if len(parts) > 1:
        release["minor"] = parts[1]
    family = _os_family(os_release.get("ID", ""), os_release.get("ID_LIKE", ""), uname.system)
    info: dict[str, Any] = {
        "name": name,
        "family": family,
        "architecture": uname.machine,
        "hardware": uname.machine,
        "release": release,
    }
    if os_release:
        info["distro"] = {
            "id": os_release.get("ID", ""),
            "codename": os_release.get("VERSION_CODENAME", ""),
            "description": os_release.get("PRETTY_NAME", ""),
            "release": dict(release),
        }
    facts.add("os", info)
    facts.add("operatingsystem", name, legacy=True)
    facts.add("osfamily", family, legacy=True)
    facts.add("operatingsystemrelease", full, legacy=True)
    facts.add("operatingsystemmajrelease", release["major"], legacy=True)
    facts.add("architecture", uname.machine, legacy=True)
    facts.add("hardwaremodel", uname.machine, legacy=True)


def _cpu_models() -> list[str]:
    cpuinfo = Path("/proc/cpuinfo")
    models: list[str] = []
    if cpuinfo.exists():
        for line in cpuinfo.read_text(encoding="utf-8", errors="replace").splitlines():
            key, _, value = line.partition(":")
            if key.strip() == "model name":
                models.append(value.strip())
    if not models and platform.processor():
        models = [platform.processor()] * (psutil.cpu_count(logical=True) or 1)
    return models


def resolve_processors(facts: FactCollection) -> None:
    logical = psutil.cpu_count(logical=True) or 0
    physical = psutil.cpu_count(logical=False) or 0
    info: dict[str, Any] = {
        "count": logical,
        "physicalcount": physical,
        "models": _cpu_models(),
        "isa": platform.processor() or platform.machine(),
    }
    try:
        freq = psutil.cpu_freq()
    except (OSError, NotImplementedError):
        freq = None
    if freq and freq.max:
        info["speed"] = f"{freq.max / 1000:.2f} GHz"
    facts.add("processors", info)
    facts.add("processorcount", logical, legacy=True)
    facts.add("physicalprocessorcount", physical, legacy=True)
    for index, model in enumerate(info["models"]):
        facts.add(f"processor{index}", model, legacy=True)


def resolve_memory(facts: FactCollection) -> None:
    vm = psutil.virtual_memory()
    swap = psutil.swap_memory()
    used = vm.total - vm.available
    system = {
        "total": human_bytes(vm.total),
        "total_bytes": vm.total,
        "available": human_bytes(vm.available),
        "available_bytes": vm.available,
        "used": human_bytes(used),
        "used_bytes": used,
        "capacity": f"{(used / vm.total * 100) if vm.total else 0:.2f}%",
    }
    memory: dict[str, Any] = {"system": system}
    if swap.total:
        memory["swap"] = {
            "total": human_bytes(swap.total),
            "total_bytes": swap.total,
            "available": human_bytes(swap.free),
            "available_bytes": swap.free,
            "used": human_bytes(swap.used),
            "used_bytes": swap.used,
            "capacity": f"{swap.percent:.2f}%",
        }
    facts.add("memory", memory)
    facts.add("memorysize", system["total"], legacy=True)
    facts.add("memoryfree", system["available"], legacy=True)
    facts.add("memorysize_mb", f"{vm.total / 1024 / 1024:.2f}", legacy=True)
    facts.add("memoryfree_mb", f"{vm.available / 1024 / 1024:.2f}", legacy=True)


def _interfaces() -> dict[str, dict[str, Any]]:
    interfaces: dict[str, dict[str, Any]] = {}
    stats = psutil.net_if_stats()
    for name, addrs in psutil.net_if_addrs().items():
        entry: dict[str, Any] = {}
        for addr in addrs:
            if addr.family == socket.AF_INET:
                entry.setdefault("ip", addr.address)
                if addr.netmask:
                    entry.setdefault("netmask", addr.netmask)
            elif addr.family == socket.AF_INET6:
                entry.setdefault("ip6", addr.address.split("%", 1)[0])
            elif addr.family == psutil.AF_LINK:
                entry.setdefault("mac", addr.address)
        if name in stats and stats[name].mtu:
            entry["mtu"] = stats[name].mtu
        interfaces[name] = entry
    return interfaces


def _primary_interface(interfaces: dict[str, dict[str, Any]]) -> str | None:
    for name in sorted(interfaces):
        address = interfaces[name].get("ip", "")
        if address and not address.startswith("127."):
            return name
    return None


def resolve_networking(facts: FactCollection) -> None:
    hostname = socket.gethostname().split(".", 1)[0]
    fqdn = socket.getfqdn() or hostname
    domain = fqdn.split(".", 1)[1] if "." in fqdn else ""
    interfaces = _interfaces()
    primary = _primary_interface(interfaces)
    info: dict[str, Any] = {
        "hostname": hostname,
        "fqdn": fqdn,
        "interfaces": interfaces,
    }
    if domain:
        info["domain"] = domain
    if primary:
        info["primary"] = primary
        for key in ("ip", "ip6", "mac", "mtu", "netmask"):
            if key in interfaces[primary]:
                info[key] = interfaces[primary][key]
    facts.add("networking", info)
    facts.add("hostname", hostname, legacy=True)
    facts.add("fqdn", fqdn, legacy=True)
    if domain:
        facts.add("domain", domain, legacy=True)
    facts.add("ipaddress", info.get("ip"), legacy=True)
    facts.add("macaddress", info.get("mac"), legacy=True)
    facts.add("interfaces", ",".join(sorted(interfaces)), legacy=True)


def resolve_uptime(facts: FactCollection) -> None:
    seconds = max(int(time.time() - psutil.boot_time()), 0)
    hours = seconds // 3600
    days = seconds // 86400
    if days:
        label = f"{days} day" if days == 1 else f"{days} days"
    else:
        label = f"{hours}:{(seconds % 3600) // 60:02d} hours"
    facts.add(
        "system_uptime",
        {"seconds": seconds, "hours": hours, "days": days, "uptime": label},
    )
    facts.add("uptime", label, legacy=True)
    facts.add("uptime_seconds", seconds, legacy=True)
    facts.add("uptime_hours", hours, legacy=True)
    facts.add("uptime_days", days, legacy=True)


def resolve_timezone(facts: FactCollection) -> None:
    facts.add("timezone", datetime.now().astimezone().tzname())


def resolve_identity(facts: FactCollection) -> None:
    identity: dict[str, Any] = {"user": getpass.getuser()}
    if hasattr(os, "getuid"):
        identity["uid"] = os.getuid()
        identity["gid"] = os.getgid()
        identity["privileged"] = os.geteuid() == 0
    facts.add("identity", identity)
    facts.add("id", identity["user"], legacy=True)
    if "gid" in identity:
        facts.add("gid", identity["gid"], legacy=True)


def resolve_path(facts: FactCollection) -> None:
    facts.add("path", os.environ.get("PATH"))


def resolve_facterversion(facts: FactCollection) -> None:
    facts.add("facterversion", __version__)


def resolve_python(facts: FactCollection) -> None:
    """Facts about the interpreter that runs custom facts."""
    facts.add(
        "python",
        {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "platform": sys.platform,
            "executable": sys.executable or "",
        },
    )
    facts.add("pythonversion", platform.python_version(), legacy=True)


DEFAULT_RESOLVERS: tuple[Resolver, ...] = (
    resolve_kernel,
    resolve_os,
    resolve_processors,
    resolve_memory,
    resolve_networking,
    resolve_uptime,
    resolve_timezone,
    resolve_identity,
    resolve_path,
    resolve_facterversion,
)
SCRIPTING_RESOLVERS: tuple[Resolver, ...] = (resolve_python,)


def default_resolvers(include_scripting: bool) -> tuple[Resolver, ...]:
    if include_scripting:
        return DEFAULT_RESOLVERS + SCRIPTING_RESOLVERS
    return DEFAULT_RESOLVERS
