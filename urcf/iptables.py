"""Driving the iptables/ip6tables command line tools."""

from __future__ import annotations

import ipaddress
import re
import shutil
import subprocess
from enum import IntEnum
from typing import Any, Optional, Sequence

from urcf.lifecycle import InitHelper
from urcf.xtables_lock import XTABLES_LOCK_FILE_PATH, XtablesFileLock

_VERSION_RE = re.compile(r"v([0-9]+)\.([0-9]+)\.([0-9]+)")


class Protocol(IntEnum):
    IPV4 = 0
    IPV6 = 1


class IPTablesError(Exception):
    """An iptables command exited unsuccessfully."""

    def __init__(self, command: Sequence[str], exit_status: int, msg: str) -> None:
        self.command = list(command)
        self.exit_status = exit_status
        self.msg = msg
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"running [{' '.join(self.command)}]: exit status {self.exit_status}: {self.msg}"


def get_iptables_command(proto: Protocol) -> str:
    """Name of the tool for the protocol: ip6tables for IPv6, else iptables."""
    if proto == Protocol.IPV6:
        return "ip6tables"
    return "iptables"


def extract_iptables_version(text: str) -> tuple[int, int, int]:
    """First three version components, e.g. "iptables v1.3.66" gives (1, 3, 66)."""
    match = _VERSION_RE.search(text)
    if match is None:
        raise ValueError(f"no iptables version found in string: {text}")
    major, minor, patch = (int(group) for group in match.groups())
    return major, minor, patch


def iptables_has_check_command(v1: int, v2: int, v3: int) -> bool:
    """True from 1.4.11 on, when --check was added."""
    return (v1, v2, v3) >= (1, 4, 11)


def iptables_has_wait_command(v1: int, v2: int, v3: int) -> bool:
    """True from 1.4.20 on, when --wait was added."""
    return (v1, v2, v3) >= (1, 4, 20)


def _append_subnet(addr: str) -> str:
    if "/" in addr:
        return addr
    if "." not in addr:
        return addr + "/128"
    return addr + "/32"


def _looks_like_ip(text: str) -> bool:
    try:
        ipaddress.ip_address(text)
        return True
    except ValueError:
        pass
    if "/" in text:
        try:
            ipaddress.ip_network(text, strict=False)
            return True
        except ValueError:
            return False
    return False


class IPTables:
    """Runs iptables (or ip6tables) with the features its version supports."""

    def __init__(
        self,
        proto: Protocol = Protocol.IPV4,
        path: Optional[str] = None,
        lock_path: str = XTABLES_LOCK_FILE_PATH,
    ) -> None:
        if path is None:
            command = get_iptables_command(proto)
            path = shutil.which(command)
            if path is None:
                raise FileNotFoundError(f'executable file "{command}" not found in $PATH')
        try:
            version = extract_iptables_version(self._version_string(path))
        except (OSError, subprocess.CalledProcessError, ValueError) as exc:
            raise RuntimeError(f"error checking iptables version: {exc}") from exc
        self._path = path
        self._proto = proto
        self._lock_path = lock_path
        self._has_check = iptables_has_check_command(*version)
        self._has_wait = iptables_has_wait_command(*version)

    @staticmethod
    def _version_string(path: str) -> str:
        result = subprocess.run(
            [path, "--version"], stdout=subprocess.PIPE, text=True, check=True
        )
        return result.stdout

    @property
    def proto(self) -> Protocol:
        return self._proto

    @property
    def path(self) -> str:
        return self._path

    @property
    def has_check(self) -> bool:
        return self._has_check

    @property
    def has_wait(self) -> bool:
        return self._has_wait

    def exists(self, table: str, chain: str, *args: str) -> bool:
        """Whether the rule spec is present in the table/chain."""
        if not self._has_check:
            return self._exists_for_old_iptables(table, chain, args)
        try:
            self._run("-t", table, "-C", chain, *args)
        except IPTablesError as exc:
            if exc.exit_status == 1:
                return False
            raise
        return True

    def insert(self, table: str, chain: str, pos: int, *args: str) -> None:
        self._run("-t", table, "-I", chain, str(pos), *args)

    def append(self, table: str, chain: str, *args: str) -> None:
        self._run("-t", table, "-A", chain, *args)

    def append_unique(self, table: str, chain: str, *args: str) -> None:
        """Append the rule spec unless it is already present."""
        if not self.exists(table, chain, *args):
            self.append(table, chain, *args)

    def delete(self, table: str, chain: str, *args: str) -> None:
        self._run("-t", table, "-D", chain, *args)

    def list(self, table: str, chain: str) -> list[str]:
        return self._execute_list("-t", table, "-S", chain)

    def list_with_counters(self, table: str, chain: str) -> list[str]:
        return self._execute_list("-t", table, "-v", "-S", chain)

    def list_chains(self, table: str) -> list[str]:
        """Names of the built-in (-P) and user (-N) chains of the table."""
        chains = []
        for line in self._execute_list("-t", table, "-S"):
            if not (line.startswith("-P") or line.startswith("-N")):
                break
            chains.append(line.split()[1])
        return chains

    def stats(self, table: str, chain: str) -> list[list[str]]:
        """Rules with packet and byte counters, one list of ten fields per rule.

        Fields: pkts, bytes, target, prot, opt, in, out, source, destination,
        options.
        """
        lines = self._execute_list("-t", table, "-L", chain, "-n", "-v", "-x")
        ipv6 = self._proto == Protocol.IPV6
        rows = []
        for line in lines[2:]:
            fields = line.strip().split()
            # ip6tables leaves the "opt" column blank, which naive splitting loses.
            if ipv6 and _looks_like_ip(fields[6]):
                fields = fields[:4] + ["  "] + fields[4:]
            fields[7] = _append_subnet(fields[7])
            fields[8] = _append_subnet(fields[8])
            rows.append(fields[:9] + [" ".join(fields[9:])])
        return rows

    def new_chain(self, table: str, chain: str) -> None:
        """Create a chain; fails if it already exists."""
        self._run("-t", table, "-N", chain)

    def clear_chain(self, table: str, chain: str) -> None:
        """Flush the chain, creating it first if it does not exist."""
        try:
            self.new_chain(table, chain)
        except IPTablesError as exc:
            if exc.exit_status != 1:
                raise
            self._run("-t", table, "-F", chain)

    def rename_chain(self, table: str, old_chain: str, new_chain: str) -> None:
        self._run("-t", table, "-E", old_chain, new_chain)

    def delete_chain(self, table: str, chain: str) -> None:
        """Delete the chain, which must be empty."""
        self._run("-t", table, "-X", chain)

    def change_policy(self, table: str, chain: str, target: str) -> None:
        self._run("-t", table, "-P", chain, target)

    def _execute_list(self, *args: str) -> list[str]:
        rules = self._run(*args).split("\n")
        if rules and rules[-1] == "":
            rules.pop()
        return rules

    def _exists_for_old_iptables(self, table: str, chain: str, rulespec: Sequence[str]) -> bool:
        wanted = " ".join(["-A", chain, *rulespec])
        return wanted in self._run("-t", table, "-S")

    def _run(self, *args: str) -> str:
        argv = [self._path, *args]
        if self._has_wait:
            argv.append("--wait")
            return self._execute(argv)
        with XtablesFileLock(self._lock_path) as lock:
            lock.try_lock()
            return self._execute(argv)

    @staticmethod
    def _execute(argv: list[str]) -> str:
        result = subprocess.run(
            argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, check=False
        )
        if result.returncode != 0:
            status = result.returncode if result.returncode >= 0 else -1
            raise IPTablesError(argv, status, result.stderr)
        return result.stdout


class NetfilterService(InitHelper):
    """Lifecycle holder for the netfilter subsystem."""

    def initialize(self, *args: Any) -> None:
        return self.call_initialize(lambda: None)

    def uninitialize(self, *args: Any) -> None:
        return self.call_uninitialize(lambda: None)