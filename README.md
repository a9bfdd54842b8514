# urcf

Building blocks for a small service engine that manages plugins and processes
on a Linux host.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## What is inside

- `urcf.semver`: `parse_semver` and `SemanticVersion`. You can compare
  versions with `compare`, `detail_compare` and `compatible`. `from_json` reads
  a version from JSON and `to_json` writes one. A string with no dots parses
  to an invalid version. Comparing an invalid version raises
  `SemanticVersionError`.
- `urcf.lifecycle`: `InitHelper`. It makes sure initialisation and teardown
  each run only once in turn. A repeated call raises `LifecycleError`.
- `urcf.enum_names`: `string_name` and `IntName` give readable names for
  numeric codes. A value that has no name of its own is shown as
  `<nearest smaller name>+<offset>`.
- `urcf.netutil`: `parse_scheme_address` and `convert_to_scheme_address`
  convert between the address strings `tcp://`, `tcp4://`, `tcp6://` and
  `unix://` and the objects `TCPAddress` and `UnixAddress`. The module also
  has `join_path`, `split2`, `has_elem` and `last_char`. For local listeners
  it has `listener`, which opens loopback TCP or a temporary Unix socket, and
  `get_random_listener_addr`.
- `urcf.xtables_lock`: `XtablesFileLock` takes an exclusive lock on the
  xtables lock file without blocking. It does its best: when another process
  already holds the lock, `try_lock` returns an unlocker that does nothing.
- `urcf.iptables`: `IPTables` runs the installed `iptables` or `ip6tables`
  program. It lists, adds, inserts and deletes rules and chains. It can also
  change chain policies and read rule counters with `stats`. The version of
  the program decides two things: whether `--check` and `--wait` are used,
  and whether the xtables lock is taken. A command that fails raises
  `IPTablesError`, which carries the exit status and the stderr text.
  `NetfilterService` only tracks its initialise/uninitialise state.
- `urcf.configuration`: `ConfigurationService` is a tree of dotted
  configuration keys, such as `a.b.c`, made of `ConfigNode` objects. Keys are
  read with `get`, written with `put` and removed with `delete`. Parent nodes
  that are missing are created as empty placeholders. A key that does not
  exist raises `KeyNotFoundError`. By default the entries are kept in memory.
  You can pass any repository object that has `find_all`, `insert_config` and
  `delete_config_by_key`. `sync` loads the repository's entries into the
  tree.
- `urcf.global_config`: `GlobalConfigService`. `initialize(path)` reads a
  YAML file of the form `rpc: {port: ...}` and
  `sys: {work-path, database-path, plugin-path, plugin-webs}`. The values in
  the file are laid over the defaults: port 8228, `./`, `./database` and
  `./plugin`. `get` returns the current `GlobalConfig`. `write` replaces the
  configuration and saves it back to the file.
- `urcf.plugin_manifest`: `PluginManifest.from_mapping` builds a manifest,
  with its `Package` and `License` entries, from parsed `manifest.yml` data.
  Known architectures become `Architecture` members.
- `urcf.log_service`: `parse_json` splits a JSON log line into a `LogEntry`
  and its remaining fields. `forward_line` logs one line at the level the
  line names. `wrap_reader` passes every line of a stream to a
  `logging.Logger` from a background thread. A line that is not JSON is
  logged at info level. A JSON line with an unknown level is logged at debug
  level.
- `urcf.watchdog`: `WatchDog` waits on watched processes. Every process that
  exits while it is being watched is put on the queue returned by `deaths()`.
  A watched object needs a `name` and a `process` whose `wait()` blocks until
  the process exits. `stop_watch` stops watching without reporting the exit.

## Examples

Comparing versions:

```python
from urcf.semver import parse_semver, CompareResult

a = parse_semver("1.0.0-alpha")
b = parse_semver("1.0.0")
assert a.compare(b) is CompareResult.LT
assert parse_semver("1.2.0").compatible(parse_semver("1.3.1"))
```

Converting addresses:

```python
from urcf.netutil import parse_scheme_address, convert_to_scheme_address

addr = parse_scheme_address("tcp://127.0.0.1:8228")
print(convert_to_scheme_address(addr))  # tcp4://127.0.0.1:8228
```

Working with configuration keys:

```python
from urcf.configuration import ConfigurationService

service = ConfigurationService()
service.put("server.port", 8080)
print(service.get("server.port").value)  # 8080
print([node.key for node in service.get_root().get_all()])  # ['server']
```

## What it does not do

- There is no process manager here. Nothing starts, stops or restarts child
  processes. `WatchDog` only watches objects that the caller has already
  started.
- Nothing here opens or unpacks plugin archives, and nothing installs plugins
  or talks to them. Only the manifest data model is included.
- `ConfigurationService` keeps its entries in memory unless you give it a
  repository. There is no database storage.
- There is no command-line program or server.