# servermon

A small desktop window for keeping an eye on a handful of servers. For each
server you give a name, an IP address and a list of TCP ports. servermon
sends each server one ICMP echo request (ping) and tries a TCP connection to
each port. It then shows whether the host answered and which ports are open
or closed.

## Installing

```
pip install .
```

The window uses Tkinter from the standard library, so no other packages are
needed. Your Python must include Tk support.

## Running

```
servermon
servermon --config PATH
```

`--config PATH` chooses the configuration file. Without it the file is
`~/.servermon.cfg`.

When you start it without a configuration file, the window lists two sample
servers. If the configuration file exists at startup, its servers and
refresh interval replace the samples, and every server is checked once.

In the window you can:

- **Sync Now**: check every server at once and restart the refresh countdown.
- **Export Config** / **Import Config**: write the current list to the
  configuration file, or read it back from that file. An import checks every
  server it loads.
- **Add Server**: enter a name, an IP address and ports separated by commas.
  The dialog does not accept an address unless it is a literal IPv4 or IPv6
  address. Port entries that are not whole numbers from 0 to 65535 are
  dropped.
- **Edit** / **Remove**: change or delete the server on that card.
- **About**: a short description of the program.
- **Refresh every N seconds**: how often checks run on their own. `0` turns
  automatic refresh off. The default is 600 seconds.

Each server card shows the address, ONLINE or OFFLINE, how long ago the last
check ran, and every port marked OPEN or CLOSED, four ports to a column.

The server list and refresh interval are saved to the configuration file when
the window closes. A file that cannot be read, parsed or written is reported
in the log, and the program keeps running.

### Notes on checks

- A ping waits up to 4 seconds for a reply. A port probe waits up to
  0.5 seconds for a connection.
- The ping first tries an unprivileged ICMP datagram socket and then a raw
  socket. If the system allows neither, for example a raw socket without
  administrator rights, the server is always shown as OFFLINE. Port probes
  still run.
- Checks run one after another in the window's own thread. While a check is
  running the window does not respond.

## Configuration file

The file is JSON:

```json
{
  "servers": [
    {"name": "Server A", "ip": "192.1.1.1", "ports": [22, 80]}
  ],
  "refresh_interval_secs": 600
}
```

Ports are always written sorted. When the file is read, fields it does not
know are ignored. A missing field, a port outside 0–65535 or a negative
interval raises `servermon.config.ConfigError`.

## Using it from Python

```python
from servermon.app import AppState

state = AppState(config_path="monitor.cfg", load=False)
state.add_server("web", "192.0.2.10", "443, 80")   # ports sorted: [80, 443]
state.update_status()
for server in state.servers:
    print(server.name, server.is_online, server.open_ports)
state.export_config()          # writes monitor.cfg
```

`AppState` also provides `edit_server`, `remove_server`,
`set_refresh_interval`, `refresh_if_due`, `refresh_now`,
`seconds_until_refresh`, `import_config`, `to_config` and `save_on_exit`.
`add_server` and `edit_server` raise `ValueError` for an address that is not
valid.

Other modules:

- `servermon.server`: `Server`, `ServerConfig`, `parse_ports`,
  `format_ports`, `is_valid_ip`, `ping`, `probe_port`, `check_server_status`.
- `servermon.config`: `AppConfig`, `ConfigError`, `default_config_path`,
  `config_to_json`, `config_from_json`, `export_config`, `import_config`.
- `servermon.gui`: `ServerMonitorWindow`, `port_columns`, `port_label` and
  `main`, which the `servermon` command runs.

## What it does not do

- It keeps no history of results. Only the outcome of the latest check is
  shown, and check results are not saved.
- It does not send alerts or notifications when a server goes down.

## Running the tests

```
pip install .[test]
pytest
```