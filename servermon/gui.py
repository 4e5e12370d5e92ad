"""The monitor's window: a server list with status cards and edit dialogs."""

from __future__ import annotations

import argparse
import logging
import time
from typing import Iterable, Optional, Sequence

from servermon.app import AppState
from servermon.config import ConfigError
from servermon.server import Server, format_ports

logger = logging.getLogger(__name__)

PORTS_PER_COLUMN = 4
TICK_MS = 1000
FIELD_WIDTH = 25

_GREEN = "#1a9c1a"
_RED = "#d02020"


def port_columns(ports: Iterable[int], per_column: int = PORTS_PER_COLUMN) -> list[list[int]]:
    """Split ports, sorted, into columns of at most per_column entries."""
    if per_column < 1:
        raise ValueError(f"per_column must be positive, got {per_column}")
    ordered = sorted(ports)
    return [ordered[start:start + per_column] for start in range(0, len(ordered), per_column)]


def port_label(port: int, open_ports: Iterable[int]) -> str:
    """Return the status line shown for one port."""
    state = "OPEN" if port in set(open_ports) else "CLOSED"
    return f"Port {port}: {state}"


class ServerMonitorWindow:
    """Builds and updates the monitor's widgets inside a Tk root window."""

    def __init__(self, root, state: AppState) -> None:
        import tkinter as tk

        self._tk = tk
        self.root = root
        self.state = state
        self._dialog = None

        root.title("Server Monitor")
        root.protocol("WM_DELETE_WINDOW", self._on_close)

        main = tk.Frame(root, padx=8, pady=8)
        main.pack(fill="both", expand=True)

        tk.Label(main, text="Server Monitor", font=("TkDefaultFont", 16, "bold")).pack(anchor="w")

        buttons = tk.Frame(main)
        buttons.pack(anchor="w", pady=4)
        for text, command in (
            ("🔄 Sync Now", self._sync_now),
            ("📤 Export Config", self._export),
            ("📥 Import Config", self._import),
            ("➕ Add Server", self._open_add_dialog),
            ("About", self._open_about),
        ):
            tk.Button(buttons, text=text, command=command).pack(side="left", padx=2)

        interval_row = tk.Frame(main)
        interval_row.pack(anchor="w", pady=4)
        tk.Label(interval_row, text="Refresh every:").pack(side="left")
        self._interval_var = tk.StringVar(value=str(state.refresh_interval))
        interval_entry = tk.Entry(interval_row, textvariable=self._interval_var, width=6)
        interval_entry.pack(side="left", padx=2)
        interval_entry.bind("<KeyRelease>", self._on_interval_typed)
        interval_entry.bind("<FocusOut>", self._on_interval_done)
        interval_entry.bind("<Return>", self._on_interval_done)
        tk.Label(interval_row, text="seconds").pack(side="left")
        self._countdown = tk.Label(interval_row, text="")
        self._countdown.pack(side="left", padx=8)

        self._servers_frame = tk.Frame(main)
        self._servers_frame.pack(fill="both", expand=True, pady=4)

        self._tick()

    # Periodic work

    def _tick(self) -> None:
        self.state.refresh_if_due()
        self.refresh()
        self.root.after(TICK_MS, self._tick)

    def refresh(self) -> None:
        """Redraw the countdown and every server card from the current state."""
        remaining = self.state.seconds_until_refresh()
        if remaining is None:
            self._countdown.config(text="Auto-refresh disabled")
        else:
            self._countdown.config(text=f"Next refresh in: {remaining}s")

        for child in self._servers_frame.winfo_children():
            child.destroy()
        for index, server in enumerate(self.state.servers):
            self._server_card(index, server)

    def _server_card(self, index: int, server: Server) -> None:
        tk = self._tk
        card = tk.Frame(self._servers_frame, bd=1, relief="groove", padx=6, pady=4)
        card.pack(fill="x", pady=3)

        header = tk.Frame(card)
        header.pack(fill="x")
        tk.Label(header, text=f"🔹 {server.name}").pack(side="left")
        tk.Button(header, text="❌ Remove", command=lambda: self._remove(index)).pack(side="right")
        tk.Button(header, text="✏️ Edit", command=lambda: self._open_edit_dialog(index)).pack(
            side="right", padx=2
        )

        body = tk.Frame(card)
        body.pack(fill="x")
        details = tk.Frame(body)
        details.pack(side="left", anchor="n", padx=(0, 12))
        tk.Label(details, text=f"IP: {server.ip}", anchor="w").pack(anchor="w")
        if server.is_online:
            tk.Label(details, text="Status: ONLINE", fg=_GREEN).pack(anchor="w")
        else:
            tk.Label(details, text="Status: OFFLINE", fg=_RED).pack(anchor="w")
        if server.last_checked is not None:
            elapsed = time.monotonic() - server.last_checked
            tk.Label(details, text=f"Last checked: {elapsed:.1f}s ago").pack(anchor="w")

        open_ports = set(server.open_ports)
        for column in port_columns(server.ports):
            column_frame = tk.Frame(body)
            column_frame.pack(side="left", anchor="n", padx=4)
            for port in column:
                colour = _GREEN if port in open_ports else _RED
                tk.Label(column_frame, text=port_label(port, open_ports), fg=colour).pack(anchor="w")

    # Toolbar actions

    def _sync_now(self) -> None:
        self.state.refresh_now()
        self.refresh()

    def _export(self) -> None:
        try:
            self.state.export_config()
        except ConfigError as exc:
            logger.error("! %s", exc)

    def _import(self) -> None:
        try:
            self.state.import_config()
        except ConfigError as exc:
            logger.error("! %s", exc)
        self._interval_var.set(str(self.state.refresh_interval))
        self.refresh()

    def _on_interval_typed(self, _event=None) -> None:
        self.state.set_refresh_interval(self._interval_var.get())
        self.refresh()

    def _on_interval_done(self, _event=None) -> None:
        if not self.state.set_refresh_interval(self._interval_var.get()):
            self._interval_var.set(str(self.state.refresh_interval))
        self.refresh()

    def _remove(self, index: int) -> None:
        if 0 <= index < len(self.state.servers):
            self.state.remove_server(index)
        self.refresh()

    # Dialogs

    def _close_dialog(self) -> None:
        if self._dialog is not None:
            self._dialog.destroy()
            self._dialog = None

    def _server_dialog(self, title: str, confirm: str, name: str, ip: str, ports: str, on_confirm) -> None:
        tk = self._tk
        self._close_dialog()
        dialog = tk.Toplevel(self.root)
        dialog.title(title)
        dialog.resizable(False, False)
        dialog.protocol("WM_DELETE_WINDOW", self._close_dialog)
        self._dialog = dialog

        variables = []
        for row, (label, value) in enumerate(
            (("Name:", name), ("IP:", ip), ("Ports (comma-separated):", ports))
        ):
            tk.Label(dialog, text=label).grid(row=row, column=0, sticky="w", padx=4, pady=2)
            var = tk.StringVar(value=value)
            tk.Entry(dialog, textvariable=var, width=FIELD_WIDTH).grid(row=row, column=1, padx=4, pady=2)
            variables.append(var)

        def confirm_action() -> None:
            try:
                on_confirm(*(var.get() for var in variables))
            except ValueError:
                return
            self._close_dialog()
            self.refresh()

        actions = tk.Frame(dialog)
        actions.grid(row=3, column=0, columnspan=2, sticky="w", padx=4, pady=4)
        tk.Button(actions, text=confirm, command=confirm_action).pack(side="left", padx=2)
        tk.Button(actions, text="Cancel", command=self._close_dialog).pack(side="left", padx=2)

    def _open_add_dialog(self) -> None:
        self._server_dialog("Add New Server", "Add", "", "", "", self.state.add_server)

    def _open_edit_dialog(self, index: int) -> None:
        if not 0 <= index < len(self.state.servers):
            return
        server = self.state.servers[index]

        def save(name: str, ip: str, ports: str) -> None:
            if index < len(self.state.servers):
                self.state.edit_server(index, name, ip, ports)

        self._server_dialog(
            "Edit Server", "Save", server.name, server.ip, format_ports(server.ports), save
        )

    def _open_about(self) -> None:
        tk = self._tk
        self._close_dialog()
        dialog = tk.Toplevel(self.root)
        dialog.title("About Server Monitor")
        dialog.resizable(False, False)
        dialog.protocol("WM_DELETE_WINDOW", self._close_dialog)
        self._dialog = dialog
        tk.Label(dialog, text="Server Monitor", font=("TkDefaultFont", 14, "bold")).pack(padx=16, pady=(12, 4))
        tk.Label(dialog, text="Pings servers and probes their TCP ports.").pack(padx=16)
        tk.Button(dialog, text="Close", command=self._close_dialog).pack(pady=10)

    def _on_close(self) -> None:
        try:
            self.state.save_on_exit()
        except ConfigError as exc:
            logger.error("! %s", exc)
        self.root.destroy()


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="servermon", description="Monitor servers and their ports.")
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="configuration file (default: ~/.servermon.cfg)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open the monitor window and run until it is closed."""
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    import tkinter as tk

    root = tk.Tk()
    state = AppState(config_path=args.config)
    ServerMonitorWindow(root, state)
    root.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())