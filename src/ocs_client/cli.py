"""Command-line interface for querying OCS Inventory servers."""
from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install ocs-client[cli]' to enable this command."
    ) from exc

from . import OCSClient
from .cli_schema import CLI_TABLE_VIEWS, TableView
from .exceptions import OCSError
from .prune import DEFAULT_FIELD_NAMES, prune

app = typer.Typer(help="OCS Inventory query CLI.", no_args_is_help=True)

computers_app = typer.Typer(help="Computer inventory operations.")
app.add_typer(computers_app, name="computers")


def _build_client(
    base_url: str,
    username: str | None,
    password: str | None,
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
) -> OCSClient:
    verify_target: bool | str
    if cert_path:
        expanded_cert = cert_path.expanduser()
        if not expanded_cert.exists():
            raise typer.BadParameter("Certificate file not found for --cert option.")
        if not verify_ssl:
            raise typer.BadParameter("Cannot combine --cert with --no-verify.")
        verify_target = str(expanded_cert)
    else:
        verify_target = verify_ssl

    try:
        return OCSClient(
            base_url=base_url,
            username=username,
            password=password,
            verify_ssl=verify_target,
            timeout=timeout,
        )
    except OCSError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


console = Console(force_terminal=False, color_system=None)


def _render_rich_table(view: TableView, rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(
        title=view.title,
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    for column in view.columns:
        table.add_column(column.header, justify=column.justify)
    ordered_rows = list(rows)
    if view.sort_key:
        ordered_rows.sort(key=view.sort_key)
    for row in ordered_rows:
        table.add_row(*(column.render(row) for column in view.columns))
    console.print(table)


def _present_output(payload: Any, *, view_id: str | None, json_output: bool) -> None:
    if json_output or view_id is None:
        _echo_json(payload)
        return
    view = CLI_TABLE_VIEWS.get(view_id)
    if not view:
        _echo_json(payload)
        return
    rows = [item for item in payload if isinstance(item, Mapping)]
    if not rows:
        typer.echo("No computers returned.")
        return
    _render_rich_table(view, rows)


def _handle_ocs_error(exc: OCSError) -> None:
    message = f"OCS request failed: {exc}"
    if exc.status_code:
        message = f"OCS request failed (status {exc.status_code}): {exc}"
    if exc.details and exc.details != str(exc):
        message += f"\nDetails: {exc.details}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    # Respect OCS_VERIFY_SSL environment variable when present.
    env_verify = os.getenv("OCS_VERIFY_SSL")
    default_verify = True
    if env_verify is not None and env_verify.strip().lower() in {"0", "false", "no", "off"}:
        default_verify = False

    return {
        "base_url": typer.Option(
            ..., "--base-url", envvar="OCS_BASE_URL", help="OCS server base URL."
        ),
        "username": typer.Option(
            None,
            "--username",
            "-u",
            envvar="OCS_USERNAME",
            help="Username for the OCS SOAP interface.",
        ),
        "password": typer.Option(
            None,
            "--password",
            "-p",
            envvar="OCS_PASSWORD",
            help="Password for the OCS SOAP interface.",
            hide_input=True,
        ),
        "verify_ssl": typer.Option(
            default_verify,
            "--verify/--no-verify",
            envvar="OCS_VERIFY_SSL",
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
        "cert_path": typer.Option(
            None,
            "--cert",
            envvar="OCS_CA_CERT",
            help="Path to a custom CA bundle for TLS verification.",
        ),
        "timeout": typer.Option(30.0, help="Request timeout (seconds).", show_default=True),
        "checksum": typer.Option(
            None,
            "--checksum",
            help="CHECKSUM bitmask of inventory sections (default 131071, everything).",
        ),
        "wanted": typer.Option(
            None,
            "--wanted",
            help="WANTED bitmask (1 = account info, 2 = software dictionary).",
        ),
        "asking_for": typer.Option(
            None,
            "--asking-for",
            help="ASKING_FOR value (INVENTORY or META).",
        ),
        "engine": typer.Option(None, "--engine", help="ENGINE value (default FIRST)."),
        "param": typer.Option(
            [],
            "--param",
            help="Extra request tag in key=value form (repeatable).",
            show_default=False,
        ),
        "field_names": typer.Option(
            None,
            "--field-names",
            help="JSON file mapping custom field ids to names, used when pruning.",
        ),
        "output_json": typer.Option(
            False,
            "--json",
            "-j",
            help="Return raw JSON instead of rendering a table.",
        ),
    }


_SHARED_OPTIONS = _shared_options()


def parse_params(values: Sequence[str]) -> dict[str, str]:
    """Parse repeated ``key=value`` options into request parameters."""
    out: dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise typer.BadParameter(f"Expected key=value, got {item!r}.", param_hint="--param")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Empty key in {item!r}.", param_hint="--param")
        out[key] = value.strip()
    return out


def _build_query(
    *,
    checksum: int | None,
    wanted: int | None,
    asking_for: str | None,
    engine: str | None,
    param: Sequence[str],
) -> dict[str, Any]:
    query: dict[str, Any] = parse_params(param)
    if checksum is not None:
        query["checksum"] = checksum
    if wanted is not None:
        query["wanted"] = wanted
    if asking_for is not None:
        query["asking_for"] = asking_for.upper()
    if engine is not None:
        query["engine"] = engine
    return query


def load_field_names(path: Path | None) -> Mapping[int, str]:
    """Read a custom field table from a JSON object of id -> name."""
    if path is None:
        return DEFAULT_FIELD_NAMES
    try:
        raw = json.loads(path.expanduser().read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(
            f"Unable to read field names from {path}: {exc}", param_hint="--field-names"
        ) from exc
    if not isinstance(raw, Mapping):
        raise typer.BadParameter(
            "Field names file must contain a JSON object.", param_hint="--field-names"
        )
    table: dict[int, str] = {}
    for key, value in raw.items():
        try:
            table[int(key)] = str(value)
        except ValueError as exc:
            raise typer.BadParameter(
                f"Field id {key!r} is not an integer.", param_hint="--field-names"
            ) from exc
    return table


_UNSAFE_FILENAME = re.compile(r"[^\w.-]+")


def snapshot_name(computer: Mapping[str, Any], index: int) -> str:
    """Pick a stable file name for a computer snapshot."""
    hardware = computer.get("HARDWARE")
    if isinstance(hardware, Mapping):
        for key in ("NAME", "DEVICEID", "ID"):
            value = hardware.get(key)
            if isinstance(value, str) and value.strip():
                return _UNSAFE_FILENAME.sub("_", value.strip())
    return f"computer-{index}"


def unique_snapshot_name(name: str, index: int, taken: set[str]) -> str:
    """Return `name`, or a suffixed variant of it not already in `taken`."""
    candidate = name
    suffix = index
    while candidate in taken:
        candidate = f"{name}-{suffix}"
        suffix += 1
    return candidate


@computers_app.command("list")
def computers_list(
    base_url: str = _SHARED_OPTIONS["base_url"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    checksum: int | None = _SHARED_OPTIONS["checksum"],
    wanted: int | None = _SHARED_OPTIONS["wanted"],
    asking_for: str | None = _SHARED_OPTIONS["asking_for"],
    engine: str | None = _SHARED_OPTIONS["engine"],
    param: list[str] = _SHARED_OPTIONS["param"],
    field_names: Path | None = _SHARED_OPTIONS["field_names"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    offset: int = typer.Option(0, "--offset", help="Page to fetch.", show_default=True),
    prune_records: bool = typer.Option(
        False, "--prune/--no-prune", help="Prune records before printing.", show_default=True
    ),
) -> None:
    """List one page of inventoried computers."""

    query = _build_query(
        checksum=checksum, wanted=wanted, asking_for=asking_for, engine=engine, param=param
    )
    query["offset"] = offset
    table = load_field_names(field_names) if prune_records else None

    with _build_client(
        base_url=base_url,
        username=username,
        password=password,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
    ) as client:
        try:
            computers = client.get_computers(query)
        except OCSError as exc:
            _handle_ocs_error(exc)
            return

    if table is not None:
        computers = [prune(computer, table) for computer in computers]
    _present_output(computers, view_id="computers.list", json_output=output_json)


@computers_app.command("dump")
def computers_dump(
    directory: Path = typer.Argument(..., help="Directory receiving one JSON file per computer."),
    base_url: str = _SHARED_OPTIONS["base_url"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    checksum: int | None = _SHARED_OPTIONS["checksum"],
    wanted: int | None = _SHARED_OPTIONS["wanted"],
    asking_for: str | None = _SHARED_OPTIONS["asking_for"],
    engine: str | None = _SHARED_OPTIONS["engine"],
    param: list[str] = _SHARED_OPTIONS["param"],
    field_names: Path | None = _SHARED_OPTIONS["field_names"],
    prune_records: bool = typer.Option(
        True, "--prune/--no-prune", help="Prune records before writing.", show_default=True
    ),
) -> None:
    """Write every computer as a JSON snapshot, ready to commit to version control."""

    query = _build_query(
        checksum=checksum, wanted=wanted, asking_for=asking_for, engine=engine, param=param
    )
    table = load_field_names(field_names) if prune_records else None
    directory = directory.expanduser()
    directory.mkdir(parents=True, exist_ok=True)

    written: set[str] = set()
    with _build_client(
        base_url=base_url,
        username=username,
        password=password,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
    ) as client:
        try:
            for index, computer in enumerate(client.computer_iterator(query)):
                if table is not None:
                    prune(computer, table)
                name = unique_snapshot_name(snapshot_name(computer, index), index, written)
                written.add(name)
                target = directory / f"{name}.json"
                target.write_text(
                    json.dumps(computer, indent=2, sort_keys=True, ensure_ascii=False) + "\n",
                    encoding="utf-8",
                )
        except OCSError as exc:
            _handle_ocs_error(exc)
            return

    typer.secho(f"Wrote {len(written)} computer snapshots to {directory}.", fg=typer.colors.GREEN)


@app.command("prune")
def prune_file(
    source: Path = typer.Argument(..., help="JSON file holding one computer record."),
    field_names: Path | None = _SHARED_OPTIONS["field_names"],
) -> None:
    """Prune a previously saved computer record and print the result."""

    try:
        computer = json.loads(source.expanduser().read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Unable to read {source}: {exc}") from exc
    if not isinstance(computer, dict):
        raise typer.BadParameter("Computer record must be a JSON object.")
    _echo_json(prune(computer, load_field_names(field_names)))


def main() -> None:  # pragma: no cover - console entrypoint
    app()


if __name__ == "__main__":  # pragma: no cover - module entrypoint
    main()
