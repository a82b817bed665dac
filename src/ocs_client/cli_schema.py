"""Schema describing important fields for CLI table rendering."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

Row = Mapping[str, Any]
ValueExtractor = Callable[[Row], Any]
ValueFormatter = Callable[[Any], str]
SortKey = Callable[[Row], Any]


@dataclass(frozen=True)
class Column:
    """Describe how to pull and format a column for Rich tables.

    `section` names a nested mapping of the record (for example ``HARDWARE``)
    that `keys` are looked up in.
    """

    header: str
    keys: tuple[str, ...] = ()
    section: str | None = None
    extractor: ValueExtractor | None = None
    formatter: ValueFormatter | None = None
    justify: str = "left"

    def render(self, row: Row) -> str:
        source = row
        if self.section is not None:
            nested = row.get(self.section)
            source = nested if isinstance(nested, Mapping) else {}
        value: Any | None = None
        for key in self.keys:
            candidate = source.get(key)
            # empty XML elements come back as {}
            if candidate is not None and candidate != {}:
                value = candidate
                break
        if value is None and self.extractor:
            value = self.extractor(row)
        if value is None:
            return ""
        if self.formatter:
            formatted = self.formatter(value)
            return "" if formatted is None else str(formatted)
        return str(value)


@dataclass(frozen=True)
class TableView:
    """Describe a Rich table for a CLI command."""

    title: str
    columns: tuple[Column, ...]
    sort_key: SortKey | None = None


def _memory_formatter(value: Any) -> str:
    try:
        megabytes = int(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{megabytes / 1024:.1f}"


def _first_address(row: Row) -> Any:
    # IPADDR is pruned away from HARDWARE; fall back to the network cards.
    networks = row.get("NETWORKS")
    if not isinstance(networks, list):
        return None
    for network in networks:
        if isinstance(network, Mapping) and isinstance(network.get("IPADDRESS"), str):
            return network["IPADDRESS"]
    return None


def _software_count(row: Row) -> Any:
    softwares = row.get("SOFTWARES")
    if isinstance(softwares, (list, Mapping)):
        return len(softwares)
    return None


def _sort_name(row: Row) -> str:
    hardware = row.get("HARDWARE")
    if not isinstance(hardware, Mapping):
        return ""
    name = hardware.get("NAME")
    return name.lower() if isinstance(name, str) else ""


CLI_TABLE_VIEWS: dict[str, TableView] = {
    "computers.list": TableView(
        title="Computers",
        columns=(
            Column("ID", keys=("ID",), section="HARDWARE", justify="right"),
            Column("Name", keys=("NAME",), section="HARDWARE"),
            Column("Workgroup", keys=("WORKGROUP",), section="HARDWARE"),
            Column("OS", keys=("OSNAME",), section="HARDWARE"),
            Column("IP", keys=("IPADDR",), section="HARDWARE", extractor=_first_address),
            Column("User", keys=("USERID",), section="HARDWARE"),
            Column(
                "Memory (GiB)",
                keys=("MEMORY",),
                section="HARDWARE",
                formatter=_memory_formatter,
                justify="right",
            ),
            Column("Software", extractor=_software_count, justify="right"),
            Column("Last Inventory", keys=("LASTDATE",), section="HARDWARE"),
        ),
        sort_key=_sort_name,
    ),
}
