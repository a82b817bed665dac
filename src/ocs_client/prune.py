"""Reduce a computer record to the stable subset worth keeping under version control.

A raw record carries lots of information that changes on every inventory run
(free space, last contact dates, link status...). `prune` drops it, collapses
software into a name/version table and sorts lists so that successive JSON
snapshots of the same machine diff cleanly.
"""

from __future__ import annotations

import re
import warnings
from collections.abc import Mapping, MutableMapping
from types import MappingProxyType
from typing import Any

from .exceptions import UnmappedFieldWarning
from .records import CONTENT_KEY

# Custom field names of the OCS instance this module was first written for.
# Pass your own table to `prune`.
DEFAULT_FIELD_NAMES: Mapping[int, str] = MappingProxyType(
    {
        3: "UA",
        4: "Sala",
        5: "Nome do Usuário",
        6: "Atividade",
        7: "Nome da Empresa",
        8: "Ponto de Rede",
        9: "Switch",
        10: "Porta",
        11: "Status",
        13: "Observações",
        14: "Local do Ponto",
        15: "Asset Number",
        16: "Responsável",
        17: "Tipo",
        18: "Padrão de HW",
        19: "Data de Aquisição",
        20: "UA Username",
        21: "Office",
        22: "Office Tag",
    }
)

ACCOUNTINFO_DROPPED = ("UA Username",)
DRIVE_DROPPED = ("CREATEDATE", "FREE", "LETTER", "NUMFILES", "VOLUMN")
HARDWARE_DROPPED = (
    "FIDELITY",
    "LASTCOME",
    "IPADDR",
    "IPSRC",
    "LASTDATE",
    "PROCESSORS",
    "QUALITY",
    "USERID",
    "SWAP",
)
NETWORK_DROPPED = ("SPEED", "STATUS")
VIDEO_DROPPED = ("RESOLUTION",)

_PAIR_ATTRIBUTES = frozenset({"Name", "Type", CONTENT_KEY})
_CUSTOM_FIELD = re.compile(r"^fields_(\d+)$")
_DESCRIPTION_STAMP = re.compile(r"^([^/]+)/\d\d-\d\d-\d\d \d\d:\d\d:\d\d$")
_REMOVABLE = re.compile("removable", re.IGNORECASE)


def prune(
    computer: MutableMapping[str, Any],
    field_names: Mapping[int, str] = DEFAULT_FIELD_NAMES,
) -> MutableMapping[str, Any]:
    """Simplify `computer` in place and return it.

    `field_names` maps custom field ids (``fields_<N>`` in ACCOUNTINFO) to
    readable names. Sections missing from the record are ignored and pruning
    an already pruned record changes nothing.
    """

    if isinstance(computer.get("ACCOUNTINFO"), MutableMapping):
        _prune_accountinfo(computer["ACCOUNTINFO"], field_names)
    if "DRIVES" in computer:
        computer["DRIVES"] = _prune_drives(computer["DRIVES"])
    if isinstance(computer.get("HARDWARE"), MutableMapping):
        _prune_hardware(computer["HARDWARE"])
    if "NETWORKS" in computer:
        _drop_keys(computer["NETWORKS"], NETWORK_DROPPED)
    if "PRINTERS" in computer:
        computer["PRINTERS"] = sorted(
            _as_list(computer["PRINTERS"]), key=lambda printer: _text(printer.get("NAME"))
        )
    # Of the software only the name and the version are kept.
    if "SOFTWARES" in computer:
        computer["SOFTWARES"] = _collapse_softwares(computer["SOFTWARES"])
    if "STORAGES" in computer:
        computer["STORAGES"] = [
            storage for storage in _as_list(computer["STORAGES"]) if not _is_removable(storage)
        ]
    if "VIDEOS" in computer:
        _drop_keys(computer["VIDEOS"], VIDEO_DROPPED)
    return computer


def _prune_accountinfo(
    accountinfo: MutableMapping[str, Any], field_names: Mapping[int, str]
) -> None:
    for key, entries in list(accountinfo.items()):
        if isinstance(entries, Mapping) and not _is_raw_pair(entries):
            info = dict(entries)
        else:
            info = {}
            for pair in _as_list(entries):
                if CONTENT_KEY not in pair:
                    continue
                info[_field_name(pair.get("Name"), field_names)] = pair[CONTENT_KEY]
        for dropped in ACCOUNTINFO_DROPPED:
            info.pop(dropped, None)
        accountinfo[key] = info


def _is_raw_pair(entry: Mapping[str, Any]) -> bool:
    return "Name" in entry and set(entry) <= _PAIR_ATTRIBUTES


def _field_name(name: Any, field_names: Mapping[int, str]) -> str:
    name = _text(name)
    match = _CUSTOM_FIELD.match(name)
    if not match:
        return name
    field_id = int(match.group(1))
    if field_id in field_names:
        return field_names[field_id]
    warnings.warn(
        f"No name registered for custom field {name}; keeping the raw id.",
        UnmappedFieldWarning,
        stacklevel=4,
    )
    return name


def _prune_drives(drives: Any) -> list[dict[str, Any]]:
    kept: list[dict[str, Any]] = []
    for drive in _as_list(drives):
        if "ORDER" not in drive:
            order = _text(drive.get("VOLUMN")) + _text(drive.get("LETTER"))
            if order.endswith(":/"):
                order = order[:-1]
            drive["ORDER"] = order
        for dropped in DRIVE_DROPPED:
            drive.pop(dropped, None)
        if not _is_removable(drive):
            kept.append(drive)
    return sorted(kept, key=lambda drive: drive["ORDER"])


def _prune_hardware(hardware: MutableMapping[str, Any]) -> None:
    for dropped in HARDWARE_DROPPED:
        hardware.pop(dropped, None)
    description = hardware.get("DESCRIPTION")
    if isinstance(description, str):
        hardware["DESCRIPTION"] = _DESCRIPTION_STAMP.sub(r"\1", description)


def _collapse_softwares(softwares: Any) -> Any:
    # Raw SOFTWARES is always parsed as a list; a mapping is already collapsed.
    if isinstance(softwares, Mapping):
        return softwares
    collapsed: dict[str, Any] = {}
    for software in _as_list(softwares):
        name = software.get("NAME")
        if isinstance(name, str):
            collapsed[name] = software.get("VERSION")
    return collapsed


def _drop_keys(entries: Any, keys: tuple[str, ...]) -> None:
    for entry in _as_list(entries):
        for key in keys:
            entry.pop(key, None)


def _is_removable(entry: Mapping[str, Any]) -> bool:
    return bool(_REMOVABLE.search(_text(entry.get("TYPE"))))


def _text(value: Any) -> str:
    # Empty XML elements parse as {}; only real strings count.
    return value if isinstance(value, str) else ""


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, MutableMapping)]
    if isinstance(value, MutableMapping):
        return [value]
    return []


__all__ = ["DEFAULT_FIELD_NAMES", "prune"]
