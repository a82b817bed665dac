"""Bit flags and defaults for the `get_computers_V1` request."""

from __future__ import annotations

from enum import IntFlag
from typing import Any


class Checksum(IntFlag):
    """Inventory sections selected through the CHECKSUM request tag."""

    HARDWARE = 0x00001
    BIOS = 0x00002
    MEMORY_SLOTS = 0x00004
    SYSTEM_SLOTS = 0x00008
    REGISTRY = 0x00010
    SYSTEM_CONTROLLERS = 0x00020
    MONITORS = 0x00040
    SYSTEM_PORTS = 0x00080
    STORAGE_PERIPHERALS = 0x00100
    LOGICAL_DRIVES = 0x00200
    INPUT_DEVICES = 0x00400
    MODEMS = 0x00800
    NETWORK_ADAPTERS = 0x01000
    PRINTERS = 0x02000
    SOUND_ADAPTERS = 0x04000
    VIDEO_ADAPTERS = 0x08000
    SOFTWARE = 0x10000
    ALL = 0x1FFFF


class Wanted(IntFlag):
    """Extra sections selected through the WANTED request tag."""

    ACCOUNTINFO = 0x00001
    DICO_SOFT = 0x00002


DEFAULT_QUERY: dict[str, Any] = {
    "engine": "FIRST",
    "asking_for": "INVENTORY",
    "checksum": int(Checksum.ALL),
    "wanted": int(Wanted.ACCOUNTINFO | Wanted.DICO_SOFT),
    "offset": 0,
}

# Sections the server may send once or several times; always parsed as lists.
FORCE_ARRAY: tuple[str, ...] = ("DRIVES", "NETWORKS", "PRINTERS", "SOFTWARES", "VIDEOS")

GET_COMPUTERS = "get_computers_V1"

__all__ = ["Checksum", "Wanted", "DEFAULT_QUERY", "FORCE_ARRAY", "GET_COMPUTERS"]
