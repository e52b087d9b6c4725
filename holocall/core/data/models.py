#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Wire models for the conductor app interface.

The conductor describes an installed application as a list of cells. Each
cell is addressed by a ``CellId``: the DNA hash of the application context
plus the public key of the agent bound to it. Zome calls target one cell and
are attributed (``provenance``) to that same agent.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence


class CellId(NamedTuple):
    """
    Address of an execution context: ``(dna_hash, agent_pub_key)``.

    Packs as a two-element msgpack array, which is how the conductor encodes it.
    """

    dna_hash: bytes
    agent_pub_key: bytes

    @classmethod
    def from_wire(cls, value: Any) -> "CellId":
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
            raise ValueError("cell_id must be a [dna_hash, agent_pub_key] pair")
        if len(value) != 2:
            raise ValueError(
                "cell_id must have exactly 2 components, got {0}".format(len(value))
            )
        return cls(bytes(value[0]), bytes(value[1]))


@dataclass(frozen=True)
class InstalledCell:
    cell_id: CellId
    cell_nick: str = ""

    @classmethod
    def from_wire(cls, value: Mapping[str, Any]) -> "InstalledCell":
        if not isinstance(value, Mapping):
            raise ValueError("cell_data entries must be objects")
        return cls(
            cell_id=CellId.from_wire(value.get("cell_id")),
            cell_nick=str(value.get("cell_nick") or ""),
        )


@dataclass(frozen=True)
class AppInfo:
    """
    Application metadata returned by ``app_info``.

    ``cell_data`` keeps the order the host reported it in.
    """

    installed_app_id: str
    cell_data: List[InstalledCell] = field(default_factory=list)
    active: Optional[bool] = None

    @classmethod
    def from_wire(cls, value: Optional[Mapping[str, Any]], installed_app_id: str = "") -> "AppInfo":
        # A nil reply means the application is not installed: no cells at all.
        if value is None:
            return cls(installed_app_id=installed_app_id, cell_data=[])
        if not isinstance(value, Mapping):
            raise ValueError("app_info reply must be an object or nil")

        raw_cells = value.get("cell_data") or []
        if not isinstance(raw_cells, (list, tuple)):
            raise ValueError("cell_data must be a list")

        active = value.get("active")
        return cls(
            installed_app_id=str(value.get("installed_app_id") or installed_app_id),
            cell_data=[InstalledCell.from_wire(item) for item in raw_cells],
            active=bool(active) if active is not None else None,
        )

    def first_cell_id(self) -> Optional[CellId]:
        if not self.cell_data:
            return None
        return self.cell_data[0].cell_id


@dataclass(frozen=True)
class CallZomeRequest:
    """
    One zome function invocation.

    ``cap`` is the capability secret; ``None`` means the default/unrestricted
    capability. ``payload`` is the function-specific input value, kept
    unencoded here and packed separately in :meth:`to_wire`.
    """

    cell_id: CellId
    zome_name: str
    fn_name: str
    provenance: bytes
    payload: Any = None
    cap: Optional[bytes] = None

    @classmethod
    def for_cell(
        cls,
        cell_id: CellId,
        zome_name: str,
        fn_name: str,
        payload: Any = None,
        cap: Optional[bytes] = None,
    ) -> "CallZomeRequest":
        """
        Build a self-attributed request: provenance is the cell's own agent key.
        """
        zome = str(zome_name or "").strip()
        fn = str(fn_name or "").strip()
        if not zome:
            raise ValueError("zome_name cannot be empty")
        if not fn:
            raise ValueError("fn_name cannot be empty")
        return cls(
            cell_id=cell_id,
            zome_name=zome,
            fn_name=fn,
            provenance=cell_id.agent_pub_key,
            payload=payload,
            cap=cap,
        )

    def to_wire(self, encoded_payload: bytes) -> Dict[str, Any]:
        return {
            "cap": self.cap,
            "cell_id": [self.cell_id.dna_hash, self.cell_id.agent_pub_key],
            "zome_name": self.zome_name,
            "fn_name": self.fn_name,
            "provenance": self.provenance,
            "payload": encoded_payload,
        }


@dataclass(frozen=True)
class HostError:
    """
    Error reply from the host: ``{"type": "error", "data": {"type", "data"}}``.
    """

    error_type: str
    detail: Any = None

    @classmethod
    def from_wire(cls, value: Any) -> "HostError":
        if isinstance(value, Mapping):
            return cls(
                error_type=str(value.get("type") or "unknown"),
                detail=value.get("data"),
            )
        return cls(error_type="unknown", detail=value)

    def describe(self) -> str:
        if self.detail is None:
            return self.error_type
        return "{0}: {1}".format(self.error_type, self.detail)
