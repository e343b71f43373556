from __future__ import annotations

from typing import Literal, Optional

from gashub.config import get_config

from .backends.jsonl_backend import JsonlOrderStore
from .backends.memory_backend import InMemoryOrderStore
from .interface import OrderBackend


def get_order_backend(kind: Optional[Literal["memory", "jsonl"]] = None) -> OrderBackend:
    config = get_config()
    kind = kind or config.order_backend
    if kind == "memory":
        return InMemoryOrderStore(collection=config.orders_collection)
    if kind == "jsonl":
        # Reads and writes <data_dir>/<collection>.jsonl
        return JsonlOrderStore(data_dir=config.data_dir, collection=config.orders_collection)
    raise ValueError(f"Unknown order backend kind: {kind}")
