#!/usr/bin/env python3
"""
seed_data.py

Generates realistic fake gas and water delivery orders to a JSON-lines file
(default: <data_dir>/pedidos.jsonl), readable by the jsonl order backend.

Orders are spread over the last N days with lunch and evening peaks. Around a
fifth are Fiado; older Fiado orders are mostly settled already.

Run:
  python -m gashub.data.seed_data --orders 60 --days 30
"""

from __future__ import annotations

import argparse
import random
import sys
import uuid
from datetime import datetime, time, timedelta
from math import pi, sin
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from gashub.config import get_config
from gashub.logger import get_logger

from .backends.jsonl_backend import resolve_data_dir
from .models import CARD, CASH, CREDIT, PIX, SETTLED, OrderDraft, ProductDraft
from .order_entry import build_order_document

# -----------------------------
# Catalogue & customers
# -----------------------------

PRODUCTS: List[Tuple[str, float]] = [
    ("Botijão de 13kg", 110.00),
    ("Botijão de 45kg", 390.00),
    ("Botijão de 8kg", 85.00),
    ("Botijão de 5kg", 65.00),
    ("Galão de água 20L", 14.00),
    ("Galão de água 10L", 9.50),
]

# Index 0 is by far the best seller
PRODUCT_WEIGHTS = [60, 5, 8, 4, 20, 3]

PAYMENT_METHODS = [CASH, PIX, CARD, CREDIT]
PAYMENT_WEIGHTS = [35, 30, 15, 20]

FIRST_NAMES = [
    "Ana", "Maria", "José", "João", "Francisca", "Antônio", "Carlos", "Paulo",
    "Adriana", "Juliana", "Marcos", "Luiz", "Fernanda", "Patrícia", "Rafael",
]
LAST_NAMES = [
    "Silva", "Santos", "Oliveira", "Souza", "Rodrigues", "Ferreira", "Alves",
    "Pereira", "Lima", "Gomes", "Costa", "Ribeiro",
]
STREETS = [
    "Rua das Flores", "Avenida Brasil", "Rua São João", "Rua Sete de Setembro",
    "Avenida Getúlio Vargas", "Rua da Paz", "Travessa Santa Luzia", "Rua do Comércio",
]


# -----------------------------
# Utility functions
# -----------------------------

def diurnal_weight(hour: int) -> float:
    """
    Deliveries peak before lunch and in the early evening.
    Returns ~0.2 to ~1.0; zero outside opening hours (7h-20h).
    """
    if hour < 7 or hour > 20:
        return 0.0
    peak1 = 0.5 * (1 + sin((hour - 8) / 24 * 2 * pi * 2))
    peak2 = 0.5 * (1 + sin((hour - 14) / 24 * 2 * pi * 2))
    return 0.2 + 0.8 * max(peak1, peak2)


def random_timestamp(rng: random.Random, day: datetime) -> datetime:
    hours = list(range(24))
    hour = rng.choices(hours, weights=[diurnal_weight(h) for h in hours])[0]
    return day.replace(hour=hour, minute=rng.randrange(60), second=rng.randrange(60))


def gen_customers(rng: random.Random, n: int) -> List[Dict[str, str]]:
    customers = []
    for _ in range(n):
        customers.append({
            "name": f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
            "address": f"{rng.choice(STREETS)}, {rng.randint(1, 2500)}",
        })
    return customers


# -----------------------------
# Core generator
# -----------------------------

def gen_orders(
    n_orders: int,
    days: int,
    seed: int,
    now: Optional[datetime] = None,
) -> List[Dict]:
    """Generate `n_orders` order records over the last `days` days, oldest first."""
    rng = random.Random(seed)
    now = now or datetime.now().astimezone()
    today = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    customers = gen_customers(rng, max(5, n_orders // 3))

    records = []
    for _ in range(n_orders):
        day = today - timedelta(days=rng.randrange(max(days, 1)))
        ts = min(random_timestamp(rng, day), now)
        customer = rng.choice(customers)

        lines = {}
        for _ in range(rng.choices([1, 2, 3], weights=[70, 25, 5])[0]):
            name, price = rng.choices(PRODUCTS, weights=PRODUCT_WEIGHTS)[0]
            qty, _ = lines.get(name, (0, price))
            lines[name] = (qty + rng.choices([1, 2], weights=[85, 15])[0], price)

        method = rng.choices(PAYMENT_METHODS, weights=PAYMENT_WEIGHTS)[0]
        draft = OrderDraft(
            customer_name=customer["name"],
            address=customer["address"],
            products=[ProductDraft(name=name, quantity=qty, price=price) for name, (qty, price) in lines.items()],
            payment_method=method,
            due_date=(ts + timedelta(days=rng.choice([7, 15, 30]))).date() if method == CREDIT else None,
        )

        record = build_order_document(draft, now=ts)
        record.update(
            id=uuid.UUID(int=rng.getrandbits(128)).hex[:20],
            timestamp=ts.isoformat(),
            userId="seed",
            status="delivered" if ts.date() < now.date() else "pending",
        )

        # Older credit sales have usually been settled by now
        if method == CREDIT and (now - ts).days > 10 and rng.random() < 0.7:
            paid_at = ts + timedelta(days=rng.randint(1, (now - ts).days))
            record.update(
                paymentMethod=SETTLED,
                paymentStatus="paid",
                pendingValue=0,
                dueDate=None,
                paymentDate=paid_at.isoformat(),
            )
        records.append(record)

    records.sort(key=lambda r: r["timestamp"])
    return records


def write_jsonl(path: Path, records: List[Dict]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(records).to_json(path, orient="records", lines=True, force_ascii=False)


def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()
    logger = get_logger(__name__)

    parser = argparse.ArgumentParser(description="Generate fake delivery orders to a JSON-lines file.")
    parser.add_argument("--orders", type=int, default=config.default_seed_orders, help="Number of orders.")
    parser.add_argument("--days", type=int, default=config.default_seed_days, help="Days of order history.")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if the file already exists.")
    args = parser.parse_args(argv)

    path = resolve_data_dir(args.output_dir) / f"{config.orders_collection}.jsonl"
    if args.no_overwrite and path.exists():
        logger.error(f"Refusing to overwrite existing file: {path}")
        return 2

    records = gen_orders(args.orders, args.days, args.seed)
    write_jsonl(path, records)

    open_credit = [r for r in records if r["paymentMethod"] == CREDIT and r["paymentStatus"] == "pending"]
    logger.info(f"Generated {len(records)} orders in {path}")
    logger.info(f" open fiado: {len(open_credit)} | outstanding: {sum(r['pendingValue'] for r in open_credit):.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
