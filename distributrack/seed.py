from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, conint


class InventorySeedItem(BaseModel):
    distributor_id: conint(gt=0)
    product_name: str
    description: str = ""
    price: Decimal = Field(ge=0)
    quantity: conint(ge=0)
    is_active: bool = True


class InventorySeed(BaseModel):
    items: List[InventorySeedItem]


def load_inventory_seed(path: str) -> List[InventorySeedItem]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    seed = InventorySeed(**data)
    return seed.items
