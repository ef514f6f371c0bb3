"""Product catalog loaded from the business YAML.

Lets the assistant quote real products and prices, and lets submit_order
reject items the shop does not sell. Search understands common Indonesian
symptom phrases and maps them to the conditions products are tagged with.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10

# Indonesian phrase -> condition tags used in products' suitable_for lists.
INDONESIAN_HEALTH_TERMS = {
    "maag": ["gastritis", "digestive", "acid reflux"],
    "asam lambung": ["acid reflux", "gastritis", "digestive"],
    "susah bab": ["constipation", "digestive"],
    "sembelit": ["constipation", "digestive"],
    "diabetes": ["diabetes", "blood sugar"],
    "gula darah": ["blood sugar", "diabetes"],
    "kencing manis": ["diabetes", "blood sugar"],
    "darah tinggi": ["hypertension", "cardiovascular"],
    "hipertensi": ["hypertension", "cardiovascular"],
    "kolesterol": ["cholesterol", "cardiovascular"],
    "diet": ["weight loss", "weight management"],
    "langsing": ["weight loss", "weight management"],
    "gemuk": ["weight loss", "weight management"],
    "daya tahan": ["immunity"],
    "imun": ["immunity"],
    "sering sakit": ["immunity"],
    "capek": ["fatigue", "energy"],
    "lemas": ["fatigue", "energy"],
}

_ITEM_RE = re.compile(r"^\s*(?:(\d+)\s*(?:x|pcs|buah|box|pack)?\s+)?(.+?)\s*$", re.IGNORECASE)


@dataclass
class Product:
    id: str
    name: str
    price: int
    category: str = "general_wellness"
    description: str = ""
    aliases: list[str] = field(default_factory=list)
    suitable_for: list[str] = field(default_factory=list)
    in_stock: bool = True

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Product":
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            price=int(raw["price"]),
            category=str(raw.get("category", "general_wellness")),
            description=str(raw.get("description", "")),
            aliases=[str(a).lower() for a in raw.get("aliases", [])],
            suitable_for=[str(s).lower() for s in raw.get("suitable_for", [])],
            in_stock=bool(raw.get("in_stock", True)),
        )

    @property
    def names(self) -> list[str]:
        return [self.name.lower(), *self.aliases]

    def describe(self) -> str:
        stock = "" if self.in_stock else " (out of stock)"
        text = f"[{self.id}] {self.name} - {format_rupiah(self.price)}{stock}"
        if self.description:
            text += f": {self.description}"
        return text


@dataclass
class OrderLine:
    product: Product
    quantity: int

    @property
    def subtotal(self) -> int:
        return self.product.price * self.quantity


def format_rupiah(amount: int) -> str:
    return f"Rp {amount:,}".replace(",", ".")


class ProductCatalog:
    def __init__(self, products: Iterable[Product] = ()):
        self._products = {p.id: p for p in products}

    @classmethod
    def from_list(cls, raw: list[Mapping[str, Any]] | None) -> "ProductCatalog":
        return cls(Product.from_mapping(item) for item in raw or [])

    def __len__(self) -> int:
        return len(self._products)

    def get(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    def by_category(self, category: str) -> list[Product]:
        return [p for p in self._products.values() if p.category == category]

    def categories(self) -> list[str]:
        return sorted({p.category for p in self._products.values()})

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> list[Product]:
        """Products whose name, alias, category or conditions match the query.

        Name and alias hits rank above condition hits; out-of-stock
        products are listed after in-stock ones.
        """
        normalized = query.lower().strip()
        if not normalized:
            return []

        terms = []
        for phrase, conditions in INDONESIAN_HEALTH_TERMS.items():
            if phrase in normalized:
                terms.extend(conditions)
        if not terms:
            terms = [normalized]

        scored = []
        for product in self._products.values():
            score = 0
            if any(n in normalized or normalized in n for n in product.names):
                score += 3
            if product.category in normalized or any(t in product.category for t in terms):
                score += 1
            score += sum(1 for t in terms if any(t in s or s in t for s in product.suitable_for))
            if score:
                scored.append((not product.in_stock, -score, product.name, product))

        scored.sort(key=lambda row: row[:3])
        return [row[3] for row in scored[:limit]]

    def match(self, text: str) -> Product | None:
        """The product a free-text item name refers to, by id, name or alias."""
        normalized = text.lower().strip()
        if normalized in self._products:
            return self._products[normalized]
        for product in self._products.values():
            if normalized in product.names:
                return product
        for product in self._products.values():
            if any(n in normalized for n in product.names):
                return product
        return None

    def parse_items(self, items: str) -> tuple[list[OrderLine], list[str]]:
        """Split '2x Hotto Purto, 1 Flimty' into order lines.

        Returns the matched lines and the item texts that matched nothing.
        """
        lines, unknown = [], []
        for part in re.split(r"[,;\n]|\bdan\b", items):
            if not part.strip():
                continue
            m = _ITEM_RE.match(part)
            quantity = int(m.group(1)) if m.group(1) else 1
            name = m.group(2)
            product = self.match(name)
            if product is None or quantity < 1:
                unknown.append(part.strip())
            else:
                lines.append(OrderLine(product=product, quantity=quantity))
        if unknown:
            logger.info("Unrecognised order items: %s", unknown)
        return lines, unknown
