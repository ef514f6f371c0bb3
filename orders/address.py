"""Shipping address and customer-info checks for orders delivered in Batam.

Keyword and regex heuristics only: they flag what a courier would usually
need (kecamatan, street, house number or blok) so the assistant can ask
the customer to complete the address before an order is submitted.
"""

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

MIN_ADDRESS_LENGTH = 10
MIN_NAME_LENGTH = 2
MIN_PHONE_LENGTH = 10

BATAM_SUBDISTRICTS = (
    "batam kota", "batu aji", "batu ampar", "belakang padang", "bengkong",
    "bulang", "galang", "lubuk baja", "nongsa", "sagulung", "sei beduk",
    "sekupang",
)

# Complexes where couriers find units without a street name or blok.
BATAM_HOUSING_COMPLEXES = (
    "grand batam mall", "nagoya", "harbor bay", "waterfront city",
    "botania", "crown golf", "palm spring", "batam view", "golden city",
    "regency", "royal", "graha", "villa", "cluster", "town house",
    "ruko", "shophouse",
)

_BLOK_RE = re.compile(r"blok\s*[a-z0-9]", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d+")
_STREET_RE = re.compile(r"jl\.?|jalan|gang|gg\.", re.IGNORECASE)


@dataclass
class AddressValidation:
    is_valid: bool = True
    missing_info: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    needs_confirmation: bool = False


def validate_address(address: str) -> AddressValidation:
    result = AddressValidation()
    normalized = address.lower()

    if len(address.strip()) < MIN_ADDRESS_LENGTH:
        result.is_valid = False
        result.missing_info.append("Alamat terlalu pendek")
        result.needs_confirmation = True
        return result

    has_kecamatan = any(s in normalized for s in BATAM_SUBDISTRICTS)
    if not has_kecamatan:
        result.missing_info.append("kecamatan")
        result.suggestions.extend([
            "Mohon sertakan nama kecamatan (misal: Batam Kota, Batu Aji, Sagulung, dll)",
            'Contoh alamat lengkap: "Jl. Sudirman Blok A No. 123, Batam Kota"',
        ])

    has_blok = bool(_BLOK_RE.search(normalized))
    has_number = bool(_NUMBER_RE.search(normalized))
    has_complex = any(c in normalized for c in BATAM_HOUSING_COMPLEXES)

    if not has_complex and not has_blok and not has_number:
        result.missing_info.append("nomor rumah atau blok")
        result.suggestions.extend([
            "Di Batam biasanya ada Blok dan Nomor rumah",
            'Contoh: "Blok A No. 123" atau "No. 45" jika tidak ada blok',
        ])
    elif not has_number:
        result.missing_info.append("nomor rumah")
        result.suggestions.append("Mohon sertakan nomor rumah untuk memudahkan pengiriman")

    if not _STREET_RE.search(normalized) and not has_complex:
        result.missing_info.append("nama jalan")

    result.is_valid = not result.missing_info
    result.needs_confirmation = not result.is_valid

    if result.needs_confirmation:
        logger.info(
            "Address needs confirmation: missing=%s kecamatan=%s blok=%s number=%s complex=%s",
            result.missing_info, has_kecamatan, has_blok, has_number, has_complex,
        )
    return result


def address_confirmation_message(validation: AddressValidation, address: str) -> str:
    """Message asking the customer to complete the address; empty when valid."""
    if validation.is_valid:
        return ""

    lines = ["Mohon konfirmasi alamat lengkapnya ya Kak 🙏", "", f'Alamat saat ini: "{address}"', ""]
    if validation.missing_info:
        lines.append("Yang perlu dilengkapi:")
        lines.extend(f"{i}. {item}" for i, item in enumerate(validation.missing_info, start=1))
        lines.append("")
    if validation.suggestions:
        lines.append("💡 Tips:")
        lines.extend(f"• {s}" for s in validation.suggestions)
        lines.append("")
    lines.append("Bisa kirim alamat lengkapnya lagi? 😊")
    return "\n".join(lines)


def missing_customer_info(
    name: str | None,
    phone: str | None,
    address: str | None,
    fallback_phone: str | None = None,
) -> list[str]:
    """Names of the customer fields still needed before an order can ship.

    fallback_phone is the customer's WhatsApp number, used when they did
    not type one.
    """
    missing = []
    if len((name or "").strip()) < MIN_NAME_LENGTH:
        missing.append("Nama lengkap")
    phone = (phone or "").strip() or (fallback_phone or "").strip()
    if len(phone) < MIN_PHONE_LENGTH:
        missing.append("Nomor WhatsApp")
    if len((address or "").strip()) < MIN_ADDRESS_LENGTH:
        missing.append("Alamat lengkap")
    return missing


def has_complete_customer_info(
    name: str | None,
    phone: str | None,
    address: str | None,
    fallback_phone: str | None = None,
) -> bool:
    return not missing_customer_info(name, phone, address, fallback_phone)
