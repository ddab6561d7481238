"""
Supplier Feed Schema

Decodes the supplier's XML product feed into typed records in one pass:
- ``FeedProducer``: responsible producer with address and contact
- ``FeedProduct``: product keyed by the supplier index (our SKU), with its
  named ``FeedAttribute`` properties
- ``FeedDocument``: both lists

Every attribute is optional in the source document. Missing or empty
elements fall back to the declared default ("0" for numbers, "0%" for VAT,
an empty image list, null for text) before type coercion. Any malformed
value raises ``FeedParseError`` so an import never starts on a half-read
feed.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import xml.etree.ElementTree as ET

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront.config import get_settings
from storefront.errors import FeedParseError

logger = structlog.get_logger(__name__)


# Element names used by the supplier
ROOT_TAG = "Document"
PRODUCERS_PATH = "responsibleProducers/p"
PRODUCT_TAG = "Produkt"
IMAGES_PATH = "linki_do_zdjec/link_do_zdjecia"
ATTRIBUTE_TAG = "a"

PRODUCT_FIELDS = {
    "Indeks": "sku",
    "Nazwa": "name",
    "Ean": "ean",
    "opis": "description",
    "Cena_z_cennika": "price",
    "Cena_z_sugerowana": "suggested_price",
    "Vat": "vat",
    "Stan_mag": "stock_quantity",
    "Szt_dlugosc_opakowania": "package_length",
    "Szt_szerokosc_opakowania": "package_width",
    "Szt_wysokosc_opakowania": "package_height",
    "Szt_waga_brutto": "gross_weight",
    "Kategoria": "category_path",
    "Marka": "brand_name",
}

PRODUCER_FIELDS = {
    "name": "name",
    "address/countryCode": "country_code",
    "address/street": "street",
    "address/postalCode": "postal_code",
    "address/city": "city",
    "contact/email": "email",
    "contact/phoneNumber": "phone_number",
}


def _plain_decimal(value: Any) -> Decimal:
    """Parse a plain numeric string such as ``"12.50"``."""
    if isinstance(value, Decimal):
        return value
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}")
    if not number.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return number


class FeedProducer(BaseModel):
    """Responsible producer entry"""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(min_length=1)
    country_code: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None


class FeedAttribute(BaseModel):
    """Named product property, ``<a name="...">value</a>``"""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(min_length=1)
    value: Optional[str] = None


class FeedProduct(BaseModel):
    """Product entry; ``sku`` comes from the supplier index"""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    sku: str = Field(min_length=1)
    name: Optional[str] = None
    ean: Optional[str] = None
    description: Optional[str] = None

    price: Decimal = Field(default="0", validate_default=True)
    suggested_price: Decimal = Field(default="0", validate_default=True)
    vat: int = Field(default="0%", validate_default=True)
    stock_quantity: int = Field(default="0", validate_default=True)

    package_length: Decimal = Field(default="0", validate_default=True)
    package_width: Decimal = Field(default="0", validate_default=True)
    package_height: Decimal = Field(default="0", validate_default=True)
    gross_weight: Decimal = Field(default="0", validate_default=True)

    image_urls: List[str] = Field(default_factory=list)
    category_path: Optional[str] = None
    brand_name: Optional[str] = None
    producer_name: Optional[str] = None
    attributes: List[FeedAttribute] = Field(default_factory=list)

    @field_validator(
        "price",
        "suggested_price",
        "package_length",
        "package_width",
        "package_height",
        "gross_weight",
        mode="before",
    )
    @classmethod
    def parse_decimal(cls, v: Any) -> Decimal:
        return _plain_decimal(v)

    @field_validator("vat", mode="before")
    @classmethod
    def parse_vat(cls, v: Any) -> int:
        """"23%" -> 23"""
        if isinstance(v, int):
            return v
        return int(_plain_decimal(str(v).strip().rstrip("%")))

    @field_validator("stock_quantity", mode="before")
    @classmethod
    def parse_stock(cls, v: Any) -> int:
        if isinstance(v, int):
            return v
        return int(_plain_decimal(v))

    @property
    def image_urls_text(self) -> str:
        """Image list flattened to the single space-delimited column"""
        return " ".join(self.image_urls)


class FeedDocument(BaseModel):
    """A decoded feed"""

    producers: List[FeedProducer] = Field(default_factory=list)
    products: List[FeedProduct] = Field(default_factory=list)


# =============================================================================
# XML DECODING
# =============================================================================

def _element_text(element: Optional[ET.Element]) -> Optional[str]:
    """Trimmed text of an element, CDATA and nested markup included."""
    if element is None:
        return None
    value = "".join(element.itertext()).strip()
    return value or None


def _collect(element: ET.Element, fields: Dict[str, str]) -> Dict[str, Any]:
    """Map present child elements onto record fields, dropping empty ones."""
    record: Dict[str, Any] = {}
    for path, field_name in fields.items():
        value = _element_text(element.find(path))
        if value is not None:
            record[field_name] = value
    return record


def _decode_product(element: ET.Element, producer_role_label: str) -> Dict[str, Any]:
    record = _collect(element, PRODUCT_FIELDS)

    images = [_element_text(link) for link in element.findall(IMAGES_PATH)]
    record["image_urls"] = [url for url in images if url]

    attributes = []
    for attribute in element.findall(ATTRIBUTE_TAG):
        name = (attribute.get("name") or "").strip()
        if not name:
            continue
        value = _element_text(attribute)
        attributes.append({"name": name, "value": value})
        if name == producer_role_label and "producer_name" not in record and value:
            record["producer_name"] = value
    record["attributes"] = attributes

    return record


def parse_feed(
    xml_data: Union[str, bytes],
    producer_role_label: Optional[str] = None,
) -> FeedDocument:
    """
    Decode a feed document.

    Args:
        xml_data: Raw XML text or bytes
        producer_role_label: Attribute label naming the responsible producer;
            defaults to the configured label

    Returns:
        FeedDocument: Decoded producers and products

    Raises:
        FeedParseError: If the XML is malformed or any value fails validation
    """
    label = producer_role_label or get_settings().feed.producer_role_label

    try:
        root = ET.fromstring(xml_data)
    except ET.ParseError as e:
        raise FeedParseError(f"Feed is not well-formed XML: {e}") from e

    if root.tag != ROOT_TAG:
        raise FeedParseError(f"Unexpected feed root element <{root.tag}>, expected <{ROOT_TAG}>")

    producers: List[FeedProducer] = []
    for position, element in enumerate(root.findall(PRODUCERS_PATH), start=1):
        record = _collect(element, PRODUCER_FIELDS)
        if "name" not in record:
            logger.warning("Skipping producer without a name", position=position)
            continue
        try:
            producers.append(FeedProducer.model_validate(record))
        except ValidationError as e:
            raise FeedParseError(f"Invalid producer #{position} ({record['name']}): {e}") from e

    products: List[FeedProduct] = []
    for position, element in enumerate(root.findall(PRODUCT_TAG), start=1):
        record = _decode_product(element, label)
        try:
            products.append(FeedProduct.model_validate(record))
        except ValidationError as e:
            raise FeedParseError(
                f"Invalid product #{position} (sku={record.get('sku')}): {e}"
            ) from e

    logger.info(
        "Feed decoded",
        producers=len(producers),
        products=len(products),
    )
    return FeedDocument(producers=producers, products=products)


def load_feed_file(
    path: Union[str, Path],
    producer_role_label: Optional[str] = None,
) -> FeedDocument:
    """Read and decode a feed stored on local disk."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Feed file not found: {file_path}")
    return parse_feed(file_path.read_bytes(), producer_role_label)
