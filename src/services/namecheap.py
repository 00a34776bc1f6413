"""Domain availability lookups against the Namecheap XML API."""

import logging
import re
from dataclasses import asdict, dataclass
from typing import Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)

CHECK_COMMAND = "namecheap.domains.check"
PRICING_COMMAND = "namecheap.users.getPricing"
DEFAULT_CURRENCY = "USD"

ERROR_CODES = {
    "3031510": "Error response from domain provider",
    "3011511": "Unknown response from the provider",
    "2011169": "Only 50 domains are allowed in a single check command",
    "3011500": "Unknown error from domain provider",
    "3031500": "Domain not found",
}

_ERROR_NUMBER_PATTERN = re.compile(r'ErrorNo="([0-9]+)"')
_ERROR_MESSAGE_PATTERN = re.compile(r'Number="([0-9]+)">([^<]+)<')
_DOMAIN_PATTERN = re.compile(r"^(?=.{3,253}$)[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?(?:\.[a-z0-9-]{2,63})+$", re.I)
_TLD_PATTERN = re.compile(r"\.([a-z0-9]+)$", re.I)
_PRICE_PATTERN = re.compile(r'<Price[^>]*YourPrice="([0-9.]+)"[^>]*Currency="([A-Z]+)"[^>]*>', re.I)
_FALLBACK_PRICE_PATTERN = re.compile(r'<Price[^>]*\sPrice="([0-9.]+)"[^>]*Currency="([A-Z]+)"[^>]*>', re.I)


class NamecheapConfigurationError(ValueError):
    """Namecheap credentials are missing from the environment."""


@dataclass
class DomainCheckResult:
    domain: str
    available: bool = False
    is_premium: bool = False
    price: Optional[float] = None
    currency: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DomainPriceResult:
    domain: str
    tld: str
    price: Optional[float] = None
    currency: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def is_valid_domain(domain: str) -> bool:
    return bool(_DOMAIN_PATTERN.match(domain or ""))


def extract_tld(domain: str) -> Optional[str]:
    """Last label of ``domain`` without the dot, e.g. ``io`` for ``lumora.io``."""
    match = _TLD_PATTERN.search((domain or "").strip())
    return match.group(1).lower() if match else None


def _result_attribute(xml_text: str, domain: str, attribute: str, value_pattern: str) -> Optional[str]:
    pattern = re.compile(
        rf'DomainCheckResult\s+Domain="{re.escape(domain)}"[^>]*?\s{attribute}="({value_pattern})"',
        re.I,
    )
    match = pattern.search(xml_text)
    return match.group(1) if match else None


def parse_domain_check_response(xml_text: str, domain: str) -> DomainCheckResult:
    """Read availability, premium flag and premium price for ``domain``."""
    error_match = _ERROR_NUMBER_PATTERN.search(xml_text)
    if error_match and error_match.group(1) != "0":
        code = error_match.group(1)
        return DomainCheckResult(
            domain=domain,
            error=ERROR_CODES.get(code, f"Error code {code} from domain provider"),
            error_code=code,
        )

    if 'Status="ERROR"' in xml_text:
        message_match = _ERROR_MESSAGE_PATTERN.search(xml_text)
        return DomainCheckResult(
            domain=domain,
            error=message_match.group(2).strip() if message_match else "Unknown error from domain provider",
            error_code=message_match.group(1) if message_match else None,
        )

    if 'Status="OK"' not in xml_text:
        return DomainCheckResult(domain=domain, error="Domain provider API returned an error")

    available = _result_attribute(xml_text, domain, "Available", "true|false")
    if available is None:
        return DomainCheckResult(
            domain=domain,
            error="Could not determine domain availability from provider response",
        )

    result = DomainCheckResult(
        domain=domain,
        available=available.lower() == "true",
        is_premium=(_result_attribute(xml_text, domain, "IsPremiumName", "true|false") or "").lower() == "true",
    )

    price = _result_attribute(xml_text, domain, "PremiumRegistrationPrice", r"[0-9.]+")
    if price:
        try:
            amount = float(price)
        except ValueError:
            amount = 0.0
        if amount > 0:
            result.price = amount
            result.currency = DEFAULT_CURRENCY

    return result


def parse_domain_price_response(xml_text: str, domain: str, tld: str) -> DomainPriceResult:
    """Read the registration price for ``tld``; ``YourPrice`` wins over the list ``Price``."""
    if 'Status="ERROR"' in xml_text:
        message_match = _ERROR_MESSAGE_PATTERN.search(xml_text)
        code = message_match.group(1) if message_match else None
        message = message_match.group(2).strip() if message_match else None
        return DomainPriceResult(
            domain=domain,
            tld=tld,
            error=message or ERROR_CODES.get(code or "", "Unknown error from domain provider"),
            error_code=code,
        )

    match = _PRICE_PATTERN.search(xml_text) or _FALLBACK_PRICE_PATTERN.search(xml_text)
    if match is None:
        return DomainPriceResult(
            domain=domain,
            tld=tld,
            error="Could not determine domain pricing from provider response",
        )

    return DomainPriceResult(
        domain=domain,
        tld=tld,
        price=float(match.group(1)),
        currency=match.group(2).upper(),
    )


class NamecheapClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        username: Optional[str] = None,
        client_ip: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.namecheap_api_key
        self.username = username or settings.namecheap_username
        self.client_ip = client_ip or settings.namecheap_client_ip
        self.api_url = api_url or (
            settings.namecheap_sandbox_url if settings.namecheap_sandbox else settings.namecheap_api_url
        )
        self.timeout = timeout or settings.namecheap_timeout
        self._transport = transport

    def _require_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("NAMECHEAP_API_KEY", self.api_key),
                ("NAMECHEAP_USERNAME", self.username),
                ("NAMECHEAP_CLIENT_IP", self.client_ip),
            )
            if not value
        ]
        if missing:
            raise NamecheapConfigurationError(
                f"Missing Namecheap API configuration. Please set {', '.join(missing)}."
            )

    def _build_params(self, command: str, **extra: str) -> dict:
        params = {
            "ApiUser": self.username,
            "ApiKey": self.api_key,
            "UserName": self.username,
            "ClientIp": self.client_ip,
            "Command": command,
        }
        params.update(extra)
        return params

    async def check_domain(self, domain: str) -> DomainCheckResult:
        self._require_credentials()
        logger.info(f"Checking domain availability for: {domain}")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.api_url, params=self._build_params(CHECK_COMMAND, DomainList=domain))
            except httpx.HTTPError as e:
                logger.error(f"Error calling Namecheap API: {e}")
                raise

        if response.status_code >= 400:
            logger.error(f"Namecheap API returned status {response.status_code}")
            return DomainCheckResult(
                domain=domain,
                error=f"Domain provider returned error status: {response.status_code}",
            )

        result = parse_domain_check_response(response.text, domain)
        if result.error:
            logger.warning(f"Domain check for {domain} failed: {result.error}")
        return result

    async def get_tld_price(self, domain: str, user_location: Optional[str] = None) -> DomainPriceResult:
        """Registration price of the TLD ``domain`` ends in.

        Raises:
            ValueError: ``domain`` has no TLD.
            NamecheapConfigurationError: Credentials are missing.
            httpx.HTTPError: The provider could not be reached or timed out.
        """
        tld = extract_tld(domain)
        if tld is None:
            raise ValueError("Invalid domain format")
        self._require_credentials()

        params = self._build_params(
            PRICING_COMMAND,
            ProductType="DOMAIN",
            ProductCategory="REGISTER",
            ActionName="REGISTER",
            ProductName=tld,
        )
        if user_location:
            params["UserLocation"] = user_location

        logger.info(f"Getting pricing for TLD: .{tld}")
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.api_url, params=params)
            except httpx.HTTPError as e:
                logger.error(f"Error fetching domain price: {e}")
                raise

        if response.status_code >= 400:
            logger.error(f"Namecheap API returned status {response.status_code}")
            return DomainPriceResult(
                domain=domain,
                tld=tld,
                error=f"Domain provider returned error status: {response.status_code}",
            )

        result = parse_domain_price_response(response.text, domain, tld)
        if result.error:
            logger.warning(f"Price lookup for .{tld} failed: {result.error}")
        else:
            logger.info(f"Domain price for .{tld}: {result.price} {result.currency}")
        return result
