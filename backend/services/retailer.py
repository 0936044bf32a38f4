from typing import Dict, List, Tuple
from urllib.parse import urlsplit

from models.product import RetailerInfo

# ordered: the first fragment contained in the domain wins
KNOWN_RETAILERS: List[Tuple[str, Dict[str, str]]] = [
    ("amazon", {
        "name": "Amazon",
        "logo_url": "https://logo.clearbit.com/amazon.in",
        "brand_color": "#FF9900",
    }),
    ("flipkart", {
        "name": "Flipkart",
        "logo_url": "https://logo.clearbit.com/flipkart.com",
        "brand_color": "#2874F0",
    }),
    ("myntra", {
        "name": "Myntra",
        "logo_url": "https://logo.clearbit.com/myntra.com",
        "brand_color": "#FF3F6C",
    }),
    ("ajio", {
        "name": "Ajio",
        "logo_url": "https://logo.clearbit.com/ajio.com",
        "brand_color": "#000000",
    }),
    ("croma", {
        "name": "Croma",
        "logo_url": "https://logo.clearbit.com/croma.com",
        "brand_color": "#0DB14B",
    }),
]


def extract_domain(url: str) -> str:
    """Host of `url` without a leading "www.", or the raw string if there is no host.

    The host keeps its original case; retailer matching is case-sensitive.
    """
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        netloc = ""
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        # bracketed IPv6 literal, may be followed by :port
        host = host[:host.find("]") + 1]
    else:
        host = host.partition(":")[0]
    domain = host or url
    if domain.startswith("www."):
        domain = domain[len("www."):]
    return domain


def _generic_name(domain: str) -> str:
    label = domain.split(".")[0]
    return label[:1].upper() + label[1:]


def resolve_retailer(url: str) -> RetailerInfo:
    """Map a product URL to retailer branding. Never raises."""
    domain = extract_domain(url)

    for fragment, branding in KNOWN_RETAILERS:
        if fragment in domain:
            return RetailerInfo(domain=domain, **branding)

    return RetailerInfo(name=_generic_name(domain), domain=domain)
