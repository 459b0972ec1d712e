"""
CRM integrations: OnePage (contacts, notes, call logging) and Neon (donations).
"""

from .gateway import DonorDataGateway, donor_gateway
from .neon_client import NeonClient, summarize_donations
from .onepage_client import OnePageClient

__all__ = [
    "DonorDataGateway",
    "donor_gateway",
    "NeonClient",
    "OnePageClient",
    "summarize_donations",
]
