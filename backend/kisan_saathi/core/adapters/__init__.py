from .base import Fetcher, GpsReader, PriceScraper

__all__ = ["Fetcher", "GpsReader", "PriceScraper"]
