# backend/kisan_saathi/data/commodities.py
from typing import NamedTuple


class PriceBand(NamedTuple):
    min: float
    max: float
    modal: float


COMMODITY_HINDI: dict[str, str] = {
    "Rice": "चावल",
    "Wheat": "गेहूं",
    "Potato": "आलू",
    "Onion": "प्याज",
    "Tomato": "टमाटर",
    "Sugarcane": "गन्ना",
    "Cotton": "कपास",
    "Maize": "मक्का",
    "Soybean": "सोयाबीन",
    "Groundnut": "मूंगफली",
    "Mustard": "सरसों",
    "Turmeric": "हल्दी",
    "Chilli": "मिर्च",
    "Coriander": "धनिया",
    "Cumin": "जीरा",
    "Ginger": "अदरक",
    "Garlic": "लहसुन",
    "Cabbage": "पत्ता गोभी",
    "Cauliflower": "फूल गोभी",
    "Carrot": "गाजर",
}

# Typical INR bands used only when scraping fails
BASE_PRICES: dict[str, PriceBand] = {
    "Rice": PriceBand(2800, 3200, 3000),
    "Wheat": PriceBand(2200, 2600, 2400),
    "Potato": PriceBand(15, 25, 20),
    "Onion": PriceBand(20, 35, 28),
    "Tomato": PriceBand(25, 45, 35),
    "Cotton": PriceBand(5800, 6200, 6000),
    "Sugarcane": PriceBand(280, 320, 300),
    "Maize": PriceBand(1800, 2200, 2000),
    "Soybean": PriceBand(4200, 4800, 4500),
}
DEFAULT_BAND = PriceBand(1000, 1500, 1250)

REGIONAL_FACTORS: dict[str, float] = {
    "Punjab": 1.10,
    "Maharashtra": 1.05,
}


def hindi_name(commodity: str) -> str:
    return COMMODITY_HINDI.get(commodity, commodity)
