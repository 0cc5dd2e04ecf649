# backend/kisan_saathi/data/cities.py
from typing import NamedTuple


class CityRef(NamedTuple):
    name: str
    state: str
    lat: float
    lon: float


# Named agricultural reference point used when nothing else works
FALLBACK_CENTER = CityRef("Varanasi", "Uttar Pradesh", 25.3176, 82.9739)

INDIAN_CITIES: tuple[CityRef, ...] = (
    CityRef("Mumbai", "Maharashtra", 19.0760, 72.8777),
    CityRef("Delhi", "Delhi", 28.7041, 77.1025),
    CityRef("Bangalore", "Karnataka", 12.9716, 77.5946),
    CityRef("Hyderabad", "Telangana", 17.3850, 78.4867),
    CityRef("Chennai", "Tamil Nadu", 13.0827, 80.2707),
    CityRef("Kolkata", "West Bengal", 22.5726, 88.3639),
    CityRef("Pune", "Maharashtra", 18.5204, 73.8567),
    CityRef("Ahmedabad", "Gujarat", 23.0225, 72.5714),
    CityRef("Jaipur", "Rajasthan", 26.9124, 75.7873),
    CityRef("Surat", "Gujarat", 21.1702, 72.8311),
    CityRef("Lucknow", "Uttar Pradesh", 26.8467, 80.9462),
    CityRef("Kanpur", "Uttar Pradesh", 26.4499, 80.3319),
    CityRef("Nagpur", "Maharashtra", 21.1458, 79.0882),
    CityRef("Indore", "Madhya Pradesh", 22.7196, 75.8577),
    CityRef("Thane", "Maharashtra", 19.2183, 72.9781),
    CityRef("Bhopal", "Madhya Pradesh", 23.2599, 77.4126),
    CityRef("Visakhapatnam", "Andhra Pradesh", 17.6868, 83.2185),
    CityRef("Patna", "Bihar", 25.5941, 85.1376),
    CityRef("Vadodara", "Gujarat", 22.3072, 73.1812),
    CityRef("Ghaziabad", "Uttar Pradesh", 28.6692, 77.4538),
    CityRef("Ludhiana", "Punjab", 30.9010, 75.8573),
    CityRef("Agra", "Uttar Pradesh", 27.1767, 78.0081),
    CityRef("Nashik", "Maharashtra", 19.9975, 73.7898),
    CityRef("Faridabad", "Haryana", 28.4089, 77.3178),
    CityRef("Meerut", "Uttar Pradesh", 28.9845, 77.7064),
    CityRef("Rajkot", "Gujarat", 22.3039, 70.8022),
    CityRef("Varanasi", "Uttar Pradesh", 25.3176, 82.9739),
    CityRef("Srinagar", "Jammu and Kashmir", 34.0837, 74.7973),
    CityRef("Aurangabad", "Maharashtra", 19.8762, 75.3433),
    CityRef("Dhanbad", "Jharkhand", 23.7957, 86.4304),
    CityRef("Amritsar", "Punjab", 31.6340, 74.8723),
    CityRef("Allahabad", "Uttar Pradesh", 25.4358, 81.8463),
    CityRef("Ranchi", "Jharkhand", 23.3441, 85.3096),
    CityRef("Howrah", "West Bengal", 22.5958, 88.2636),
    CityRef("Coimbatore", "Tamil Nadu", 11.0168, 76.9558),
    CityRef("Jabalpur", "Madhya Pradesh", 23.1815, 79.9864),
    CityRef("Gwalior", "Madhya Pradesh", 26.2183, 78.1828),
    CityRef("Vijayawada", "Andhra Pradesh", 16.5062, 80.6480),
    CityRef("Jodhpur", "Rajasthan", 26.2389, 73.0243),
    CityRef("Madurai", "Tamil Nadu", 9.9252, 78.1198),
    CityRef("Raipur", "Chhattisgarh", 21.2514, 81.6296),
    CityRef("Kota", "Rajasthan", 25.2138, 75.8648),
    CityRef("Chandigarh", "Chandigarh", 30.7333, 76.7794),
    CityRef("Guwahati", "Assam", 26.1445, 91.7362),
    CityRef("Solapur", "Maharashtra", 17.6599, 75.9064),
    CityRef("Hubli-Dharwad", "Karnataka", 15.3647, 75.1240),
    CityRef("Bareilly", "Uttar Pradesh", 28.3670, 79.4304),
)
