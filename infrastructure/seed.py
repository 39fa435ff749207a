"""Demo catalogue loaded into the in-memory villa repository"""
from datetime import date, timedelta
from typing import List, Optional

from domain.dates import to_date_key
from domain.entities import Villa


def _nights(start: date, count: int) -> List[str]:
    return [to_date_key(start + timedelta(days=i)) for i in range(count)]


def demo_villas(today: Optional[date] = None) -> List[Villa]:
    """Four Ubud villas with a few stays already booked"""
    today = today or date.today()
    return [
        Villa(
            id="1",
            name="Sawah Terrace Villa",
            location="Tegallalang, Ubud",
            description="Rice terrace views with traditional Balinese charm",
            capacity=6,
            bedrooms=3,
            bathrooms=3,
            minimum_stay=2,
            price_per_night=4_500_000,
            cleaning_fee=500_000,
            amenities=["Private Pool", "Rice Terrace View", "Kitchen", "WiFi", "AC", "Daily Breakfast"],
            rating=4.9,
            review_count=127,
            booked_dates=_nights(today + timedelta(days=10), 3) + _nights(today + timedelta(days=20), 4),
        ),
        Villa(
            id="2",
            name="Jungle Hideaway Villa",
            location="Payangan, Ubud",
            description="Private jungle sanctuary with infinity pool",
            capacity=4,
            bedrooms=2,
            bathrooms=2,
            minimum_stay=1,
            price_per_night=3_800_000,
            cleaning_fee=350_000,
            amenities=["Infinity Pool", "Jungle View", "Open Living", "WiFi", "AC", "Yoga Deck"],
            rating=4.8,
            review_count=89,
            booked_dates=_nights(today + timedelta(days=5), 2),
        ),
        Villa(
            id="3",
            name="Canopy Treehouse Villa",
            location="Petulu, Ubud",
            description="Romantic treehouse with outdoor bathtub",
            capacity=2,
            bedrooms=1,
            bathrooms=1,
            minimum_stay=2,
            price_per_night=5_200_000,
            cleaning_fee=300_000,
            amenities=["Outdoor Bathtub", "Forest View", "Bamboo Design", "WiFi", "Romantic Setup", "Breakfast"],
            is_available=False,
            rating=5.0,
            review_count=64,
        ),
        Villa(
            id="4",
            name="Heritage Garden Villa",
            location="Central Ubud",
            description="Traditional Joglo with tropical gardens",
            capacity=8,
            bedrooms=4,
            bathrooms=4,
            minimum_stay=3,
            maximum_stay=21,
            price_per_night=6_500_000,
            cleaning_fee=750_000,
            service_fee_amount=500_000,
            amenities=["Koi Pond", "Traditional Joglo", "Chef Service", "WiFi", "AC", "Private Garden"],
            rating=4.9,
            review_count=156,
            booked_dates=_nights(today + timedelta(days=14), 5),
        ),
    ]
