"""
Offline address table for the Nagoya area

Used when the online geocoder is disabled or fails.
"""
from typing import Dict, List

from navigation.core.data_types import Coordinate

NAGOYA_CENTER = Coordinate(35.1815, 136.9066)

NAGOYA_ADDRESSES: Dict[str, Coordinate] = {
    # Sakae (central shopping district)
    "愛知県名古屋市中区栄3-15-33": Coordinate(35.1681, 136.9062),
    "愛知県名古屋市中区栄": Coordinate(35.1681, 136.9062),
    "栄": Coordinate(35.1681, 136.9062),

    # Higashi ward
    "愛知県名古屋市東区東桜1-13-3": Coordinate(35.1787, 136.9216),
    "愛知県名古屋市東区泉": Coordinate(35.1734, 136.9156),

    # Nagoya Castle
    "愛知県名古屋市中区本丸1-1": Coordinate(35.1856, 136.8997),
    "名古屋城": Coordinate(35.1856, 136.8997),

    # Nagoya Station
    "愛知県名古屋市中村区名駅1-1-1": Coordinate(35.1706, 136.8816),
    "名古屋駅": Coordinate(35.1706, 136.8816),
    "名古屋站": Coordinate(35.1706, 136.8816),

    # Atsuta Shrine
    "愛知県名古屋市熱田区神宮1-1-1": Coordinate(35.1282, 136.9070),
    "熱田神宮": Coordinate(35.1282, 136.9070),

    "愛知県名古屋市熱田区明野町2-10": Coordinate(35.1205, 136.9025),
    "愛知県尾張旭市緑町緑丘-100-14-10": Coordinate(35.2164, 137.0350),

    # Residential areas
    "愛知県名古屋市千種区今池1-6-3": Coordinate(35.1649, 136.9280),
    "愛知県名古屋市昭和区御器所": Coordinate(35.1463, 136.9342),
    "愛知県名古屋市瑞穂区瑞穂通": Coordinate(35.1311, 136.9342),

    # Port and mixed industrial areas
    "愛知県名古屋市港区港町1-11": Coordinate(35.1085, 136.8645),
    "愛知県名古屋市南区道徳新町": Coordinate(35.1187, 136.9123),

    "愛知県名古屋市天白区植田": Coordinate(35.1231, 136.9742),

    # Short forms users tend to type
    "名古屋": NAGOYA_CENTER,
    "愛知県名古屋市": NAGOYA_CENTER,
    "家": Coordinate(35.1649, 136.9280),
    "うち": Coordinate(35.1649, 136.9280),
    "我的家": Coordinate(35.1649, 136.9280),
}

SUGGESTED_ADDRESSES: List[str] = [
    "愛知県名古屋市中区栄3-15-33",
    "愛知県名古屋市東区泉",
    "愛知県名古屋市千種区今池1-6-3",
    "愛知県名古屋市昭和区御器所",
    "愛知県名古屋市天白区植田",
    "名古屋駅",
    "名古屋城",
    "熱田神宮",
]


def lookup(address: str, default: Coordinate = NAGOYA_CENTER) -> Coordinate:
    """
    Find address in the table: exact match first, then a substring match in
    either direction, otherwise the default coordinate
    """
    address = address.strip()
    if not address:
        return default
    if address in NAGOYA_ADDRESSES:
        return NAGOYA_ADDRESSES[address]

    for key, coordinate in NAGOYA_ADDRESSES.items():
        if key in address or address in key:
            return coordinate

    return default
