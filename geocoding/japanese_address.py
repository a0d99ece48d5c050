"""Normalisation and suggestions for Japanese-style addresses"""
import re
from typing import List

# Prefecture / municipality / block markers, building types, directions, numerals
JAPANESE_LOCATION_KEYWORDS = [
    "都", "道", "府", "県",
    "市", "区", "町", "村",
    "丁目", "番地", "号", "番",
    "マンション", "アパート", "ハイツ", "コーポ", "ビル",
    "東", "西", "南", "北", "中央",
    "一", "二", "三", "四", "五", "六", "七", "八", "九", "十",
]

# Shorthand prefixes expanded to a full prefecture + city prefix
ABBREVIATIONS = [
    ("名古屋市", "愛知県名古屋市"),
    ("名駅", "愛知県名古屋市中村区名駅"),
    ("栄", "愛知県名古屋市中区栄"),
]

EXACT_EXPANSIONS = {
    "名古屋": "愛知県名古屋市",
}

_WHITESPACE = re.compile(r"\s+")


class JapaneseAddressFormatter:
    """Cleans up user-typed addresses before they are sent to a geocoder"""

    def is_japanese_address(self, address: str) -> bool:
        return any(keyword in address for keyword in JAPANESE_LOCATION_KEYWORDS)

    def format_address(self, address: str) -> str:
        formatted = address.strip()
        if not self.is_japanese_address(formatted) and formatted not in EXACT_EXPANSIONS:
            return formatted

        # Japanese addresses are written without spaces
        formatted = _WHITESPACE.sub("", formatted)

        if formatted in EXACT_EXPANSIONS:
            return EXACT_EXPANSIONS[formatted]

        for prefix, expansion in ABBREVIATIONS:
            if formatted.startswith(prefix) and not formatted.startswith(expansion):
                return expansion + formatted[len(prefix):]

        return formatted

    def get_suggestions(self, text: str, limit: int = 5) -> List[str]:
        suggestions: List[str] = []

        if "名古屋" in text or "なごや" in text:
            suggestions.extend([
                "愛知県名古屋市中区栄3-15-33",
                "愛知県名古屋市東区泉1-23-22",
                "愛知県名古屋市千種区今池1-6-3",
                "愛知県名古屋市昭和区御器所通3-12-1",
                "愛知県名古屋市中村区名駅1-1-1",
            ])

        if "栄" in text or "さかえ" in text:
            suggestions.extend([
                "愛知県名古屋市中区栄3-15-33",
                "愛知県名古屋市中区栄2-10-19",
                "愛知県名古屋市中区栄4-1-8",
            ])

        if "駅" in text or "えき" in text:
            suggestions.extend([
                "愛知県名古屋市中村区名駅1-1-1",
                "愛知県名古屋市千種区今池駅前",
                "愛知県名古屋市東区新栄町駅前",
            ])

        # Drop duplicates, keep order
        unique = list(dict.fromkeys(suggestions))
        return unique[:limit]
