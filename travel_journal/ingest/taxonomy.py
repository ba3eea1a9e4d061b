from __future__ import annotations

import unicodedata
from typing import Tuple

from travel_journal.core.models import DEFAULT_CATEGORY

KeywordRule = Tuple[Tuple[str, ...], str]

# Tag families, matched in this order. Each rule is (keyword variants, tag);
# keywords are lower-case English/Korean pairs matched as substrings.
LOCATION_TAGS: tuple[KeywordRule, ...] = (
    (("whistler", "휘슬러"), "휘슬러"),
    (("blackcomb", "블랙콤"), "블랙콤"),
    (("village", "빌리지"), "휘슬러빌리지"),
    (("mountain", "마운틴"), "마운틴"),
    (("bikepark", "bike-park", "bike_park", "bike park", "바이크파크"), "바이크파크"),
    (("peak", "정상"), "정상"),
    (("lake", "호수"), "호수"),
    (("vancouver", "밴쿠버"), "밴쿠버"),
    (("highway", "sea-to-sky", "고속도로"), "시투스카이"),
)

ACTIVITY_TAGS: tuple[KeywordRule, ...] = (
    (("bike", "biking", "바이크", "바이킹", "자전거"), "바이킹"),
    (("downhill", "다운힐"), "다운힐"),
    (("trail", "트레일"), "트레일"),
    (("jump", "점프"), "점프"),
    (("hike", "hiking", "하이킹", "등산"), "하이킹"),
    (("gondola", "곤돌라"), "곤돌라"),
    (("lift", "리프트"), "리프트"),
    (("drive", "driving", "드라이브"), "드라이브"),
)

CONTENT_TAGS: tuple[KeywordRule, ...] = (
    (("view", "전경"), "전경"),
    (("landscape", "scenery", "풍경"), "풍경"),
    (("action", "액션"), "액션"),
    (("selfie", "셀카"), "셀카"),
    (("portrait", "people", "friend", "인물", "친구"), "인물"),
    (("food", "lunch", "dinner", "breakfast", "음식", "점심", "저녁"), "음식"),
    (("cafe", "coffee", "카페", "커피"), "카페"),
    (("hotel", "lodge", "hostel", "cabin", "호텔", "숙소"), "숙소"),
    (("tour", "sightseeing", "관광"), "관광"),
)

TIME_TAGS: tuple[KeywordRule, ...] = (
    (("sunrise", "morning", "아침", "일출"), "아침"),
    (("afternoon", "오후"), "오후"),
    (("sunset", "노을", "일몰"), "노을"),
    (("night", "야경", "밤"), "야경"),
)

EQUIPMENT_TAGS: tuple[KeywordRule, ...] = (
    (("helmet", "헬멧"), "헬멧"),
    (("gear", "armor", "pads", "장비", "보호대"), "보호장비"),
    (("rental", "렌탈"), "렌탈"),
    (("gopro", "고프로"), "고프로"),
    (("drone", "드론"), "드론"),
)

TAG_FAMILIES: tuple[tuple[str, tuple[KeywordRule, ...]], ...] = (
    ("location", LOCATION_TAGS),
    ("activity", ACTIVITY_TAGS),
    ("content", CONTENT_TAGS),
    ("time", TIME_TAGS),
    ("equipment", EQUIPMENT_TAGS),
)

# Category cascade: the first rule with a matching keyword wins.
CATEGORY_RULES: tuple[KeywordRule, ...] = (
    (
        (
            "mountain", "마운틴", "view", "전경", "landscape", "scenery", "풍경",
            "village", "빌리지", "peak", "정상", "lake", "호수", "sunset", "노을",
        ),
        "landscape",
    ),
    (
        (
            "bike", "biking", "바이크", "바이킹", "downhill", "다운힐", "jump", "점프",
            "trail", "트레일", "action", "액션",
        ),
        "action",
    ),
    (("selfie", "셀카", "portrait", "people", "friend", "인물", "친구"), "portrait"),
    (
        (
            "food", "lunch", "dinner", "breakfast", "cafe", "coffee",
            "음식", "점심", "저녁", "카페", "커피",
        ),
        "food",
    ),
    (("hotel", "lodge", "hostel", "cabin", "호텔", "숙소"), "accommodation"),
)

DEFAULT_TAGS: tuple[str, ...] = ("휘슬러", "여행", "갤러리")


def _fold(filename: str) -> str:
    # macOS hands over Hangul names decomposed (NFD); keywords are composed.
    return unicodedata.normalize("NFC", filename).casefold()


def _matches(name: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in name for keyword in keywords)


def match_tags(filename: str) -> list[str]:
    """Collect every tag whose keywords appear in the filename, first match first."""
    name = _fold(filename)
    tags: list[str] = []
    for _, rules in TAG_FAMILIES:
        for keywords, tag in rules:
            if tag not in tags and _matches(name, keywords):
                tags.append(tag)
    return tags


def match_category(filename: str) -> str:
    name = _fold(filename)
    for keywords, category in CATEGORY_RULES:
        if _matches(name, keywords):
            return category
    return DEFAULT_CATEGORY


def classify_filename(filename: str) -> tuple[list[str], str]:
    """Derive (tags, category) from an original upload name. Never fails."""
    tags = match_tags(filename) or list(DEFAULT_TAGS)
    return tags, match_category(filename)
