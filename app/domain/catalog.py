from __future__ import annotations
import re
from enum import Enum
from typing import Optional, Pattern, Protocol, Sequence, Tuple


class Category(str, Enum):
    KICKSTARTERS = "kickstarters"
    BEER = "beer"
    DRINKS = "drinks"
    MERCH = "merch"
    DESSERTS = "desserts"
    SPIRITS = "spirits"


class Channel(str, Enum):
    SQUARE_ONLINE = "square_online"
    DOOR_DASH = "door_dash"
    IN_STORE = "in_store"


# -----------------------------------------------------------------------------
# 1) Keyword rules, evaluated top to bottom; the first match wins.
#    "Root Beer Float" lands in beer, not desserts. Keywords of up to
#    SHORT_KEYWORD_LENGTH characters must start a word ("rum" is not
#    found in "Crumble").
# -----------------------------------------------------------------------------

CATEGORY_RULES: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (
        Category.KICKSTARTERS,
        (
            "kickstarter", "starter", "appetizer", "wings", "nachos", "fries",
            "pretzel", "calamari", "sliders", "quesadilla", "queso",
        ),
    ),
    (
        Category.BEER,
        (
            "beer", "ipa", "lager", "stout", "porter", "pilsner", "draft",
            "pale ale", "amber ale", "hefeweizen", "cider", "flight",
        ),
    ),
    (
        Category.DRINKS,
        (
            "soda", "coke", "pepsi", "sprite", "lemonade", "iced tea", "hot tea",
            "sweet tea", "coffee", "espresso", "latte", "juice", "kombucha",
            "mocktail", "n/a",
        ),
    ),
    (
        Category.MERCH,
        (
            "shirt", "hoodie", "trucker hat", "beanie", "merch", "sticker", "gift card",
            "glassware", "growler", "koozie", "pint glass",
        ),
    ),
    (
        Category.DESSERTS,
        (
            "dessert", "cake", "brownie", "cookie", "ice cream", "sundae",
            "pie", "float", "churro", "cobbler",
        ),
    ),
    (
        Category.SPIRITS,
        (
            "cocktail", "whiskey", "whisky", "bourbon", "vodka", "tequila",
            "mezcal", "rum", "margarita", "martini", "old fashioned",
            "negroni", "mojito", "spritz", "shot", "gin and tonic", "gin & tonic",
        ),
    ),
)

CHANNEL_RULES: Tuple[Tuple[Channel, Tuple[str, ...]], ...] = (
    (Channel.SQUARE_ONLINE, ("square online", "online store", "ecommerce", "weebly", "website")),
    (Channel.DOOR_DASH, ("doordash", "door dash", "ubereats", "uber eats", "grubhub", "postmates")),
    (Channel.IN_STORE, ("point of sale", "square pos", "in store", "in-store", "register", "kiosk")),
)

DEFAULT_CHANNEL = Channel.IN_STORE
SHORT_KEYWORD_LENGTH = 3


# -----------------------------------------------------------------------------
# 2) Classifier interface and the keyword implementation
# -----------------------------------------------------------------------------

class Classifier(Protocol):
    """Maps item names to categories and order source labels to channels."""

    def classify(self, item_name: str) -> Optional[Category]: ...

    def match_channel(self, source_label: Optional[str]) -> Optional[Channel]: ...


def _compile(rules: Sequence[Tuple[Enum, Tuple[str, ...]]]) -> Tuple[Tuple[Enum, Pattern[str]], ...]:
    compiled = []
    for bucket, keywords in rules:
        if not keywords:
            continue
        alternatives = [
            (r"\b" if len(k) <= SHORT_KEYWORD_LENGTH else "") + re.escape(k.lower())
            for k in keywords
        ]
        compiled.append((bucket, re.compile("|".join(alternatives))))
    return tuple(compiled)


def _first_match(text: str, rules: Sequence[Tuple[Enum, Pattern[str]]]):
    lowered = text.lower()
    for bucket, pattern in rules:
        if pattern.search(lowered):
            return bucket
    return None


class KeywordClassifier:
    """
    Case-insensitive keyword matching over ordered rule tables.

    `classify` returns None for names no rule covers. `match_channel`
    returns the default channel for a missing label and None for a label
    no rule covers, so callers can count the gap before defaulting.
    """

    def __init__(
        self,
        category_rules: Sequence[Tuple[Category, Tuple[str, ...]]] = CATEGORY_RULES,
        channel_rules: Sequence[Tuple[Channel, Tuple[str, ...]]] = CHANNEL_RULES,
        default_channel: Channel = DEFAULT_CHANNEL,
    ):
        self.category_rules = _compile(category_rules)
        self.channel_rules = _compile(channel_rules)
        self.default_channel = default_channel

    def classify(self, item_name: str) -> Optional[Category]:
        return _first_match(item_name or "", self.category_rules)

    def match_channel(self, source_label: Optional[str]) -> Optional[Channel]:
        if not source_label or not source_label.strip():
            return self.default_channel
        return _first_match(source_label, self.channel_rules)


default_classifier = KeywordClassifier()


def classify(item_name: str) -> Optional[Category]:
    """Category of a line item name, or None when no rule matches."""
    return default_classifier.classify(item_name)


def classify_channel(source_label: Optional[str]) -> Channel:
    """Sales channel of an order source label; in-store when absent or unknown."""
    return default_classifier.match_channel(source_label) or DEFAULT_CHANNEL
