"""
Semantic type hierarchy.
Base types describe storage, special types describe meaning; both share one
tree so that ``isa`` answers questions like "is a Latitude a Number?".
"""
from typing import Optional

# child → parents
_HIERARCHY: dict[str, tuple[str, ...]] = {
    # base types
    "type/Number":     ("type/*",),
    "type/Integer":    ("type/Number",),
    "type/BigInteger": ("type/Integer",),
    "type/Float":      ("type/Number",),
    "type/Decimal":    ("type/Float",),
    "type/Text":       ("type/*",),
    "type/UUID":       ("type/Text",),
    "type/DateTime":   ("type/*",),
    "type/Date":       ("type/DateTime",),
    "type/Time":       ("type/DateTime",),
    "type/Boolean":    ("type/*",),
    "type/Dictionary": ("type/Collection",),
    "type/Array":      ("type/Collection",),
    "type/Collection": ("type/*",),
    # special types
    "type/Special":    ("type/*",),
    "type/PK":         ("type/Special",),
    "type/FK":         ("type/Special",),
    "type/Category":   ("type/Special",),
    "type/Enum":       ("type/Category",),
    "type/Name":       ("type/Category",),
    "type/City":       ("type/Category",),
    "type/State":      ("type/Category",),
    "type/Country":    ("type/Category",),
    "type/ZipCode":    ("type/Text",),
    "type/Title":      ("type/Text",),
    "type/Description": ("type/Text",),
    "type/Email":      ("type/Text",),
    "type/URL":        ("type/Text",),
    "type/ImageURL":   ("type/URL",),
    "type/AvatarURL":  ("type/ImageURL",),
    "type/SerializedJSON": ("type/Text", "type/Collection"),
    "type/Coordinate": ("type/Float",),
    "type/Latitude":   ("type/Coordinate",),
    "type/Longitude":  ("type/Coordinate",),
    "type/Quantity":   ("type/Integer",),
    "type/Score":      ("type/Number",),
    "type/Currency":   ("type/Decimal",),
    "type/CreationTimestamp": ("type/DateTime",),
    "type/UNIXTimestamp": ("type/DateTime",),
    "type/UNIXTimestampSeconds": ("type/UNIXTimestamp", "type/Integer"),
    "type/UNIXTimestampMilliseconds": ("type/UNIXTimestamp", "type/Integer"),
}

# Fingerprint variant per logical data class, most specific first
_DATA_CLASSES = ("type/Number", "type/Text", "type/DateTime", "type/Boolean")
GENERAL_CLASS = "general"


def known_type(t: str) -> bool:
    return t == "type/*" or t in _HIERARCHY


def isa(child: Optional[str], ancestor: str) -> bool:
    """True when ``child`` equals ``ancestor`` or descends from it."""
    if child is None:
        return False
    if child == ancestor:
        return True
    return any(isa(parent, ancestor) for parent in _HIERARCHY.get(child, ()))


def data_class(base_type: str) -> str:
    """The fingerprint ``kind`` a field of ``base_type`` must carry."""
    for cls in _DATA_CLASSES:
        if isa(base_type, cls):
            return cls
    return GENERAL_CLASS


def is_temporal(base_type: str, special_type: Optional[str]) -> bool:
    return isa(base_type, "type/DateTime") or isa(special_type, "type/DateTime")
