import re
from dataclasses import dataclass, field

# Separators removed before matching: "ear_placement", "Form Factor", "color-name".
_SEPARATORS_RE = re.compile(r"[_\s-]+")


@dataclass(frozen=True)
class KeyRule:
    canonical: str
    contains: tuple[str, ...] = ()
    equals: tuple[str, ...] = ()

    def matches(self, squashed: str) -> bool:
        return squashed in self.equals or any(token in squashed for token in self.contains)


@dataclass(frozen=True)
class NormalizationRules:
    # First matching rule wins, so "colorsize" maps to Color.
    key_rules: tuple[KeyRule, ...] = field(
        default_factory=lambda: (
            KeyRule("Color", contains=("color", "colour")),
            KeyRule("Size", contains=("size",), equals=("formfactor",)),
            KeyRule(
                "Style",
                contains=("style", "earplacement"),
                equals=("headphonestyle",),
            ),
            KeyRule("Set", contains=("config", "pattern"), equals=("set",)),
            KeyRule("Brand", contains=("brand",)),
            KeyRule("Material", contains=("material",)),
            KeyRule("Connectivity", contains=("connectivity",)),
        )
    )


DEFAULT_RULES = NormalizationRules()


def normalize(raw_key: str, rules: NormalizationRules = DEFAULT_RULES) -> str:
    """
    Map a scraped attribute key onto the canonical vocabulary.

    Unknown keys are kept as a readable custom key: underscores become spaces
    and the first character is upper-cased ("band_width" -> "Band width").
    """
    stripped = (raw_key or "").strip()
    squashed = _SEPARATORS_RE.sub("", stripped.lower())
    if not squashed:
        return ""
    for rule in rules.key_rules:
        if rule.matches(squashed):
            return rule.canonical
    readable = " ".join(stripped.replace("_", " ").split())
    return readable[:1].upper() + readable[1:]
