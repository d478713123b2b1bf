"""Plant-trait library.

Each trait describes how a crop is scheduled relative to the user's frost
dates:

    days_to_maturity  days from planting-in-ground to harvest
    spring_offset     outdoor planting date relative to the spring frost
                      date (negative = before the frost date)
    indoor_offset     seed-starting date relative to the outdoor planting
                      date, or ``None`` for direct-sow crops
    succession        replant the square after each harvest
    replant_delay     days between a harvest and the next sowing

Records on the bed grid refer to traits by name only.  Lookups that don't
match anything return ``None`` and callers fall back to sensible defaults.
"""

from dataclasses import asdict, dataclass
from datetime import date

INDOOR = "indoor"
OUTDOOR = "outdoor"
START_METHODS = (INDOOR, OUTDOOR)

# Used when a square is assigned a plant the library doesn't know yet.
DEFAULT_DAYS_TO_MATURITY = 60

DEFAULT_SPRING_FROST = (4, 30)
DEFAULT_FALL_FROST = (10, 15)


@dataclass(frozen=True)
class PlantTrait:
    """Agronomic traits for one crop, keyed by *name*."""

    name: str
    days_to_maturity: int = DEFAULT_DAYS_TO_MATURITY
    spring_offset: int = 0
    indoor_offset: int | None = None
    succession: bool = False
    replant_delay: int = 0
    notes: str = ""
    start_method: str | None = None

    def __post_init__(self):
        # without an explicit start method, an indoor offset implies indoors
        if self.start_method is None:
            method = INDOOR if self.indoor_offset is not None else OUTDOOR
            object.__setattr__(self, "start_method", method)

    @property
    def starts_indoors(self) -> bool:
        """True if seedlings are started inside before going out."""
        return self.start_method == INDOOR

    @property
    def cycle_days(self) -> int:
        """Length of one plant → harvest → replant cycle."""
        return self.days_to_maturity + self.replant_delay

    # ---- serialisation ----

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "daysToMaturity": self.days_to_maturity,
            "springOffset": self.spring_offset,
            "indoorOffset": self.indoor_offset,
            "startMethod": self.start_method,
            "succession": self.succession,
            "replantDelay": self.replant_delay,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlantTrait":
        """Build a trait from its stored form.

        Older snapshots stored maturity under ``"days"``; both keys are
        understood.  Raises ``KeyError`` / ``TypeError`` / ``ValueError``
        for entries that can't be repaired.
        """
        name = str(data["name"]).strip()
        if not name:
            raise ValueError("plant name must not be empty")

        days = data.get("daysToMaturity", data.get("days", DEFAULT_DAYS_TO_MATURITY))
        indoor = data.get("indoorOffset")
        succession = data.get("succession", False)
        if isinstance(succession, str):
            succession = succession.strip().lower() == "true"
        method = data.get("startMethod")
        if method not in START_METHODS:
            method = None

        return cls(
            name=name,
            days_to_maturity=int(days),
            spring_offset=int(data.get("springOffset") or 0),
            indoor_offset=None if indoor in (None, "") else int(indoor),
            succession=bool(succession),
            replant_delay=max(0, int(data.get("replantDelay") or 0)),
            notes=str(data.get("notes") or ""),
            start_method=method,
        )


# days-to-maturity / offsets for the starter library
DEFAULT_PLANTS: tuple[PlantTrait, ...] = (
    PlantTrait("Broccoli", 70, spring_offset=-7, indoor_offset=-42,
               start_method=INDOOR),
    PlantTrait("Tomato", 75, spring_offset=14, indoor_offset=-56,
               start_method=INDOOR),
    PlantTrait("Lettuce", 45, spring_offset=-14, indoor_offset=-28,
               start_method=INDOOR, succession=True, replant_delay=7,
               notes="Sow again after each cutting."),
    PlantTrait("Carrot", 70, spring_offset=-14, start_method=OUTDOOR,
               succession=True, replant_delay=14),
)


def default_plants() -> tuple[PlantTrait, ...]:
    return DEFAULT_PLANTS


def default_trait(name: str) -> PlantTrait:
    """Placeholder trait for a plant the library hasn't seen before."""
    return PlantTrait(name=name, start_method=OUTDOOR)


def find_plant(plants, name: str) -> PlantTrait | None:
    """Return the trait called *name*, or ``None`` if there isn't one."""
    for trait in plants:
        if trait.name == name:
            return trait
    return None


def default_frost_dates(year: int | None = None) -> tuple[str, str]:
    """Spring and fall frost dates used until the user picks their own."""
    year = year or date.today().year
    spring = date(year, *DEFAULT_SPRING_FROST).isoformat()
    fall = date(year, *DEFAULT_FALL_FROST).isoformat()
    return spring, fall


def trait_fields(trait: PlantTrait) -> dict:
    """Snake-case field dict, handy for ``dataclasses.replace``."""
    return asdict(trait)
