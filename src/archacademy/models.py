"""Core domain models for buildings, lessons and sketching geometry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar


class Science(StrEnum):
    """Topic tags attached to lessons, quiz questions and notebook entries."""

    MATHEMATICS = "Mathematics"
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    GEOMETRY = "Geometry"
    ENGINEERING = "Engineering"
    ASTRONOMY = "Astronomy"
    BIOLOGY = "Biology"
    GEOLOGY = "Geology"
    OPTICS = "Optics"
    HYDRAULICS = "Hydraulics"
    ACOUSTICS = "Acoustics"
    MATERIALS = "Materials Science"
    ARCHITECTURE = "Architecture"


class Era(StrEnum):
    """Historical era of a building."""

    ANCIENT_ROME = "Ancient Rome"
    RENAISSANCE = "Renaissance"


class SectionKind(StrEnum):
    """Discriminator written next to every encoded lesson section."""

    READING = "reading"
    FUN_FACT = "fun_fact"
    QUESTION = "question"
    FILL_IN_BLANKS = "fill_in_blanks"
    ENVIRONMENT_PROMPT = "environment_prompt"
    CURIOSITY = "curiosity"
    MATH_VISUAL = "math_visual"


class LessonDestination(StrEnum):
    """Interactive environment an environment prompt sends the player to."""

    WORKSHOP = "workshop"
    FOREST = "forest"
    CRAFTING_ROOM = "crafting_room"


class MathVisualType(StrEnum):
    """Animated diagram shown by a math-visual section, two per building."""

    AQUEDUCT_GRADIENT = "aqueduct_gradient"
    AQUEDUCT_FLOW_RATE = "aqueduct_flow_rate"
    COLOSSEUM_ARCH_FORCE = "colosseum_arch_force"
    COLOSSEUM_SOUND_WAVE = "colosseum_sound_wave"
    BATHS_HEAT_TRANSFER = "baths_heat_transfer"
    BATHS_WATER_VOLUME = "baths_water_volume"
    PANTHEON_DOME_GEOMETRY = "pantheon_dome_geometry"
    PANTHEON_OCULUS_LIGHT = "pantheon_oculus_light"
    ROADS_LAYER_CROSS = "roads_layer_cross"
    ROADS_LOAD_DISTRIBUTION = "roads_load_distribution"
    HARBOR_BUOYANCY = "harbor_buoyancy"
    HARBOR_TIDAL_FORCE = "harbor_tidal_force"
    SIEGE_PROJECTILE = "siege_projectile"
    SIEGE_LEVER_ARM = "siege_lever_arm"
    INSULA_FLOOR_LOADING = "insula_floor_loading"
    INSULA_HEIGHT_RATIO = "insula_height_ratio"
    DUOMO_CURVATURE = "duomo_curvature"
    DUOMO_FORCE_RING = "duomo_force_ring"
    GARDEN_PHOTOSYNTHESIS = "garden_photosynthesis"
    GARDEN_GROWTH_RATE = "garden_growth_rate"
    GLASS_TEMPERATURE = "glass_temperature"
    GLASS_REFRACTION = "glass_refraction"
    ARSENAL_PULLEY_SYSTEM = "arsenal_pulley_system"
    ARSENAL_PRODUCTION_RATE = "arsenal_production_rate"
    ANATOMY_PROPORTION = "anatomy_proportion"
    ANATOMY_CIRCULATION = "anatomy_circulation"
    LEONARDO_GEAR_RATIO = "leonardo_gear_ratio"
    LEONARDO_GOLDEN_SPIRAL = "leonardo_golden_spiral"
    FLYING_LIFT_FORMULA = "flying_lift_formula"
    FLYING_WING_AREA = "flying_wing_area"
    OBSERVATORY_MAGNIFICATION = "observatory_magnification"
    OBSERVATORY_PARALLAX = "observatory_parallax"
    PRESS_FORCE_MULTIPLIER = "press_force_multiplier"
    PRESS_TYPE_SETTING = "press_type_setting"


@dataclass(frozen=True)
class Building:
    """A learnable building with a stable id."""

    id: int
    name: str
    era: Era
    sciences: list[Science]
    icon: str = ""
    aliases: list[str] = field(default_factory=list)

    def answers_to(self, name: str) -> bool:
        """Return whether `name` is this building's name or one of its aliases."""
        return name == self.name or name in self.aliases


@dataclass(frozen=True)
class LessonReading:
    """Reading page. The body supports **bold** markup."""

    kind: ClassVar[SectionKind] = SectionKind.READING

    body: str
    title: str | None = None
    science: Science | None = None
    illustration_icon: str | None = None
    caption: str | None = None


@dataclass(frozen=True)
class LessonFunFact:
    """Sticky-note fun fact."""

    kind: ClassVar[SectionKind] = SectionKind.FUN_FACT

    text: str


@dataclass(frozen=True)
class LessonQuestion:
    """Inline multiple-choice question with up to three progressive hints."""

    kind: ClassVar[SectionKind] = SectionKind.QUESTION

    question: str
    options: list[str]
    correct_index: int
    explanation: str
    science: Science
    hints: list[str] | None = None

    @property
    def correct_answer(self) -> str:
        """Text of the option at ``correct_index``."""
        return self.options[self.correct_index]


@dataclass(frozen=True)
class LessonFillInBlanks:
    """Passage whose `{{word}}` markers become blanks filled from a word bank."""

    kind: ClassVar[SectionKind] = SectionKind.FILL_IN_BLANKS

    text: str
    title: str | None = None
    distractors: list[str] = field(default_factory=list)
    science: Science | None = None


@dataclass(frozen=True)
class LessonEnvironmentPrompt:
    """Prompt to visit the workshop, forest or crafting room."""

    kind: ClassVar[SectionKind] = SectionKind.ENVIRONMENT_PROMPT

    destination: LessonDestination
    title: str
    description: str
    icon: str


@dataclass(frozen=True)
class CuriosityQA:
    """One question a curious student might ask, with its answer."""

    question: str
    answer: str


@dataclass(frozen=True)
class LessonCuriosity:
    """Ordered curiosity questions shown beside a reading page."""

    kind: ClassVar[SectionKind] = SectionKind.CURIOSITY

    questions: list[CuriosityQA]


@dataclass(frozen=True)
class LessonMathVisual:
    """Step-through animated diagram."""

    kind: ClassVar[SectionKind] = SectionKind.MATH_VISUAL

    type: MathVisualType
    title: str
    science: Science
    total_steps: int
    caption: str


LessonSection = (
    LessonReading
    | LessonFunFact
    | LessonQuestion
    | LessonFillInBlanks
    | LessonEnvironmentPrompt
    | LessonCuriosity
    | LessonMathVisual
)


@dataclass(frozen=True)
class Lesson:
    """A building's paged lesson. Section order is presentation order."""

    building_name: str
    title: str
    sections: list[LessonSection]


@dataclass(frozen=True)
class StationLesson:
    """Science-tagged content met at a resource station outside the lesson flow."""

    key: str
    label: str
    title: str
    text: str
    sciences: list[Science]


@dataclass(frozen=True)
class VocabularyTerm:
    """Curated key term for a building's notebook."""

    title: str
    body: str
    science: Science | None = None


class SketchingPhaseType(StrEnum):
    """The four historical drawing phases."""

    PIANTA = "Pianta"
    ALZATO = "Alzato"
    SEZIONE = "Sezione"
    PROSPETTIVA = "Prospettiva"


class RoomShape(StrEnum):
    """Outline a sketched room is drawn with."""

    RECTANGLE = "rectangle"
    CIRCLE = "circle"


@dataclass(frozen=True)
class ProportionalRatio:
    """A width:height ratio such as 3:2."""

    numerator: int
    denominator: int

    @property
    def display(self) -> str:
        """Ratio written as ``numerator:denominator``, e.g. ``2:1``."""
        return f"{self.numerator}:{self.denominator}"


@dataclass(frozen=True)
class RoomDefinition:
    """A room the player must draw on the floor plan grid."""

    label: str
    width: int
    height: int
    required_ratio: ProportionalRatio | None = None
    shape: RoomShape = RoomShape.RECTANGLE


@dataclass(frozen=True)
class SketchingPhase:
    """One drawing phase of a sketching challenge."""

    phase_type: SketchingPhaseType
    title: str
    introduction: str
    rooms: list[RoomDefinition]


@dataclass(frozen=True)
class SketchingChallenge:
    """Sketching challenge geometry for one building (1-4 phases)."""

    building_name: str
    introduction: str
    phases: list[SketchingPhase]
